import asyncio
import json

import pytest

from src.domain.trade_rules import TradeAction
from src.redis_subscriber import TradeEventSubscriber, publish_trade_event, trade_channel
from src.services import trade_db


class FakePubSub:
    """Serves queued messages; a callable in the queue runs before the next poll."""

    def __init__(self, queue):
        self.queue = list(queue)
        self.subscribed = []
        self.unsubscribed = []
        self.closed = False

    async def subscribe(self, channel):
        self.subscribed.append(channel)

    async def unsubscribe(self, channel):
        self.unsubscribed.append(channel)

    async def get_message(self, ignore_subscribe_messages=False, timeout=None):
        item = self.queue.pop(0)
        if callable(item):
            item = await item()
        return item

    async def aclose(self):
        self.closed = True


class FakeRedis:
    def __init__(self, queue=()):
        self.pubsub_instance = FakePubSub(queue)
        self.published = []

    def pubsub(self):
        return self.pubsub_instance

    async def publish(self, channel, message):
        self.published.append((channel, message))


def parse_event(chunk):
    event_line, data_line = chunk.strip().split("\n")
    assert event_line.startswith("event: ")
    assert data_line.startswith("data: ")
    return event_line[len("event: "):], json.loads(data_line[len("data: "):])


async def collect(generator):
    return [chunk async for chunk in generator]


@pytest.fixture
def trade(alice, bob, make_item):
    make_item(1, alice, 40)
    make_item(2, bob, 45)
    return asyncio.run(trade_db.create_trade(alice.user_id, 1, 2))


class TestTradeEventSubscriber:
    @pytest.mark.asyncio
    async def test_terminal_snapshot_ends_stream(self, trade, alice):
        await trade_db.apply_trade_action(trade.trade_id, TradeAction.cancel, alice.user_id)
        redis = FakeRedis()
        channel = trade_channel(trade.trade_id)

        chunks = await collect(TradeEventSubscriber(trade.trade_id, alice.user_id).event_generator(channel, redis))

        assert len(chunks) == 1
        event, data = parse_event(chunks[0])
        assert event == "trade_snapshot"
        assert data["status"] == "cancelled"
        assert redis.pubsub_instance.subscribed == [channel]
        assert redis.pubsub_instance.unsubscribed == [channel]
        assert redis.pubsub_instance.closed

    @pytest.mark.asyncio
    async def test_streams_updates_until_terminal(self, trade, alice, bob):
        async def accept():
            await trade_db.apply_trade_action(trade.trade_id, TradeAction.accept, bob.user_id)
            return {"type": "message", "data": "{}"}

        async def complete():
            await trade_db.apply_trade_action(trade.trade_id, TradeAction.complete, alice.user_id)
            return {"type": "message", "data": "{}"}

        redis = FakeRedis([None, accept, complete])
        channel = trade_channel(trade.trade_id)

        chunks = await collect(TradeEventSubscriber(trade.trade_id, bob.user_id).event_generator(channel, redis))

        assert chunks[1] == ": keep-alive\n\n"
        events = [parse_event(chunk) for chunk in chunks if not chunk.startswith(":")]
        assert [(event, data["status"]) for event, data in events] == [
            ("trade_snapshot", "pending"),
            ("trade_update", "accepted"),
            ("trade_update", "completed"),
        ]
        assert events[0][1]["requesterItem"]["tier"] == "25-50 coins"
        assert redis.pubsub_instance.closed


class TestPublishTradeEvent:
    @pytest.mark.asyncio
    async def test_publishes_summary_on_trade_channel(self, trade):
        redis = FakeRedis()
        await publish_trade_event(redis, trade)
        channel, message = redis.published[0]
        assert channel == f"trade:{trade.trade_id}"
        payload = json.loads(message)
        assert payload["tradeId"] == trade.trade_id
        assert payload["status"] == "pending"
