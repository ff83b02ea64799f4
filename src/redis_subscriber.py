import logging
from typing import AsyncGenerator
from uuid import UUID

from redis.asyncio import Redis
from redis.exceptions import RedisError

from src.converter import DataConverter
from src.domain.trade_rules import TERMINAL_STATUSES
from src.models.schema_models import TradeRequestSchema
from src.services import trade_db

HEART_BEAT = 15

logging.basicConfig(level=logging.INFO)

data_converter = DataConverter()


def trade_channel(trade_id: int) -> str:
    return f"trade:{trade_id}"


async def publish_trade_event(redis: Redis, trade: TradeRequestSchema) -> None:
    """Notify subscribers that a trade changed. The change is already committed,
    so a Redis failure is only logged."""
    payload = data_converter.convert_tradeschema_to_tradesummary(trade).model_dump_json(by_alias=True)
    try:
        await redis.publish(trade_channel(trade.trade_id), payload)
    except RedisError as e:
        logging.warning(f"Failed to publish update for trade {trade.trade_id}: {e}")


class TradeEventSubscriber:
    """Redis subscriber class to stream trade changes to one of its parties as SSE."""

    def __init__(self, trade_id: int, actor_id: UUID):
        self.trade_id: int = trade_id
        self.actor_id: UUID = actor_id

    async def event_generator(self, channel: str, redis: Redis) -> AsyncGenerator[str, None]:
        """Event generator to handle SSE events.

        Sends the current trade first, then one event per published change,
        and stops once a terminal status has been sent.

        Args:
            channel (str): To receive messages from Redis, the channel name is trade:<trade_id>.
            redis (Redis): Redis connection object.
        """
        pubsub = redis.pubsub()
        # Subscribe before the snapshot so no change falls in between.
        await pubsub.subscribe(channel)
        try:
            trade = await trade_db.read_trade_for_party(self.trade_id, self.actor_id)
            yield data_converter.convert_tradeschema_to_event("trade_snapshot", trade).as_sse()
            if trade.status in TERMINAL_STATUSES:
                return

            while True:
                msg = await pubsub.get_message(
                    ignore_subscribe_messages=True, timeout=HEART_BEAT
                )
                if msg is None:
                    yield ": keep-alive\n\n"
                    continue
                if msg["type"] != "message":
                    continue

                trade = await trade_db.read_trade(self.trade_id)
                logging.debug(f"trade {self.trade_id} update: {trade.status.value}")
                yield data_converter.convert_tradeschema_to_event("trade_update", trade).as_sse()
                if trade.status in TERMINAL_STATUSES:
                    return
        finally:
            logging.info(f"Unsubscribing from channel {channel}")
            await pubsub.unsubscribe(channel)
            await pubsub.aclose()
