import logging

from fastapi import APIRouter, Depends
from fastapi.responses import StreamingResponse
from redis.asyncio import Redis

from src.authentication.basic_authentication import BasicAuthentication
from src.converter import DataConverter
from src.load_secrets import redis_host, redis_port
from src.models.basic_authentication_models import UserModel
from src.models.dc_models import TradeActionModel, TradeCreateModel
from src.redis_subscriber import TradeEventSubscriber, publish_trade_event, trade_channel
from src.services import trade_db

redis = Redis(host=redis_host, port=redis_port, decode_responses=True, health_check_interval=30)

logging.basicConfig(level=logging.INFO)

trade_router = APIRouter(prefix="/trades")
basic_auth = BasicAuthentication()
data_converter = DataConverter()


class TradeAPI:
    @staticmethod
    @trade_router.get("")
    async def list_trades(user_data: UserModel = Depends(basic_auth.check_user_data)):
        trades = await trade_db.read_trades_for_user(user_data.user_id)
        return {
            "ok": True,
            "currentUserId": str(user_data.user_id),
            "trades": [data_converter.convert_tradeschema_to_json(trade) for trade in trades],
        }

    @staticmethod
    @trade_router.post("", status_code=201)
    async def create_trade(
        trade_request: TradeCreateModel,
        user_data: UserModel = Depends(basic_auth.check_user_data),
    ):
        """Open a trade request for the staked item and the item the spin landed on

        Args:
            trade_request (TradeCreateModel):
                    requesterItemId: item owned by the caller
                    recipientItemId: item owned by someone else, in the same value tier
                    spinProof: optional proof returned by /pool/spin
            user_data (UserModel): The user data for authentication
        """
        trade = await trade_db.create_trade(
            user_data.user_id,
            trade_request.requester_item_id,
            trade_request.recipient_item_id,
            trade_request.spin_proof,
        )
        await publish_trade_event(redis, trade)
        return {
            "ok": True,
            "trade": data_converter.convert_tradeschema_to_json(trade),
            "message": "Trade request created. Waiting for the other user to agree.",
        }

    @staticmethod
    @trade_router.patch("/{trade_id}")
    async def update_trade(
        trade_id: int,
        trade_action: TradeActionModel,
        user_data: UserModel = Depends(basic_auth.check_user_data),
    ):
        """Apply accept, decline, cancel or complete on behalf of one of the parties

        Args:
            trade_id (int): To identify the trade
            trade_action (TradeActionModel): The action to take
            user_data (UserModel): The user data for authentication
        """
        trade = await trade_db.apply_trade_action(trade_id, trade_action.action, user_data.user_id)
        await publish_trade_event(redis, trade)
        return {"ok": True, "trade": data_converter.convert_tradeschema_to_json(trade)}

    @staticmethod
    @trade_router.get("/{trade_id}/stream")
    async def stream_trade(
        trade_id: int, user_data: UserModel = Depends(basic_auth.check_user_data)
    ):
        # fail with 403/404 before the stream starts
        await trade_db.read_trade_for_party(trade_id, user_data.user_id)
        subscriber = TradeEventSubscriber(trade_id, user_data.user_id)

        return StreamingResponse(
            subscriber.event_generator(trade_channel(trade_id), redis),
            media_type="text/event-stream; charset=utf-8",
            headers={"Cache-Control": "no-cache", "Connection": "keep-alive"},
        )
