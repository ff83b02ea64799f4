from src.domain.fair_spin import SpinResult
from src.domain.spin_proof import SpinOutcome
from src.domain.trade_rules import DEFAULT_MEETUP_LOCATION
from src.domain.value_tier import tier_of
from src.models.dc_models import (
    ItemSummaryModel,
    SpinOutcomeModel,
    SpinResponseModel,
    TradeEventModel,
    TradeSummaryModel,
)
from src.models.schema_models import ItemSchema, TradeRequestSchema


class DataConverter:
    """This class is used to convert data between different formats."""

    def convert_itemschema_to_itemsummary(self, item: ItemSchema | None) -> ItemSummaryModel | None:
        if item is None:
            return None
        return ItemSummaryModel(
            item_id=item.item_id,
            owner_id=item.owner_id,
            name=item.name,
            value=item.value,
            tier=tier_of(item.value),
        )

    def convert_tradeschema_to_tradesummary(self, trade: TradeRequestSchema) -> TradeSummaryModel:
        """Convert the TradeRequestSchema to the TradeSummaryModel to send client

        Args:
            trade (TradeRequestSchema): Trade as read from the database

        Returns:
            TradeSummaryModel: The trade with both items and their tiers, for transmission to the client
        """
        return TradeSummaryModel(
            trade_id=trade.trade_id,
            requester_id=trade.requester_id,
            recipient_id=trade.recipient_id,
            requester_item_id=trade.requester_item_id,
            recipient_item_id=trade.recipient_item_id,
            requester_approved=trade.requester_approved,
            recipient_approved=trade.recipient_approved,
            status=trade.status,
            meetup_location=trade.meetup_location or DEFAULT_MEETUP_LOCATION,
            declined_by=trade.declined_by,
            created_at=trade.created_at,
            updated_at=trade.updated_at,
            requester_item=self.convert_itemschema_to_itemsummary(trade.requester_item),
            recipient_item=self.convert_itemschema_to_itemsummary(trade.recipient_item),
        )

    def convert_tradeschema_to_json(self, trade: TradeRequestSchema) -> dict:
        return self.convert_tradeschema_to_tradesummary(trade).model_dump(mode="json", by_alias=True)

    def convert_tradeschema_to_event(self, event: str, trade: TradeRequestSchema) -> TradeEventModel:
        return TradeEventModel(event=event, trade=self.convert_tradeschema_to_tradesummary(trade))

    def convert_spinresult_to_response(self, result: SpinResult) -> SpinResponseModel:
        return SpinResponseModel(
            winner_item_id=result.winner_item_id,
            winner_index=result.winner_index,
            target_angle=result.target_angle,
            extra_turns=result.extra_turns,
            duration_ms=result.duration_ms,
            spin_proof=result.proof,
        )

    def convert_spinoutcome_to_model(self, outcome: SpinOutcome) -> SpinOutcomeModel:
        return SpinOutcomeModel(
            requester_item_id=outcome.requester_item_id,
            winner_item_id=outcome.winner_item_id,
            candidate_item_ids=list(outcome.candidate_item_ids),
            issued_at=outcome.issued_at,
            expires_at=outcome.expires_at,
        )
