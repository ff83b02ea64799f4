from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, StrictInt
from pydantic.alias_generators import to_camel

from src.domain.trade_rules import TradeAction, TradeStatus


class CamelModel(BaseModel):
    """Models exchanged with the client use camelCase keys on the wire."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class SpinRequestModel(CamelModel):
    # item ids are exact JSON integers; true, "7" and 3.0 are rejected
    requester_item_id: StrictInt
    candidate_item_ids: List[StrictInt]


class SpinResponseModel(CamelModel):
    ok: bool = True
    winner_item_id: int
    winner_index: int
    target_angle: float
    extra_turns: int
    duration_ms: int
    spin_proof: Optional[str] = None


class SpinProofModel(CamelModel):
    spin_proof: str


class SpinOutcomeModel(CamelModel):
    requester_item_id: int
    winner_item_id: int
    candidate_item_ids: List[int]
    issued_at: int
    expires_at: int


class ValueTierModel(BaseModel):
    label: str
    min: float
    max: float | None


class ValueTierListModel(BaseModel):
    ok: bool = True
    tiers: List[ValueTierModel]


class TradeCreateModel(CamelModel):
    requester_item_id: StrictInt
    recipient_item_id: StrictInt
    spin_proof: Optional[str] = None


class TradeActionModel(CamelModel):
    action: TradeAction


class ItemSummaryModel(CamelModel):
    item_id: int
    owner_id: UUID
    name: str | None
    value: float
    tier: str


class TradeSummaryModel(CamelModel):
    trade_id: int
    requester_id: UUID
    recipient_id: UUID
    requester_item_id: int
    recipient_item_id: int
    requester_approved: bool
    recipient_approved: bool
    status: TradeStatus
    meetup_location: str
    declined_by: UUID | None
    created_at: datetime
    updated_at: datetime
    requester_item: Optional[ItemSummaryModel] = None
    recipient_item: Optional[ItemSummaryModel] = None


class TradeEventModel(CamelModel):
    event: str
    trade: TradeSummaryModel

    def as_sse(self) -> str:
        return f"event: {self.event}\ndata: {self.trade.model_dump_json(by_alias=True)}\n\n"

