from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel

from src.domain.trade_rules import TradeStatus


class ItemSchema(BaseModel):
    item_id: int
    owner_id: UUID
    name: str | None = None
    value: float

    class Config:
        from_attributes = True


class TradeRequestSchema(BaseModel):
    trade_id: int | None = None
    requester_id: UUID
    recipient_id: UUID
    requester_item_id: int
    recipient_item_id: int
    requester_approved: bool
    recipient_approved: bool
    status: TradeStatus
    meetup_location: str | None
    declined_by: UUID | None = None
    created_at: datetime
    updated_at: datetime
    requester_item: Optional[ItemSchema] = None
    recipient_item: Optional[ItemSchema] = None

    class Config:
        from_attributes = True
