from datetime import datetime

from sqlalchemy.orm import DeclarativeBase, relationship
from sqlalchemy.schema import Column, ForeignKey
from sqlalchemy.types import Boolean, DateTime, Float, Integer, String, Uuid

from src.domain.trade_rules import DEFAULT_MEETUP_LOCATION, TradeStatus


class Base(DeclarativeBase):
    pass


class Item(Base):
    __tablename__ = "items"
    item_id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    owner_id = Column(Uuid, index=True, nullable=False)
    name = Column(String, default="")
    value = Column(Float, nullable=False)


class TradeRequest(Base):
    __tablename__ = "trade_requests"
    trade_id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    requester_id = Column(Uuid, index=True, nullable=False)
    recipient_id = Column(Uuid, index=True, nullable=False)
    requester_item_id = Column(Integer, ForeignKey("items.item_id"), nullable=False)
    recipient_item_id = Column(Integer, ForeignKey("items.item_id"), nullable=False)
    requester_approved = Column(Boolean, nullable=False, default=True)
    recipient_approved = Column(Boolean, nullable=False, default=False)
    status = Column(String, nullable=False, default=TradeStatus.pending.value)
    meetup_location = Column(String, default=DEFAULT_MEETUP_LOCATION)
    declined_by = Column(Uuid, nullable=True)
    created_at = Column(DateTime, default=datetime.now)
    updated_at = Column(DateTime, default=datetime.now)

    requester_item = relationship(
        "Item",
        primaryjoin="foreign(TradeRequest.requester_item_id) == Item.item_id",
        uselist=False,
        viewonly=True,
    )
    recipient_item = relationship(
        "Item",
        primaryjoin="foreign(TradeRequest.recipient_item_id) == Item.item_id",
        uselist=False,
        viewonly=True,
    )
