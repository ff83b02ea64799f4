import logging
from typing import Dict, Iterable, List
from uuid import UUID

from sqlalchemy import desc, or_, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import joinedload

from src.domain.trade_rules import TradeStatus
from src.models.schema_models import ItemSchema, TradeRequestSchema
from src.models.schemas import Item, TradeRequest

# Columns a transition is allowed to change.
MUTABLE_TRADE_FIELDS = (
    "requester_approved",
    "recipient_approved",
    "status",
    "declined_by",
    "updated_at",
)


class UpdateData:
    @staticmethod
    async def update_trade_if_status(
        trade: TradeRequestSchema,
        expected_status: TradeStatus,
        session: AsyncSession,
    ) -> bool:
        """Write the mutable fields of a trade only if its stored status still matches

        Args:
            trade (TradeRequestSchema): Trade carrying the new field values
            expected_status (TradeStatus): Status the row must still have
            session (AsyncSession): Session to run the update on

        Returns:
            bool: False when another actor changed the status first
        """
        values = {field: getattr(trade, field) for field in MUTABLE_TRADE_FIELDS}
        values["status"] = TradeStatus(values["status"]).value
        try:
            stmt = (
                update(TradeRequest)
                .where(
                    TradeRequest.trade_id == trade.trade_id,
                    TradeRequest.status == TradeStatus(expected_status).value,
                )
                .values(**values)
            )
            result = await session.execute(stmt)
            await session.commit()
        except SQLAlchemyError as e:
            await session.rollback()
            logging.error(f"Failed to update trade data: {e}")
            raise
        return result.rowcount == 1


class ReadData:
    @staticmethod
    async def read_items_data(item_ids: Iterable[int], session: AsyncSession) -> Dict[int, ItemSchema]:
        """Read several items at once

        Args:
            item_ids (Iterable[int]): Items to resolve

        Returns:
            Dict[int, ItemSchema]: Resolved items by id; unknown ids are absent
        """
        item_ids = list(set(item_ids))
        if not item_ids:
            return {}
        stmt = select(Item).where(Item.item_id.in_(item_ids))
        result = await session.execute(stmt)
        return {
            item.item_id: ItemSchema.model_validate(item)
            for item in result.scalars().all()
        }

    @staticmethod
    async def read_trade_data(trade_id: int, session: AsyncSession) -> TradeRequestSchema | None:
        """Read a trade request together with both of its items

        Args:
            trade_id (int): To identify the trade

        Returns:
            TradeRequestSchema: Trade data, None if the trade does not exist
        """
        stmt = (
            select(TradeRequest)
            .where(TradeRequest.trade_id == trade_id)
            .options(
                joinedload(TradeRequest.requester_item),
                joinedload(TradeRequest.recipient_item),
            )
            .execution_options(populate_existing=True)
        )
        result = await session.execute(stmt)
        result = result.scalars().first()
        if result is None:
            return None
        return TradeRequestSchema.model_validate(result)

    @staticmethod
    async def read_trades_for_user(
        user_id: UUID, session: AsyncSession, limit: int = 50
    ) -> List[TradeRequestSchema]:
        """Read the latest trades where the user is either party

        Args:
            user_id (UUID): Requester or recipient
            limit (int, optional): Maximum number of trades. Defaults to 50.

        Returns:
            List[TradeRequestSchema]: Newest first
        """
        stmt = (
            select(TradeRequest)
            .where(
                or_(
                    TradeRequest.requester_id == user_id,
                    TradeRequest.recipient_id == user_id,
                )
            )
            .options(
                joinedload(TradeRequest.requester_item),
                joinedload(TradeRequest.recipient_item),
            )
            .order_by(desc(TradeRequest.created_at), desc(TradeRequest.trade_id))
            .limit(limit)
        )
        result = await session.execute(stmt)
        return [TradeRequestSchema.model_validate(row) for row in result.scalars().all()]


class CreateData:
    @staticmethod
    async def create_item_data(item: ItemSchema, session: AsyncSession) -> ItemSchema:
        """Store an item row. Items are owned by the listing service; this
        exists for seeding and tests.

        Args:
            item (ItemSchema): Item to store
        """
        try:
            new_item = Item(
                item_id=item.item_id,
                owner_id=item.owner_id,
                name=item.name or "",
                value=item.value,
            )
            session.add(new_item)
            await session.commit()
        except SQLAlchemyError as e:
            await session.rollback()
            logging.error(f"Failed to create item data: {e}")
            raise
        return ItemSchema.model_validate(new_item)

    @staticmethod
    async def create_trade_data(trade: TradeRequestSchema, session: AsyncSession) -> int:
        """Insert a new trade request

        Args:
            trade (TradeRequestSchema): Trade without trade_id

        Returns:
            int: trade_id assigned by the database
        """
        try:
            new_trade = TradeRequest(
                requester_id=trade.requester_id,
                recipient_id=trade.recipient_id,
                requester_item_id=trade.requester_item_id,
                recipient_item_id=trade.recipient_item_id,
                requester_approved=trade.requester_approved,
                recipient_approved=trade.recipient_approved,
                status=TradeStatus(trade.status).value,
                meetup_location=trade.meetup_location,
                declined_by=trade.declined_by,
                created_at=trade.created_at,
                updated_at=trade.updated_at,
            )
            session.add(new_trade)
            await session.commit()
        except SQLAlchemyError as e:
            await session.rollback()
            logging.error(f"Failed to create trade data: {e}")
            raise
        return new_trade.trade_id
