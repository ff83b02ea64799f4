"""DB service layer for trade-related use cases.

- Routers should not touch DB sessions directly; they call this module.
- This layer owns session/transaction boundaries.
- Every check runs before the first write; a transition is persisted with a
  write conditioned on the status it was validated against.
"""

import logging
from datetime import datetime
from typing import List
from uuid import UUID

from src import load_secrets
from src.crud import CreateData, ReadData, UpdateData
from src.db import Session
from src.domain import trade_rules
from src.domain.errors import InvalidRequest, NotFound
from src.domain.fair_spin import is_positive_id
from src.domain.trade_rules import DEFAULT_MEETUP_LOCATION, TradeAction, TradeStatus
from src.models.schema_models import TradeRequestSchema
from src.services.spin import verify_spin_proof

TRADE_LIST_LIMIT = 50


def check_spin_proof(
    spin_proof: str | None, requester_item_id: int, recipient_item_id: int
) -> None:
    """Tie a trade to a server-issued spin when a proof is given (or required)."""
    if spin_proof is None:
        if load_secrets.require_spin_proof:
            raise InvalidRequest("spinProof is required.")
        return

    outcome = verify_spin_proof(spin_proof)
    if (
        outcome.requester_item_id != requester_item_id
        or outcome.winner_item_id != recipient_item_id
    ):
        logging.warning(
            f"Spin proof for items {outcome.requester_item_id}->{outcome.winner_item_id} "
            f"used for trade {requester_item_id}->{recipient_item_id}"
        )
        raise InvalidRequest("Spin proof does not match the selected items.")


async def create_trade(
    actor_id: UUID,
    requester_item_id: int,
    recipient_item_id: int,
    spin_proof: str | None = None,
) -> TradeRequestSchema:
    if not is_positive_id(requester_item_id) or not is_positive_id(recipient_item_id):
        raise InvalidRequest("Both requesterItemId and recipientItemId are required.")

    async with Session() as session:
        items = await ReadData.read_items_data([requester_item_id, recipient_item_id], session)
        requester_item = items.get(requester_item_id)
        recipient_item = items.get(recipient_item_id)
        trade_rules.validate_trade_creation(
            actor_id, requester_item_id, recipient_item_id, requester_item, recipient_item
        )
        check_spin_proof(spin_proof, requester_item_id, recipient_item_id)

        now = datetime.now()
        trade = TradeRequestSchema(
            requester_id=actor_id,
            recipient_id=recipient_item.owner_id,
            requester_item_id=requester_item_id,
            recipient_item_id=recipient_item_id,
            requester_approved=True,
            recipient_approved=False,
            status=TradeStatus.pending,
            meetup_location=DEFAULT_MEETUP_LOCATION,
            declined_by=None,
            created_at=now,
            updated_at=now,
        )
        trade_id = await CreateData.create_trade_data(trade, session)
        logging.info(f"trade {trade_id} created: item {requester_item_id} -> item {recipient_item_id}")
        return await ReadData.read_trade_data(trade_id, session)


async def read_trade(trade_id: int) -> TradeRequestSchema:
    if not is_positive_id(trade_id):
        raise InvalidRequest("Invalid trade id.")
    async with Session() as session:
        trade = await ReadData.read_trade_data(trade_id, session)
    if trade is None:
        raise NotFound("Trade not found.")
    return trade


async def read_trade_for_party(trade_id: int, actor_id: UUID) -> TradeRequestSchema:
    trade = await read_trade(trade_id)
    trade_rules.ensure_party(trade, actor_id)
    return trade


async def read_trades_for_user(user_id: UUID) -> List[TradeRequestSchema]:
    async with Session() as session:
        return await ReadData.read_trades_for_user(user_id, session, limit=TRADE_LIST_LIMIT)


async def apply_trade_action(
    trade_id: int, action: TradeAction, actor_id: UUID
) -> TradeRequestSchema:
    """Validate and persist one transition.

    Args:
        trade_id (int): Trade to act on
        action (TradeAction): accept, decline, cancel or complete
        actor_id (UUID): Authenticated caller

    Raises:
        InvalidRequest: Wrong state, including losing a race with the other party
        Forbidden: Caller is not allowed to take this action
        NotFound: Unknown trade

    Returns:
        TradeRequestSchema: The trade after the transition
    """
    action = TradeAction(action)
    if not is_positive_id(trade_id):
        raise InvalidRequest("Invalid trade id.")

    async with Session() as session:
        current = await ReadData.read_trade_data(trade_id, session)
        if current is None:
            raise NotFound("Trade not found.")

        updated = trade_rules.apply_action(current, action, actor_id, datetime.now())
        if updated is current:
            logging.info(f"trade {trade_id}: repeated {action.value} by {actor_id} ignored")
            return current

        written = await UpdateData.update_trade_if_status(updated, current.status, session)
        if not written:
            logging.warning(
                f"trade {trade_id}: {action.value} lost a concurrent update (expected {current.status.value})"
            )
            raise trade_rules.precondition_failed(action)

        logging.info(f"trade {trade_id}: {action.value} by {actor_id} -> {updated.status.value}")
        return await ReadData.read_trade_data(trade_id, session)
