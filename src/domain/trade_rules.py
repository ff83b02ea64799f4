"""Trade request lifecycle rules that are independent from HTTP and DB.

pending --accept(both parties)--> accepted --complete--> completed
pending --decline--> declined
pending --cancel(requester)--> cancelled

declined, cancelled and completed are terminal. Every transition takes the
current record and the acting user and returns the next record, or raises.
Persisting the result (conditionally on the prior status) is the caller's job.
"""

from datetime import datetime
from enum import Enum
from uuid import UUID

from src.domain.errors import Forbidden, InvalidRequest
from src.domain.value_tier import same_tier

DEFAULT_MEETUP_LOCATION = "Central PD"


class TradeStatus(str, Enum):
    pending = "pending"
    accepted = "accepted"
    declined = "declined"
    cancelled = "cancelled"
    completed = "completed"


class TradeAction(str, Enum):
    accept = "accept"
    decline = "decline"
    cancel = "cancel"
    complete = "complete"


TERMINAL_STATUSES = frozenset(
    {TradeStatus.declined, TradeStatus.cancelled, TradeStatus.completed}
)

# Status a trade must be in for the action to apply.
REQUIRED_STATUS = {
    TradeAction.accept: TradeStatus.pending,
    TradeAction.decline: TradeStatus.pending,
    TradeAction.cancel: TradeStatus.pending,
    TradeAction.complete: TradeStatus.accepted,
}

PRECONDITION_MESSAGES = {
    TradeAction.accept: "Only pending trades can be accepted.",
    TradeAction.decline: "Only pending trades can be declined.",
    TradeAction.cancel: "Only pending trades can be cancelled.",
    TradeAction.complete: "Only accepted trades can be completed.",
}


def precondition_failed(action: TradeAction) -> InvalidRequest:
    return InvalidRequest(PRECONDITION_MESSAGES[action])


def validate_trade_creation(
    actor_id: UUID,
    requester_item_id: int,
    recipient_item_id: int,
    requester_item,
    recipient_item,
) -> None:
    """Check that the actor may open a trade for these two items.

    Items are anything with ``owner_id`` and ``value``; None means the item
    could not be resolved.

    Raises:
        InvalidRequest: Same item twice, unknown item or tier mismatch
        Forbidden: Actor does not own the staked item or owns the target item
    """
    if requester_item_id == recipient_item_id:
        raise InvalidRequest("You must select two different items.")
    if requester_item is None or recipient_item is None:
        raise InvalidRequest("One or both items do not exist.")
    if requester_item.owner_id != actor_id:
        raise Forbidden("You can only gamble with your own selected item.")
    if recipient_item.owner_id == actor_id:
        raise Forbidden("You must land on another user's item.")
    if not same_tier(requester_item.value, recipient_item.value):
        raise InvalidRequest("Items must be in the same value bracket.")


def _is_requester(trade, actor_id: UUID) -> bool:
    return trade.requester_id == actor_id


def _is_recipient(trade, actor_id: UUID) -> bool:
    return trade.recipient_id == actor_id


def ensure_party(trade, actor_id: UUID) -> None:
    if not (_is_requester(trade, actor_id) or _is_recipient(trade, actor_id)):
        raise Forbidden("Forbidden.")


def _require_status(trade, action: TradeAction) -> None:
    if trade.status != REQUIRED_STATUS[action]:
        raise precondition_failed(action)


def accept(trade, actor_id: UUID, now: datetime):
    ensure_party(trade, actor_id)
    _require_status(trade, TradeAction.accept)

    requester_approved = True if _is_requester(trade, actor_id) else trade.requester_approved
    recipient_approved = True if _is_recipient(trade, actor_id) else trade.recipient_approved
    if (
        requester_approved == trade.requester_approved
        and recipient_approved == trade.recipient_approved
    ):
        # repeated accept from a party that already approved
        return trade

    status = (
        TradeStatus.accepted
        if requester_approved and recipient_approved
        else TradeStatus.pending
    )
    return trade.model_copy(
        update={
            "requester_approved": requester_approved,
            "recipient_approved": recipient_approved,
            "status": status,
            "updated_at": now,
        }
    )


def decline(trade, actor_id: UUID, now: datetime):
    ensure_party(trade, actor_id)
    _require_status(trade, TradeAction.decline)
    return trade.model_copy(
        update={"status": TradeStatus.declined, "declined_by": actor_id, "updated_at": now}
    )


def cancel(trade, actor_id: UUID, now: datetime):
    ensure_party(trade, actor_id)
    if not _is_requester(trade, actor_id):
        raise Forbidden("Only the trade requester can cancel.")
    _require_status(trade, TradeAction.cancel)
    return trade.model_copy(update={"status": TradeStatus.cancelled, "updated_at": now})


def complete(trade, actor_id: UUID, now: datetime):
    ensure_party(trade, actor_id)
    _require_status(trade, TradeAction.complete)
    return trade.model_copy(update={"status": TradeStatus.completed, "updated_at": now})


TRANSITIONS = {
    TradeAction.accept: accept,
    TradeAction.decline: decline,
    TradeAction.cancel: cancel,
    TradeAction.complete: complete,
}


def apply_action(trade, action: TradeAction, actor_id: UUID, now: datetime):
    """Run one transition and return the next record (the same object for a no-op)."""
    return TRANSITIONS[TradeAction(action)](trade, actor_id, now)
