"""Transition tables for events and registration payments.

Any transition not listed here is rejected with ``InvalidStateError`` before it reaches the store.
"""

from events.exceptions import InvalidStateError
from events.models import Event, Registration

EventStatus = Event.Status
PaymentStatus = Registration.PaymentStatus

EVENT_TRANSITIONS: dict[str, frozenset[str]] = {
    EventStatus.DRAFT: frozenset({EventStatus.PUBLISHED}),
    EventStatus.PUBLISHED: frozenset({EventStatus.ONGOING, EventStatus.CLOSED, EventStatus.COMPLETED}),
    EventStatus.ONGOING: frozenset({EventStatus.CLOSED, EventStatus.COMPLETED}),
    EventStatus.CLOSED: frozenset({EventStatus.COMPLETED}),
    EventStatus.COMPLETED: frozenset(),
}

PAYMENT_TRANSITIONS: dict[str, frozenset[str]] = {
    PaymentStatus.FREE: frozenset(),
    PaymentStatus.PENDING_APPROVAL: frozenset({PaymentStatus.PAID, PaymentStatus.REJECTED}),
    PaymentStatus.REJECTED: frozenset({PaymentStatus.PENDING_APPROVAL}),
    PaymentStatus.PAID: frozenset(),
}

# Payment states a registration may be created in.
INITIAL_PAYMENT_STATUSES = frozenset({PaymentStatus.FREE, PaymentStatus.PENDING_APPROVAL})


def can_transition_event(from_status: str, to_status: str) -> bool:
    return to_status in EVENT_TRANSITIONS.get(from_status, frozenset())


def can_transition_payment(from_status: str, to_status: str) -> bool:
    return to_status in PAYMENT_TRANSITIONS.get(from_status, frozenset())


def ensure_event_transition(from_status: str, to_status: str) -> None:
    """Raise unless the event transition is in the table."""
    if not can_transition_event(from_status, to_status):
        raise InvalidStateError(
            f"Event cannot move from {from_status} to {to_status}.", from_status=from_status, to_status=to_status
        )


def ensure_payment_transition(from_status: str, to_status: str) -> None:
    """Raise unless the payment transition is in the table."""
    if not can_transition_payment(from_status, to_status):
        raise InvalidStateError(
            f"Payment cannot move from {from_status} to {to_status}.", from_status=from_status, to_status=to_status
        )
