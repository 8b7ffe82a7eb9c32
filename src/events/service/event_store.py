"""Event record store.

Every write here is a single conditional ``UPDATE``: the guard is part of the ``WHERE`` clause
and the number of affected rows decides success. Nothing in this module reads a counter and then
writes it back.
"""

import typing as t
from decimal import Decimal
from uuid import UUID

import structlog
from django.db.models import F, Q
from django.utils import timezone

from events.exceptions import (
    EventNotFoundError,
    InsufficientStockError,
    InvalidStateError,
    ItemNotFoundError,
    RegistrationLimitReachedError,
    ValidationFailedError,
)
from events.fsm import ensure_event_transition
from events.models import Event, MerchandiseItem

logger = structlog.get_logger(__name__)


def get_event(event_id: UUID) -> Event:
    """Return the current snapshot of an event."""
    try:
        return Event.objects.with_organizer().get(pk=event_id)
    except Event.DoesNotExist as e:
        raise EventNotFoundError(event_id=str(event_id)) from e


def get_item(event_id: UUID, item_id: UUID) -> MerchandiseItem:
    """Return the current snapshot of an item of an event."""
    try:
        return MerchandiseItem.objects.get(pk=item_id, event_id=event_id)
    except MerchandiseItem.DoesNotExist as e:
        raise ItemNotFoundError(item_id=str(item_id)) from e


def conditional_decrement_stock(event_id: UUID, item_id: UUID, quantity: int) -> int:
    """Take ``quantity`` units from an item only if that many are in stock.

    Returns:
        The stock observed right after the decrement.

    Raises:
        InsufficientStockError: nothing was changed because stock was below ``quantity``.
        ItemNotFoundError: the item does not belong to the event.
    """
    if quantity < 1:
        raise ValidationFailedError("Quantity must be at least 1.", errors={"quantity": ["Must be at least 1."]})
    updated = MerchandiseItem.objects.filter(
        pk=item_id, event_id=event_id, stock_quantity__gte=quantity
    ).update(stock_quantity=F("stock_quantity") - quantity, updated_at=timezone.now())
    if not updated:
        item = get_item(event_id, item_id)
        logger.info(
            "stock_decrement_rejected", item_id=str(item_id), requested=quantity, available=item.stock_quantity
        )
        raise InsufficientStockError(
            f"Only {item.stock_quantity} left in stock.", item_id=str(item_id), available=item.stock_quantity
        )
    return t.cast(int, MerchandiseItem.objects.values_list("stock_quantity", flat=True).get(pk=item_id))


def increment_stock(event_id: UUID, item_id: UUID, quantity: int) -> int:
    """Give back ``quantity`` units previously taken by a committed order."""
    updated = MerchandiseItem.objects.filter(pk=item_id, event_id=event_id).update(
        stock_quantity=F("stock_quantity") + quantity, updated_at=timezone.now()
    )
    if not updated:
        raise ItemNotFoundError(item_id=str(item_id))
    return t.cast(int, MerchandiseItem.objects.values_list("stock_quantity", flat=True).get(pk=item_id))


def claim_registration_slot(event_id: UUID, open_statuses: t.Iterable[str] | None = None) -> None:
    """Increment the registration count while it is still below the limit.

    This is the authoritative capacity guard. When ``open_statuses`` is given, the slot is only
    claimed while the event is still in one of them, so a concurrent ``close()`` cannot be raced.
    """
    qs = Event.objects.filter(pk=event_id).filter(
        Q(registration_limit__isnull=True) | Q(registration_count__lt=F("registration_limit"))
    )
    if open_statuses is not None:
        qs = qs.filter(status__in=list(open_statuses))
    if qs.update(registration_count=F("registration_count") + 1, updated_at=timezone.now()):
        return
    event = get_event(event_id)
    if open_statuses is not None and event.status not in open_statuses:
        raise InvalidStateError("Registrations are not open for this event.", status=event.status)
    raise RegistrationLimitReachedError(limit=event.registration_limit)


def release_registration_slot(event_id: UUID) -> bool:
    """Give a slot back. The count never drops below zero."""
    released = bool(
        Event.objects.filter(pk=event_id, registration_count__gt=0).update(
            registration_count=F("registration_count") - 1, updated_at=timezone.now()
        )
    )
    if not released:
        logger.warning("registration_slot_release_skipped", event_id=str(event_id))
    return released


def adjust_revenue(event_id: UUID, delta: Decimal) -> None:
    """Atomically add ``delta`` (possibly negative) to the event revenue."""
    if not delta:
        return
    updated = Event.objects.filter(pk=event_id).update(
        total_revenue=F("total_revenue") + delta, updated_at=timezone.now()
    )
    if not updated:
        raise EventNotFoundError(event_id=str(event_id))


def transition_status(
    event_id: UUID, from_status: str, to_status: str, guards: dict[str, t.Any] | None = None
) -> bool:
    """Move an event from ``from_status`` to ``to_status`` if it is still in ``from_status``.

    ``guards`` adds further field equalities the row must still satisfy.

    Returns:
        Whether this call performed the transition.

    Raises:
        InvalidStateError: the pair is not in the event transition table.
    """
    ensure_event_transition(from_status, to_status)
    qs = Event.objects.filter(pk=event_id, status=from_status)
    if guards:
        qs = qs.filter(**guards)
    applied = bool(qs.update(status=to_status, updated_at=timezone.now()))
    logger.info(
        "event_transition",
        event_id=str(event_id),
        from_status=from_status,
        to_status=to_status,
        applied=applied,
    )
    return applied


def lock_form(event_id: UUID) -> bool:
    """Lock the custom form. Only the call that flips the flag gets True."""
    return bool(
        Event.objects.filter(pk=event_id, form_locked=False).update(form_locked=True, updated_at=timezone.now())
    )


def apply_edits(
    event_id: UUID,
    expected_status: str,
    changes: dict[str, t.Any],
    guards: dict[str, t.Any] | None = None,
) -> bool:
    """Write ``changes`` only while the event is in ``expected_status`` and matches ``guards``."""
    qs = Event.objects.filter(pk=event_id, status=expected_status)
    if guards:
        qs = qs.filter(**guards)
    return bool(qs.update(**changes, updated_at=timezone.now()))
