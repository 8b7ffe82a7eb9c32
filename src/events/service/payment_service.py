"""Payment approval for paid registrations and merchandise orders."""

from uuid import UUID

import structlog
from django.db import transaction
from django.db.models import QuerySet

from accounts.models import FelicityUser
from events.exceptions import AlreadyTicketedError, InvalidStateError
from events.models import DomainEvent, Registration

from . import event_store, outbox, registration_store
from .lifecycle import get_owned_event

logger = structlog.get_logger(__name__)

PaymentStatus = Registration.PaymentStatus

APPROVABLE_STATUSES = (PaymentStatus.PENDING_APPROVAL, PaymentStatus.REJECTED)


def _reviewable(organizer: FelicityUser, registration_id: UUID) -> Registration:
    registration = registration_store.get_registration(registration_id)
    get_owned_event(organizer, registration.event_id)
    if registration.status != Registration.Status.ACTIVE:
        raise InvalidStateError("Only active registrations can be reviewed.", status=registration.status)
    return registration


def _ensure_approvable(registration: Registration) -> None:
    if registration.is_ticketed:
        raise AlreadyTicketedError(registration_id=str(registration.pk))
    if registration.payment_status not in APPROVABLE_STATUSES:
        raise InvalidStateError(
            f"A {registration.payment_status} payment cannot be approved.", payment_status=registration.payment_status
        )


def approve(organizer: FelicityUser, registration_id: UUID) -> Registration:
    """Approve a payment and issue the ticket.

    The ticket claim, the stock decrement for merchandise, the revenue update and the outbox
    entry commit together. The ticket is claimed first, so a concurrent approval of the same
    registration loses on the claim and never touches stock; if stock then runs out the whole
    approval rolls back.

    Raises:
        AlreadyTicketedError: the registration was already approved (possibly concurrently).
        InsufficientStockError: not enough stock left; the registration is unchanged.
    """
    registration = _reviewable(organizer, registration_id)
    _ensure_approvable(registration)

    with transaction.atomic():
        if registration.payment_status == PaymentStatus.REJECTED and not registration_store.transition_payment(
            registration.pk, PaymentStatus.REJECTED, PaymentStatus.PENDING_APPROVAL
        ):
            _ensure_approvable(registration_store.get_registration(registration.pk))
        approved = registration_store.issue_ticket(registration.pk, PaymentStatus.PENDING_APPROVAL, PaymentStatus.PAID)
        if approved.item_id is not None:
            event_store.conditional_decrement_stock(approved.event_id, approved.item_id, approved.quantity)
        event_store.adjust_revenue(approved.event_id, approved.amount_due)
        outbox.emit(DomainEvent.Kind.PAYMENT_APPROVED, registration_id=approved.pk, event_id=approved.event_id)

    logger.info(
        "payment_approved",
        registration_id=str(approved.pk),
        event_id=str(approved.event_id),
        amount=str(approved.amount_due),
    )
    return approved


@transaction.atomic
def reject(organizer: FelicityUser, registration_id: UUID) -> Registration:
    """Reject a pending payment. Inventory and revenue are untouched."""
    registration = _reviewable(organizer, registration_id)
    if registration.payment_status != PaymentStatus.PENDING_APPROVAL:
        if registration.is_ticketed:
            raise AlreadyTicketedError(registration_id=str(registration.pk))
        raise InvalidStateError(
            "Only pending payments can be rejected.", payment_status=registration.payment_status
        )
    if not registration_store.transition_payment(
        registration.pk, PaymentStatus.PENDING_APPROVAL, PaymentStatus.REJECTED
    ):
        raise InvalidStateError("The payment changed while it was being reviewed; reload and retry.")
    outbox.emit(DomainEvent.Kind.PAYMENT_REJECTED, registration_id=registration.pk, event_id=registration.event_id)
    logger.info("payment_rejected", registration_id=str(registration.pk))
    return registration_store.get_registration(registration.pk)


def list_orders(
    organizer: FelicityUser, event_id: UUID, payment_status: str | None = None
) -> QuerySet[Registration]:
    """Registrations of an event for the organizer's review queue, oldest first."""
    event = get_owned_event(organizer, event_id)
    qs = Registration.objects.with_event().for_event(event.pk).order_by("created_at")
    if payment_status:
        qs = qs.filter(payment_status=payment_status)
    return qs
