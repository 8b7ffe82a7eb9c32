"""Registration workflow.

``register`` runs the eligibility gates, validates the form and the order, then performs the
authoritative conditional writes (capacity slot, stock, insert, ticket). When a later write
fails the earlier ones are compensated before the error propagates.
"""

import typing as t
from dataclasses import dataclass
from decimal import Decimal
from uuid import UUID

import structlog
from django.db import transaction
from django.db.models import QuerySet
from django.utils import timezone

from accounts import roles
from accounts.models import FelicityUser
from events.exceptions import (
    ForbiddenError,
    InsufficientStockError,
    InvalidStateError,
    RegistrationNotFoundError,
    TicketNotFoundError,
    ValidationFailedError,
)
from events.models import DomainEvent, Event, MerchandiseItem, Registration

from . import event_store, outbox, registration_store
from .eligibility import EligibilityService
from .form_validation import validate_form_responses

logger = structlog.get_logger(__name__)

PaymentStatus = Registration.PaymentStatus

PROOF_ACCEPTING_STATUSES = (PaymentStatus.PENDING_APPROVAL, PaymentStatus.REJECTED)


@dataclass(frozen=True)
class OrderRequest:
    item_id: UUID
    quantity: int = 1


@dataclass(frozen=True)
class _OrderSnapshot:
    item: MerchandiseItem | None
    quantity: int
    amount_due: Decimal

    def registration_fields(self) -> dict[str, t.Any]:
        if self.item is None:
            return {"quantity": 1, "amount_due": self.amount_due}
        return {
            "item": self.item,
            "item_name": self.item.name,
            "item_size": self.item.size,
            "item_color": self.item.color,
            "item_variant": self.item.variant,
            "quantity": self.quantity,
            "price_at_purchase": self.item.price,
            "amount_due": self.amount_due,
        }


def _snapshot_order(event: Event, order: OrderRequest | None) -> _OrderSnapshot:
    """Validate the order against the catalogue and freeze the price."""
    if not event.is_merchandise:
        if order is not None:
            raise ValidationFailedError(errors={"order": ["This event does not sell merchandise."]})
        return _OrderSnapshot(item=None, quantity=1, amount_due=event.registration_fee)

    if order is None:
        raise ValidationFailedError(errors={"order": ["Choose an item to order."]})
    limit = event.purchase_limit_per_participant
    if not 1 <= order.quantity <= limit:
        raise ValidationFailedError(errors={"quantity": [f"Quantity must be between 1 and {limit}."]})
    item = event_store.get_item(event.pk, order.item_id)
    # best effort: paid orders only take stock at approval time
    if order.quantity > item.stock_quantity:
        raise InsufficientStockError(
            f"Only {item.stock_quantity} left in stock.", item_id=str(item.pk), available=item.stock_quantity
        )
    return _OrderSnapshot(item=item, quantity=order.quantity, amount_due=item.price * order.quantity)


def register(
    participant: FelicityUser,
    event_id: UUID,
    form_responses: list[dict[str, t.Any]] | None = None,
    order: OrderRequest | None = None,
) -> Registration:
    """Register a participant for an event, or place a merchandise order.

    Free registrations get their ticket immediately. Paid ones are created in
    ``pending_approval`` without a ticket and without taking stock.
    """
    event = event_store.get_event(event_id)
    EligibilityService(participant, event).ensure()
    answers = validate_form_responses(list(event.form_fields.all()), form_responses)
    snapshot = _snapshot_order(event, order)
    payment_required = snapshot.amount_due > 0
    payment_status = PaymentStatus.PENDING_APPROVAL if payment_required else PaymentStatus.FREE

    event_store.claim_registration_slot(event.pk, open_statuses=Event.REGISTRATION_OPEN_STATUSES)
    stock_taken = False
    registration: Registration | None = None
    try:
        if not payment_required and snapshot.item is not None:
            event_store.conditional_decrement_stock(event.pk, snapshot.item.pk, snapshot.quantity)
            stock_taken = True
        registration = registration_store.create_if_absent(
            participant,
            event,
            payment_status=payment_status,
            form_responses=answers,
            **snapshot.registration_fields(),
        )
        if not payment_required:
            registration = registration_store.issue_ticket(registration.pk, PaymentStatus.FREE, PaymentStatus.FREE)
    except Exception as e:
        logger.info(
            "registration_compensated",
            event_id=str(event.pk),
            participant_id=str(participant.pk),
            error=type(e).__name__,
        )
        if registration is not None:
            # never ticketed or announced; a cancelled leftover would hold the (participant, event) pair
            Registration.objects.filter(pk=registration.pk, ticket_id__isnull=True).delete()
        if stock_taken and snapshot.item is not None:
            event_store.increment_stock(event.pk, snapshot.item.pk, snapshot.quantity)
        event_store.release_registration_slot(event.pk)
        raise

    if event_store.lock_form(event.pk):
        logger.info("registration_form_locked", event_id=str(event.pk))
    outbox.emit(DomainEvent.Kind.REGISTRATION_CREATED, registration_id=registration.pk, event_id=event.pk)
    logger.info(
        "registration_created",
        registration_id=str(registration.pk),
        event_id=str(event.pk),
        payment_status=registration.payment_status,
    )
    return registration


def _owned_registration(participant: FelicityUser, registration_id: UUID) -> Registration:
    registration = registration_store.get_registration(registration_id)
    if not roles.owns_registration(participant, registration):
        raise ForbiddenError("Only the registrant can do this.")
    return registration


@transaction.atomic
def cancel(participant: FelicityUser, registration_id: UUID, now: t.Any = None) -> Registration:
    """Cancel an active registration before the event starts.

    The capacity slot is always released. Stock comes back only for free or paid merchandise
    orders, and revenue is reversed only for paid ones.
    """
    now = now or timezone.now()
    registration = _owned_registration(participant, registration_id)
    if registration.status != Registration.Status.ACTIVE:
        raise InvalidStateError("Only active registrations can be cancelled.", status=registration.status)
    event = registration.event
    if event.start is not None and now >= event.start:
        raise InvalidStateError("Registrations cannot be cancelled after the event has started.")

    observed = registration.payment_status
    if not registration_store.cancel(registration.pk, observed):
        raise InvalidStateError("The registration changed while it was being cancelled; reload and retry.")
    event_store.release_registration_slot(event.pk)
    if registration.holds_stock and registration.item_id is not None:
        event_store.increment_stock(event.pk, registration.item_id, registration.quantity)
    if observed == PaymentStatus.PAID:
        event_store.adjust_revenue(event.pk, -registration.amount_due)

    outbox.emit(DomainEvent.Kind.REGISTRATION_CANCELLED, registration_id=registration.pk, event_id=event.pk)
    logger.info("registration_cancelled", registration_id=str(registration.pk), payment_status=observed)
    return registration_store.get_registration(registration.pk)


@transaction.atomic
def submit_payment_proof(participant: FelicityUser, registration_id: UUID, proof_url: str) -> Registration:
    """Attach a payment proof. A rejected payment goes back to review."""
    registration = _owned_registration(participant, registration_id)
    if registration.status != Registration.Status.ACTIVE or registration.payment_status not in PROOF_ACCEPTING_STATUSES:
        raise InvalidStateError(
            "This registration does not accept a payment proof.", payment_status=registration.payment_status
        )
    if not registration_store.set_payment_proof(registration.pk, proof_url, PROOF_ACCEPTING_STATUSES):
        raise InvalidStateError("The registration changed while the proof was uploaded; reload and retry.")
    if registration.payment_status == PaymentStatus.REJECTED:
        registration_store.transition_payment(registration.pk, PaymentStatus.REJECTED, PaymentStatus.PENDING_APPROVAL)

    outbox.emit(
        DomainEvent.Kind.PAYMENT_PROOF_SUBMITTED, registration_id=registration.pk, event_id=registration.event_id
    )
    logger.info("payment_proof_submitted", registration_id=str(registration.pk))
    return registration_store.get_registration(registration.pk)


def my_registrations(participant: FelicityUser) -> QuerySet[Registration]:
    return Registration.objects.with_event().filter(participant=participant)


def get_registration_for_event(participant: FelicityUser, event_id: UUID) -> Registration:
    """The participant's registration for an event, whatever its status."""
    registration = Registration.objects.with_event().filter(participant=participant, event_id=event_id).first()
    if registration is None:
        raise RegistrationNotFoundError(event_id=str(event_id))
    return registration


def get_ticket(user: FelicityUser, ticket_id: str) -> Registration:
    """Look a ticket up. Visible to its holder and to the organizer of the event."""
    registration = Registration.objects.with_event().filter(ticket_id=ticket_id.strip()).first()
    if registration is None or not roles.can_view_ticket(user, registration):
        raise TicketNotFoundError(ticket_id=ticket_id)
    return registration
