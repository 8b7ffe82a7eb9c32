"""Post-commit domain events.

``emit`` writes a ``DomainEvent`` in the caller's transaction and schedules its delivery for
after commit. Delivery runs the handler registered for the kind; a failing handler leaves the
row pending for ``redispatch_pending``.
"""

import typing as t
from datetime import timedelta
from uuid import UUID

import structlog
from django.conf import settings
from django.db import transaction
from django.db.models import F
from django.utils import timezone

from events.models import DomainEvent, Event, Registration
from notifications.enums import NotificationType
from notifications.service import notify

logger = structlog.get_logger(__name__)

Handler = t.Callable[[dict[str, t.Any]], None]

Kind = DomainEvent.Kind


def emit(kind: str, **payload: t.Any) -> DomainEvent:
    """Record a domain event and deliver it once the current transaction commits."""
    from events.tasks import dispatch_domain_event

    domain_event = DomainEvent.objects.create(kind=kind, payload={k: _jsonable(v) for k, v in payload.items()})
    transaction.on_commit(lambda: dispatch_domain_event.delay(str(domain_event.pk)))
    logger.info("domain_event_emitted", domain_event_id=str(domain_event.pk), kind=kind)
    return domain_event


def _jsonable(value: t.Any) -> t.Any:
    if value is None or isinstance(value, (bool, int, str)):
        return value
    return str(value)


def dispatch(domain_event_id: UUID | str) -> bool:
    """Deliver one domain event. Returns whether it is dispatched after this call."""
    with transaction.atomic():
        domain_event = (
            DomainEvent.objects.select_for_update(skip_locked=True)
            .filter(pk=domain_event_id, dispatched_at__isnull=True)
            .first()
        )
        if domain_event is None:
            return DomainEvent.objects.filter(pk=domain_event_id, dispatched_at__isnull=False).exists()
        handler = HANDLERS.get(domain_event.kind)
        try:
            if handler is not None:
                with transaction.atomic():
                    handler(domain_event.payload)
        except Exception as e:
            logger.exception("domain_event_delivery_failed", domain_event_id=str(domain_event.pk))
            DomainEvent.objects.filter(pk=domain_event.pk).update(
                attempts=F("attempts") + 1, last_error=repr(e)[:2000], updated_at=timezone.now()
            )
            return False
        now = timezone.now()
        DomainEvent.objects.filter(pk=domain_event.pk).update(
            dispatched_at=now, attempts=F("attempts") + 1, updated_at=now
        )
    logger.info("domain_event_dispatched", domain_event_id=str(domain_event_id), kind=domain_event.kind)
    return True


def redispatch_pending(now: t.Any = None) -> int:
    """Retry domain events that are still pending after the grace period."""
    now = now or timezone.now()
    cutoff = now - timedelta(minutes=settings.OUTBOX_REDISPATCH_AFTER_MINUTES)
    pending_ids = list(
        DomainEvent.objects.pending()
        .filter(created_at__lte=cutoff, attempts__lt=settings.OUTBOX_MAX_ATTEMPTS)
        .values_list("pk", flat=True)[:500]
    )
    delivered = sum(1 for pk in pending_ids if dispatch(pk))
    if pending_ids:
        logger.info("domain_events_redispatched", pending=len(pending_ids), delivered=delivered)
    return delivered


# ---- handlers ----


def _registration(payload: dict[str, t.Any]) -> Registration:
    return Registration.objects.with_event().get(pk=payload["registration_id"])


def _event(payload: dict[str, t.Any]) -> Event:
    return Event.objects.with_organizer().get(pk=payload["event_id"])


def _send_ticket(registration: Registration) -> None:
    from events.tasks import send_ticket_email

    if registration.ticket_id:
        registration_id = str(registration.pk)
        transaction.on_commit(lambda: send_ticket_email.delay(registration_id))


def on_registration_created(payload: dict[str, t.Any]) -> None:
    registration = _registration(payload)
    event = registration.event
    if registration.payment_status == Registration.PaymentStatus.PENDING_APPROVAL:
        notify(
            registration.participant_id,
            NotificationType.REGISTRATION_PENDING_PAYMENT,
            f"Registration received: {event.name}",
            f"Your order for {event.name} is awaiting payment approval. "
            f"Upload your payment proof so the organizer can review it.",
            context={"event_id": str(event.pk), "registration_id": str(registration.pk)},
        )
        return
    notify(
        registration.participant_id,
        NotificationType.REGISTRATION_CONFIRMED,
        f"Registration confirmed: {event.name}",
        f"You're in! Your ticket ID is {registration.ticket_id}.",
        context={"event_id": str(event.pk), "registration_id": str(registration.pk)},
    )
    _send_ticket(registration)


def on_registration_cancelled(payload: dict[str, t.Any]) -> None:
    registration = _registration(payload)
    notify(
        registration.participant_id,
        NotificationType.REGISTRATION_CANCELLED,
        f"Registration cancelled: {registration.event.name}",
        f"Your registration for {registration.event.name} has been cancelled.",
        context={"event_id": str(registration.event_id), "registration_id": str(registration.pk)},
    )


def on_payment_proof_submitted(payload: dict[str, t.Any]) -> None:
    registration = _registration(payload)
    notify(
        registration.event.organizer_id,
        NotificationType.PAYMENT_PROOF_SUBMITTED,
        f"Payment proof submitted: {registration.event.name}",
        f"{registration.participant.get_display_name()} uploaded a payment proof for review.",
        context={"event_id": str(registration.event_id), "registration_id": str(registration.pk)},
    )


def on_payment_approved(payload: dict[str, t.Any]) -> None:
    registration = _registration(payload)
    notify(
        registration.participant_id,
        NotificationType.PAYMENT_APPROVED,
        f"Payment approved: {registration.event.name}",
        f"Your payment was approved. Your ticket ID is {registration.ticket_id}.",
        context={"event_id": str(registration.event_id), "registration_id": str(registration.pk)},
    )
    _send_ticket(registration)


def on_payment_rejected(payload: dict[str, t.Any]) -> None:
    registration = _registration(payload)
    notify(
        registration.participant_id,
        NotificationType.PAYMENT_REJECTED,
        f"Payment rejected: {registration.event.name}",
        f"Your payment for {registration.event.name} was rejected. You can upload a new payment proof.",
        context={"event_id": str(registration.event_id), "registration_id": str(registration.pk)},
    )


def _lifecycle_handler(notification_type: NotificationType, verb: str) -> Handler:
    def handler(payload: dict[str, t.Any]) -> None:
        event = _event(payload)
        notify(
            event.organizer_id,
            notification_type,
            f"{event.name} {verb}",
            f"Your event {event.name} {verb}.",
            context={"event_id": str(event.pk)},
        )

    return handler


HANDLERS: dict[str, Handler] = {
    Kind.REGISTRATION_CREATED: on_registration_created,
    Kind.REGISTRATION_CANCELLED: on_registration_cancelled,
    Kind.PAYMENT_PROOF_SUBMITTED: on_payment_proof_submitted,
    Kind.PAYMENT_APPROVED: on_payment_approved,
    Kind.PAYMENT_REJECTED: on_payment_rejected,
    Kind.EVENT_PUBLISHED: _lifecycle_handler(NotificationType.EVENT_PUBLISHED, "is now published"),
    Kind.EVENT_STARTED: _lifecycle_handler(NotificationType.EVENT_STARTED, "has started"),
    Kind.EVENT_CLOSED: _lifecycle_handler(NotificationType.EVENT_CLOSED, "was closed"),
    Kind.EVENT_COMPLETED: _lifecycle_handler(NotificationType.EVENT_COMPLETED, "is completed"),
}
