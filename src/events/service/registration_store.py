"""Registration record store.

Creation relies on the (participant, event) unique constraint; every state change is a
conditional ``UPDATE`` naming the state it expects to find.
"""

import typing as t
from uuid import UUID

import structlog
from django.conf import settings
from django.db import IntegrityError, transaction
from django.utils import timezone

from accounts.models import FelicityUser
from events.exceptions import (
    AlreadyRegisteredError,
    AlreadyTicketedError,
    InvalidStateError,
    RegistrationNotFoundError,
    TransientStoreError,
)
from events.fsm import INITIAL_PAYMENT_STATUSES, ensure_payment_transition
from events.models import AttendanceAudit, Event, Registration

from . import tickets

logger = structlog.get_logger(__name__)


def get_registration(registration_id: UUID) -> Registration:
    try:
        return Registration.objects.with_event().get(pk=registration_id)
    except Registration.DoesNotExist as e:
        raise RegistrationNotFoundError(registration_id=str(registration_id)) from e


def create_if_absent(participant: FelicityUser, event: Event, **payload: t.Any) -> Registration:
    """Insert a registration for (participant, event).

    The insert runs in its own savepoint so a uniqueness violation can be translated without
    poisoning an outer transaction.

    Raises:
        AlreadyRegisteredError: a registration for the pair already exists.
    """
    payment_status = payload.get("payment_status", Registration.PaymentStatus.FREE)
    if payment_status not in INITIAL_PAYMENT_STATUSES:
        raise InvalidStateError(f"A registration cannot start in {payment_status}.")
    registration = Registration(participant=participant, event=event, kind=event.kind, **payload)
    try:
        with transaction.atomic():
            registration.save(force_insert=True)
    except IntegrityError as e:
        if Registration.objects.filter(participant=participant, event=event).exists():
            raise AlreadyRegisteredError(event_id=str(event.pk)) from e
        raise
    return registration


def issue_ticket(registration_id: UUID, expected_payment: str, to_payment: str) -> Registration:
    """Assign a ticket exactly once and set the final payment state.

    Applies only while the registration is active, has no ticket and is in ``expected_payment``.
    ``to_payment`` is either the same state (free registrations) or a transition from the table.

    Raises:
        AlreadyTicketedError: a ticket already exists.
        InvalidStateError: the registration is no longer in the expected state.
    """
    if to_payment != expected_payment:
        ensure_payment_transition(expected_payment, to_payment)
    refs = Registration.objects.filter(pk=registration_id).values("event_id", "participant_id").first()
    if refs is None:
        raise RegistrationNotFoundError(registration_id=str(registration_id))

    for attempt in range(settings.TICKET_ID_MAX_ATTEMPTS):
        ticket_id = tickets.generate_ticket_id()
        now = timezone.now()
        try:
            with transaction.atomic():
                updated = Registration.objects.filter(
                    pk=registration_id,
                    ticket_id__isnull=True,
                    status=Registration.Status.ACTIVE,
                    payment_status=expected_payment,
                ).update(
                    ticket_id=ticket_id,
                    qr_payload=tickets.build_qr_payload(ticket_id, refs["event_id"], refs["participant_id"]),
                    payment_status=to_payment,
                    ticketed_at=now,
                    updated_at=now,
                )
        except IntegrityError:
            logger.warning("ticket_id_collision", registration_id=str(registration_id), attempt=attempt)
            continue
        if updated:
            logger.info("ticket_issued", registration_id=str(registration_id), ticket_id=ticket_id)
            return get_registration(registration_id)
        current = get_registration(registration_id)
        if current.ticket_id:
            raise AlreadyTicketedError(registration_id=str(registration_id))
        raise InvalidStateError(
            f"Registration is {current.status}/{current.payment_status}, expected active/{expected_payment}.",
            registration_id=str(registration_id),
        )
    raise TransientStoreError("Could not allocate a unique ticket id.")


def transition_payment(registration_id: UUID, from_status: str, to_status: str) -> bool:
    """Move the payment state of an active registration if it still equals ``from_status``."""
    ensure_payment_transition(from_status, to_status)
    return bool(
        Registration.objects.filter(
            pk=registration_id, status=Registration.Status.ACTIVE, payment_status=from_status
        ).update(payment_status=to_status, updated_at=timezone.now())
    )


def cancel(registration_id: UUID, observed_payment_status: str) -> bool:
    """Cancel an active registration whose payment state is still the one the caller observed."""
    now = timezone.now()
    return bool(
        Registration.objects.filter(
            pk=registration_id, status=Registration.Status.ACTIVE, payment_status=observed_payment_status
        ).update(status=Registration.Status.CANCELLED, cancelled_at=now, updated_at=now)
    )


def set_payment_proof(registration_id: UUID, proof_url: str, allowed_statuses: t.Iterable[str]) -> bool:
    return bool(
        Registration.objects.filter(
            pk=registration_id, status=Registration.Status.ACTIVE, payment_status__in=list(allowed_statuses)
        ).update(payment_proof_url=proof_url, updated_at=timezone.now())
    )


def claim_attendance(registration_id: UUID, now: t.Any) -> bool:
    """Mark attendance only if it is not marked yet. Exactly one concurrent caller wins."""
    return bool(
        Registration.objects.filter(
            pk=registration_id,
            attendance_marked=False,
            status=Registration.Status.ACTIVE,
            payment_status__in=Registration.TICKETABLE_PAYMENT_STATUSES,
        ).update(attendance_marked=True, attendance_marked_at=now, updated_at=now)
    )


def record_attendance_audit(
    registration_id: UUID, actor: FelicityUser | None, action: str, marked: bool, reason: str = ""
) -> AttendanceAudit:
    return AttendanceAudit.objects.create(
        registration_id=registration_id, actor=actor, action=action, marked=marked, reason=reason
    )


@transaction.atomic
def mark_attendance(
    registration_id: UUID,
    marked: bool,
    actor: FelicityUser,
    reason: str,
    action: str = AttendanceAudit.Action.MARK,
) -> Registration:
    """Set the attendance flag (last write wins) and append an audit record."""
    now = timezone.now()
    updated = Registration.objects.filter(pk=registration_id).update(
        attendance_marked=marked, attendance_marked_at=now if marked else None, updated_at=now
    )
    if not updated:
        raise RegistrationNotFoundError(registration_id=str(registration_id))
    record_attendance_audit(registration_id, actor, action, marked, reason)
    return get_registration(registration_id)
