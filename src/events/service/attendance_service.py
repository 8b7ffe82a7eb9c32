"""Attendance marking: QR/ticket scans, manual overrides and the organizer dashboard."""

import typing as t
from dataclasses import dataclass, field
from datetime import datetime
from uuid import UUID

import structlog
from django.db import transaction
from django.utils import timezone

from accounts.models import FelicityUser
from events.exceptions import (
    InvalidStateError,
    RegistrationNotFoundError,
    TicketNotFoundError,
    ValidationFailedError,
    WrongEventError,
)
from events.models import AttendanceAudit, Event, Registration

from . import export, registration_store, tickets
from .lifecycle import get_owned_event

logger = structlog.get_logger(__name__)

UNPAID_STATUSES = (Registration.PaymentStatus.PENDING_APPROVAL, Registration.PaymentStatus.REJECTED)


@dataclass(frozen=True)
class ScanResult:
    SUCCESS: t.ClassVar[str] = "success"
    DUPLICATE: t.ClassVar[str] = "duplicate"

    outcome: str
    registration: Registration
    marked_at: datetime | None

    @property
    def is_duplicate(self) -> bool:
        return self.outcome == self.DUPLICATE


@dataclass
class AttendanceSummary:
    event: Event
    scanned: list[Registration] = field(default_factory=list)
    not_scanned: list[Registration] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.scanned) + len(self.not_scanned)

    @property
    def rate(self) -> int:
        """Attendance rate as a whole percentage."""
        return round(len(self.scanned) * 100 / self.total) if self.total else 0


def get_trackable_event(organizer: FelicityUser, event_id: UUID) -> Event:
    """An event owned by the caller for which attendance can be tracked."""
    event = get_owned_event(organizer, event_id)
    if event.status == Event.Status.DRAFT:
        raise InvalidStateError("Attendance cannot be tracked for draft events.", status=event.status)
    return event


def scan(organizer: FelicityUser, event_id: UUID, identifier: str) -> ScanResult:
    """Mark attendance from a scanned QR payload or a typed ticket id.

    A second scan of the same ticket is not an error: it returns a duplicate result carrying
    the time of the first scan and changes nothing.
    """
    event = get_trackable_event(organizer, event_id)
    if not identifier or not identifier.strip():
        raise ValidationFailedError(errors={"identifier": ["A QR payload or ticket id is required."]})
    parsed = tickets.parse_scan_identifier(identifier)
    if parsed.event_id is not None and parsed.event_id != str(event.pk):
        raise WrongEventError(event_id=parsed.event_id)

    registration = (
        Registration.objects.with_event().ticketed().for_event(event.pk).filter(ticket_id=parsed.ticket_id).first()
    )
    if registration is None:
        raise TicketNotFoundError("No active registration found for this ticket.", ticket_id=parsed.ticket_id)
    if registration.payment_status in UNPAID_STATUSES:
        raise InvalidStateError(
            f"Cannot mark attendance, payment is {registration.get_payment_status_display().lower()}.",
            payment_status=registration.payment_status,
        )

    now = timezone.now()
    with transaction.atomic():
        claimed = registration_store.claim_attendance(registration.pk, now)
        if claimed:
            registration_store.record_attendance_audit(
                registration.pk, organizer, AttendanceAudit.Action.SCAN, marked=True
            )
    current = registration_store.get_registration(registration.pk)
    if not claimed:
        logger.info("attendance_scan_duplicate", registration_id=str(registration.pk))
        return ScanResult(ScanResult.DUPLICATE, current, current.attendance_marked_at)
    logger.info("attendance_scanned", registration_id=str(registration.pk), event_id=str(event.pk))
    return ScanResult(ScanResult.SUCCESS, current, current.attendance_marked_at)


def manual_override(
    organizer: FelicityUser, event_id: UUID, registration_id: UUID, action: str, reason: str
) -> Registration:
    """Mark or unmark attendance by hand. Every override is appended to the audit trail."""
    event = get_trackable_event(organizer, event_id)
    if action not in (AttendanceAudit.Action.MARK, AttendanceAudit.Action.UNMARK):
        raise ValidationFailedError(errors={"action": ["Must be 'mark' or 'unmark'."]})
    reason = (reason or "").strip()
    if not reason:
        raise ValidationFailedError(errors={"reason": ["A reason is required for a manual override."]})
    if not Registration.objects.filter(pk=registration_id, event=event, status=Registration.Status.ACTIVE).exists():
        raise RegistrationNotFoundError("Registration not found for this event.", registration_id=str(registration_id))

    marked = action == AttendanceAudit.Action.MARK
    registration = registration_store.mark_attendance(registration_id, marked, organizer, reason, action=action)
    logger.info("attendance_overridden", registration_id=str(registration_id), action=action)
    return registration


def attendance_summary(organizer: FelicityUser, event_id: UUID) -> AttendanceSummary:
    event = get_trackable_event(organizer, event_id)
    summary = AttendanceSummary(event=event)
    registrations = (
        Registration.objects.with_event()
        .filter(event=event, status=Registration.Status.ACTIVE)
        .order_by("-attendance_marked", "-attendance_marked_at", "created_at")
    )
    for registration in registrations:
        (summary.scanned if registration.attendance_marked else summary.not_scanned).append(registration)
    return summary


def export_attendance_csv(organizer: FelicityUser, event_id: UUID) -> tuple[str, str]:
    """Returns the CSV filename and content for the attendance report."""
    event = get_trackable_event(organizer, event_id)
    return export.attendance_filename(event), export.attendance_csv(event)
