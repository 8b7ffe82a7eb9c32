"""Read-only CSV projections."""

import csv
import io
import re

from django.db.models import Prefetch
from django.utils import timezone

from events.models import AttendanceAudit, Event, Registration

ATTENDANCE_HEADER = [
    "Ticket ID",
    "First Name",
    "Last Name",
    "Email",
    "Contact",
    "College",
    "Type",
    "Registration Date",
    "Payment Status",
    "Attendance Marked",
    "Attendance Time",
    "Manual Override",
    "Override Reason",
    "Override By",
]


def attendance_filename(event: Event) -> str:
    safe_name = re.sub(r"[^a-zA-Z0-9]", "_", event.name)
    return f"attendance_{safe_name}_{timezone.now().date().isoformat()}.csv"


def attendance_csv(event: Event) -> str:
    """One row per active registration, with the latest manual override if any."""
    overrides = AttendanceAudit.objects.exclude(action=AttendanceAudit.Action.SCAN).select_related("actor")
    registrations = (
        Registration.objects.filter(event=event, status=Registration.Status.ACTIVE)
        .select_related("participant")
        .prefetch_related(Prefetch("attendance_audits", queryset=overrides, to_attr="overrides"))
        .order_by("created_at")
    )
    buffer = io.StringIO()
    writer = csv.writer(buffer, dialect=csv.excel)
    writer.writerow(ATTENDANCE_HEADER)
    for registration in registrations:
        participant = registration.participant
        last_override = registration.overrides[-1] if registration.overrides else None
        writer.writerow(
            [
                registration.ticket_id or "",
                participant.first_name,
                participant.last_name,
                participant.email,
                participant.contact_number or "",
                participant.college_name or "",
                participant.participant_type or "",
                registration.created_at.isoformat(),
                registration.payment_status,
                "Yes" if registration.attendance_marked else "No",
                registration.attendance_marked_at.isoformat() if registration.attendance_marked_at else "",
                "Yes" if last_override else "No",
                last_override.reason if last_override else "",
                last_override.actor.email if last_override and last_override.actor else "",
            ]
        )
    return buffer.getvalue()
