from uuid import UUID

from django.http import HttpResponse
from ninja_extra import api_controller, route

from common.authentication import FelicityJWTAuth
from common.controllers import UserAwareController
from common.throttling import ScanThrottle, UserDefaultThrottle, WriteThrottle
from events import models, schema
from events.service import attendance_service


@api_controller("/attendance", auth=FelicityJWTAuth(), tags=["Attendance"], throttle=UserDefaultThrottle())
class AttendanceController(UserAwareController):
    """Check-in for the organizer who owns the event."""

    @route.post(
        "/{uuid:event_id}/scan",
        url_name="scan_ticket",
        response=schema.ScanResultSchema,
        throttle=ScanThrottle(),
    )
    def scan(self, event_id: UUID, payload: schema.ScanSchema) -> attendance_service.ScanResult:
        """Mark attendance from a QR payload or a ticket id.

        Scanning an already marked ticket is not an error: the outcome is ``duplicate`` and
        ``marked_at`` is the time of the first scan.
        """
        return attendance_service.scan(self.user(), event_id, payload.identifier)

    @route.post(
        "/{uuid:event_id}/manual",
        url_name="manual_attendance",
        response=schema.AttendeeSchema,
        throttle=WriteThrottle(),
    )
    def manual_override(self, event_id: UUID, payload: schema.ManualOverrideSchema) -> models.Registration:
        """Mark or unmark attendance by hand. A reason is required and kept in the audit trail."""
        return attendance_service.manual_override(
            self.user(), event_id, payload.registration_id, payload.action, payload.reason
        )

    @route.get("/{uuid:event_id}/dashboard", url_name="attendance_dashboard", response=schema.AttendanceDashboardSchema)
    def dashboard(self, event_id: UUID) -> attendance_service.AttendanceSummary:
        return attendance_service.attendance_summary(self.user(), event_id)

    @route.get("/{uuid:event_id}/export-csv", url_name="export_attendance_csv")
    def export_csv(self, event_id: UUID):
        """Download the attendance report as CSV."""
        filename, content = attendance_service.export_attendance_csv(self.user(), event_id)
        response = HttpResponse(content, content_type="text/csv")
        response["Content-Disposition"] = f'attachment; filename="{filename}"'
        return response
