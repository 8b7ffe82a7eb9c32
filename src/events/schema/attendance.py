"""Attendance schemas."""

import typing as t
from datetime import datetime
from uuid import UUID

from ninja import Schema

from common.schema import NonBlankReason

from .event import MinimalEventSchema
from .registration import AttendeeSchema


class ScanSchema(Schema):
    identifier: str


class ScanResultSchema(Schema):
    outcome: t.Literal["success", "duplicate"]
    marked_at: datetime | None = None
    registration: AttendeeSchema


class ManualOverrideSchema(Schema):
    registration_id: UUID
    action: t.Literal["mark", "unmark"]
    reason: NonBlankReason


class AttendanceSummarySchema(Schema):
    total: int
    scanned_count: int
    not_scanned_count: int
    rate: int


class AttendanceDashboardSchema(Schema):
    event: MinimalEventSchema
    summary: AttendanceSummarySchema
    scanned: list[AttendeeSchema]
    not_scanned: list[AttendeeSchema]

    @staticmethod
    def resolve_summary(obj: t.Any) -> dict[str, int]:
        return {
            "total": obj.total,
            "scanned_count": len(obj.scanned),
            "not_scanned_count": len(obj.not_scanned),
            "rate": obj.rate,
        }
