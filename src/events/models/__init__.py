from .event import Event, FormField, MerchandiseItem
from .outbox import DomainEvent
from .registration import AttendanceAudit, Registration

__all__ = [
    "AttendanceAudit",
    "DomainEvent",
    "Event",
    "FormField",
    "MerchandiseItem",
    "Registration",
]
