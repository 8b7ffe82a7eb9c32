"""Events schema package.

Schemas are grouped by area and re-exported here.
"""

from .attendance import (
    AttendanceDashboardSchema,
    AttendanceSummarySchema,
    ManualOverrideSchema,
    ScanResultSchema,
    ScanSchema,
)
from .event import (
    EventCreateSchema,
    EventDetailSchema,
    EventEditSchema,
    EventInListSchema,
    FormFieldInputSchema,
    FormFieldSchema,
    MerchandiseItemInputSchema,
    MerchandiseItemSchema,
    MinimalEventSchema,
    OrganizerEventSchema,
    OrganizerSchema,
)
from .registration import (
    AttendeeSchema,
    FormAnswerSchema,
    OrderSchema,
    ParticipantSchema,
    PaymentProofSchema,
    RegistrationCreateSchema,
    RegistrationSchema,
    TicketSchema,
)

__all__ = [
    # attendance
    "AttendanceDashboardSchema",
    "AttendanceSummarySchema",
    "ManualOverrideSchema",
    "ScanResultSchema",
    "ScanSchema",
    # event
    "EventCreateSchema",
    "EventDetailSchema",
    "EventEditSchema",
    "EventInListSchema",
    "FormFieldInputSchema",
    "FormFieldSchema",
    "MerchandiseItemInputSchema",
    "MerchandiseItemSchema",
    "MinimalEventSchema",
    "OrganizerEventSchema",
    "OrganizerSchema",
    # registration
    "AttendeeSchema",
    "FormAnswerSchema",
    "OrderSchema",
    "ParticipantSchema",
    "PaymentProofSchema",
    "RegistrationCreateSchema",
    "RegistrationSchema",
    "TicketSchema",
]
