from .attendance import AttendanceController
from .events import EventController
from .organizer import OrganizerEventController
from .payments import PaymentController
from .registrations import RegistrationController

EVENTS_CONTROLLERS: list[type] = [
    EventController,
    OrganizerEventController,
    RegistrationController,
    PaymentController,
    AttendanceController,
]

__all__ = [
    "AttendanceController",
    "EventController",
    "OrganizerEventController",
    "PaymentController",
    "RegistrationController",
    "EVENTS_CONTROLLERS",
]
