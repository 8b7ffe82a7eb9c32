# src/events/filters.py

from django.db.models import Q
from ninja import Field, FilterSchema

from events.models import Event, Registration


class EventFilterSchema(FilterSchema):
    search: str | None = None
    kind: Event.Kind | None = None
    eligibility: Event.Eligibility | None = None
    status: Event.Status | None = None
    tag: str | None = Field(None, q="tags__icontains")  # type: ignore[call-overload]

    def filter_search(self, search: str | None) -> Q:
        if not search:
            return Q()
        return (
            Q(name__icontains=search)
            | Q(description__icontains=search)
            | Q(organizer__organizer_name__icontains=search)
        )


class RegistrationFilterSchema(FilterSchema):
    status: Registration.Status | None = None
    payment_status: Registration.PaymentStatus | None = None
    attendance_marked: bool | None = None
