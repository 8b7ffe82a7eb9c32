from uuid import UUID

from django.db.models import QuerySet
from ninja import Query
from ninja_extra import api_controller, route
from ninja_extra.pagination import PageNumberPaginationExtra, PaginatedResponseSchema, paginate

from common.authentication import OptionalAuth
from common.controllers import UserAwareController
from common.throttling import AnonDefaultThrottle
from events import filters, models, schema
from events.exceptions import EventNotFoundError


@api_controller("/events", auth=OptionalAuth(), tags=["Events"], throttle=AnonDefaultThrottle())
class EventController(UserAwareController):
    """Browse events that are open to participants."""

    def get_queryset(self) -> QuerySet[models.Event]:
        return models.Event.objects.browsable().with_catalogue()

    @route.get("", url_name="list_events", response=PaginatedResponseSchema[schema.EventInListSchema])
    @paginate(PageNumberPaginationExtra, page_size=20)
    def list_events(
        self,
        params: filters.EventFilterSchema = Query(...),  # type: ignore[type-arg]
    ) -> QuerySet[models.Event]:
        """List published and ongoing events, soonest first.

        Supports filtering by kind, eligibility, status, tag and a free-text search over name,
        description and organizer.
        """
        return params.filter(self.get_queryset()).order_by("start", "name")

    @route.get("/{uuid:event_id}", url_name="get_event", response=schema.EventDetailSchema)
    def get_event(self, event_id: UUID) -> models.Event:
        """Event details with its merchandise catalogue and registration form."""
        event = self.get_queryset().filter(pk=event_id).first()
        if event is None:
            raise EventNotFoundError(event_id=str(event_id))
        return event
