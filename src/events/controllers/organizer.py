from uuid import UUID

from django.db.models import QuerySet
from ninja import Query
from ninja_extra import api_controller, route
from ninja_extra.pagination import PageNumberPaginationExtra, PaginatedResponseSchema, paginate

from accounts import roles
from common.authentication import FelicityJWTAuth
from common.controllers import UserAwareController
from common.schema import ValidationErrorResponse
from common.throttling import UserDefaultThrottle, WriteThrottle
from events import filters, models, schema
from events.exceptions import ForbiddenError
from events.service import lifecycle


@api_controller(
    "/organizer/events",
    auth=FelicityJWTAuth(),
    tags=["Organizer Events"],
    throttle=UserDefaultThrottle(),
)
class OrganizerEventController(UserAwareController):
    """Event management for the owning organizer.

    Status changes go through the lifecycle rules: drafts are freely editable, published events
    accept only a narrow set of edits, and later states are read-only.
    """

    def get_queryset(self) -> QuerySet[models.Event]:
        user = self.user()
        if not roles.is_organizer(user):
            raise ForbiddenError("Only organizers can manage events.")
        return models.Event.objects.owned_by(user.pk).with_catalogue()

    @route.get("", url_name="list_organizer_events", response=PaginatedResponseSchema[schema.OrganizerEventSchema])
    @paginate(PageNumberPaginationExtra, page_size=20)
    def list_events(
        self,
        params: filters.EventFilterSchema = Query(...),  # type: ignore[type-arg]
    ) -> QuerySet[models.Event]:
        """List the caller's events, newest first."""
        return params.filter(self.get_queryset()).order_by("-created_at")

    @route.post(
        "",
        url_name="create_event",
        response={201: schema.OrganizerEventSchema, 400: ValidationErrorResponse},
        throttle=WriteThrottle(),
    )
    def create_event(self, payload: schema.EventCreateSchema) -> tuple[int, models.Event]:
        """Create a draft event, optionally with merchandise items and a custom form."""
        return 201, lifecycle.create_event(self.user(), payload.to_changes())

    @route.get("/{uuid:event_id}", url_name="get_organizer_event", response=schema.OrganizerEventSchema)
    def get_event(self, event_id: UUID) -> models.Event:
        return lifecycle.get_owned_event(self.user(), event_id)

    @route.patch(
        "/{uuid:event_id}",
        url_name="edit_event",
        response={200: schema.OrganizerEventSchema, 400: ValidationErrorResponse},
        throttle=WriteThrottle(),
    )
    def update_event(self, event_id: UUID, payload: schema.EventEditSchema) -> models.Event:
        """Edit an event.

        Drafts accept any field (the form only until the first registration). Published events
        accept only description, a later registration deadline and a higher registration limit.
        """
        return lifecycle.update_event(self.user(), event_id, payload.to_changes())

    @route.delete("/{uuid:event_id}", url_name="delete_event", response={204: None}, throttle=WriteThrottle())
    def delete_event(self, event_id: UUID) -> tuple[int, None]:
        """Delete a draft event."""
        lifecycle.delete(self.user(), event_id)
        return 204, None

    @route.post(
        "/{uuid:event_id}/publish",
        url_name="publish_event",
        response={200: schema.OrganizerEventSchema, 400: ValidationErrorResponse},
        throttle=WriteThrottle(),
    )
    def publish(self, event_id: UUID) -> models.Event:
        """Publish a draft. Dates must be set and merchandise must have priced items."""
        return lifecycle.publish(self.user(), event_id)

    @route.post(
        "/{uuid:event_id}/close", url_name="close_event", response=schema.OrganizerEventSchema, throttle=WriteThrottle()
    )
    def close(self, event_id: UUID) -> models.Event:
        """Stop accepting registrations."""
        return lifecycle.close(self.user(), event_id)

    @route.post(
        "/{uuid:event_id}/complete",
        url_name="complete_event",
        response=schema.OrganizerEventSchema,
        throttle=WriteThrottle(),
    )
    def complete(self, event_id: UUID) -> models.Event:
        return lifecycle.complete(self.user(), event_id)

    @route.get(
        "/{uuid:event_id}/registrations",
        url_name="list_event_registrations",
        response=PaginatedResponseSchema[schema.AttendeeSchema],
    )
    @paginate(PageNumberPaginationExtra, page_size=50)
    def list_registrations(
        self,
        event_id: UUID,
        params: filters.RegistrationFilterSchema = Query(...),  # type: ignore[type-arg]
    ) -> QuerySet[models.Registration]:
        """All registrations for the event, oldest first."""
        event = lifecycle.get_owned_event(self.user(), event_id)
        qs = models.Registration.objects.with_event().for_event(event.pk).order_by("created_at")
        return params.filter(qs)
