from uuid import UUID

from django.db.models import QuerySet
from ninja_extra import api_controller, route
from ninja_extra.pagination import PageNumberPaginationExtra, PaginatedResponseSchema, paginate

from common.authentication import FelicityJWTAuth
from common.controllers import UserAwareController
from common.throttling import UserDefaultThrottle, WriteThrottle
from events import models, schema
from events.service import payment_service


@api_controller("/payments", auth=FelicityJWTAuth(), tags=["Payments"], throttle=UserDefaultThrottle())
class PaymentController(UserAwareController):
    """Payment review for the organizer who owns the event."""

    @route.get(
        "/events/{uuid:event_id}/orders",
        url_name="list_orders",
        response=PaginatedResponseSchema[schema.AttendeeSchema],
    )
    @paginate(PageNumberPaginationExtra, page_size=50)
    def list_orders(
        self, event_id: UUID, payment_status: models.Registration.PaymentStatus | None = None
    ) -> QuerySet[models.Registration]:
        """The review queue for an event, optionally narrowed to one payment status."""
        return payment_service.list_orders(self.user(), event_id, payment_status)

    @route.post(
        "/{uuid:registration_id}/approve",
        url_name="approve_payment",
        response=schema.AttendeeSchema,
        throttle=WriteThrottle(),
    )
    def approve(self, registration_id: UUID) -> models.Registration:
        """Approve the payment and issue the ticket. Merchandise stock is taken now."""
        return payment_service.approve(self.user(), registration_id)

    @route.post(
        "/{uuid:registration_id}/reject",
        url_name="reject_payment",
        response=schema.AttendeeSchema,
        throttle=WriteThrottle(),
    )
    def reject(self, registration_id: UUID) -> models.Registration:
        """Reject a pending payment. The participant may upload a new proof."""
        return payment_service.reject(self.user(), registration_id)
