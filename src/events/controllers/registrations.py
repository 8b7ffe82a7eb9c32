from uuid import UUID

from django.db.models import QuerySet
from ninja_extra import api_controller, route
from ninja_extra.pagination import PageNumberPaginationExtra, PaginatedResponseSchema, paginate

from common.authentication import FelicityJWTAuth
from common.controllers import UserAwareController
from common.schema import ValidationErrorResponse
from common.throttling import RegistrationThrottle, UserDefaultThrottle, WriteThrottle
from events import models, schema
from events.service import event_store, registration_service
from events.service.eligibility import EligibilityService, RegistrationEligibility


@api_controller(
    "/registrations",
    auth=FelicityJWTAuth(),
    tags=["Registrations"],
    throttle=UserDefaultThrottle(),
)
class RegistrationController(UserAwareController):
    """Registration and merchandise orders for the calling participant."""

    @route.post(
        "",
        url_name="register",
        response={201: schema.RegistrationSchema, 400: ValidationErrorResponse},
        throttle=RegistrationThrottle(),
    )
    def register(self, payload: schema.RegistrationCreateSchema) -> tuple[int, models.Registration]:
        """Register for an event or place a merchandise order.

        Free registrations get a ticket right away. Paid ones wait for the organizer to approve the
        payment proof; stock for a paid order is only taken at approval.
        """
        order = None
        if payload.order is not None:
            order = registration_service.OrderRequest(item_id=payload.order.item_id, quantity=payload.order.quantity)
        registration = registration_service.register(
            self.user(),
            payload.event_id,
            form_responses=[answer.model_dump() for answer in payload.form_responses],
            order=order,
        )
        return 201, registration

    @route.get("/mine", url_name="my_registrations", response=PaginatedResponseSchema[schema.RegistrationSchema])
    @paginate(PageNumberPaginationExtra, page_size=20)
    def my_registrations(self) -> QuerySet[models.Registration]:
        return registration_service.my_registrations(self.user())

    @route.get("/check/{uuid:event_id}", url_name="check_eligibility", response=RegistrationEligibility)
    def check_eligibility(self, event_id: UUID) -> RegistrationEligibility:
        """Whether the caller could register for the event right now, and if not, why."""
        return EligibilityService(self.user(), event_store.get_event(event_id)).check()

    @route.get("/events/{uuid:event_id}", url_name="my_registration_for_event", response=schema.RegistrationSchema)
    def registration_for_event(self, event_id: UUID) -> models.Registration:
        return registration_service.get_registration_for_event(self.user(), event_id)

    @route.get("/ticket/{ticket_id}", url_name="get_ticket", response=schema.TicketSchema)
    def get_ticket(self, ticket_id: str) -> models.Registration:
        """A ticket with its QR code. Visible to the holder and to the event's organizer."""
        return registration_service.get_ticket(self.user(), ticket_id)

    @route.post(
        "/{uuid:registration_id}/cancel",
        url_name="cancel_registration",
        response=schema.RegistrationSchema,
        throttle=WriteThrottle(),
    )
    def cancel(self, registration_id: UUID) -> models.Registration:
        """Cancel before the event starts. Stock and revenue are given back where they were taken."""
        return registration_service.cancel(self.user(), registration_id)

    @route.post(
        "/{uuid:registration_id}/payment-proof",
        url_name="submit_payment_proof",
        response=schema.RegistrationSchema,
        throttle=WriteThrottle(),
    )
    def submit_payment_proof(self, registration_id: UUID, payload: schema.PaymentProofSchema) -> models.Registration:
        """Attach a payment proof. A rejected payment goes back to pending approval."""
        return registration_service.submit_payment_proof(self.user(), registration_id, str(payload.proof_url))
