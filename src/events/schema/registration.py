"""Registration, order and ticket schemas."""

import typing as t
from uuid import UUID

from ninja import ModelSchema, Schema
from pydantic import Field, HttpUrl

from accounts.models import FelicityUser
from events.models import Registration
from events.service import tickets

from .event import MinimalEventSchema

REGISTRATION_FIELDS = [
    "id",
    "kind",
    "status",
    "payment_status",
    "ticket_id",
    "form_responses",
    "item_name",
    "item_size",
    "item_color",
    "item_variant",
    "quantity",
    "price_at_purchase",
    "amount_due",
    "payment_proof_url",
    "attendance_marked",
    "attendance_marked_at",
    "cancelled_at",
    "created_at",
]


class FormAnswerSchema(Schema):
    label: str
    answer: t.Any = None


class OrderSchema(Schema):
    item_id: UUID
    quantity: int = Field(1, ge=1)


class RegistrationCreateSchema(Schema):
    event_id: UUID
    form_responses: list[FormAnswerSchema] = Field(default_factory=list)
    order: OrderSchema | None = None


class PaymentProofSchema(Schema):
    proof_url: HttpUrl


class ParticipantSchema(ModelSchema):
    class Meta:
        model = FelicityUser
        fields = ["id", "email", "first_name", "last_name", "contact_number", "college_name", "participant_type"]


class RegistrationSchema(ModelSchema):
    event: MinimalEventSchema

    class Meta:
        model = Registration
        fields = REGISTRATION_FIELDS


class AttendeeSchema(ModelSchema):
    """A registration as the organizer sees it."""

    participant: ParticipantSchema

    class Meta:
        model = Registration
        fields = REGISTRATION_FIELDS


class TicketSchema(RegistrationSchema):
    participant: ParticipantSchema
    qr_payload: str
    qr_code: str

    @staticmethod
    def resolve_qr_code(obj: Registration) -> str:
        """The QR payload rendered as a PNG data URI."""
        return tickets.qr_data_uri(obj.qr_payload)
