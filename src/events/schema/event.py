"""Event, catalogue and custom form schemas."""

import typing as t
from decimal import Decimal

from ninja import ModelSchema, Schema
from pydantic import AwareDatetime, Field, model_validator

from accounts.models import FelicityUser
from common.schema import OneToTwoFiftyFiveString, StrippedString
from events.models import Event, FormField, MerchandiseItem


class OrganizerSchema(ModelSchema):
    class Meta:
        model = FelicityUser
        fields = ["id", "organizer_name", "organizer_category", "organizer_description"]


class MerchandiseItemSchema(ModelSchema):
    class Meta:
        model = MerchandiseItem
        fields = ["id", "name", "size", "color", "variant", "stock_quantity", "price", "order"]


class MerchandiseItemInputSchema(Schema):
    name: OneToTwoFiftyFiveString
    size: StrippedString = ""
    color: StrippedString = ""
    variant: StrippedString = ""
    stock_quantity: int = Field(0, ge=0)
    price: Decimal = Field(Decimal("0"), ge=0, max_digits=10, decimal_places=2)


class FormFieldSchema(ModelSchema):
    class Meta:
        model = FormField
        fields = ["id", "label", "field_type", "options", "is_required", "min_value", "max_value", "order"]


class FormFieldInputSchema(Schema):
    label: OneToTwoFiftyFiveString
    field_type: FormField.FieldType = FormField.FieldType.TEXT
    options: list[str] = Field(default_factory=list)
    is_required: bool = False
    min_value: float | None = None
    max_value: float | None = None


class MinimalEventSchema(ModelSchema):
    class Meta:
        model = Event
        fields = ["id", "name", "kind", "status", "start", "end", "location"]


class EventInListSchema(ModelSchema):
    organizer: OrganizerSchema

    class Meta:
        model = Event
        fields = [
            "id",
            "name",
            "kind",
            "status",
            "tags",
            "location",
            "start",
            "end",
            "registration_deadline",
            "registration_fee",
            "eligibility",
        ]


class EventDetailSchema(ModelSchema):
    organizer: OrganizerSchema
    items: list[MerchandiseItemSchema]
    form_fields: list[FormFieldSchema]

    class Meta:
        model = Event
        fields = [
            "id",
            "name",
            "description",
            "kind",
            "status",
            "tags",
            "location",
            "start",
            "end",
            "registration_deadline",
            "registration_fee",
            "eligibility",
            "registration_limit",
            "registration_count",
            "purchase_limit_per_participant",
            "form_locked",
        ]

    @staticmethod
    def resolve_items(obj: Event) -> list[MerchandiseItem]:
        return list(obj.items.all())

    @staticmethod
    def resolve_form_fields(obj: Event) -> list[FormField]:
        return list(obj.form_fields.all())


class OrganizerEventSchema(EventDetailSchema):
    """What the owning organizer sees, including the running revenue."""

    total_revenue: Decimal
    created_at: AwareDatetime
    updated_at: AwareDatetime


class EventEditSchema(Schema):
    """Partial edit. Only the fields actually sent are applied."""

    name: OneToTwoFiftyFiveString | None = None
    description: StrippedString | None = None
    location: StrippedString | None = None
    tags: list[str] | None = None
    kind: Event.Kind | None = None
    start: AwareDatetime | None = None
    end: AwareDatetime | None = None
    registration_deadline: AwareDatetime | None = None
    registration_fee: Decimal | None = Field(None, ge=0, max_digits=10, decimal_places=2)
    eligibility: Event.Eligibility | None = None
    registration_limit: int | None = Field(None, ge=1, description="Maximum registrations (null = unlimited)")
    purchase_limit_per_participant: int | None = Field(None, ge=1)
    items: list[MerchandiseItemInputSchema] | None = None
    form_fields: list[FormFieldInputSchema] | None = None

    def to_changes(self) -> dict[str, t.Any]:
        return self.model_dump(exclude_unset=True)


class EventCreateSchema(EventEditSchema):
    name: OneToTwoFiftyFiveString
    kind: Event.Kind = Event.Kind.NORMAL

    @model_validator(mode="after")
    def validate_dates(self) -> t.Self:
        if self.start and self.end and self.start >= self.end:
            raise ValueError("End date must be after start date.")
        if self.registration_deadline and self.end and self.registration_deadline > self.end:
            raise ValueError("Registration deadline must not be after the end date.")
        return self

    def to_changes(self) -> dict[str, t.Any]:
        data = self.model_dump(exclude_unset=True)
        data["name"] = self.name
        data["kind"] = self.kind
        return {k: v for k, v in data.items() if v is not None}
