"""Schema for accounts module."""

import typing as t

from django.conf import settings
from ninja import ModelSchema, Schema
from pydantic import UUID4, EmailStr, model_validator

from accounts.models import FelicityUser
from accounts.password_validation import validate_password
from common.schema import OneToTwoFiftyFiveString, StrippedString


class FelicityUserSchema(ModelSchema):
    id: UUID4
    display_name: str

    class Meta:
        model = FelicityUser
        fields = [
            "email",
            "first_name",
            "last_name",
            "role",
            "participant_type",
            "contact_number",
            "college_name",
            "organizer_name",
            "organizer_category",
        ]


class ParticipantSignupSchema(Schema):
    email: EmailStr
    password1: str
    password2: str
    first_name: OneToTwoFiftyFiveString
    last_name: StrippedString = ""
    participant_type: FelicityUser.ParticipantType
    college_name: StrippedString = ""
    contact_number: StrippedString | None = None

    @model_validator(mode="after")
    def check_signup(self) -> t.Self:
        """IIIT participants sign up with their institute address; passwords must match and be strong."""
        self.email = self.email.lower()
        if self.password1 != self.password2:
            raise ValueError("Passwords do not match.")
        if self.participant_type == FelicityUser.ParticipantType.IIIT and not self.email.endswith(
            settings.IIIT_EMAIL_DOMAIN
        ):
            raise ValueError(f"IIIT participants must use their IIIT email ({settings.IIIT_EMAIL_DOMAIN}).")
        validate_password(self.password1)
        return self
