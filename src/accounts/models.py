import re
import typing as t
import uuid

from django.contrib.auth.models import AbstractUser, UserManager
from django.db import models

from accounts.validators import normalize_phone_number, validate_phone_number


class FelicityUserQueryset(models.QuerySet["FelicityUser"]):
    """Queryset for FelicityUser."""

    def participants(self) -> "FelicityUserQueryset":
        """Only participant accounts."""
        return self.filter(role=FelicityUser.Role.PARTICIPANT)

    def organizers(self) -> "FelicityUserQueryset":
        """Only organizer accounts."""
        return self.filter(role=FelicityUser.Role.ORGANIZER)


class FelicityUserManager(UserManager["FelicityUser"]):
    def get_queryset(self) -> FelicityUserQueryset:
        """Get queryset for FelicityUser."""
        return FelicityUserQueryset(self.model)

    def create_superuser(  # type: ignore[override]
        self, username: str, email: str | None = None, password: str | None = None, **extra_fields: t.Any
    ) -> "FelicityUser":
        """Superusers are platform admins."""
        extra_fields.setdefault("role", FelicityUser.Role.ADMIN)
        return super().create_superuser(username, email, password, **extra_fields)


class FelicityUser(AbstractUser):
    class Role(models.TextChoices):
        PARTICIPANT = "participant", "Participant"
        ORGANIZER = "organizer", "Organizer"
        ADMIN = "admin", "Admin"

    class ParticipantType(models.TextChoices):
        IIIT = "iiit", "IIIT"
        NON_IIIT = "non_iiit", "Non-IIIT"

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    role = models.CharField(max_length=20, choices=Role.choices, default=Role.PARTICIPANT, db_index=True)
    participant_type = models.CharField(
        max_length=20,
        choices=ParticipantType.choices,
        null=True,
        blank=True,
        help_text="Only meaningful for participants; drives event eligibility.",
    )
    contact_number = models.CharField(
        max_length=20, null=True, blank=True, validators=[validate_phone_number], help_text="Contact number"
    )
    college_name = models.CharField(max_length=255, blank=True, default="")
    organizer_name = models.CharField(max_length=255, blank=True, default="", help_text="Club or society name")
    organizer_category = models.CharField(max_length=100, blank=True, default="")
    organizer_description = models.TextField(blank=True, default="")

    objects = FelicityUserManager()  # type: ignore[misc]

    class Meta:
        ordering = ["username"]

    def save(self, *args: t.Any, **kwargs: t.Any) -> None:
        """Normalize the contact number before saving."""
        if self.contact_number:
            self.contact_number = normalize_phone_number(self.contact_number)
        super().save(*args, **kwargs)

    @property
    def display_name(self) -> str:
        """Display name."""
        return self.get_display_name()

    def get_display_name(self) -> str:
        """Returns the organizer name for clubs, otherwise the full name, falling back to the username."""
        if self.role == self.Role.ORGANIZER and self.organizer_name:
            return self.organizer_name
        return self.get_full_name() or re.sub(r"(\W|_)+", " ", self.username.split("@")[0]).title()
