import typing as t
from decimal import Decimal

from django.conf import settings
from django.core.exceptions import ValidationError as DjangoValidationError
from django.core.validators import MinValueValidator
from django.db import models
from django.db.models import F, Q

from common.models import TimeStampedModel


class EventQuerySet(models.QuerySet["Event"]):
    def with_organizer(self) -> t.Self:
        """Select the organizer as well."""
        return self.select_related("organizer")

    def with_catalogue(self) -> t.Self:
        """Prefetch merchandise items and form fields."""
        return self.prefetch_related("items", "form_fields")

    def browsable(self) -> t.Self:
        """Events participants can see and register for."""
        return self.filter(status__in=Event.REGISTRATION_OPEN_STATUSES)

    def owned_by(self, user_id: t.Any) -> t.Self:
        return self.filter(organizer_id=user_id)

    def due_for_start(self, now: t.Any) -> t.Self:
        """Published events whose start has passed but whose end has not."""
        return self.filter(status=Event.Status.PUBLISHED, start__lte=now, end__gt=now)

    def due_for_completion(self, now: t.Any) -> t.Self:
        """Published or ongoing events whose end has passed."""
        return self.filter(status__in=[Event.Status.PUBLISHED, Event.Status.ONGOING], end__lte=now)


class EventManager(models.Manager["Event"]):
    def get_queryset(self) -> EventQuerySet:
        """Get the base queryset."""
        return EventQuerySet(self.model, using=self._db)

    def with_organizer(self) -> EventQuerySet:
        """Returns a queryset with the organizer selected."""
        return self.get_queryset().with_organizer()

    def with_catalogue(self) -> EventQuerySet:
        """Returns a queryset with items and form fields prefetched."""
        return self.get_queryset().with_catalogue()

    def browsable(self) -> EventQuerySet:
        return self.get_queryset().browsable()


class Event(TimeStampedModel):
    class Kind(models.TextChoices):
        NORMAL = "normal", "Normal"
        MERCHANDISE = "merchandise", "Merchandise"

    class Status(models.TextChoices):
        DRAFT = "draft", "Draft"
        PUBLISHED = "published", "Published"
        ONGOING = "ongoing", "Ongoing"
        CLOSED = "closed", "Closed"
        COMPLETED = "completed", "Completed"

    class Eligibility(models.TextChoices):
        ALL = "all", "Everyone"
        IIIT_ONLY = "iiit_only", "IIIT participants only"
        NON_IIIT_ONLY = "non_iiit_only", "Non-IIIT participants only"

    REGISTRATION_OPEN_STATUSES = (Status.PUBLISHED, Status.ONGOING)

    organizer = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="organized_events"
    )
    name = models.CharField(max_length=255, db_index=True)
    description = models.TextField(blank=True, default="")
    location = models.CharField(max_length=255, blank=True, default="")
    tags = models.JSONField(default=list, blank=True)
    kind = models.CharField(max_length=20, choices=Kind.choices, default=Kind.NORMAL, db_index=True)
    status = models.CharField(max_length=20, choices=Status.choices, default=Status.DRAFT, db_index=True)

    start = models.DateTimeField(null=True, blank=True)
    end = models.DateTimeField(null=True, blank=True)
    registration_deadline = models.DateTimeField(null=True, blank=True)

    registration_fee = models.DecimalField(
        max_digits=10, decimal_places=2, default=Decimal("0"), validators=[MinValueValidator(Decimal("0"))]
    )
    eligibility = models.CharField(max_length=20, choices=Eligibility.choices, default=Eligibility.ALL)
    registration_limit = models.PositiveIntegerField(
        null=True, blank=True, validators=[MinValueValidator(1)], help_text="Empty means unlimited."
    )
    registration_count = models.PositiveIntegerField(default=0, editable=False)
    total_revenue = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0"), editable=False)
    purchase_limit_per_participant = models.PositiveIntegerField(default=1, validators=[MinValueValidator(1)])
    form_locked = models.BooleanField(default=False, editable=False)

    objects = EventManager()

    class Meta:
        constraints = [
            models.CheckConstraint(
                condition=Q(registration_limit__isnull=True) | Q(registration_count__lte=F("registration_limit")),
                name="event_count_within_limit",
            ),
            models.CheckConstraint(condition=Q(total_revenue__gte=0), name="event_revenue_non_negative"),
            models.CheckConstraint(condition=Q(registration_fee__gte=0), name="event_fee_non_negative"),
        ]
        indexes = [
            models.Index(fields=["status", "start"], name="idx_event_status_start"),
            models.Index(fields=["status", "end"], name="idx_event_status_end"),
            models.Index(fields=["organizer", "status"], name="idx_event_organizer_status"),
        ]
        ordering = ["-created_at"]

    def __str__(self) -> str:
        return f"{self.name} ({self.get_status_display()})"

    def clean(self) -> None:
        """Validate date consistency and merchandise pricing."""
        super().clean()
        if self.start and self.end and self.start >= self.end:
            raise DjangoValidationError({"end": "End date must be after start date."})
        if self.registration_deadline and self.end and self.registration_deadline > self.end:
            raise DjangoValidationError(
                {"registration_deadline": "Registration deadline must not be after the end date."}
            )
        if self.kind == self.Kind.MERCHANDISE and self.registration_fee:
            raise DjangoValidationError({"registration_fee": "Merchandise events are priced per item."})

    @property
    def is_merchandise(self) -> bool:
        return self.kind == self.Kind.MERCHANDISE

    @property
    def has_capacity(self) -> bool:
        """Advisory snapshot check; the authoritative guard is the conditional increment."""
        return self.registration_limit is None or self.registration_count < self.registration_limit


class MerchandiseItem(TimeStampedModel):
    event = models.ForeignKey(Event, on_delete=models.CASCADE, related_name="items")
    name = models.CharField(max_length=255)
    size = models.CharField(max_length=50, blank=True, default="")
    color = models.CharField(max_length=50, blank=True, default="")
    variant = models.CharField(max_length=100, blank=True, default="")
    stock_quantity = models.PositiveIntegerField(default=0)
    price = models.DecimalField(
        max_digits=10, decimal_places=2, default=Decimal("0"), validators=[MinValueValidator(Decimal("0"))]
    )
    order = models.PositiveIntegerField(default=0)

    class Meta:
        constraints = [
            models.CheckConstraint(condition=Q(stock_quantity__gte=0), name="item_stock_non_negative"),
            models.CheckConstraint(condition=Q(price__gte=0), name="item_price_non_negative"),
        ]
        ordering = ["order", "created_at"]

    def __str__(self) -> str:
        details = " / ".join(part for part in (self.size, self.color, self.variant) if part)
        return f"{self.name} ({details})" if details else self.name


class FormField(TimeStampedModel):
    class FieldType(models.TextChoices):
        TEXT = "text", "Text"
        TEXTAREA = "textarea", "Text area"
        DROPDOWN = "dropdown", "Dropdown"
        CHECKBOX = "checkbox", "Checkbox"
        RADIO = "radio", "Radio"
        FILE = "file", "File"
        EMAIL = "email", "Email"
        PHONE = "phone", "Phone"
        NUMBER = "number", "Number"

    CHOICE_TYPES = (FieldType.DROPDOWN, FieldType.CHECKBOX, FieldType.RADIO)

    event = models.ForeignKey(Event, on_delete=models.CASCADE, related_name="form_fields")
    label = models.CharField(max_length=255)
    field_type = models.CharField(max_length=20, choices=FieldType.choices, default=FieldType.TEXT)
    options = models.JSONField(default=list, blank=True)
    is_required = models.BooleanField(default=False)
    min_value = models.FloatField(null=True, blank=True)
    max_value = models.FloatField(null=True, blank=True)
    order = models.PositiveIntegerField(default=0)

    class Meta:
        constraints = [models.UniqueConstraint(fields=["event", "label"], name="unique_event_form_label")]
        ordering = ["order", "created_at"]

    def __str__(self) -> str:
        return f"{self.label} ({self.field_type})"

    def clean(self) -> None:
        """Choice fields need options and numeric bounds must be ordered."""
        super().clean()
        if self.field_type in self.CHOICE_TYPES and not self.options:
            raise DjangoValidationError({"options": "Choice fields need at least one option."})
        if self.min_value is not None and self.max_value is not None and self.min_value > self.max_value:
            raise DjangoValidationError({"max_value": "Maximum must not be below minimum."})
