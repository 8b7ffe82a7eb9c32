import typing as t
from decimal import Decimal

from django.conf import settings
from django.db import models
from django.db.models import Q

from common.models import TimeStampedModel

from .event import Event, MerchandiseItem


class RegistrationQuerySet(models.QuerySet["Registration"]):
    def with_event(self) -> t.Self:
        return self.select_related("event", "event__organizer", "participant", "item")

    def for_event(self, event_id: t.Any) -> t.Self:
        return self.filter(event_id=event_id)

    def ticketed(self) -> t.Self:
        """Active registrations that carry a ticket."""
        return self.filter(status=Registration.Status.ACTIVE, ticket_id__isnull=False)


class Registration(TimeStampedModel):
    """One participant's enrollment in one event.

    The (participant, event) pair is unique at the database level regardless of status.
    Counters on the event and the item are never touched from here; see ``events.service.event_store``.
    """

    class Status(models.TextChoices):
        ACTIVE = "active", "Active"
        CANCELLED = "cancelled", "Cancelled"
        REJECTED = "rejected", "Rejected"

    class PaymentStatus(models.TextChoices):
        FREE = "free", "Free"
        PENDING_APPROVAL = "pending_approval", "Pending approval"
        PAID = "paid", "Paid"
        REJECTED = "rejected", "Rejected"

    TICKETABLE_PAYMENT_STATUSES = (PaymentStatus.FREE, PaymentStatus.PAID)
    STOCK_HOLDING_PAYMENT_STATUSES = (PaymentStatus.FREE, PaymentStatus.PAID)

    participant = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="registrations")
    event = models.ForeignKey(Event, on_delete=models.CASCADE, related_name="registrations")
    kind = models.CharField(max_length=20, choices=Event.Kind.choices, default=Event.Kind.NORMAL)
    status = models.CharField(max_length=20, choices=Status.choices, default=Status.ACTIVE, db_index=True)
    payment_status = models.CharField(
        max_length=20, choices=PaymentStatus.choices, default=PaymentStatus.FREE, db_index=True
    )

    ticket_id = models.CharField(max_length=32, unique=True, null=True, blank=True)
    qr_payload = models.TextField(blank=True, default="")
    ticketed_at = models.DateTimeField(null=True, blank=True)

    form_responses = models.JSONField(default=list, blank=True)

    # order snapshot, frozen at order time
    item = models.ForeignKey(
        MerchandiseItem, on_delete=models.SET_NULL, null=True, blank=True, related_name="orders"
    )
    item_name = models.CharField(max_length=255, blank=True, default="")
    item_size = models.CharField(max_length=50, blank=True, default="")
    item_color = models.CharField(max_length=50, blank=True, default="")
    item_variant = models.CharField(max_length=100, blank=True, default="")
    quantity = models.PositiveIntegerField(default=1)
    price_at_purchase = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True)
    amount_due = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0"))

    payment_proof_url = models.URLField(max_length=1000, blank=True, default="")
    cancelled_at = models.DateTimeField(null=True, blank=True)

    attendance_marked = models.BooleanField(default=False)
    attendance_marked_at = models.DateTimeField(null=True, blank=True)

    objects = RegistrationQuerySet.as_manager()

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=["participant", "event"], name="unique_participant_event"),
            models.CheckConstraint(condition=Q(quantity__gte=1), name="registration_quantity_positive"),
            models.CheckConstraint(condition=Q(amount_due__gte=0), name="registration_amount_non_negative"),
        ]
        indexes = [
            models.Index(fields=["event", "payment_status"], name="idx_reg_event_payment"),
            models.Index(fields=["event", "status"], name="idx_reg_event_status"),
        ]
        ordering = ["-created_at"]

    def __str__(self) -> str:
        return f"{self.participant_id} @ {self.event_id} ({self.status}/{self.payment_status})"

    def save(self, *args: t.Any, **kwargs: t.Any) -> None:
        """Validate fields but leave (participant, event) uniqueness to the database constraint."""
        self.full_clean(validate_unique=False, validate_constraints=False)
        models.Model.save(self, *args, **kwargs)

    @property
    def is_ticketed(self) -> bool:
        return self.ticket_id is not None

    @property
    def holds_stock(self) -> bool:
        """Only fulfilled merchandise orders have committed inventory."""
        return (
            self.kind == Event.Kind.MERCHANDISE
            and self.item_id is not None
            and self.payment_status in self.STOCK_HOLDING_PAYMENT_STATUSES
        )


class AttendanceAudit(TimeStampedModel):
    """Append-only record of every attendance change."""

    class Action(models.TextChoices):
        SCAN = "scan", "Scan"
        MARK = "mark", "Manual mark"
        UNMARK = "unmark", "Manual unmark"

    registration = models.ForeignKey(Registration, on_delete=models.CASCADE, related_name="attendance_audits")
    actor = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name="+"
    )
    action = models.CharField(max_length=10, choices=Action.choices)
    marked = models.BooleanField(help_text="The attendance flag after this change.")
    reason = models.TextField(blank=True, default="")

    class Meta:
        ordering = ["created_at"]

    def __str__(self) -> str:
        return f"{self.action} on {self.registration_id} by {self.actor_id}"

    def save(self, *args: t.Any, **kwargs: t.Any) -> None:
        """Audit rows are written once."""
        if not self._state.adding:
            raise ValueError("Attendance audit records are append-only.")
        super().save(*args, **kwargs)
