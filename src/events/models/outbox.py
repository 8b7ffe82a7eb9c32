import typing as t

from django.db import models

from common.models import TimeStampedModel


class DomainEventQuerySet(models.QuerySet["DomainEvent"]):
    def pending(self) -> t.Self:
        return self.filter(dispatched_at__isnull=True)


class DomainEvent(TimeStampedModel):
    """A state change recorded alongside the write that caused it.

    Delivery (notifications, e-mail) is done by ``events.tasks.dispatch_domain_event``
    after the surrounding transaction commits, and retried by the periodic redispatch.
    """

    class Kind(models.TextChoices):
        REGISTRATION_CREATED = "registration_created", "Registration created"
        REGISTRATION_CANCELLED = "registration_cancelled", "Registration cancelled"
        PAYMENT_PROOF_SUBMITTED = "payment_proof_submitted", "Payment proof submitted"
        PAYMENT_APPROVED = "payment_approved", "Payment approved"
        PAYMENT_REJECTED = "payment_rejected", "Payment rejected"
        EVENT_PUBLISHED = "event_published", "Event published"
        EVENT_STARTED = "event_started", "Event started"
        EVENT_CLOSED = "event_closed", "Event closed"
        EVENT_COMPLETED = "event_completed", "Event completed"

    kind = models.CharField(max_length=40, choices=Kind.choices, db_index=True)
    payload = models.JSONField(default=dict)
    dispatched_at = models.DateTimeField(null=True, blank=True, db_index=True)
    attempts = models.PositiveIntegerField(default=0)
    last_error = models.TextField(blank=True, default="")

    objects = DomainEventQuerySet.as_manager()

    class Meta:
        ordering = ["created_at"]
        indexes = [models.Index(fields=["dispatched_at", "created_at"], name="idx_domain_event_pending")]

    def __str__(self) -> str:
        return f"{self.kind} ({'dispatched' if self.dispatched_at else 'pending'})"
