"""Enums for the notification system."""

from django.db.models import TextChoices


class NotificationType(TextChoices):
    """All notification types in the system."""

    REGISTRATION_CONFIRMED = "registration_confirmed"
    REGISTRATION_PENDING_PAYMENT = "registration_pending_payment"
    REGISTRATION_CANCELLED = "registration_cancelled"
    PAYMENT_PROOF_SUBMITTED = "payment_proof_submitted"
    PAYMENT_APPROVED = "payment_approved"
    PAYMENT_REJECTED = "payment_rejected"
    EVENT_PUBLISHED = "event_published"
    EVENT_STARTED = "event_started"
    EVENT_CLOSED = "event_closed"
    EVENT_COMPLETED = "event_completed"
