"""Shared fixtures for notification tests."""

from datetime import timedelta

import pytest
from django.utils import timezone

from accounts.models import FelicityUser
from notifications.enums import NotificationType
from notifications.models import Notification
from notifications.service import notify


@pytest.fixture
def notifications(participant: FelicityUser) -> list[Notification]:
    """Two unread notifications and one read one, oldest first."""
    created = [
        notify(participant.pk, NotificationType.REGISTRATION_CONFIRMED, "Registered", "You are in."),
        notify(participant.pk, NotificationType.PAYMENT_APPROVED, "Approved", "Payment approved."),
        notify(participant.pk, NotificationType.EVENT_PUBLISHED, "Published", "A new event is live."),
    ]
    result = [n for n in created if n is not None]
    base_time = timezone.now() - timedelta(hours=1)
    for i, notification in enumerate(result):
        # Use QuerySet.update to bypass auto_now_add
        Notification.objects.filter(pk=notification.pk).update(created_at=base_time + timedelta(minutes=i))
        notification.refresh_from_db()
    result[2].mark_read()
    return result
