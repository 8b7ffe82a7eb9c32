"""Notification sink.

``notify`` is fire-and-forget: a failure to persist a notification is logged and never
propagated to the operation that triggered it.
"""

import typing as t
from uuid import UUID

import structlog
from django.db import DatabaseError, transaction

from notifications.enums import NotificationType
from notifications.models import Notification

logger = structlog.get_logger(__name__)


def notify(
    user_id: UUID | str,
    kind: NotificationType | str,
    title: str,
    body: str,
    context: dict[str, t.Any] | None = None,
) -> Notification | None:
    """Create an in-app notification for a user.

    Returns:
        The notification, or None if it could not be stored.
    """
    try:
        with transaction.atomic():
            notification = Notification.objects.create(
                user_id=user_id, notification_type=kind, title=title[:255], body=body, context=context or {}
            )
    except DatabaseError:
        logger.exception("notification_failed", user_id=str(user_id), notification_type=str(kind))
        return None
    logger.info(
        "notification_created",
        notification_id=str(notification.pk),
        user_id=str(user_id),
        notification_type=str(kind),
    )
    return notification
