"""Celery tasks for the registration engine.

- the periodic lifecycle sweep
- delivery and redelivery of domain events
- ticket e-mails
"""

import typing as t

import structlog
from celery import shared_task
from django.conf import settings
from django.core.mail import EmailMultiAlternatives
from django.template.loader import render_to_string

from .models import Registration
from .service import lifecycle, outbox, tickets

logger = structlog.get_logger(__name__)


@shared_task(name="events.tasks.promote_due_events")
def promote_due_events() -> dict[str, int]:
    """Move due events to Ongoing or Completed."""
    result = lifecycle.promote_due_events()
    return {"started": len(result.started), "completed": len(result.completed)}


@shared_task(name="events.tasks.dispatch_domain_event")
def dispatch_domain_event(domain_event_id: str) -> bool:
    """Deliver one domain event. Failures stay pending for the redispatch sweep."""
    return outbox.dispatch(domain_event_id)


@shared_task(name="events.tasks.redispatch_pending_domain_events")
def redispatch_pending_domain_events() -> int:
    return outbox.redispatch_pending()


@shared_task(name="events.tasks.send_ticket_email")
def send_ticket_email(registration_id: str) -> None:
    """Send the ticket with its QR code to the registrant.

    Runs after the ticket has been committed. A failed send is logged and not retried.
    """
    registration = (
        Registration.objects.with_event().filter(pk=registration_id, ticket_id__isnull=False).first()
    )
    if registration is None:
        logger.warning("ticket_email_skipped", registration_id=registration_id)
        return
    participant = registration.participant
    context: dict[str, t.Any] = {
        "registration": registration,
        "event": registration.event,
        "participant": participant,
        "tickets_url": f"{settings.FRONTEND_BASE_URL}/tickets/{registration.ticket_id}",
    }
    email_msg = EmailMultiAlternatives(
        subject=f"Your ticket for {registration.event.name}",
        body=render_to_string("events/emails/ticket.txt", context),
        from_email=settings.DEFAULT_FROM_EMAIL,
        to=[participant.email],
    )
    email_msg.attach_alternative(render_to_string("events/emails/ticket.html", context), "text/html")
    email_msg.attach(f"{registration.ticket_id}.png", tickets.render_qr_png(registration.qr_payload), "image/png")
    try:
        email_msg.send(fail_silently=False)
    except Exception:
        logger.exception("ticket_email_failed", registration_id=registration_id)
        return
    logger.info("ticket_email_sent", registration_id=registration_id, ticket_id=registration.ticket_id)
