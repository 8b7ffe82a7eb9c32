"""Event lifecycle controller.

Drives Draft -> Published -> Ongoing -> Closed -> Completed and enforces the per-state edit rules.
Every status change goes through ``event_store.transition_status`` keyed on the status observed
by the caller, so manual actions and the periodic sweep can run concurrently.
"""

import copy
import typing as t
from dataclasses import dataclass, field
from decimal import Decimal
from uuid import UUID

import structlog
from django.conf import settings
from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import transaction
from django.utils import timezone

from accounts import roles
from accounts.models import FelicityUser
from events.exceptions import ForbiddenError, InvalidStateError, ValidationFailedError
from events.models import DomainEvent, Event, FormField, MerchandiseItem

from . import event_store, outbox

logger = structlog.get_logger(__name__)

Status = Event.Status

DRAFT_EDITABLE_FIELDS = frozenset(
    {
        "name",
        "description",
        "location",
        "tags",
        "kind",
        "start",
        "end",
        "registration_deadline",
        "registration_fee",
        "eligibility",
        "registration_limit",
        "purchase_limit_per_participant",
    }
)
PUBLISHED_EDITABLE_FIELDS = frozenset({"description", "registration_deadline", "registration_limit"})

TRANSITION_EVENTS = {
    Status.PUBLISHED: DomainEvent.Kind.EVENT_PUBLISHED,
    Status.ONGOING: DomainEvent.Kind.EVENT_STARTED,
    Status.CLOSED: DomainEvent.Kind.EVENT_CLOSED,
    Status.COMPLETED: DomainEvent.Kind.EVENT_COMPLETED,
}


@dataclass
class PromotionResult:
    started: list[UUID] = field(default_factory=list)
    completed: list[UUID] = field(default_factory=list)


def _validation_errors(e: DjangoValidationError) -> dict[str, list[str]]:
    if hasattr(e, "error_dict"):
        return {k: [str(m) for err in v for m in err.messages] for k, v in e.error_dict.items()}
    return {"__all__": [str(m) for m in e.messages]}


def _full_clean(instance: t.Any, **kwargs: t.Any) -> None:
    try:
        instance.full_clean(**kwargs)
    except DjangoValidationError as e:
        raise ValidationFailedError("Invalid event data.", errors=_validation_errors(e)) from e


def get_owned_event(organizer: FelicityUser, event_id: UUID) -> Event:
    """Load an event the caller is allowed to manage."""
    event = event_store.get_event(event_id)
    if not roles.can_manage_event(organizer, event):
        raise ForbiddenError("Only the organizer of this event can manage it.")
    return event


def _replace_items(event: Event, items: list[dict[str, t.Any]]) -> None:
    event.items.all().delete()
    for order, item in enumerate(items):
        merch = MerchandiseItem(event=event, order=order, **item)
        _full_clean(merch)
        merch.save()


def _replace_form_fields(event: Event, form_fields: list[dict[str, t.Any]]) -> None:
    event.form_fields.all().delete()
    labels: set[str] = set()
    for order, form_field in enumerate(form_fields):
        label = form_field.get("label", "")
        if label in labels:
            raise ValidationFailedError("Duplicate form field label.", errors={"form_fields": [f"'{label}' repeats."]})
        labels.add(label)
        obj = FormField(event=event, order=order, **form_field)
        _full_clean(obj)
        obj.save()


@transaction.atomic
def create_event(organizer: FelicityUser, data: dict[str, t.Any]) -> Event:
    """Create a Draft event with its merchandise items and custom form."""
    if not roles.is_organizer(organizer):
        raise ForbiddenError("Only organizers can create events.")
    data = dict(data)
    items = data.pop("items", None) or []
    form_fields = data.pop("form_fields", None) or []
    unknown = set(data) - DRAFT_EDITABLE_FIELDS
    if unknown:
        raise ValidationFailedError(errors={name: ["This field cannot be set."] for name in sorted(unknown)})
    if data.get("kind") == Event.Kind.MERCHANDISE:
        data["registration_fee"] = Decimal("0")
    event = Event(organizer=organizer, **data)
    _full_clean(event)
    event.save()
    _replace_items(event, items)
    _replace_form_fields(event, form_fields)
    logger.info("event_created", event_id=str(event.pk), kind=event.kind)
    return event


def update_event(organizer: FelicityUser, event_id: UUID, data: dict[str, t.Any]) -> Event:
    """Apply an organizer edit under the rules of the event's current status."""
    event = get_owned_event(organizer, event_id)
    if event.status == Status.DRAFT:
        return _update_draft(event, dict(data))
    if event.status == Status.PUBLISHED:
        return _update_published(event, dict(data))
    raise InvalidStateError(f"A {event.status} event can no longer be edited.", status=event.status)


@transaction.atomic
def _update_draft(event: Event, data: dict[str, t.Any]) -> Event:
    items = data.pop("items", None)
    form_fields = data.pop("form_fields", None)
    unknown = set(data) - DRAFT_EDITABLE_FIELDS
    if unknown:
        raise ValidationFailedError(errors={name: ["This field cannot be edited."] for name in sorted(unknown)})
    if form_fields is not None and event.form_locked:
        raise ValidationFailedError(
            "The registration form is locked.", errors={"form_fields": ["Locked after the first registration."]}
        )

    candidate = copy.copy(event)
    for name, value in data.items():
        setattr(candidate, name, value)
    if candidate.kind == Event.Kind.MERCHANDISE:
        candidate.registration_fee = Decimal("0")
        data["registration_fee"] = Decimal("0")
    _full_clean(candidate, validate_unique=False)

    if not event_store.apply_edits(event.pk, Status.DRAFT, data, guards={"updated_at": event.updated_at}):
        raise InvalidStateError("The event changed while it was being edited; reload and retry.")
    if items is not None:
        _replace_items(event, items)
    if form_fields is not None:
        _replace_form_fields(event, form_fields)
    logger.info("event_updated", event_id=str(event.pk), status=Status.DRAFT, fields=sorted(data))
    return event_store.get_event(event.pk)


def _update_published(event: Event, data: dict[str, t.Any]) -> Event:
    changes: dict[str, t.Any] = {}
    errors: dict[str, list[str]] = {}
    for name, value in data.items():
        current = getattr(event, name, None)
        if name not in PUBLISHED_EDITABLE_FIELDS:
            if value != current:
                errors[name] = ["Cannot be changed once the event is published."]
            continue
        if value == current:
            continue
        if name == "description":
            changes[name] = value
        elif name == "registration_deadline":
            if value is None or (current is not None and value < current):
                errors[name] = ["The deadline can only be extended."]
            elif event.end is not None and value > event.end:
                errors[name] = ["The deadline must not be after the end date."]
            else:
                changes[name] = value
        elif name == "registration_limit":
            # None means unlimited, which is always an increase
            if value is not None and (current is None or value < current):
                errors[name] = ["The registration limit can only be increased."]
            else:
                changes[name] = value
    if errors:
        raise ValidationFailedError("Invalid edit for a published event.", errors=errors)
    if not changes:
        return event

    guards = {name: getattr(event, name) for name in changes}
    if not event_store.apply_edits(event.pk, Status.PUBLISHED, changes, guards=guards):
        raise InvalidStateError("The event changed while it was being edited; reload and retry.")
    logger.info("event_updated", event_id=str(event.pk), status=Status.PUBLISHED, fields=sorted(changes))
    return event_store.get_event(event.pk)


def _publish_errors(event: Event) -> dict[str, list[str]]:
    errors: dict[str, list[str]] = {}
    for name in ("start", "end", "registration_deadline"):
        if getattr(event, name) is None:
            errors[name] = ["Required to publish."]
    start, end, deadline = event.start, event.end, event.registration_deadline
    if start and end and start >= end:
        errors["end"] = ["End date must be after start date."]
    if deadline and end and deadline > end:
        errors["registration_deadline"] = ["Registration deadline must not be after the end date."]
    if event.is_merchandise:
        items = list(event.items.all())
        if not items:
            errors["items"] = ["A merchandise event needs at least one item."]
        for item in items:
            if item.price <= 0:
                errors.setdefault("items", []).append(f"{item} needs a positive price.")
            if item.stock_quantity < 0:
                errors.setdefault("items", []).append(f"{item} has negative stock.")
    return errors


@transaction.atomic
def publish(organizer: FelicityUser, event_id: UUID) -> Event:
    """Publish a Draft once its dates and catalogue are complete.

    A registration deadline already in the past, or equal to the end date, is accepted.
    """
    event = get_owned_event(organizer, event_id)
    if event.status != Status.DRAFT:
        raise InvalidStateError("Only draft events can be published.", status=event.status)
    errors = _publish_errors(event)
    if errors:
        raise ValidationFailedError("The event is not ready to be published.", errors=errors)
    if not event_store.transition_status(
        event.pk, Status.DRAFT, Status.PUBLISHED, guards={"updated_at": event.updated_at}
    ):
        raise InvalidStateError("The event changed while it was being published; reload and retry.")
    outbox.emit(DomainEvent.Kind.EVENT_PUBLISHED, event_id=event.pk)
    return event_store.get_event(event.pk)


def _move_to(organizer: FelicityUser, event_id: UUID, to_status: str, allowed_from: tuple[str, ...]) -> Event:
    event = get_owned_event(organizer, event_id)
    status = event.status
    for _attempt in range(settings.LIFECYCLE_CAS_MAX_ATTEMPTS):
        if status not in allowed_from:
            raise InvalidStateError(f"A {status} event cannot be moved to {to_status}.", status=status)
        with transaction.atomic():
            if event_store.transition_status(event.pk, status, to_status):
                outbox.emit(TRANSITION_EVENTS[to_status], event_id=event.pk)
                return event_store.get_event(event.pk)
        # lost to a concurrent transition (usually the sweep); decide again on the fresh status
        status = event_store.get_event(event.pk).status
    raise InvalidStateError("The event kept changing state; retry.", status=status)


def close(organizer: FelicityUser, event_id: UUID) -> Event:
    """Stop registrations. Valid from Published or Ongoing."""
    return _move_to(organizer, event_id, Status.CLOSED, (Status.PUBLISHED, Status.ONGOING))


def complete(organizer: FelicityUser, event_id: UUID) -> Event:
    """Mark the event as completed. Valid from Ongoing or Closed."""
    return _move_to(organizer, event_id, Status.COMPLETED, (Status.ONGOING, Status.CLOSED))


def delete(organizer: FelicityUser, event_id: UUID) -> None:
    """Delete a Draft event."""
    event = get_owned_event(organizer, event_id)
    if event.status != Status.DRAFT:
        raise InvalidStateError("Only draft events can be deleted.", status=event.status)
    deleted, _ = Event.objects.filter(pk=event.pk, status=Status.DRAFT).delete()
    if not deleted:
        raise InvalidStateError("The event is no longer a draft.")
    logger.info("event_deleted", event_id=str(event.pk))


def promote_due_events(now: t.Any = None) -> PromotionResult:
    """Apply time-driven transitions. Safe to run repeatedly and concurrently.

    Published -> Ongoing once ``start <= now < end``; Published/Ongoing -> Completed once ``now >= end``.
    """
    now = now or timezone.now()
    result = PromotionResult()
    for event_id, status in Event.objects.due_for_completion(now).values_list("pk", "status"):
        with transaction.atomic():
            if event_store.transition_status(event_id, status, Status.COMPLETED):
                outbox.emit(DomainEvent.Kind.EVENT_COMPLETED, event_id=event_id)
                result.completed.append(event_id)
    for event_id in Event.objects.due_for_start(now).values_list("pk", flat=True):
        with transaction.atomic():
            if event_store.transition_status(event_id, Status.PUBLISHED, Status.ONGOING):
                outbox.emit(DomainEvent.Kind.EVENT_STARTED, event_id=event_id)
                result.started.append(event_id)
    if result.started or result.completed:
        logger.info("events_promoted", started=len(result.started), completed=len(result.completed))
    return result
