import typing as t
from datetime import timedelta
from decimal import Decimal

import pytest
from django.utils import timezone

from accounts.models import FelicityUser
from events.models import Event, FormField, MerchandiseItem, Registration
from events.service import registration_service
from events.service.registration_service import OrderRequest


class EventFactory:
    """Builds events relative to now. Published by default, registration open."""

    def __init__(self, organizer: FelicityUser) -> None:
        self.organizer = organizer

    def __call__(self, **kwargs: t.Any) -> Event:
        now = timezone.now()
        defaults: dict[str, t.Any] = {
            "name": "Battle of Bands",
            "description": "Annual music competition.",
            "location": "Amphitheatre",
            "status": Event.Status.PUBLISHED,
            "start": now + timedelta(days=7),
            "end": now + timedelta(days=7, hours=4),
            "registration_deadline": now + timedelta(days=6),
        }
        defaults.update(kwargs)
        organizer = defaults.pop("organizer", self.organizer)
        return Event.objects.create(organizer=organizer, **defaults)


@pytest.fixture
def event_factory(organizer: FelicityUser) -> EventFactory:
    return EventFactory(organizer)


@pytest.fixture
def draft_event(event_factory: EventFactory) -> Event:
    return event_factory(name="Draft Jam", status=Event.Status.DRAFT)


@pytest.fixture
def free_event(event_factory: EventFactory) -> Event:
    return event_factory(name="Open Mic")


@pytest.fixture
def limited_event(event_factory: EventFactory) -> Event:
    return event_factory(name="Workshop", registration_limit=1)


@pytest.fixture
def paid_event(event_factory: EventFactory) -> Event:
    return event_factory(name="Gala Night", registration_fee=Decimal("100"))


@pytest.fixture
def merch_event(event_factory: EventFactory) -> Event:
    return event_factory(name="Fest Merch", kind=Event.Kind.MERCHANDISE, purchase_limit_per_participant=3)


@pytest.fixture
def tshirt(merch_event: Event) -> MerchandiseItem:
    return MerchandiseItem.objects.create(
        event=merch_event, name="T-Shirt", size="M", color="Black", stock_quantity=5, price=Decimal("250")
    )


@pytest.fixture
def free_sticker(merch_event: Event) -> MerchandiseItem:
    """Free items cannot be published through the api; they exist for giveaway fixtures."""
    return MerchandiseItem.objects.create(
        event=merch_event, name="Sticker", stock_quantity=1, price=Decimal("0"), order=1
    )


@pytest.fixture
def form_event(event_factory: EventFactory) -> Event:
    event = event_factory(name="Hackathon")
    FormField.objects.create(event=event, label="Team name", field_type=FormField.FieldType.TEXT, is_required=True)
    FormField.objects.create(
        event=event,
        label="Track",
        field_type=FormField.FieldType.DROPDOWN,
        options=["AI", "Web", "Systems"],
        is_required=True,
        order=1,
    )
    FormField.objects.create(
        event=event, label="Team size", field_type=FormField.FieldType.NUMBER, min_value=1, max_value=4, order=2
    )
    return event


@pytest.fixture
def free_registration(participant: FelicityUser, free_event: Event) -> Registration:
    return registration_service.register(participant, free_event.pk)


@pytest.fixture
def pending_registration(participant: FelicityUser, paid_event: Event) -> Registration:
    return registration_service.register(participant, paid_event.pk)


@pytest.fixture
def pending_order(participant: FelicityUser, merch_event: Event, tshirt: MerchandiseItem) -> Registration:
    return registration_service.register(participant, merch_event.pk, order=OrderRequest(tshirt.pk, 2))
