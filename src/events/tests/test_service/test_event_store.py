import typing as t
from decimal import Decimal
from uuid import uuid4

import pytest

from events.exceptions import (
    EventNotFoundError,
    InsufficientStockError,
    InvalidStateError,
    ItemNotFoundError,
    RegistrationLimitReachedError,
    ValidationFailedError,
)
from events.models import Event, MerchandiseItem
from events.service import event_store

pytestmark = pytest.mark.django_db


def test_get_event_missing() -> None:
    with pytest.raises(EventNotFoundError):
        event_store.get_event(uuid4())


def test_get_item_of_another_event(tshirt: MerchandiseItem, free_event: Event) -> None:
    with pytest.raises(ItemNotFoundError):
        event_store.get_item(free_event.pk, tshirt.pk)


class TestStock:
    def test_decrement_returns_remaining(self, tshirt: MerchandiseItem) -> None:
        assert event_store.conditional_decrement_stock(tshirt.event_id, tshirt.pk, 2) == 3

    def test_decrement_to_zero(self, tshirt: MerchandiseItem) -> None:
        assert event_store.conditional_decrement_stock(tshirt.event_id, tshirt.pk, 5) == 0

    def test_decrement_beyond_stock_changes_nothing(self, tshirt: MerchandiseItem) -> None:
        with pytest.raises(InsufficientStockError) as exc_info:
            event_store.conditional_decrement_stock(tshirt.event_id, tshirt.pk, 6)

        assert exc_info.value.context["available"] == 5
        tshirt.refresh_from_db()
        assert tshirt.stock_quantity == 5

    def test_decrement_uses_current_stock_not_snapshot(self, tshirt: MerchandiseItem) -> None:
        """A stale in-memory item must not let two decrements oversell."""
        stale = MerchandiseItem.objects.get(pk=tshirt.pk)
        event_store.conditional_decrement_stock(tshirt.event_id, tshirt.pk, 4)

        assert stale.stock_quantity == 5
        with pytest.raises(InsufficientStockError):
            event_store.conditional_decrement_stock(stale.event_id, stale.pk, 2)
        tshirt.refresh_from_db()
        assert tshirt.stock_quantity == 1

    @pytest.mark.parametrize("quantity", [0, -1])
    def test_decrement_non_positive_quantity(self, tshirt: MerchandiseItem, quantity: int) -> None:
        with pytest.raises(ValidationFailedError):
            event_store.conditional_decrement_stock(tshirt.event_id, tshirt.pk, quantity)

    def test_increment(self, tshirt: MerchandiseItem) -> None:
        assert event_store.increment_stock(tshirt.event_id, tshirt.pk, 3) == 8

    def test_increment_unknown_item(self, tshirt: MerchandiseItem) -> None:
        with pytest.raises(ItemNotFoundError):
            event_store.increment_stock(tshirt.event_id, uuid4(), 1)


class TestRegistrationSlots:
    def test_claim_until_limit(self, limited_event: Event) -> None:
        event_store.claim_registration_slot(limited_event.pk)

        with pytest.raises(RegistrationLimitReachedError):
            event_store.claim_registration_slot(limited_event.pk)
        limited_event.refresh_from_db()
        assert limited_event.registration_count == 1

    def test_unlimited(self, free_event: Event) -> None:
        for _ in range(3):
            event_store.claim_registration_slot(free_event.pk)
        free_event.refresh_from_db()
        assert free_event.registration_count == 3

    def test_claim_requires_open_status(self, event_factory: t.Callable[..., Event]) -> None:
        closed = event_factory(status=Event.Status.CLOSED)

        with pytest.raises(InvalidStateError):
            event_store.claim_registration_slot(closed.pk, open_statuses=Event.REGISTRATION_OPEN_STATUSES)
        closed.refresh_from_db()
        assert closed.registration_count == 0

    def test_release_never_goes_negative(self, free_event: Event) -> None:
        assert event_store.release_registration_slot(free_event.pk) is False
        free_event.refresh_from_db()
        assert free_event.registration_count == 0

    def test_release_after_claim(self, limited_event: Event) -> None:
        event_store.claim_registration_slot(limited_event.pk)
        assert event_store.release_registration_slot(limited_event.pk) is True
        event_store.claim_registration_slot(limited_event.pk)


class TestRevenue:
    def test_adjust(self, paid_event: Event) -> None:
        event_store.adjust_revenue(paid_event.pk, Decimal("100"))
        event_store.adjust_revenue(paid_event.pk, Decimal("-40"))
        paid_event.refresh_from_db()
        assert paid_event.total_revenue == Decimal("60")

    def test_zero_delta_is_noop(self, paid_event: Event) -> None:
        event_store.adjust_revenue(paid_event.pk, Decimal("0"))
        paid_event.refresh_from_db()
        assert paid_event.total_revenue == Decimal("0")

    def test_unknown_event(self) -> None:
        with pytest.raises(EventNotFoundError):
            event_store.adjust_revenue(uuid4(), Decimal("1"))


class TestTransitions:
    def test_transition_applies_once(self, draft_event: Event) -> None:
        assert event_store.transition_status(draft_event.pk, Event.Status.DRAFT, Event.Status.PUBLISHED)
        assert not event_store.transition_status(draft_event.pk, Event.Status.DRAFT, Event.Status.PUBLISHED)
        draft_event.refresh_from_db()
        assert draft_event.status == Event.Status.PUBLISHED

    def test_transition_not_in_table(self, free_event: Event) -> None:
        with pytest.raises(InvalidStateError):
            event_store.transition_status(free_event.pk, Event.Status.PUBLISHED, Event.Status.DRAFT)

    def test_transition_with_stale_guard(self, draft_event: Event) -> None:
        assert not event_store.transition_status(
            draft_event.pk, Event.Status.DRAFT, Event.Status.PUBLISHED, guards={"name": "something else"}
        )

    def test_lock_form_once(self, free_event: Event) -> None:
        assert event_store.lock_form(free_event.pk) is True
        assert event_store.lock_form(free_event.pk) is False

    def test_apply_edits_requires_expected_status(self, free_event: Event) -> None:
        assert not event_store.apply_edits(free_event.pk, Event.Status.DRAFT, {"description": "x"})
        assert event_store.apply_edits(free_event.pk, Event.Status.PUBLISHED, {"description": "x"})
        free_event.refresh_from_db()
        assert free_event.description == "x"
