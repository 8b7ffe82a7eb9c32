import typing as t
from decimal import Decimal
from unittest.mock import patch

import pytest

from accounts.models import FelicityUser
from events.exceptions import (
    AlreadyTicketedError,
    ForbiddenError,
    InsufficientStockError,
    InvalidStateError,
    TransientStoreError,
)
from events.models import DomainEvent, Event, MerchandiseItem, Registration
from events.service import event_store, payment_service, registration_service, registration_store
from events.service.registration_service import OrderRequest

pytestmark = pytest.mark.django_db

PaymentStatus = Registration.PaymentStatus


class TestApprove:
    def test_approve_paid_event(
        self, organizer: FelicityUser, paid_event: Event, pending_registration: Registration
    ) -> None:
        approved = payment_service.approve(organizer, pending_registration.pk)

        assert approved.payment_status == PaymentStatus.PAID
        assert approved.ticket_id is not None
        paid_event.refresh_from_db()
        assert paid_event.total_revenue == Decimal("100")
        assert DomainEvent.objects.filter(kind=DomainEvent.Kind.PAYMENT_APPROVED).count() == 1

    def test_approve_order_takes_stock(
        self, organizer: FelicityUser, merch_event: Event, tshirt: MerchandiseItem, pending_order: Registration
    ) -> None:
        payment_service.approve(organizer, pending_order.pk)

        tshirt.refresh_from_db()
        merch_event.refresh_from_db()
        assert tshirt.stock_quantity == 3
        assert merch_event.total_revenue == Decimal("500")

    def test_double_approve(
        self, organizer: FelicityUser, paid_event: Event, pending_registration: Registration
    ) -> None:
        first = payment_service.approve(organizer, pending_registration.pk)

        with pytest.raises(AlreadyTicketedError):
            payment_service.approve(organizer, pending_registration.pk)

        paid_event.refresh_from_db()
        pending_registration.refresh_from_db()
        assert paid_event.total_revenue == Decimal("100")
        assert pending_registration.ticket_id == first.ticket_id

    def test_double_approve_order_takes_stock_once(
        self, organizer: FelicityUser, tshirt: MerchandiseItem, pending_order: Registration
    ) -> None:
        payment_service.approve(organizer, pending_order.pk)

        with pytest.raises(AlreadyTicketedError):
            payment_service.approve(organizer, pending_order.pk)
        tshirt.refresh_from_db()
        assert tshirt.stock_quantity == 3

    def test_approve_stale_snapshot_takes_stock_once(
        self, organizer: FelicityUser, tshirt: MerchandiseItem, pending_order: Registration
    ) -> None:
        """A second approver that read the registration before the first one committed."""
        stale = Registration.objects.get(pk=pending_order.pk)
        payment_service.approve(organizer, pending_order.pk)

        with patch("events.service.payment_service._reviewable", return_value=stale):
            with pytest.raises(AlreadyTicketedError):
                payment_service.approve(organizer, pending_order.pk)

        tshirt.refresh_from_db()
        assert tshirt.stock_quantity == 3

    def test_concurrent_approval_of_last_units_reports_already_ticketed(
        self, organizer: FelicityUser, merch_event: Event, tshirt: MerchandiseItem, pending_order: Registration
    ) -> None:
        """The other approver has claimed the ticket but not yet taken the last units."""
        MerchandiseItem.objects.filter(pk=tshirt.pk).update(stock_quantity=2)
        stale = Registration.objects.get(pk=pending_order.pk)
        registration_store.issue_ticket(pending_order.pk, PaymentStatus.PENDING_APPROVAL, PaymentStatus.PAID)

        with patch("events.service.payment_service._reviewable", return_value=stale):
            with pytest.raises(AlreadyTicketedError):
                payment_service.approve(organizer, pending_order.pk)

        tshirt.refresh_from_db()
        merch_event.refresh_from_db()
        assert tshirt.stock_quantity == 2
        assert merch_event.total_revenue == Decimal("0")

    def test_stock_taken_mid_approval_rolls_back_ticket(
        self, organizer: FelicityUser, merch_event: Event, tshirt: MerchandiseItem, pending_order: Registration
    ) -> None:
        stale = Registration.objects.get(pk=pending_order.pk)
        event_store.conditional_decrement_stock(merch_event.pk, tshirt.pk, 4)

        with patch("events.service.payment_service._reviewable", return_value=stale):
            with pytest.raises(InsufficientStockError):
                payment_service.approve(organizer, pending_order.pk)

        pending_order.refresh_from_db()
        tshirt.refresh_from_db()
        merch_event.refresh_from_db()
        assert pending_order.payment_status == PaymentStatus.PENDING_APPROVAL
        assert pending_order.ticket_id is None
        assert tshirt.stock_quantity == 1
        assert merch_event.total_revenue == Decimal("0")
        assert not DomainEvent.objects.filter(kind=DomainEvent.Kind.PAYMENT_APPROVED).exists()

    def test_insufficient_stock_leaves_order_pending(
        self, organizer: FelicityUser, tshirt: MerchandiseItem, pending_order: Registration
    ) -> None:
        MerchandiseItem.objects.filter(pk=tshirt.pk).update(stock_quantity=1)

        with pytest.raises(InsufficientStockError):
            payment_service.approve(organizer, pending_order.pk)

        pending_order.refresh_from_db()
        tshirt.refresh_from_db()
        assert pending_order.payment_status == PaymentStatus.PENDING_APPROVAL
        assert pending_order.ticket_id is None
        assert tshirt.stock_quantity == 1

    def test_last_unit_goes_to_one_order(
        self,
        organizer: FelicityUser,
        participant: FelicityUser,
        other_participant: FelicityUser,
        merch_event: Event,
        tshirt: MerchandiseItem,
    ) -> None:
        MerchandiseItem.objects.filter(pk=tshirt.pk).update(stock_quantity=1)
        first = registration_service.register(participant, merch_event.pk, order=OrderRequest(tshirt.pk))
        second = registration_service.register(other_participant, merch_event.pk, order=OrderRequest(tshirt.pk))

        payment_service.approve(organizer, first.pk)
        with pytest.raises(InsufficientStockError):
            payment_service.approve(organizer, second.pk)

        tshirt.refresh_from_db()
        merch_event.refresh_from_db()
        assert tshirt.stock_quantity == 0
        assert merch_event.total_revenue == Decimal("250")

    def test_ticket_failure_leaves_stock(
        self, organizer: FelicityUser, merch_event: Event, tshirt: MerchandiseItem, pending_order: Registration
    ) -> None:
        with patch(
            "events.service.registration_store.issue_ticket", side_effect=TransientStoreError("no ticket ids")
        ):
            with pytest.raises(TransientStoreError):
                payment_service.approve(organizer, pending_order.pk)

        tshirt.refresh_from_db()
        merch_event.refresh_from_db()
        assert tshirt.stock_quantity == 5
        assert merch_event.total_revenue == Decimal("0")

    def test_approve_rejected(self, organizer: FelicityUser, pending_registration: Registration) -> None:
        payment_service.reject(organizer, pending_registration.pk)

        approved = payment_service.approve(organizer, pending_registration.pk)

        assert approved.payment_status == PaymentStatus.PAID
        assert approved.ticket_id is not None

    def test_free_registration_not_approvable(self, organizer: FelicityUser, free_registration: Registration) -> None:
        with pytest.raises(AlreadyTicketedError):
            payment_service.approve(organizer, free_registration.pk)

    def test_cancelled_not_approvable(
        self, organizer: FelicityUser, participant: FelicityUser, pending_registration: Registration
    ) -> None:
        registration_service.cancel(participant, pending_registration.pk)

        with pytest.raises(InvalidStateError):
            payment_service.approve(organizer, pending_registration.pk)

    def test_other_organizer(self, other_organizer: FelicityUser, pending_registration: Registration) -> None:
        with pytest.raises(ForbiddenError):
            payment_service.approve(other_organizer, pending_registration.pk)


class TestReject:
    def test_reject(self, organizer: FelicityUser, paid_event: Event, pending_registration: Registration) -> None:
        rejected = payment_service.reject(organizer, pending_registration.pk)

        assert rejected.payment_status == PaymentStatus.REJECTED
        assert rejected.status == Registration.Status.ACTIVE
        assert rejected.ticket_id is None
        paid_event.refresh_from_db()
        assert paid_event.registration_count == 1
        assert DomainEvent.objects.filter(kind=DomainEvent.Kind.PAYMENT_REJECTED).count() == 1

    def test_reject_keeps_stock(
        self, organizer: FelicityUser, tshirt: MerchandiseItem, pending_order: Registration
    ) -> None:
        payment_service.reject(organizer, pending_order.pk)

        tshirt.refresh_from_db()
        assert tshirt.stock_quantity == 5

    def test_reject_after_approval(self, organizer: FelicityUser, pending_registration: Registration) -> None:
        payment_service.approve(organizer, pending_registration.pk)

        with pytest.raises(AlreadyTicketedError):
            payment_service.reject(organizer, pending_registration.pk)

    def test_reject_twice(self, organizer: FelicityUser, pending_registration: Registration) -> None:
        payment_service.reject(organizer, pending_registration.pk)

        with pytest.raises(InvalidStateError):
            payment_service.reject(organizer, pending_registration.pk)


def test_revenue_matches_paid_registrations(
    organizer: FelicityUser,
    participant: FelicityUser,
    other_participant: FelicityUser,
    user_factory: t.Callable[..., FelicityUser],
    paid_event: Event,
) -> None:
    """Revenue always equals the sum of amounts due on active paid registrations."""
    third = user_factory(role=FelicityUser.Role.PARTICIPANT)
    registrations = [registration_service.register(p, paid_event.pk) for p in (participant, other_participant, third)]

    for registration in registrations:
        payment_service.approve(organizer, registration.pk)
    registration_service.cancel(other_participant, registrations[1].pk)

    paid_event.refresh_from_db()
    active_paid = Registration.objects.filter(
        event=paid_event, status=Registration.Status.ACTIVE, payment_status=PaymentStatus.PAID
    )
    assert paid_event.total_revenue == sum(r.amount_due for r in active_paid) == Decimal("200")


def test_list_orders(
    organizer: FelicityUser,
    participant: FelicityUser,
    other_participant: FelicityUser,
    merch_event: Event,
    tshirt: MerchandiseItem,
) -> None:
    first = registration_service.register(participant, merch_event.pk, order=OrderRequest(tshirt.pk))
    second = registration_service.register(other_participant, merch_event.pk, order=OrderRequest(tshirt.pk))
    payment_service.reject(organizer, second.pk)

    assert list(payment_service.list_orders(organizer, merch_event.pk)) == [first, second]
    assert list(payment_service.list_orders(organizer, merch_event.pk, PaymentStatus.REJECTED)) == [second]


def test_list_orders_other_organizer(other_organizer: FelicityUser, merch_event: Event) -> None:
    with pytest.raises(ForbiddenError):
        payment_service.list_orders(other_organizer, merch_event.pk)
