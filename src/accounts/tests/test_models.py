"""test_models.py: Unit tests for the accounts models."""

import pytest

from accounts.models import FelicityUser, FelicityUserQueryset

pytestmark = pytest.mark.django_db


def test_save_normalizes_contact_number() -> None:
    user = FelicityUser(username="test_user", contact_number="+91 (987) 654-3210", password="<PASSWORD>")
    user.save()
    assert user.contact_number == "+919876543210"


def test_defaults() -> None:
    user = FelicityUser.objects.create_user(username="test_user", password="password")
    assert user.role == FelicityUser.Role.PARTICIPANT
    assert user.participant_type is None
    assert user.contact_number is None


def test_create_superuser_is_admin() -> None:
    user = FelicityUser.objects.create_superuser(username="root", email="root@felicity.test", password="password")
    assert user.role == FelicityUser.Role.ADMIN
    assert user.is_superuser


def test_manager_get_queryset() -> None:
    assert isinstance(FelicityUser.objects.get_queryset(), FelicityUserQueryset)


def test_queryset_role_filters(participant: FelicityUser, organizer: FelicityUser, superuser: FelicityUser) -> None:
    assert list(FelicityUser.objects.participants()) == [participant]
    assert list(FelicityUser.objects.organizers()) == [organizer]


def test_display_name_for_organizer(organizer: FelicityUser) -> None:
    assert organizer.display_name == "Music Club"


def test_display_name_for_participant() -> None:
    user = FelicityUser.objects.create_user(username="test_user", first_name="Ravi", last_name="Kumar")
    assert user.get_display_name() == "Ravi Kumar"


def test_display_name_falls_back_to_username() -> None:
    user = FelicityUser.objects.create_user(username="ravi_kumar@iiit.ac.in")
    assert user.get_display_name() == "Ravi Kumar"
