"""
This conftest.py provides fixtures shared by all apps.
"""

import secrets
import string
import typing as t
from datetime import datetime, time, timedelta

import faker
import pytest
from django.test.client import Client
from django.utils import timezone
from ninja_jwt.tokens import RefreshToken
from pytest import MonkeyPatch

from accounts.models import FelicityUser


@pytest.fixture(autouse=True)
def increase_rate_limit(monkeypatch: MonkeyPatch) -> None:
    """Increase the rate limits to allow testing."""
    for throttle in (
        "AuthThrottle",
        "AnonDefaultThrottle",
        "UserDefaultThrottle",
        "WriteThrottle",
        "RegistrationThrottle",
        "ScanThrottle",
    ):
        monkeypatch.setattr(f"common.throttling.{throttle}.rate", "1000/min")


@pytest.fixture(autouse=True)
def enable_celery_eager_mode(settings: t.Any) -> None:
    """Enable Celery eager mode for tests so tasks execute synchronously.

    This ensures that Celery tasks run immediately in the same process,
    allowing tests to verify their side effects without async complications.
    """
    from felicity.celery import app

    settings.CELERY_TASK_ALWAYS_EAGER = True
    settings.CELERY_TASK_EAGER_PROPAGATES = True
    app.conf.task_always_eager = True
    app.conf.task_eager_propagates = True


@pytest.fixture(autouse=True)
def clear_cache() -> None:
    """Throttle history lives in the cache; start every test clean."""
    from django.core.cache import cache

    cache.clear()


class FelicityUserFactory:
    """Factory for creating FelicityUser instances for testing."""

    fake = faker.Faker()

    def create_user(self, **kwargs: t.Any) -> FelicityUser:
        username = kwargs.pop(
            "username", "".join(secrets.choice(string.ascii_lowercase) for _ in range(8)) + "@user.test"
        )
        email = kwargs.pop("email", username + ("@test.com" if "@" not in username else ""))
        password = kwargs.pop("password", "password")
        first_name = kwargs.pop("first_name", self.fake.first_name())
        last_name = kwargs.pop("last_name", self.fake.last_name())
        return FelicityUser.objects.create_user(
            username=username,
            email=email,
            password=password,
            first_name=first_name,
            last_name=last_name,
            **kwargs,
        )

    def __call__(self, **kwargs: t.Any) -> FelicityUser:
        return self.create_user(**kwargs)


@pytest.fixture
def user_factory() -> FelicityUserFactory:
    return FelicityUserFactory()


@pytest.fixture
def participant(user_factory: FelicityUserFactory) -> FelicityUser:
    """An IIIT participant."""
    return user_factory(role=FelicityUser.Role.PARTICIPANT, participant_type=FelicityUser.ParticipantType.IIIT)


@pytest.fixture
def other_participant(user_factory: FelicityUserFactory) -> FelicityUser:
    """A non-IIIT participant."""
    return user_factory(role=FelicityUser.Role.PARTICIPANT, participant_type=FelicityUser.ParticipantType.NON_IIIT)


@pytest.fixture
def organizer(user_factory: FelicityUserFactory) -> FelicityUser:
    return user_factory(role=FelicityUser.Role.ORGANIZER, organizer_name="Music Club", organizer_category="Cultural")


@pytest.fixture
def other_organizer(user_factory: FelicityUserFactory) -> FelicityUser:
    return user_factory(role=FelicityUser.Role.ORGANIZER, organizer_name="Chess Club", organizer_category="Games")


@pytest.fixture
def superuser(user_factory: FelicityUserFactory) -> FelicityUser:
    """A superuser."""
    return user_factory(is_superuser=True, is_staff=True, role=FelicityUser.Role.ADMIN)


def client_for(user: FelicityUser) -> Client:
    refresh = RefreshToken.for_user(user)
    return Client(HTTP_AUTHORIZATION=f"Bearer {refresh.access_token}")  # type: ignore[attr-defined]


@pytest.fixture
def client_factory() -> t.Callable[[FelicityUser], Client]:
    return client_for


@pytest.fixture
def participant_client(participant: FelicityUser) -> Client:
    return client_for(participant)


@pytest.fixture
def other_participant_client(other_participant: FelicityUser) -> Client:
    return client_for(other_participant)


@pytest.fixture
def organizer_client(organizer: FelicityUser) -> Client:
    return client_for(organizer)


@pytest.fixture
def other_organizer_client(other_organizer: FelicityUser) -> Client:
    return client_for(other_organizer)


@pytest.fixture
def next_week() -> datetime:
    today = timezone.now()
    same_time_next_week = today + timedelta(days=7)
    noon = time(hour=12, minute=0)
    return timezone.make_aware(
        datetime.combine(same_time_next_week.date(), noon),
        timezone.get_current_timezone(),
    )
