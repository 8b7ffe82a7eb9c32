"""test_account_controller.py: Integration tests for the AccountController."""

import typing as t

import orjson
import pytest
from django.shortcuts import reverse  # type: ignore[attr-defined]
from django.test.client import Client

from accounts.models import FelicityUser

pytestmark = pytest.mark.django_db


def _signup(client: Client, payload: dict[str, t.Any]) -> t.Any:
    return client.post(reverse("api:register-account"), data=orjson.dumps(payload), content_type="application/json")


def test_register_success(client: Client, signup_payload: dict[str, t.Any]) -> None:
    response = _signup(client, signup_payload)

    assert response.status_code == 201, response.content
    data = response.json()
    assert data["email"] == "ananya.rao@students.iiit.ac.in"
    assert data["role"] == "participant"
    assert data["participant_type"] == "iiit"
    user = FelicityUser.objects.get(username="ananya.rao@students.iiit.ac.in")
    assert user.contact_number == "+919876543210"
    assert user.check_password(signup_payload["password1"])


def test_register_non_iiit_with_any_email(client: Client, signup_payload: dict[str, t.Any]) -> None:
    signup_payload.update(email="guest@gmail.com", participant_type="non_iiit", college_name="BITS")

    response = _signup(client, signup_payload)

    assert response.status_code == 201
    assert response.json()["participant_type"] == "non_iiit"


def test_register_iiit_requires_institute_email(client: Client, signup_payload: dict[str, t.Any]) -> None:
    signup_payload["email"] = "ananya@gmail.com"

    response = _signup(client, signup_payload)

    assert response.status_code == 422
    assert "IIIT email" in response.json()["detail"][0]["msg"]


def test_register_password_mismatch(client: Client, signup_payload: dict[str, t.Any]) -> None:
    signup_payload["password2"] = "something-else-42A"

    response = _signup(client, signup_payload)

    assert response.status_code == 422
    assert "Passwords do not match" in response.json()["detail"][0]["msg"]


def test_register_weak_password(client: Client, signup_payload: dict[str, t.Any]) -> None:
    signup_payload.update(password1="password", password2="password")

    response = _signup(client, signup_payload)

    assert response.status_code == 400
    assert not FelicityUser.objects.exists()


def test_register_duplicate(client: Client, signup_payload: dict[str, t.Any]) -> None:
    _signup(client, signup_payload)

    response = _signup(client, signup_payload)

    assert response.status_code == 400
    assert "already exists" in response.json()["detail"]


def test_register_cannot_choose_role(client: Client, signup_payload: dict[str, t.Any]) -> None:
    signup_payload["role"] = "organizer"

    response = _signup(client, signup_payload)

    assert response.status_code == 201
    assert response.json()["role"] == "participant"


def test_me(organizer_client: Client, organizer: FelicityUser) -> None:
    response = organizer_client.get(reverse("api:me"))

    assert response.status_code == 200
    data = response.json()
    assert data["id"] == str(organizer.id)
    assert data["role"] == "organizer"
    assert data["display_name"] == "Music Club"


def test_me_requires_auth(client: Client) -> None:
    assert client.get(reverse("api:me")).status_code == 401
