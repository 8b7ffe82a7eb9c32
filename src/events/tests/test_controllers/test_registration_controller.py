import typing as t
from uuid import uuid4

import orjson
import pytest
from django.shortcuts import reverse  # type: ignore[attr-defined]
from django.test.client import Client

from events.models import Event, MerchandiseItem, Registration

pytestmark = pytest.mark.django_db


def _register(client: Client, payload: dict[str, t.Any]) -> t.Any:
    return client.post(reverse("api:register"), data=orjson.dumps(payload), content_type="application/json")


def test_register_free(participant_client: Client, free_event: Event) -> None:
    response = _register(participant_client, {"event_id": str(free_event.pk)})

    assert response.status_code == 201
    data = response.json()
    assert data["payment_status"] == "free"
    assert data["ticket_id"].startswith("TKT-")
    assert data["event"]["id"] == str(free_event.pk)


def test_register_with_form(participant_client: Client, form_event: Event) -> None:
    payload = {
        "event_id": str(form_event.pk),
        "form_responses": [
            {"label": "Team name", "answer": "Segfaults"},
            {"label": "Track", "answer": "Web"},
            {"label": "Team size", "answer": 3},
        ],
    }

    response = _register(participant_client, payload)

    assert response.status_code == 201
    assert response.json()["form_responses"][2] == {"label": "Team size", "answer": 3}


def test_register_invalid_form(participant_client: Client, form_event: Event) -> None:
    response = _register(
        participant_client,
        {"event_id": str(form_event.pk), "form_responses": [{"label": "Team size", "answer": 9}]},
    )

    assert response.status_code == 400
    data = response.json()
    assert data["code"] == "validation_failed"
    assert set(data["errors"]) == {"Team name", "Track", "Team size"}


def test_register_merchandise_order(participant_client: Client, merch_event: Event, tshirt: MerchandiseItem) -> None:
    response = _register(
        participant_client,
        {"event_id": str(merch_event.pk), "order": {"item_id": str(tshirt.pk), "quantity": 2}},
    )

    assert response.status_code == 201
    data = response.json()
    assert data["payment_status"] == "pending_approval"
    assert data["ticket_id"] is None
    assert data["quantity"] == 2
    assert data["item_name"] == "T-Shirt"


def test_register_twice(participant_client: Client, free_event: Event) -> None:
    _register(participant_client, {"event_id": str(free_event.pk)})

    response = _register(participant_client, {"event_id": str(free_event.pk)})

    assert response.status_code == 409
    assert response.json()["code"] == "already_registered"


def test_register_full_event(
    participant_client: Client, other_participant_client: Client, limited_event: Event
) -> None:
    _register(participant_client, {"event_id": str(limited_event.pk)})

    response = _register(other_participant_client, {"event_id": str(limited_event.pk)})

    assert response.status_code == 409
    assert response.json()["code"] == "registration_limit_reached"


def test_register_unknown_event(participant_client: Client) -> None:
    response = _register(participant_client, {"event_id": str(uuid4())})
    assert response.status_code == 404


def test_register_requires_auth(client: Client, free_event: Event) -> None:
    assert _register(client, {"event_id": str(free_event.pk)}).status_code == 401


def test_organizer_cannot_register(organizer_client: Client, free_event: Event) -> None:
    assert _register(organizer_client, {"event_id": str(free_event.pk)}).status_code == 403


def test_check_eligibility(
    participant_client: Client, other_participant_client: Client, event_factory: t.Callable[..., Event]
) -> None:
    event = event_factory(eligibility=Event.Eligibility.IIIT_ONLY)
    url = reverse("api:check_eligibility", kwargs={"event_id": event.pk})

    assert participant_client.get(url).json()["allowed"] is True
    blocked = other_participant_client.get(url).json()
    assert blocked["allowed"] is False
    assert blocked["code"] == "forbidden"
    assert "IIIT" in blocked["reason"]


def test_my_registrations(
    participant_client: Client, other_participant_client: Client, free_registration: Registration
) -> None:
    response = participant_client.get(reverse("api:my_registrations"))

    assert response.status_code == 200
    assert [r["id"] for r in response.json()["results"]] == [str(free_registration.pk)]
    assert other_participant_client.get(reverse("api:my_registrations")).json()["count"] == 0


def test_registration_for_event(participant_client: Client, free_event: Event, paid_event: Event) -> None:
    _register(participant_client, {"event_id": str(free_event.pk)})

    found = participant_client.get(reverse("api:my_registration_for_event", kwargs={"event_id": free_event.pk}))
    missing = participant_client.get(reverse("api:my_registration_for_event", kwargs={"event_id": paid_event.pk}))

    assert found.status_code == 200
    assert missing.status_code == 404
    assert missing.json()["code"] == "registration_not_found"


def test_get_ticket(
    participant_client: Client,
    organizer_client: Client,
    other_participant_client: Client,
    free_registration: Registration,
) -> None:
    url = reverse("api:get_ticket", kwargs={"ticket_id": free_registration.ticket_id})

    response = participant_client.get(url)

    assert response.status_code == 200
    data = response.json()
    assert data["ticket_id"] == free_registration.ticket_id
    assert data["qr_payload"] == free_registration.qr_payload
    assert data["qr_code"].startswith("data:image/png;base64,")
    assert organizer_client.get(url).status_code == 200
    assert other_participant_client.get(url).status_code == 404


def test_cancel(participant_client: Client, free_event: Event, free_registration: Registration) -> None:
    url = reverse("api:cancel_registration", kwargs={"registration_id": free_registration.pk})

    response = participant_client.post(url)

    assert response.status_code == 200
    assert response.json()["status"] == "cancelled"
    free_event.refresh_from_db()
    assert free_event.registration_count == 0


def test_cancel_someone_elses(other_participant_client: Client, free_registration: Registration) -> None:
    response = other_participant_client.post(
        reverse("api:cancel_registration", kwargs={"registration_id": free_registration.pk})
    )
    assert response.status_code == 403


def test_submit_payment_proof(participant_client: Client, pending_registration: Registration) -> None:
    url = reverse("api:submit_payment_proof", kwargs={"registration_id": pending_registration.pk})

    response = participant_client.post(
        url, data=orjson.dumps({"proof_url": "https://proofs.example.com/a.png"}), content_type="application/json"
    )

    assert response.status_code == 200
    assert response.json()["payment_proof_url"] == "https://proofs.example.com/a.png"


def test_submit_invalid_proof_url(participant_client: Client, pending_registration: Registration) -> None:
    url = reverse("api:submit_payment_proof", kwargs={"registration_id": pending_registration.pk})

    response = participant_client.post(
        url, data=orjson.dumps({"proof_url": "not a url"}), content_type="application/json"
    )

    assert response.status_code == 422
