"""Ticket identifiers, QR payloads and the QR image sent with ticket e-mails."""

import base64
import secrets
import typing as t
from dataclasses import dataclass
from io import BytesIO
from uuid import UUID

import orjson
import qrcode
from django.conf import settings


@dataclass(frozen=True)
class ScanIdentifier:
    ticket_id: str
    event_id: str | None = None


def generate_ticket_id() -> str:
    """A fresh human-readable ticket id, e.g. ``TKT-9F3A61C2``."""
    return f"{settings.TICKET_ID_PREFIX}{secrets.token_hex(settings.TICKET_ID_BYTES).upper()}"


def build_qr_payload(ticket_id: str, event_id: UUID, participant_id: UUID) -> str:
    return orjson.dumps(
        {"ticket_id": ticket_id, "event_id": str(event_id), "participant_id": str(participant_id)}
    ).decode()


def parse_scan_identifier(identifier: str) -> ScanIdentifier:
    """Accept either a bare ticket id or the JSON payload encoded in the QR code."""
    raw = identifier.strip()
    if raw.startswith("{"):
        try:
            data: dict[str, t.Any] = orjson.loads(raw)
        except orjson.JSONDecodeError:
            return ScanIdentifier(ticket_id=raw)
        ticket_id = data.get("ticket_id") or data.get("ticketId") or ""
        event_id = data.get("event_id") or data.get("eventId")
        return ScanIdentifier(ticket_id=str(ticket_id).strip(), event_id=str(event_id) if event_id else None)
    return ScanIdentifier(ticket_id=raw)


def render_qr_png(payload: str) -> bytes:
    """Render ``payload`` as a PNG QR code."""
    qr = qrcode.QRCode(
        version=1,
        error_correction=qrcode.constants.ERROR_CORRECT_M,
        box_size=10,
        border=4,
    )
    qr.add_data(payload)
    qr.make(fit=True)
    img = qr.make_image(fill_color="black", back_color="white")
    buffered = BytesIO()
    img.save(buffered, "PNG")
    return buffered.getvalue()


def qr_data_uri(payload: str) -> str:
    return "data:image/png;base64," + base64.b64encode(render_qr_png(payload)).decode("utf-8")
