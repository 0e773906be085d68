"""Ticket credential codec.

A credential is a compact JSON object rendered as a QR code::

    {"ticketId": "...", "eventId": "...", "participantId": "...",
     "generatedAt": "2025-01-01T10:00:00+00:00", "type": "EVENT_TICKET"}

Decoding is lenient. Structured JSON is tried first, then the legacy
``eventId|ticketId`` form, then a bare ticket id. Anything else yields ``None``.
"""

import base64
import re
import typing as t
from datetime import datetime
from io import BytesIO

import orjson
import qrcode
from django.utils import timezone

CREDENTIAL_TYPE = "EVENT_TICKET"
LEGACY_DELIMITER = "|"

_BARE_TICKET_RE = re.compile(r"^[A-Za-z0-9_-]{1,64}$")


class Credential(t.NamedTuple):
    ticket_id: str
    event_id: str | None = None
    participant_id: str | None = None
    generated_at: str | None = None


def encode_credential(
    *, ticket_id: str, event_id: str, participant_id: str, generated_at: datetime | None = None
) -> str:
    """Return the JSON credential payload for a ticket."""
    payload = {
        "ticketId": ticket_id,
        "eventId": event_id,
        "participantId": participant_id,
        "generatedAt": (generated_at or timezone.now()).isoformat(),
        "type": CREDENTIAL_TYPE,
    }
    return orjson.dumps(payload).decode()


def render_qr_data_url(payload: str) -> str:
    """Render ``payload`` as a PNG QR code and return it as a data URL."""
    qr = qrcode.QRCode(
        version=None,
        error_correction=qrcode.constants.ERROR_CORRECT_M,
        box_size=10,
        border=4,
    )
    qr.add_data(payload)
    qr.make(fit=True)
    img = qr.make_image(fill_color="black", back_color="white")

    buffered = BytesIO()
    img.save(buffered, "PNG")
    return f"data:image/png;base64,{base64.b64encode(buffered.getvalue()).decode('utf-8')}"


def decode_credential(raw: t.Any) -> Credential | None:
    """Extract a credential from a scanned payload. Never raises."""
    if not isinstance(raw, str):
        return None
    text = raw.strip()
    if not text:
        return None

    try:
        data = orjson.loads(text)
    except orjson.JSONDecodeError:
        pass
    else:
        if isinstance(data, dict | list):
            return _from_structured(data)

    if LEGACY_DELIMITER in text:
        return _from_legacy(text)

    if _BARE_TICKET_RE.match(text):
        return Credential(ticket_id=text)
    return None


def _from_structured(data: t.Any) -> Credential | None:
    if not isinstance(data, dict) or data.get("type") != CREDENTIAL_TYPE:
        return None
    ticket_id = data.get("ticketId")
    if not isinstance(ticket_id, str) or not ticket_id.strip():
        return None
    return Credential(
        ticket_id=ticket_id.strip(),
        event_id=_as_optional_str(data.get("eventId")),
        participant_id=_as_optional_str(data.get("participantId")),
        generated_at=_as_optional_str(data.get("generatedAt")),
    )


def _from_legacy(text: str) -> Credential | None:
    parts = text.split(LEGACY_DELIMITER)
    if len(parts) < 2:
        return None
    event_id, ticket_id = parts[0].strip(), parts[1].strip()
    if not event_id or not ticket_id:
        return None
    return Credential(ticket_id=ticket_id, event_id=event_id)


def _as_optional_str(value: t.Any) -> str | None:
    if value is None:
        return None
    return str(value)
