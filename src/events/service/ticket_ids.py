"""Ticket identifiers.

Format: ``TKT-<millisecond epoch>-<9 uppercase base36 characters>``. Uniqueness is
enforced by the database; callers retry on a collision.
"""

import secrets
import string
import time

TICKET_ID_PREFIX = "TKT"
SUFFIX_LENGTH = 9
BASE36_ALPHABET = string.digits + string.ascii_uppercase


def generate_ticket_id(now_ms: int | None = None) -> str:
    """Return a new ticket identifier."""
    timestamp = now_ms if now_ms is not None else time.time_ns() // 1_000_000
    suffix = "".join(secrets.choice(BASE36_ALPHABET) for _ in range(SUFFIX_LENGTH))
    return f"{TICKET_ID_PREFIX}-{timestamp}-{suffix}"
