"""Signed, expiring links to protected media.

Payment proofs are stored below ``protected/`` and the fronting proxy refuses to
serve that prefix on its own. Whoever may see a proof gets a link of the form::

    /media/protected/payment-proofs/payment-<id>-<hex>.png?exp=<unix ts>&sig=<hmac>

and the proxy asks ``GET /api/media/validate/<path>?exp=...&sig=...`` before
serving it. Signatures are HMAC-SHA256 over ``<media path>:<exp>``, keyed by a
digest of SECRET_KEY and truncated to 16 hex characters.
"""

import hashlib
import hmac
import time
from functools import lru_cache
from urllib.parse import urlencode

from django.conf import settings

PROTECTED_PREFIX = "protected/"
SIGNATURE_LENGTH = 16
DEFAULT_TTL = 3600

_KEY_DOMAIN = "eventdesk:signed-url:v1"


@lru_cache(maxsize=1)
def _signing_key() -> bytes:
    return hashlib.sha256(f"{_KEY_DOMAIN}:{settings.SECRET_KEY}".encode()).digest()


def media_path(reference: str) -> str:
    """The public path of a storage reference below MEDIA_URL."""
    return f"{settings.MEDIA_URL.rstrip('/')}/{reference.lstrip('/')}"


def sign(path: str, expires: int) -> str:
    """Signature for ``path`` valid until the unix timestamp ``expires``."""
    digest = hmac.new(_signing_key(), f"{path}:{expires}".encode(), hashlib.sha256).hexdigest()
    return digest[:SIGNATURE_LENGTH]


def is_valid(path: str, exp: str | None, sig: str | None) -> bool:
    """Whether ``sig`` is a current signature for ``path``.

    Missing, malformed and expired parameters are all simply invalid.
    """
    if not exp or not sig:
        return False
    try:
        expires = int(exp)
    except ValueError:
        return False
    if expires <= time.time():
        return False
    return hmac.compare_digest(sig, sign(path, expires))


def signed_url(reference: str, *, expires_in: int = DEFAULT_TTL) -> str:
    """Return a link to ``reference`` that stops working after ``expires_in`` seconds."""
    path = media_path(reference)
    expires = int(time.time()) + expires_in
    return f"{path}?{urlencode({'exp': expires, 'sig': sign(path, expires)})}"


def is_protected_path(reference: str) -> bool:
    return bool(reference) and reference.startswith(PROTECTED_PREFIX)
