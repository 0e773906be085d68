"""Object storage for payment-proof images.

References handed out by :class:`ObjectStorage` are opaque strings. Most are
storage paths below ``PAYMENT_PROOF_UPLOAD_DIR``; when the storage backend is
unavailable the raw ``data:`` payload itself is kept as the reference so that
the upload is never lost. :meth:`ObjectStorage.resolve` accepts both.
"""

import base64
import binascii
import re
import uuid

import structlog
from django.conf import settings
from django.core.files.base import ContentFile
from django.core.files.storage import Storage, default_storage

from common.signing import is_protected_path, signed_url

logger = structlog.get_logger(__name__)

DATA_URL_PREFIX = "data:"

_DATA_URL_RE = re.compile(r"^data:(?P<mime>[\w.+-]+/[\w.+-]+)?(;[\w=-]+)*;base64,", re.IGNORECASE)

_EXTENSIONS = {
    "image/png": "png",
    "image/jpeg": "jpg",
    "image/jpg": "jpg",
    "image/webp": "webp",
    "image/gif": "gif",
    "application/pdf": "pdf",
}


class InvalidPayload(ValueError):
    """The uploaded payload is not valid base64 or exceeds the size limit."""


def decode_payload(data: bytes | str) -> tuple[bytes, str | None]:
    """Decode raw bytes or a (data URL) base64 string.

    Returns:
        The decoded bytes and the declared MIME type, if any.
    """
    if isinstance(data, bytes):
        return data, None
    mime = None
    match = _DATA_URL_RE.match(data)
    if match:
        mime = match.group("mime")
        data = data[match.end() :]
    try:
        return base64.b64decode("".join(data.split()), validate=True), mime
    except (binascii.Error, ValueError) as e:
        raise InvalidPayload("Payload is not valid base64.") from e


def to_data_url(data: bytes | str, mime: str | None = None) -> str:
    """Return ``data`` as a ``data:`` URL, leaving existing data URLs untouched."""
    if isinstance(data, str) and data.startswith(DATA_URL_PREFIX):
        return data
    if isinstance(data, bytes):
        data = base64.b64encode(data).decode()
    return f"data:{mime or 'application/octet-stream'};base64,{data}"


class ObjectStorage:
    """Store, resolve and delete uploaded binary objects."""

    def __init__(self, storage: Storage | None = None, upload_dir: str | None = None) -> None:
        self.storage = storage or default_storage
        self.upload_dir = (upload_dir or settings.PAYMENT_PROOF_UPLOAD_DIR).strip("/")

    def store(self, data: bytes | str, name: str) -> str:
        """Persist ``data`` and return an opaque reference.

        Raises:
            InvalidPayload: if the payload cannot be decoded or is too large.
        """
        content, mime = decode_payload(data)
        if not content:
            raise InvalidPayload("Payload is empty.")
        if len(content) > settings.PAYMENT_PROOF_MAX_BYTES:
            raise InvalidPayload("Payload exceeds the maximum allowed size.")

        extension = _EXTENSIONS.get((mime or "").lower(), "bin")
        path = f"{self.upload_dir}/{name}-{uuid.uuid4().hex[:12]}.{extension}"
        try:
            stored_path = self.storage.save(path, ContentFile(content))
        except Exception:
            logger.exception("object_storage_store_failed", path=path, size=len(content))
            return to_data_url(data, mime)
        logger.info("object_stored", path=stored_path, size=len(content))
        return stored_path

    def resolve(self, reference: str, *, expires_in: int | None = None) -> str:
        """Return a URL for ``reference``.

        Protected paths get a time-limited signed URL. Embedded ``data:``
        references are returned as they are.
        """
        if reference.startswith(DATA_URL_PREFIX):
            return reference
        if not is_protected_path(reference):
            return self.storage.url(reference)
        return signed_url(reference, expires_in=expires_in or settings.PAYMENT_PROOF_URL_TTL)

    def delete(self, reference: str | None) -> None:
        """Delete a stored object. Failures are logged, never raised."""
        if not reference or reference.startswith(DATA_URL_PREFIX):
            return
        try:
            self.storage.delete(reference)
        except Exception:
            logger.warning("object_storage_delete_failed", reference=reference, exc_info=True)


def get_object_storage() -> ObjectStorage:
    return ObjectStorage()
