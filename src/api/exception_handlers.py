"""Exception handlers for the API."""

import traceback
import typing as t

import orjson
import structlog
from django.conf import settings
from django.core.exceptions import ValidationError
from django.http import HttpRequest
from ninja.responses import Response

from events.exceptions import RegistrationError

logger = structlog.get_logger(__name__)

SENSITIVE_KEYS = {"password", "token", "x-api-key", "authorization", "authentication", "payment_proof", "cookie"}
MASK = "********"


def obfuscate(data: t.Any) -> t.Any:
    """Mask the values of sensitive keys in a payload or header mapping."""
    if not isinstance(data, dict):
        return data
    return {key: MASK if key.lower() in SENSITIVE_KEYS else value for key, value in data.items()}


def _json_body(request: HttpRequest) -> t.Any:
    if request.method not in ("POST", "PUT", "PATCH"):
        return None
    if request.headers.get("Content-Type") != "application/json":
        return None
    try:
        return obfuscate(orjson.loads(request.body))
    except orjson.JSONDecodeError:  # pragma: no cover
        return None


def handle_general_exception(request: HttpRequest, exc: Exception | t.Type[Exception]) -> Response:
    """Log an unexpected exception with the (masked) request and answer 500.

    The traceback is only part of the response body in DEBUG mode.
    """
    user = getattr(request, "user", None)
    logger.exception(
        "INTERNAL_SERVER_ERROR",
        path=f"{request.method} {request.path}",
        headers=obfuscate(dict(request.headers)),
        GET=obfuscate(request.GET.dict()),
        json_payload=_json_body(request),
        user=str(user) if user else None,
    )
    body = {"detail": "Internal Server Error."}
    if settings.DEBUG:  # pragma: no cover
        body["traceback"] = traceback.format_exc()
    return Response(status=500, data=body)


def handle_django_validation_error(request: HttpRequest, exc: ValidationError | t.Type[ValidationError]) -> Response:
    """Model validation that slipped past the schemas becomes a 400 with per-field messages."""
    logger.warning("VALIDATION_ERROR", path=request.path, exc_info=True)
    if hasattr(exc, "error_dict"):
        errors = {
            field: [message for error in field_errors for message in error]
            for field, field_errors in exc.error_dict.items()
        }
    else:
        errors = {"__all__": list(exc.messages)}
    return Response(status=400, data={"errors": errors})


def handle_registration_error(request: HttpRequest, exc: RegistrationError | t.Type[RegistrationError]) -> Response:
    """Return the structured body of a registration engine error."""
    assert isinstance(exc, RegistrationError)
    logger.info("registration_error", code=exc.code, path=request.path, status_code=exc.status_code)
    return Response(status=exc.status_code, data=exc.as_dict())
