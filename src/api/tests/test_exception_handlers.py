import orjson
from django.core.exceptions import ValidationError
from django.test import RequestFactory

from api.exception_handlers import (
    handle_django_validation_error,
    handle_general_exception,
    handle_registration_error,
    obfuscate,
)
from events.exceptions import DuplicateScan, RegistrationNotFound


def test_registration_error_body() -> None:
    request = RequestFactory().post("/api/organizer/attendance/scan")

    response = handle_registration_error(request, DuplicateScan(ticket_id="TKT-1-ABC", scanned_by_name="Chess Club"))

    assert response.status_code == 400
    assert orjson.loads(response.content) == {
        "error": "duplicate_scan",
        "message": DuplicateScan.default_message,
        "ticket_id": "TKT-1-ABC",
        "scanned_by_name": "Chess Club",
    }


def test_registration_error_status_code() -> None:
    response = handle_registration_error(RequestFactory().get("/"), RegistrationNotFound())

    assert response.status_code == 404
    assert orjson.loads(response.content)["error"] == "registration_not_found"


def test_django_validation_error() -> None:
    response = handle_django_validation_error(
        RequestFactory().post("/"), ValidationError({"team_name": ["Too long."]})
    )

    assert response.status_code == 400
    assert orjson.loads(response.content) == {"errors": {"team_name": ["Too long."]}}


def test_django_validation_error_without_fields() -> None:
    response = handle_django_validation_error(RequestFactory().post("/"), ValidationError("Broken."))

    assert orjson.loads(response.content) == {"errors": {"__all__": ["Broken."]}}


def test_general_exception_hides_details() -> None:
    request = RequestFactory().post(
        "/api/registrations/",
        data=orjson.dumps({"payment_proof": "data:image/png;base64,AAAA"}),
        content_type="application/json",
    )
    request.user = None  # type: ignore[assignment]

    response = handle_general_exception(request, RuntimeError("boom"))

    assert response.status_code == 500
    assert orjson.loads(response.content) == {"detail": "Internal Server Error."}


def test_obfuscate() -> None:
    assert obfuscate({"Authorization": "Bearer x", "payment_proof": "data:...", "event_id": "1"}) == {
        "Authorization": "********",
        "payment_proof": "********",
        "event_id": "1",
    }
    assert obfuscate(["not", "a", "dict"]) == ["not", "a", "dict"]
