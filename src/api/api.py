from django.conf import settings
from django.core.exceptions import ValidationError
from django.http import HttpRequest
from ninja_extra import NinjaExtraAPI
from ninja_jwt.controller import NinjaJWTDefaultController

from common.controllers import MediaValidationController
from common.schema import ResponseOk, VersionResponse
from events.controllers import OrganizerController, RegistrationController
from events.exceptions import RegistrationError

from .exception_handlers import (
    handle_django_validation_error,
    handle_general_exception,
    handle_registration_error,
)

api = NinjaExtraAPI(
    title="Eventdesk API",
    docs_url="/docs",
    version=settings.VERSION,
    description=f"Eventdesk registration and ticketing API {settings.VERSION}",
    app_name=f"eventdesk-api-{settings.VERSION}",
    urls_namespace="api",
)


@api.get("/version", tags=["Version"], response={200: VersionResponse})
def version(request: HttpRequest) -> tuple[int, VersionResponse]:
    """Get the API version."""
    return 200, VersionResponse(version=settings.VERSION)


@api.get("/healthcheck", tags=["Healthcheck"], response={200: ResponseOk})
def healthcheck(request: HttpRequest) -> tuple[int, ResponseOk]:
    """Check the health of the API."""
    return 200, ResponseOk()


api.register_controllers(
    NinjaJWTDefaultController,
    RegistrationController,
    OrganizerController,
    MediaValidationController,
)

EXCEPTION_HANDLERS = {
    Exception: handle_general_exception,
    ValidationError: handle_django_validation_error,
    RegistrationError: handle_registration_error,
}

for exc, handler in EXCEPTION_HANDLERS.items():
    api.add_exception_handler(exc, handler)
