from django.http import HttpRequest, HttpResponse
from ninja_extra import api_controller, route

from common import signing


@api_controller("/media", tags=["Media"])
class MediaValidationController:
    """Answers the fronting proxy before it serves a protected file."""

    @route.get(
        "/validate/{path:path}",
        url_name="validate_media",
        response={200: None, 401: None},
        exclude_unset=True,
    )
    def validate_media(self, request: HttpRequest, path: str) -> HttpResponse:
        """Check the `exp` and `sig` query parameters of a signed media link.

        No authentication: the signature is the credential. 200 lets the proxy
        serve `/media/{path}`, 401 makes it refuse.
        """
        if signing.is_valid(signing.media_path(path), request.GET.get("exp"), request.GET.get("sig")):
            return HttpResponse(status=200)
        return HttpResponse(status=401)
