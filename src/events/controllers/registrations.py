from uuid import UUID

from django.db.models import QuerySet
from ninja_extra import api_controller, route
from ninja_extra.permissions import IsAuthenticated
from ninja_jwt.authentication import JWTAuth

from common.controllers import UserAwareController
from common.schema import ErrorResponse, ValidationErrorResponse
from events import models, schema
from events.service import payment_service, registration_service
from events.service.stock_ledger import Selection

from .permissions import IsParticipant


@api_controller("/registrations", auth=JWTAuth(), permissions=[IsParticipant], tags=["Registrations"])
class RegistrationController(UserAwareController):
    """Participant-facing registration endpoints."""

    @route.post(
        "",
        url_name="register",
        response={201: schema.RegisterResponseSchema, 400: ErrorResponse | ValidationErrorResponse, 404: ErrorResponse},
    )
    def register(self, payload: schema.RegisterSchema) -> tuple[int, dict[str, object]]:
        """Register for an event.

        For merchandise events the order is only fulfilled once a payment proof has been
        uploaded and approved; no ticket is issued until then.
        """
        registration = registration_service.register(
            self.user(),
            payload.event_id,
            team_name=payload.team_name,
            custom_form_data=payload.custom_form_data,
            selection=[Selection(item.variant_id, item.quantity) for item in payload.merchandise_selection],
        )
        registration = registration_service.get_registration(registration.pk)
        if registration.requires_payment:
            message = "Order placed. Upload your payment proof to complete the purchase."
        elif registration.status == models.Registration.Status.WAITLISTED:
            message = "The event is full. You have been added to the waitlist."
        else:
            message = "Registration successful. Your ticket has been issued."
        return 201, {"registration": registration, "message": message}

    @route.get("/mine", url_name="my_registrations", response=list[schema.RegistrationSchema])
    def my_registrations(self) -> QuerySet[models.Registration]:
        """List the current user's registrations, newest first."""
        return registration_service.list_my_registrations(self.user())

    @route.get(
        "/ticket/{ticket_id}",
        url_name="registration_by_ticket",
        response={200: schema.RegistrationSchema, 403: ErrorResponse, 404: ErrorResponse},
    )
    def by_ticket(self, ticket_id: str) -> models.Registration:
        """Look up one of your registrations by its ticket id."""
        return registration_service.get_by_ticket(self.user(), ticket_id)

    @route.post(
        "/{registration_id}/cancel",
        url_name="cancel_registration",
        response={200: schema.RegistrationSchema, 400: ErrorResponse, 403: ErrorResponse, 404: ErrorResponse},
    )
    def cancel(self, registration_id: UUID) -> models.Registration:
        """Cancel your registration. Freed slots are not handed to the waitlist automatically."""
        registration = registration_service.cancel(registration_id, self.user())
        return registration_service.get_registration(registration.pk)

    @route.post(
        "/{registration_id}/payment-proof",
        url_name="submit_payment_proof",
        response={200: schema.RegistrationSchema, 400: ErrorResponse, 403: ErrorResponse, 404: ErrorResponse},
    )
    def submit_payment_proof(self, registration_id: UUID, payload: schema.PaymentProofSchema) -> models.Registration:
        """Upload a payment proof for a merchandise order; the order then awaits review."""
        registration = payment_service.submit_proof(registration_id, self.user(), payload.payment_proof)
        return registration_service.get_registration(registration.pk)

    @route.get(
        "/{registration_id}/payment-proof-url",
        url_name="payment_proof_url",
        permissions=[IsAuthenticated],
        response={200: schema.PaymentProofURLSchema, 403: ErrorResponse, 404: ErrorResponse},
    )
    def payment_proof_url(self, registration_id: UUID) -> dict[str, object]:
        """Get a short-lived URL for the uploaded payment proof.

        Available to the participant who uploaded it and to the event's organizer.
        """
        access = payment_service.resolve_proof(registration_id, self.user())
        return {"url": access.url, "type": access.kind, "expires_in": access.expires_in}
