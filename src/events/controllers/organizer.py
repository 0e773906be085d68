from uuid import UUID

from django.db.models import QuerySet
from ninja_extra import api_controller, route
from ninja_jwt.authentication import JWTAuth

from common.controllers import UserAwareController
from common.schema import ErrorResponse, ValidationErrorResponse
from events import models, schema
from events.service import attendance_service, payment_service, registration_service
from events.service.registration_service import AttendanceFilter

from .permissions import IsOrganizer


@api_controller("/organizer", auth=JWTAuth(), permissions=[IsOrganizer], tags=["Organizer"])
class OrganizerController(UserAwareController):
    """Registration management for the organizer of an event."""

    @route.get(
        "/events/{event_id}/registrations",
        url_name="event_registrations",
        response={200: list[schema.OrganizerRegistrationSchema], 403: ErrorResponse, 404: ErrorResponse},
    )
    def event_registrations(
        self, event_id: UUID, attendance: AttendanceFilter = "all"
    ) -> QuerySet[models.Registration]:
        """List the registrations of one of your events, optionally only (non-)attendees."""
        return registration_service.list_event_registrations(self.user(), event_id, attendance=attendance)

    @route.get(
        "/events/{event_id}/payments",
        url_name="event_payments",
        response={200: list[schema.OrganizerRegistrationSchema], 403: ErrorResponse, 404: ErrorResponse},
    )
    def event_payments(self, event_id: UUID) -> QuerySet[models.Registration]:
        """List merchandise orders with an uploaded payment proof, newest first."""
        return payment_service.list_payment_reviews(self.user(), event_id)

    @route.post(
        "/registrations/{registration_id}/payment-decision",
        url_name="payment_decision",
        response={
            200: schema.OrganizerRegistrationSchema,
            400: ErrorResponse | ValidationErrorResponse,
            403: ErrorResponse,
            404: ErrorResponse,
        },
    )
    def payment_decision(self, registration_id: UUID, payload: schema.PaymentDecisionSchema) -> models.Registration:
        """Approve or reject a pending payment.

        Approval decrements merchandise stock and issues the ticket. It fails with
        `insufficient_stock` if the order can no longer be served.
        """
        registration = payment_service.decide(registration_id, self.user(), payload.action, payload.remarks)
        return registration_service.get_registration(registration.pk)

    @route.post(
        "/attendance/scan",
        url_name="scan_ticket",
        response={200: schema.ScanResultSchema, 400: ErrorResponse, 403: ErrorResponse, 404: ErrorResponse},
    )
    def scan(self, payload: schema.ScanSchema) -> models.Registration:
        """Check a participant in by their scanned ticket credential.

        A repeated scan answers `duplicate_scan` together with the details of the first scan.
        """
        method = models.Registration.AttendanceMethod(payload.method)
        return attendance_service.scan(self.user(), payload.qr_data, method)

    @route.post(
        "/registrations/{registration_id}/attendance",
        url_name="override_attendance",
        response={200: schema.OrganizerRegistrationSchema, 403: ErrorResponse, 404: ErrorResponse},
    )
    def override_attendance(
        self, registration_id: UUID, payload: schema.AttendanceOverrideSchema
    ) -> models.Registration:
        """Mark a registration as attended or not attended by hand."""
        registration = attendance_service.manual_override(
            self.user(), registration_id, payload.attended, payload.notes
        )
        return registration_service.get_registration(registration.pk)
