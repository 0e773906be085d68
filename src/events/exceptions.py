"""Errors raised by the registration engine.

Each error carries a stable machine-readable ``code`` and the HTTP status the API
answers with. ``extra`` holds data the caller may want to display, such as the
metadata of a previous scan.
"""

import typing as t


class RegistrationError(Exception):
    code: str = "registration_error"
    status_code: int = 400
    default_message: str = "The request could not be completed."

    def __init__(self, message: str | None = None, **extra: t.Any) -> None:
        self.message = message or self.default_message
        self.extra = extra
        super().__init__(self.message)

    def as_dict(self) -> dict[str, t.Any]:
        return {"error": self.code, "message": self.message, **self.extra}


class DuplicateRegistration(RegistrationError):
    code = "duplicate_registration"
    default_message = "You are already registered for this event."


class InsufficientStock(RegistrationError):
    code = "insufficient_stock"
    default_message = "Not enough stock for the selected item."


class VariantNotFound(InsufficientStock):
    """The selected variant does not exist or belongs to another event."""

    code = "variant_not_found"
    default_message = "The selected item is not available for this event."


class Forbidden(RegistrationError):
    code = "forbidden"
    status_code = 403
    default_message = "You are not allowed to perform this action."


class WrongEventType(RegistrationError):
    code = "wrong_event_type"
    default_message = "This operation is not available for this type of event."


class TicketNotFound(RegistrationError):
    code = "ticket_not_found"
    status_code = 404
    default_message = "No registration matches this ticket."


class UnauthorizedEvent(RegistrationError):
    code = "unauthorized_event"
    status_code = 403
    default_message = "This ticket belongs to an event you do not organize."


class InvalidStatus(RegistrationError):
    code = "invalid_status"
    default_message = "The registration is not in a valid state for this operation."


class DuplicateScan(RegistrationError):
    code = "duplicate_scan"
    default_message = "This ticket has already been scanned."


class PaymentNotApproved(RegistrationError):
    code = "payment_not_approved"
    default_message = "The payment for this registration has not been approved."


class InvalidCredential(RegistrationError):
    code = "invalid_credential"
    default_message = "The scanned code is not a valid ticket."


class RegistrationClosed(RegistrationError):
    code = "registration_closed"
    default_message = "Registration for this event is closed."


class RegistrationNotFound(RegistrationError):
    code = "registration_not_found"
    status_code = 404
    default_message = "Registration not found."


class EventNotFound(RegistrationError):
    code = "event_not_found"
    status_code = 404
    default_message = "Event not found."


class PaymentProofMissing(RegistrationError):
    code = "payment_proof_missing"
    status_code = 404
    default_message = "No payment proof has been uploaded for this registration."


class InvalidPaymentProof(RegistrationError):
    code = "invalid_payment_proof"
    default_message = "The uploaded payment proof could not be read."
