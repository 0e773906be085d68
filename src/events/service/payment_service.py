"""Payment review for merchandise orders.

``payment_status`` moves from unset to Pending when a proof is uploaded, and
from Pending to Approved or Rejected when the organizer decides. A new upload
after a rejection puts the order back to Pending. Stock is only committed on
approval.
"""

import typing as t
import uuid

import structlog
from django.conf import settings
from django.db import transaction
from django.db.models import QuerySet
from django.utils import timezone

from accounts.models import EventdeskUser
from common.storage import DATA_URL_PREFIX, InvalidPayload, ObjectStorage, get_object_storage
from events import tasks
from events.exceptions import Forbidden, InvalidPaymentProof, InvalidStatus, PaymentProofMissing, WrongEventType
from events.models import Registration

from . import admission, credential_service, notification_service, stock_ledger
from .registration_service import get_locked_registration, get_organized_event, get_registration

logger = structlog.get_logger(__name__)

DEFAULT_REJECTION_REMARKS = "Payment verification failed"

PaymentAction = t.Literal["approve", "reject"]


class ProofAccess(t.NamedTuple):
    url: str
    kind: t.Literal["signed-url", "embedded"]
    expires_in: int | None


def submit_proof(
    registration_id: uuid.UUID | str,
    requester: EventdeskUser,
    image_payload: bytes | str,
    *,
    storage: ObjectStorage | None = None,
) -> Registration:
    """Store a payment proof for the requester's merchandise order and mark it Pending."""
    storage = storage or get_object_storage()
    with transaction.atomic():
        registration = get_locked_registration(registration_id)
        if registration.participant_id != requester.pk:
            raise Forbidden("You can only upload a payment proof for your own registration.")
        if not registration.event.is_merchandise:
            raise WrongEventType("Payment proofs only apply to merchandise orders.")
        if registration.status == Registration.Status.CANCELLED:
            raise InvalidStatus("This registration has been cancelled.", status=registration.status)
        if registration.payment_status == Registration.PaymentStatus.APPROVED:
            raise InvalidStatus("The payment for this order has already been approved.", status=registration.status)

        try:
            reference = storage.store(image_payload, f"payment-{registration.pk}")
        except InvalidPayload as e:
            raise InvalidPaymentProof(str(e)) from e

        previous_reference = registration.payment_proof
        previous_status = registration.payment_status
        registration.payment_proof = reference
        registration.payment_status = Registration.PaymentStatus.PENDING
        registration.save(update_fields=["payment_proof", "payment_status", "updated_at"])
        if previous_reference and previous_reference != reference:
            transaction.on_commit(lambda: storage.delete(previous_reference))

    logger.info(
        "payment_proof_submitted",
        registration_id=str(registration.pk),
        previous_payment_status=previous_status,
        embedded=reference.startswith(DATA_URL_PREFIX),
    )
    return registration


def decide(
    registration_id: uuid.UUID | str,
    organizer: EventdeskUser,
    action: PaymentAction,
    remarks: str | None = None,
) -> Registration:
    """Approve or reject a pending payment.

    Approval claims a slot for orders that do not hold one yet, commits stock
    for every line item, completes the registration and issues its credential.
    A full event raises InvalidStatus. If any variant runs out the whole
    approval is rolled back with InsufficientStock.
    """
    with transaction.atomic():
        registration = get_locked_registration(registration_id)
        if registration.event.organizer_id != organizer.pk:
            raise Forbidden("You do not organize this event.")
        if not registration.event.is_merchandise:
            raise WrongEventType("Payment review only applies to merchandise orders.")
        if registration.payment_status != Registration.PaymentStatus.PENDING:
            raise InvalidStatus(
                "Only pending payments can be reviewed.",
                payment_status=registration.payment_status,
            )
        if registration.status == Registration.Status.CANCELLED:
            raise InvalidStatus("This registration has been cancelled.", status=registration.status)

        match action:
            case "approve":
                _approve(registration, organizer, remarks)
            case "reject":
                _reject(registration, remarks)
            case _:
                raise ValueError(f"Unknown payment decision {action!r}")

    logger.info(
        "payment_decided",
        registration_id=str(registration.pk),
        action=action,
        organizer_id=str(organizer.pk),
        payment_status=registration.payment_status,
    )
    return registration


def _approve(registration: Registration, organizer: EventdeskUser, remarks: str | None) -> None:
    admission.claim_slot(registration)
    stock_ledger.commit(registration)

    registration.payment_status = Registration.PaymentStatus.APPROVED
    registration.status = Registration.Status.COMPLETED
    registration.payment_approved_by = organizer
    registration.payment_approved_at = timezone.now()
    registration.payment_remarks = remarks or ""
    registration.amount_paid = registration.order_total()
    registration.save(
        update_fields=[
            "payment_status",
            "status",
            "payment_approved_by",
            "payment_approved_at",
            "payment_remarks",
            "amount_paid",
            "updated_at",
        ]
    )

    if credential_service.issue_credential(registration):
        notification_service.schedule(tasks.send_purchase_confirmation_email, registration_id=str(registration.pk))


def _reject(registration: Registration, remarks: str | None) -> None:
    registration.payment_status = Registration.PaymentStatus.REJECTED
    registration.status = Registration.Status.REJECTED
    registration.payment_remarks = remarks or DEFAULT_REJECTION_REMARKS
    registration.save(update_fields=["payment_status", "status", "payment_remarks", "updated_at"])


def list_payment_reviews(organizer: EventdeskUser, event_id: uuid.UUID | str) -> QuerySet[Registration]:
    """Registrations of an owned event that carry a payment proof, newest first."""
    event = get_organized_event(organizer, event_id)
    return Registration.objects.filter(event=event).awaiting_payment_review().with_items().order_by("-created_at")


def resolve_proof(
    registration_id: uuid.UUID | str,
    requester: EventdeskUser,
    *,
    storage: ObjectStorage | None = None,
) -> ProofAccess:
    """Return a time-limited URL for the payment proof.

    Allowed for the participant who owns the registration and for the event's organizer.
    """
    storage = storage or get_object_storage()
    registration = get_registration(registration_id)
    is_owner = registration.participant_id == requester.pk
    is_organizer = registration.event.organizer_id == requester.pk
    if not (is_owner or is_organizer):
        raise Forbidden("You are not allowed to view this payment proof.")
    if not registration.payment_proof:
        raise PaymentProofMissing()

    url = storage.resolve(registration.payment_proof)
    if registration.payment_proof.startswith(DATA_URL_PREFIX):
        return ProofAccess(url=url, kind="embedded", expires_in=None)
    return ProofAccess(url=url, kind="signed-url", expires_in=settings.PAYMENT_PROOF_URL_TTL)
