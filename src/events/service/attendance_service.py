"""Check-in at the venue.

A scan marks a registration as attended at most once: the write is a
conditional UPDATE on ``attended = false``, so of two simultaneous scans of the
same credential only one succeeds. Manual overrides bypass that guard.

Attending completes the registration, so a Waitlisted ticket is only let in
while the event has a free slot.
"""

import typing as t
import uuid

import structlog
from django.db import transaction
from django.utils import timezone

from accounts.models import EventdeskUser
from events.exceptions import (
    DuplicateScan,
    InvalidCredential,
    InvalidStatus,
    PaymentNotApproved,
    TicketNotFound,
    UnauthorizedEvent,
)
from events.models import Registration

from . import admission, qr_codec
from .registration_service import get_locked_registration

logger = structlog.get_logger(__name__)


def scan_metadata(registration: Registration) -> dict[str, t.Any]:
    """The attendance details shown to an organizer re-scanning a ticket."""
    scanned_by = registration.attendance_marked_by
    return {
        "ticket_id": registration.ticket_id,
        "attendance_marked_at": (
            registration.attendance_marked_at.isoformat() if registration.attendance_marked_at else None
        ),
        "attendance_method": registration.attendance_method or None,
        "scanned_by": str(scanned_by.pk) if scanned_by else None,
        "scanned_by_name": scanned_by.get_display_name() if scanned_by else None,
    }


def scan(
    organizer: EventdeskUser,
    raw_payload: t.Any,
    method: Registration.AttendanceMethod = Registration.AttendanceMethod.CAMERA_SCAN,
) -> Registration:
    """Mark the registration behind a scanned credential as attended.

    Raises:
        InvalidCredential, TicketNotFound, UnauthorizedEvent, InvalidStatus,
        DuplicateScan, PaymentNotApproved.
    """
    credential = qr_codec.decode_credential(raw_payload)
    if credential is None:
        logger.info("scan_rejected_invalid_credential", organizer_id=str(organizer.pk))
        raise InvalidCredential()

    registration = (
        Registration.objects.select_related("event", "participant", "attendance_marked_by")
        .filter(ticket_id=credential.ticket_id)
        .first()
    )
    if registration is None:
        raise TicketNotFound(ticket_id=credential.ticket_id)
    _check_scan_allowed(registration, organizer)

    now = timezone.now()
    with transaction.atomic():
        admission.claim_slot(registration)
        updated = (
            Registration.objects.filter(pk=registration.pk, attended=False)
            .exclude(status__in=Registration.CLOSED_STATUSES)
            .update(
                attended=True,
                attendance_marked_at=now,
                attendance_marked_by=organizer,
                attendance_method=method,
                status=Registration.Status.COMPLETED,
                updated_at=now,
            )
        )
    if not updated:
        # Lost a race against another scan or a cancellation; report what is stored now.
        registration.refresh_from_db()
        _check_scan_allowed(registration, organizer)
        # Reached when the re-read passes again, e.g. an override reset attendance after the update missed.
        raise DuplicateScan(**scan_metadata(registration))

    registration.refresh_from_db()
    logger.info(
        "attendance_scanned",
        registration_id=str(registration.pk),
        ticket_id=registration.ticket_id,
        method=method,
        organizer_id=str(organizer.pk),
    )
    return registration


def _check_scan_allowed(registration: Registration, organizer: EventdeskUser) -> None:
    event = registration.event
    if event.organizer_id != organizer.pk:
        raise UnauthorizedEvent()
    if registration.status in Registration.CLOSED_STATUSES:
        raise InvalidStatus(f"Ticket is {registration.status}.", status=registration.status)
    if registration.attended:
        logger.info("duplicate_scan", registration_id=str(registration.pk), ticket_id=registration.ticket_id)
        raise DuplicateScan(**scan_metadata(registration))
    if event.is_merchandise and registration.payment_status != Registration.PaymentStatus.APPROVED:
        raise PaymentNotApproved(payment_status=registration.payment_status)


def manual_override(
    organizer: EventdeskUser,
    registration_id: uuid.UUID | str,
    attended: bool,
    notes: str | None = None,
) -> Registration:
    """Set attendance by hand, bypassing the duplicate-scan guard.

    Marking a registration as not attended makes its credential scannable again.
    Marking one that holds no slot as attended has to claim a free slot first.
    """
    with transaction.atomic():
        registration = get_locked_registration(registration_id)
        if registration.event.organizer_id != organizer.pk:
            raise UnauthorizedEvent()
        if attended:
            admission.claim_slot(registration)

        previous = registration.attended
        now = timezone.now()
        registration.attended = attended
        registration.attendance_method = Registration.AttendanceMethod.MANUAL
        registration.attendance_marked_by = organizer
        registration.attendance_notes = notes or f"Manual override by organizer. Previous: {str(previous).lower()}"
        if attended:
            registration.status = Registration.Status.COMPLETED
            if registration.attendance_marked_at is None:
                registration.attendance_marked_at = now
        registration.save(
            update_fields=[
                "attended",
                "attendance_method",
                "attendance_marked_by",
                "attendance_notes",
                "attendance_marked_at",
                "status",
                "updated_at",
            ]
        )

    logger.info(
        "attendance_overridden",
        registration_id=str(registration.pk),
        previous=previous,
        attended=attended,
        organizer_id=str(organizer.pk),
    )
    return registration
