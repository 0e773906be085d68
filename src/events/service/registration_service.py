"""Registration lifecycle: register, cancel and the participant/organizer read paths."""

import typing as t
import uuid
from decimal import Decimal

import structlog
from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import IntegrityError, transaction
from django.db.models import QuerySet

from accounts.models import EventdeskUser
from events import tasks
from events.exceptions import (
    DuplicateRegistration,
    EventNotFound,
    Forbidden,
    InvalidStatus,
    RegistrationClosed,
    RegistrationNotFound,
)
from events.models import Event, MerchandiseVariant, Registration, RegistrationItem

from . import admission, credential_service, notification_service, stock_ledger
from .ticket_ids import generate_ticket_id

logger = structlog.get_logger(__name__)


def register(
    participant: EventdeskUser,
    event_id: uuid.UUID | str,
    *,
    team_name: str = "",
    custom_form_data: dict[str, t.Any] | None = None,
    selection: t.Iterable[stock_ledger.Selection] = (),
) -> Registration:
    """Register ``participant`` for an event.

    Admission and insert happen under a lock on the event row, so concurrent
    registrations never exceed the event's limit. Non-merchandise registrations
    get their credential immediately; merchandise registrations wait for the
    payment review (``Registration.requires_payment``).

    Raises:
        EventNotFound, RegistrationClosed, DuplicateRegistration, InsufficientStock.
    """
    with transaction.atomic():
        try:
            event = admission.lock_event(event_id)
        except (Event.DoesNotExist, ValidationError) as e:
            raise EventNotFound() from e

        if not event.is_registration_open():
            raise RegistrationClosed()
        if Registration.objects.filter(participant=participant, event=event).exists():
            raise DuplicateRegistration()

        lines: list[tuple[MerchandiseVariant, int]]
        match event.kind:
            case Event.Kind.MERCHANDISE:
                lines = stock_ledger.validate_selection(event, selection)
                amount: Decimal | None = None
            case Event.Kind.NORMAL | Event.Kind.TEAM:
                lines = []
                amount = event.registration_fee
            case _:  # pragma: no cover
                raise ValueError(f"Unknown event kind {event.kind!r}")

        status = admission.admit(event)
        registration = _insert_registration(
            participant=participant,
            event=event,
            status=status,
            team_name=team_name,
            custom_form_data=custom_form_data or {},
            amount=amount,
        )
        RegistrationItem.objects.bulk_create(
            [
                RegistrationItem(registration=registration, variant=variant, quantity=quantity, position=position)
                for position, (variant, quantity) in enumerate(lines)
            ]
        )

        if not event.is_merchandise and credential_service.issue_credential(registration):
            notification_service.schedule(tasks.send_ticket_email, registration_id=str(registration.pk))
        notification_service.schedule(
            tasks.add_registered_participant, event_id=str(event.pk), user_id=str(participant.pk)
        )

    logger.info(
        "registration_created",
        registration_id=str(registration.pk),
        event_id=str(event.pk),
        participant_id=str(participant.pk),
        status=registration.status,
        ticket_id=registration.ticket_id,
    )
    return registration


def _insert_registration(
    *,
    participant: EventdeskUser,
    event: Event,
    status: Registration.Status,
    team_name: str,
    custom_form_data: dict[str, t.Any],
    amount: Decimal | None,
) -> Registration:
    """Insert the registration, retrying on a ticket id collision.

    A lost race on the (participant, event) constraint is reported as
    DuplicateRegistration.
    """
    for attempt in range(1, settings.TICKET_ID_MAX_ATTEMPTS + 1):
        registration = Registration(
            participant=participant,
            event=event,
            status=status,
            ticket_id=generate_ticket_id(),
            team_name=team_name,
            custom_form_data=custom_form_data,
            amount_paid=amount,
        )
        try:
            with transaction.atomic():
                registration.save(force_insert=True)
        except IntegrityError as e:
            if Registration.objects.filter(participant=participant, event=event).exists():
                raise DuplicateRegistration() from e
            logger.warning("ticket_id_collision", ticket_id=registration.ticket_id, attempt=attempt)
            continue
        return registration
    raise IntegrityError(f"Could not allocate a unique ticket id after {settings.TICKET_ID_MAX_ATTEMPTS} attempts.")


def cancel(registration_id: uuid.UUID | str, requester: EventdeskUser) -> Registration:
    """Cancel a registration on behalf of its owner.

    Any status but Cancelled can be cancelled, a Rejected order included.
    Waitlisted registrations are not promoted into the freed slot.
    """
    with transaction.atomic():
        registration = get_locked_registration(registration_id)
        if registration.participant_id != requester.pk:
            raise Forbidden("You can only cancel your own registrations.")
        if registration.status == Registration.Status.CANCELLED:
            raise InvalidStatus("Registration is already cancelled.", status=registration.status)
        previous = registration.status
        registration.status = Registration.Status.CANCELLED
        registration.save(update_fields=["status", "updated_at"])

    logger.info(
        "registration_cancelled",
        registration_id=str(registration.pk),
        previous_status=previous,
        participant_id=str(requester.pk),
    )
    return registration


def list_my_registrations(participant: EventdeskUser) -> QuerySet[Registration]:
    return Registration.objects.for_participant(participant).with_items().order_by("-created_at")


def get_by_ticket(participant: EventdeskUser, ticket_id: str) -> Registration:
    """Return the participant's own registration for ``ticket_id``."""
    registration = Registration.objects.with_items().filter(ticket_id=ticket_id).first()
    if registration is None:
        raise RegistrationNotFound()
    if registration.participant_id != participant.pk:
        raise Forbidden("This ticket belongs to another participant.")
    return registration


def get_organized_event(organizer: EventdeskUser, event_id: uuid.UUID | str) -> Event:
    """Return the event if ``organizer`` owns it."""
    try:
        event = Event.objects.get(pk=event_id)
    except (Event.DoesNotExist, ValidationError) as e:
        raise EventNotFound() from e
    if event.organizer_id != organizer.pk:
        raise Forbidden("You do not organize this event.")
    return event


AttendanceFilter = t.Literal["all", "attended", "not-attended"]


def list_event_registrations(
    organizer: EventdeskUser, event_id: uuid.UUID | str, attendance: AttendanceFilter = "all"
) -> QuerySet[Registration]:
    """All registrations of an owned event, optionally narrowed to (non-)attendees."""
    event = get_organized_event(organizer, event_id)
    qs = Registration.objects.filter(event=event).with_items()
    match attendance:
        case "attended":
            qs = qs.filter(attended=True)
        case "not-attended":
            qs = qs.filter(attended=False).exclude(status=Registration.Status.CANCELLED)
    return qs.order_by("created_at")


def get_registration(registration_id: uuid.UUID | str) -> Registration:
    try:
        return Registration.objects.select_related("event", "participant").get(pk=registration_id)
    except (Registration.DoesNotExist, ValidationError) as e:
        raise RegistrationNotFound() from e


def get_locked_registration(registration_id: uuid.UUID | str) -> Registration:
    """Fetch and lock a registration. Must be called inside ``transaction.atomic()``."""
    try:
        return Registration.objects.select_for_update(of=("self",)).select_related("event").get(pk=registration_id)
    except (Registration.DoesNotExist, ValidationError) as e:
        raise RegistrationNotFound() from e
