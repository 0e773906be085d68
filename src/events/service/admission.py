"""Capacity admission.

The decision is only meaningful while the event row is locked, see
:func:`lock_event`. Registrations holding a slot are the Registered and
Completed ones. Completing any other registration has to claim a slot first.
"""

import structlog

from events.exceptions import InvalidStatus
from events.models import Event, Registration

logger = structlog.get_logger(__name__)


def decide_status(limit: int | None, admitted_count: int) -> Registration.Status:
    """Registered while there is room (or no limit), Waitlisted otherwise."""
    if limit is None or admitted_count < limit:
        return Registration.Status.REGISTERED
    return Registration.Status.WAITLISTED


def lock_event(event_id: object) -> Event:
    """Lock the event row for the rest of the current transaction.

    Must be called inside ``transaction.atomic()``.
    """
    return Event.objects.select_for_update().get(pk=event_id)


def admit(event: Event) -> Registration.Status:
    """Compute the status for a new registration to a locked event."""
    admitted_count = Registration.objects.filter(event=event).admitted().count()
    status = decide_status(event.registration_limit, admitted_count)
    logger.debug(
        "admission_decided",
        event_id=str(event.pk),
        limit=event.registration_limit,
        admitted_count=admitted_count,
        status=status,
    )
    return status


def claim_slot(registration: Registration) -> None:
    """Make sure ``registration`` holds a slot before it is completed.

    Registered and Completed registrations already hold one. Any other
    registration goes back through admission under the event lock.

    Raises:
        InvalidStatus: if the event is full.
    """
    if registration.status in Registration.ADMITTED_STATUSES:
        return
    event = lock_event(registration.event_id)
    if admit(event) == Registration.Status.WAITLISTED:
        logger.info("slot_claim_refused", registration_id=str(registration.pk), event_id=str(event.pk))
        raise InvalidStatus("The event is full.", status=registration.status)
