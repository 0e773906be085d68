"""Ticket credential issuance."""

import structlog

from events.models import Registration

from . import qr_codec

logger = structlog.get_logger(__name__)


def issue_credential(registration: Registration) -> bool:
    """Attach a credential and its QR code to ``registration`` and save them.

    The credential always embeds the event's primary key as ``eventId``.
    Failures are logged and reported through the return value, never raised.
    """
    try:
        payload = qr_codec.encode_credential(
            ticket_id=registration.ticket_id,
            event_id=str(registration.event_id),
            participant_id=str(registration.participant_id),
        )
        qr_code = qr_codec.render_qr_data_url(payload)
    except Exception:
        logger.exception("credential_issue_failed", registration_id=str(registration.pk))
        return False

    registration.credential_payload = payload
    registration.qr_code = qr_code
    Registration.objects.filter(pk=registration.pk).update(credential_payload=payload, qr_code=qr_code)
    logger.info("credential_issued", registration_id=str(registration.pk), ticket_id=registration.ticket_id)
    return True
