import structlog
from celery import shared_task
from django.contrib.auth import get_user_model

from events.models import Event, Registration
from events.service import notification_service

logger = structlog.get_logger(__name__)


@shared_task(autoretry_for=(Exception,), retry_backoff=True, max_retries=3)
def send_ticket_email(registration_id: str) -> None:
    """Send the ticket email for a newly issued credential."""
    registration = Registration.objects.select_related("event", "participant").get(pk=registration_id)
    notification_service.send_ticket(registration)


@shared_task(autoretry_for=(Exception,), retry_backoff=True, max_retries=3)
def send_purchase_confirmation_email(registration_id: str) -> None:
    """Send the purchase confirmation for an approved merchandise order."""
    registration = Registration.objects.select_related("event", "participant").get(pk=registration_id)
    notification_service.send_purchase_confirmation(registration)


@shared_task(autoretry_for=(Exception,), retry_backoff=True, max_retries=3)
def add_registered_participant(event_id: str, user_id: str) -> None:
    """Keep the event's denormalized participant list in sync."""
    event = Event.objects.get(pk=event_id)
    user = get_user_model().objects.get(pk=user_id)
    event.registered_participants.add(user)
    logger.debug("registered_participant_added", event_id=event_id, user_id=user_id)
