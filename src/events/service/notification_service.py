"""Outbound ticket notifications.

Business operations never send mail inline. They schedule a Celery task with
:func:`schedule` once the surrounding transaction commits; the task then calls
:func:`send_ticket` or :func:`send_purchase_confirmation`.
"""

import typing as t

import structlog
from celery import Task
from django.conf import settings
from django.db import transaction
from django.template.loader import render_to_string
from django.utils.dateformat import format as date_format

from common.tasks import send_email
from events.models import Registration

logger = structlog.get_logger(__name__)


def schedule(task: Task, **kwargs: t.Any) -> None:
    """Enqueue ``task`` after the current transaction commits.

    A broker failure is logged and swallowed; the calling operation has already
    succeeded from the caller's point of view.
    """

    def _enqueue() -> None:
        try:
            task.delay(**kwargs)
        except Exception:
            logger.exception("task_enqueue_failed", task=task.name, **kwargs)

    transaction.on_commit(_enqueue)


def _base_context(registration: Registration) -> dict[str, t.Any]:
    event = registration.event
    return {
        "participant_name": registration.participant.get_display_name(),
        "event_name": event.name,
        "event_location": event.location,
        "event_start_formatted": date_format(event.start, "l, F j, Y \\a\\t g:i A T") if event.start else "",
        "ticket_id": registration.ticket_id,
        "qr_code": registration.qr_code,
        "site_name": settings.SITE_NAME,
        "tickets_url": f"{settings.FRONTEND_BASE_URL}/registrations/ticket/{registration.ticket_id}",
    }


def _deliver(registration: Registration, *, template: str, subject: str, context: dict[str, t.Any]) -> None:
    body = render_to_string(f"events/emails/{template}.txt", context)
    html_body = render_to_string(f"events/emails/{template}.html", context)
    send_email(to=registration.participant.email, subject=subject, body=body, html_body=html_body)
    Registration.objects.filter(pk=registration.pk).update(email_sent=True)
    registration.email_sent = True
    logger.info("notification_sent", template=template, registration_id=str(registration.pk))


def send_ticket(registration: Registration) -> None:
    """Email the participant their ticket."""
    context = _base_context(registration)
    _deliver(
        registration,
        template="ticket",
        subject=f"Your ticket for {registration.event.name}",
        context=context,
    )


def send_purchase_confirmation(registration: Registration) -> None:
    """Email the participant a confirmation of their approved merchandise order."""
    items = list(registration.items.select_related("variant").order_by("position"))
    context = _base_context(registration) | {
        "line_items": [
            {
                "name": item.variant.name,
                "size": item.variant.size,
                "color": item.variant.color,
                "quantity": item.quantity,
                "unit_price": item.variant.price,
                "line_total": item.line_total,
            }
            for item in items
        ],
        "total": registration.amount_paid if registration.amount_paid is not None else registration.order_total(),
    }
    _deliver(
        registration,
        template="purchase_confirmation",
        subject=f"Purchase confirmation - {registration.event.name}",
        context=context,
    )
