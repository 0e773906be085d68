"""Outgoing mail."""

import structlog
from celery import shared_task
from django.conf import settings
from django.core.mail import EmailMultiAlternatives

logger = structlog.get_logger(__name__)


@shared_task(autoretry_for=(OSError,), retry_backoff=True, max_retries=3)
def send_email(*, to: str | list[str], subject: str, body: str, html_body: str | None = None) -> int:
    """Deliver one message, with every recipient in bcc.

    SMTP failures surface as ``OSError`` and are retried with backoff.

    Returns:
        int: The number of messages handed to the mail backend.
    """
    addresses = [to] if isinstance(to, str) else list(to)
    bcc = [to_safe_email_address(address) for address in addresses]
    message = EmailMultiAlternatives(subject=subject, body=body, from_email=settings.DEFAULT_FROM_EMAIL, bcc=bcc)
    if html_body:  # pragma: no branch
        message.attach_alternative(html_body, "text/html")
    sent = message.send(fail_silently=False)
    logger.info("email_sent", subject=subject, recipient_count=len(bcc))
    return sent


def to_safe_email_address(email: str) -> str:
    """Reroute ``email`` to a plus-address of the catch-all mailbox unless LIVE_EMAILS is on.

    ``jane.doe@uni.edu`` becomes ``catchall+jane_dot_doe_at_uni_dot_edu@<catch-all domain>``.
    """
    if settings.LIVE_EMAILS:
        return email
    local, domain = settings.INTERNAL_CATCHALL_EMAIL.split("@", 1)
    mangled = email.replace("@", "_at_").replace(".", "_dot_")
    return f"{local}+{mangled}@{domain}"
