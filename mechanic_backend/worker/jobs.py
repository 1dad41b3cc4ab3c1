from __future__ import annotations

import logging
import smtplib
from email.message import EmailMessage

from celery import shared_task

from mechanic_backend.core.config import settings

logger = logging.getLogger(__name__)


def build_message(to: str, subject: str, text: str, html: str | None = None) -> EmailMessage:
    msg = EmailMessage()
    msg["From"] = settings.smtp_sender
    msg["To"] = to
    msg["Subject"] = subject
    msg.set_content(text)
    if html:
        msg.add_alternative(html, subtype="html")
    return msg


@shared_task(name="notifications.send_email")
def send_email(to: str, subject: str, text: str, html: str | None = None) -> dict:
    """
    Deliver one notification e-mail. Without an SMTP host the message is
    only logged (local development).
    """
    msg = build_message(to, subject, text, html)

    if not settings.smtp_host:
        logger.info("SMTP not configured, email to %s not sent: %s", to, subject)
        return {"ok": True, "delivered": False, "to": to}

    with smtplib.SMTP(settings.smtp_host, settings.smtp_port) as smtp:
        smtp.send_message(msg)

    logger.info("Email sent to %s: %s", to, subject)
    return {"ok": True, "delivered": True, "to": to}
