from __future__ import annotations

import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from mechanic_backend.models.notification import Notification
from mechanic_backend.services.status import format_status
from mechanic_backend.worker.celery_app import celery_app

logger = logging.getLogger(__name__)


def notify(
    db: Session,
    *,
    user_id: str,
    message: str,
    title: str = "",
    type: str = "info",
    related_id: str | None = None,
    created_by: str | None = None,
) -> Notification | None:
    """
    Best-effort in-app notification, committed on its own. The triggering
    change is already committed by the caller, so a failure here is logged
    and swallowed instead of failing the request.
    """
    n = Notification(
        user_id=user_id,
        type=type,
        title=title,
        message=message,
        related_id=related_id,
        created_by=created_by,
        is_read=False,
        channel="in_app",
    )
    try:
        db.add(n)
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Failed to create notification for user %s", user_id)
        return None
    return n


def queue_status_email(
    *,
    to: str,
    service_request_id: str,
    previous_status: str,
    new_status: str,
    recipient_name: str | None = None,
) -> None:
    """Hand a status-change e-mail to the worker; a broker outage only costs the e-mail."""
    text = (
        f"Hello {recipient_name or to},\n\n"
        f"Service request {service_request_id} has changed from "
        f"{format_status(previous_status)} to {format_status(new_status)}.\n"
    )
    try:
        celery_app.send_task(
            "notifications.send_email",
            kwargs={
                "to": to,
                "subject": f"Service request update: {format_status(new_status)}",
                "text": text,
                "html": None,
            },
        )
    except Exception:
        logger.exception("Failed to queue status e-mail to %s", to)
