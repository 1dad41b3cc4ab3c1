from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Query
from sqlalchemy import update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from mechanic_backend.core.deps import (
    Principal,
    ensure_owner_or_roles,
    get_current_principal,
    require_roles,
)
from mechanic_backend.core.errors import BadRequest, InternalError, NotFound, ServiceUnavailable
from mechanic_backend.db.session import get_db
from mechanic_backend.models.notification import Notification
from mechanic_backend.models.user import User
from mechanic_backend.schemas.notifications import CreateNotificationIn, EmailIn, NotificationOut
from mechanic_backend.services.queries import notifications_query, run_query
from mechanic_backend.worker.celery_app import celery_app

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/notifications", tags=["notifications"])


def _dump(n: Notification) -> dict:
    return NotificationOut.model_validate(n).model_dump(mode="json")


@router.get("")
def list_notifications(
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    include_read: bool = False,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
):
    rows = run_query(
        db,
        notifications_query(principal.user_id, include_read=include_read, limit=limit, offset=offset),
        "Failed to fetch notifications",
    )
    return {"success": True, "data": [_dump(n) for n in rows]}


@router.post("")
def create_notification(
    payload: CreateNotificationIn,
    db: Session = Depends(get_db),
    principal: Principal = Depends(
        require_roles("admin", "shop", "service", message="Insufficient permissions")
    ),
):
    if not payload.recipientId or not payload.message:
        raise BadRequest(
            "Required fields missing", details="recipientId and message are required"
        )

    if not db.get(User, payload.recipientId):
        raise NotFound(
            "Recipient not found", details="The specified recipient does not exist"
        )

    n = Notification(
        user_id=payload.recipientId,
        message=payload.message,
        title=payload.title,
        type=payload.type,
        link=payload.link,
        is_read=False,
        created_by=principal.user_id,
    )
    try:
        db.add(n)
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        raise InternalError("Failed to create notification", details=str(e))
    db.refresh(n)

    return {
        "success": True,
        "data": _dump(n),
        "message": "Notification created successfully",
    }


@router.put("/read-all")
def mark_all_read(
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
):
    # the user_id filter is the ownership check
    stmt = (
        update(Notification)
        .where(Notification.user_id == principal.user_id, Notification.is_read.is_(False))
        .values(is_read=True)
    )
    try:
        result = db.execute(stmt)
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        raise InternalError("Failed to mark all notifications as read", details=str(e))

    logger.debug("Marked %s notifications read for %s", result.rowcount, principal.user_id)
    return {"success": True}


@router.put("/{notification_id}/read")
def mark_read(
    notification_id: str,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
):
    if not notification_id.strip():
        raise BadRequest("Notification ID is required")

    n = db.get(Notification, notification_id)
    if not n:
        raise NotFound("Notification not found")

    ensure_owner_or_roles(
        n.user_id,
        principal,
        message="You do not have permission to update this notification",
    )

    if n.is_read:
        return {"success": True}

    # owner is part of the WHERE clause, so a row reassigned since the read above is left alone
    stmt = (
        update(Notification)
        .where(Notification.id == notification_id, Notification.user_id == principal.user_id)
        .values(is_read=True)
    )
    try:
        db.execute(stmt)
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        raise InternalError("Failed to mark notification as read", details=str(e))

    return {"success": True}


@router.post("/email")
def send_email_notification(
    payload: EmailIn,
    principal: Principal = Depends(get_current_principal),
):
    if not payload.to or not payload.subject or not payload.text:
        raise BadRequest("Missing required fields: to, subject, text")

    try:
        async_res = celery_app.send_task(
            "notifications.send_email",
            kwargs={
                "to": payload.to,
                "subject": payload.subject,
                "text": payload.text,
                "html": payload.html,
            },
        )
    except Exception as e:
        raise ServiceUnavailable(
            "Failed to enqueue email (Celery/Redis problem)", details=str(e)
        )

    logger.info("Queued email to %s (task %s)", payload.to, async_res.id)
    return {"success": True, "message": "Email queued", "task_id": async_res.id}
