from __future__ import annotations

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends
from sqlalchemy import update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from mechanic_backend.core.deps import Principal, get_current_principal
from mechanic_backend.core.errors import BadRequest, Forbidden, InternalError, NotFound
from mechanic_backend.db.session import get_db
from mechanic_backend.models.service_request import ServiceRequest
from mechanic_backend.models.status_history import StatusHistory
from mechanic_backend.models.user import User
from mechanic_backend.schemas.jobs import ServiceRequestOut
from mechanic_backend.schemas.status import StatusHistoryOut, StatusUpdateIn
from mechanic_backend.services.notifications import notify, queue_status_email
from mechanic_backend.services.queries import run_query, status_history_query
from mechanic_backend.services.status import (
    allowed_transitions,
    can_update,
    can_view,
    driver_ids,
    format_status,
    shop_owner_id,
)

logger = logging.getLogger(__name__)

router = APIRouter(tags=["status"])


@router.post("/status-update")
def update_status(
    payload: StatusUpdateIn,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
):
    if not payload.serviceRequestId or not payload.status:
        raise BadRequest("Missing required fields: serviceRequestId, status")

    sr = db.get(ServiceRequest, payload.serviceRequestId)
    if not sr:
        raise NotFound("Service request not found")

    if not can_update(sr, principal):
        raise Forbidden("You do not have permission to update this service request")

    previous, new = sr.status, payload.status
    allowed = allowed_transitions(principal.role, previous)
    if new not in allowed:
        raise BadRequest(
            f"Invalid status transition from {previous} to {new}",
            details={"allowedTransitions": list(allowed)},
        )

    # status in the WHERE clause: a concurrent transition makes this one a no-op
    stmt = (
        update(ServiceRequest)
        .where(ServiceRequest.id == sr.id, ServiceRequest.status == previous)
        .values(status=new, updated_at=datetime.now(timezone.utc))
    )
    try:
        result = db.execute(stmt)
        if result.rowcount == 0:
            db.rollback()
            raise BadRequest(
                "Service request status changed concurrently",
                details={"expected": previous},
            )
        db.add(
            StatusHistory(
                service_request_id=sr.id,
                previous_status=previous,
                new_status=new,
                changed_by=principal.user_id,
                changed_by_role=principal.role,
                notes=payload.notes,
            )
        )
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        raise InternalError("Failed to update service request", details=str(e))

    db.refresh(sr)
    logger.info(
        "Service request %s moved %s -> %s by %s (%s)",
        sr.id,
        previous,
        new,
        principal.user_id,
        principal.role,
    )
    _notify_participants(db, sr, previous, new, principal)

    return {
        "success": True,
        "message": f"Service request status updated to {new}",
        "data": ServiceRequestOut.model_validate(sr).model_dump(mode="json"),
    }


def _notify_participants(
    db: Session, sr: ServiceRequest, previous: str, new: str, principal: Principal
) -> None:
    change = f"from {format_status(previous)} to {format_status(new)}"
    recipients: list[tuple[str, str, str]] = []
    if sr.customer_id:
        recipients.append(
            (
                sr.customer_id,
                "Service Request Update",
                f"Your service request status has changed {change}.",
            )
        )
    owner_id = shop_owner_id(sr)
    if owner_id:
        recipients.append(
            (
                owner_id,
                "Service Request Update",
                f"Service request #{sr.id} status has changed {change}.",
            )
        )
    for driver_id in driver_ids(sr):
        recipients.append(
            (
                driver_id,
                "Assignment Update",
                f"Service request #{sr.id} status has changed {change}.",
            )
        )

    seen = {principal.user_id}
    for user_id, title, message in recipients:
        if user_id in seen:
            continue
        seen.add(user_id)
        notify(
            db,
            user_id=user_id,
            type="service_request_status",
            title=title,
            message=message,
            related_id=sr.id,
            created_by=principal.user_id,
        )
        user = db.get(User, user_id)
        if user and user.email:
            queue_status_email(
                to=user.email,
                service_request_id=sr.id,
                previous_status=previous,
                new_status=new,
                recipient_name=user.full_name or None,
            )


@router.get("/service-requests/{service_request_id}/status-updates")
def list_status_updates(
    service_request_id: str,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
):
    sr = db.get(ServiceRequest, service_request_id)
    if not sr:
        raise NotFound("Service request not found")

    if not can_view(sr, principal):
        raise Forbidden("You do not have permission to access this service request")

    rows = run_query(
        db, status_history_query(service_request_id), "Failed to fetch status updates"
    )
    return {
        "success": True,
        "data": [StatusHistoryOut.model_validate(r).model_dump(mode="json") for r in rows],
    }
