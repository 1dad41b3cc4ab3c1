from __future__ import annotations

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends
from sqlalchemy import update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from mechanic_backend.core.deps import Principal, require_roles
from mechanic_backend.core.errors import BadRequest, InternalError, NotFound
from mechanic_backend.db.session import get_db
from mechanic_backend.models.service_request import ServiceRequest
from mechanic_backend.schemas.jobs import DriverAcceptIn, ServiceRequestOut
from mechanic_backend.services.notifications import notify
from mechanic_backend.services.queries import (
    AVAILABLE_JOB_STATUS,
    available_jobs_query,
    run_query,
)

logger = logging.getLogger(__name__)

router = APIRouter(tags=["jobs"])


def _dump(sr: ServiceRequest) -> dict:
    return ServiceRequestOut.model_validate(sr).model_dump(mode="json")


@router.get("/available-jobs")
def available_jobs(
    shop_id: str | None = None,
    search: str | None = None,
    db: Session = Depends(get_db),
    principal: Principal = Depends(
        require_roles("driver", message="Only drivers can access available jobs")
    ),
):
    jobs = run_query(
        db, available_jobs_query(shop_id=shop_id, search=search), "Failed to fetch available jobs"
    )
    return {"success": True, "data": [_dump(j) for j in jobs]}


@router.post("/driver-accept")
def driver_accept(
    payload: DriverAcceptIn,
    db: Session = Depends(get_db),
    principal: Principal = Depends(
        require_roles("driver", message="Only drivers can accept jobs")
    ),
):
    if not payload.serviceRequestId:
        raise BadRequest("Missing required field: serviceRequestId")

    sr = db.get(ServiceRequest, payload.serviceRequestId)
    if not sr:
        raise NotFound("Service request not found")

    if sr.status != AVAILABLE_JOB_STATUS:
        raise BadRequest(
            "Service request must be in 'accepted' status to be assigned a driver"
        )
    if sr.pickup_driver_id:
        raise BadRequest("Service request already has a pickup driver assigned")

    # the guard repeats the checks above so a concurrent accept cannot overwrite
    stmt = (
        update(ServiceRequest)
        .where(
            ServiceRequest.id == sr.id,
            ServiceRequest.status == AVAILABLE_JOB_STATUS,
            ServiceRequest.pickup_driver_id.is_(None),
        )
        .values(
            pickup_driver_id=principal.user_id,
            status="driver_assigned_pickup",
            updated_at=datetime.now(timezone.utc),
        )
    )
    try:
        result = db.execute(stmt)
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        raise InternalError("Failed to update service request", details=str(e))

    if result.rowcount == 0:
        raise BadRequest("Service request already has a pickup driver assigned")

    db.refresh(sr)
    logger.info("Driver %s accepted service request %s", principal.user_id, sr.id)

    notify(
        db,
        user_id=sr.customer_id,
        type="driver_update",
        title="Driver Assigned",
        message=(
            "A driver has been assigned to pick up your vehicle "
            f"for your {sr.service_type} service."
        ),
        related_id=sr.id,
        created_by=principal.user_id,
    )
    return {"success": True, "data": _dump(sr)}
