"""
Read queries built from whitelisted request parameters.

Each builder returns a `Select`; `run_query` executes it and turns store
errors into InternalError so the route answers 500 with the store message.
"""

from __future__ import annotations

from typing import Sequence

from sqlalchemy import Select, or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from mechanic_backend.core.errors import InternalError
from mechanic_backend.models.notification import Notification
from mechanic_backend.models.review import Review
from mechanic_backend.models.service_request import ServiceRequest
from mechanic_backend.models.status_history import StatusHistory

AVAILABLE_JOB_STATUS = "accepted"
SEARCHABLE_JOB_FIELDS = ("service_type", "description", "pickup_address")


def _like_pattern(term: str) -> str:
    escaped = term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


def available_jobs_query(
    shop_id: str | None = None, search: str | None = None
) -> Select:
    """Accepted requests that no pickup driver has claimed yet, soonest pickup first."""
    q = select(ServiceRequest).where(
        ServiceRequest.status == AVAILABLE_JOB_STATUS,
        ServiceRequest.pickup_driver_id.is_(None),
    )
    if shop_id:
        q = q.where(ServiceRequest.shop_id == shop_id)
    if search:
        pattern = _like_pattern(search.lower())
        q = q.where(
            or_(
                *(
                    getattr(ServiceRequest, field).ilike(pattern, escape="\\")
                    for field in SEARCHABLE_JOB_FIELDS
                )
            )
        )
    return q.order_by(ServiceRequest.pickup_date.asc())


def reviews_query(
    service_request_id: str | None = None,
    shop_id: str | None = None,
    driver_id: str | None = None,
    customer_id: str | None = None,
) -> Select:
    q = select(Review)
    if service_request_id:
        q = q.where(Review.service_request_id == service_request_id)
    if shop_id:
        q = q.where(Review.shop_id == shop_id)
    if driver_id:
        q = q.where(Review.driver_id == driver_id)
    if customer_id:
        q = q.where(Review.customer_id == customer_id)
    return q.order_by(Review.created_at.desc())


def ratings_query(shop_id: str | None = None, driver_id: str | None = None) -> Select:
    # shop_id wins when both are given
    q = select(Review.rating)
    if shop_id:
        return q.where(Review.shop_id == shop_id)
    return q.where(Review.driver_id == driver_id)


def notifications_query(
    user_id: str, include_read: bool = False, limit: int = 50, offset: int = 0
) -> Select:
    q = select(Notification).where(Notification.user_id == user_id)
    if not include_read:
        q = q.where(Notification.is_read.is_(False))
    return q.order_by(Notification.created_at.desc()).offset(offset).limit(limit)


def status_history_query(service_request_id: str) -> Select:
    """Oldest transition first, so the list reads as a timeline."""
    return (
        select(StatusHistory)
        .where(StatusHistory.service_request_id == service_request_id)
        .order_by(StatusHistory.created_at.asc())
    )


def run_query(db: Session, q: Select, error_message: str) -> Sequence:
    try:
        return db.scalars(q).all()
    except SQLAlchemyError as e:
        raise InternalError(error_message, details=str(e))
