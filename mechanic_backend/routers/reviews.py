from __future__ import annotations

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from mechanic_backend.core.deps import Principal, ensure_owner_or_roles, get_current_principal
from mechanic_backend.core.errors import BadRequest, InternalError, NotFound
from mechanic_backend.db.session import get_db
from mechanic_backend.models.review import Review
from mechanic_backend.models.service_request import REVIEWABLE_STATUSES, ServiceRequest
from mechanic_backend.schemas.reviews import CreateReviewIn, ReviewOut, UpdateReviewIn
from mechanic_backend.services.aggregates import summarize_ratings
from mechanic_backend.services.notifications import notify
from mechanic_backend.services.queries import ratings_query, reviews_query, run_query

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/reviews", tags=["reviews"])


@router.get("")
def list_reviews(
    service_request_id: str | None = None,
    shop_id: str | None = None,
    driver_id: str | None = None,
    customer_id: str | None = None,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
):
    rows = run_query(
        db,
        reviews_query(
            service_request_id=service_request_id,
            shop_id=shop_id,
            driver_id=driver_id,
            customer_id=customer_id,
        ),
        "Failed to fetch reviews",
    )
    return {
        "success": True,
        "data": [ReviewOut.model_validate(r).model_dump(mode="json") for r in rows],
    }


@router.get("/ratings")
def get_ratings(
    shop_id: str | None = None,
    driver_id: str | None = None,
    db: Session = Depends(get_db),
):
    if not shop_id and not driver_id:
        raise BadRequest("Missing required parameter: shop_id or driver_id")

    ratings = run_query(
        db, ratings_query(shop_id=shop_id, driver_id=driver_id), "Failed to fetch ratings"
    )
    return {"success": True, "data": summarize_ratings(ratings)}


@router.post("")
def create_review(
    payload: CreateReviewIn,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
):
    if not payload.service_request_id or payload.rating is None:
        raise BadRequest("Missing required fields: service_request_id, rating")

    if payload.rating < 1 or payload.rating > 5:
        raise BadRequest("Rating must be between 1 and 5")

    existing = run_query(
        db,
        reviews_query(
            service_request_id=payload.service_request_id,
            customer_id=principal.user_id,
        ),
        "Failed to check for existing review",
    )
    if existing:
        raise BadRequest("You have already submitted a review for this service request")

    sr = db.get(ServiceRequest, payload.service_request_id)
    if not sr:
        raise NotFound("Service request not found")

    if sr.status not in REVIEWABLE_STATUSES:
        raise BadRequest("Service request must be completed before submitting a review")

    ensure_owner_or_roles(
        sr.customer_id, principal, message="You can only review your own service requests"
    )

    review = Review(
        service_request_id=sr.id,
        customer_id=principal.user_id,
        rating=payload.rating,
        comment=payload.comment or "",
        shop_id=sr.shop_id,
        driver_id=sr.driver_id,
    )
    try:
        db.add(review)
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        raise InternalError("Failed to create review", details=str(e))
    db.refresh(review)

    message = f"A customer has left a {payload.rating}-star review for your services."
    for recipient in (sr.shop_id, sr.driver_id):
        if recipient:
            notify(
                db,
                user_id=recipient,
                type="review_request",
                title="New Review Received",
                message=message,
                related_id=review.id,
                created_by=principal.user_id,
            )

    return {"success": True, "data": ReviewOut.model_validate(review).model_dump(mode="json")}


def _get_review(db: Session, review_id: str) -> Review:
    try:
        review = db.get(Review, review_id)
    except SQLAlchemyError as e:
        raise InternalError("Failed to fetch review", details=str(e))
    if not review:
        raise NotFound("Review not found")
    return review


@router.get("/{review_id}")
def get_review(
    review_id: str,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
):
    review = _get_review(db, review_id)
    return {"success": True, "data": ReviewOut.model_validate(review).model_dump(mode="json")}


@router.put("/{review_id}")
def update_review(
    review_id: str,
    payload: UpdateReviewIn,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
):
    review = _get_review(db, review_id)
    ensure_owner_or_roles(
        review.customer_id,
        principal,
        roles=("admin",),
        message="You are not authorized to update this review",
    )

    if payload.rating is not None and (payload.rating < 1 or payload.rating > 5):
        raise BadRequest("Rating must be between 1 and 5")

    changes = payload.model_dump(exclude_none=True)
    if not changes:
        raise BadRequest("No valid fields to update")

    for field, value in changes.items():
        setattr(review, field, value)
    try:
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        raise InternalError("Failed to update review", details=str(e))
    db.refresh(review)

    return {"success": True, "data": ReviewOut.model_validate(review).model_dump(mode="json")}


@router.delete("/{review_id}")
def delete_review(
    review_id: str,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
):
    review = _get_review(db, review_id)
    ensure_owner_or_roles(
        review.customer_id,
        principal,
        roles=("admin",),
        message="You are not authorized to delete this review",
    )

    try:
        db.delete(review)
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        raise InternalError("Failed to delete review", details=str(e))

    logger.info("Review %s deleted by %s", review_id, principal.user_id)
    return {"success": True, "message": "Review deleted successfully"}
