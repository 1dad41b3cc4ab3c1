from __future__ import annotations

import logging

import stripe
from fastapi import APIRouter, Depends, Request
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from starlette.concurrency import run_in_threadpool

from mechanic_backend.core.deps import Principal, ensure_owner_or_roles, get_current_principal
from mechanic_backend.core.errors import BadRequest, InternalError, NotFound
from mechanic_backend.core.payments import (
    MAX_AMOUNT_MINOR,
    PaymentClient,
    get_payment_client,
    to_minor_units,
)
from mechanic_backend.db.session import get_db
from mechanic_backend.models.payment_intent import PaymentIntentRecord
from mechanic_backend.models.service_request import PAYABLE_STATUSES, ServiceRequest
from mechanic_backend.schemas.payments import CreatePaymentIntentIn, CreatePaymentIntentOut
from mechanic_backend.services.notifications import notify

logger = logging.getLogger(__name__)

router = APIRouter(tags=["payments"])


@router.post("/create-payment-intent", response_model=CreatePaymentIntentOut)
@router.post("/payments/create-payment-intent", response_model=CreatePaymentIntentOut)
def create_payment_intent(
    payload: CreatePaymentIntentIn,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
    payments: PaymentClient = Depends(get_payment_client),
):
    if not payload.serviceRequestId or not payload.amount:
        raise BadRequest(
            "Required fields missing",
            details="serviceRequestId and amount are required",
        )
    if payload.amount < 0:
        raise BadRequest("Invalid amount", details="amount must be positive")
    try:
        amount_minor = to_minor_units(payload.amount)
    except (ValueError, OverflowError):
        raise BadRequest("Invalid amount", details="amount must be a finite number")
    if amount_minor > MAX_AMOUNT_MINOR:
        raise BadRequest("Invalid amount", details="amount is too large")

    sr = db.get(ServiceRequest, payload.serviceRequestId)
    if not sr:
        raise NotFound("Service request not found")

    ensure_owner_or_roles(
        sr.customer_id,
        principal,
        roles=("admin",),
        message="Unauthorized",
        details="You do not have permission to create a payment for this service request",
    )

    if sr.status not in PAYABLE_STATUSES:
        raise BadRequest(
            "Invalid service request status",
            details="Payment can only be made for completed or payment pending service requests",
        )

    # Stripe first, then the local mirror. There is no compensation if the
    # insert fails: the intent exists at Stripe without a local row.
    try:
        intent = payments.create_payment_intent(
            amount_minor=amount_minor,
            metadata={"serviceRequestId": sr.id, "userId": principal.user_id},
        )
    except stripe.StripeError as e:
        raise InternalError("Internal server error", details=str(e))

    record = PaymentIntentRecord(
        payment_intent_id=intent.id,
        service_request_id=sr.id,
        customer_id=principal.user_id,
        amount=payload.amount,
        status=intent.status,
    )
    try:
        db.add(record)
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(
            "Payment intent %s created for service request %s but not recorded locally: %s",
            intent.id,
            sr.id,
            e,
        )
        raise InternalError("Internal server error", details=str(e))

    logger.info(
        "Payment intent %s created for service request %s (%s minor units)",
        intent.id,
        sr.id,
        intent.amount,
    )
    return {"success": True, "data": {"clientSecret": intent.client_secret}}


def _mark_intent(db: Session, intent_id: str, status: str) -> PaymentIntentRecord | None:
    record = (
        db.query(PaymentIntentRecord)
        .filter(PaymentIntentRecord.payment_intent_id == intent_id)
        .first()
    )
    if record:
        record.status = status
    return record


def _handle_succeeded(db: Session, intent: dict) -> None:
    sr_id = (intent.get("metadata") or {}).get("serviceRequestId")
    if not sr_id:
        logger.error("Payment intent %s succeeded without serviceRequestId", intent.get("id"))
        return

    sr = db.get(ServiceRequest, sr_id)
    if not sr:
        logger.error("Service request %s for payment intent %s not found", sr_id, intent.get("id"))
        return

    _mark_intent(db, intent["id"], "succeeded")
    sr.status = "paid"
    sr.payment_status = "paid"
    db.commit()

    notify(
        db,
        user_id=sr.customer_id,
        type="payment",
        title="Payment Received",
        message=f"Your payment for the {sr.service_type} service was processed successfully.",
        related_id=sr.id,
    )


def _handle_failed(db: Session, intent: dict) -> None:
    _mark_intent(db, intent["id"], "failed")
    sr_id = (intent.get("metadata") or {}).get("serviceRequestId")
    sr = db.get(ServiceRequest, sr_id) if sr_id else None
    if sr:
        sr.payment_status = "failed"
    db.commit()
    logger.warning("Payment intent %s failed for service request %s", intent.get("id"), sr_id)


def _process_event(db: Session, event: dict) -> None:
    intent = event["data"]["object"]
    try:
        if event["type"] == "payment_intent.succeeded":
            _handle_succeeded(db, intent)
        elif event["type"] == "payment_intent.payment_failed":
            _handle_failed(db, intent)
    except SQLAlchemyError as e:
        db.rollback()
        raise InternalError("Internal server error", details=str(e))


@router.post("/payments/webhook")
async def payments_webhook(
    request: Request,
    db: Session = Depends(get_db),
    payments: PaymentClient = Depends(get_payment_client),
):
    body = await request.body()
    try:
        event = payments.construct_event(body, request.headers.get("stripe-signature"))
    except (ValueError, stripe.SignatureVerificationError) as e:
        logger.warning("Webhook signature verification failed: %s", e)
        raise BadRequest("Webhook signature verification failed")

    # Session work is blocking; keep it off the event loop
    await run_in_threadpool(_process_event, db, event)
    return {"received": True}
