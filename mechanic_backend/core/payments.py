from __future__ import annotations

import math
from dataclasses import dataclass
from functools import lru_cache
from typing import Any

import stripe

from mechanic_backend.core.config import settings


# Stripe rejects anything above eight digits of minor units
MAX_AMOUNT_MINOR = 99_999_999


def to_minor_units(amount: float | int) -> int:
    """
    Dollars -> cents as round(amount * 100) on the float, halves up:
    42.5 -> 4250, 0.125 -> 13, 19.995 -> 1999 (19.995 * 100 is 1999.4999...).

    Raises ValueError for NaN and OverflowError for infinities.
    """
    return math.floor(float(amount) * 100 + 0.5)


@dataclass(frozen=True)
class PaymentConfig:
    secret_key: str
    webhook_secret: str
    currency: str = "usd"


@dataclass(frozen=True)
class CreatedIntent:
    id: str
    client_secret: str | None
    status: str
    amount: int


class PaymentClient:
    """Thin wrapper over the Stripe SDK so routes never touch module globals."""

    def __init__(self, cfg: PaymentConfig) -> None:
        self.cfg = cfg

    def create_payment_intent(
        self, *, amount_minor: int, metadata: dict[str, str]
    ) -> CreatedIntent:
        intent = stripe.PaymentIntent.create(
            api_key=self.cfg.secret_key,
            amount=amount_minor,
            currency=self.cfg.currency,
            metadata=metadata,
            automatic_payment_methods={"enabled": True},
        )
        return CreatedIntent(
            id=intent.id,
            client_secret=intent.client_secret,
            status=intent.status,
            amount=intent.amount,
        )

    def construct_event(self, payload: bytes, signature: str | None) -> dict[str, Any]:
        """
        Raises ValueError on a malformed payload and
        stripe.SignatureVerificationError on a bad signature.
        """
        event = stripe.Webhook.construct_event(
            payload, signature or "", self.cfg.webhook_secret
        )
        return event.to_dict() if hasattr(event, "to_dict") else dict(event)


@lru_cache
def get_payment_client() -> PaymentClient:
    cfg = PaymentConfig(
        secret_key=settings.stripe_secret_key,
        webhook_secret=settings.stripe_webhook_secret,
        currency=settings.payment_currency,
    )
    return PaymentClient(cfg)
