from datetime import datetime, timezone

from sqlalchemy import DateTime, ForeignKey, Integer, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column

from mechanic_backend.db.session import Base


class PaymentIntentRecord(Base):
    """Local mirror of a Stripe PaymentIntent."""

    __tablename__ = "payment_intents"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    payment_intent_id: Mapped[str] = mapped_column(String(255), unique=True, index=True)
    service_request_id: Mapped[str] = mapped_column(
        ForeignKey("service_requests.id"), index=True
    )
    customer_id: Mapped[str] = mapped_column(ForeignKey("users.id"), index=True)

    amount: Mapped[float] = mapped_column(Numeric(10, 2))
    status: Mapped[str] = mapped_column(String(64))

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(timezone.utc)
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )
