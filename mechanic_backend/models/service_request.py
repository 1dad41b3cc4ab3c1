from __future__ import annotations

import uuid
from datetime import datetime, timezone

from sqlalchemy import DateTime, ForeignKey, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from mechanic_backend.db.session import Base

# pending/assigned/in_progress/completed/cancelled/accepted/pending_payment,
# plus driver_assigned_pickup/delivered/paid written by driver-accept and the payment webhook
PAYABLE_STATUSES = ("completed", "pending_payment")
REVIEWABLE_STATUSES = ("completed", "delivered", "paid")


class ServiceRequest(Base):
    __tablename__ = "service_requests"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )

    customer_id: Mapped[str] = mapped_column(ForeignKey("users.id"), index=True)
    driver_id: Mapped[str | None] = mapped_column(
        ForeignKey("users.id"), index=True, nullable=True
    )
    pickup_driver_id: Mapped[str | None] = mapped_column(
        ForeignKey("users.id"), index=True, nullable=True
    )
    mechanic_id: Mapped[str | None] = mapped_column(
        ForeignKey("users.id"), nullable=True
    )
    shop_id: Mapped[str | None] = mapped_column(
        ForeignKey("shops.id"), index=True, nullable=True
    )
    vehicle_id: Mapped[str | None] = mapped_column(String(36), nullable=True)

    service_type: Mapped[str] = mapped_column(String(100), default="")
    description: Mapped[str] = mapped_column(Text, default="")
    status: Mapped[str] = mapped_column(String(32), default="pending", index=True)
    urgency: Mapped[str] = mapped_column(String(16), default="normal")

    pickup_address: Mapped[str] = mapped_column(String(500), default="")
    location: Mapped[str | None] = mapped_column(String(500), nullable=True)
    pickup_date: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    estimated_cost: Mapped[float | None] = mapped_column(Numeric(10, 2), nullable=True)
    final_cost: Mapped[float | None] = mapped_column(Numeric(10, 2), nullable=True)
    payment_status: Mapped[str] = mapped_column(String(32), default="unpaid")

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(timezone.utc)
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    shop = relationship("Shop", lazy="selectin")
