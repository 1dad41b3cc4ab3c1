from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel


class ShopOut(BaseModel):
    id: str
    name: str
    address: str = ""

    class Config:
        from_attributes = True


class ServiceRequestOut(BaseModel):
    id: str
    customer_id: str
    driver_id: str | None = None
    pickup_driver_id: str | None = None
    mechanic_id: str | None = None
    shop_id: str | None = None
    vehicle_id: str | None = None
    service_type: str
    description: str
    status: str
    urgency: str
    pickup_address: str
    location: str | None = None
    pickup_date: datetime | None = None
    estimated_cost: Decimal | None = None
    final_cost: Decimal | None = None
    payment_status: str
    created_at: datetime
    updated_at: datetime
    shop: ShopOut | None = None

    class Config:
        from_attributes = True


class DriverAcceptIn(BaseModel):
    serviceRequestId: str | None = None
