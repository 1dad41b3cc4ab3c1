from datetime import datetime

from pydantic import BaseModel


class CreateReviewIn(BaseModel):
    service_request_id: str | None = None
    rating: int | None = None
    comment: str = ""


class ReviewOut(BaseModel):
    id: str
    service_request_id: str
    customer_id: str
    shop_id: str | None
    driver_id: str | None
    rating: int
    comment: str
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class UpdateReviewIn(BaseModel):
    rating: int | None = None
    comment: str | None = None
