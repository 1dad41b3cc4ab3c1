from datetime import datetime

from pydantic import BaseModel


class StatusUpdateIn(BaseModel):
    serviceRequestId: str | None = None
    status: str | None = None
    notes: str | None = None


class StatusHistoryOut(BaseModel):
    id: str
    service_request_id: str
    previous_status: str
    new_status: str
    changed_by: str
    changed_by_role: str
    notes: str | None
    created_at: datetime

    class Config:
        from_attributes = True
