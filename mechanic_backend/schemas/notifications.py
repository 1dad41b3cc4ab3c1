from datetime import datetime

from pydantic import BaseModel


class NotificationOut(BaseModel):
    id: str
    user_id: str
    type: str
    title: str
    message: str
    link: str | None
    related_id: str | None
    channel: str
    is_read: bool
    created_by: str | None
    created_at: datetime

    class Config:
        from_attributes = True


class CreateNotificationIn(BaseModel):
    recipientId: str | None = None
    message: str | None = None
    title: str = ""
    type: str = "info"
    link: str | None = None


class EmailIn(BaseModel):
    to: str | None = None
    subject: str | None = None
    text: str | None = None
    html: str | None = None
