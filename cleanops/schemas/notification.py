"""Notification schemas."""
from datetime import datetime
from typing import Any
from pydantic import BaseModel


class NotificationResponse(BaseModel):
    id: int
    type: str
    title: str | None = None
    body: str | None = None
    data: dict[str, Any] | None = None
    read: bool
    sent_at: datetime | None = None
    created_at: datetime | None = None

    class Config:
        from_attributes = True
