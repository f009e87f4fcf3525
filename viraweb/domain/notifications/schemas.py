"""Notification domain schemas - Pydantic models for validation"""

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel

NotificationType = Literal["info", "warning", "error", "success"]


class NotificationCreate(BaseModel):
    title: str
    message: str
    type: NotificationType = "info"


class NotificationResponse(BaseModel):
    id: int
    title: str
    message: str
    type: str
    read: bool
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class UnreadCountResponse(BaseModel):
    unread_count: int
