"""Notification-related schemas."""

from datetime import datetime
from typing import Optional, List
from pydantic import BaseModel


class NotificationResponse(BaseModel):
    """Notification response schema."""
    id: int
    title: str
    message: str
    notification_type: str
    severity: str
    reference_type: Optional[str] = None
    reference_id: Optional[int] = None
    reference_code: Optional[str] = None
    status: str  # read, unread
    created_at: datetime

    class Config:
        from_attributes = True


class NotificationListResponse(BaseModel):
    """Notification list response."""
    items: List[NotificationResponse]
    total: int
    unread_count: int
