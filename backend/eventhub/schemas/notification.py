"""Pydantic schemas for Notifications."""
from datetime import datetime
from typing import Optional
from pydantic import BaseModel

from eventhub.models.notification import NotificationType


class NotificationOut(BaseModel):
    notification_id: str
    type: NotificationType
    message: str
    event_id: Optional[str] = None
    sender_id: Optional[str] = None
    read_at: Optional[datetime] = None
    created_at: datetime

    model_config = {"from_attributes": True}
