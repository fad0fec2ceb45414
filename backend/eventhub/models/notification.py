"""Notification ORM model: messages written by the notification sink."""
import uuid
import enum
from sqlalchemy import Column, String, Text, DateTime, ForeignKey, Enum as SAEnum
from sqlalchemy.sql import func
from eventhub.database import Base


class NotificationType(str, enum.Enum):
    reservation_request = "reservation_request"
    reservation_update = "reservation_update"
    reservation_cancellation = "reservation_cancellation"
    reservation_response = "reservation_response"
    like = "like"
    guest_invitation = "guest_invitation"
    guest_response = "guest_response"


class Notification(Base):
    __tablename__ = "notifications"

    notification_id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    recipient_id = Column(String(36), ForeignKey("users.user_id"), nullable=False, index=True)
    sender_id = Column(String(36), ForeignKey("users.user_id"), nullable=True)
    event_id = Column(String(36), ForeignKey("events.event_id"), nullable=True)
    type = Column(SAEnum(NotificationType), nullable=False)
    message = Column(Text, nullable=False)
    read_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
