"""EventToggle ORM model: one row per (event, user, set) membership."""
import enum
from sqlalchemy import Column, String, DateTime, ForeignKey, Enum as SAEnum
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from eventhub.database import Base


class ToggleField(str, enum.Enum):
    likes = "likes"
    going = "going"
    interested = "interested"


class EventToggle(Base):
    __tablename__ = "event_toggles"

    # Composite key gives set semantics: a user is in each set at most once
    event_id = Column(String(36), ForeignKey("events.event_id"), primary_key=True)
    user_id = Column(String(36), ForeignKey("users.user_id"), primary_key=True)
    field = Column(SAEnum(ToggleField), primary_key=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    event = relationship("Event", back_populates="toggles")
