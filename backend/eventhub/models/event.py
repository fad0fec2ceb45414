"""Event ORM model: the aggregate root for attendance."""
import uuid
import enum
from sqlalchemy import Column, String, Text, DateTime, Boolean, Float, ForeignKey, Enum as SAEnum
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from eventhub.database import Base
from eventhub.models.toggle import ToggleField


class EventType(str, enum.Enum):
    clubbing = "clubbing"
    rave = "rave"
    birthday = "birthday"
    wedding = "wedding"
    food = "food"
    sport = "sport"
    meeting = "meeting"
    conference = "conference"
    other = "other"


class Visibility(str, enum.Enum):
    public = "public"
    private = "private"


class Event(Base):
    __tablename__ = "events"

    event_id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    location = Column(String(500), nullable=False)
    start_time = Column(DateTime(timezone=True), nullable=False)
    end_time = Column(DateTime(timezone=True), nullable=False)
    event_type = Column(SAEnum(EventType), nullable=False, default=EventType.other)
    visibility = Column(SAEnum(Visibility), nullable=False, default=Visibility.private)
    price = Column(Float, nullable=False, default=0)
    created_by = Column(String(36), ForeignKey("users.user_id"), nullable=False)
    deleted = Column(Boolean, nullable=False, default=False)
    is_archived = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    guests = relationship(
        "EventGuest",
        back_populates="event",
        order_by="EventGuest.guest_id",
        cascade="all, delete-orphan",
    )
    toggles = relationship("EventToggle", back_populates="event", cascade="all, delete-orphan")

    def members_of(self, field: ToggleField) -> list[str]:
        return [t.user_id for t in self.toggles if t.field == field]

    @property
    def likes(self) -> list[str]:
        return self.members_of(ToggleField.likes)

    @property
    def going(self) -> list[str]:
        return self.members_of(ToggleField.going)

    @property
    def interested(self) -> list[str]:
        return self.members_of(ToggleField.interested)

    def guest_for(self, user_id: str):
        """Return the guest entry for ``user_id`` or None; ids compare as strings."""
        for guest in self.guests:
            if str(guest.user_id) == str(user_id):
                return guest
        return None
