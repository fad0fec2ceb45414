"""EventGuest ORM model: the event's ordered guest list."""
import enum
from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, UniqueConstraint, Enum as SAEnum
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from eventhub.database import Base


class GuestRSVP(str, enum.Enum):
    yes = "yes"
    no = "no"
    maybe = "maybe"
    pending = "pending"


class GuestSource(str, enum.Enum):
    direct = "direct"
    reservation = "reservation"


class EventGuest(Base):
    __tablename__ = "event_guests"
    __table_args__ = (UniqueConstraint("event_id", "user_id", name="uq_event_guest_user"),)

    # Autoincrement id doubles as list position
    guest_id = Column(Integer, primary_key=True, autoincrement=True)
    event_id = Column(String(36), ForeignKey("events.event_id"), nullable=False)
    user_id = Column(String(36), ForeignKey("users.user_id"), nullable=False)
    rsvp = Column(SAEnum(GuestRSVP), nullable=False, default=GuestRSVP.maybe)
    label = Column(String(120), nullable=True)
    party_size = Column(Integer, nullable=False, default=1)
    source = Column(SAEnum(GuestSource), nullable=False, default=GuestSource.direct)
    responded_at = Column(DateTime(timezone=True), server_default=func.now())

    event = relationship("Event", back_populates="guests")
