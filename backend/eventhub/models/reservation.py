"""Reservation ORM model: party bookings awaiting host approval."""
import uuid
import enum
from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Index, Enum as SAEnum, text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from eventhub.database import Base


class ReservationStatus(str, enum.Enum):
    pending = "pending"
    confirmed = "confirmed"
    rejected = "rejected"
    canceled = "canceled"


ACTIVE_STATUSES = (ReservationStatus.pending, ReservationStatus.confirmed)

# canceled and rejected are terminal
ALLOWED_TRANSITIONS = {
    ReservationStatus.pending: {
        ReservationStatus.confirmed,
        ReservationStatus.rejected,
        ReservationStatus.canceled,
        ReservationStatus.pending,
    },
    ReservationStatus.confirmed: {ReservationStatus.canceled, ReservationStatus.pending},
    ReservationStatus.rejected: set(),
    ReservationStatus.canceled: set(),
}

_ACTIVE_WHERE = text("status IN ('pending', 'confirmed')")


class Reservation(Base):
    __tablename__ = "reservations"
    __table_args__ = (
        Index(
            "uq_active_reservation",
            "event_id",
            "user_id",
            unique=True,
            sqlite_where=_ACTIVE_WHERE,
            postgresql_where=_ACTIVE_WHERE,
        ),
    )

    reservation_id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    event_id = Column(String(36), ForeignKey("events.event_id"), nullable=False)
    user_id = Column(String(36), ForeignKey("users.user_id"), nullable=False)
    number_of_people = Column(Integer, nullable=False)
    status = Column(SAEnum(ReservationStatus), nullable=False, default=ReservationStatus.pending)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    event = relationship("Event")
    user = relationship("User")
