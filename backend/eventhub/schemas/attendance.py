"""Pydantic schemas for RSVPs, toggles and reservations."""
from __future__ import annotations
from datetime import datetime
from typing import Optional
from pydantic import BaseModel

from eventhub.models.reservation import ReservationStatus
from eventhub.schemas.event import GuestOut


class RSVPRequest(BaseModel):
    # Validated by the guest service so bad values get the invalid_rsvp_status code
    status: str = "maybe"

    model_config = {"extra": "forbid"}


class ToggleRequest(BaseModel):
    field: str

    model_config = {"extra": "forbid"}


class ReservationCreate(BaseModel):
    number_of_people: int

    model_config = {"extra": "forbid"}


class ReservationUpdate(BaseModel):
    number_of_people: int

    model_config = {"extra": "forbid"}


class ReservationRespond(BaseModel):
    status: str  # confirmed or rejected

    model_config = {"extra": "forbid"}


class ReservationOut(BaseModel):
    reservation_id: str
    event_id: str
    user_id: str
    number_of_people: int
    status: ReservationStatus
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class GuestListOut(BaseModel):
    event_id: str
    guests: list[GuestOut] = []

    model_config = {"from_attributes": True}


class AttendanceOut(BaseModel):
    event_id: str
    guests: list[GuestOut] = []
    reservations: list[ReservationOut] = []

    model_config = {"from_attributes": True}


class MyAttendanceOut(BaseModel):
    event_id: str
    user_id: str
    status: str  # going, interested or notgoing
    guest: Optional[GuestOut] = None
    reservation: Optional[ReservationOut] = None

    model_config = {"from_attributes": True}


class ReconcileOut(BaseModel):
    projected: int
    removed: int
