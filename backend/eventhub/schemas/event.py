"""Pydantic schemas for Events and their guest lists."""
from __future__ import annotations
from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field

from eventhub.models.event import EventType, Visibility
from eventhub.models.guest import GuestRSVP, GuestSource


class GuestIn(BaseModel):
    # Plain str so malformed ids reach the guest-list validation with its own error code
    user_id: str
    rsvp: Optional[GuestRSVP] = None

    model_config = {"extra": "forbid"}


class EventCreate(BaseModel):
    title: str = Field(min_length=1, max_length=255)
    description: Optional[str] = None
    location: str = Field(min_length=1, max_length=500)
    start_time: datetime
    end_time: datetime
    event_type: EventType = EventType.other
    visibility: Visibility = Visibility.private
    price: float = Field(default=0, ge=0)
    guests: list[GuestIn] = []

    model_config = {"extra": "forbid"}


class EventUpdate(BaseModel):
    title: Optional[str] = Field(default=None, min_length=1, max_length=255)
    description: Optional[str] = None
    location: Optional[str] = Field(default=None, min_length=1, max_length=500)
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    event_type: Optional[EventType] = None
    visibility: Optional[Visibility] = None
    price: Optional[float] = Field(default=None, ge=0)
    guests: Optional[list[GuestIn]] = None  # replaces the direct guest entries when present

    model_config = {"extra": "forbid"}


class GuestOut(BaseModel):
    user_id: str
    rsvp: GuestRSVP
    label: Optional[str] = None
    party_size: int
    source: GuestSource

    model_config = {"from_attributes": True}


class EventOut(BaseModel):
    event_id: str
    title: str
    description: Optional[str] = None
    location: str
    start_time: datetime
    end_time: datetime
    event_type: EventType
    visibility: Visibility
    price: float
    created_by: str
    is_archived: bool
    created_at: datetime
    updated_at: datetime
    guests: list[GuestOut] = []
    likes: list[str] = []
    going: list[str] = []
    interested: list[str] = []

    model_config = {"from_attributes": True}


# Rebuild EventOut now that GuestOut is defined
EventOut.model_rebuild()
