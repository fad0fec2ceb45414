"""Pydantic schemas for Users."""
from datetime import datetime
from pydantic import BaseModel, Field

from eventhub.models.user import UserRole


class UserCreate(BaseModel):
    # No role here: sign-up is unauthenticated, so admins are provisioned out of band
    display_name: str = Field(min_length=1, max_length=100)

    model_config = {"extra": "forbid"}


class UserOut(BaseModel):
    user_id: str
    display_name: str
    role: UserRole
    created_at: datetime

    model_config = {"from_attributes": True}
