"""User data model for planmyday."""

from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field

from planmyday.models.constants import DEFAULT_TIMEZONE
from planmyday.models.schedule_hours import ScheduleHours


class User(BaseModel):
    """User model for planmyday."""
    
    id: str = Field(..., description="Unique user identifier")
    email: str = Field(..., description="User email address")
    name: Optional[str] = Field(None, description="User display name")
    timezone: str = Field(DEFAULT_TIMEZONE, description="IANA timezone name")
    awake_hours: Optional[ScheduleHours] = Field(None, description="Per-weekday awake window")
    working_hours: Optional[ScheduleHours] = Field(None, description="Per-weekday working window")
    created_at: datetime = Field(..., description="User creation timestamp")
    updated_at: datetime = Field(..., description="User last update timestamp")
