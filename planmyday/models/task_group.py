"""TaskGroup data model for planmyday."""

from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field, field_validator, model_validator

from planmyday.models.schedule_hours import ScheduleHours
from planmyday.models.task import ensure_utc


class TaskGroup(BaseModel):
    """A group of tasks. Parent groups are organizational buckets only."""

    id: str = Field(..., description="Unique group identifier")
    user_id: str = Field(..., description="User ID who owns this group")
    name: str = Field(..., description="Group name")
    color: str = Field("#3b82f6", description="Display color")
    parent_group_id: Optional[str] = Field(None, description="Parent group (builds a tree)")
    is_parent_group: bool = Field(False, description="Organizational bucket, never schedulable itself")
    auto_schedule_enabled: bool = Field(False, description="Whether tasks are placed inside auto_schedule_hours")
    auto_schedule_hours: Optional[ScheduleHours] = Field(None, description="Per-weekday placement window")
    priority: Optional[int] = Field(None, description="Optional tie-break weight")
    created_at: datetime = Field(..., description="Group creation timestamp")
    updated_at: datetime = Field(..., description="Group last update timestamp")

    @field_validator("created_at", "updated_at")
    @classmethod
    def _normalize_utc(cls, v):
        return ensure_utc(v)

    @model_validator(mode="after")
    def _parent_groups_are_not_schedulable(self):
        if self.is_parent_group and (self.auto_schedule_enabled or self.auto_schedule_hours is not None):
            raise ValueError("parent groups cannot carry auto-schedule settings")
        return self

    @property
    def has_auto_schedule_hours(self) -> bool:
        return self.auto_schedule_enabled and self.auto_schedule_hours is not None
