"""Task data model for planmyday."""

from datetime import datetime, timezone
from typing import Optional
from enum import Enum
from pydantic import BaseModel, Field, field_validator, model_validator

from planmyday.models.constants import (
    DEFAULT_ENERGY_LEVEL,
    DEFAULT_PRIORITY,
    MAX_ENERGY_LEVEL,
    MAX_PRIORITY,
    MIN_ENERGY_LEVEL,
    MIN_PRIORITY,
)


class TaskStatus(str, Enum):
    """Task status enumeration."""
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    RESCHEDULED = "rescheduled"


# Statuses that never take part in placement and never block calendar time
CLOSED_STATUSES = (TaskStatus.COMPLETED.value, TaskStatus.CANCELLED.value)


def ensure_utc(dt: Optional[datetime]) -> Optional[datetime]:
    """Return a timezone-aware UTC datetime (naive values are taken to be UTC)."""
    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


class Task(BaseModel):
    """Canonical Task model (the fields the scheduler works with)."""

    id: str = Field(..., description="Unique task identifier (UUID v4)")
    user_id: str = Field(..., description="User ID who owns this task")
    title: str = Field(..., description="Task title")
    description: Optional[str] = Field(None, description="Task description")
    status: TaskStatus = Field(TaskStatus.PENDING, description="Task status")
    priority: int = Field(
        DEFAULT_PRIORITY, ge=MIN_PRIORITY, le=MAX_PRIORITY, description="1 = most urgent, 5 = least urgent"
    )
    duration: Optional[int] = Field(None, description="Estimated duration in minutes")
    scheduled_start: Optional[datetime] = Field(None, description="Scheduled start (UTC)")
    scheduled_end: Optional[datetime] = Field(None, description="Scheduled end (UTC)")
    due_date: Optional[datetime] = Field(None, description="When the task must be completed by")
    locked: bool = Field(False, description="Excluded from automatic rescheduling")
    group_id: Optional[str] = Field(None, description="Owning task group")
    energy_level_required: int = Field(
        DEFAULT_ENERGY_LEVEL, ge=MIN_ENERGY_LEVEL, le=MAX_ENERGY_LEVEL, description="1 = low, 5 = high"
    )
    parent_task_id: Optional[str] = Field(None, description="Parent task (subtasks only, one level deep)")
    ignored: bool = Field(False, description="Excluded from overdue and auto-placement sweeps")
    created_at: datetime = Field(..., description="Task creation timestamp")
    updated_at: datetime = Field(..., description="Task last update timestamp")

    @field_validator("scheduled_start", "scheduled_end", "due_date", "created_at", "updated_at")
    @classmethod
    def _normalize_utc(cls, v):
        return ensure_utc(v)

    @model_validator(mode="after")
    def _check_schedule(self):
        if (self.scheduled_start is None) != (self.scheduled_end is None):
            raise ValueError("scheduled_start and scheduled_end must be set together")
        if self.scheduled_start is not None and self.scheduled_start >= self.scheduled_end:
            raise ValueError("scheduled_start must be before scheduled_end")
        return self

    @property
    def is_scheduled(self) -> bool:
        return self.scheduled_start is not None and self.scheduled_end is not None

    @property
    def is_closed(self) -> bool:
        return self.status in CLOSED_STATUSES

    class Config:
        """Pydantic configuration."""
        use_enum_values = True
