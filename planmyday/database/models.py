"""SQLAlchemy database models for planmyday."""

import logging
from datetime import datetime, timezone
from typing import Any, Optional
import uuid
from sqlalchemy import Column, String, Integer, Boolean, DateTime, JSON, ForeignKey

from typing import Union, TypeVar, Type
from planmyday.database.database import Base
from planmyday.models.constants import DEFAULT_ENERGY_LEVEL, DEFAULT_PRIORITY, DEFAULT_TIMEZONE
from planmyday.models.schedule_hours import ScheduleHours
from planmyday.models.task import TaskStatus

logger = logging.getLogger(__name__)

T = TypeVar('T')


def enum_to_value(enum_obj: Union[str, T]) -> str:
    """Convert enum to string value (handles both enum and string).

    Args:
        enum_obj: Enum instance or string value

    Returns:
        String value of the enum, or the string itself if already a string
    """
    if hasattr(enum_obj, 'value'):
        return enum_obj.value
    return str(enum_obj)


def value_to_enum(value: str, enum_class: Type[T], default: T) -> T:
    """Convert string to enum with fallback to default.

    Args:
        value: String value to convert
        enum_class: Enum class to convert to
        default: Default enum value if conversion fails

    Returns:
        Enum instance, or default if conversion fails
    """
    if not value:
        return default
    try:
        return enum_class(value.lower())
    except (ValueError, AttributeError):
        return default


def hours_from_json(value: Any, owner: str) -> Optional[ScheduleHours]:
    """Parse a stored hours map. Unreadable maps are logged and treated as unset."""
    if not value:
        return None
    try:
        return ScheduleHours.model_validate(value)
    except ValueError as e:
        logger.error(f"Ignoring invalid schedule hours on {owner}: {e}")
        return None


def hours_to_json(hours: Optional[ScheduleHours]) -> Optional[dict]:
    return hours.model_dump() if hours is not None else None


class UserDB(Base):
    """Database model for User."""

    __tablename__ = "users"

    id = Column(String, primary_key=True)
    email = Column(String, nullable=False, unique=True, index=True)
    name = Column(String, nullable=True)
    timezone = Column(String, nullable=True, default=DEFAULT_TIMEZONE)
    awake_hours = Column(JSON, nullable=True)
    working_hours = Column(JSON, nullable=True)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    def to_pydantic(self):
        """Convert database model to Pydantic model."""
        from planmyday.models.user import User

        return User(
            id=self.id,
            email=self.email,
            name=self.name,
            timezone=self.timezone or DEFAULT_TIMEZONE,
            awake_hours=hours_from_json(self.awake_hours, f"user {self.id}"),
            working_hours=hours_from_json(self.working_hours, f"user {self.id}"),
            created_at=self.created_at,
            updated_at=self.updated_at,
        )

    @classmethod
    def from_pydantic(cls, user):
        """Create database model from Pydantic model."""
        return cls(
            id=user.id,
            email=user.email,
            name=user.name,
            timezone=user.timezone,
            awake_hours=hours_to_json(user.awake_hours),
            working_hours=hours_to_json(user.working_hours),
            created_at=_naive_utc(user.created_at),
            updated_at=_naive_utc(user.updated_at),
        )


class TaskGroupDB(Base):
    """Database model for TaskGroup."""

    __tablename__ = "task_groups"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String, nullable=False)
    color = Column(String, nullable=False, default="#3b82f6")
    parent_group_id = Column(String, ForeignKey("task_groups.id", ondelete="SET NULL"), nullable=True, index=True)
    is_parent_group = Column(Boolean, nullable=False, default=False)
    auto_schedule_enabled = Column(Boolean, nullable=False, default=False)
    auto_schedule_hours = Column(JSON, nullable=True)
    priority = Column(Integer, nullable=True)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    def to_pydantic(self):
        """Convert database model to Pydantic model."""
        from planmyday.models.task_group import TaskGroup

        is_parent = bool(self.is_parent_group)
        return TaskGroup(
            id=self.id,
            user_id=self.user_id,
            name=self.name,
            color=self.color,
            parent_group_id=self.parent_group_id or None,
            is_parent_group=is_parent,
            # Parent groups never carry auto-schedule settings
            auto_schedule_enabled=bool(self.auto_schedule_enabled) and not is_parent,
            auto_schedule_hours=None if is_parent else hours_from_json(self.auto_schedule_hours, f"group {self.id}"),
            priority=self.priority,
            created_at=self.created_at,
            updated_at=self.updated_at,
        )

    @classmethod
    def from_pydantic(cls, group):
        """Create database model from Pydantic model."""
        return cls(
            id=group.id,
            user_id=group.user_id,
            name=group.name,
            color=group.color,
            parent_group_id=group.parent_group_id,
            is_parent_group=group.is_parent_group,
            auto_schedule_enabled=group.auto_schedule_enabled,
            auto_schedule_hours=hours_to_json(group.auto_schedule_hours),
            priority=group.priority,
            created_at=_naive_utc(group.created_at),
            updated_at=_naive_utc(group.updated_at),
        )


class TaskDB(Base):
    """Database model for Task."""

    __tablename__ = "tasks"

    # Primary key
    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))

    # Ownership and grouping
    user_id = Column(String, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    group_id = Column(String, ForeignKey("task_groups.id", ondelete="SET NULL"), nullable=True, index=True)
    parent_task_id = Column(String, ForeignKey("tasks.id", ondelete="CASCADE"), nullable=True, index=True)

    # Basic fields
    title = Column(String, nullable=False)
    description = Column(String, nullable=True)
    status = Column(String, nullable=False, default=TaskStatus.PENDING.value)
    priority = Column(Integer, nullable=False, default=DEFAULT_PRIORITY)
    energy_level_required = Column(Integer, nullable=False, default=DEFAULT_ENERGY_LEVEL)

    # Scheduling fields
    duration = Column(Integer, nullable=True)
    scheduled_start = Column(DateTime, nullable=True, index=True)
    scheduled_end = Column(DateTime, nullable=True)
    due_date = Column(DateTime, nullable=True)

    # Flags
    locked = Column(Boolean, nullable=False, default=False)
    ignored = Column(Boolean, nullable=False, default=False)

    # Timestamps
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    def to_pydantic(self):
        """Convert database model to Pydantic model."""
        from planmyday.models.task import Task

        return Task(
            id=self.id,
            user_id=self.user_id,
            title=self.title,
            description=self.description,
            status=value_to_enum(self.status, TaskStatus, TaskStatus.PENDING),
            priority=self.priority,
            duration=self.duration,
            scheduled_start=self.scheduled_start,
            scheduled_end=self.scheduled_end,
            due_date=self.due_date,
            locked=bool(self.locked),
            group_id=self.group_id,
            energy_level_required=self.energy_level_required,
            parent_task_id=self.parent_task_id,
            ignored=bool(self.ignored),
            created_at=self.created_at,
            updated_at=self.updated_at,
        )

    @classmethod
    def from_pydantic(cls, task):
        """Create database model from Pydantic model."""
        return cls(
            id=task.id,
            user_id=task.user_id,
            group_id=task.group_id,
            parent_task_id=task.parent_task_id,
            title=task.title,
            description=task.description,
            status=enum_to_value(task.status),
            priority=task.priority,
            energy_level_required=task.energy_level_required,
            duration=task.duration,
            scheduled_start=_naive_utc(task.scheduled_start),
            scheduled_end=_naive_utc(task.scheduled_end),
            due_date=_naive_utc(task.due_date),
            locked=task.locked,
            ignored=task.ignored,
            created_at=_naive_utc(task.created_at),
            updated_at=_naive_utc(task.updated_at),
        )


def _naive_utc(dt: Optional[datetime]) -> Optional[datetime]:
    """Timestamps are stored as naive UTC; the pydantic models re-attach the zone."""
    if dt is None or dt.tzinfo is None:
        return dt
    return dt.astimezone(timezone.utc).replace(tzinfo=None)
