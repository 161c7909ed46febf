"""Data models for planmyday."""

from planmyday.models.task import Task, TaskStatus
from planmyday.models.task_group import TaskGroup
from planmyday.models.schedule_hours import DayHours, ScheduleHours, Weekday
from planmyday.models.user import User

__all__ = [
    "Task",
    "TaskStatus",
    "TaskGroup",
    "DayHours",
    "ScheduleHours",
    "Weekday",
    "User",
]
