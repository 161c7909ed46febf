"""Group auto-scheduling for planmyday.

Takes the most urgent unscheduled tasks of a group and places them one by
one with the slot finder. Each placement is visible to the next one, so the
batch never double-books time.
"""

import calendar
import logging
from datetime import date, datetime, timedelta, timezone
from enum import Enum
from typing import List, Optional, Tuple

from planmyday.engine.availability import local_date, resolve_placement_hours, start_of_local_day
from planmyday.engine.groups import find_group, leaf_group_ids
from planmyday.engine.ranking import rank_for_placement
from planmyday.engine.results import (
    MovedTask,
    PlacementResult,
    SchedulingErrorKind,
    UnplaceableReason,
    UnplacedTask,
)
from planmyday.engine.slot_finder import find_nearest_available_slot
from planmyday.models.constants import (
    DEFAULT_AUTO_SCHEDULE_MAX_TASKS,
    DEFAULT_SEARCH_DAYS,
    MAX_AUTO_SCHEDULE_TASKS,
)
from planmyday.models.schedule_hours import ScheduleHours
from planmyday.models.task import Task, TaskStatus
from planmyday.models.task_group import TaskGroup

logger = logging.getLogger(__name__)


class SchedulingMode(str, Enum):
    """Where in time an auto-schedule run looks for slots."""
    TODAY = "today"
    TOMORROW = "tomorrow"
    NEXT_WEEK = "next-week"
    NEXT_MONTH = "next-month"
    ASAP = "asap"
    NOW = "now"


_SCHEDULABLE_STATUSES = (TaskStatus.PENDING.value, TaskStatus.IN_PROGRESS.value)


class AutoScheduleResult(PlacementResult):
    """Result of a group auto-schedule run."""

    def __init__(self):
        super().__init__()
        self.total_candidates: int = 0


def search_range(mode: SchedulingMode, now: datetime, time_zone: str) -> Tuple[datetime, int]:
    """Return (start_from, days) of the search horizon for a mode.

    asap and now both search forward from the current instant.
    """
    today = local_date(now, time_zone)
    if mode == SchedulingMode.TODAY:
        return start_of_local_day(today, time_zone), 1
    if mode == SchedulingMode.TOMORROW:
        return start_of_local_day(today + timedelta(days=1), time_zone), 1
    if mode == SchedulingMode.NEXT_WEEK:
        next_monday = today + timedelta(days=7 - today.weekday())
        return start_of_local_day(next_monday, time_zone), 7
    if mode == SchedulingMode.NEXT_MONTH:
        first = _first_of_next_month(today)
        return start_of_local_day(first, time_zone), calendar.monthrange(first.year, first.month)[1]
    return now, DEFAULT_SEARCH_DAYS


def _first_of_next_month(day: date) -> date:
    if day.month == 12:
        return date(day.year + 1, 1, 1)
    return date(day.year, day.month + 1, 1)


def clamp_max_tasks(max_tasks: Optional[int]) -> int:
    if not max_tasks:
        return DEFAULT_AUTO_SCHEDULE_MAX_TASKS
    return min(max(int(max_tasks), 1), MAX_AUTO_SCHEDULE_TASKS)


def select_candidates(tasks: List[Task], group_ids: set) -> List[Task]:
    """Unscheduled, open, top-level tasks with a duration, most urgent first.

    Tasks that have subtasks are never placed themselves.
    """
    parent_ids = {t.parent_task_id for t in tasks if t.parent_task_id}
    eligible = [
        t for t in tasks
        if t.group_id in group_ids
        and not t.is_scheduled
        and t.status in _SCHEDULABLE_STATUSES
        and t.duration
        and t.duration > 0
        and not t.parent_task_id
        and t.id not in parent_ids
        and not t.ignored
    ]
    return rank_for_placement(eligible, tie_breaker=lambda t: t.created_at)


def auto_schedule_group(
    group_id: str,
    mode: str,
    all_tasks: List[Task],
    all_groups: List[TaskGroup],
    awake_hours: Optional[ScheduleHours],
    time_zone: str,
    max_tasks: Optional[int] = DEFAULT_AUTO_SCHEDULE_MAX_TASKS,
    now: Optional[datetime] = None,
) -> AutoScheduleResult:
    """Place the top `max_tasks` unscheduled tasks of a group.

    Raises:
        ValueError: If `mode` is not a known scheduling mode
    """
    try:
        scheduling_mode = SchedulingMode(mode)
    except ValueError:
        valid = ", ".join(m.value for m in SchedulingMode)
        raise ValueError(f"Invalid mode. Must be one of: {valid}") from None

    result = AutoScheduleResult()
    now = now or datetime.now(timezone.utc)

    group = find_group(all_groups, group_id)
    if group is None:
        return result.fail(SchedulingErrorKind.NOT_FOUND, "Group not found")

    candidates = select_candidates(all_tasks, leaf_group_ids(all_groups, group_id))
    result.total_candidates = len(candidates)
    selected = candidates[:clamp_max_tasks(max_tasks)]
    if not selected:
        return result.fail(
            SchedulingErrorKind.NO_CANDIDATES,
            "No eligible tasks to schedule in this group",
            "No unscheduled tasks found with a duration set. Tasks must be unscheduled, "
            "have a duration, and not be completed/cancelled.",
        )

    result.feedback.append(
        f'Auto-scheduling {len(selected)} task{"s" if len(selected) != 1 else ""} '
        f'from "{group.name}" ({scheduling_mode.value})'
    )

    start_from, days = search_range(scheduling_mode, now, time_zone)
    working_tasks = list(all_tasks)

    for task in selected:
        hours = resolve_placement_hours(find_group(all_groups, task.group_id), awake_hours)
        slot = find_nearest_available_slot(
            task,
            working_tasks,
            start_from=start_from,
            working_hours=hours,
            max_days_ahead=days,
            time_zone=time_zone,
            now=now,
        )
        if slot is None:
            message = "No available time slot"
            result.unplaced.append(
                UnplacedTask(task_id=task.id, title=task.title, reason=UnplaceableReason.NO_FREE_SLOT, message=message)
            )
            result.feedback.append(f'Failed to schedule "{task.title}": {message}')
            continue

        result.moved_tasks.append(MovedTask(task_id=task.id, new_start=slot.start, new_end=slot.end))
        working_tasks = [
            t.model_copy(update={"scheduled_start": slot.start, "scheduled_end": slot.end}) if t.id == task.id else t
            for t in working_tasks
        ]
        result.feedback.append(f'Scheduled "{task.title}"')

    logger.info(
        f"Auto-schedule group={group_id} mode={scheduling_mode.value}: "
        f"scheduled {len(result.moved_tasks)} of {len(selected)}"
    )
    return result
