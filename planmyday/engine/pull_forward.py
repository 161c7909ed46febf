"""Pull-forward scheduling for planmyday.

Moves tasks of a group that are scheduled on a later date onto a target
date, packing them into that day's free time. The function only plans:
it never mutates the tasks it is given and returns the new start/end
values for the caller to persist.
"""

import logging
from datetime import date, datetime, timedelta
from typing import List, Optional, Set

from planmyday.engine.availability import (
    get_zone,
    local_date,
    resolve_day_window,
    resolve_placement_hours,
    weekday_name,
)
from planmyday.engine.groups import find_group, leaf_group_ids
from planmyday.engine.intervals import TimeSlot, clip_free_time, slots_overlap, subtract_intervals
from planmyday.engine.ranking import rank_for_placement
from planmyday.engine.results import (
    MovedTask,
    PlacementResult,
    SchedulingErrorKind,
    UnplaceableReason,
    UnplacedTask,
)
from planmyday.models.schedule_hours import ScheduleHours
from planmyday.models.task import Task
from planmyday.models.task_group import TaskGroup

logger = logging.getLogger(__name__)


class PullForwardResult(PlacementResult):
    """Result of a pull-forward run."""


def pull_forward_tasks_for_group(
    target_date: date,
    group_id: str,
    all_tasks: List[Task],
    all_groups: List[TaskGroup],
    awake_hours: Optional[ScheduleHours],
    time_zone: str,
    now: Optional[datetime] = None,
) -> PullForwardResult:
    """Pull a group's future tasks onto `target_date`.

    Candidates are incomplete, unlocked tasks of the group (or of its leaf
    sub-groups when a parent group is targeted) whose scheduled start falls on
    a date after `target_date`. They are placed greedily, most urgent first,
    into the first free gap of the day's window large enough to hold them.

    Args:
        target_date: Calendar date (in `time_zone`) to pull tasks into
        group_id: Target group; a parent group expands to its leaf children
        all_tasks: Snapshot of all the user's tasks
        all_groups: Snapshot of all the user's groups
        awake_hours: User-level awake hours
        time_zone: IANA timezone used to interpret dates and hours
        now: If given, free time before this instant is not used

    Returns:
        PullForwardResult with moved tasks, unplaced tasks and feedback, or an
        error when the group is unknown or the day has no availability
    """
    result = PullForwardResult()
    day_label = target_date.isoformat()

    target_group = find_group(all_groups, group_id)
    if target_group is None:
        return result.fail(
            SchedulingErrorKind.NOT_FOUND,
            "Group not found",
            f"No task group with id {group_id} exists.",
        )

    group_ids = leaf_group_ids(all_groups, group_id)
    if not group_ids:
        return result.fail(
            SchedulingErrorKind.NOT_FOUND,
            "Group has no schedulable sub-groups",
            f'"{target_group.name}" has no sub-groups that can hold tasks.',
        )

    candidates = [t for t in all_tasks if _is_candidate(t, group_ids, target_date, time_zone)]

    hours = resolve_placement_hours(target_group, awake_hours)
    window = resolve_day_window(hours, target_date, time_zone)
    if window is None:
        return result.fail(
            SchedulingErrorKind.NO_AVAILABILITY,
            "No awake hours configured for this day",
            f"Set awake hours for {weekday_name(target_date).value.capitalize()} to pull tasks into {day_label}.",
        )

    if not candidates:
        result.feedback.append(f'No future tasks from "{target_group.name}" to pull into {day_label}.')
        return result

    candidate_ids = {t.id for t in candidates}
    occupied = [
        TimeSlot(start=t.scheduled_start, end=t.scheduled_end)
        for t in all_tasks
        if t.id not in candidate_ids and t.is_scheduled and not t.is_closed
    ]
    occupied = [slot for slot in occupied if slots_overlap(slot, window)]
    free = subtract_intervals(window, occupied)
    if now is not None:
        free = clip_free_time(free, now)

    details: List[str] = []
    for task in rank_for_placement(candidates):
        if not task.duration or task.duration <= 0:
            message = f'"{task.title}" has no duration set'
            result.unplaced.append(_unplaced(task, UnplaceableReason.NO_DURATION, message))
            details.append(f"Skipped {message}.")
            continue

        slot = take_first_fit(free, task.duration)
        if slot is None:
            message = f"no free slot of {task.duration} minutes left on {day_label}"
            result.unplaced.append(_unplaced(task, UnplaceableReason.NO_FREE_SLOT, message))
            details.append(f'Could not place "{task.title}": {message}.')
            continue

        result.moved_tasks.append(MovedTask(task_id=task.id, new_start=slot.start, new_end=slot.end))
        details.append(
            f'Moved "{task.title}" to {_format_local(slot.start, time_zone)}-{_format_local(slot.end, time_zone)}.'
        )

    moved = len(result.moved_tasks)
    result.feedback.append(
        f'Pulled {moved} of {len(candidates)} task{"s" if len(candidates) != 1 else ""} '
        f'from "{target_group.name}" into {day_label}.'
    )
    result.feedback.extend(details)

    logger.info(
        f"Pull-forward group={group_id} date={day_label}: moved {moved}, unplaced {len(result.unplaced)}"
    )
    return result


def _is_candidate(task: Task, group_ids: Set[str], target_date: date, time_zone: str) -> bool:
    if task.is_closed or task.locked:
        return False
    if task.group_id not in group_ids:
        return False
    if task.scheduled_start is None:
        return False
    return local_date(task.scheduled_start, time_zone) > target_date


def take_first_fit(free: List[TimeSlot], duration_minutes: int) -> Optional[TimeSlot]:
    """Carve `duration_minutes` from the start of the first gap big enough.

    The chosen gap is shrunk (or removed) in place.
    """
    needed = timedelta(minutes=duration_minutes)
    for i, gap in enumerate(free):
        if gap.end - gap.start < needed:
            continue
        slot = TimeSlot(start=gap.start, end=gap.start + needed)
        if slot.end >= gap.end:
            free.pop(i)
        else:
            free[i] = TimeSlot(start=slot.end, end=gap.end)
        return slot
    return None


def _unplaced(task: Task, reason: UnplaceableReason, message: str) -> UnplacedTask:
    return UnplacedTask(task_id=task.id, title=task.title, reason=reason, message=message)


def _format_local(instant: datetime, time_zone: str) -> str:
    return instant.astimezone(get_zone(time_zone)).strftime("%H:%M")
