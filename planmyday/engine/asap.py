"""Schedule-ASAP for a single task.

A task without subtasks gets the nearest free slot itself. A task with
subtasks is never placed: its subtasks are placed one after another instead,
and any block the parent still holds is cleared.
"""

import logging
from datetime import datetime, timezone
from typing import List, Optional

from planmyday.engine.results import (
    MovedTask,
    PlacementResult,
    SchedulingErrorKind,
    UnplaceableReason,
    UnplacedTask,
)
from planmyday.engine.slot_finder import find_nearest_available_slot
from planmyday.models.constants import DEFAULT_SEARCH_DAYS
from planmyday.models.schedule_hours import ScheduleHours
from planmyday.models.task import Task

logger = logging.getLogger(__name__)

NO_SLOT_MESSAGE = "No available time slot"


class AsapResult(PlacementResult):
    """Result of a schedule-ASAP run."""

    def __init__(self):
        super().__init__()
        # Tasks whose scheduled block must be removed (parents of placed subtasks)
        self.cleared_task_ids: List[str] = []
        self.subtask_count: int = 0


def subtasks_of(task: Task, all_tasks: List[Task]) -> List[Task]:
    """Direct subtasks of `task`, oldest first."""
    children = [t for t in all_tasks if t.parent_task_id == task.id]
    return sorted(children, key=lambda t: (t.created_at, t.id))


def schedule_task_asap(
    task: Task,
    all_tasks: List[Task],
    working_hours: Optional[ScheduleHours],
    time_zone: str,
    now: Optional[datetime] = None,
) -> AsapResult:
    """Place `task` (or, for a parent task, its subtasks) as early as possible.

    Args:
        task: Task the user asked to schedule
        all_tasks: Snapshot of all the user's tasks, `task` included
        working_hours: Window to place inside (None means the 9-5 default)
        time_zone: IANA timezone for hours and day boundaries
        now: Current instant, injectable for deterministic runs

    Returns:
        AsapResult with the planned moves, the parent to clear (if any) and
        feedback, or an error when a leaf task has no duration or no slot
    """
    result = AsapResult()
    now = now or datetime.now(timezone.utc)

    subtasks = subtasks_of(task, all_tasks)
    if subtasks:
        return _schedule_subtasks(task, subtasks, all_tasks, working_hours, time_zone, now, result)

    if not task.duration or task.duration <= 0:
        return result.fail(
            SchedulingErrorKind.NO_CANDIDATES,
            "Task has no duration",
            f'Set a duration on "{task.title}" before scheduling it.',
        )

    slot = find_nearest_available_slot(
        task, all_tasks, working_hours=working_hours, time_zone=time_zone, now=now
    )
    if slot is None:
        return result.fail(
            SchedulingErrorKind.NO_AVAILABILITY,
            NO_SLOT_MESSAGE,
            f'No free slot of {task.duration} minutes in the next {DEFAULT_SEARCH_DAYS} days for "{task.title}".',
        )

    result.moved_tasks.append(MovedTask(task_id=task.id, new_start=slot.start, new_end=slot.end))
    result.feedback.append(f'Scheduled "{task.title}"')
    return result


def _schedule_subtasks(
    parent: Task,
    subtasks: List[Task],
    all_tasks: List[Task],
    working_hours: Optional[ScheduleHours],
    time_zone: str,
    now: datetime,
    result: AsapResult,
) -> AsapResult:
    result.subtask_count = len(subtasks)
    # The parent's own block never counts as busy time for its subtasks
    working_tasks = [t for t in all_tasks if t.id != parent.id]
    details: List[str] = []
    last_end: Optional[datetime] = None

    for subtask in subtasks:
        if subtask.is_closed:
            details.append(f'Skipped "{subtask.title}" (already {subtask.status})')
            continue
        if not subtask.duration or subtask.duration <= 0:
            result.unplaced.append(
                UnplacedTask(
                    task_id=subtask.id,
                    title=subtask.title,
                    reason=UnplaceableReason.NO_DURATION,
                    message="no duration set",
                )
            )
            details.append(f'Skipped "{subtask.title}" (no duration set)')
            continue

        slot = find_nearest_available_slot(
            subtask,
            working_tasks,
            start_from=last_end,
            working_hours=working_hours,
            time_zone=time_zone,
            now=now,
        )
        if slot is None:
            result.unplaced.append(
                UnplacedTask(
                    task_id=subtask.id,
                    title=subtask.title,
                    reason=UnplaceableReason.NO_FREE_SLOT,
                    message=NO_SLOT_MESSAGE,
                )
            )
            details.append(f'Failed to schedule "{subtask.title}": {NO_SLOT_MESSAGE}')
            continue

        result.moved_tasks.append(MovedTask(task_id=subtask.id, new_start=slot.start, new_end=slot.end))
        working_tasks = [
            t.model_copy(update={"scheduled_start": slot.start, "scheduled_end": slot.end}) if t.id == subtask.id else t
            for t in working_tasks
        ]
        last_end = slot.end
        details.append(f'Scheduled "{subtask.title}"')

    if parent.is_scheduled:
        result.cleared_task_ids.append(parent.id)

    result.feedback.append(f"Scheduled {len(result.moved_tasks)} of {len(subtasks)} subtasks.")
    result.feedback.extend(details)
    logger.info(f"Schedule-ASAP parent={parent.id}: placed {len(result.moved_tasks)} of {len(subtasks)} subtasks")
    return result
