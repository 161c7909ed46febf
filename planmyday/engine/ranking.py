"""Ordering of placement candidates.

Candidates are sorted:
1. By priority (1 = most urgent first)
2. By due date (earliest first, tasks without one last)
3. By a caller-chosen timestamp for a deterministic final tie-break

Same inputs always produce the same order.
"""

from datetime import datetime
from typing import Callable, List, Optional

from planmyday.models.task import Task


def rank_for_placement(
    tasks: List[Task],
    tie_breaker: Callable[[Task], Optional[datetime]] = lambda t: t.scheduled_start,
) -> List[Task]:
    """Return tasks in the order they should be offered free time."""
    return sorted(
        tasks,
        key=lambda t: (t.priority, _due_date_sort_key(t), _timestamp_sort_key(tie_breaker(t))),
    )


def _due_date_sort_key(task: Task) -> tuple:
    """Tasks with a due date come before those without; earlier dates first.

    Returns:
        Tuple for sorting: (has_due_date: 0 or 1, timestamp or inf)
    """
    if task.due_date:
        return (0, task.due_date.timestamp())
    return (1, float('inf'))


def _timestamp_sort_key(value: Optional[datetime]) -> tuple:
    if value is None:
        return (1, float('inf'))
    return (0, value.timestamp())
