"""Overlap and nesting detection for the calendar view.

These functions never mutate tasks and never raise on incomplete data: a
task without a scheduled block simply takes part in no overlap or nesting.
"""

from datetime import datetime, timezone
from typing import Dict, List, Set
from pydantic import BaseModel, Field

from planmyday.engine.intervals import (
    TaskSegment,
    is_nested_inside,
    overlaps,
    split_by_sub_intervals,
    task_bounds,
)
from planmyday.models.task import Task, TaskStatus


_EARLIEST = datetime.min.replace(tzinfo=timezone.utc)


class NestingResult:
    """Hosts and the guests nested inside them."""

    def __init__(self):
        self.host_to_guests: Dict[str, List[Task]] = {}
        self.guest_ids: Set[str] = set()


class DayLayout(BaseModel):
    """Rendering metadata for one set of tasks (usually one calendar day)."""

    overlaps: Dict[str, List[str]] = Field(
        default_factory=dict, description="Active task id -> ids of completed tasks it overlaps"
    )
    host_segments: Dict[str, List[TaskSegment]] = Field(
        default_factory=dict, description="Host task id -> visual segments around its guests"
    )
    guest_ids: List[str] = Field(default_factory=list, description="Tasks drawn inside a host")


def detect_overlaps(active_tasks: List[Task], reference_tasks: List[Task]) -> Dict[str, List[Task]]:
    """Map each active task to the reference tasks its block overlaps.

    Active tasks with no overlap are left out of the mapping.
    """
    result: Dict[str, List[Task]] = {}
    for active in active_tasks:
        hits = [ref for ref in reference_tasks if overlaps(active, ref)]
        if hits:
            result[active.id] = hits
    return result


def _start_sort_key(task: Task) -> datetime:
    return task.scheduled_start or _EARLIEST


def _span_seconds(task: Task) -> float:
    start, end = task_bounds(task)
    return (end - start).total_seconds()


def detect_nested_tasks(active_tasks: List[Task], innermost_only: bool = False) -> NestingResult:
    """Find tasks whose block lies fully inside another active task's block.

    By default a guest is recorded under every host that contains it. With
    `innermost_only`, each guest is kept only under its smallest enclosing
    host (ties go to the host listed first).
    """
    result = NestingResult()
    hosts_by_guest: Dict[str, List[Task]] = {}

    for candidate in active_tasks:
        for other in active_tasks:
            if candidate.id == other.id:
                continue
            if is_nested_inside(candidate, other):
                hosts_by_guest.setdefault(candidate.id, []).append(other)

    by_id = {task.id: task for task in active_tasks}
    for guest_id, hosts in hosts_by_guest.items():
        if innermost_only:
            hosts = [min(hosts, key=_span_seconds)]
        for host in hosts:
            result.host_to_guests.setdefault(host.id, []).append(by_id[guest_id])
        result.guest_ids.add(guest_id)

    for host_id, guests in result.host_to_guests.items():
        result.host_to_guests[host_id] = sorted(guests, key=_start_sort_key)

    return result


def calculate_host_segments(host: Task, guests: List[Task]) -> List[TaskSegment]:
    """Visual segments for a host task given its sorted guests."""
    return split_by_sub_intervals(host, guests)


def build_day_layout(tasks: List[Task], innermost_only: bool = True) -> DayLayout:
    """Compute overlap and nesting metadata for a set of loaded tasks.

    Completed tasks form the reference set for overlap flags; cancelled tasks
    are ignored entirely.
    """
    active = [t for t in tasks if t.status not in (TaskStatus.COMPLETED.value, TaskStatus.CANCELLED.value)]
    completed = [t for t in tasks if t.status == TaskStatus.COMPLETED.value]

    overlap_map = detect_overlaps(active, completed)
    nesting = detect_nested_tasks(active, innermost_only=innermost_only)

    return DayLayout(
        overlaps={task_id: [t.id for t in hits] for task_id, hits in overlap_map.items()},
        host_segments={
            host_id: calculate_host_segments(_by_id(active, host_id), guests)
            for host_id, guests in nesting.host_to_guests.items()
        },
        guest_ids=sorted(nesting.guest_ids),
    )


def _by_id(tasks: List[Task], task_id: str) -> Task:
    return next(t for t in tasks if t.id == task_id)
