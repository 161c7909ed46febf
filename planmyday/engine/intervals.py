"""Time-interval primitives for planmyday.

All intervals are half-open [start, end) over absolute (UTC) instants.
Tasks missing either scheduled bound have no interval: they never overlap
and are never nested.
"""

from datetime import datetime
from typing import Iterable, List, Optional, Tuple
from pydantic import BaseModel, Field

from planmyday.models.task import Task


class TimeSlot(BaseModel):
    """A concrete [start, end) block of time."""

    start: datetime
    end: datetime

    @property
    def duration_minutes(self) -> float:
        return (self.end - self.start).total_seconds() / 60


class TaskSegment(BaseModel):
    """One visual piece of a host task that is split by nested guests."""

    segment_start: datetime = Field(..., description="Segment start (UTC)")
    segment_end: datetime = Field(..., description="Segment end (UTC)")
    segment_index: int
    total_segments: int
    is_first: bool
    is_last: bool


def task_bounds(task: Task) -> Optional[Tuple[datetime, datetime]]:
    """Return (start, end) for a scheduled task, None if either bound is missing."""
    if task.scheduled_start is None or task.scheduled_end is None:
        return None
    return task.scheduled_start, task.scheduled_end


def _intervals_overlap(start1: datetime, end1: datetime, start2: datetime, end2: datetime) -> bool:
    return start1 < end2 and end1 > start2


def overlaps(a: Task, b: Task) -> bool:
    """True if two tasks' scheduled blocks share any time."""
    bounds_a = task_bounds(a)
    bounds_b = task_bounds(b)
    if bounds_a is None or bounds_b is None:
        return False
    return _intervals_overlap(*bounds_a, *bounds_b)


def slots_overlap(a: TimeSlot, b: TimeSlot) -> bool:
    return _intervals_overlap(a.start, a.end, b.start, b.end)


def is_nested_inside(inner: Task, outer: Task) -> bool:
    """True if `inner` lies fully within `outer` without being identical to it."""
    inner_bounds = task_bounds(inner)
    outer_bounds = task_bounds(outer)
    if inner_bounds is None or outer_bounds is None:
        return False
    inner_start, inner_end = inner_bounds
    outer_start, outer_end = outer_bounds
    if inner_start == outer_start and inner_end == outer_end:
        return False
    return outer_start <= inner_start and inner_end <= outer_end


def split_by_sub_intervals(host: Task, guests: List[Task]) -> List[TaskSegment]:
    """Split a host task into the pieces not covered by its guests.

    Guests must be sorted by start and nested inside the host. Guests without
    bounds are ignored and zero-length gaps are dropped. A host with no guests
    yields a single segment covering the whole host.
    """
    host_bounds = task_bounds(host)
    if host_bounds is None:
        return []
    host_start, host_end = host_bounds

    raw: List[Tuple[datetime, datetime]] = []
    cursor = host_start
    for guest in guests:
        guest_bounds = task_bounds(guest)
        if guest_bounds is None:
            continue
        guest_start, guest_end = guest_bounds
        if guest_start > cursor:
            raw.append((cursor, guest_start))
        # Guests nested in each other can end before the cursor
        cursor = max(cursor, guest_end)

    if host_end > cursor:
        raw.append((cursor, host_end))

    total = len(raw)
    return [
        TaskSegment(
            segment_start=start,
            segment_end=end,
            segment_index=i,
            total_segments=total,
            is_first=i == 0,
            is_last=i == total - 1,
        )
        for i, (start, end) in enumerate(raw)
    ]


def subtract_intervals(window: TimeSlot, occupied: Iterable[TimeSlot]) -> List[TimeSlot]:
    """Return the free pieces of `window` once `occupied` blocks are removed.

    Occupied blocks may overlap each other and may extend past the window.
    The result is sorted by start and contains no zero-length pieces.
    """
    free: List[TimeSlot] = []
    cursor = window.start
    for block in sorted(occupied, key=lambda s: (s.start, s.end)):
        if block.end <= cursor or block.start >= window.end:
            continue
        if block.start > cursor:
            free.append(TimeSlot(start=cursor, end=block.start))
        cursor = max(cursor, block.end)
        if cursor >= window.end:
            break
    if cursor < window.end:
        free.append(TimeSlot(start=cursor, end=window.end))
    return free


def clip_free_time(free: List[TimeSlot], earliest: datetime) -> List[TimeSlot]:
    """Drop free time before `earliest`."""
    clipped: List[TimeSlot] = []
    for gap in free:
        if gap.end <= earliest:
            continue
        clipped.append(TimeSlot(start=max(gap.start, earliest), end=gap.end))
    return clipped
