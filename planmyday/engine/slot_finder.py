"""Nearest-available-slot search for planmyday.

Looks forward day by day from a starting instant for the first gap inside
working hours that can hold a task, skipping time already taken by other
scheduled tasks.
"""

from datetime import datetime, timedelta, timezone
from typing import List, Optional

from planmyday.engine.availability import (
    get_zone,
    local_date,
    local_time_on,
    resolve_day_window,
    start_of_local_day,
)
from planmyday.engine.intervals import TimeSlot, clip_free_time, subtract_intervals
from planmyday.models.constants import (
    AFTER_HOURS_CUTOFF_HOUR,
    DEFAULT_SEARCH_DAYS,
    DEFAULT_TIMEZONE,
    DEFAULT_WORKDAY_END_HOUR,
    DEFAULT_WORKDAY_START_HOUR,
    SCHEDULING_GRANULARITY_MINUTES,
)
from planmyday.models.schedule_hours import ScheduleHours
from planmyday.models.task import Task, ensure_utc


def occupied_slots(tasks: List[Task], exclude_task_id: Optional[str] = None) -> List[TimeSlot]:
    """Blocks held by scheduled, still-open tasks, sorted by start."""
    slots = [
        TimeSlot(start=t.scheduled_start, end=t.scheduled_end)
        for t in tasks
        if t.id != exclude_task_id and t.is_scheduled and not t.is_closed
    ]
    return sorted(slots, key=lambda s: s.start)


def find_nearest_available_slot(
    task: Task,
    existing_tasks: List[Task],
    start_from: Optional[datetime] = None,
    working_hours: Optional[ScheduleHours] = None,
    max_days_ahead: int = DEFAULT_SEARCH_DAYS,
    time_zone: str = DEFAULT_TIMEZONE,
    now: Optional[datetime] = None,
) -> Optional[TimeSlot]:
    """Find the earliest slot that fits `task`.

    - Never starts before `now` (defaults to the current time)
    - Uses 15-minute start boundaries in the user's timezone
    - Without any working hours configured, 9 AM - 5 PM applies every day;
      days missing from a configured map are skipped
    - On the current day, when nothing fits inside working hours, tasks may
      still be placed after them until 11 PM

    Args:
        task: Task to place (needs a positive duration)
        existing_tasks: Other tasks whose blocks must be avoided
        start_from: Earliest instant to consider (defaults to now)
        working_hours: Per-weekday window to place inside
        max_days_ahead: Search horizon in days from `start_from`
        time_zone: IANA timezone for hours and day boundaries
        now: Current instant, injectable for deterministic runs

    Returns:
        TimeSlot in UTC, or None if no slot exists within the horizon
    """
    if not task.duration or task.duration <= 0:
        return None

    needed = timedelta(minutes=task.duration)
    now = ensure_utc(now) if now else datetime.now(timezone.utc)
    start_from = ensure_utc(start_from) if start_from else now
    search_start = max(start_from, now)
    search_end = start_from + timedelta(days=max_days_ahead)

    if working_hours is None:
        working_hours = ScheduleHours.every_day(DEFAULT_WORKDAY_START_HOUR, DEFAULT_WORKDAY_END_HOUR)

    occupied = occupied_slots(existing_tasks, exclude_task_id=task.id)
    today = local_date(now, time_zone)
    day = local_date(search_start, time_zone)

    while start_of_local_day(day, time_zone) < search_end:
        window = resolve_day_window(working_hours, day, time_zone)
        if window is not None:
            slot = _first_fit(window, occupied, search_start, needed, time_zone)
            if slot is None and day == today:
                after_hours = TimeSlot(
                    start=max(window.end, search_start),
                    end=local_time_on(day, AFTER_HOURS_CUTOFF_HOUR, time_zone),
                )
                if after_hours.start < after_hours.end:
                    slot = _first_fit(after_hours, occupied, search_start, needed, time_zone)
            if slot is not None:
                return slot
        day = day + timedelta(days=1)

    return None


def _first_fit(
    window: TimeSlot,
    occupied: List[TimeSlot],
    search_start: datetime,
    needed: timedelta,
    time_zone: str,
) -> Optional[TimeSlot]:
    for gap in clip_free_time(subtract_intervals(window, occupied), search_start):
        start = round_up_to_granularity(gap.start, time_zone)
        if start + needed <= gap.end:
            return TimeSlot(start=start, end=start + needed)
    return None


def round_up_to_granularity(
    dt: datetime,
    time_zone: str = DEFAULT_TIMEZONE,
    minutes: int = SCHEDULING_GRANULARITY_MINUTES,
) -> datetime:
    """Round up to the next `minutes` boundary of the local wall clock.

    Args:
        dt: Aware datetime to round
        time_zone: Timezone whose wall clock defines the boundaries
        minutes: Granularity in minutes

    Returns:
        Rounded datetime (unchanged if already on a boundary)
    """
    local = dt.astimezone(get_zone(time_zone))
    remainder = timedelta(
        minutes=local.minute % minutes,
        seconds=local.second,
        microseconds=local.microsecond,
    )
    if not remainder:
        return dt
    return dt + (timedelta(minutes=minutes) - remainder)
