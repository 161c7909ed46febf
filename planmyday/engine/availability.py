"""Awake-hours / availability resolution.

Hour windows are stored as whole hours in the user's timezone. They are
turned into absolute UTC instants for a specific calendar date here, so the
rest of the engine only ever compares aware UTC datetimes.
"""

from datetime import date, datetime, time, timedelta, timezone
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from planmyday.engine.intervals import TimeSlot
from planmyday.models.constants import END_OF_DAY_HOUR
from planmyday.models.schedule_hours import WEEKDAYS_IN_ORDER, DayHours, ScheduleHours, Weekday
from planmyday.models.task_group import TaskGroup


def get_zone(time_zone: str) -> ZoneInfo:
    """Look up an IANA timezone, raising ValueError for unknown names."""
    try:
        return ZoneInfo(time_zone)
    except (ZoneInfoNotFoundError, ValueError) as e:
        raise ValueError(f"Unknown timezone: {time_zone}") from e


def weekday_name(day: date) -> Weekday:
    return WEEKDAYS_IN_ORDER[day.weekday()]


def local_date(instant: datetime, time_zone: str) -> date:
    """Calendar date an instant falls on in the given timezone."""
    return instant.astimezone(get_zone(time_zone)).date()


def local_time_on(day: date, hour: int, time_zone: str) -> datetime:
    """UTC instant for `hour`:00 on `day` in the timezone. Hour 24 is the next local midnight."""
    if hour == END_OF_DAY_HOUR:
        day = day + timedelta(days=1)
        hour = 0
    local = datetime.combine(day, time(hour, 0), tzinfo=get_zone(time_zone))
    return local.astimezone(timezone.utc)


def start_of_local_day(day: date, time_zone: str) -> datetime:
    return local_time_on(day, 0, time_zone)


def hours_for_day(hours: Optional[ScheduleHours], day: date) -> Optional[DayHours]:
    if hours is None:
        return None
    return hours.for_weekday(weekday_name(day))


def resolve_day_window(hours: Optional[ScheduleHours], day: date, time_zone: str) -> Optional[TimeSlot]:
    """Usable [start, end) window on a calendar date, or None when the day has no entry."""
    day_hours = hours_for_day(hours, day)
    if day_hours is None:
        return None
    return TimeSlot(
        start=local_time_on(day, day_hours.start, time_zone),
        end=local_time_on(day, day_hours.end, time_zone),
    )


def resolve_placement_hours(
    group: Optional[TaskGroup], awake_hours: Optional[ScheduleHours]
) -> Optional[ScheduleHours]:
    """Group auto-schedule hours replace the user's awake hours when configured."""
    if group is not None and group.has_auto_schedule_hours:
        return group.auto_schedule_hours
    return awake_hours
