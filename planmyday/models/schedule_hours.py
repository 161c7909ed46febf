"""Per-weekday hour windows (awake hours, working hours, group auto-schedule hours)."""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, model_validator

from planmyday.models.constants import END_OF_DAY_HOUR, FIRST_HOUR, LAST_START_HOUR


class Weekday(str, Enum):
    MONDAY = "monday"
    TUESDAY = "tuesday"
    WEDNESDAY = "wednesday"
    THURSDAY = "thursday"
    FRIDAY = "friday"
    SATURDAY = "saturday"
    SUNDAY = "sunday"


# Python weekday(): Monday=0 ... Sunday=6
WEEKDAYS_IN_ORDER = [
    Weekday.MONDAY,
    Weekday.TUESDAY,
    Weekday.WEDNESDAY,
    Weekday.THURSDAY,
    Weekday.FRIDAY,
    Weekday.SATURDAY,
    Weekday.SUNDAY,
]


class DayHours(BaseModel):
    """A single day's window, as whole hours in the user's timezone.

    `end` may be 24 (END_OF_DAY_HOUR) to mean midnight at the end of the day.
    """

    start: int = Field(..., ge=FIRST_HOUR, le=LAST_START_HOUR, description="Start hour (0-23)")
    end: int = Field(..., ge=FIRST_HOUR + 1, le=END_OF_DAY_HOUR, description="End hour (1-24, exclusive)")

    @model_validator(mode="after")
    def _check_order(self):
        if self.start >= self.end:
            raise ValueError("start hour must be before end hour")
        return self


class ScheduleHours(BaseModel):
    """Weekday -> optional window. A missing/null day means no availability that day."""

    monday: Optional[DayHours] = None
    tuesday: Optional[DayHours] = None
    wednesday: Optional[DayHours] = None
    thursday: Optional[DayHours] = None
    friday: Optional[DayHours] = None
    saturday: Optional[DayHours] = None
    sunday: Optional[DayHours] = None

    def for_weekday(self, weekday: Weekday) -> Optional[DayHours]:
        return getattr(self, Weekday(weekday).value)

    @classmethod
    def every_day(cls, start: int, end: int) -> "ScheduleHours":
        """Same window on all seven days."""
        hours = DayHours(start=start, end=end)
        return cls(**{day.value: hours for day in WEEKDAYS_IN_ORDER})
