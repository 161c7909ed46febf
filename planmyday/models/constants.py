"""Constants for planmyday.

This module centralizes all magic numbers and default values used throughout the application.
"""

# Task defaults
DEFAULT_PRIORITY = 3
DEFAULT_ENERGY_LEVEL = 3
MIN_PRIORITY = 1  # 1 = most urgent
MAX_PRIORITY = 5
MIN_ENERGY_LEVEL = 1
MAX_ENERGY_LEVEL = 5

# Hour-of-day bounds for schedule hours.
# `end` may be END_OF_DAY_HOUR, meaning midnight at the end of the same calendar day.
FIRST_HOUR = 0
LAST_START_HOUR = 23
END_OF_DAY_HOUR = 24

# Fallback working hours when a user has none configured (9 AM - 5 PM)
DEFAULT_WORKDAY_START_HOUR = 9
DEFAULT_WORKDAY_END_HOUR = 17

# On the current day, placement may run past working hours until this hour
AFTER_HOURS_CUTOFF_HOUR = 23

# Scheduling
SCHEDULING_GRANULARITY_MINUTES = 15
DEFAULT_SEARCH_DAYS = 7
DEFAULT_TIMEZONE = "UTC"

# Group auto-scheduling
DEFAULT_AUTO_SCHEDULE_MAX_TASKS = 5
MAX_AUTO_SCHEDULE_TASKS = 20
