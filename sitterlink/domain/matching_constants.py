"""Constants for babysitter matching and availability editing."""

from typing import Final

AGE_FLOOR: Final[int] = 18
"""Lowest age the search slider allows."""

AGE_CEILING: Final[int] = 70
"""Highest age the search slider allows."""

DEFAULT_AGE_MIN: Final[int] = 18
DEFAULT_AGE_MAX: Final[int] = 60

DAYS_IN_WEEK: Final[int] = 7
HOURS_IN_DAY: Final[int] = 24

DAY_NAMES: Final[tuple[str, ...]] = (
    "Sunday",
    "Monday",
    "Tuesday",
    "Wednesday",
    "Thursday",
    "Friday",
    "Saturday",
)
"""Weekday names indexed by ``day_of_week`` (0 = Sunday)."""

DEFAULT_SHIFT_START: Final[str] = "09:00"
DEFAULT_SHIFT_END: Final[str] = "17:00"

__all__ = [
    "AGE_CEILING",
    "AGE_FLOOR",
    "DAYS_IN_WEEK",
    "DAY_NAMES",
    "DEFAULT_AGE_MAX",
    "DEFAULT_AGE_MIN",
    "DEFAULT_SHIFT_END",
    "DEFAULT_SHIFT_START",
    "HOURS_IN_DAY",
]
