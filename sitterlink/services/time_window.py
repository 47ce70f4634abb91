"""Hour-based time windows and time-of-day bucket comparison.

The overlap rules reproduce the marketplace's established search behavior:

* regular buckets use an inclusive bound test, so availability ending exactly
  at a bucket's start (or starting at its end) still counts as overlapping;
* the wrapping ``night`` bucket only looks at the availability start hour.

Neither rule is a true interval intersection.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Final

import pytz

from sitterlink.domain.matching_constants import DAYS_IN_WEEK
from sitterlink.domain.models import AvailabilityEntry, TimeOfDay


@dataclass(frozen=True, slots=True)
class TimeWindow:
    """Hour range ``[start, end)``; wraps past midnight when ``start > end``."""

    start: int
    end: int

    @property
    def wraps(self) -> bool:
        return self.start > self.end

    def overlaps(self, start_hour: int, end_hour: int) -> bool:
        """Decide whether an availability window matches this bucket."""
        if self.wraps:
            return start_hour >= self.start or start_hour < self.end
        return start_hour <= self.end and end_hour >= self.start


TIME_OF_DAY_WINDOWS: Final[dict[TimeOfDay, TimeWindow]] = {
    TimeOfDay.MORNING: TimeWindow(start=6, end=12),
    TimeOfDay.AFTERNOON: TimeWindow(start=12, end=17),
    TimeOfDay.EVENING: TimeWindow(start=17, end=22),
    TimeOfDay.NIGHT: TimeWindow(start=22, end=6),
}


def day_of_week_of(moment: datetime, tz_name: str) -> int:
    """Weekday of ``moment`` in ``tz_name``, counting from Sunday (0)."""
    local = moment.astimezone(pytz.timezone(tz_name))
    return (local.weekday() + 1) % DAYS_IN_WEEK


def window_for(time_of_day: TimeOfDay) -> TimeWindow | None:
    """Return the bucket's window, or None for ``anytime``."""
    return TIME_OF_DAY_WINDOWS.get(time_of_day)


def entry_matches_bucket(
    entry: AvailabilityEntry | None, time_of_day: TimeOfDay
) -> bool:
    """Check an availability entry against a named bucket.

    ``anytime`` matches without inspecting the entry; every other bucket
    requires an entry.
    """
    window = window_for(time_of_day)
    if window is None:
        return True
    if entry is None:
        return False
    return window.overlaps(entry.start_hour, entry.end_hour)


__all__ = [
    "TIME_OF_DAY_WINDOWS",
    "TimeWindow",
    "day_of_week_of",
    "entry_matches_bucket",
    "window_for",
]
