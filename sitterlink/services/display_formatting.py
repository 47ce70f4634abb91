"""Text shown next to search results and conversations."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Final

import pytz

from sitterlink.domain.matching_constants import DAY_NAMES
from sitterlink.domain.messaging_constants import OWN_MESSAGE_PREFIX, UNKNOWN_USER_NAME
from sitterlink.domain.models import (
    Candidate,
    ConversationSummary,
    TimeOfDay,
    UserProfile,
)
from sitterlink.services.time_window import TIME_OF_DAY_WINDOWS

NO_AVAILABILITY_TEXT: Final[str] = "No availability set"


def _hour_label(hour: int) -> str:
    suffix = "AM" if hour < 12 else "PM"
    return f"{hour % 12 or 12}{suffix}"


def _build_time_of_day_labels() -> dict[TimeOfDay, str]:
    labels: dict[TimeOfDay, str] = {}
    for time_of_day, window in TIME_OF_DAY_WINDOWS.items():
        name = time_of_day.value.capitalize()
        labels[time_of_day] = (
            f"{name} ({_hour_label(window.start)}-{_hour_label(window.end)})"
        )
    labels[TimeOfDay.ANYTIME] = "Any time"
    return labels


TIME_OF_DAY_LABELS: Final[dict[TimeOfDay, str]] = _build_time_of_day_labels()
"""Filter option labels, e.g. ``Night (10PM-6AM)``."""


def format_message_time(
    created_at: datetime, *, now: datetime | None = None, tz_name: str = "UTC"
) -> str:
    """Format a message timestamp relative to ``now``.

    Same day gives the clock time (``3:05 PM``), same year gives month and
    day (``Oct 5``), anything older adds the year (``Oct 5, 2024``).
    """
    tz = pytz.timezone(tz_name)
    local = created_at.astimezone(tz)
    local_now = (now or datetime.now(tz=UTC)).astimezone(tz)

    if local.date() == local_now.date():
        suffix = "AM" if local.hour < 12 else "PM"
        return f"{local.hour % 12 or 12}:{local.minute:02d} {suffix}"
    if local.year == local_now.year:
        return f"{local:%b} {local.day}"
    return f"{local:%b} {local.day}, {local.year}"


def display_name(user: UserProfile | None) -> str:
    if user is None or not user.full_name:
        return UNKNOWN_USER_NAME
    return user.full_name


def conversation_preview(summary: ConversationSummary, current_user_id: str) -> str:
    """Latest message content, prefixed when the current user sent it."""
    latest = summary.latest_message
    if latest.sender_id == current_user_id:
        return f"{OWN_MESSAGE_PREFIX}{latest.content}"
    return latest.content


def describe_available_days(candidate: Candidate) -> str:
    """Weekday names of a candidate's availability, in stored order."""
    if not candidate.availability:
        return NO_AVAILABILITY_TEXT
    return ", ".join(DAY_NAMES[entry.day_of_week] for entry in candidate.availability)


__all__ = [
    "NO_AVAILABILITY_TEXT",
    "TIME_OF_DAY_LABELS",
    "conversation_preview",
    "describe_available_days",
    "display_name",
    "format_message_time",
]
