"""Tests for display text derivations."""

from datetime import UTC, datetime
from typing import Any

from sitterlink.domain.models import ConversationSummary, TimeOfDay, UserProfile
from sitterlink.services.display_formatting import (
    NO_AVAILABILITY_TEXT,
    TIME_OF_DAY_LABELS,
    conversation_preview,
    describe_available_days,
    display_name,
    format_message_time,
)

NOW = datetime(2025, 10, 5, 18, 30, tzinfo=UTC)


def test_time_of_day_labels() -> None:
    assert TIME_OF_DAY_LABELS[TimeOfDay.MORNING] == "Morning (6AM-12PM)"
    assert TIME_OF_DAY_LABELS[TimeOfDay.AFTERNOON] == "Afternoon (12PM-5PM)"
    assert TIME_OF_DAY_LABELS[TimeOfDay.EVENING] == "Evening (5PM-10PM)"
    assert TIME_OF_DAY_LABELS[TimeOfDay.NIGHT] == "Night (10PM-6AM)"
    assert TIME_OF_DAY_LABELS[TimeOfDay.ANYTIME] == "Any time"


def test_format_message_time_same_day() -> None:
    sent = datetime(2025, 10, 5, 15, 5, tzinfo=UTC)

    assert format_message_time(sent, now=NOW) == "3:05 PM"
    assert format_message_time(datetime(2025, 10, 5, 0, 7, tzinfo=UTC), now=NOW) == "12:07 AM"


def test_format_message_time_same_year() -> None:
    sent = datetime(2025, 3, 14, 9, 0, tzinfo=UTC)

    assert format_message_time(sent, now=NOW) == "Mar 14"


def test_format_message_time_older_years() -> None:
    sent = datetime(2024, 10, 5, 9, 0, tzinfo=UTC)

    assert format_message_time(sent, now=NOW) == "Oct 5, 2024"


def test_format_message_time_uses_timezone() -> None:
    # 23:30 UTC on Oct 4 is already Oct 5 in Tokyo
    sent = datetime(2025, 10, 4, 23, 30, tzinfo=UTC)
    now = datetime(2025, 10, 5, 2, 0, tzinfo=UTC)

    assert format_message_time(sent, now=now, tz_name="UTC") == "Oct 4"
    assert format_message_time(sent, now=now, tz_name="Asia/Tokyo") == "8:30 AM"


def test_display_name_falls_back_to_unknown() -> None:
    assert display_name(UserProfile(id="u1", full_name="Ann Lee")) == "Ann Lee"
    assert display_name(UserProfile(id="u2")) == "Unknown User"
    assert display_name(None) == "Unknown User"


def test_conversation_preview_prefixes_own_messages(message_factory: Any) -> None:
    own = ConversationSummary(
        thread_id="me_u1",
        other_user_id="u1",
        latest_message=message_factory("m1", "me", "u1", NOW, content="See you"),
        unread=False,
    )
    theirs = ConversationSummary(
        thread_id="me_u1",
        other_user_id="u1",
        latest_message=message_factory("m2", "u1", "me", NOW, content="Great"),
        unread=True,
    )

    assert conversation_preview(own, "me") == "You: See you"
    assert conversation_preview(theirs, "me") == "Great"


def test_describe_available_days(candidate_factory: Any) -> None:
    sam = candidate_factory("sam", 22, [(3, 9, 17), (0, 10, 12), (6, 8, 9)])

    assert describe_available_days(sam) == "Wednesday, Sunday, Saturday"
    assert describe_available_days(candidate_factory("pia", 30)) == NO_AVAILABILITY_TEXT
