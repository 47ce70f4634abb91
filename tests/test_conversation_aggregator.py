"""Tests for conversation list derivation."""

from datetime import UTC, datetime, timedelta
from typing import Any

from sitterlink.domain.models import UserProfile, UserType
from sitterlink.services.conversation_aggregator import (
    aggregate_conversations,
    count_unread,
    latest_message_per_thread,
)

T0 = datetime(2024, 10, 9, 12, 0, tzinfo=UTC)

DIRECTORY = {
    "sitter-a": UserProfile(id="sitter-a", full_name="Ann", user_type=UserType.BABYSITTER),
    "sitter-b": UserProfile(id="sitter-b", full_name="Ben", user_type=UserType.BABYSITTER),
}


def test_one_summary_per_thread_with_latest_message(message_factory: Any) -> None:
    messages = [
        message_factory("m1", "me", "sitter-a", T0),
        message_factory("m2", "sitter-a", "me", T0 + timedelta(minutes=5)),
        message_factory("m3", "me", "sitter-b", T0 + timedelta(minutes=1)),
        message_factory("m4", "me", "sitter-a", T0 + timedelta(minutes=2)),
    ]

    summaries = aggregate_conversations(messages, "me", DIRECTORY)

    assert len(summaries) == 2
    assert [s.latest_message.id for s in summaries] == ["m2", "m3"]
    assert [s.other_user_id for s in summaries] == ["sitter-a", "sitter-b"]
    assert summaries[0].other_user == DIRECTORY["sitter-a"]


def test_summaries_sorted_by_latest_message_descending(message_factory: Any) -> None:
    messages = [
        message_factory("m1", "me", "u1", T0 + timedelta(minutes=3)),
        message_factory("m2", "me", "u2", T0 + timedelta(minutes=9)),
        message_factory("m3", "u3", "me", T0 + timedelta(minutes=6)),
    ]

    summaries = aggregate_conversations(messages, "me", {})

    assert [s.other_user_id for s in summaries] == ["u2", "u3", "u1"]


def test_equal_timestamps_keep_first_seen(message_factory: Any) -> None:
    messages = [
        message_factory("first", "me", "u1", T0),
        message_factory("second", "u1", "me", T0),
    ]

    latest = latest_message_per_thread(messages)

    assert latest["me_u1"].id == "first"


def test_equal_thread_times_keep_first_seen_thread_order(message_factory: Any) -> None:
    messages = [
        message_factory("m1", "me", "u1", T0),
        message_factory("m2", "me", "u2", T0),
    ]

    summaries = aggregate_conversations(messages, "me", {})

    assert [s.thread_id for s in summaries] == ["me_u1", "me_u2"]


def test_unread_only_when_latest_is_addressed_to_current_user(
    message_factory: Any,
) -> None:
    messages = [
        message_factory("m1", "u1", "me", T0),
        message_factory("m2", "u2", "me", T0, read=True),
        message_factory("m3", "u3", "me", T0),
        message_factory("m4", "me", "u3", T0 + timedelta(minutes=1)),
    ]

    summaries = aggregate_conversations(messages, "me", {})
    unread = {s.other_user_id: s.unread for s in summaries}

    assert unread == {"u1": True, "u2": False, "u3": False}
    assert count_unread(summaries) == 1


def test_unknown_participant_is_tolerated(message_factory: Any) -> None:
    messages = [message_factory("m1", "ghost", "me", T0)]

    summaries = aggregate_conversations(messages, "me", DIRECTORY)

    assert summaries[0].other_user_id == "ghost"
    assert summaries[0].other_user is None


def test_input_messages_are_not_modified(message_factory: Any) -> None:
    messages = [
        message_factory("m1", "u1", "me", T0),
        message_factory("m2", "u1", "me", T0 + timedelta(minutes=1)),
    ]
    snapshot = [m.model_copy() for m in messages]

    aggregate_conversations(messages, "me", {})

    assert messages == snapshot


def test_empty_message_list() -> None:
    assert aggregate_conversations([], "me", DIRECTORY) == []
    assert count_unread([]) == 0
