"""Conversation list derivation.

Turns every message involving the current user into one summary per thread.
Summaries are recomputed from a full snapshot on every sync; nothing is
updated incrementally and input messages are never modified.
"""

from collections.abc import Iterable, Mapping

from sitterlink.domain.models import ConversationSummary, Message, UserProfile


def latest_message_per_thread(messages: Iterable[Message]) -> dict[str, Message]:
    """Pick the most recent message of each thread.

    On equal timestamps the message seen first is kept. The returned dict
    preserves first-seen thread order.
    """
    latest: dict[str, Message] = {}
    for message in messages:
        current = latest.get(message.thread_id)
        if current is None or message.created_at > current.created_at:
            latest[message.thread_id] = message
    return latest


def aggregate_conversations(
    messages: Iterable[Message],
    current_user_id: str,
    user_directory: Mapping[str, UserProfile],
) -> list[ConversationSummary]:
    """Build conversation summaries, most recent conversation first.

    Args:
        messages: All messages sent or received by the current user
        current_user_id: Id of the user viewing the list
        user_directory: Known users by id; missing participants are tolerated

    Returns:
        Exactly one summary per distinct ``thread_id`` in ``messages``
    """
    summaries: list[ConversationSummary] = []
    for thread_id, latest in latest_message_per_thread(messages).items():
        other_user_id = (
            latest.receiver_id
            if latest.sender_id == current_user_id
            else latest.sender_id
        )
        summaries.append(
            ConversationSummary(
                thread_id=thread_id,
                other_user_id=other_user_id,
                other_user=user_directory.get(other_user_id),
                latest_message=latest,
                unread=latest.is_unread_for(current_user_id),
            )
        )

    # sorted() is stable with reverse=True, ties keep first-seen order
    return sorted(
        summaries,
        key=lambda summary: summary.latest_message.created_at,
        reverse=True,
    )


def count_unread(summaries: Iterable[ConversationSummary]) -> int:
    """Number of conversations whose latest message is unread."""
    return sum(1 for summary in summaries if summary.unread)


__all__ = ["aggregate_conversations", "count_unread", "latest_message_per_thread"]
