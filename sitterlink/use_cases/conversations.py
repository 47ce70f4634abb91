"""Conversation list and first-contact use cases."""

from time import perf_counter

from sitterlink.config.logging_config import get_logger
from sitterlink.domain.exceptions import ValidationError
from sitterlink.domain.models import ConversationSummary, Message, UserProfile, UserType
from sitterlink.domain.protocols import CurrentUserProtocol, EntityStoreProtocol
from sitterlink.observability.metrics import USE_CASE_DURATION_SECONDS
from sitterlink.observability.tracing import correlation_scope
from sitterlink.services.conversation_aggregator import aggregate_conversations
from sitterlink.services.message_thread_store import MessageThreadStore
from sitterlink.services.thread_identity import thread_id_for
from sitterlink.use_cases.access import resolve_current_user

logger = get_logger(__name__)


async def fetch_user_messages(store: EntityStoreProtocol, user_id: str) -> list[Message]:
    """Every message sent or received by ``user_id``, sent ones first.

    A message appearing in both result sets (self-addressed) is kept once.

    Raises:
        StoreError: If either query fails
    """
    sent = await store.messages.filter(sender_id=user_id)
    received = await store.messages.filter(receiver_id=user_id)

    messages: list[Message] = []
    seen: set[str] = set()
    for record in [*sent, *received]:
        message = Message.model_validate(record)
        if message.id in seen:
            continue
        seen.add(message.id)
        messages.append(message)
    return messages


async def load_user_directory(store: EntityStoreProtocol) -> dict[str, UserProfile]:
    """Map user id to profile for every known user."""
    records = await store.users.list()
    profiles = (UserProfile.model_validate(record) for record in records)
    return {profile.id: profile for profile in profiles}


async def load_conversations_use_case(
    store: EntityStoreProtocol,
    user_id: str,
    directory: dict[str, UserProfile],
) -> list[ConversationSummary]:
    """Build the conversation list for ``user_id``, most recent first.

    Raises:
        StoreError: If messages cannot be fetched
    """
    stage_start = perf_counter()
    try:
        messages = await fetch_user_messages(store, user_id)
        summaries = aggregate_conversations(messages, user_id, directory)
        logger.debug(
            "conversations_loaded",
            user_id=user_id,
            messages=len(messages),
            conversations=len(summaries),
        )
        return summaries
    finally:
        USE_CASE_DURATION_SECONDS.labels(use_case="load_conversations").observe(
            perf_counter() - stage_start
        )


async def contact_babysitter_use_case(
    store: EntityStoreProtocol,
    identity: CurrentUserProtocol,
    babysitter_id: str,
    content: str,
    *,
    thread_store: MessageThreadStore | None = None,
    correlation_id: str | None = None,
) -> Message:
    """Send a parent's first (or next) message to a babysitter from search.

    Raises:
        ValidationError: If ``content`` is blank (checked before any store call)
        AuthenticationError: If nobody is logged in
        AccessDeniedError: If the current user is not a parent
        StoreError: If the message cannot be stored
    """
    if not content or not content.strip():
        raise ValidationError("Message content must not be empty")

    with correlation_scope(correlation_id) as bound_correlation_id:
        stage_start = perf_counter()
        try:
            parent = await resolve_current_user(identity, UserType.PARENT)
            thread_id = thread_id_for(parent.id, babysitter_id)
            message = await (thread_store or MessageThreadStore(store)).send(
                thread_id, parent.id, babysitter_id, content
            )
            logger.info(
                "babysitter_contacted",
                correlation_id=bound_correlation_id,
                parent_id=parent.id,
                babysitter_id=babysitter_id,
                thread_id=thread_id,
            )
            return message
        finally:
            USE_CASE_DURATION_SECONDS.labels(use_case="contact_babysitter").observe(
                perf_counter() - stage_start
            )


__all__ = [
    "contact_babysitter_use_case",
    "fetch_user_messages",
    "load_conversations_use_case",
    "load_user_directory",
]
