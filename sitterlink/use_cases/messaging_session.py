"""Explicit state of one user's messaging page."""

from __future__ import annotations

from dataclasses import dataclass, field

from sitterlink.config.logging_config import get_logger
from sitterlink.config.settings import Settings
from sitterlink.domain.exceptions import StoreError, ValidationError
from sitterlink.domain.models import ConversationSummary, Message, UserProfile
from sitterlink.domain.protocols import CurrentUserProtocol, EntityStoreProtocol
from sitterlink.services.conversation_aggregator import count_unread
from sitterlink.services.message_thread_store import MessageThreadStore
from sitterlink.services.thread_identity import thread_id_for
from sitterlink.use_cases.access import resolve_current_user
from sitterlink.use_cases.conversations import (
    load_conversations_use_case,
    load_user_directory,
)
from sitterlink.workers.sync_loop import USER_ACTION_TRIGGER, SyncLoop

logger = get_logger(__name__)


@dataclass
class MessagingSession:
    """Conversation list plus the currently open thread.

    ``refresh`` is the sync loop's callback: it reloads the directory and
    the conversation list, then re-opens the active thread (which also marks
    newly arrived messages read). Sending reloads the conversation list
    right away; opening a conversation asks the attached sync loop for a
    refresh.
    """

    store: EntityStoreProtocol
    current_user: UserProfile
    thread_store: MessageThreadStore
    user_directory: dict[str, UserProfile] = field(default_factory=dict)
    conversations: list[ConversationSummary] = field(default_factory=list)
    active_thread_id: str | None = None
    active_other_user_id: str | None = None
    sync_loop: SyncLoop | None = None

    @classmethod
    async def start(
        cls, store: EntityStoreProtocol, identity: CurrentUserProtocol
    ) -> MessagingSession:
        """Resolve the current user and load the initial conversation list.

        Raises:
            AuthenticationError: If nobody is logged in
            StoreError: If the initial load fails
        """
        user = await resolve_current_user(identity)
        session = cls(
            store=store, current_user=user, thread_store=MessageThreadStore(store)
        )
        await session.refresh()
        logger.info(
            "messaging_session_started",
            user_id=user.id,
            conversations=len(session.conversations),
        )
        return session

    async def refresh(self) -> None:
        self.user_directory = await load_user_directory(self.store)
        self.conversations = await load_conversations_use_case(
            self.store, self.current_user.id, self.user_directory
        )
        if self.active_thread_id is not None:
            messages = await self.thread_store.open(
                self.active_thread_id, self.current_user.id
            )
            self._clear_unread(self.active_thread_id, messages)

    async def open_conversation(
        self, other_user_id: str, thread_id: str | None = None
    ) -> list[Message]:
        """Make the thread with ``other_user_id`` active and mark it read.

        ``thread_id`` defaults to the canonical id for the two participants;
        pass the summary's id to open a listed conversation as stored.

        Raises:
            ValidationError: If ``other_user_id`` is empty
            StoreError: If the thread cannot be fetched
        """
        target = thread_id or thread_id_for(self.current_user.id, other_user_id)
        previous = self.active_thread_id
        if previous is not None and previous != target:
            self.thread_store.forget(previous)

        self.active_thread_id = target
        self.active_other_user_id = other_user_id
        messages = await self.thread_store.open(target, self.current_user.id)
        self._clear_unread(target, messages)
        if self.sync_loop is not None:
            self.sync_loop.trigger(USER_ACTION_TRIGGER)
        return messages

    async def send(self, content: str) -> Message:
        """Send ``content`` into the active conversation.

        The conversation list is reloaded once the message is stored. If that
        reload fails the message still counts as sent and the next sync
        catches up.

        Raises:
            ValidationError: If no conversation is open or content is blank
            StoreError: If the store rejects the message
        """
        if self.active_thread_id is None or self.active_other_user_id is None:
            raise ValidationError("No conversation is open")
        message = await self.thread_store.send(
            self.active_thread_id,
            self.current_user.id,
            self.active_other_user_id,
            content,
        )

        try:
            self.conversations = await load_conversations_use_case(
                self.store, self.current_user.id, self.user_directory
            )
        except StoreError as exc:
            logger.warning(
                "conversations_reload_after_send_failed",
                user_id=self.current_user.id,
                thread_id=self.active_thread_id,
                error=str(exc),
            )
        return message

    @property
    def messages(self) -> list[Message]:
        if self.active_thread_id is None:
            return []
        return self.thread_store.messages(self.active_thread_id)

    @property
    def active_other_user(self) -> UserProfile | None:
        if self.active_other_user_id is None:
            return None
        return self.user_directory.get(self.active_other_user_id)

    @property
    def unread_count(self) -> int:
        return count_unread(self.conversations)

    def _clear_unread(self, thread_id: str, messages: list[Message]) -> None:
        read_ids = {message.id for message in messages if message.read}
        self.conversations = [
            summary.model_copy(
                update={
                    "unread": False,
                    "latest_message": summary.latest_message.model_copy(
                        update={"read": True}
                    ),
                }
            )
            if summary.thread_id == thread_id
            and summary.latest_message.id in read_ids
            else summary
            for summary in self.conversations
        ]


def create_sync_loop(session: MessagingSession, settings: Settings) -> SyncLoop:
    """Sync loop refreshing ``session`` at the configured interval.

    The loop is attached to the session so user actions can trigger it.
    """
    loop = SyncLoop(
        session.refresh,
        interval_seconds=settings.sync_interval_seconds,
        name=f"messages-{session.current_user.id}",
    )
    session.sync_loop = loop
    return loop


__all__ = ["MessagingSession", "create_sync_loop"]
