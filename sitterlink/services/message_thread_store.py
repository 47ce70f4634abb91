"""Per-thread ordered message views backed by the entity store."""

from __future__ import annotations

import asyncio
from collections.abc import Iterable

from sitterlink.config.logging_config import get_logger
from sitterlink.domain.exceptions import StoreError, ValidationError
from sitterlink.domain.models import MarkReadResult, Message
from sitterlink.domain.protocols import EntityStoreProtocol

logger = get_logger(__name__)


class MessageThreadStore:
    """Ordered message log per thread with read tracking.

    The local view of a thread is replaced on every ``open`` and extended
    optimistically on ``send``. It is a cache of the store, not a source of
    truth: after a failed operation callers re-open the thread.
    """

    def __init__(self, store: EntityStoreProtocol) -> None:
        self._store = store
        self._threads: dict[str, list[Message]] = {}

    def messages(self, thread_id: str) -> list[Message]:
        """Return the local view of a thread, oldest first."""
        return list(self._threads.get(thread_id, ()))

    def forget(self, thread_id: str) -> None:
        self._threads.pop(thread_id, None)

    async def fetch(self, thread_id: str) -> list[Message]:
        """Load a thread from the store, sorted by ``created_at``.

        The sort is stable: messages with equal timestamps keep store order.
        """
        records = await self._store.messages.filter(thread_id=thread_id)
        messages = [Message.model_validate(record) for record in records]
        return sorted(messages, key=lambda message: message.created_at)

    async def open(self, thread_id: str, current_user_id: str) -> list[Message]:
        """Fetch a thread, mark it read for ``current_user_id`` and return it.

        Messages whose read update succeeded are returned with ``read=True``.
        A failed read update is logged and does not prevent the thread from
        being returned.

        Raises:
            StoreError: If the thread cannot be fetched
        """
        messages = await self.fetch(thread_id)
        self._threads[thread_id] = messages
        await self._mark_messages_read(thread_id, messages, current_user_id)
        return self.messages(thread_id)

    async def mark_read(self, thread_id: str, current_user_id: str) -> MarkReadResult:
        """Mark every unread message addressed to ``current_user_id`` as read.

        One update is issued per affected message. Updates that succeeded are
        kept even when others fail.

        Raises:
            StoreError: If the thread cannot be fetched
        """
        messages = await self.fetch(thread_id)
        self._threads[thread_id] = messages
        return await self._mark_messages_read(thread_id, messages, current_user_id)

    async def send(
        self, thread_id: str, sender_id: str, receiver_id: str, content: str
    ) -> Message:
        """Create a message and append it to the local thread view.

        Raises:
            ValidationError: If ``content`` is blank (no store call is made)
            StoreError: If the store rejects the message
        """
        if not content or not content.strip():
            raise ValidationError("Message content must not be empty")

        record = await self._store.messages.create(
            {
                "sender_id": sender_id,
                "receiver_id": receiver_id,
                "content": content,
                "thread_id": thread_id,
                "read": False,
            }
        )
        message = Message.model_validate(record)
        self._threads.setdefault(thread_id, []).append(message)

        logger.info(
            "message_sent",
            thread_id=thread_id,
            message_id=message.id,
            sender_id=sender_id,
            receiver_id=receiver_id,
        )
        return message

    async def _mark_messages_read(
        self, thread_id: str, messages: Iterable[Message], current_user_id: str
    ) -> MarkReadResult:
        unread = [message for message in messages if message.is_unread_for(current_user_id)]
        if not unread:
            return MarkReadResult(thread_id=thread_id, marked=0, failed=0)

        # Each update is an idempotent field set, completion order is irrelevant
        outcomes = await asyncio.gather(
            *(self._store.messages.update(message.id, {"read": True}) for message in unread),
            return_exceptions=True,
        )

        marked_ids: set[str] = set()
        failed = 0
        for message, outcome in zip(unread, outcomes, strict=True):
            if isinstance(outcome, StoreError):
                failed += 1
                continue
            if isinstance(outcome, BaseException):
                raise outcome
            marked_ids.add(message.id)

        self._apply_read(thread_id, marked_ids)

        result = MarkReadResult(thread_id=thread_id, marked=len(marked_ids), failed=failed)
        if failed:
            logger.warning(
                "mark_read_partial_failure",
                thread_id=thread_id,
                marked=result.marked,
                failed=failed,
            )
        else:
            logger.debug("mark_read_completed", thread_id=thread_id, marked=result.marked)
        return result

    def _apply_read(self, thread_id: str, message_ids: set[str]) -> None:
        view = self._threads.get(thread_id)
        if not view or not message_ids:
            return
        self._threads[thread_id] = [
            message.model_copy(update={"read": True})
            if message.id in message_ids
            else message
            for message in view
        ]


__all__ = ["MessageThreadStore"]
