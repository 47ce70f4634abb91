"""Pytest configuration and shared fixtures."""

from __future__ import annotations

import asyncio
from datetime import UTC, datetime, timedelta
from pathlib import Path
from typing import Any

import pytest

from sitterlink.adapters.current_user import StoreCurrentUser
from sitterlink.adapters.memory_entity_store import (
    InMemoryEntityCollection,
    InMemoryEntityStore,
)
from sitterlink.adapters.store_errors import store_error
from sitterlink.config.settings import Settings
from sitterlink.domain.models import (
    AvailabilityEntry,
    Candidate,
    Message,
    UserProfile,
    UserType,
)

JSONDict = dict[str, Any]

# Wednesday, day_of_week 3
WEDNESDAY_NOON = datetime(2024, 10, 9, 12, 0, tzinfo=UTC)


class TickingClock:
    """Deterministic clock advancing by ``step`` on every read."""

    def __init__(
        self, start: datetime, step: timedelta = timedelta(minutes=1)
    ) -> None:
        self.current = start
        self.step = step

    def __call__(self) -> datetime:
        value = self.current
        self.current += self.step
        return value


class FailingCollection:
    """Collection wrapper that raises store errors on demand.

    ``fail_operations`` fails every call of the named operations,
    ``fail_after`` lets the first N calls of an operation succeed and
    ``fail_record_ids`` fails update/delete calls for specific records.
    """

    def __init__(self, inner: InMemoryEntityCollection) -> None:
        self._inner = inner
        self.entity = inner.entity
        self.fail_operations: set[str] = set()
        self.fail_after: dict[str, int] = {}
        self.fail_record_ids: set[str] = set()
        self.calls: dict[str, int] = {}

    def _check(self, operation: str, record_id: str | None = None) -> None:
        count = self.calls.get(operation, 0)
        self.calls[operation] = count + 1
        limit = self.fail_after.get(operation)
        if (
            operation in self.fail_operations
            or (limit is not None and count >= limit)
            or (record_id is not None and record_id in self.fail_record_ids)
        ):
            raise store_error(self.entity, operation, "injected failure")

    async def create(self, fields: JSONDict) -> JSONDict:
        self._check("create")
        return await self._inner.create(fields)

    async def list(self) -> list[JSONDict]:
        self._check("list")
        return await self._inner.list()

    async def filter(self, **fields: Any) -> list[JSONDict]:
        self._check("filter")
        return await self._inner.filter(**fields)

    async def update(self, record_id: str, fields: JSONDict) -> JSONDict:
        self._check("update", record_id)
        return await self._inner.update(record_id, fields)

    async def delete(self, record_id: str) -> None:
        self._check("delete", record_id)
        await self._inner.delete(record_id)


class FailingStore:
    """Entity store whose collections can be told to fail."""

    def __init__(self, inner: InMemoryEntityStore) -> None:
        self.inner = inner
        self.users = FailingCollection(inner.users)
        self.availability = FailingCollection(inner.availability)
        self.messages = FailingCollection(inner.messages)


def make_candidate(
    candidate_id: str,
    age: int | None,
    availability: list[tuple[int, int, int]] | None = None,
) -> Candidate:
    """Build a candidate from ``(day, start_hour, end_hour)`` tuples."""
    profile = UserProfile(
        id=candidate_id,
        full_name=f"Sitter {candidate_id}",
        user_type=UserType.BABYSITTER,
        completed_setup=True,
        age=age,
    )
    entries = [
        AvailabilityEntry(
            candidate_id=candidate_id,
            day_of_week=day,
            start_hour=start,
            end_hour=end,
        )
        for day, start, end in availability or []
    ]
    return Candidate(profile=profile, availability=entries)


def make_message(
    message_id: str,
    sender_id: str,
    receiver_id: str,
    created_at: datetime,
    *,
    thread_id: str | None = None,
    read: bool = False,
    content: str | None = None,
) -> Message:
    return Message(
        id=message_id,
        sender_id=sender_id,
        receiver_id=receiver_id,
        content=content or f"message {message_id}",
        thread_id=thread_id or "_".join(sorted((sender_id, receiver_id))),
        created_at=created_at,
        read=read,
    )


def _user(user_id: str, full_name: str, user_type: str, **fields: Any) -> JSONDict:
    return {"id": user_id, "full_name": full_name, "user_type": user_type, **fields}


def _slot(babysitter_id: str, day: int, start_time: str, end_time: str) -> JSONDict:
    return {
        "babysitter_id": babysitter_id,
        "day_of_week": day,
        "start_time": start_time,
        "end_time": end_time,
    }


MARKETPLACE_USERS: list[JSONDict] = [
    _user("parent-1", "Pat Parent", "parent", completed_setup=True),
    _user("parent-2", "Quinn Parent", "parent", completed_setup=True),
    _user("sitter-day", "Sam Day", "babysitter", completed_setup=True, age=22),
    _user("sitter-night", "Nia Night", "babysitter", completed_setup=True, age=35),
    _user("sitter-senior", "Olga Senior", "babysitter", completed_setup=True, age=61),
    _user("sitter-pending", "Pia Pending", "babysitter", completed_setup=False, age=30),
    _user("sitter-noage", "Ned Noage", "babysitter", completed_setup=True),
    _user("new-user", "Nora New", "", completed_setup=None),
]

MARKETPLACE_AVAILABILITY: list[JSONDict] = [
    _slot("sitter-day", 3, "09:00", "17:00"),
    _slot("sitter-day", 1, "09:00", "12:00"),
    _slot("sitter-night", 3, "23:00", "02:00"),
    _slot("sitter-senior", 3, "08:00", "20:00"),
    _slot("sitter-pending", 3, "09:00", "17:00"),
    _slot("sitter-noage", 3, "09:00", "17:00"),
]


async def seed_marketplace(store: Any) -> None:
    for user in MARKETPLACE_USERS:
        await store.users.create(user)
    for entry in MARKETPLACE_AVAILABILITY:
        await store.availability.create(entry)


@pytest.fixture
def clock() -> TickingClock:
    return TickingClock(WEDNESDAY_NOON)


@pytest.fixture
def memory_store(clock: TickingClock) -> InMemoryEntityStore:
    return InMemoryEntityStore(clock=clock)


@pytest.fixture
def marketplace_store(memory_store: InMemoryEntityStore) -> InMemoryEntityStore:
    """In-memory store with parents, babysitters and their schedules."""
    asyncio.run(seed_marketplace(memory_store))
    return memory_store


@pytest.fixture
def failing_store(marketplace_store: InMemoryEntityStore) -> FailingStore:
    return FailingStore(marketplace_store)


@pytest.fixture
def parent_identity(marketplace_store: InMemoryEntityStore) -> StoreCurrentUser:
    return StoreCurrentUser(marketplace_store, "parent-1")


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    """Settings pointing at a throwaway SQLite file."""
    return Settings(
        store_backend="memory",
        store_db_path=str(tmp_path / "store.sqlite"),
        sync_interval_seconds=0.05,
        tz_default="UTC",
    )


@pytest.fixture
def candidate_factory() -> Any:
    return make_candidate


@pytest.fixture
def message_factory() -> Any:
    return make_message


@pytest.fixture
def make_failing_store() -> Any:
    return FailingStore
