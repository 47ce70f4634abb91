"""In-memory entity store for tests, demos and single-process runs."""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from datetime import UTC, datetime
from typing import Any
from uuid import uuid4

from sitterlink.adapters.store_errors import store_error
from sitterlink.domain.protocols import (
    AVAILABILITY_ENTITY,
    MESSAGES_ENTITY,
    USERS_ENTITY,
)

JSONDict = dict[str, Any]
Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(tz=UTC)


class InMemoryEntityCollection:
    """Dictionary-backed collection of records for one entity kind.

    Records are copied on the way in and out. Each call yields to the event
    loop once, so concurrent callers interleave as they would against a
    remote store.
    """

    def __init__(self, entity: str, *, clock: Clock = utc_now) -> None:
        self.entity = entity
        self._clock = clock
        self._records: dict[str, JSONDict] = {}

    async def create(self, fields: JSONDict) -> JSONDict:
        await asyncio.sleep(0)
        record_id = str(fields.get("id") or uuid4().hex)
        if record_id in self._records:
            raise store_error(self.entity, "create", f"duplicate id {record_id}")

        timestamp = self._clock().isoformat()
        record = {
            **fields,
            "id": record_id,
            "created_date": timestamp,
            "updated_date": timestamp,
        }
        self._records[record_id] = record
        return dict(record)

    async def list(self) -> list[JSONDict]:
        await asyncio.sleep(0)
        return [dict(record) for record in self._records.values()]

    async def filter(self, **fields: Any) -> list[JSONDict]:
        await asyncio.sleep(0)
        return [
            dict(record)
            for record in self._records.values()
            if all(record.get(key) == value for key, value in fields.items())
        ]

    async def update(self, record_id: str, fields: JSONDict) -> JSONDict:
        await asyncio.sleep(0)
        record = self._records.get(record_id)
        if record is None:
            raise store_error(self.entity, "update", f"unknown id {record_id}")

        changes = {key: value for key, value in fields.items() if key != "id"}
        record.update(changes)
        record["updated_date"] = self._clock().isoformat()
        return dict(record)

    async def delete(self, record_id: str) -> None:
        await asyncio.sleep(0)
        if self._records.pop(record_id, None) is None:
            raise store_error(self.entity, "delete", f"unknown id {record_id}")


class InMemoryEntityStore:
    """Entity store keeping users, availability and messages in memory."""

    def __init__(self, *, clock: Clock = utc_now) -> None:
        self._users = InMemoryEntityCollection(USERS_ENTITY, clock=clock)
        self._availability = InMemoryEntityCollection(AVAILABILITY_ENTITY, clock=clock)
        self._messages = InMemoryEntityCollection(MESSAGES_ENTITY, clock=clock)

    @property
    def users(self) -> InMemoryEntityCollection:
        return self._users

    @property
    def availability(self) -> InMemoryEntityCollection:
        return self._availability

    @property
    def messages(self) -> InMemoryEntityCollection:
        return self._messages


__all__ = [
    "InMemoryEntityCollection",
    "InMemoryEntityStore",
    "utc_now",
]
