"""SQLite entity store adapter for local persistence.

Records of every entity kind live in one table as JSON documents. The
sqlite3 calls are blocking, so each operation runs in a worker thread via
``asyncio.to_thread`` and opens its own connection.
"""

from __future__ import annotations

import asyncio
import json
import sqlite3
from datetime import UTC, datetime
from pathlib import Path
from typing import Any
from uuid import uuid4

from sitterlink.adapters.store_errors import store_error
from sitterlink.config.logging_config import get_logger
from sitterlink.domain.protocols import (
    AVAILABILITY_ENTITY,
    MESSAGES_ENTITY,
    USERS_ENTITY,
)

logger = get_logger(__name__)

JSONDict = dict[str, Any]

_RESERVED_FIELDS = frozenset({"id", "created_date", "updated_date"})


class SQLiteEntityCollection:
    """Async view of one entity kind inside a SQLite entity store."""

    def __init__(self, store: SQLiteEntityStore, entity: str) -> None:
        self._store = store
        self.entity = entity

    async def create(self, fields: JSONDict) -> JSONDict:
        return await asyncio.to_thread(self._store.create_record, self.entity, fields)

    async def list(self) -> list[JSONDict]:
        return await asyncio.to_thread(self._store.list_records, self.entity)

    async def filter(self, **fields: Any) -> list[JSONDict]:
        records = await asyncio.to_thread(self._store.list_records, self.entity)
        return [
            record
            for record in records
            if all(record.get(key) == value for key, value in fields.items())
        ]

    async def update(self, record_id: str, fields: JSONDict) -> JSONDict:
        return await asyncio.to_thread(
            self._store.update_record, self.entity, record_id, fields
        )

    async def delete(self, record_id: str) -> None:
        await asyncio.to_thread(self._store.delete_record, self.entity, record_id)


class SQLiteEntityStore:
    """SQLite-based entity store."""

    def __init__(self, db_path: str) -> None:
        """Initialize the store and ensure the schema exists.

        Args:
            db_path: Path to SQLite database file
        """
        self.db_path = db_path
        Path(db_path).parent.mkdir(parents=True, exist_ok=True)
        self._create_schema()

        self._users = SQLiteEntityCollection(self, USERS_ENTITY)
        self._availability = SQLiteEntityCollection(self, AVAILABILITY_ENTITY)
        self._messages = SQLiteEntityCollection(self, MESSAGES_ENTITY)

    @property
    def users(self) -> SQLiteEntityCollection:
        return self._users

    @property
    def availability(self) -> SQLiteEntityCollection:
        return self._availability

    @property
    def messages(self) -> SQLiteEntityCollection:
        return self._messages

    def _get_connection(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        return conn

    def _create_schema(self) -> None:
        logger.info("sqlite_schema_creation_started", db_path=str(self.db_path))
        conn = self._get_connection()
        try:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS entities (
                    entity TEXT NOT NULL,
                    id TEXT NOT NULL,
                    created_date TEXT NOT NULL,
                    updated_date TEXT NOT NULL,
                    data TEXT NOT NULL,
                    PRIMARY KEY (entity, id)
                )
            """
            )
            conn.execute(
                "CREATE INDEX IF NOT EXISTS idx_entities_entity ON entities(entity)"
            )
            conn.commit()
        finally:
            conn.close()

    @staticmethod
    def _row_to_record(row: sqlite3.Row) -> JSONDict:
        record: JSONDict = json.loads(row["data"])
        record["id"] = row["id"]
        record["created_date"] = row["created_date"]
        record["updated_date"] = row["updated_date"]
        return record

    @staticmethod
    def _serialize(fields: JSONDict) -> str:
        payload = {k: v for k, v in fields.items() if k not in _RESERVED_FIELDS}
        return json.dumps(payload, separators=(",", ":"), sort_keys=True)

    def create_record(self, entity: str, fields: JSONDict) -> JSONDict:
        record_id = str(fields.get("id") or uuid4().hex)
        timestamp = datetime.now(tz=UTC).isoformat()
        conn = self._get_connection()
        try:
            conn.execute(
                """
                INSERT INTO entities (entity, id, created_date, updated_date, data)
                VALUES (?, ?, ?, ?, ?)
                """,
                (entity, record_id, timestamp, timestamp, self._serialize(fields)),
            )
            conn.commit()
        except sqlite3.Error as exc:
            raise store_error(entity, "create", str(exc)) from exc
        finally:
            conn.close()

        return {
            **fields,
            "id": record_id,
            "created_date": timestamp,
            "updated_date": timestamp,
        }

    def list_records(self, entity: str) -> list[JSONDict]:
        conn = self._get_connection()
        try:
            rows = conn.execute(
                "SELECT * FROM entities WHERE entity = ? ORDER BY rowid", (entity,)
            ).fetchall()
        except sqlite3.Error as exc:
            raise store_error(entity, "list", str(exc)) from exc
        finally:
            conn.close()
        return [self._row_to_record(row) for row in rows]

    def update_record(self, entity: str, record_id: str, fields: JSONDict) -> JSONDict:
        conn = self._get_connection()
        try:
            row = conn.execute(
                "SELECT * FROM entities WHERE entity = ? AND id = ?",
                (entity, record_id),
            ).fetchone()
            if row is None:
                raise store_error(entity, "update", f"unknown id {record_id}")

            record = self._row_to_record(row)
            record.update({k: v for k, v in fields.items() if k not in _RESERVED_FIELDS})
            record["updated_date"] = datetime.now(tz=UTC).isoformat()
            conn.execute(
                """
                UPDATE entities SET data = ?, updated_date = ?
                WHERE entity = ? AND id = ?
                """,
                (self._serialize(record), record["updated_date"], entity, record_id),
            )
            conn.commit()
        except sqlite3.Error as exc:
            raise store_error(entity, "update", str(exc)) from exc
        finally:
            conn.close()
        return record

    def delete_record(self, entity: str, record_id: str) -> None:
        conn = self._get_connection()
        try:
            cursor = conn.execute(
                "DELETE FROM entities WHERE entity = ? AND id = ?",
                (entity, record_id),
            )
            conn.commit()
            deleted = cursor.rowcount
        except sqlite3.Error as exc:
            raise store_error(entity, "delete", str(exc)) from exc
        finally:
            conn.close()
        if deleted == 0:
            raise store_error(entity, "delete", f"unknown id {record_id}")


__all__ = ["SQLiteEntityCollection", "SQLiteEntityStore"]
