"""Current-identity accessors."""

from __future__ import annotations

from typing import Any

from sitterlink.domain.exceptions import AuthenticationError
from sitterlink.domain.protocols import EntityStoreProtocol

JSONDict = dict[str, Any]


class StoreCurrentUser:
    """Resolve a fixed user id through the entity store's users collection."""

    def __init__(self, store: EntityStoreProtocol, user_id: str | None) -> None:
        self._store = store
        self._user_id = user_id

    async def me(self) -> JSONDict:
        if not self._user_id:
            raise AuthenticationError("No user is logged in")

        records = await self._store.users.filter(id=self._user_id)
        if not records:
            raise AuthenticationError(f"Unknown user: {self._user_id}")
        return records[0]


__all__ = ["StoreCurrentUser"]
