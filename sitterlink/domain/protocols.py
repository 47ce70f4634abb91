"""Protocol definitions for dependency inversion.

The core treats persistence and identity as external collaborators. These
interfaces define the contracts that adapters must implement.
"""

from __future__ import annotations

from typing import Any, Protocol

JSONDict = dict[str, Any]

USERS_ENTITY = "User"
AVAILABILITY_ENTITY = "Availability"
MESSAGES_ENTITY = "Message"


class EntityCollectionProtocol(Protocol):
    """Generic CRUD access to one entity kind (users, availability, messages).

    Records are plain dictionaries. The store assigns ``id`` and
    ``created_date`` on create. Every call may fail independently.
    """

    entity: str

    async def create(self, fields: JSONDict) -> JSONDict:
        """Create a record.

        Args:
            fields: Field values of the new record

        Returns:
            Stored record including ``id`` and ``created_date``

        Raises:
            StoreError: On transport or backend validation errors
        """
        ...

    async def list(self) -> list[JSONDict]:
        """Return all records in creation order.

        Raises:
            StoreError: On transport errors
        """
        ...

    async def filter(self, **fields: Any) -> list[JSONDict]:
        """Return records whose fields equal all given values.

        Raises:
            StoreError: On transport errors
        """
        ...

    async def update(self, record_id: str, fields: JSONDict) -> JSONDict:
        """Set fields on an existing record and return it.

        Raises:
            StoreError: On transport errors or unknown ``record_id``
        """
        ...

    async def delete(self, record_id: str) -> None:
        """Delete a record.

        Raises:
            StoreError: On transport errors or unknown ``record_id``
        """
        ...


class EntityStoreProtocol(Protocol):
    """Entity store exposing one collection per entity kind."""

    @property
    def users(self) -> EntityCollectionProtocol: ...

    @property
    def availability(self) -> EntityCollectionProtocol: ...

    @property
    def messages(self) -> EntityCollectionProtocol: ...


class CurrentUserProtocol(Protocol):
    """Accessor for the logged-in user."""

    async def me(self) -> JSONDict:
        """Return the current user's record.

        Raises:
            AuthenticationError: If no user is authenticated
            StoreError: If the user record cannot be fetched
        """
        ...
