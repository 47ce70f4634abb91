"""Factory for creating entity store instances."""

from typing import cast

from sitterlink.adapters.memory_entity_store import InMemoryEntityStore
from sitterlink.adapters.sqlite_entity_store import SQLiteEntityStore
from sitterlink.config.logging_config import get_logger
from sitterlink.config.settings import Settings
from sitterlink.domain.protocols import EntityStoreProtocol

logger = get_logger(__name__)


def create_entity_store(settings: Settings) -> EntityStoreProtocol:
    """Create the entity store selected by settings.

    Args:
        settings: Application settings

    Returns:
        Entity store instance (in-memory or SQLite)

    Raises:
        ValueError: If store_backend is not supported
    """
    if settings.store_backend == "memory":
        logger.info("entity_store_memory_selected")
        return cast(EntityStoreProtocol, InMemoryEntityStore())

    if settings.store_backend == "sqlite":
        logger.info("entity_store_sqlite_selected", path=settings.store_db_path)
        return cast(EntityStoreProtocol, SQLiteEntityStore(settings.store_db_path))

    raise ValueError(
        f"Unsupported store backend: {settings.store_backend}. "
        f"Must be 'memory' or 'sqlite'"
    )
