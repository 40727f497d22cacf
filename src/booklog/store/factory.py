"""Factory for creating the configured entity store."""

from ..config import Settings, get_database_url, settings
from ..logging import get_logger
from .base import EntityStore
from .memory import InMemoryEntityStore

logger = get_logger(__name__)


async def create_entity_store(config: Settings | None = None) -> EntityStore:
    """Create an entity store from settings.

    The SQL backend is initialized and its schema ensured before returning,
    so an unreachable database fails here rather than on the first request.

    Raises:
        ValueError: If the configured backend is unknown
    """
    config = config or settings
    backend = config.store_backend.lower()

    if backend == "memory":
        logger.info("Using in-memory entity store")
        return InMemoryEntityStore()

    if backend == "sql":
        from ..database.connection import check_database_connection, create_schema, init_database
        from .sql import SQLAlchemyEntityStore

        init_database(get_database_url(config), force_reinit=True, echo=config.sql_echo)
        ok, error = await check_database_connection()
        if not ok:
            raise RuntimeError(error)
        await create_schema()
        logger.info("Using SQL entity store")
        return SQLAlchemyEntityStore()

    raise ValueError(f"Unknown store backend: {config.store_backend}")
