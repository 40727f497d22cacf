"""Entity store for authors, books and users."""

from .base import (
    AuthorRecord,
    BookRecord,
    Collection,
    EntityStore,
    StoreError,
    StoreValidationError,
    UniquenessError,
    UserRecord,
)
from .factory import create_entity_store
from .memory import InMemoryEntityStore

__all__ = [
    "AuthorRecord",
    "BookRecord",
    "Collection",
    "EntityStore",
    "InMemoryEntityStore",
    "StoreError",
    "StoreValidationError",
    "UniquenessError",
    "UserRecord",
    "create_entity_store",
]
