"""In-process entity store backed by insertion-ordered dicts."""

from __future__ import annotations

import asyncio
from collections import Counter
from collections.abc import Mapping, Sequence
from typing import Any

from ..logging import get_logger
from .base import (
    UNIQUE_KEYS,
    Collection,
    Predicate,
    Record,
    StoreValidationError,
    UniquenessError,
    matches,
    new_id,
    validate_entity,
)

logger = get_logger(__name__)


class InMemoryEntityStore:
    """Entity store kept in process memory.

    Records are copied on the way in and out so callers never hold a reference
    to stored state. Writes are serialized so unique-key checks behave like a
    database unique index.
    """

    def __init__(self) -> None:
        self._collections: dict[Collection, dict[str, Record]] = {
            collection: {} for collection in Collection
        }
        self._write_lock = asyncio.Lock()

    def _rows(self, collection: Collection) -> list[Record]:
        return list(self._collections[Collection(collection)].values())

    async def find_one(self, collection: Collection, predicate: Predicate) -> Record | None:
        for record in self._rows(collection):
            if matches(record, predicate):
                return record.model_copy(deep=True)
        return None

    async def find(
        self, collection: Collection, predicate: Predicate | None = None
    ) -> Sequence[Record]:
        return [
            record.model_copy(deep=True)
            for record in self._rows(collection)
            if matches(record, predicate)
        ]

    async def count(self, collection: Collection, predicate: Predicate | None = None) -> int:
        return sum(1 for record in self._rows(collection) if matches(record, predicate))

    async def count_by_group(
        self,
        collection: Collection,
        group_key: str,
        predicate: Predicate | None = None,
    ) -> dict[Any, int]:
        counts = Counter(
            getattr(record, group_key)
            for record in self._rows(collection)
            if matches(record, predicate)
        )
        return dict(counts)

    async def insert(self, collection: Collection, entity: Mapping[str, Any]) -> Record:
        collection = Collection(collection)
        record = validate_entity(collection, {**entity, "id": entity.get("id") or new_id()})

        async with self._write_lock:
            self._check_unique(collection, record)
            self._check_references(collection, record)
            self._collections[collection][record.id] = record

        logger.debug("Inserted record", collection=collection.value, id=record.id)
        return record.model_copy(deep=True)

    async def update_one(
        self, collection: Collection, predicate: Predicate, patch: Mapping[str, Any]
    ) -> Record | None:
        collection = Collection(collection)
        async with self._write_lock:
            for record_id, record in self._collections[collection].items():
                if not matches(record, predicate):
                    continue
                updated = validate_entity(
                    collection, {**record.model_dump(), **patch, "id": record_id}
                )
                self._check_unique(collection, updated, exclude_id=record_id)
                self._collections[collection][record_id] = updated
                return updated.model_copy(deep=True)
        return None

    async def close(self) -> None:
        pass

    def _check_unique(
        self, collection: Collection, record: Record, exclude_id: str | None = None
    ) -> None:
        for key in UNIQUE_KEYS[collection]:
            value = getattr(record, key)
            for other_id, other in self._collections[collection].items():
                if other_id != exclude_id and getattr(other, key) == value:
                    raise UniquenessError(
                        f"{collection.value}.{key} must be unique", field=key, value=value
                    )

    def _check_references(self, collection: Collection, record: Record) -> None:
        if collection is Collection.BOOKS:
            if record.author_id not in self._collections[Collection.AUTHORS]:  # type: ignore[union-attr]
                raise StoreValidationError(
                    "books.author_id references an unknown author",
                    field="author_id",
                    value=record.author_id,  # type: ignore[union-attr]
                )
