"""Entity store interface, record models and store errors."""

from __future__ import annotations

import uuid
from collections.abc import Mapping, Sequence
from enum import Enum
from typing import Annotated, Any, Protocol

from pydantic import BaseModel, Field, StringConstraints, ValidationError


class Collection(str, Enum):
    """Named collections held by the entity store."""

    AUTHORS = "authors"
    BOOKS = "books"
    USERS = "users"


class AuthorRecord(BaseModel):
    id: str
    name: Annotated[str, StringConstraints(min_length=4)]
    born: int | None = None


class BookRecord(BaseModel):
    id: str
    title: Annotated[str, StringConstraints(min_length=5)]
    published: int
    author_id: Annotated[str, StringConstraints(min_length=1)]
    genres: list[Annotated[str, StringConstraints(min_length=1)]] = Field(default_factory=list)


class UserRecord(BaseModel):
    id: str
    username: Annotated[str, StringConstraints(min_length=3)]
    favorite_genre: str
    password_hash: str


Record = AuthorRecord | BookRecord | UserRecord

RECORD_TYPES: dict[Collection, type[BaseModel]] = {
    Collection.AUTHORS: AuthorRecord,
    Collection.BOOKS: BookRecord,
    Collection.USERS: UserRecord,
}

# Business keys that must be unique within their collection
UNIQUE_KEYS: dict[Collection, tuple[str, ...]] = {
    Collection.AUTHORS: ("name",),
    Collection.BOOKS: (),
    Collection.USERS: ("username",),
}

# Field -> value filters. A list-typed field matches when it contains the
# value; a {"in": [...]} value matches any of the listed values.
Predicate = Mapping[str, Any]


class StoreError(Exception):
    """Base class for entity store failures."""

    def __init__(self, message: str, field: str | None = None, value: Any = None):
        super().__init__(message)
        self.field = field
        self.value = value


class UniquenessError(StoreError):
    """Raised when an insert or update would duplicate a unique key."""


class StoreValidationError(StoreError):
    """Raised when an entity is missing a required field or has a malformed one."""


def new_id() -> str:
    return uuid.uuid4().hex


def validate_entity(collection: Collection, data: Mapping[str, Any]) -> Record:
    """Build a validated record for ``collection`` from raw field values.

    Raises:
        StoreValidationError: naming the first offending field
    """
    record_type = RECORD_TYPES[collection]
    try:
        return record_type.model_validate(dict(data))  # type: ignore[return-value]
    except ValidationError as e:
        first = e.errors()[0]
        field = str(first["loc"][0]) if first["loc"] else None
        value = data.get(field) if field else None
        raise StoreValidationError(
            f"{collection.value} validation failed: {field}: {first['msg']}",
            field=field,
            value=value,
        ) from e


def matches(record: BaseModel, predicate: Predicate | None) -> bool:
    """Check whether ``record`` satisfies every filter in ``predicate``."""
    if not predicate:
        return True
    for field, expected in predicate.items():
        actual = getattr(record, field)
        if isinstance(expected, Mapping) and "in" in expected:
            if actual not in expected["in"]:
                return False
        elif isinstance(actual, list):
            if expected not in actual:
                return False
        elif actual != expected:
            return False
    return True


class EntityStore(Protocol):
    """Persistence collaborator for authors, books and users."""

    async def find_one(self, collection: Collection, predicate: Predicate) -> Record | None:
        """Return the first record matching ``predicate`` or None."""
        ...

    async def find(
        self, collection: Collection, predicate: Predicate | None = None
    ) -> Sequence[Record]:
        """Return all matching records in insertion order."""
        ...

    async def count(self, collection: Collection, predicate: Predicate | None = None) -> int:
        """Count matching records."""
        ...

    async def count_by_group(
        self,
        collection: Collection,
        group_key: str,
        predicate: Predicate | None = None,
    ) -> dict[Any, int]:
        """Count matching records per distinct value of ``group_key``.

        Groups with no records are absent from the result.
        """
        ...

    async def insert(self, collection: Collection, entity: Mapping[str, Any]) -> Record:
        """
        Validate and persist a new entity, assigning its id.

        Returns:
            The stored record

        Raises:
            UniquenessError: If a unique key is already taken
            StoreValidationError: If a field is missing or malformed
        """
        ...

    async def update_one(
        self, collection: Collection, predicate: Predicate, patch: Mapping[str, Any]
    ) -> Record | None:
        """Apply ``patch`` to the first matching record and return it, or None."""
        ...

    async def close(self) -> None:
        """Release any resources held by the store."""
        ...
