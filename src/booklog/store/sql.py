"""Entity store backed by SQLAlchemy async sessions."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import selectinload

from ..database.connection import dispose_database, get_async_session
from ..dbmodels import Authors, BookGenres, Books, Users
from ..logging import get_logger
from .base import (
    UNIQUE_KEYS,
    AuthorRecord,
    BookRecord,
    Collection,
    Predicate,
    Record,
    StoreValidationError,
    UniquenessError,
    UserRecord,
    new_id,
    validate_entity,
)

logger = get_logger(__name__)

MODELS = {
    Collection.AUTHORS: Authors,
    Collection.BOOKS: Books,
    Collection.USERS: Users,
}


def _to_record(collection: Collection, row: Any) -> Record:
    if collection is Collection.AUTHORS:
        return AuthorRecord(id=row.id, name=row.name, born=row.born)
    if collection is Collection.BOOKS:
        return BookRecord(
            id=row.id,
            title=row.title,
            published=row.published,
            author_id=row.author_id,
            genres=[g.genre for g in row.genre_rows],
        )
    return UserRecord(
        id=row.id,
        username=row.username,
        favorite_genre=row.favorite_genre,
        password_hash=row.password_hash,
    )


def _conditions(collection: Collection, predicate: Predicate | None) -> list:
    model = MODELS[collection]
    conditions = []
    for field, expected in (predicate or {}).items():
        if collection is Collection.BOOKS and field == "genres":
            genre_match = select(BookGenres.book_id).where(BookGenres.genre == expected)
            conditions.append(Books.id.in_(genre_match))
            continue
        column = getattr(model, field)
        if isinstance(expected, Mapping) and "in" in expected:
            conditions.append(column.in_(list(expected["in"])))
        else:
            conditions.append(column == expected)
    return conditions


def _select(collection: Collection, predicate: Predicate | None):
    model = MODELS[collection]
    stmt = select(model).where(*_conditions(collection, predicate))
    if collection is Collection.BOOKS:
        stmt = stmt.options(selectinload(Books.genre_rows))
    return stmt.order_by(model.created_at, model.id)


def _uniqueness_error(collection: Collection, record: Record) -> UniquenessError:
    keys = UNIQUE_KEYS[collection]
    field = keys[0] if keys else None
    value = getattr(record, field) if field else None
    return UniquenessError(f"{collection.value}.{field} must be unique", field=field, value=value)


class SQLAlchemyEntityStore:
    """Entity store persisting to a relational database through SQLAlchemy."""

    async def find_one(self, collection: Collection, predicate: Predicate) -> Record | None:
        collection = Collection(collection)
        async with get_async_session() as session:
            result = await session.execute(_select(collection, predicate).limit(1))
            row = result.scalars().first()
            return _to_record(collection, row) if row is not None else None

    async def find(
        self, collection: Collection, predicate: Predicate | None = None
    ) -> Sequence[Record]:
        collection = Collection(collection)
        async with get_async_session() as session:
            result = await session.execute(_select(collection, predicate))
            return [_to_record(collection, row) for row in result.scalars().all()]

    async def count(self, collection: Collection, predicate: Predicate | None = None) -> int:
        collection = Collection(collection)
        model = MODELS[collection]
        stmt = select(func.count(model.id)).where(*_conditions(collection, predicate))
        async with get_async_session() as session:
            result = await session.execute(stmt)
            return int(result.scalar() or 0)

    async def count_by_group(
        self,
        collection: Collection,
        group_key: str,
        predicate: Predicate | None = None,
    ) -> dict[Any, int]:
        collection = Collection(collection)
        column = getattr(MODELS[collection], group_key)
        stmt = (
            select(column, func.count())
            .where(*_conditions(collection, predicate))
            .group_by(column)
        )
        async with get_async_session() as session:
            result = await session.execute(stmt)
            return {key: int(total) for key, total in result.all()}

    async def insert(self, collection: Collection, entity: Mapping[str, Any]) -> Record:
        collection = Collection(collection)
        record = validate_entity(collection, {**entity, "id": entity.get("id") or new_id()})

        async with get_async_session() as session:
            if isinstance(record, BookRecord):
                if await session.get(Authors, record.author_id) is None:
                    raise StoreValidationError(
                        "books.author_id references an unknown author",
                        field="author_id",
                        value=record.author_id,
                    )
                row: Any = Books(
                    id=record.id,
                    title=record.title,
                    published=record.published,
                    author_id=record.author_id,
                    genre_rows=[
                        BookGenres(position=i, genre=genre)
                        for i, genre in enumerate(record.genres)
                    ],
                )
            elif isinstance(record, AuthorRecord):
                row = Authors(id=record.id, name=record.name, born=record.born)
            else:
                row = Users(
                    id=record.id,
                    username=record.username,
                    favorite_genre=record.favorite_genre,
                    password_hash=record.password_hash,
                )

            session.add(row)
            try:
                await session.flush()
            except IntegrityError as e:
                logger.info(
                    "Insert rejected by database constraint",
                    collection=collection.value,
                    error=str(e.orig),
                )
                raise _uniqueness_error(collection, record) from e

        logger.debug("Inserted record", collection=collection.value, id=record.id)
        return record

    async def update_one(
        self, collection: Collection, predicate: Predicate, patch: Mapping[str, Any]
    ) -> Record | None:
        collection = Collection(collection)
        async with get_async_session() as session:
            result = await session.execute(_select(collection, predicate).limit(1))
            row = result.scalars().first()
            if row is None:
                return None

            current = _to_record(collection, row)
            updated = validate_entity(collection, {**current.model_dump(), **patch, "id": row.id})
            for field in patch:
                if field == "genres":
                    row.genre_rows = [
                        BookGenres(position=i, genre=genre)
                        for i, genre in enumerate(updated.genres)  # type: ignore[union-attr]
                    ]
                else:
                    setattr(row, field, getattr(updated, field))

            try:
                await session.flush()
            except IntegrityError as e:
                raise _uniqueness_error(collection, updated) from e
            return updated

    async def close(self) -> None:
        await dispose_database()
