from __future__ import annotations

from collections.abc import AsyncGenerator
from typing import TYPE_CHECKING

import strawberry

from ...events.models import BookAddedEvent
from ...logging import get_logger
from ...store.base import AuthorRecord, BookRecord, Collection, StoreError
from ..errors import map_error
from .author import author_from_record

if TYPE_CHECKING:
    from ..types.author import Author
    from ..types.book import Book

logger = get_logger(__name__)


def book_from_record(record: BookRecord, author: AuthorRecord | None = None) -> Book:
    """Convert a stored book into its GraphQL type."""
    from ..types.book import Book as BookType

    return BookType(
        id=strawberry.ID(record.id),
        title=record.title,
        published=record.published,
        genres=list(record.genres),
        author_id=record.author_id,
        resolved_author=author_from_record(author) if author else None,
    )


# Query resolvers
async def resolve_book_count(info: strawberry.Info) -> int:
    return await info.context.store.count(Collection.BOOKS)


async def resolve_all_books(
    info: strawberry.Info,
    author: str | None = None,
    genre: str | None = None,
) -> list[Book]:
    """
    Resolve books, optionally filtered by exact author name and/or exact genre.

    An unknown author name yields an empty list rather than an error.
    Results keep the store's order.
    """
    store = info.context.store
    predicate: dict = {}

    if genre:
        predicate["genres"] = genre

    if author:
        author_record = await store.find_one(Collection.AUTHORS, {"name": author})
        if author_record is None:
            logger.info("allBooks filtered by unknown author", author=author)
            return []
        predicate["author_id"] = author_record.id
        info.context.loaders.author_loader.prime(author_record.id, author_record)

    books = await store.find(Collection.BOOKS, predicate)
    return [book_from_record(book) for book in books]


# Field resolvers
async def resolve_book_author(book: Book, info: strawberry.Info) -> Author:
    """Resolve the stored author reference to a full Author."""
    if book.resolved_author is not None:
        return book.resolved_author

    author = await info.context.loaders.author_loader.load(book.author_id)
    if author is None:
        logger.error(
            "Book references a missing author", book_id=str(book.id), author_id=book.author_id
        )
        raise RuntimeError(f"Author {book.author_id} not found for book {book.id}")
    return author_from_record(author)


# Mutation resolvers
async def add_book(
    info: strawberry.Info,
    title: str,
    published: int,
    author: str,
    genres: list[str],
) -> Book:
    """
    Add a book, creating its author on first use, then announce it to subscribers.

    Two concurrent calls naming the same unseen author may both try to create
    it; the store's unique constraint lets one through and the other fails
    with a validation error.
    """
    context = info.context
    auth = await context.require_auth()
    store = context.store

    author_record = await store.find_one(Collection.AUTHORS, {"name": author})
    if author_record is None:
        try:
            author_record = await store.insert(Collection.AUTHORS, {"name": author, "born": None})
        except StoreError as e:
            raise map_error(
                e, message="Saving author failed", invalid_field="author", invalid_value=author
            ) from e
        logger.info("Author created", author_id=author_record.id, name=author)

    try:
        book_record = await store.insert(
            Collection.BOOKS,
            {
                "title": title,
                "published": published,
                "author_id": author_record.id,
                "genres": genres,
            },
        )
    except StoreError as e:
        raise map_error(
            e, message="Saving book failed", invalid_field="title", invalid_value=title
        ) from e

    logger.info(
        "Book added",
        book_id=book_record.id,
        author_id=author_record.id,
        user_id=auth.user_id,
    )

    await context.broadcaster.publish(
        BookAddedEvent(book=book_record, author=author_record)  # type: ignore[arg-type]
    )

    return book_from_record(book_record, author_record)  # type: ignore[arg-type]


# Subscription resolvers
async def subscribe_book_added(info: strawberry.Info) -> AsyncGenerator[Book, None]:
    """Yield every book added from now on until the subscriber goes away."""
    context = info.context
    # Anonymous callers may listen; a credential that fails verification may not
    await context.get_auth()
    async with context.broadcaster.subscribe() as events:
        logger.info("bookAdded subscription started")
        try:
            async for event in events:
                # Author counts are live; never serve them from an earlier event's cache
                context.reset_loaders()
                yield book_from_record(event.book, event.author)
        finally:
            logger.info("bookAdded subscription ended")
