from __future__ import annotations

from typing import TYPE_CHECKING

import strawberry

from ...logging import get_logger
from ...store.base import AuthorRecord, Collection, StoreError
from ..errors import map_error

if TYPE_CHECKING:
    from ..types.author import Author

logger = get_logger(__name__)


def author_from_record(record: AuthorRecord) -> Author:
    """Convert a stored author into its GraphQL type."""
    from ..types.author import Author as AuthorType

    return AuthorType(id=strawberry.ID(record.id), name=record.name, born=record.born)


# Query resolvers
async def resolve_author_count(info: strawberry.Info) -> int:
    return await info.context.store.count(Collection.AUTHORS)


async def resolve_all_authors(info: strawberry.Info) -> list[Author]:
    """
    Resolve every author.

    Book counts for the whole list come from one grouped count, primed into
    the per-request loader so each bookCount field is answered from it.
    """
    store = info.context.store
    loaders = info.context.loaders

    authors = await store.find(Collection.AUTHORS)
    counts = await store.count_by_group(Collection.BOOKS, "author_id")

    loaders.book_count_loader.prime_many(
        {author.id: counts.get(author.id, 0) for author in authors}
    )
    loaders.author_loader.prime_many({author.id: author for author in authors})

    return [author_from_record(author) for author in authors]  # type: ignore[arg-type]


# Field resolvers
async def resolve_author_book_count(author: Author, info: strawberry.Info) -> int:
    """Live count of books referencing ``author``, batched per request."""
    return await info.context.loaders.book_count_loader.load(str(author.id))


# Mutation resolvers
async def edit_author(info: strawberry.Info, name: str, set_born_to: int) -> Author | None:
    """
    Set an author's birth year.

    The caller must be authenticated; that check runs before the lookup.
    An unknown name returns None rather than an error.
    """
    context = info.context
    auth = await context.require_auth()

    try:
        updated = await context.store.update_one(
            Collection.AUTHORS, {"name": name}, {"born": set_born_to}
        )
    except StoreError as e:
        raise map_error(
            e, message="Editing author failed", invalid_field="setBornTo", invalid_value=set_born_to
        ) from e

    if updated is None:
        logger.info("editAuthor for unknown author", name=name)
        return None

    logger.info("Author edited", author_id=updated.id, born=set_born_to, user_id=auth.user_id)
    return author_from_record(updated)  # type: ignore[arg-type]
