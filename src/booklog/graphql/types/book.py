"""
Book GraphQL type definitions
"""

import strawberry

from .author import Author


@strawberry.type
class Book:
    """Book type for GraphQL API."""

    id: strawberry.ID
    title: str
    published: int
    genres: list[str]
    author_id: strawberry.Private[str]
    # Set when the author is already known, e.g. on a bookAdded event
    resolved_author: strawberry.Private[Author | None] = None

    @strawberry.field
    async def author(self, info: strawberry.Info) -> Author:
        """Get the author of this book."""
        from ..resolvers.book import resolve_book_author

        return await resolve_book_author(self, info)
