"""
Root GraphQL query definitions
"""

import strawberry

from ..types.author import Author
from ..types.book import Book
from ..types.user import User


@strawberry.type
class Query:
    """Root GraphQL query type."""

    @strawberry.field
    async def book_count(self, info: strawberry.Info) -> int:
        """Total number of books."""
        from ..resolvers.book import resolve_book_count

        return await resolve_book_count(info)

    @strawberry.field
    async def author_count(self, info: strawberry.Info) -> int:
        """Total number of authors."""
        from ..resolvers.author import resolve_author_count

        return await resolve_author_count(info)

    @strawberry.field
    async def all_books(
        self,
        info: strawberry.Info,
        author: str | None = None,
        genre: str | None = None,
    ) -> list[Book]:
        """Get books, optionally filtered by author name and genre."""
        from ..resolvers.book import resolve_all_books

        return await resolve_all_books(info, author, genre)

    @strawberry.field
    async def all_authors(self, info: strawberry.Info) -> list[Author]:
        """Get every author with their book count."""
        from ..resolvers.author import resolve_all_authors

        return await resolve_all_authors(info)

    @strawberry.field
    async def me(self, info: strawberry.Info) -> User | None:
        """Get the current authenticated user."""
        from ..resolvers.user import resolve_current_user

        return await resolve_current_user(info)
