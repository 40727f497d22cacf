"""Tests for the read side of the GraphQL API."""

import pytest

from booklog.store.base import Collection
from booklog.store.memory import InMemoryEntityStore

BOOKS_QUERY = """
query AllBooks($author: String, $genre: String) {
  allBooks(author: $author, genre: $genre) {
    title
    published
    genres
    author { name born }
  }
}
"""

AUTHORS_QUERY = """
query {
  allAuthors { name born bookCount }
}
"""


class CountingStore(InMemoryEntityStore):
    """In-memory store that records how often grouped counts are requested."""

    def __init__(self):
        super().__init__()
        self.group_counts = 0
        self.finds = 0

    async def find(self, collection, predicate=None):
        self.finds += 1
        return await super().find(collection, predicate)

    async def count_by_group(self, collection, field, predicate=None):
        self.group_counts += 1
        return await super().count_by_group(collection, field, predicate)


async def _seed(store):
    fowler = await store.insert(Collection.AUTHORS, {"name": "Martin Fowler", "born": 1963})
    martin = await store.insert(Collection.AUTHORS, {"name": "Robert Martin", "born": 1952})
    await store.insert(Collection.AUTHORS, {"name": "Joshua Kerievsky", "born": None})
    await store.insert(
        Collection.BOOKS,
        {
            "title": "Refactoring, edition 2",
            "published": 2018,
            "author_id": fowler.id,
            "genres": ["refactoring"],
        },
    )
    await store.insert(
        Collection.BOOKS,
        {
            "title": "Clean Code",
            "published": 2008,
            "author_id": martin.id,
            "genres": ["refactoring"],
        },
    )
    await store.insert(
        Collection.BOOKS,
        {
            "title": "Agile software development",
            "published": 2002,
            "author_id": martin.id,
            "genres": ["agile", "patterns", "design"],
        },
    )


class TestCounts:
    @pytest.mark.asyncio
    async def test_empty_catalog(self, execute):
        result = await execute("{ bookCount authorCount allBooks { title } allAuthors { name } }")

        assert result.errors is None
        assert result.data == {
            "bookCount": 0,
            "authorCount": 0,
            "allBooks": [],
            "allAuthors": [],
        }

    @pytest.mark.asyncio
    async def test_counts(self, store, execute):
        await _seed(store)

        result = await execute("{ bookCount authorCount }")

        assert result.data == {"bookCount": 3, "authorCount": 3}


class TestAllBooks:
    @pytest.mark.asyncio
    async def test_all_books_with_authors(self, store, execute):
        await _seed(store)

        result = await execute(BOOKS_QUERY)

        assert result.errors is None
        books = result.data["allBooks"]
        assert [b["title"] for b in books] == [
            "Refactoring, edition 2",
            "Clean Code",
            "Agile software development",
        ]
        assert books[0]["author"] == {"name": "Martin Fowler", "born": 1963}

    @pytest.mark.asyncio
    async def test_filter_by_author(self, store, execute):
        await _seed(store)

        result = await execute(BOOKS_QUERY, {"author": "Robert Martin"})

        assert [b["title"] for b in result.data["allBooks"]] == [
            "Clean Code",
            "Agile software development",
        ]

    @pytest.mark.asyncio
    async def test_unknown_author_yields_empty_list(self, store, execute):
        await _seed(store)

        result = await execute(BOOKS_QUERY, {"author": "Nobody Known"})

        assert result.errors is None
        assert result.data == {"allBooks": []}

    @pytest.mark.asyncio
    async def test_filter_by_genre_is_exact(self, store, execute):
        await _seed(store)

        refactoring = await execute(BOOKS_QUERY, {"genre": "refactoring"})
        partial = await execute(BOOKS_QUERY, {"genre": "refactor"})

        assert len(refactoring.data["allBooks"]) == 2
        assert partial.data == {"allBooks": []}

    @pytest.mark.asyncio
    async def test_filter_by_author_and_genre(self, store, execute):
        await _seed(store)

        result = await execute(BOOKS_QUERY, {"author": "Robert Martin", "genre": "refactoring"})

        assert [b["title"] for b in result.data["allBooks"]] == ["Clean Code"]

    @pytest.mark.asyncio
    async def test_empty_filters_are_ignored(self, store, execute):
        await _seed(store)

        result = await execute(BOOKS_QUERY, {"author": "", "genre": ""})

        assert len(result.data["allBooks"]) == 3


class TestAllAuthors:
    @pytest.mark.asyncio
    async def test_book_counts_include_zero(self, store, execute):
        await _seed(store)

        result = await execute(AUTHORS_QUERY)

        assert result.errors is None
        assert result.data["allAuthors"] == [
            {"name": "Martin Fowler", "born": 1963, "bookCount": 1},
            {"name": "Robert Martin", "born": 1952, "bookCount": 2},
            {"name": "Joshua Kerievsky", "born": None, "bookCount": 0},
        ]

    @pytest.mark.asyncio
    async def test_book_counts_come_from_one_grouped_count(self, broadcaster, signer):
        from booklog.graphql.context import GraphQLContext
        from booklog.graphql.schema import schema

        store = CountingStore()
        await _seed(store)
        context = GraphQLContext(store=store, broadcaster=broadcaster, signer=signer)

        result = await schema.execute(AUTHORS_QUERY, context_value=context)

        assert result.errors is None
        assert len(result.data["allAuthors"]) == 3
        assert store.group_counts == 1
        assert store.finds == 1


class TestMe:
    @pytest.mark.asyncio
    async def test_anonymous(self, execute):
        result = await execute("{ me { username } }")

        assert result.errors is None
        assert result.data == {"me": None}

    @pytest.mark.asyncio
    async def test_authenticated(self, create_user, execute):
        user, token = await create_user()

        result = await execute("{ me { id username favoriteGenre } }", token=token)

        assert result.data == {
            "me": {"id": user.id, "username": "alice", "favoriteGenre": "refactoring"}
        }

    @pytest.mark.asyncio
    async def test_token_for_deleted_user_is_anonymous(self, signer, execute):
        token = signer.sign({"username": "ghost", "id": "gone"})

        result = await execute("{ me { username } }", token=token)

        assert result.errors is None
        assert result.data == {"me": None}

    @pytest.mark.asyncio
    async def test_invalid_token_is_unauthenticated(self, execute):
        result = await execute("{ me { username } }", token="not-a-jwt")

        assert result.errors[0].extensions["code"] == "UNAUTHENTICATED"


class TestDanglingAuthor:
    @pytest.mark.asyncio
    async def test_missing_author_is_masked(self, broadcaster, signer):
        from booklog.graphql.context import GraphQLContext
        from booklog.graphql.schema import schema

        class LosingStore(InMemoryEntityStore):
            """Forgets every author on batched lookups."""

            async def find(self, collection, predicate=None):
                if collection is Collection.AUTHORS:
                    return []
                return await super().find(collection, predicate)

        store = LosingStore()
        await _seed(store)
        context = GraphQLContext(store=store, broadcaster=broadcaster, signer=signer)

        result = await schema.execute(
            "{ allBooks { title author { name } } }", context_value=context
        )

        assert result.data is None
        assert result.errors[0].message == "Unexpected error."
        assert result.errors[0].path[0] == "allBooks"
        assert result.errors[0].path[-1] == "author"
