from collections.abc import Sequence

from strawberry.dataloader import DataLoader

from ..store.base import AuthorRecord, Collection, EntityStore


class Loaders:
    """Per-request batching loaders over the entity store."""

    def __init__(self, store: EntityStore):
        self.store = store
        self.author_loader = DataLoader(load_fn=self.load_authors)
        self.book_count_loader = DataLoader(load_fn=self.load_book_counts)

    async def load_authors(self, keys: Sequence[str]) -> list[AuthorRecord | None]:
        """Batch load authors by ID."""
        authors = await self.store.find(Collection.AUTHORS, {"id": {"in": list(keys)}})
        authors_map = {author.id: author for author in authors}
        return [authors_map.get(key) for key in keys]  # type: ignore[misc]

    async def load_book_counts(self, keys: Sequence[str]) -> list[int]:
        """Batch count books per author ID with a single grouped count."""
        counts = await self.store.count_by_group(
            Collection.BOOKS, "author_id", {"author_id": {"in": list(keys)}}
        )
        return [counts.get(key, 0) for key in keys]
