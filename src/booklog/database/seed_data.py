"""
Reusable seed data functions for catalog initialization.

Seeding goes through the entity store interface, so it works against any
configured backend.
"""

from __future__ import annotations

from ..logging import get_logger
from ..store.base import Collection, EntityStore

logger = get_logger(__name__)

SAMPLE_AUTHORS: list[dict] = [
    {"name": "Robert Martin", "born": 1952},
    {"name": "Martin Fowler", "born": 1963},
    {"name": "Fyodor Dostoevsky", "born": 1821},
    {"name": "Joshua Kerievsky", "born": None},
    {"name": "Sandi Metz", "born": None},
]

SAMPLE_BOOKS: list[dict] = [
    {
        "title": "Clean Code",
        "published": 2008,
        "author": "Robert Martin",
        "genres": ["refactoring"],
    },
    {
        "title": "Agile software development",
        "published": 2002,
        "author": "Robert Martin",
        "genres": ["agile", "patterns", "design"],
    },
    {
        "title": "Refactoring, edition 2",
        "published": 2018,
        "author": "Martin Fowler",
        "genres": ["refactoring"],
    },
    {
        "title": "Refactoring to patterns",
        "published": 2008,
        "author": "Joshua Kerievsky",
        "genres": ["refactoring", "patterns"],
    },
    {
        "title": "Practical Object-Oriented Design, An Agile Primer Using Ruby",
        "published": 2012,
        "author": "Sandi Metz",
        "genres": ["refactoring", "design"],
    },
    {
        "title": "Crime and punishment",
        "published": 1866,
        "author": "Fyodor Dostoevsky",
        "genres": ["classic", "crime"],
    },
    {
        "title": "Demons",
        "published": 1872,
        "author": "Fyodor Dostoevsky",
        "genres": ["classic", "revolution"],
    },
]


async def ensure_author(store: EntityStore, name: str, born: int | None = None) -> str:
    """
    Ensure an author exists and return its ID.

    An existing author keeps its stored birth year.
    """
    existing = await store.find_one(Collection.AUTHORS, {"name": name})
    if existing is not None:
        return existing.id
    created = await store.insert(Collection.AUTHORS, {"name": name, "born": born})
    logger.info("Seeded author", author_id=created.id, name=name)
    return created.id


async def seed_catalog(store: EntityStore) -> int:
    """
    Load the sample catalog, skipping books whose title and author already exist.

    Returns:
        Number of books inserted
    """
    author_ids = {}
    for author in SAMPLE_AUTHORS:
        author_ids[author["name"]] = await ensure_author(store, author["name"], author["born"])

    inserted = 0
    for book in SAMPLE_BOOKS:
        author_id = author_ids[book["author"]]
        existing = await store.find_one(
            Collection.BOOKS, {"title": book["title"], "author_id": author_id}
        )
        if existing is not None:
            continue
        await store.insert(
            Collection.BOOKS,
            {
                "title": book["title"],
                "published": book["published"],
                "author_id": author_id,
                "genres": book["genres"],
            },
        )
        inserted += 1

    logger.info("Sample catalog seeded", books_inserted=inserted)
    return inserted
