"""Tests for loading the sample catalog."""

import pytest

from booklog.database.seed_data import SAMPLE_AUTHORS, SAMPLE_BOOKS, seed_catalog
from booklog.store.base import Collection


@pytest.mark.asyncio
async def test_seed_catalog_loads_everything(store):
    inserted = await seed_catalog(store)

    assert inserted == len(SAMPLE_BOOKS)
    assert await store.count(Collection.AUTHORS) == len(SAMPLE_AUTHORS)
    assert await store.count(Collection.BOOKS) == len(SAMPLE_BOOKS)


@pytest.mark.asyncio
async def test_seed_catalog_is_idempotent(store):
    await seed_catalog(store)

    assert await seed_catalog(store) == 0
    assert await store.count(Collection.BOOKS) == len(SAMPLE_BOOKS)


@pytest.mark.asyncio
async def test_existing_author_keeps_birth_year(store):
    await store.insert(Collection.AUTHORS, {"name": "Sandi Metz", "born": 1954})

    await seed_catalog(store)

    sandi = await store.find_one(Collection.AUTHORS, {"name": "Sandi Metz"})
    assert sandi.born == 1954
