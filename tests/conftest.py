"""
Shared pytest fixtures and configuration for all tests.
"""

import os
from collections.abc import Generator
from typing import Any

import pytest

from booklog.auth.passwords import hash_password
from booklog.auth.tokens import TokenSigner
from booklog.events.broadcaster import EventBroadcaster
from booklog.graphql.context import GraphQLContext
from booklog.graphql.schema import schema
from booklog.store.base import Collection, UserRecord
from booklog.store.memory import InMemoryEntityStore

TEST_SECRET = "test-secret-key-for-testing-only"
TEST_PASSWORD = "correct horse battery staple"


@pytest.fixture
def store() -> InMemoryEntityStore:
    return InMemoryEntityStore()


@pytest.fixture
def broadcaster() -> EventBroadcaster:
    return EventBroadcaster()


@pytest.fixture
def signer() -> TokenSigner:
    return TokenSigner(
        secret_key=TEST_SECRET,
        issuer="test-booklog",
        audience="test-api",
        token_expiry_minutes=5,
    )


@pytest.fixture
def make_context(store, broadcaster, signer):
    """Build a GraphQL context, optionally authenticated with a bearer token."""

    def _make(token: str | None = None, authorization: str | None = None) -> GraphQLContext:
        if token is not None:
            authorization = f"Bearer {token}"
        return GraphQLContext(
            store=store,
            broadcaster=broadcaster,
            signer=signer,
            authorization=authorization,
        )

    return _make


@pytest.fixture
def execute(make_context):
    """Execute a GraphQL document against the schema in-process."""

    async def _execute(
        query: str,
        variables: dict[str, Any] | None = None,
        token: str | None = None,
        authorization: str | None = None,
    ):
        context = make_context(token=token, authorization=authorization)
        return await schema.execute(query, variable_values=variables, context_value=context)

    return _execute


@pytest.fixture
def create_user(store, signer):
    """Insert a user directly into the store and return it with a login token."""

    async def _create(
        username: str = "alice", favorite_genre: str = "refactoring"
    ) -> tuple[UserRecord, str]:
        user = await store.insert(
            Collection.USERS,
            {
                "username": username,
                "favorite_genre": favorite_genre,
                "password_hash": hash_password(TEST_PASSWORD),
            },
        )
        token = signer.sign({"username": user.username, "id": user.id})
        return user, token

    return _create


@pytest.fixture(autouse=True)
def reset_environment() -> Generator[None, None, None]:
    """Reset environment variables for each test."""
    original_env = os.environ.copy()
    yield
    os.environ.clear()
    os.environ.update(original_env)


@pytest.fixture
def user_password() -> str:
    """Plain-text password of users made with ``create_user``."""
    return TEST_PASSWORD
