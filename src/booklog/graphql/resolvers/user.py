from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

import strawberry

from ...auth.passwords import hash_password
from ...config import settings
from ...logging import get_logger
from ...store.base import Collection, StoreError, UserRecord
from ..errors import map_error

if TYPE_CHECKING:
    from ..types.user import User

logger = get_logger(__name__)


def user_from_record(record: UserRecord) -> User:
    """Convert a stored user into its GraphQL type."""
    from ..types.user import User as UserType

    return UserType(
        id=strawberry.ID(record.id),
        username=record.username,
        favorite_genre=record.favorite_genre,
    )


async def resolve_current_user(info: strawberry.Info) -> User | None:
    """Return the authenticated caller, or None for anonymous requests."""
    auth = await info.context.get_auth()
    if auth.user is None:
        return None
    return user_from_record(auth.user)


async def create_user(
    info: strawberry.Info,
    username: str,
    favorite_genre: str,
    password: str | None = None,
) -> User:
    """
    Register a user. Registration is open to anonymous callers.

    Without a password the configured initial password is hashed with the
    user's own salt.
    """
    password_hash = await asyncio.to_thread(hash_password, password or settings.initial_password)

    try:
        record = await info.context.store.insert(
            Collection.USERS,
            {
                "username": username,
                "favorite_genre": favorite_genre,
                "password_hash": password_hash,
            },
        )
    except StoreError as e:
        raise map_error(
            e, message="Creating the user failed", invalid_field="username", invalid_value=username
        ) from e

    logger.info("User created", new_user_id=record.id, username=username)
    return user_from_record(record)  # type: ignore[arg-type]
