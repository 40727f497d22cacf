from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

import strawberry

from ...auth.passwords import DUMMY_HASH, verify_password
from ...logging import get_logger
from ...store.base import Collection
from ..errors import InvalidCredentialsError

if TYPE_CHECKING:
    from ..types.user import Token

logger = get_logger(__name__)


async def login(info: strawberry.Info, username: str, password: str) -> Token:
    """
    Exchange a username and password for a signed token.

    Unknown users and wrong passwords fail with the same error, after the
    same amount of hashing work.
    """
    from ..types.user import Token as TokenType

    context = info.context
    user = await context.store.find_one(Collection.USERS, {"username": username})

    password_hash = user.password_hash if user is not None else DUMMY_HASH
    password_ok = await asyncio.to_thread(verify_password, password, password_hash)
    if user is None or not password_ok:
        logger.warning("Login failed", username=username)
        raise InvalidCredentialsError()

    token = context.signer.sign({"username": user.username, "id": user.id})
    logger.info("Login succeeded", login_user_id=user.id)
    return TokenType(value=token)
