"""Derive the per-request authentication context from a bearer credential."""

from __future__ import annotations

from ..logging import get_logger
from ..store.base import Collection, EntityStore
from .context import ANONYMOUS, AuthContext
from .tokens import AuthenticationError, TokenSigner

logger = get_logger(__name__)


def extract_bearer_token(authorization: str | None) -> str | None:
    """
    Extract the token from an ``Authorization: Bearer <token>`` value.

    Returns None when no credential was sent at all.

    Raises:
        AuthenticationError: If a credential was sent in any other shape
    """
    if authorization is None or not authorization.strip():
        return None

    scheme, _, token = authorization.strip().partition(" ")
    if scheme.lower() != "bearer":
        logger.warning("Invalid authorization format received")
        raise AuthenticationError("Invalid authorization format. Expected: Bearer <token>")

    token = token.strip()
    if not token:
        logger.warning("Empty token provided")
        raise AuthenticationError("Empty token")

    return token


async def resolve_auth_context(
    authorization: str | None,
    *,
    store: EntityStore,
    signer: TokenSigner,
) -> AuthContext:
    """
    Resolve the caller for one request.

    1. No credential: anonymous
    2. Credential that fails verification: AuthenticationError
    3. Verified credential whose user no longer exists: anonymous
    4. Otherwise: the stored user

    Args:
        authorization: Raw Authorization header value, if any
        store: Entity store used to look the user up
        signer: Verifies the token signature and expiry

    Returns:
        AuthContext for the request
    """
    token = extract_bearer_token(authorization)
    if token is None:
        return ANONYMOUS

    claims = signer.verify(token)

    user = await store.find_one(Collection.USERS, {"id": str(claims["id"])})
    if user is None:
        logger.info("Token refers to a user that no longer exists", subject=claims.get("sub"))
        return ANONYMOUS

    return AuthContext(user=user, token=token)  # type: ignore[arg-type]
