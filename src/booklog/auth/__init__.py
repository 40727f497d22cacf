"""Authentication for Booklog."""

from .context import ANONYMOUS, AuthContext
from .passwords import hash_password, verify_password
from .resolver import extract_bearer_token, resolve_auth_context
from .tokens import AuthenticationError, TokenSigner

__all__ = [
    "ANONYMOUS",
    "AuthContext",
    "AuthenticationError",
    "TokenSigner",
    "extract_bearer_token",
    "hash_password",
    "resolve_auth_context",
    "verify_password",
]
