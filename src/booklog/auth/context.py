"""Authentication context for request handling."""

from __future__ import annotations

from dataclasses import dataclass

from ..store.base import UserRecord


@dataclass(frozen=True)
class AuthContext:
    """Runtime authentication context for a request."""

    user: UserRecord | None = None
    token: str | None = None

    @property
    def is_authenticated(self) -> bool:
        """Check if the request is authenticated."""
        return self.user is not None

    @property
    def user_id(self) -> str | None:
        return self.user.id if self.user else None


ANONYMOUS = AuthContext()
