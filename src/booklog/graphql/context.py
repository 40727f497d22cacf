"""
Per-request GraphQL context
"""

from __future__ import annotations

from typing import Any

from strawberry.fastapi import BaseContext

from ..auth.context import AuthContext
from ..auth.resolver import resolve_auth_context
from ..auth.tokens import TokenSigner
from ..events.broadcaster import EventBroadcaster
from ..logging import bind_user_id, get_logger
from ..store.base import EntityStore
from .errors import UnauthenticatedError, map_error
from .loaders import Loaders

logger = get_logger(__name__)


class GraphQLContext(BaseContext):
    """Collaborators and the caller identity for one request (or one subscription)."""

    connection_params: Any = None

    def __init__(
        self,
        *,
        store: EntityStore,
        broadcaster: EventBroadcaster,
        signer: TokenSigner,
        authorization: str | None = None,
    ):
        super().__init__()
        self.store = store
        self.broadcaster = broadcaster
        self.signer = signer
        self.loaders = Loaders(store)
        self._authorization = authorization
        self._auth: AuthContext | None = None

    def reset_loaders(self) -> None:
        """Drop cached loads, e.g. between events on a long-lived subscription."""
        self.loaders = Loaders(self.store)

    def authorization_header(self) -> str | None:
        """Raw credential: explicit value, request header, or WebSocket init payload."""
        if self._authorization is not None:
            return self._authorization

        if self.request is not None:
            header = self.request.headers.get("authorization")
            if header:
                return header

        params = self.connection_params
        if isinstance(params, dict):
            return params.get("authorization") or params.get("Authorization")

        return None

    async def get_auth(self) -> AuthContext:
        """Resolve the caller once and cache it for the rest of the request.

        Raises:
            UnauthenticatedError: If a credential was sent but failed verification
        """
        if self._auth is None:
            try:
                self._auth = await resolve_auth_context(
                    self.authorization_header(),
                    store=self.store,
                    signer=self.signer,
                )
            except Exception as e:
                raise map_error(e) from e
            bind_user_id(self._auth.user_id)
        return self._auth

    async def require_auth(self) -> AuthContext:
        """Resolve the caller and fail unless it is an authenticated user."""
        auth = await self.get_auth()
        if not auth.is_authenticated:
            logger.info("Rejected anonymous caller on authenticated operation")
            raise UnauthenticatedError()
        return auth
