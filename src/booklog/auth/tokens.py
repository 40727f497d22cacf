"""JWT signing and verification for self-issued login tokens."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
from typing import Any

import jwt
from jwt.exceptions import InvalidTokenError

from ..config import Settings
from ..logging import get_logger

logger = get_logger(__name__)


class AuthenticationError(Exception):
    """Raised when a token is malformed, expired or signed with another secret."""

    pass


class TokenSigner:
    """Signs and verifies login tokens with one process-wide secret."""

    def __init__(
        self,
        secret_key: str,
        algorithm: str = "HS256",
        issuer: str = "booklog",
        audience: str = "booklog-api",
        token_expiry_minutes: int = 60,
    ):
        self.secret_key = secret_key
        self.algorithm = algorithm
        self.issuer = issuer
        self.audience = audience
        self.token_expiry_minutes = token_expiry_minutes

    @classmethod
    def from_settings(cls, settings: Settings) -> TokenSigner:
        return cls(
            secret_key=settings.jwt_secret,
            algorithm=settings.jwt_algorithm,
            issuer=settings.jwt_issuer,
            audience=settings.jwt_audience,
            token_expiry_minutes=settings.token_expiry_minutes,
        )

    def sign(self, claims: dict[str, Any]) -> str:
        """Issue a signed token carrying ``claims``."""
        now = datetime.now(UTC)

        payload = {
            "iss": self.issuer,
            "aud": self.audience,
            "iat": now,
            "nbf": now,
            "exp": now + timedelta(minutes=self.token_expiry_minutes),
            **claims,
        }
        if "id" in claims:
            payload.setdefault("sub", str(claims["id"]))

        return jwt.encode(payload, self.secret_key, algorithm=self.algorithm)

    def verify(self, token: str) -> dict[str, Any]:
        """Verify a token's signature and lifetime and return its claims.

        Raises:
            AuthenticationError: If the token is invalid, expired or lacks an ``id`` claim
        """
        try:
            payload = jwt.decode(
                token,
                self.secret_key,
                algorithms=[self.algorithm],
                issuer=self.issuer,
                audience=self.audience,
                options={
                    "verify_exp": True,
                    "verify_nbf": True,
                    "verify_iat": True,
                },
            )
        except InvalidTokenError as e:
            logger.warning("JWT token validation failed", error=str(e))
            raise AuthenticationError("Invalid token") from e

        if not payload.get("id"):
            raise AuthenticationError("Missing 'id' claim in token")

        return payload
