"""Password hashing and verification."""

from __future__ import annotations

import hashlib
import hmac
import secrets

ITERATIONS = 100_000


def hash_password(password: str, salt: str | None = None) -> str:
    """Hash a password with a per-user salt using PBKDF2-SHA256."""
    if salt is None:
        salt = secrets.token_hex(16)

    key = hashlib.pbkdf2_hmac(
        "sha256",
        password.encode("utf-8"),
        salt.encode("utf-8"),
        ITERATIONS,
    )

    return f"{salt}${key.hex()}"


def verify_password(password: str, password_hash: str) -> bool:
    """Verify a password against its hash (constant-time comparison)."""
    try:
        salt, _ = password_hash.split("$")
    except ValueError:
        return False
    return hmac.compare_digest(hash_password(password, salt), password_hash)


# Compared against when a login names an unknown user, so both failure paths do the same work
DUMMY_HASH = hash_password(secrets.token_hex(16))
