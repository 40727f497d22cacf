"""
User GraphQL type definitions
"""

import strawberry


@strawberry.type
class User:
    """Registered user. Credential material is never exposed."""

    id: strawberry.ID
    username: str
    favorite_genre: str


@strawberry.type
class Token:
    """Signed login token."""

    value: str
