"""
Error taxonomy exposed to GraphQL clients and the mapping into it
"""

from __future__ import annotations

from typing import Any

from graphql import GraphQLError
from strawberry.extensions import MaskErrors

from ..auth.tokens import AuthenticationError
from ..logging import get_logger
from ..store.base import StoreError

logger = get_logger(__name__)

MASKED_MESSAGE = "Unexpected error."


class BooklogError(GraphQLError):
    """Base class for every error a client may see.

    The client-facing payload is ``message`` plus ``extensions``:
    ``{"code": kind, "invalidField"?: ..., "invalidArgs"?: ...}``.
    """

    kind = "INTERNAL_SERVER_ERROR"

    def __init__(
        self,
        message: str,
        *,
        invalid_field: str | None = None,
        invalid_value: Any = None,
    ):
        extensions: dict[str, Any] = {"code": self.kind}
        if invalid_field is not None:
            extensions["invalidField"] = invalid_field
            extensions["invalidArgs"] = invalid_value
        super().__init__(message, extensions=extensions)
        self.invalid_field = invalid_field
        self.invalid_value = invalid_value

    def to_payload(self) -> dict[str, Any]:
        """Return the ``{kind, message, invalidField?}`` shape of this error."""
        payload: dict[str, Any] = {"kind": self.kind, "message": self.message}
        if self.invalid_field is not None:
            payload["invalidField"] = self.invalid_field
        return payload


class UnauthenticatedError(BooklogError):
    kind = "UNAUTHENTICATED"

    def __init__(self, message: str = "not authenticated"):
        super().__init__(message)


class InvalidCredentialsError(BooklogError):
    kind = "INVALID_CREDENTIALS"

    def __init__(self, message: str = "wrong credentials"):
        super().__init__(message)


class ValidationFailedError(BooklogError):
    kind = "BAD_USER_INPUT"


def map_error(
    error: Exception,
    *,
    message: str | None = None,
    invalid_field: str | None = None,
    invalid_value: Any = None,
) -> BooklogError:
    """
    Normalize a failure into the client-facing taxonomy.

    Args:
        error: The exception raised by a collaborator
        message: Client-facing message for store failures
        invalid_field: Argument to blame for store failures
        invalid_value: Offending input value for store failures

    Returns:
        A BooklogError safe to expose to the caller
    """
    if isinstance(error, BooklogError):
        return error

    if isinstance(error, AuthenticationError):
        return UnauthenticatedError(str(error))

    if isinstance(error, StoreError):
        logger.warning(
            "Store rejected entity",
            error=str(error),
            store_field=error.field,
            invalid_field=invalid_field,
        )
        return ValidationFailedError(
            message or "Saving failed",
            invalid_field=invalid_field or error.field,
            invalid_value=invalid_value if invalid_field else error.value,
        )

    logger.error("Unexpected error", error=str(error), error_type=type(error).__name__)
    return BooklogError(MASKED_MESSAGE)


def should_mask_error(error: GraphQLError) -> bool:
    """Mask everything that is not part of the client-facing taxonomy.

    Query syntax and validation errors carry no original error and are left as-is.
    """
    original = error.original_error
    if original is None or isinstance(original, BooklogError):
        return False
    logger.error(
        "Masking unexpected resolver error",
        error=str(original),
        error_type=type(original).__name__,
        path=error.path,
    )
    return True


class ErrorMaskingExtension(MaskErrors):
    """Masks every error outside the client-facing taxonomy.

    Registered as a class so each operation gets its own instance.
    """

    def __init__(self, *, execution_context: Any = None):
        super().__init__(should_mask_error=should_mask_error, error_message=MASKED_MESSAGE)
        if execution_context is not None:
            self.execution_context = execution_context
