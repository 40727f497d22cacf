"""Tests for mapping failures into the client-facing error taxonomy."""

from graphql import GraphQLError

from booklog.auth.tokens import AuthenticationError
from booklog.graphql.errors import (
    MASKED_MESSAGE,
    BooklogError,
    ErrorMaskingExtension,
    InvalidCredentialsError,
    UnauthenticatedError,
    ValidationFailedError,
    map_error,
    should_mask_error,
)
from booklog.store.base import StoreValidationError, UniquenessError


class TestMapError:
    def test_taxonomy_errors_pass_through(self):
        error = InvalidCredentialsError()

        assert map_error(error) is error

    def test_authentication_failure(self):
        mapped = map_error(AuthenticationError("Invalid token"))

        assert isinstance(mapped, UnauthenticatedError)
        assert mapped.message == "Invalid token"
        assert mapped.extensions == {"code": "UNAUTHENTICATED"}

    def test_store_failure_blames_given_argument(self):
        mapped = map_error(
            UniquenessError("duplicate", field="name", value="Robert Martin"),
            message="Saving author failed",
            invalid_field="author",
            invalid_value="Robert Martin",
        )

        assert isinstance(mapped, ValidationFailedError)
        assert mapped.message == "Saving author failed"
        assert mapped.extensions == {
            "code": "BAD_USER_INPUT",
            "invalidField": "author",
            "invalidArgs": "Robert Martin",
        }

    def test_store_failure_defaults_to_store_field(self):
        mapped = map_error(StoreValidationError("too short", field="title", value="Abc"))

        assert mapped.to_payload() == {
            "kind": "BAD_USER_INPUT",
            "message": "Saving failed",
            "invalidField": "title",
        }
        assert mapped.extensions["invalidArgs"] == "Abc"

    def test_unexpected_failure_is_internal(self):
        mapped = map_error(KeyError("secret detail"))

        assert type(mapped) is BooklogError
        assert mapped.message == MASKED_MESSAGE
        assert mapped.extensions == {"code": "INTERNAL_SERVER_ERROR"}


class TestShouldMaskError:
    def test_validation_errors_kept(self):
        assert not should_mask_error(GraphQLError("Cannot query field 'x'"))

    def test_taxonomy_errors_kept(self):
        original = UnauthenticatedError()
        error = GraphQLError(original.message, original_error=original)

        assert not should_mask_error(error)

    def test_other_errors_masked(self):
        original = RuntimeError("boom")
        error = GraphQLError("boom", original_error=original)

        assert should_mask_error(error)


class TestErrorMaskingExtension:
    def test_schema_registers_extension_class(self):
        from booklog.graphql.schema import schema

        assert ErrorMaskingExtension in schema.extensions
        assert not any(isinstance(ext, ErrorMaskingExtension) for ext in schema.extensions)

    def test_each_instance_is_independent(self):
        first = ErrorMaskingExtension(execution_context=None)
        second = ErrorMaskingExtension()

        assert first is not second
        assert first.error_message == second.error_message == MASKED_MESSAGE
        assert first.should_mask_error is should_mask_error
