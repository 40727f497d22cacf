"""Tests for request logging helpers."""

from booklog.middleware import operation_name_from_query, sanitize_query_params


def test_sanitize_query_params_redacts_credentials():
    sanitized = sanitize_query_params({"authorization": "Bearer x", "page": "2", "password": "p"})

    assert sanitized == {"authorization": "[REDACTED]", "page": "2", "password": "[REDACTED]"}


def test_operation_name_from_query():
    assert operation_name_from_query("query AllBooks { allBooks { title } }") == "AllBooks"
    assert operation_name_from_query("mutation AddBook { addBook }") == "mutation:AddBook"
    assert operation_name_from_query("{ bookCount }") == "unnamed_operation"
    assert operation_name_from_query("query IntrospectionQuery { __schema { types } }") == (
        "__introspection"
    )
