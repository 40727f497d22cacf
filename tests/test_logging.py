"""Tests for the per-request logging context."""

from booklog.logging import add_request_context, bind_user_id, end_request, start_request


class TestRequestContext:
    def teardown_method(self):
        end_request()

    def test_events_carry_request_and_user(self):
        request_id = start_request()
        bind_user_id("user-1")

        event = add_request_context(None, "info", {"event": "Book added"})

        assert event == {"event": "Book added", "request_id": request_id, "user_id": "user-1"}

    def test_explicit_request_id_is_kept(self):
        assert start_request("abc123") == "abc123"
        assert add_request_context(None, "info", {})["request_id"] == "abc123"

    def test_new_request_forgets_previous_user(self):
        start_request()
        bind_user_id("user-1")
        start_request()

        assert "user_id" not in add_request_context(None, "info", {})

    def test_outside_a_request_nothing_is_added(self):
        end_request()

        assert add_request_context(None, "info", {"event": "startup"}) == {"event": "startup"}
