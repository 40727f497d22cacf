"""Tests for the bookAdded subscription."""

import asyncio

import pytest

BOOK_ADDED = """
subscription {
  bookAdded {
    title
    genres
    author { name }
  }
}
"""

ADD_BOOK = """
mutation AddBook($title: String!) {
  addBook(title: $title, author: "Robert Martin", published: 2008, genres: ["agile"]) {
    title
  }
}
"""


async def _wait_for_subscribers(broadcaster, count=1):
    while broadcaster.subscriber_count() < count:
        await asyncio.sleep(0)


@pytest.mark.asyncio
async def test_subscriber_receives_added_books_in_order(
    broadcaster, make_context, create_user, execute
):
    from booklog.graphql.schema import schema

    _, token = await create_user()
    stream = await schema.subscribe(BOOK_ADDED, context_value=make_context())

    first = asyncio.create_task(stream.__anext__())
    await asyncio.wait_for(_wait_for_subscribers(broadcaster), timeout=1)

    await execute(ADD_BOOK, {"title": "Clean Code"}, token=token)
    await execute(ADD_BOOK, {"title": "Clean Architecture"}, token=token)

    first_result = await asyncio.wait_for(first, timeout=1)
    second_result = await asyncio.wait_for(stream.__anext__(), timeout=1)
    await stream.aclose()

    assert first_result.errors is None
    assert first_result.data == {
        "bookAdded": {
            "title": "Clean Code",
            "genres": ["agile"],
            "author": {"name": "Robert Martin"},
        }
    }
    assert second_result.data["bookAdded"]["title"] == "Clean Architecture"


@pytest.mark.asyncio
async def test_failed_add_is_not_announced(broadcaster, make_context, create_user, execute):
    from booklog.graphql.schema import schema

    _, token = await create_user()
    stream = await schema.subscribe(BOOK_ADDED, context_value=make_context())

    pending = asyncio.create_task(stream.__anext__())
    await asyncio.wait_for(_wait_for_subscribers(broadcaster), timeout=1)

    await execute(ADD_BOOK, {"title": "Bad"}, token=token)
    await asyncio.sleep(0.05)
    assert not pending.done()

    await execute(ADD_BOOK, {"title": "Clean Code"}, token=token)
    result = await asyncio.wait_for(pending, timeout=1)
    await stream.aclose()

    assert result.data["bookAdded"]["title"] == "Clean Code"


@pytest.mark.asyncio
async def test_subscription_is_open_to_anonymous_callers(broadcaster, make_context):
    from booklog.graphql.schema import schema

    stream = await schema.subscribe(BOOK_ADDED, context_value=make_context())
    pending = asyncio.create_task(stream.__anext__())

    await asyncio.wait_for(_wait_for_subscribers(broadcaster), timeout=1)

    assert broadcaster.subscriber_count() == 1
    pending.cancel()
    with pytest.raises(asyncio.CancelledError):
        await pending
    await stream.aclose()


@pytest.mark.asyncio
async def test_invalid_credential_is_rejected(broadcaster, make_context):
    from booklog.graphql.errors import UnauthenticatedError
    from booklog.graphql.schema import schema

    stream = await schema.subscribe(
        BOOK_ADDED, context_value=make_context(authorization="Bearer garbage")
    )

    try:
        result = await asyncio.wait_for(stream.__anext__(), timeout=1)
        errors = result.errors
    except UnauthenticatedError as e:
        errors = [e]
    await stream.aclose()

    assert errors
    assert errors[0].extensions["code"] == "UNAUTHENTICATED"
    assert broadcaster.subscriber_count() == 0
