"""Pydantic models for events carried by the broadcaster."""

from __future__ import annotations

from datetime import UTC, datetime

from pydantic import BaseModel, Field

from ..store.base import AuthorRecord, BookRecord

BOOK_ADDED = "BOOK_ADDED"


class BookAddedEvent(BaseModel):
    book: BookRecord
    author: AuthorRecord
    timestamp: datetime = Field(default_factory=lambda: datetime.now(UTC))
