"""
Database models for Booklog (authoritative ORM definitions).

This module defines the SQLAlchemy Base with a naming convention for stable
constraint names, and exposes `target_metadata` for schema creation.
"""

from datetime import UTC, datetime

from sqlalchemy import (
    DateTime,
    ForeignKeyConstraint,
    Index,
    Integer,
    MetaData,
    PrimaryKeyConstraint,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship

# Naming convention for deterministic constraint/index names
naming_convention = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}


def _utcnow() -> datetime:
    return datetime.now(UTC)


class Base(DeclarativeBase):
    """Base class for all database models with type checking support."""

    metadata = MetaData(naming_convention=naming_convention)


class Authors(Base):
    __tablename__ = "authors"
    __table_args__ = (
        PrimaryKeyConstraint("id", name="authors_pkey"),
        UniqueConstraint("name", name="authors_name_key"),
    )

    id: Mapped[str] = mapped_column(String(32))
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    born: Mapped[int | None] = mapped_column(Integer)
    created_at: Mapped[datetime] = mapped_column(DateTime(True), default=_utcnow)

    books: Mapped[list["Books"]] = relationship("Books", uselist=True, back_populates="author")


class Books(Base):
    __tablename__ = "books"
    __table_args__ = (
        ForeignKeyConstraint(
            ["author_id"],
            ["authors.id"],
            name="books_author_id_fkey",
        ),
        PrimaryKeyConstraint("id", name="books_pkey"),
        Index("idx_books_author", "author_id"),
    )

    id: Mapped[str] = mapped_column(String(32))
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    published: Mapped[int] = mapped_column(Integer, nullable=False)
    author_id: Mapped[str] = mapped_column(String(32), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(True), default=_utcnow)

    author: Mapped["Authors"] = relationship("Authors", back_populates="books")
    genre_rows: Mapped[list["BookGenres"]] = relationship(
        "BookGenres",
        uselist=True,
        back_populates="book",
        order_by="BookGenres.position",
        cascade="all, delete-orphan",
    )


class BookGenres(Base):
    __tablename__ = "book_genres"
    __table_args__ = (
        ForeignKeyConstraint(
            ["book_id"],
            ["books.id"],
            ondelete="CASCADE",
            name="book_genres_book_id_fkey",
        ),
        PrimaryKeyConstraint("book_id", "position", name="book_genres_pkey"),
        Index("idx_book_genres_genre", "genre"),
    )

    book_id: Mapped[str] = mapped_column(String(32))
    position: Mapped[int] = mapped_column(Integer)
    genre: Mapped[str] = mapped_column(String(255), nullable=False)

    book: Mapped["Books"] = relationship("Books", back_populates="genre_rows")


class Users(Base):
    __tablename__ = "users"
    __table_args__ = (
        PrimaryKeyConstraint("id", name="users_pkey"),
        UniqueConstraint("username", name="users_username_key"),
    )

    id: Mapped[str] = mapped_column(String(32))
    username: Mapped[str] = mapped_column(String(255), nullable=False)
    favorite_genre: Mapped[str] = mapped_column(String(255), nullable=False)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(True), default=_utcnow)


target_metadata = Base.metadata
