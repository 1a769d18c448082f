"""
bookstore.db.models

Persistence schema for the bookstore.

Responsibilities:
- Define ORM models for the three logical tables:
  - Author: profile row keyed by the identity provider's principal id
  - Book: uploaded book metadata, file locations and publish state
  - AdminGrant: marks a principal id as an administrator
"""

from __future__ import annotations

import uuid
from datetime import UTC, datetime
from typing import Any

from sqlalchemy import JSON, Boolean, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from bookstore.db.base import Base


def utcnow() -> datetime:
    # Naive UTC timestamps keep SQLite and Postgres comparisons consistent.
    return datetime.now(tz=UTC).replace(tzinfo=None)


def _new_book_id() -> str:
    return str(uuid.uuid4())


class Author(Base):
    __tablename__ = "authors"

    # Same value as the principal id: one profile per identity.
    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    full_name: Mapped[str] = mapped_column(String(256), nullable=False)
    bio: Mapped[str | None] = mapped_column(Text, nullable=True)
    profile_image_url: Mapped[str | None] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(nullable=False, default=utcnow, index=True)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "full_name": self.full_name,
            "bio": self.bio,
            "profile_image_url": self.profile_image_url,
            "created_at": self.created_at.isoformat(),
        }


class Book(Base):
    __tablename__ = "books"

    id: Mapped[str] = mapped_column(String(64), primary_key=True, default=_new_book_id)
    author_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("authors.id"), nullable=False, index=True
    )

    title: Mapped[str] = mapped_column(String(512), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    price_lkr: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    tags: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    allow_download: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    cover_image_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    pdf_path: Mapped[str] = mapped_column(Text, nullable=False)
    pdf_url: Mapped[str] = mapped_column(Text, nullable=False)

    # is_published and published_at only move together (see services.publish).
    is_published: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False, index=True)
    published_at: Mapped[datetime | None] = mapped_column(nullable=True)

    created_at: Mapped[datetime] = mapped_column(nullable=False, default=utcnow)

    __table_args__ = (Index("ix_books_author_created", "author_id", "created_at"),)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "author_id": self.author_id,
            "title": self.title,
            "description": self.description,
            "price_lkr": self.price_lkr,
            "tags": list(self.tags or []),
            "allow_download": self.allow_download,
            "cover_image_url": self.cover_image_url,
            "pdf_path": self.pdf_path,
            "pdf_url": self.pdf_url,
            "is_published": self.is_published,
            "published_at": self.published_at.isoformat() if self.published_at else None,
            "created_at": self.created_at.isoformat(),
        }


class AdminGrant(Base):
    __tablename__ = "admins"

    user_id: Mapped[str] = mapped_column(String(64), primary_key=True)


# --- Module Notes -----------------------------------------------------------
# Admin grants are provisioned out of band (`python -m bookstore.admin_grants`);
# no HTTP route writes to the `admins` table.
