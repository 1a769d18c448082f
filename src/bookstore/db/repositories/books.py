"""
bookstore.db.repositories.books

Repository for `Book` entities.

Responsibilities:
- Create, fetch, list, update and delete book rows.
- Apply publish-state changes as a single UPDATE statement.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from sqlalchemy import delete, desc, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from bookstore.db.models import Book


class BookRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create(
        self,
        *,
        author_id: str,
        title: str,
        description: str,
        price_lkr: int,
        tags: list[str],
        allow_download: bool,
        cover_image_url: str | None,
        pdf_path: str,
        pdf_url: str,
    ) -> Book:
        # New books always start as drafts.
        book = Book(
            author_id=author_id,
            title=title,
            description=description,
            price_lkr=price_lkr,
            tags=tags,
            allow_download=allow_download,
            cover_image_url=cover_image_url,
            pdf_path=pdf_path,
            pdf_url=pdf_url,
            is_published=False,
            published_at=None,
        )
        self._session.add(book)
        await self._session.flush()
        return book

    async def get(self, book_id: str) -> Book | None:
        return await self._session.get(Book, book_id)

    async def list_all(self) -> list[Book]:
        stmt = select(Book).order_by(desc(Book.created_at))
        return list((await self._session.execute(stmt)).scalars().all())

    async def list_published(self) -> list[Book]:
        stmt = select(Book).where(Book.is_published.is_(True)).order_by(desc(Book.created_at))
        return list((await self._session.execute(stmt)).scalars().all())

    async def list_for_author(self, author_id: str) -> list[Book]:
        stmt = select(Book).where(Book.author_id == author_id).order_by(desc(Book.created_at))
        return list((await self._session.execute(stmt)).scalars().all())

    async def update_fields(self, book: Book, fields: dict[str, Any]) -> Book:
        for name, value in fields.items():
            setattr(book, name, value)
        await self._session.flush()
        return book

    async def set_publish_state(
        self, *, book_id: str, is_published: bool, published_at: datetime | None
    ) -> int:
        # No row lock or version check: concurrent toggles resolve last-write-wins.
        stmt = (
            update(Book)
            .where(Book.id == book_id)
            .values(is_published=is_published, published_at=published_at)
            .execution_options(synchronize_session=False)
        )
        result = await self._session.execute(stmt)
        return int(result.rowcount or 0)

    async def delete(self, book_id: str) -> int:
        result = await self._session.execute(delete(Book).where(Book.id == book_id))
        return int(result.rowcount or 0)
