"""
bookstore.services.admin

Admin reporting service.

Responsibilities:
- Aggregate author listings with book counts.
- List every book regardless of publish state.
"""

from __future__ import annotations

from typing import Any

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from bookstore.db.models import Book
from bookstore.db.repositories.authors import AuthorRepo
from bookstore.db.repositories.books import BookRepo
from bookstore.errors import StoreFailure


class AdminReportingService:
    """
    Read-only views for admins; callers must already hold an admin authorization.
    """

    def __init__(self, *, session: AsyncSession) -> None:
        self._authors = AuthorRepo(session)
        self._books = BookRepo(session)

    async def list_authors_with_book_counts(self) -> list[dict[str, Any]]:
        try:
            rows = await self._authors.list_with_book_counts()
        except SQLAlchemyError as e:
            raise StoreFailure(str(e)) from e
        return [{**author.to_dict(), "books_count": count} for author, count in rows]

    async def list_all_books(self) -> list[Book]:
        try:
            return await self._books.list_all()
        except SQLAlchemyError as e:
            raise StoreFailure(str(e)) from e
