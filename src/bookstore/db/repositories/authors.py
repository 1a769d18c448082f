"""
bookstore.db.repositories.authors

Repository for `Author` entities.

Responsibilities:
- Fetch and upsert author profiles keyed by principal id.
- Aggregate per-author book counts for the admin dashboard.
"""

from __future__ import annotations

from sqlalchemy import desc, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from bookstore.db.models import Author, Book

_UNSET = object()


class AuthorRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get(self, author_id: str) -> Author | None:
        return await self._session.get(Author, author_id)

    async def upsert(
        self,
        *,
        author_id: str,
        full_name: str | object = _UNSET,
        bio: str | None | object = _UNSET,
        profile_image_url: str | None | object = _UNSET,
    ) -> Author:
        # Only the fields passed in are written; created_at survives updates.
        existing = await self._session.get(Author, author_id)
        if existing is not None:
            if full_name is not _UNSET:
                existing.full_name = full_name  # type: ignore[assignment]
            if bio is not _UNSET:
                existing.bio = bio  # type: ignore[assignment]
            if profile_image_url is not _UNSET:
                existing.profile_image_url = profile_image_url  # type: ignore[assignment]
            await self._session.flush()
            return existing

        author = Author(
            id=author_id,
            full_name="" if full_name is _UNSET else full_name,
            bio=None if bio is _UNSET else bio,
            profile_image_url=None if profile_image_url is _UNSET else profile_image_url,
        )
        self._session.add(author)
        await self._session.flush()
        return author

    async def list_with_book_counts(self) -> list[tuple[Author, int]]:
        # Counts every book row (drafts and published alike).
        stmt = (
            select(Author, func.count(Book.id))
            .outerjoin(Book, Book.author_id == Author.id)
            .group_by(Author.id)
            .order_by(desc(Author.created_at))
        )
        rows = (await self._session.execute(stmt)).all()
        return [(author, int(count)) for author, count in rows]


# --- Module Notes -----------------------------------------------------------
# Existence of a row here is the only "is author" signal (see `auth.access`).
