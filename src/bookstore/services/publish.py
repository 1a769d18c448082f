"""
bookstore.services.publish

Publish workflow service.

Responsibilities:
- Own the Draft <-> Published transitions of a book (admin-only callers).
- Keep `is_published` and `published_at` in lockstep.
- Derive read-side visibility for public, owner and admin viewers.

States: Draft (is_published=False, published_at=None) and Published
(is_published=True, published_at set). Both transitions are always allowed;
republishing refreshes `published_at`.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime
from typing import Any

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from bookstore.auth.models import Principal
from bookstore.db.models import Book, utcnow
from bookstore.db.repositories.books import BookRepo
from bookstore.db.session import commit_or_raise
from bookstore.errors import NotFound, StoreFailure, ValidationFailed
from bookstore.observability.logging import get_logger

log = get_logger(__name__)

# Only these two columns are under the workflow's control.
PUBLISH_FIELDS = frozenset({"is_published", "published_at"})


class PublishWorkflowService:
    """
    Callers must have passed `AccessControlService.authorize_admin` first;
    the API does this through the `require_admin` dependency.
    """

    def __init__(
        self,
        *,
        session: AsyncSession,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self._session = session
        self._books = BookRepo(session)
        self._clock = clock

    async def publish(self, book_id: str, *, actor: str) -> datetime:
        published_at = self._clock()
        await self._apply(book_id, is_published=True, published_at=published_at, actor=actor)
        return published_at

    async def unpublish(self, book_id: str, *, actor: str) -> None:
        await self._apply(book_id, is_published=False, published_at=None, actor=actor)

    async def set_publish_state(self, book_id: Any, publish: Any, *, actor: str) -> None:
        # Validation happens before the store is touched.
        if not isinstance(book_id, str) or not book_id.strip():
            raise ValidationFailed("bookId and publish are required")
        if not isinstance(publish, bool):
            raise ValidationFailed("bookId and publish are required")

        if publish:
            await self.publish(book_id.strip(), actor=actor)
        else:
            await self.unpublish(book_id.strip(), actor=actor)

    async def _apply(
        self,
        book_id: str,
        *,
        is_published: bool,
        published_at: datetime | None,
        actor: str,
    ) -> None:
        try:
            affected = await self._books.set_publish_state(
                book_id=book_id, is_published=is_published, published_at=published_at
            )
        except SQLAlchemyError as e:
            await self._session.rollback()
            log.error("publish.store_failure", book_id=book_id, error=str(e))
            raise StoreFailure(str(e)) from e

        if affected == 0:
            await self._session.rollback()
            raise NotFound("Book not found")

        await commit_or_raise(self._session)
        log.info(
            "publish.state_changed",
            book_id=book_id,
            actor=actor,
            is_published=is_published,
        )


def can_view(book: Book, *, viewer: Principal | None, viewer_is_admin: bool = False) -> bool:
    if book.is_published:
        return True
    if viewer_is_admin:
        return True
    return viewer is not None and viewer.id == book.author_id


# --- Module Notes -----------------------------------------------------------
# Concurrent toggles on one book are both admitted; the store's last write wins.
