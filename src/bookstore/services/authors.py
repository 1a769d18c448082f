"""
bookstore.services.authors

Author profile service.

Responsibilities:
- Read and upsert the caller's own author profile (keyed on principal id).
- Replace the profile image (upload, then upsert the URL).
"""

from __future__ import annotations

from typing import Any

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from bookstore.auth.models import Principal
from bookstore.db.models import Author
from bookstore.db.repositories.authors import AuthorRepo
from bookstore.errors import StoreFailure, ValidationFailed
from bookstore.observability.logging import get_logger
from bookstore.settings import Settings
from bookstore.storage.object_store import ObjectStore, UploadedFile, store_file

log = get_logger(__name__)


class AuthorProfileService:
    def __init__(self, *, session: AsyncSession, store: ObjectStore, settings: Settings) -> None:
        self._session = session
        self._store = store
        self._settings = settings
        self._authors = AuthorRepo(session)

    async def get_profile(self, principal: Principal) -> Author | None:
        return await self._authors.get(principal.id)

    async def upsert_profile(self, principal: Principal, *, full_name: Any, bio: Any = None) -> Author:
        if not isinstance(full_name, str) or not full_name.strip():
            raise ValidationFailed("full_name is required")
        if bio is not None and not isinstance(bio, str):
            raise ValidationFailed("bio must be a string")
        clean_bio = (bio.strip() or None) if bio is not None else None

        try:
            author = await self._authors.upsert(
                author_id=principal.id, full_name=full_name.strip(), bio=clean_bio
            )
            await self._session.commit()
        except SQLAlchemyError as e:
            await self._session.rollback()
            raise StoreFailure(str(e)) from e

        log.info("authors.profile_saved", author_id=principal.id)
        return author

    async def replace_profile_image(self, author: Author, image: UploadedFile) -> Author:
        if not image.data or not image.content_type.startswith("image/"):
            raise ValidationFailed("profile image must be an image")
        if len(image.data) > self._settings.max_image_bytes:
            raise ValidationFailed("image file is too large")

        obj = await store_file(
            self._store,
            bucket=self._settings.author_image_bucket,
            owner_id=author.id,
            file=image,
        )
        try:
            author = await self._authors.upsert(author_id=author.id, profile_image_url=obj.url)
            await self._session.commit()
        except SQLAlchemyError as e:
            await self._session.rollback()
            log.warning("authors.orphaned_upload", bucket=obj.bucket, path=obj.path, error=str(e))
            raise StoreFailure(str(e)) from e

        log.info("authors.image_replaced", author_id=author.id)
        return author
