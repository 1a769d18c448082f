"""
bookstore.services.catalog

Book catalog service (author-side CRUD and public reads).

Responsibilities:
- Create books as drafts after uploading their files (two-phase, no rollback of uploads).
- Let the owning author edit content, replace files and delete.
- Serve the public catalog and book details under the visibility policy.
"""

from __future__ import annotations

from typing import Any

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from bookstore.auth.models import Principal
from bookstore.db.models import Author, Book
from bookstore.db.repositories.books import BookRepo
from bookstore.db.session import commit_or_raise
from bookstore.errors import Forbidden, NotFound, StoreFailure, ValidationFailed
from bookstore.observability.logging import get_logger
from bookstore.services.publish import PUBLISH_FIELDS, can_view
from bookstore.settings import Settings
from bookstore.storage.object_store import ObjectStore, StoredObject, UploadedFile, store_file

log = get_logger(__name__)

EDITABLE_FIELDS = frozenset({"title", "description", "price_lkr", "tags", "allow_download"})


def parse_tags(value: Any) -> list[str]:
    if value is None:
        return []
    if isinstance(value, str):
        items: list[Any] = value.split(",")
    elif isinstance(value, list | tuple):
        items = list(value)
    else:
        raise ValidationFailed("tags must be a list or a comma-separated string")
    return [str(t).strip() for t in items if str(t).strip()]


def _clean_title(value: Any) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValidationFailed("title is required")
    return value.strip()


def _clean_description(value: Any) -> str:
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ValidationFailed("description must be a string")
    return value.strip()


def _clean_price(value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise ValidationFailed("price_lkr must be a non-negative integer")
    return value


def _clean_allow_download(value: Any) -> bool:
    if not isinstance(value, bool):
        raise ValidationFailed("allow_download must be a boolean")
    return value


_CLEANERS = {
    "title": _clean_title,
    "description": _clean_description,
    "price_lkr": _clean_price,
    "tags": parse_tags,
    "allow_download": _clean_allow_download,
}


def dashboard_stats(books: list[Book]) -> dict[str, int]:
    published = sum(1 for b in books if b.is_published)
    return {"total": len(books), "published": published, "drafts": len(books) - published}


class CatalogService:
    def __init__(self, *, session: AsyncSession, store: ObjectStore, settings: Settings) -> None:
        self._session = session
        self._store = store
        self._settings = settings
        self._books = BookRepo(session)

    # --- validation helpers -------------------------------------------------

    def _check_pdf(self, pdf: UploadedFile | None) -> UploadedFile:
        if pdf is None or not pdf.data:
            raise ValidationFailed("Please select a PDF file.")
        is_pdf = pdf.content_type == "application/pdf" or pdf.filename.lower().endswith(".pdf")
        if not is_pdf:
            raise ValidationFailed("book file must be a PDF")
        if len(pdf.data) > self._settings.max_pdf_bytes:
            raise ValidationFailed("PDF file is too large")
        return UploadedFile(filename=pdf.filename, content_type="application/pdf", data=pdf.data)

    def _check_image(self, image: UploadedFile) -> UploadedFile:
        if not image.data:
            raise ValidationFailed("image file is empty")
        if not image.content_type.startswith("image/"):
            raise ValidationFailed("cover must be an image")
        if len(image.data) > self._settings.max_image_bytes:
            raise ValidationFailed("image file is too large")
        return image

    async def _owned_book(self, author: Author, book_id: str) -> Book:
        book = await self._books.get(book_id)
        if book is None:
            raise NotFound("Book not found")
        if book.author_id != author.id:
            log.info("catalog.not_owner", book_id=book_id, user_id=author.id)
            raise Forbidden("not the owner of this book")
        return book

    def _orphaned(self, objects: list[StoredObject], error: Exception) -> None:
        for obj in objects:
            log.warning("catalog.orphaned_upload", bucket=obj.bucket, path=obj.path, error=str(error))

    # --- author operations --------------------------------------------------

    async def create_book(
        self,
        author: Author,
        *,
        title: Any,
        description: Any = "",
        price_lkr: Any = 0,
        tags: Any = None,
        allow_download: Any = False,
        cover: UploadedFile | None = None,
        pdf: UploadedFile | None = None,
    ) -> Book:
        fields = {
            "title": _clean_title(title),
            "description": _clean_description(description),
            "price_lkr": _clean_price(price_lkr),
            "tags": parse_tags(tags),
            "allow_download": _clean_allow_download(allow_download),
        }
        pdf = self._check_pdf(pdf)
        if cover is not None:
            cover = self._check_image(cover)

        # Phase 1: uploads (cover first, then PDF), each its own round trip.
        uploaded: list[StoredObject] = []
        cover_obj = None
        if cover is not None:
            cover_obj = await store_file(
                self._store, bucket=self._settings.cover_bucket, owner_id=author.id, file=cover
            )
            uploaded.append(cover_obj)
        try:
            pdf_obj = await store_file(
                self._store, bucket=self._settings.pdf_bucket, owner_id=author.id, file=pdf
            )
        except StoreFailure as e:
            self._orphaned(uploaded, e)
            raise
        uploaded.append(pdf_obj)

        # Phase 2: the row write. Failure here leaves the uploads orphaned.
        try:
            book = await self._books.create(
                author_id=author.id,
                cover_image_url=cover_obj.url if cover_obj else None,
                pdf_path=pdf_obj.path,
                pdf_url=pdf_obj.url,
                **fields,
            )
            await self._session.commit()
        except SQLAlchemyError as e:
            await self._session.rollback()
            self._orphaned(uploaded, e)
            raise StoreFailure(str(e)) from e

        log.info("catalog.book_created", book_id=book.id, author_id=author.id)
        return book

    async def update_book(self, author: Author, book_id: str, changes: dict[str, Any]) -> Book:
        book = await self._owned_book(author, book_id)

        protected = PUBLISH_FIELDS.intersection(changes)
        if protected:
            log.info("catalog.publish_fields_rejected", book_id=book_id, fields=sorted(protected))
            raise Forbidden("publish state can only be changed by an admin")
        unknown = set(changes) - EDITABLE_FIELDS
        if unknown:
            raise ValidationFailed(f"unknown fields: {', '.join(sorted(unknown))}")

        cleaned = {name: _CLEANERS[name](value) for name, value in changes.items()}
        try:
            await self._books.update_fields(book, cleaned)
            await self._session.commit()
        except SQLAlchemyError as e:
            await self._session.rollback()
            raise StoreFailure(str(e)) from e

        log.info("catalog.book_updated", book_id=book_id, fields=sorted(cleaned))
        return book

    async def replace_cover(self, author: Author, book_id: str, cover: UploadedFile) -> Book:
        book = await self._owned_book(author, book_id)
        cover = self._check_image(cover)
        obj = await store_file(
            self._store, bucket=self._settings.cover_bucket, owner_id=author.id, file=cover
        )
        return await self._write_file_fields(book, obj, {"cover_image_url": obj.url})

    async def replace_pdf(
        self, author: Author, book_id: str, pdf: UploadedFile | None
    ) -> Book:
        book = await self._owned_book(author, book_id)
        pdf = self._check_pdf(pdf)
        obj = await store_file(
            self._store, bucket=self._settings.pdf_bucket, owner_id=author.id, file=pdf
        )
        return await self._write_file_fields(book, obj, {"pdf_url": obj.url, "pdf_path": obj.path})

    async def _write_file_fields(
        self, book: Book, obj: StoredObject, fields: dict[str, Any]
    ) -> Book:
        try:
            await self._books.update_fields(book, fields)
            await self._session.commit()
        except SQLAlchemyError as e:
            await self._session.rollback()
            self._orphaned([obj], e)
            raise StoreFailure(str(e)) from e
        log.info("catalog.file_replaced", book_id=book.id, bucket=obj.bucket)
        return book

    async def delete_book(self, author: Author, book_id: str) -> None:
        await self._owned_book(author, book_id)
        try:
            affected = await self._books.delete(book_id)
        except SQLAlchemyError as e:
            await self._session.rollback()
            raise StoreFailure(str(e)) from e
        if affected == 0:
            await self._session.rollback()
            raise NotFound("Book not found")
        await commit_or_raise(self._session)
        log.info("catalog.book_deleted", book_id=book_id, author_id=author.id)

    async def list_my_books(self, author: Author) -> list[Book]:
        # Drafts included: the owner always sees their own books.
        return await self._books.list_for_author(author.id)

    # --- public reads -------------------------------------------------------

    async def list_public_books(self) -> list[Book]:
        return await self._books.list_published()

    async def get_book(
        self, book_id: str, *, viewer: Principal | None, viewer_is_admin: bool = False
    ) -> Book:
        book = await self._books.get(book_id)
        # Hidden drafts look exactly like missing books.
        if book is None or not can_view(book, viewer=viewer, viewer_is_admin=viewer_is_admin):
            raise NotFound("Book not found")
        return book


# --- Module Notes -----------------------------------------------------------
# Uploaded objects are never deleted here, not even when a row write fails or a book is
# deleted; the object store has no delete contract in this service.
