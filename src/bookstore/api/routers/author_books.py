"""
bookstore.api.routers.author_books

Author dashboard endpoints (the caller's own books).

Responsibilities:
- List the author's books including drafts, with dashboard counts.
- Upload a new book (cover optional, PDF required); it starts as a draft.
- Edit content, replace files, delete. Owner only; publish state is off limits.
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Body, Depends, File, Form, UploadFile
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.status import HTTP_201_CREATED

from bookstore.api.deps import db_session, object_store, read_upload, settings_dep
from bookstore.auth.deps import require_author
from bookstore.db.models import Author
from bookstore.errors import ValidationFailed
from bookstore.services.catalog import CatalogService, dashboard_stats
from bookstore.settings import Settings
from bookstore.storage.object_store import ObjectStore

router = APIRouter(prefix="/v1/author/books", tags=["author"])


def _catalog(
    session: AsyncSession = Depends(db_session),
    store: ObjectStore = Depends(object_store),
    settings: Settings = Depends(settings_dep),
) -> CatalogService:
    return CatalogService(session=session, store=store, settings=settings)


@router.get("")
async def list_my_books(
    author: Author = Depends(require_author),
    catalog: CatalogService = Depends(_catalog),
) -> dict[str, Any]:
    books = await catalog.list_my_books(author)
    return {"books": [b.to_dict() for b in books], "stats": dashboard_stats(books)}


@router.post("", status_code=HTTP_201_CREATED)
async def upload_book(
    title: str = Form(...),
    description: str = Form(""),
    price_lkr: int = Form(0),
    tags: str = Form(""),
    allow_download: bool = Form(False),
    cover: UploadFile | None = File(None),
    pdf: UploadFile | None = File(None),
    author: Author = Depends(require_author),
    catalog: CatalogService = Depends(_catalog),
) -> dict[str, Any]:
    book = await catalog.create_book(
        author,
        title=title,
        description=description,
        price_lkr=price_lkr,
        tags=tags,
        allow_download=allow_download,
        cover=await read_upload(cover),
        pdf=await read_upload(pdf),
    )
    return book.to_dict()


@router.patch("/{book_id}")
async def edit_book(
    book_id: str,
    changes: dict[str, Any] = Body(...),
    author: Author = Depends(require_author),
    catalog: CatalogService = Depends(_catalog),
) -> dict[str, Any]:
    book = await catalog.update_book(author, book_id, changes)
    return book.to_dict()


@router.put("/{book_id}/cover")
async def replace_cover(
    book_id: str,
    cover: UploadFile = File(...),
    author: Author = Depends(require_author),
    catalog: CatalogService = Depends(_catalog),
) -> dict[str, Any]:
    uploaded = await read_upload(cover)
    if uploaded is None:
        raise ValidationFailed("cover is required")
    book = await catalog.replace_cover(author, book_id, uploaded)
    return book.to_dict()


@router.put("/{book_id}/pdf")
async def replace_pdf(
    book_id: str,
    pdf: UploadFile = File(...),
    author: Author = Depends(require_author),
    catalog: CatalogService = Depends(_catalog),
) -> dict[str, Any]:
    book = await catalog.replace_pdf(author, book_id, await read_upload(pdf))
    return book.to_dict()


@router.delete("/{book_id}")
async def delete_book(
    book_id: str,
    author: Author = Depends(require_author),
    catalog: CatalogService = Depends(_catalog),
) -> dict[str, bool]:
    await catalog.delete_book(author, book_id)
    return {"ok": True}


# --- Module Notes -----------------------------------------------------------
# `require_author` answers 403 "author profile required" when the caller has no profile;
# clients send the user to profile creation on that response.
