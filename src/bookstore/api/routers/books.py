"""
bookstore.api.routers.books

Public catalog endpoints.

Responsibilities:
- List published books for anonymous readers.
- Show a single book under the visibility policy (drafts only to owner/admin).
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from bookstore.api.deps import db_session, object_store, settings_dep
from bookstore.auth.access import AccessControlService
from bookstore.auth.deps import access_control, bearer_token, get_optional_principal
from bookstore.auth.models import Principal
from bookstore.services.catalog import CatalogService
from bookstore.settings import Settings
from bookstore.storage.object_store import ObjectStore

router = APIRouter(prefix="/v1/books", tags=["books"])

_LIST_FIELDS = ("id", "title", "price_lkr", "cover_image_url", "allow_download", "author_id")


@router.get("")
async def list_books(
    session: AsyncSession = Depends(db_session),
    store: ObjectStore = Depends(object_store),
    settings: Settings = Depends(settings_dep),
) -> dict[str, Any]:
    books = await CatalogService(session=session, store=store, settings=settings).list_public_books()
    rows = [b.to_dict() for b in books]
    return {"books": [{k: row[k] for k in _LIST_FIELDS} for row in rows]}


@router.get("/{book_id}")
async def get_book(
    book_id: str,
    token: str | None = Depends(bearer_token),
    viewer: Principal | None = Depends(get_optional_principal),
    access: AccessControlService = Depends(access_control),
    session: AsyncSession = Depends(db_session),
    store: ObjectStore = Depends(object_store),
    settings: Settings = Depends(settings_dep),
) -> dict[str, Any]:
    viewer_is_admin = viewer is not None and await access.is_admin(session, token)
    svc = CatalogService(session=session, store=store, settings=settings)
    book = await svc.get_book(book_id, viewer=viewer, viewer_is_admin=viewer_is_admin)
    return book.to_dict()
