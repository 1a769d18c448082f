"""
bookstore.api.routers.admin

Admin endpoints.

Responsibilities:
- Admin probe for UI gating (`/me`, never fails).
- Author and book listings for the admin dashboard.
- Publish/unpublish toggle.
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Body, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from bookstore.api.deps import db_session
from bookstore.auth.access import AccessControlService
from bookstore.auth.deps import access_control, bearer_token, require_admin
from bookstore.auth.models import Principal
from bookstore.services.admin import AdminReportingService
from bookstore.services.publish import PublishWorkflowService

router = APIRouter(prefix="/v1/admin", tags=["admin"])


@router.get("/me")
async def admin_me(
    token: str | None = Depends(bearer_token),
    access: AccessControlService = Depends(access_control),
    session: AsyncSession = Depends(db_session),
) -> dict[str, bool]:
    return {"isAdmin": await access.is_admin(session, token)}


@router.get("/authors")
async def list_authors(
    _: Principal = Depends(require_admin),
    session: AsyncSession = Depends(db_session),
) -> dict[str, Any]:
    authors = await AdminReportingService(session=session).list_authors_with_book_counts()
    return {"authors": authors}


@router.get("/books")
async def list_books(
    _: Principal = Depends(require_admin),
    session: AsyncSession = Depends(db_session),
) -> dict[str, Any]:
    books = await AdminReportingService(session=session).list_all_books()
    return {"books": [b.to_dict() for b in books]}


@router.post("/books/publish")
async def set_publish_state(
    body: dict[str, Any] = Body(...),
    principal: Principal = Depends(require_admin),
    session: AsyncSession = Depends(db_session),
) -> dict[str, bool]:
    # Raw body: type checks belong to the workflow so "publish": "yes" is a 400, not coerced.
    await PublishWorkflowService(session=session).set_publish_state(
        body.get("bookId"), body.get("publish"), actor=principal.id
    )
    return {"ok": True}


# --- Module Notes -----------------------------------------------------------
# `require_admin` re-runs the allow-list + grant check on every request.
