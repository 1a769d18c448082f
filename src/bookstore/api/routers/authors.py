"""
bookstore.api.routers.authors

The caller's own author profile.

Responsibilities:
- Read the profile (404 means "not an author yet").
- Create/update it via upsert keyed on the principal id.
- Replace the profile image.
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, File, UploadFile
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from bookstore.api.deps import db_session, object_store, read_upload, settings_dep
from bookstore.auth.deps import get_principal, require_author
from bookstore.auth.models import Principal
from bookstore.db.models import Author
from bookstore.errors import NotFound, ValidationFailed
from bookstore.services.authors import AuthorProfileService
from bookstore.settings import Settings
from bookstore.storage.object_store import ObjectStore

router = APIRouter(prefix="/v1/authors", tags=["authors"])


class ProfileRequest(BaseModel):
    full_name: str = Field(max_length=256)
    bio: str | None = None


def _service(
    session: AsyncSession = Depends(db_session),
    store: ObjectStore = Depends(object_store),
    settings: Settings = Depends(settings_dep),
) -> AuthorProfileService:
    return AuthorProfileService(session=session, store=store, settings=settings)


@router.get("/me")
async def get_my_profile(
    principal: Principal = Depends(get_principal),
    svc: AuthorProfileService = Depends(_service),
) -> dict[str, Any]:
    author = await svc.get_profile(principal)
    if author is None:
        raise NotFound("author profile not found")
    return author.to_dict()


@router.put("/me")
async def save_my_profile(
    body: ProfileRequest,
    principal: Principal = Depends(get_principal),
    svc: AuthorProfileService = Depends(_service),
) -> dict[str, Any]:
    author = await svc.upsert_profile(principal, full_name=body.full_name, bio=body.bio)
    return author.to_dict()


@router.put("/me/image")
async def replace_my_image(
    image: UploadFile = File(...),
    author: Author = Depends(require_author),
    svc: AuthorProfileService = Depends(_service),
) -> dict[str, Any]:
    uploaded = await read_upload(image)
    if uploaded is None:
        raise ValidationFailed("image is required")
    author = await svc.replace_profile_image(author, uploaded)
    return author.to_dict()
