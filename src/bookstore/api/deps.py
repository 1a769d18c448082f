"""
bookstore.api.deps

FastAPI dependency wiring for the API layer.

Responsibilities:
- Provide dependency functions for settings, DB sessions and the object store.
- Encapsulate app.state access patterns.
"""

from __future__ import annotations

from collections.abc import AsyncIterator

from fastapi import Depends, Request, UploadFile
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from bookstore.settings import Settings
from bookstore.storage.object_store import ObjectStore, UploadedFile


def settings_dep(request: Request) -> Settings:
    return request.app.state.settings  # type: ignore[no-any-return]


def sessionmaker_from_app(request: Request) -> async_sessionmaker[AsyncSession]:
    # The sessionmaker is created on app startup in `bookstore.api.app.create_app`.
    return request.app.state.sessionmaker  # type: ignore[no-any-return]


async def db_session(
    session_factory: async_sessionmaker[AsyncSession] = Depends(sessionmaker_from_app),
) -> AsyncIterator[AsyncSession]:
    # Request-scoped DB session. Commit/rollback is managed explicitly by the service layer.
    async with session_factory() as session:
        yield session


def object_store(request: Request) -> ObjectStore:
    return request.app.state.object_store  # type: ignore[no-any-return]


async def read_upload(upload: UploadFile | None) -> UploadedFile | None:
    if upload is None or not upload.filename:
        return None
    data = await upload.read()
    return UploadedFile(
        filename=upload.filename,
        content_type=upload.content_type or "application/octet-stream",
        data=data,
    )
