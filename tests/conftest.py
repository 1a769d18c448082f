"""
tests.conftest

Shared fixtures: an app wired to a temporary SQLite database and storage root,
plus token helpers. Row builders live in `tests.factories`.
"""

from __future__ import annotations

from collections.abc import AsyncIterator

import httpx
import pytest
from fastapi import FastAPI
from sqlalchemy.ext.asyncio import AsyncSession

from bookstore.api.app import create_app
from bookstore.auth.jwt import JwtConfig, issue_token
from bookstore.settings import Settings
from tests.factories import ADMIN_EMAIL


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        env="test",
        log_level="WARNING",
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'test.db'}",
        storage_root=str(tmp_path / "storage"),
        storage_public_url="http://test/storage",
        jwt_secret="test-secret",
        admin_emails=[ADMIN_EMAIL],
    )


@pytest.fixture
async def app(settings: Settings) -> AsyncIterator[FastAPI]:
    app = create_app(settings=settings)
    # httpx ASGITransport does not run lifespan events; drive them explicitly.
    async with app.router.lifespan_context(app):
        yield app


@pytest.fixture
async def client(app: FastAPI) -> AsyncIterator[httpx.AsyncClient]:
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as c:
        yield c


@pytest.fixture
async def session(app: FastAPI) -> AsyncIterator[AsyncSession]:
    async with app.state.sessionmaker() as s:
        yield s


@pytest.fixture
def token_for(settings: Settings):
    def _mint(user_id: str, email: str, **kwargs) -> str:
        return issue_token(
            cfg=JwtConfig.from_settings(settings), subject=user_id, email=email, **kwargs
        )

    return _mint


@pytest.fixture
def auth_header(token_for):
    def _header(user_id: str, email: str) -> dict[str, str]:
        return {"Authorization": f"Bearer {token_for(user_id, email)}"}

    return _header
