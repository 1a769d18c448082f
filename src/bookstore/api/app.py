"""
bookstore.api.app

FastAPI app factory for the bookstore service.

Responsibilities:
- Build the FastAPI application and register routers/middleware/error handlers.
- Initialize and dispose shared infrastructure (DB engine, access control, object store).
- Provide a single composition root where cross-cutting concerns live.
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI
from fastapi.staticfiles import StaticFiles

from bookstore import __version__
from bookstore.api.errors import register_error_handlers
from bookstore.api.routers.admin import router as admin_router
from bookstore.api.routers.author_books import router as author_books_router
from bookstore.api.routers.authors import router as authors_router
from bookstore.api.routers.books import router as books_router
from bookstore.api.routers.dev_auth import router as dev_auth_router
from bookstore.api.routers.health import router as health_router
from bookstore.auth.access import init_access_control
from bookstore.auth.identity import IdentityProvider
from bookstore.db.init_db import init_db
from bookstore.db.session import create_engine, create_sessionmaker
from bookstore.observability.logging import configure_logging, get_logger
from bookstore.observability.middleware import RequestContextMiddleware
from bookstore.settings import Settings
from bookstore.storage.object_store import ObjectStore, build_object_store

log = get_logger(__name__)


def create_app(
    *,
    settings: Settings,
    identity: IdentityProvider | None = None,
    object_store: ObjectStore | None = None,
) -> FastAPI:
    # Configure structured logging once at process startup (before app serves requests).
    configure_logging(
        service_name=settings.service_name, level=settings.log_level, json_logs=settings.log_json
    )

    local_storage = settings.storage_provider == "local"
    if local_storage:
        Path(settings.storage_root).mkdir(parents=True, exist_ok=True)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        log.info("startup", env=settings.env, admin_emails=len(settings.admin_emails))
        engine = create_engine(settings)
        app.state.engine = engine
        app.state.sessionmaker = create_sessionmaker(engine)
        app.state.access_control = init_access_control(settings, identity=identity)
        app.state.object_store = object_store or build_object_store(settings)
        if settings.env in ("dev", "test"):
            # Dev/test convenience: create tables automatically. Prod runs Alembic migrations.
            await init_db(engine)
        try:
            yield
        finally:
            await app.state.access_control.aclose()
            await app.state.object_store.aclose()
            await engine.dispose()
            log.info("shutdown")

    app = FastAPI(
        title="Bookstore API",
        version=__version__,
        docs_url="/docs",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )
    app.state.settings = settings

    app.add_middleware(RequestContextMiddleware)
    register_error_handlers(app)

    app.include_router(health_router, tags=["health"])
    app.include_router(dev_auth_router)
    app.include_router(admin_router)
    app.include_router(authors_router)
    app.include_router(books_router)
    app.include_router(author_books_router)

    if local_storage:
        # Public URLs handed out by LocalObjectStore resolve here.
        app.mount("/storage", StaticFiles(directory=settings.storage_root), name="storage")

    return app


# --- Module Notes -----------------------------------------------------------
# Business rules live in services; this module only wires collaborators together.
