"""
bookstore.db.session

Async SQLAlchemy engine + session factory helpers.

Responsibilities:
- Create the async engine from settings.
- Create the async sessionmaker with safe defaults.
- Commit units of work, mapping store errors into the domain taxonomy.
"""

from __future__ import annotations

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from bookstore.errors import StoreFailure
from bookstore.settings import Settings


def create_engine(settings: Settings) -> AsyncEngine:
    # pool_pre_ping helps detect stale connections in long-lived processes.
    return create_async_engine(
        settings.database_url,
        pool_pre_ping=True,
    )


def create_sessionmaker(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    # expire_on_commit=False avoids surprising lazy loads after commits.
    return async_sessionmaker(
        bind=engine,
        expire_on_commit=False,
        autoflush=False,
    )


async def commit_or_raise(session: AsyncSession) -> None:
    """
    Commit the unit of work; collaborator errors surface as `StoreFailure` with their message.
    """
    try:
        await session.commit()
    except SQLAlchemyError as e:
        await session.rollback()
        raise StoreFailure(str(e)) from e


# --- Module Notes -----------------------------------------------------------
# The API layer scopes one session per request (`api.deps.db_session`); the
# provisioning CLI opens its own (`bookstore.admin_grants`).
