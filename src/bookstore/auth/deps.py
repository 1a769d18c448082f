"""
bookstore.auth.deps

FastAPI dependency functions for authentication and authorization.

Responsibilities:
- Extract the bearer token and resolve it into a typed `Principal`.
- Enforce admin / author gates via the access control service.
"""

from __future__ import annotations

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from bookstore.api.deps import db_session
from bookstore.auth.access import AccessControlService
from bookstore.auth.models import Principal
from bookstore.db.models import Author
from bookstore.errors import Unauthenticated

_bearer = HTTPBearer(auto_error=False)


def access_control(request: Request) -> AccessControlService:
    # Created once on app startup in `bookstore.api.app.create_app`.
    return request.app.state.access_control  # type: ignore[no-any-return]


def bearer_token(
    creds: HTTPAuthorizationCredentials | None = Depends(_bearer),
) -> str | None:
    if creds is None or not creds.credentials:
        return None
    return creds.credentials


async def get_optional_principal(
    token: str | None = Depends(bearer_token),
    access: AccessControlService = Depends(access_control),
) -> Principal | None:
    return await access.resolve_principal(token)


async def get_principal(
    principal: Principal | None = Depends(get_optional_principal),
) -> Principal:
    if principal is None:
        raise Unauthenticated("no session")
    return principal


async def require_admin(
    token: str | None = Depends(bearer_token),
    access: AccessControlService = Depends(access_control),
    session: AsyncSession = Depends(db_session),
) -> Principal:
    return await access.authorize_admin(session, token)


async def require_author(
    principal: Principal = Depends(get_principal),
    access: AccessControlService = Depends(access_control),
    session: AsyncSession = Depends(db_session),
) -> Author:
    return await access.authorize_author(session, principal)


# --- Module Notes -----------------------------------------------------------
# FastAPI caches dependencies per request, so `db_session` is shared between the gate
# and the handler; the gate result itself never outlives the request.
