"""
bookstore.auth.access

Access control service.

Responsibilities:
- Resolve the calling principal from a bearer token.
- Decide whether that principal may act as admin or author.
- Re-verify on every call; nothing is cached between requests.
"""

from __future__ import annotations

from collections.abc import Iterable

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from bookstore.auth.identity import IdentityProvider, build_identity_provider
from bookstore.auth.models import Principal
from bookstore.db.models import Author
from bookstore.db.repositories.admins import AdminGrantRepo
from bookstore.db.repositories.authors import AuthorRepo
from bookstore.errors import BookstoreError, Forbidden, StoreFailure, Unauthenticated
from bookstore.observability.logging import get_logger
from bookstore.settings import Settings

log = get_logger(__name__)


def _looks_like_token(token: str) -> bool:
    # Presented credentials are compact JWTs: three non-empty dot-separated segments.
    parts = token.split(".")
    return len(parts) == 3 and all(parts)


class AccessControlService:
    def __init__(self, *, identity: IdentityProvider, admin_emails: Iterable[str]) -> None:
        self._identity = identity
        self._admin_emails = frozenset(
            e.strip().lower() for e in admin_emails if e and e.strip()
        )

    @property
    def identity(self) -> IdentityProvider:
        return self._identity

    async def resolve_principal(self, token: str | None) -> Principal | None:
        if not token or not token.strip():
            return None
        token = token.strip()
        if not _looks_like_token(token):
            return None
        return await self._identity.verify(token)

    def email_allowed(self, email: str) -> bool:
        return email.strip().lower() in self._admin_emails

    async def authorize_admin(self, session: AsyncSession, token: str | None) -> Principal:
        """
        Both conditions must hold: the email is on the operator allow-list AND an
        AdminGrant row exists for the principal id. Checked in that order.
        """
        principal = await self.resolve_principal(token)
        if principal is None:
            log.info("access.denied", role="admin", reason="no session")
            raise Unauthenticated("no session")

        if not self.email_allowed(principal.email):
            log.info("access.denied", role="admin", reason="not allowed", user_id=principal.id)
            raise Forbidden("not allowed")

        try:
            has_grant = await AdminGrantRepo(session).exists(principal.id)
        except SQLAlchemyError as e:
            log.error("access.store_failure", role="admin", error=str(e))
            raise StoreFailure(str(e)) from e
        if not has_grant:
            log.info("access.denied", role="admin", reason="no grant", user_id=principal.id)
            raise Forbidden("no grant")

        return principal

    async def authorize_author(self, session: AsyncSession, principal: Principal) -> Author:
        # Fails closed: a lookup error is indistinguishable from "not an author".
        try:
            author = await AuthorRepo(session).get(principal.id)
        except SQLAlchemyError as e:
            log.warning("access.author_lookup_failed", user_id=principal.id, error=str(e))
            author = None
        if author is None:
            log.info("access.denied", role="author", reason="no profile", user_id=principal.id)
            raise Forbidden("author profile required")
        return author

    async def is_admin(self, session: AsyncSession, token: str | None) -> bool:
        try:
            await self.authorize_admin(session, token)
        except BookstoreError:
            return False
        return True

    async def aclose(self) -> None:
        await self._identity.aclose()


def init_access_control(
    settings: Settings, *, identity: IdentityProvider | None = None
) -> AccessControlService:
    """
    Build the process-wide access control service from settings (called once at startup).
    """
    return AccessControlService(
        identity=identity or build_identity_provider(settings),
        admin_emails=settings.admin_emails,
    )


# --- Module Notes -----------------------------------------------------------
# Every admin-only route depends on `authorize_admin` through `auth.deps.require_admin`;
# `is_admin` is the non-failing probe used for UI gating.
