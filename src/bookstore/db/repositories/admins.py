"""
bookstore.db.repositories.admins

Repository for `AdminGrant` rows.

Responsibilities:
- Answer "does a grant exist for this principal id?" for access control.
- Grant/revoke for the out-of-band provisioning CLI.
"""

from __future__ import annotations

from sqlalchemy import delete
from sqlalchemy.ext.asyncio import AsyncSession

from bookstore.db.models import AdminGrant


class AdminGrantRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def exists(self, user_id: str) -> bool:
        return await self._session.get(AdminGrant, user_id) is not None

    async def grant(self, user_id: str) -> bool:
        if await self.exists(user_id):
            return False
        self._session.add(AdminGrant(user_id=user_id))
        await self._session.flush()
        return True

    async def revoke(self, user_id: str) -> bool:
        result = await self._session.execute(delete(AdminGrant).where(AdminGrant.user_id == user_id))
        return bool(result.rowcount)
