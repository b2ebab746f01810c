"""
bookvision_auth.db.repositories.users

Repository for `UserRecord` rows.

Responsibilities:
- Insert, fetch and update user rows inside a caller-provided session.
"""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from bookvision_auth.db.models import UserRecord


class UserRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def add(self, record: UserRecord) -> UserRecord:
        self._session.add(record)
        # Flush so the UNIQUE(username) constraint fires inside the caller's transaction.
        await self._session.flush()
        return record

    async def get(self, user_id: str) -> UserRecord | None:
        return await self._session.get(UserRecord, user_id)

    async def get_by_username(self, username: str) -> UserRecord | None:
        stmt = select(UserRecord).where(UserRecord.username == username)
        return (await self._session.execute(stmt)).scalar_one_or_none()

    async def get_for_update(self, user_id: str) -> UserRecord | None:
        return await self._session.get(UserRecord, user_id, with_for_update=True)

    async def flush(self) -> None:
        await self._session.flush()
