"""
bookvision_auth.db.credential_store

SQLAlchemy-backed credential store.

Responsibilities:
- Own transaction boundaries for user persistence (one session per operation).
- Hash and verify passwords; plaintext and hashes never leave this module.
- Translate backend failures into the shared error taxonomy.
"""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from sqlalchemy import text
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from bookvision_auth.auth.models import NewUser, User
from bookvision_auth.auth.passwords import hash_password, verify_password
from bookvision_auth.db.models import UserRecord
from bookvision_auth.db.repositories.users import UserRepo
from bookvision_auth.errors import (
    AuthError,
    ConflictError,
    InvalidCredentialsError,
    NotFoundError,
    UnavailableError,
)
from bookvision_auth.observability.logging import get_logger

log = get_logger(__name__)

# SQLite reports the column, PostgreSQL the constraint name.
_USERNAME_CONFLICT_MARKERS = ("uq_users_username", "users.username")


def _to_user(record: UserRecord) -> User:
    return User(
        id=record.id,
        username=record.username,
        role=record.role,
        created_at=record.created_at,
        email=record.email,
        avatar_url=record.avatar_url,
        profile_visibility=record.profile_visibility,
        activity_visibility=record.activity_visibility,
        books_read=record.books_read,
        reviews_count=record.reviews_count,
        likes_received=record.likes_received,
    )


def _is_username_conflict(error: IntegrityError) -> bool:
    detail = str(error.orig)
    return any(marker in detail for marker in _USERNAME_CONFLICT_MARKERS)


class SqlCredentialStore:
    """
    Implements `services.credential_store.CredentialStore`.

    Username uniqueness is enforced by the `uq_users_username` constraint, so two
    concurrent `create` calls for one username yield exactly one success and one
    ConflictError regardless of what callers checked beforehand.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        *,
        bcrypt_rounds: int = 12,
    ) -> None:
        self._sessions = session_factory
        self._rounds = bcrypt_rounds
        # Unknown usernames are checked against this hash so timing matches a wrong password.
        self._dummy_hash = hash_password("bookvision-timing-dummy", rounds=bcrypt_rounds)

    @asynccontextmanager
    async def _transaction(self, op: str) -> AsyncIterator[UserRepo]:
        try:
            async with self._sessions() as session, session.begin():
                yield UserRepo(session)
        except AuthError:
            raise
        except IntegrityError as e:
            if not _is_username_conflict(e):
                log.error("store_integrity_error", op=op, error_type=type(e.orig).__name__)
                raise
            log.info("store_conflict", op=op)
            raise ConflictError("Username already exists") from e
        except SQLAlchemyError as e:
            # Driver text can carry connection details; log the type only.
            log.warning("store_unavailable", op=op, error_type=type(e).__name__)
            raise UnavailableError() from e

    async def ping(self) -> None:
        try:
            async with self._sessions() as session:
                await session.execute(text("SELECT 1"))
        except SQLAlchemyError as e:
            log.warning("store_unavailable", op="ping", error_type=type(e).__name__)
            raise UnavailableError() from e

    async def create(self, new_user: NewUser) -> User:
        password_hash = await asyncio.to_thread(
            hash_password, new_user.password, rounds=self._rounds
        )
        async with self._transaction("create") as users:
            record = await users.add(
                UserRecord(
                    username=new_user.username,
                    email=new_user.email,
                    password_hash=password_hash,
                    role=new_user.role,
                )
            )
            user = _to_user(record)
        log.info("user_created", user_id=user.id)
        return user

    async def get_by_id(self, user_id: str) -> User:
        async with self._transaction("get_by_id") as users:
            record = await users.get(user_id)
            if record is None:
                raise NotFoundError("User not found")
            return _to_user(record)

    async def get_by_username(self, username: str) -> User:
        async with self._transaction("get_by_username") as users:
            record = await users.get_by_username(username)
            if record is None:
                raise NotFoundError("User not found")
            return _to_user(record)

    async def update(self, user: User) -> User:
        async with self._transaction("update") as users:
            record = await users.get_for_update(user.id)
            if record is None:
                raise NotFoundError("User not found")
            # id, created_at, email and password_hash are never written here.
            record.username = user.username
            record.avatar_url = user.avatar_url
            record.role = user.role
            record.profile_visibility = user.profile_visibility
            record.activity_visibility = user.activity_visibility
            record.books_read = user.books_read
            record.reviews_count = user.reviews_count
            record.likes_received = user.likes_received
            # Flush inside the transaction so a username collision maps to ConflictError.
            await users.flush()
            updated = _to_user(record)
        log.info("user_updated", user_id=updated.id)
        return updated

    async def verify_password(self, username: str, password: str) -> User:
        async with self._transaction("verify_password") as users:
            record = await users.get_by_username(username)
            stored_hash = record.password_hash if record is not None else None
            user = _to_user(record) if record is not None else None

        if stored_hash is None or user is None:
            await asyncio.to_thread(verify_password, password, self._dummy_hash)
            raise NotFoundError("User not found")
        if not await asyncio.to_thread(verify_password, password, stored_hash):
            raise InvalidCredentialsError()
        return user


# --- Module Notes -----------------------------------------------------------
# bcrypt work runs in a worker thread so concurrent requests keep the event loop free.
