"""
bookvision_auth.db.models

Persistence schema for the auth core.

Responsibilities:
- Provide the declarative `Base` shared by Alembic and `db.session.init_db`.
- Define the `users` table, including the UNIQUE username constraint that resolves
  concurrent registrations.
"""

from __future__ import annotations

import uuid
from datetime import UTC, datetime

from sqlalchemy import Enum, Integer, String, UniqueConstraint
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from bookvision_auth.auth.roles import Role


class Base(DeclarativeBase):
    pass


def _utcnow() -> datetime:
    # Persist naive UTC timestamps; SQLite has no timezone-aware type.
    return datetime.now(tz=UTC).replace(tzinfo=None)


def _new_id() -> str:
    return str(uuid.uuid4())


class UserRecord(Base):
    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    username: Mapped[str] = mapped_column(String(50), nullable=False)
    email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    avatar_url: Mapped[str | None] = mapped_column(String(1024), nullable=True)
    role: Mapped[Role] = mapped_column(
        Enum(Role, name="user_role", values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=Role.user,
    )
    created_at: Mapped[datetime] = mapped_column(nullable=False, default=_utcnow)

    books_read: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    reviews_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    likes_received: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    profile_visibility: Mapped[str] = mapped_column(String(32), nullable=False, default="public")
    activity_visibility: Mapped[str] = mapped_column(String(32), nullable=False, default="public")

    __table_args__ = (UniqueConstraint("username", name="uq_users_username"),)


# --- Module Notes -----------------------------------------------------------
# Keep this file aligned with `alembic/versions`; `password_hash` is read only by
# `db.credential_store`.
