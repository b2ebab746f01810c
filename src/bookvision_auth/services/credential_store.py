"""
bookvision_auth.services.credential_store

Credential store contract consumed by the auth service.

Responsibilities:
- Describe user persistence and password verification as an async protocol so the
  auth service can run against any backend (SQLAlchemy, fakes in tests).
"""

from __future__ import annotations

from typing import Protocol

from bookvision_auth.auth.models import NewUser, User


class CredentialStore(Protocol):
    async def create(self, new_user: NewUser) -> User:
        """Persist a new user, hashing its password. Raises ConflictError on a taken username."""
        ...

    async def get_by_id(self, user_id: str) -> User:
        """Raises NotFoundError if absent."""
        ...

    async def get_by_username(self, username: str) -> User:
        """Raises NotFoundError if absent."""
        ...

    async def update(self, user: User) -> User:
        """
        Persist mutable fields only (username, avatar, role, visibility, counters).
        Raises NotFoundError if absent, ConflictError on a username collision.
        """
        ...

    async def verify_password(self, username: str, password: str) -> User:
        """Raises NotFoundError for an unknown username, InvalidCredentialsError on mismatch."""
        ...


# --- Module Notes -----------------------------------------------------------
# Every method may also raise UnavailableError when the backend cannot be reached.
