"""
bookvision_auth.auth.models

Auth domain models.

Responsibilities:
- Define the user shape that crosses the credential store boundary (no password material).
- Define the authenticated identity type (`Principal`) attached to requests.
- Define request/response DTOs used by the auth service.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from bookvision_auth.auth.roles import Role


@dataclass(slots=True)
class User:
    """
    A user as seen outside the credential store. The password hash never leaves the store.
    """

    id: str
    username: str
    role: Role
    created_at: datetime
    email: str | None = None
    avatar_url: str | None = None
    profile_visibility: str = "public"
    activity_visibility: str = "public"
    books_read: int = 0
    reviews_count: int = 0
    likes_received: int = 0


@dataclass(frozen=True, slots=True)
class NewUser:
    # The only domain type that carries a plaintext password; consumed by the store.
    username: str
    password: str = field(repr=False)
    role: Role = Role.user
    email: str | None = None


@dataclass(frozen=True, slots=True)
class Principal:
    """
    Authenticated caller identity.
    """

    user_id: str
    username: str
    role: Role


class UserProfile(BaseModel):
    """Public view of a user."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    username: str
    email: str | None = None
    avatar_url: str | None = None
    role: Role
    created_at: datetime
    books_read: int = 0
    reviews_count: int = 0
    likes_received: int = 0
    profile_visibility: str = "public"
    activity_visibility: str = "public"

    @classmethod
    def from_user(cls, user: User) -> UserProfile:
        return cls.model_validate(user)


class RegisterRequest(BaseModel):
    username: str = Field(min_length=3, max_length=50)
    password: str = Field(min_length=6, max_length=128, repr=False)
    email: str | None = Field(default=None, max_length=255)


class LoginRequest(BaseModel):
    username: str = Field(min_length=1, max_length=50)
    password: str = Field(min_length=1, max_length=128, repr=False)


class UpdateProfileRequest(BaseModel):
    # Partial update: only fields present in the payload are applied (see `model_fields_set`).
    username: str | None = Field(default=None, min_length=3, max_length=50)
    avatar_url: str | None = Field(default=None, max_length=1024)
    role: Role | None = None
    profile_visibility: str | None = Field(default=None, max_length=32)
    activity_visibility: str | None = Field(default=None, max_length=32)


class AuthResult(BaseModel):
    user: UserProfile
    token: str


# --- Module Notes -----------------------------------------------------------
# `User` is a plain dataclass so stores can build it without pydantic validation;
# `UserProfile` is the serialized public view returned by the API.
