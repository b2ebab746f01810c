"""
bookvision_auth.settings

Central configuration model (Pydantic Settings).

Responsibilities:
- Provide strongly-typed, env-driven settings for all layers.
- Hide secrets from repr/logging (JWT signing secret).
- Offer a cached settings instance for dependency injection.
"""

from __future__ import annotations

import enum
from functools import lru_cache
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class UsernameChangePolicy(enum.StrEnum):
    # verify: the auth service looks the new username up before persisting.
    # store_only: rely solely on the store's uniqueness constraint.
    verify = "verify"
    store_only = "store_only"


class Settings(BaseSettings):
    """
    Loaded once at process start and shared read-only afterwards.
    The model is frozen so the signing secret and token lifetime cannot drift at runtime.
    """

    model_config = SettingsConfigDict(
        env_prefix="BOOKVISION_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
        frozen=True,
    )

    env: Literal["dev", "test", "prod"] = "dev"
    service_name: str = "bookvision-auth"
    log_level: str = "INFO"

    api_host: str = "0.0.0.0"
    api_port: int = 8080

    # Auth
    jwt_secret: str = Field(min_length=1, repr=False)
    jwt_expires_in_hours: int = Field(default=24, ge=1, le=24 * 365)
    jwt_issuer: str = "bookvision"

    # Credential store
    database_url: str = "sqlite+aiosqlite:///./bookvision.db"
    bcrypt_rounds: int = Field(default=12, ge=4, le=16)
    username_change_policy: UsernameChangePolicy = UsernameChangePolicy.verify

    @field_validator("jwt_secret")
    @classmethod
    def validate_jwt_secret(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("jwt_secret must be set and non-empty")
        return v


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    # Cache avoids re-parsing env vars for each request dependency.
    return Settings()  # type: ignore[call-arg]


# --- Module Notes -----------------------------------------------------------
# `jwt_secret` has no default: a process started without BOOKVISION_JWT_SECRET
# fails at settings load, before any traffic is served.
