"""
tests.conftest

Shared fixtures for the auth core test-suite.

Responsibilities:
- Provide a controllable clock, token service and settings with a throwaway SQLite database.
- Provide a real `SqlCredentialStore`, `AuthService` and an in-process HTTP client.
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from datetime import UTC, datetime, timedelta
from pathlib import Path

import httpx
import pytest
import pytest_asyncio

from bookvision_auth.api.app import create_app
from bookvision_auth.auth.jwt import JwtConfig, TokenService
from bookvision_auth.db.credential_store import SqlCredentialStore
from bookvision_auth.db.session import create_engine, create_sessionmaker, init_db
from bookvision_auth.services.auth_service import AuthService
from bookvision_auth.settings import Settings

SECRET = "test-signing-secret-0123456789abcdef"
T0 = datetime(2026, 1, 1, 12, 0, 0, tzinfo=UTC)


class FakeClock:
    def __init__(self, now: datetime = T0) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now = self.now + timedelta(seconds=seconds)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def jwt_config() -> JwtConfig:
    return JwtConfig(secret=SECRET, lifetime_hours=24)


@pytest.fixture
def tokens(jwt_config: JwtConfig, clock: FakeClock) -> TokenService:
    return TokenService(jwt_config, clock=clock)


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    return Settings(
        env="test",
        jwt_secret=SECRET,
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'auth.db'}",
        bcrypt_rounds=4,
    )


@pytest_asyncio.fixture
async def store(settings: Settings) -> AsyncIterator[SqlCredentialStore]:
    engine = create_engine(settings)
    await init_db(engine)
    try:
        yield SqlCredentialStore(create_sessionmaker(engine), bcrypt_rounds=settings.bcrypt_rounds)
    finally:
        await engine.dispose()


@pytest.fixture
def service(store: SqlCredentialStore, tokens: TokenService) -> AuthService:
    return AuthService(store=store, tokens=tokens)


@pytest_asyncio.fixture
async def client(settings: Settings, clock: FakeClock) -> AsyncIterator[httpx.AsyncClient]:
    app = create_app(settings=settings, clock=clock)
    # httpx ASGITransport does not manage lifespan; run it explicitly.
    async with app.router.lifespan_context(app):
        transport = httpx.ASGITransport(app=app)
        async with httpx.AsyncClient(transport=transport, base_url="http://test") as c:
            yield c
