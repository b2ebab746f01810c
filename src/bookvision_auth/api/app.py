"""
bookvision_auth.api.app

FastAPI app factory for the BookVision auth service.

Responsibilities:
- Build the FastAPI application and register routers/middleware/exception handlers.
- Initialize and dispose shared infrastructure (DB engine, credential store, token service).
- Refuse to start serving when the credential store is unreachable.
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from bookvision_auth import __version__
from bookvision_auth.api.exception_handlers import setup_exception_handlers
from bookvision_auth.api.routers.auth import router as auth_router
from bookvision_auth.api.routers.health import router as health_router
from bookvision_auth.auth.gate import RequestGate
from bookvision_auth.auth.jwt import Clock, JwtConfig, TokenService, utcnow
from bookvision_auth.db.credential_store import SqlCredentialStore
from bookvision_auth.db.session import create_engine, create_sessionmaker, init_db
from bookvision_auth.observability.logging import configure_logging, get_logger
from bookvision_auth.observability.middleware import RequestContextMiddleware
from bookvision_auth.services.auth_service import AuthService
from bookvision_auth.settings import Settings

log = get_logger(__name__)


def create_app(*, settings: Settings, clock: Clock = utcnow) -> FastAPI:
    # Configure structured logging once at process startup (before app serves requests).
    configure_logging(service_name=settings.service_name, level=settings.log_level)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        log.info("startup", env=settings.env)
        engine = create_engine(settings)
        try:
            store = SqlCredentialStore(
                create_sessionmaker(engine), bcrypt_rounds=settings.bcrypt_rounds
            )
            # Fatal on failure: the process must not serve traffic without its store.
            await store.ping()
            if settings.env in ("dev", "test"):
                # Dev/test convenience: create tables automatically. Prod uses Alembic migrations.
                await init_db(engine)

            tokens = TokenService(JwtConfig.from_settings(settings), clock=clock)
            app.state.settings = settings
            app.state.engine = engine
            app.state.store = store
            app.state.tokens = tokens
            app.state.gate = RequestGate(tokens)
            app.state.auth_service = AuthService(
                store=store,
                tokens=tokens,
                username_policy=settings.username_change_policy,
            )
            yield
        finally:
            await engine.dispose()
            log.info("shutdown")

    app = FastAPI(
        title="BookVision Auth",
        version=__version__,
        docs_url="/docs",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    app.add_middleware(RequestContextMiddleware)
    setup_exception_handlers(app)
    app.include_router(health_router, tags=["health"])
    app.include_router(auth_router)

    return app


# --- Module Notes -----------------------------------------------------------
# App composition stays here; auth logic lives in `auth` and `services`.
