"""
bookvision_auth.api.routers.health

Health and readiness endpoints.

Responsibilities:
- Provide liveness probe (`/healthz`).
- Provide readiness probe (`/readyz`) backed by a credential store ping.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from bookvision_auth.api.deps import credential_store_dep
from bookvision_auth.db.credential_store import SqlCredentialStore

router = APIRouter()


@router.get("/healthz")
async def healthz() -> dict[str, str]:
    return {"status": "ok"}


@router.get("/readyz")
async def readyz(store: SqlCredentialStore = Depends(credential_store_dep)) -> dict[str, str]:
    # An unreachable store raises UnavailableError, rendered as 503.
    await store.ping()
    return {"status": "ready"}
