"""
bookvision_auth.api.deps

FastAPI dependency wiring for the API layer.

Responsibilities:
- Provide dependency functions for the auth service and the credential store.
- Encapsulate app.state access patterns.
"""

from __future__ import annotations

from fastapi import Request

from bookvision_auth.db.credential_store import SqlCredentialStore
from bookvision_auth.services.auth_service import AuthService


def auth_service_dep(request: Request) -> AuthService:
    # Built once on app startup in `bookvision_auth.api.app.create_app`.
    return request.app.state.auth_service  # type: ignore[no-any-return]


def credential_store_dep(request: Request) -> SqlCredentialStore:
    return request.app.state.store  # type: ignore[no-any-return]
