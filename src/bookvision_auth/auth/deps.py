"""
bookvision_auth.auth.deps

FastAPI dependency functions for authentication and authorization.

Responsibilities:
- Run the request gate with the `reject` or `ignore` failure policy.
- Enforce minimum roles via a reusable dependency factory.
"""

from __future__ import annotations

from typing import Any

from fastapi import Depends, Request

from bookvision_auth.auth.gate import FailurePolicy, RequestGate
from bookvision_auth.auth.models import Principal
from bookvision_auth.auth.roles import Role
from bookvision_auth.errors import UnauthenticatedError


def get_gate(request: Request) -> RequestGate:
    # Built once on app startup in `bookvision_auth.api.app.create_app`.
    return request.app.state.gate  # type: ignore[no-any-return]


def auth_context(request: Request) -> dict[str, Any]:
    # Request-scoped context shared by every gate dependency of the same request.
    ctx = getattr(request.state, "auth", None)
    if ctx is None:
        ctx = {}
        request.state.auth = ctx
    return ctx


def get_principal(
    request: Request,
    gate: RequestGate = Depends(get_gate),
) -> Principal:
    result = gate.authenticate(request.headers, auth_context(request), policy=FailurePolicy.reject)
    if result.error is not None:
        raise result.error
    if result.principal is None:
        raise UnauthenticatedError()
    return result.principal


def get_optional_principal(
    request: Request,
    gate: RequestGate = Depends(get_gate),
) -> Principal | None:
    # Tiered-visibility routes: any token problem degrades to an anonymous request.
    return gate.authenticate(
        request.headers, auth_context(request), policy=FailurePolicy.ignore
    ).principal


def require_role(required: Role):
    def _dep(
        request: Request,
        principal: Principal = Depends(get_principal),
        gate: RequestGate = Depends(get_gate),
    ) -> Principal:
        result = gate.authorize(auth_context(request), required)
        if result.error is not None:
            raise result.error
        return principal

    return _dep


# --- Module Notes -----------------------------------------------------------
# Raised `AuthError`s are rendered by `api.exception_handlers`, so routes and
# dependencies never build HTTP error bodies themselves.
