"""
bookvision_auth.auth.gate

Framework-neutral request gate.

Responsibilities:
- Extract a bearer token from request headers (strict `Bearer <token>` form).
- Validate it and attach the caller identity to a request-scoped context.
- Enforce a statically declared minimum role on top of an attached identity.

Per-request state machine:

    NO_TOKEN -> TOKEN_PRESENT -> AUTHENTICATED
                              -> REJECTED      (policy=reject: terminal failure)
                              -> NO_IDENTITY   (policy=ignore: continue anonymously)

Both required and optional authentication go through `authenticate`; only the failure
policy differs, so bearer parsing cannot drift between the two.
"""

from __future__ import annotations

import enum
from collections.abc import Mapping, MutableMapping
from dataclasses import dataclass
from typing import Any

from bookvision_auth.auth.jwt import TokenService
from bookvision_auth.auth.models import Principal
from bookvision_auth.auth.roles import Role, has_access
from bookvision_auth.errors import (
    AuthError,
    ForbiddenError,
    InvalidTokenError,
    UnauthenticatedError,
)
from bookvision_auth.observability.logging import get_logger

log = get_logger(__name__)

AUTHORIZATION_HEADER = "Authorization"
BEARER_PREFIX = "Bearer "

# Context keys written on successful authentication.
CTX_PRINCIPAL = "principal"
CTX_USER_ID = "user_id"
CTX_USERNAME = "username"
CTX_USER_ROLE = "user_role"

_STATUS_BY_ERROR: dict[type[AuthError], int] = {
    UnauthenticatedError: 401,
    ForbiddenError: 403,
}


class FailurePolicy(enum.StrEnum):
    reject = "reject"
    ignore = "ignore"


class GateState(enum.StrEnum):
    no_token = "NO_TOKEN"
    token_present = "TOKEN_PRESENT"
    authenticated = "AUTHENTICATED"
    rejected = "REJECTED"
    no_identity = "NO_IDENTITY"


@dataclass(frozen=True, slots=True)
class GateResult:
    state: GateState
    principal: Principal | None = None
    error: AuthError | None = None

    @property
    def proceed(self) -> bool:
        return self.error is None

    @property
    def status_code(self) -> int:
        if self.error is None:
            return 200
        return _STATUS_BY_ERROR.get(type(self.error), 401)

    def error_body(self) -> dict[str, Any] | None:
        return self.error.to_dict() if self.error is not None else None


def extract_bearer(header: str | None) -> str:
    if not header:
        raise UnauthenticatedError("Authorization header is required")
    if not header.startswith(BEARER_PREFIX) or len(header) <= len(BEARER_PREFIX):
        raise UnauthenticatedError("Authorization header format must be Bearer {token}")
    return header[len(BEARER_PREFIX) :]


def _get_header(headers: Mapping[str, str], name: str) -> str | None:
    # Header names are case-insensitive; plain dicts from other layers are not.
    value = headers.get(name)
    if value is not None:
        return value
    wanted = name.lower()
    for key, candidate in headers.items():
        if key.lower() == wanted:
            return candidate
    return None


def attach_identity(context: MutableMapping[str, Any], principal: Principal) -> None:
    context[CTX_PRINCIPAL] = principal
    context[CTX_USER_ID] = principal.user_id
    context[CTX_USERNAME] = principal.username
    context[CTX_USER_ROLE] = principal.role


def current_principal(context: Mapping[str, Any]) -> Principal | None:
    principal = context.get(CTX_PRINCIPAL)
    return principal if isinstance(principal, Principal) else None


class RequestGate:
    def __init__(self, tokens: TokenService) -> None:
        self._tokens = tokens

    def authenticate(
        self,
        headers: Mapping[str, str],
        context: MutableMapping[str, Any],
        *,
        policy: FailurePolicy = FailurePolicy.reject,
    ) -> GateResult:
        header = _get_header(headers, AUTHORIZATION_HEADER)
        try:
            token = extract_bearer(header)
        except UnauthenticatedError as e:
            state = GateState.no_token if not header else GateState.token_present
            reason = "malformed_header" if header else "missing_header"
            return self._fail(state, e, policy, reason=reason)

        try:
            claims = self._tokens.validate_token(token)
        except InvalidTokenError as e:
            # Token problems are reported to callers as a generic authentication failure.
            err = UnauthenticatedError("Invalid token")
            err.__cause__ = e
            return self._fail(GateState.token_present, err, policy, reason="invalid_token")

        principal = claims.principal
        attach_identity(context, principal)
        return GateResult(state=GateState.authenticated, principal=principal)

    def authorize(self, context: Mapping[str, Any], required: Role) -> GateResult:
        principal = current_principal(context)
        if principal is None:
            return GateResult(
                state=GateState.rejected,
                error=UnauthenticatedError("User role not found"),
            )
        if not has_access(principal.role, required):
            log.info(
                "access_denied",
                user_id=principal.user_id,
                role=principal.role.value,
                required=required.value,
            )
            return GateResult(
                state=GateState.rejected,
                principal=principal,
                error=ForbiddenError(),
            )
        return GateResult(state=GateState.authenticated, principal=principal)

    def _fail(
        self,
        state: GateState,
        error: UnauthenticatedError,
        policy: FailurePolicy,
        *,
        reason: str,
    ) -> GateResult:
        if policy is FailurePolicy.ignore:
            return GateResult(state=GateState.no_identity)
        log.info("request_rejected", reason=reason, from_state=state.value)
        return GateResult(state=GateState.rejected, error=error)


# --- Module Notes -----------------------------------------------------------
# FastAPI adapters live in `auth.deps`; any other routing layer can call
# `authenticate`/`authorize` with its own header mapping and context dict.
