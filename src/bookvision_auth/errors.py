"""
bookvision_auth.errors

Error taxonomy shared by every layer.

Responsibilities:
- Define the closed set of externally observable failure kinds.
- Keep public messages fixed per kind so internal causes never reach callers.
"""

from __future__ import annotations

import enum


class ErrorCode(enum.StrEnum):
    conflict = "CONFLICT"
    not_found = "NOT_FOUND"
    invalid_credentials = "INVALID_CREDENTIALS"
    invalid_token = "INVALID_TOKEN"
    forbidden = "FORBIDDEN"
    unauthenticated = "UNAUTHENTICATED"
    unavailable = "UNAVAILABLE"


class AuthError(Exception):
    """
    Base class for auth-core failures.

    `message` is what external callers see. Diagnostic detail belongs in the
    exception chain (`raise ... from`) and in logs, never in `message`.
    """

    code: ErrorCode
    default_message: str = "Request failed"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_dict(self) -> dict[str, dict[str, str]]:
        return {"error": {"code": self.code.value, "message": self.message}}


class ConflictError(AuthError):
    code = ErrorCode.conflict
    default_message = "Resource already exists"


class NotFoundError(AuthError):
    code = ErrorCode.not_found
    default_message = "Resource not found"


class InvalidCredentialsError(AuthError):
    code = ErrorCode.invalid_credentials
    default_message = "Invalid credentials"


class InvalidTokenError(AuthError):
    code = ErrorCode.invalid_token
    default_message = "Invalid token"


class ForbiddenError(AuthError):
    code = ErrorCode.forbidden
    default_message = "Insufficient permissions"


class UnauthenticatedError(AuthError):
    code = ErrorCode.unauthenticated
    default_message = "Authentication required"


class UnavailableError(AuthError):
    code = ErrorCode.unavailable
    default_message = "Service temporarily unavailable"


# --- Module Notes -----------------------------------------------------------
# HTTP status mapping lives in `api.exception_handlers`; this module stays
# framework-free so the gate and services can be used outside FastAPI.
