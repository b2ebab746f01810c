"""
bookvision_auth.api.exception_handlers

Maps the auth error taxonomy onto HTTP responses.

Responsibilities:
- Render every `AuthError` as `{"error": {"code": ..., "message": ...}}`.
- Keep the code -> status mapping in one place.
"""

from __future__ import annotations

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette import status

from bookvision_auth.errors import AuthError, ErrorCode
from bookvision_auth.observability.logging import get_logger

log = get_logger(__name__)

ERROR_CODE_TO_STATUS: dict[ErrorCode, int] = {
    ErrorCode.conflict: status.HTTP_409_CONFLICT,
    ErrorCode.not_found: status.HTTP_404_NOT_FOUND,
    ErrorCode.invalid_credentials: status.HTTP_401_UNAUTHORIZED,
    ErrorCode.invalid_token: status.HTTP_401_UNAUTHORIZED,
    ErrorCode.forbidden: status.HTTP_403_FORBIDDEN,
    ErrorCode.unauthenticated: status.HTTP_401_UNAUTHORIZED,
    ErrorCode.unavailable: status.HTTP_503_SERVICE_UNAVAILABLE,
}


async def auth_error_handler(request: Request, exc: AuthError) -> JSONResponse:
    status_code = ERROR_CODE_TO_STATUS.get(exc.code, status.HTTP_500_INTERNAL_SERVER_ERROR)
    log.info("request_failed", code=exc.code.value, status=status_code)
    headers = None
    if status_code == status.HTTP_401_UNAUTHORIZED:
        headers = {"WWW-Authenticate": "Bearer"}
    return JSONResponse(status_code=status_code, content=exc.to_dict(), headers=headers)


def setup_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AuthError, auth_error_handler)  # type: ignore[arg-type]
