"""
bookvision_auth.api.routers.auth

Auth endpoints.

Responsibilities:
- Registration, login and token refresh (public).
- Profile read/update and logout (bearer token required).
- Session probe for tiered-visibility clients (bearer token optional).
- Moderator lookup of other users' public profiles (role-gated).
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Header
from pydantic import BaseModel
from starlette.status import HTTP_201_CREATED

from bookvision_auth.api.deps import auth_service_dep
from bookvision_auth.auth.deps import get_optional_principal, get_principal, require_role
from bookvision_auth.auth.gate import extract_bearer
from bookvision_auth.auth.models import (
    AuthResult,
    LoginRequest,
    Principal,
    RegisterRequest,
    UpdateProfileRequest,
    UserProfile,
)
from bookvision_auth.auth.roles import Role
from bookvision_auth.services.auth_service import AuthService

router = APIRouter(prefix="/api/v1/auth", tags=["auth"])


class TokenResponse(BaseModel):
    token: str


class ProfileResponse(BaseModel):
    user: UserProfile


class MessageResponse(BaseModel):
    message: str


class SessionResponse(BaseModel):
    authenticated: bool
    user_id: str | None = None
    username: str | None = None
    role: Role | None = None


@router.post("/register", response_model=AuthResult, status_code=HTTP_201_CREATED)
async def register(
    body: RegisterRequest,
    service: AuthService = Depends(auth_service_dep),
) -> AuthResult:
    return await service.register(body)


@router.post("/login", response_model=AuthResult)
async def login(
    body: LoginRequest,
    service: AuthService = Depends(auth_service_dep),
) -> AuthResult:
    return await service.login(body)


@router.post("/refresh", response_model=TokenResponse)
async def refresh(
    authorization: str | None = Header(default=None),
    service: AuthService = Depends(auth_service_dep),
) -> TokenResponse:
    token = extract_bearer(authorization)
    return TokenResponse(token=service.refresh_token(token))


@router.get("/profile", response_model=ProfileResponse)
async def get_profile(
    principal: Principal = Depends(get_principal),
    service: AuthService = Depends(auth_service_dep),
) -> ProfileResponse:
    return ProfileResponse(user=await service.get_profile(principal.user_id))


@router.put("/profile", response_model=ProfileResponse)
async def update_profile(
    body: UpdateProfileRequest,
    principal: Principal = Depends(get_principal),
    service: AuthService = Depends(auth_service_dep),
) -> ProfileResponse:
    """
    Partial update of the caller's own profile.

    `role` is accepted here, including escalation to `admin`, and takes effect on the
    next login or refresh since the role travels in the token. Deployments that need
    self-promotion blocked should gate the `role` field behind `require_role(Role.admin)`.
    """

    return ProfileResponse(user=await service.update_profile(principal.user_id, body))


@router.post("/logout", response_model=MessageResponse)
async def logout(
    principal: Principal = Depends(get_principal),
    service: AuthService = Depends(auth_service_dep),
) -> MessageResponse:
    await service.logout(principal)
    return MessageResponse(message="Logged out successfully")


@router.get("/session", response_model=SessionResponse)
async def session(
    principal: Principal | None = Depends(get_optional_principal),
) -> SessionResponse:
    if principal is None:
        return SessionResponse(authenticated=False)
    return SessionResponse(
        authenticated=True,
        user_id=principal.user_id,
        username=principal.username,
        role=principal.role,
    )


@router.get("/users/{user_id}", response_model=ProfileResponse)
async def get_user(
    user_id: str,
    _: Principal = Depends(require_role(Role.moderator)),
    service: AuthService = Depends(auth_service_dep),
) -> ProfileResponse:
    return ProfileResponse(user=await service.get_profile(user_id))


# --- Module Notes -----------------------------------------------------------
# Routes never build error bodies; raised `AuthError`s go through `api.exception_handlers`.
