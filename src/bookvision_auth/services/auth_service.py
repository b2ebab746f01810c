"""
bookvision_auth.services.auth_service

Authentication use cases (the only component that talks to both the credential
store and the token service).

Responsibilities:
- Register and log in users, returning the public view plus a fresh token.
- Refresh and validate tokens, collapsing every failure into InvalidTokenError.
- Read and partially update user profiles.
"""

from __future__ import annotations

from dataclasses import replace

from bookvision_auth.auth.jwt import Claims, TokenService
from bookvision_auth.auth.models import (
    AuthResult,
    LoginRequest,
    NewUser,
    Principal,
    RegisterRequest,
    UpdateProfileRequest,
    UserProfile,
)
from bookvision_auth.auth.roles import Role
from bookvision_auth.errors import (
    ConflictError,
    InvalidCredentialsError,
    InvalidTokenError,
    NotFoundError,
)
from bookvision_auth.observability.logging import get_logger
from bookvision_auth.services.credential_store import CredentialStore
from bookvision_auth.settings import UsernameChangePolicy

log = get_logger(__name__)

_NON_NULLABLE_FIELDS = ("username", "role", "profile_visibility", "activity_visibility")


class AuthService:
    def __init__(
        self,
        *,
        store: CredentialStore,
        tokens: TokenService,
        username_policy: UsernameChangePolicy = UsernameChangePolicy.verify,
    ) -> None:
        self._store = store
        self._tokens = tokens
        self._username_policy = username_policy

    async def register(self, request: RegisterRequest) -> AuthResult:
        # Fast-path rejection only; the store's UNIQUE constraint decides races.
        try:
            await self._store.get_by_username(request.username)
        except NotFoundError:
            pass
        else:
            log.info("register_rejected", reason="username_taken")
            raise ConflictError(f"User with username {request.username} already exists")

        user = await self._store.create(
            NewUser(
                username=request.username,
                password=request.password,
                role=Role.user,
                email=request.email,
            )
        )
        token = self._tokens.generate_token(user)
        log.info("user_registered", user_id=user.id)
        return AuthResult(user=UserProfile.from_user(user), token=token)

    async def login(self, request: LoginRequest) -> AuthResult:
        try:
            user = await self._store.verify_password(request.username, request.password)
        except (NotFoundError, InvalidCredentialsError) as e:
            # Internal reason is logged only; callers get one uniform failure.
            log.info("login_failed", reason=type(e).__name__)
            raise InvalidCredentialsError() from e

        token = self._tokens.generate_token(user)
        log.info("login_succeeded", user_id=user.id)
        return AuthResult(user=UserProfile.from_user(user), token=token)

    def refresh_token(self, token: str) -> str:
        try:
            return self._tokens.refresh_token(token)
        except InvalidTokenError as e:
            log.info("token_refresh_rejected", reason=str(e))
            raise InvalidTokenError() from e

    def validate_token(self, token: str) -> Claims:
        try:
            return self._tokens.validate_token(token)
        except InvalidTokenError as e:
            raise InvalidTokenError() from e

    async def get_profile(self, user_id: str) -> UserProfile:
        user = await self._store.get_by_id(user_id)
        return UserProfile.from_user(user)

    async def update_profile(self, user_id: str, request: UpdateProfileRequest) -> UserProfile:
        user = await self._store.get_by_id(user_id)

        changes = request.model_dump(include=request.model_fields_set)
        # An explicit null for a non-nullable field leaves it untouched.
        for key in _NON_NULLABLE_FIELDS:
            if changes.get(key) is None:
                changes.pop(key, None)

        new_username = changes.get("username")
        if new_username is not None and new_username != user.username:
            await self._check_username_available(new_username, user_id)

        updated = await self._store.update(replace(user, **changes))
        return UserProfile.from_user(updated)

    async def logout(self, principal: Principal) -> None:
        # Stateless tokens: the client discards its copy; the token stays valid until exp.
        log.info("logout", user_id=principal.user_id)

    async def _check_username_available(self, username: str, user_id: str) -> None:
        if self._username_policy is UsernameChangePolicy.store_only:
            return
        try:
            holder = await self._store.get_by_username(username)
        except NotFoundError:
            return
        if holder.id != user_id:
            raise ConflictError(f"User with username {username} already exists")


# --- Module Notes -----------------------------------------------------------
# UnavailableError from the store is never caught here; it reaches the caller as-is.
