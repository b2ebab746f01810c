"""
tests.test_auth_service

Auth service against a real SQLite-backed credential store.
"""

from __future__ import annotations

import asyncio

import pytest

from bookvision_auth.auth.jwt import TokenService
from bookvision_auth.auth.models import (
    LoginRequest,
    NewUser,
    Principal,
    RegisterRequest,
    UpdateProfileRequest,
    User,
)
from bookvision_auth.auth.roles import Role
from bookvision_auth.db.credential_store import SqlCredentialStore
from bookvision_auth.errors import (
    ConflictError,
    InvalidCredentialsError,
    InvalidTokenError,
    NotFoundError,
    UnavailableError,
)
from bookvision_auth.services.auth_service import AuthService
from bookvision_auth.settings import UsernameChangePolicy

from .conftest import T0, FakeClock


async def _register(service: AuthService, username: str = "alice", password: str = "pwd123456"):
    return await service.register(RegisterRequest(username=username, password=password))


class TestRegister:
    @pytest.mark.asyncio
    async def test_returns_public_view_and_valid_token(
        self, service: AuthService, tokens: TokenService
    ) -> None:
        result = await service.register(
            RegisterRequest(username="alice", password="pwd123456", email="alice@example.com")
        )

        assert result.user.username == "alice"
        assert result.user.email == "alice@example.com"
        assert result.user.role is Role.user
        dumped = result.user.model_dump()
        assert "password" not in dumped
        assert "password_hash" not in dumped

        claims = tokens.validate_token(result.token)
        assert claims.user_id == result.user.id
        assert claims.role is Role.user

    @pytest.mark.asyncio
    async def test_duplicate_username_conflicts(self, service: AuthService) -> None:
        await _register(service)
        with pytest.raises(ConflictError):
            await _register(service, password="different-pass")

    @pytest.mark.asyncio
    async def test_concurrent_registration_has_exactly_one_winner(
        self, service: AuthService
    ) -> None:
        n = 8
        results = await asyncio.gather(
            *(_register(service, "racer") for _ in range(n)), return_exceptions=True
        )

        successes = [r for r in results if not isinstance(r, BaseException)]
        failures = [r for r in results if isinstance(r, BaseException)]
        assert len(successes) == 1
        assert len(failures) == n - 1
        assert all(isinstance(f, ConflictError) for f in failures)

    @pytest.mark.asyncio
    async def test_store_outage_during_lookup_is_not_treated_as_absent(
        self, tokens: TokenService
    ) -> None:
        class DownStore:
            created = False

            async def get_by_username(self, username: str) -> User:
                raise UnavailableError()

            async def create(self, new_user: NewUser) -> User:
                self.created = True
                raise AssertionError("create must not be reached")

        store = DownStore()
        service = AuthService(store=store, tokens=tokens)  # type: ignore[arg-type]
        with pytest.raises(UnavailableError):
            await _register(service)
        assert store.created is False


class TestLogin:
    @pytest.mark.asyncio
    async def test_success(self, service: AuthService, tokens: TokenService) -> None:
        registered = await _register(service)
        result = await service.login(LoginRequest(username="alice", password="pwd123456"))

        assert result.user.id == registered.user.id
        assert tokens.validate_token(result.token).username == "alice"

    @pytest.mark.asyncio
    async def test_wrong_password_and_unknown_user_are_indistinguishable(
        self, service: AuthService
    ) -> None:
        await _register(service)

        with pytest.raises(InvalidCredentialsError) as wrong_password:
            await service.login(LoginRequest(username="alice", password="wrong-password"))
        with pytest.raises(InvalidCredentialsError) as unknown_user:
            await service.login(LoginRequest(username="mallory", password="pwd123456"))

        assert type(wrong_password.value) is type(unknown_user.value)
        assert wrong_password.value.message == unknown_user.value.message
        assert wrong_password.value.to_dict() == unknown_user.value.to_dict()


class TestTokens:
    @pytest.mark.asyncio
    async def test_refresh_pass_through(
        self, service: AuthService, clock: FakeClock
    ) -> None:
        registered = await _register(service)
        clock.advance(60)
        new_token = service.refresh_token(registered.token)

        old = service.validate_token(registered.token)
        new = service.validate_token(new_token)
        assert new.expires_at > old.expires_at
        assert new.user_id == old.user_id

    @pytest.mark.asyncio
    async def test_failures_are_generic_invalid_token(
        self, service: AuthService, clock: FakeClock
    ) -> None:
        registered = await _register(service)
        clock.advance(24 * 3600 + 1)

        with pytest.raises(InvalidTokenError) as refresh_err:
            service.refresh_token(registered.token)
        with pytest.raises(InvalidTokenError) as validate_err:
            service.validate_token("garbage")

        assert refresh_err.value.message == validate_err.value.message == "Invalid token"

    @pytest.mark.asyncio
    async def test_logout_does_not_invalidate_token(self, service: AuthService) -> None:
        registered = await _register(service)
        principal = Principal(
            user_id=registered.user.id, username="alice", role=registered.user.role
        )

        await service.logout(principal)

        assert service.validate_token(registered.token).user_id == registered.user.id


class TestProfile:
    @pytest.mark.asyncio
    async def test_get_profile(self, service: AuthService) -> None:
        registered = await _register(service)
        profile = await service.get_profile(registered.user.id)
        assert profile == registered.user

    @pytest.mark.asyncio
    async def test_get_profile_unknown_user(self, service: AuthService) -> None:
        with pytest.raises(NotFoundError):
            await service.get_profile("00000000-0000-0000-0000-000000000000")

    @pytest.mark.asyncio
    async def test_partial_update_touches_only_given_fields(self, service: AuthService) -> None:
        registered = await _register(service)

        updated = await service.update_profile(
            registered.user.id, UpdateProfileRequest(avatar_url="https://img.example/a.png")
        )

        assert updated.avatar_url == "https://img.example/a.png"
        assert updated.username == "alice"
        assert updated.role is Role.user
        assert updated.id == registered.user.id
        assert updated.created_at == registered.user.created_at
        assert updated.profile_visibility == registered.user.profile_visibility

    @pytest.mark.asyncio
    async def test_explicit_null_clears_avatar_but_not_username(
        self, service: AuthService
    ) -> None:
        registered = await _register(service)
        await service.update_profile(
            registered.user.id, UpdateProfileRequest(avatar_url="https://img.example/a.png")
        )

        updated = await service.update_profile(
            registered.user.id,
            UpdateProfileRequest.model_validate({"avatar_url": None, "username": None}),
        )

        assert updated.avatar_url is None
        assert updated.username == "alice"

    @pytest.mark.asyncio
    async def test_explicit_null_leaves_visibility_untouched(self, service: AuthService) -> None:
        registered = await _register(service)

        updated = await service.update_profile(
            registered.user.id,
            UpdateProfileRequest.model_validate(
                {"profile_visibility": None, "activity_visibility": None}
            ),
        )

        assert updated.profile_visibility == "public"
        assert updated.activity_visibility == "public"

    @pytest.mark.asyncio
    async def test_role_change_through_update(self, service: AuthService) -> None:
        registered = await _register(service)
        updated = await service.update_profile(
            registered.user.id, UpdateProfileRequest(role=Role.moderator)
        )
        assert updated.role is Role.moderator

    @pytest.mark.asyncio
    async def test_rename(self, service: AuthService) -> None:
        registered = await _register(service)
        updated = await service.update_profile(
            registered.user.id, UpdateProfileRequest(username="alice2")
        )
        assert updated.username == "alice2"
        assert (await service.get_profile(registered.user.id)).username == "alice2"

    @pytest.mark.asyncio
    async def test_update_unknown_user(self, service: AuthService) -> None:
        with pytest.raises(NotFoundError):
            await service.update_profile("missing", UpdateProfileRequest(avatar_url="x"))

    @pytest.mark.asyncio
    @pytest.mark.parametrize("policy", list(UsernameChangePolicy))
    async def test_rename_to_taken_username_conflicts_under_every_policy(
        self,
        store: SqlCredentialStore,
        tokens: TokenService,
        policy: UsernameChangePolicy,
    ) -> None:
        service = AuthService(store=store, tokens=tokens, username_policy=policy)
        await _register(service, "alice")
        bob = await _register(service, "bob")

        with pytest.raises(ConflictError):
            await service.update_profile(bob.user.id, UpdateProfileRequest(username="alice"))
        assert (await service.get_profile(bob.user.id)).username == "bob"

    @pytest.mark.asyncio
    async def test_verify_policy_checks_before_writing(self, tokens: TokenService) -> None:
        class RecordingStore:
            def __init__(self) -> None:
                self.updates: list[User] = []
                self.alice = User(id="u-a", username="alice", role=Role.user, created_at=T0)
                self.bob = User(id="u-b", username="bob", role=Role.user, created_at=T0)

            async def get_by_id(self, user_id: str) -> User:
                return self.bob

            async def get_by_username(self, username: str) -> User:
                if username == "alice":
                    return self.alice
                raise NotFoundError()

            async def update(self, user: User) -> User:
                self.updates.append(user)
                return user

        store = RecordingStore()
        service = AuthService(
            store=store,  # type: ignore[arg-type]
            tokens=tokens,
            username_policy=UsernameChangePolicy.verify,
        )
        with pytest.raises(ConflictError):
            await service.update_profile("u-b", UpdateProfileRequest(username="alice"))
        assert store.updates == []
