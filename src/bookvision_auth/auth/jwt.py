"""
bookvision_auth.auth.jwt

JWT issuing, validation and refresh.

Responsibilities:
- Issue HS256 identity tokens carrying user id, username and role.
- Decode and validate tokens with strict claim requirements (iss/sub/iat/nbf/exp + identity).
- Refresh still-valid tokens into new ones with a later expiry.

Note:
- Signature, algorithm and issuer checks are delegated to PyJWT. Time checks run against
  an injected clock with zero leeway so tests can move time without patching globals.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING, Any, Protocol

import jwt
from jwt import PyJWTError

from bookvision_auth.auth.models import Principal
from bookvision_auth.auth.roles import Role
from bookvision_auth.errors import InvalidTokenError

if TYPE_CHECKING:
    from bookvision_auth.settings import Settings

Clock = Callable[[], datetime]

_REQUIRED_CLAIMS = ["user_id", "username", "role", "iss", "sub", "iat", "nbf", "exp"]


def utcnow() -> datetime:
    return datetime.now(tz=UTC)


class TokenSubject(Protocol):
    id: str
    username: str
    role: Role


@dataclass(frozen=True, slots=True)
class JwtConfig:
    # Immutable after construction; shared read-only by every request.
    secret: str = field(repr=False)
    lifetime_hours: int = 24
    issuer: str = "bookvision"
    alg: str = "HS256"

    @classmethod
    def from_settings(cls, settings: Settings) -> JwtConfig:
        return cls(
            secret=settings.jwt_secret,
            lifetime_hours=settings.jwt_expires_in_hours,
            issuer=settings.jwt_issuer,
        )

    @property
    def lifetime(self) -> timedelta:
        return timedelta(hours=self.lifetime_hours)


@dataclass(frozen=True, slots=True)
class Claims:
    user_id: str
    username: str
    role: Role
    issuer: str
    subject: str
    issued_at: datetime
    not_before: datetime
    expires_at: datetime

    @property
    def principal(self) -> Principal:
        return Principal(user_id=self.user_id, username=self.username, role=self.role)

    def to_payload(self) -> dict[str, Any]:
        return {
            "user_id": self.user_id,
            "username": self.username,
            "role": self.role.value,
            "iss": self.issuer,
            "sub": self.subject,
            "iat": int(self.issued_at.timestamp()),
            "nbf": int(self.not_before.timestamp()),
            "exp": int(self.expires_at.timestamp()),
        }

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> Claims:
        try:
            claims = cls(
                user_id=_require_str(payload, "user_id"),
                username=_require_str(payload, "username"),
                role=Role(payload["role"]),
                issuer=_require_str(payload, "iss"),
                subject=_require_str(payload, "sub"),
                issued_at=_to_datetime(payload["iat"]),
                not_before=_to_datetime(payload["nbf"]),
                expires_at=_to_datetime(payload["exp"]),
            )
        except (KeyError, TypeError, ValueError, OverflowError) as e:
            raise InvalidTokenError() from e

        if claims.subject != claims.user_id:
            raise InvalidTokenError()
        if claims.expires_at <= claims.issued_at:
            raise InvalidTokenError()
        return claims


def _require_str(payload: dict[str, Any], key: str) -> str:
    value = payload[key]
    if not isinstance(value, str) or not value:
        raise ValueError(f"claim {key!r} must be a non-empty string")
    return value


def _to_datetime(value: Any) -> datetime:
    # bool is an int subclass; reject it explicitly.
    if isinstance(value, bool) or not isinstance(value, int | float):
        raise TypeError("numeric date expected")
    return datetime.fromtimestamp(int(value), tz=UTC)


class TokenService:
    """
    Stateless token issuer/validator. Pure given (config, clock, input); no locking required.
    """

    def __init__(self, config: JwtConfig, *, clock: Clock = utcnow) -> None:
        self._config = config
        self._clock = clock

    @property
    def config(self) -> JwtConfig:
        return self._config

    def generate_token(self, user: TokenSubject) -> str:
        return self._issue(user_id=user.id, username=user.username, role=user.role)

    def validate_token(self, token: str) -> Claims:
        cfg = self._config
        try:
            # Signature, algorithm allow-list, issuer and claim presence; times are checked below.
            payload = jwt.decode(
                token,
                cfg.secret,
                algorithms=[cfg.alg],
                issuer=cfg.issuer,
                options={
                    "require": _REQUIRED_CLAIMS,
                    "verify_exp": False,
                    "verify_nbf": False,
                    "verify_iat": False,
                },
            )
        except PyJWTError as e:
            raise InvalidTokenError() from e

        claims = Claims.from_payload(payload)

        now = self._clock().timestamp()
        if now < claims.not_before.timestamp():
            raise InvalidTokenError("Token not yet valid")
        if now > claims.expires_at.timestamp():
            raise InvalidTokenError("Token expired")
        return claims

    def refresh_token(self, token: str) -> str:
        # Expired tokens are rejected here; the caller has to log in again.
        claims = self.validate_token(token)
        return self._issue(
            user_id=claims.user_id,
            username=claims.username,
            role=claims.role,
            not_expiring_before=claims.expires_at,
        )

    def _issue(
        self,
        *,
        user_id: str,
        username: str,
        role: Role,
        not_expiring_before: datetime | None = None,
    ) -> str:
        # NumericDate has one-second resolution.
        now = self._clock().replace(microsecond=0)
        expires_at = now + self._config.lifetime
        if not_expiring_before is not None and expires_at <= not_expiring_before:
            # Refresh within the same second as issuance; keep the new expiry strictly later.
            expires_at = not_expiring_before + timedelta(seconds=1)

        claims = Claims(
            user_id=user_id,
            username=username,
            role=role,
            issuer=self._config.issuer,
            subject=user_id,
            issued_at=now,
            not_before=now,
            expires_at=expires_at,
        )
        return jwt.encode(claims.to_payload(), self._config.secret, algorithm=self._config.alg)


# --- Module Notes -----------------------------------------------------------
# There is no revocation list: a token stays valid until `exp` even after logout.
# Token issuing is used by `services.auth_service`; validation also by `auth.gate`.
