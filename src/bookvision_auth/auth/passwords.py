"""
bookvision_auth.auth.passwords

Password hashing helpers (bcrypt).

Responsibilities:
- Hash plaintext passwords with a per-record random salt.
- Verify plaintext against a stored hash without raising on malformed hashes.

Only the credential store imports this module.
"""

from __future__ import annotations

import bcrypt

# bcrypt ignores input beyond 72 bytes and recent releases raise on it; truncate explicitly.
_BCRYPT_MAX_BYTES = 72


def _encode(plain: str) -> bytes:
    return plain.encode("utf-8")[:_BCRYPT_MAX_BYTES]


def hash_password(plain: str, *, rounds: int = 12) -> str:
    return bcrypt.hashpw(_encode(plain), bcrypt.gensalt(rounds=rounds)).decode("utf-8")


def verify_password(plain: str, hashed: str) -> bool:
    try:
        return bcrypt.checkpw(_encode(plain), hashed.encode("utf-8"))
    except (ValueError, TypeError):
        return False


# --- Module Notes -----------------------------------------------------------
# Both functions are CPU-bound; async callers run them via `asyncio.to_thread`.
