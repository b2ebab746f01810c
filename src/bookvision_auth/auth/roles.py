"""
bookvision_auth.auth.roles

Role hierarchy and access evaluation.

Responsibilities:
- Define the ordered set of roles with integer privilege levels.
- Decide whether a held role satisfies a required role.
"""

from __future__ import annotations

import enum


class Role(enum.StrEnum):
    # Values are persisted and embedded in tokens; treat as stable API contract.
    user = "user"
    moderator = "moderator"
    admin = "admin"

    @property
    def level(self) -> int:
        return _LEVELS[self]


_LEVELS: dict[Role, int] = {
    Role.user: 1,
    Role.moderator: 2,
    Role.admin: 3,
}


def has_access(held: Role, required: Role) -> bool:
    """
    Admin satisfies every requirement, moderator everything except admin,
    user only a user requirement.
    """

    return held.level >= required.level


# --- Module Notes -----------------------------------------------------------
# Route declarations name the minimum role (see `auth.deps.require_role`); no
# other module compares roles directly.
