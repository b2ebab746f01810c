"""
tests.test_roles

Access control evaluator: the full held/required role table.
"""

from __future__ import annotations

import pytest

from bookvision_auth.auth.roles import Role, has_access

ACCESS_TABLE = [
    (Role.admin, Role.admin, True),
    (Role.admin, Role.moderator, True),
    (Role.admin, Role.user, True),
    (Role.moderator, Role.admin, False),
    (Role.moderator, Role.moderator, True),
    (Role.moderator, Role.user, True),
    (Role.user, Role.admin, False),
    (Role.user, Role.moderator, False),
    (Role.user, Role.user, True),
]


@pytest.mark.parametrize(("held", "required", "expected"), ACCESS_TABLE)
def test_has_access_table(held: Role, required: Role, expected: bool) -> None:
    assert has_access(held, required) is expected


def test_table_covers_every_pair() -> None:
    pairs = {(held, required) for held, required, _ in ACCESS_TABLE}
    assert pairs == {(h, r) for h in Role for r in Role}


def test_privilege_levels_are_strictly_ordered() -> None:
    assert Role.user.level < Role.moderator.level < Role.admin.level
    assert [r.level for r in Role] == [1, 2, 3]


def test_role_values_are_stable() -> None:
    # Persisted in the users table and embedded in tokens.
    assert [r.value for r in Role] == ["user", "moderator", "admin"]
    assert Role("moderator") is Role.moderator
