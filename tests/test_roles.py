from __future__ import annotations

from itertools import combinations

import pytest

from backend.app.services.auth.principal import Principal
from backend.app.services.auth.roles import Role, authorize

ROLE_SETS = [set(combo) for size in range(len(Role) + 1) for combo in combinations(Role, size)]


def _principal(role: Role) -> Principal:
    return Principal(id="507f1f77bcf86cd799439011", role=role, email="a@example.com", name="A")


@pytest.mark.parametrize("role", list(Role))
@pytest.mark.parametrize("allowed", ROLE_SETS, ids=lambda s: "+".join(sorted(r.value for r in s)) or "none")
def test_authorize_allows_only_listed_roles(role: Role, allowed) -> None:
    decision = authorize(_principal(role), allowed)
    assert decision.allowed is (role in allowed)


def test_missing_principal_is_denied() -> None:
    decision = authorize(None, [Role.ADMIN, Role.SUPERADMIN])
    assert not decision.allowed


def test_denial_lists_allowed_roles() -> None:
    decision = authorize(_principal(Role.MODERATOR), [Role.ADMIN, Role.SUPERADMIN])
    assert decision.details == "Requires one of the following roles: admin, superadmin"


def test_allow_has_no_details() -> None:
    assert authorize(_principal(Role.ADMIN), [Role.ADMIN]).details is None


@pytest.mark.parametrize("value", ["owner", "", None, "SUPERADMIN", 1])
def test_parse_rejects_unknown_roles(value) -> None:
    with pytest.raises(ValueError):
        Role.parse(value)


def test_parse_accepts_known_values() -> None:
    assert Role.parse("moderator") is Role.MODERATOR
    assert Role.parse(Role.ADMIN) is Role.ADMIN
