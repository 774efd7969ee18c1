import pytest

from lawnops.permissions import (
    Capability,
    StaffRole,
    can_view_gate_code,
    can_view_money,
    capabilities_for,
    has_capability,
    parse_role,
    require_capability,
)
from lawnops.shared.errors import PermissionDeniedError


@pytest.mark.parametrize(
    "role, expected",
    [
        (StaffRole.CREW_MEMBER, False),
        (StaffRole.STAFF, False),
        (StaffRole.TEAM_LEADER, True),
        (StaffRole.MANAGER, True),
        (StaffRole.OWNER, True),
    ],
)
def test_money_and_gate_code_visibility(role, expected):
    assert can_view_money(role) is expected
    assert can_view_gate_code(role) is expected


def test_role_strings_are_accepted():
    assert can_view_money("owner")
    assert not can_view_gate_code("crew_member")


def test_unknown_role_has_no_capabilities():
    assert parse_role("gardener") is None
    assert capabilities_for("gardener") == frozenset()
    assert not can_view_money(None)


def test_settings_and_roles_are_limited_to_management():
    for role in (StaffRole.MANAGER, StaffRole.OWNER):
        assert has_capability(role, Capability.MANAGE_SETTINGS)
        assert has_capability(role, Capability.MANAGE_ROLES)
    assert not has_capability(StaffRole.TEAM_LEADER, Capability.MANAGE_SETTINGS)
    assert has_capability(StaffRole.TEAM_LEADER, Capability.MANAGE_CLIENTS)


def test_require_capability_raises_for_missing_capability():
    require_capability(StaffRole.MANAGER, Capability.MANAGE_SETTINGS)
    with pytest.raises(PermissionDeniedError) as exc_info:
        require_capability(StaffRole.STAFF, Capability.MANAGE_CLIENTS)
    assert exc_info.value.status_code == 403
