"""
Staff roles and what each role is allowed to do.
"""

from enum import Enum
from typing import Optional

from .shared.errors import PermissionDeniedError


class StaffRole(str, Enum):
    CREW_MEMBER = "crew_member"
    STAFF = "staff"
    TEAM_LEADER = "team_leader"
    MANAGER = "manager"
    OWNER = "owner"


class Capability(str, Enum):
    VIEW_MONEY = "view_money"
    VIEW_GATE_CODE = "view_gate_code"
    MANAGE_CLIENTS = "manage_clients"  # clients, program assignments, planned visits, jobs
    MANAGE_SETTINGS = "manage_settings"  # templates, treatment catalog, treatment programs
    MANAGE_ROLES = "manage_roles"


_LEADERSHIP = {
    Capability.VIEW_MONEY,
    Capability.VIEW_GATE_CODE,
    Capability.MANAGE_CLIENTS,
}

ROLE_CAPABILITIES: dict[StaffRole, frozenset[Capability]] = {
    StaffRole.CREW_MEMBER: frozenset(),
    StaffRole.STAFF: frozenset(),
    StaffRole.TEAM_LEADER: frozenset(_LEADERSHIP),
    StaffRole.MANAGER: frozenset(_LEADERSHIP | {Capability.MANAGE_SETTINGS, Capability.MANAGE_ROLES}),
    StaffRole.OWNER: frozenset(_LEADERSHIP | {Capability.MANAGE_SETTINGS, Capability.MANAGE_ROLES}),
}


def parse_role(role: Optional[str]) -> Optional[StaffRole]:
    """Map a role string to StaffRole. Returns None for unknown roles."""
    if not role:
        return None
    try:
        return StaffRole(role.strip().lower())
    except ValueError:
        return None


def capabilities_for(role: Optional[StaffRole | str]) -> frozenset[Capability]:
    if isinstance(role, str) and not isinstance(role, StaffRole):
        role = parse_role(role)
    if role is None:
        return frozenset()
    return ROLE_CAPABILITIES[role]


def has_capability(role: Optional[StaffRole | str], capability: Capability) -> bool:
    return capability in capabilities_for(role)


def can_view_money(role: Optional[StaffRole | str]) -> bool:
    return has_capability(role, Capability.VIEW_MONEY)


def can_view_gate_code(role: Optional[StaffRole | str]) -> bool:
    return has_capability(role, Capability.VIEW_GATE_CODE)


def require_capability(role: Optional[StaffRole | str], capability: Capability) -> None:
    """Raise PermissionDeniedError unless ``role`` grants ``capability``"""
    if not has_capability(role, capability):
        role_name = role.value if isinstance(role, StaffRole) else role
        raise PermissionDeniedError(
            f"Role '{role_name}' is not allowed to {capability.value.replace('_', ' ')}"
        )
