"""
Caller identity for API requests.

Authentication itself happens upstream; by the time a request reaches this
service the caller's role arrives in the ``X-Staff-Role`` header. It is parsed
once per request into a ``CurrentStaff`` that route handlers pass to services.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from fastapi import Header, HTTPException

from .permissions import (
    Capability,
    StaffRole,
    can_view_gate_code,
    can_view_money,
    parse_role,
    require_capability,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CurrentStaff:
    role: StaffRole
    staff_id: Optional[int] = None

    @property
    def can_view_money(self) -> bool:
        return can_view_money(self.role)

    @property
    def can_view_gate_code(self) -> bool:
        return can_view_gate_code(self.role)

    def require(self, capability: Capability) -> None:
        require_capability(self.role, capability)


async def get_current_staff(
    x_staff_role: str = Header(..., alias="X-Staff-Role"),
    x_staff_id: Optional[int] = Header(None, alias="X-Staff-Id"),
) -> CurrentStaff:
    """Resolve the caller's role from request headers"""
    role = parse_role(x_staff_role)
    if role is None:
        logger.warning(f"❌ Unknown staff role in request: {x_staff_role!r}")
        raise HTTPException(status_code=401, detail="Unknown staff role")
    return CurrentStaff(role=role, staff_id=x_staff_id)

