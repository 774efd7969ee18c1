"""Staff service - team members and their roles"""

import logging

from sqlalchemy.orm import Session

from ...auth import CurrentStaff
from ...models import Staff
from ...permissions import Capability, StaffRole
from ...shared.errors import NotFoundError, PermissionDeniedError
from .repository import StaffRepository
from .schemas import StaffCreate, StaffUpdate

logger = logging.getLogger(__name__)


class StaffService:
    """Service layer for staff management"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = StaffRepository()

    def get_staff_list(self) -> list[Staff]:
        return self.repo.get_staff_list(self.db)

    def get_staff(self, staff_id: int) -> Staff:
        staff = self.repo.get_staff_by_id(self.db, staff_id)
        if not staff:
            raise NotFoundError("Staff not found")
        return staff

    def create_staff(self, data: StaffCreate, current: CurrentStaff) -> Staff:
        current.require(Capability.MANAGE_ROLES)
        self._check_owner_grant(data.role, current)

        staff = self.repo.create_staff(
            self.db, name=data.name, phone=data.phone, role=data.role.value
        )
        logger.info(f"👤 Created staff {staff.id} ({staff.name}) with role {staff.role}")
        return staff

    def update_staff(self, staff_id: int, data: StaffUpdate, current: CurrentStaff) -> Staff:
        """Update a staff member's details or role"""
        current.require(Capability.MANAGE_ROLES)
        staff = self.get_staff(staff_id)

        updates = {}
        if data.name is not None:
            updates["name"] = data.name
        if data.phone is not None:
            updates["phone"] = data.phone
        if data.role is not None and data.role.value != staff.role:
            self._check_owner_grant(data.role, current)
            # Demoting an owner is also an owner-only action
            if staff.role == StaffRole.OWNER.value:
                self._check_owner_grant(StaffRole.OWNER, current)
            logger.info(f"🔐 Role change for staff {staff.id}: {staff.role} → {data.role.value}")
            updates["role"] = data.role.value

        return self.repo.update_staff(self.db, staff, **updates)

    @staticmethod
    def _check_owner_grant(role: StaffRole, current: CurrentStaff) -> None:
        if role == StaffRole.OWNER and current.role != StaffRole.OWNER:
            raise PermissionDeniedError("Only an owner can grant or revoke the owner role")
