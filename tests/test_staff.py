import pytest

from lawnops.domain.staff.schemas import StaffCreate, StaffUpdate
from lawnops.domain.staff.service import StaffService
from lawnops.permissions import StaffRole
from lawnops.shared.errors import NotFoundError, PermissionDeniedError


@pytest.fixture
def service(db):
    return StaffService(db)


def test_manager_creates_staff(service, manager):
    staff = service.create_staff(StaffCreate(name="Lee", role=StaffRole.TEAM_LEADER), manager)
    assert staff.role == "team_leader"


def test_team_leader_cannot_manage_roles(service, staff_member, team_leader):
    with pytest.raises(PermissionDeniedError):
        service.update_staff(staff_member.id, StaffUpdate(role=StaffRole.MANAGER), team_leader)


def test_only_owner_grants_owner_role(service, staff_member, manager, owner):
    with pytest.raises(PermissionDeniedError):
        service.update_staff(staff_member.id, StaffUpdate(role=StaffRole.OWNER), manager)

    promoted = service.update_staff(staff_member.id, StaffUpdate(role=StaffRole.OWNER), owner)
    assert promoted.role == "owner"

    with pytest.raises(PermissionDeniedError):
        service.update_staff(staff_member.id, StaffUpdate(role=StaffRole.STAFF), manager)


def test_missing_staff(service, manager):
    with pytest.raises(NotFoundError):
        service.get_staff(42)
