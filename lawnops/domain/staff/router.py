"""Staff router - FastAPI endpoints for staff and roles"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ...auth import CurrentStaff, get_current_staff
from ...database import get_db
from ...models import Staff
from ...permissions import can_view_gate_code, can_view_money
from .schemas import StaffCreate, StaffResponse, StaffUpdate
from .service import StaffService

router = APIRouter(prefix="/staff", tags=["Staff"])


def get_staff_service(db: Session = Depends(get_db)) -> StaffService:
    """Dependency injection for StaffService"""
    return StaffService(db)


def to_staff_response(staff: Staff) -> StaffResponse:
    return StaffResponse(
        id=staff.id,
        name=staff.name,
        phone=staff.phone,
        role=staff.role,
        canViewMoney=can_view_money(staff.role),
        canViewGateCode=can_view_gate_code(staff.role),
        created_at=staff.created_at,
    )


@router.get("", response_model=list[StaffResponse])
async def get_staff_list(
    current: CurrentStaff = Depends(get_current_staff),
    service: StaffService = Depends(get_staff_service),
):
    return [to_staff_response(s) for s in service.get_staff_list()]


@router.get("/{staff_id}", response_model=StaffResponse)
async def get_staff(
    staff_id: int,
    current: CurrentStaff = Depends(get_current_staff),
    service: StaffService = Depends(get_staff_service),
):
    return to_staff_response(service.get_staff(staff_id))


@router.post("", response_model=StaffResponse, status_code=201)
async def create_staff(
    data: StaffCreate,
    current: CurrentStaff = Depends(get_current_staff),
    service: StaffService = Depends(get_staff_service),
):
    return to_staff_response(service.create_staff(data, current))


@router.put("/{staff_id}", response_model=StaffResponse)
async def update_staff(
    staff_id: int,
    data: StaffUpdate,
    current: CurrentStaff = Depends(get_current_staff),
    service: StaffService = Depends(get_staff_service),
):
    """Update a staff member (role changes are manager/owner only)"""
    return to_staff_response(service.update_staff(staff_id, data, current))
