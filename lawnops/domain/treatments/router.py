"""Treatment router - treatment catalog and treatment program settings"""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...auth import CurrentStaff, get_current_staff
from ...database import get_db
from ...models import TreatmentProgram, TreatmentProgramSchedule, TreatmentType
from .schemas import (
    ScheduleEntryCreate,
    ScheduleEntryResponse,
    TreatmentProgramCreate,
    TreatmentProgramDetailResponse,
    TreatmentProgramResponse,
    TreatmentProgramUpdate,
    TreatmentTypeCreate,
    TreatmentTypeResponse,
    TreatmentTypeUpdate,
)
from .service import TreatmentService

router = APIRouter(tags=["Treatments"])


def get_treatment_service(db: Session = Depends(get_db)) -> TreatmentService:
    """Dependency injection for TreatmentService"""
    return TreatmentService(db)


def to_treatment_type_response(treatment_type: TreatmentType) -> TreatmentTypeResponse:
    return TreatmentTypeResponse(
        id=treatment_type.id,
        name=treatment_type.name,
        category=treatment_type.category,
        defaultNotes=treatment_type.default_notes,
        isActive=treatment_type.is_active,
    )


def to_schedule_entry_response(entry: TreatmentProgramSchedule) -> ScheduleEntryResponse:
    return ScheduleEntryResponse(
        id=entry.id,
        treatmentProgramId=entry.treatment_program_id,
        treatmentTypeId=entry.treatment_type_id,
        treatmentTypeName=entry.treatment_type.name if entry.treatment_type else None,
        month=entry.month,
        isFlexible=entry.is_flexible,
        visitNumber=entry.visit_number,
        quantity=entry.quantity,
        instructions=entry.instructions,
    )


def to_treatment_program_response(program: TreatmentProgram) -> TreatmentProgramResponse:
    return TreatmentProgramResponse(
        id=program.id,
        name=program.name,
        description=program.description,
        isActive=program.is_active,
    )


# ============================================================================
# TREATMENT TYPES
# ============================================================================


@router.get("/treatment-types", response_model=list[TreatmentTypeResponse])
async def get_treatment_types(
    includeInactive: bool = Query(False),
    current: CurrentStaff = Depends(get_current_staff),
    service: TreatmentService = Depends(get_treatment_service),
):
    return [to_treatment_type_response(t) for t in service.get_treatment_types(includeInactive)]


@router.post("/treatment-types", response_model=TreatmentTypeResponse, status_code=201)
async def create_treatment_type(
    data: TreatmentTypeCreate,
    current: CurrentStaff = Depends(get_current_staff),
    service: TreatmentService = Depends(get_treatment_service),
):
    return to_treatment_type_response(service.create_treatment_type(data, current))


@router.put("/treatment-types/{treatment_type_id}", response_model=TreatmentTypeResponse)
async def update_treatment_type(
    treatment_type_id: int,
    data: TreatmentTypeUpdate,
    current: CurrentStaff = Depends(get_current_staff),
    service: TreatmentService = Depends(get_treatment_service),
):
    return to_treatment_type_response(
        service.update_treatment_type(treatment_type_id, data, current)
    )


# ============================================================================
# TREATMENT PROGRAMS
# ============================================================================


@router.get("/treatment-programs", response_model=list[TreatmentProgramResponse])
async def get_treatment_programs(
    current: CurrentStaff = Depends(get_current_staff),
    service: TreatmentService = Depends(get_treatment_service),
):
    """Active treatment programs"""
    return [to_treatment_program_response(p) for p in service.get_treatment_programs()]


@router.get("/treatment-programs/{program_id}", response_model=TreatmentProgramDetailResponse)
async def get_treatment_program(
    program_id: int,
    current: CurrentStaff = Depends(get_current_staff),
    service: TreatmentService = Depends(get_treatment_service),
):
    """Treatment program with its schedule grouped by month and flexible entries"""
    program = service.get_treatment_program(program_id)
    by_month, flexible = service.group_schedule(program.schedule)
    return TreatmentProgramDetailResponse(
        id=program.id,
        name=program.name,
        description=program.description,
        isActive=program.is_active,
        schedule=[to_schedule_entry_response(e) for e in program.schedule],
        byMonth={
            month: [to_schedule_entry_response(e) for e in entries]
            for month, entries in by_month.items()
        },
        flexible=[to_schedule_entry_response(e) for e in flexible],
    )


@router.post("/treatment-programs", response_model=TreatmentProgramResponse, status_code=201)
async def create_treatment_program(
    data: TreatmentProgramCreate,
    current: CurrentStaff = Depends(get_current_staff),
    service: TreatmentService = Depends(get_treatment_service),
):
    return to_treatment_program_response(service.create_treatment_program(data, current))


@router.put("/treatment-programs/{program_id}", response_model=TreatmentProgramResponse)
async def update_treatment_program(
    program_id: int,
    data: TreatmentProgramUpdate,
    current: CurrentStaff = Depends(get_current_staff),
    service: TreatmentService = Depends(get_treatment_service),
):
    return to_treatment_program_response(
        service.update_treatment_program(program_id, data, current)
    )


@router.post(
    "/treatment-programs/{program_id}/schedule",
    response_model=ScheduleEntryResponse,
    status_code=201,
)
async def add_schedule_entry(
    program_id: int,
    data: ScheduleEntryCreate,
    current: CurrentStaff = Depends(get_current_staff),
    service: TreatmentService = Depends(get_treatment_service),
):
    """Add a month-anchored or flexible entry to a treatment program"""
    entry = service.add_schedule_entry(
        program_id,
        data.treatmentTypeId,
        data.month,
        data.isFlexible,
        data.visitNumber,
        data.instructions,
        current,
        quantity=data.quantity,
    )
    return to_schedule_entry_response(entry)


@router.delete("/treatment-programs/schedule/{entry_id}")
async def remove_schedule_entry(
    entry_id: int,
    current: CurrentStaff = Depends(get_current_staff),
    service: TreatmentService = Depends(get_treatment_service),
):
    return service.remove_schedule_entry(entry_id, current)
