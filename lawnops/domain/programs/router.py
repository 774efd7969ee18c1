"""Program router - templates, client program assignments and planned visits"""

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...auth import CurrentStaff, get_current_staff
from ...database import get_db
from ...models import (
    ClientProgram,
    ClientProgramService,
    ClientProgramTreatment,
    ProgramTemplate,
    ProgramTemplateTreatment,
)
from ...services.service_distribution import Cadence, MonthlyDistribution
from .schemas import (
    AssignProgramRequest,
    ClientProgramResponse,
    ClientProgramUpdate,
    CompleteTreatmentRequest,
    FulfillWithJobRequest,
    MonthlyDistributionUpdate,
    ProgramServiceCreate,
    ProgramServiceResponse,
    ProgramServiceUpdate,
    ProgramTemplateCreate,
    ProgramTemplateDetailResponse,
    ProgramTemplateResponse,
    ProgramTemplateUpdate,
    ProgramTreatmentCreate,
    ProgramTreatmentResponse,
    ProgramTreatmentUpdate,
    TemplateTreatmentCreate,
    TemplateTreatmentResponse,
)
from .service import ProgramService

router = APIRouter(tags=["Programs"])


def get_program_service(db: Session = Depends(get_db)) -> ProgramService:
    """Dependency injection for ProgramService"""
    return ProgramService(db)


def to_template_treatment_response(treatment: ProgramTemplateTreatment) -> TemplateTreatmentResponse:
    return TemplateTreatmentResponse(
        id=treatment.id,
        programTemplateId=treatment.program_template_id,
        treatmentTypeId=treatment.treatment_type_id,
        treatmentTypeName=treatment.treatment_type.name if treatment.treatment_type else None,
        month=treatment.month,
        quantity=treatment.quantity,
        instructions=treatment.instructions,
    )


def to_template_response(
    template: ProgramTemplate, current: CurrentStaff, detail: bool = False
) -> ProgramTemplateResponse:
    fields = dict(
        id=template.id,
        name=template.name,
        description=template.description,
        servicesPerYear=template.services_per_year,
        servicesPerMonth=ProgramService.template_months(template),
        defaultCadence=template.default_cadence,
        pricePerVisit=template.price_per_visit if current.can_view_money else None,
        isActive=template.is_active,
    )
    if detail:
        return ProgramTemplateDetailResponse(
            **fields,
            treatments=[to_template_treatment_response(t) for t in template.treatments],
        )
    return ProgramTemplateResponse(**fields)


def to_client_program_response(client_program: ClientProgram) -> ClientProgramResponse:
    return ClientProgramResponse(
        id=client_program.id,
        clientId=client_program.client_id,
        templateId=client_program.program_template_id,
        templateName=client_program.template.name if client_program.template else None,
        startDate=client_program.start_date,
        cadence=ProgramService.effective_cadence(client_program),
        status=client_program.status,
        customName=client_program.custom_name,
        created_at=client_program.created_at,
    )


def to_program_service_response(service: ClientProgramService) -> ProgramServiceResponse:
    return ProgramServiceResponse(
        id=service.id,
        clientProgramId=service.client_program_id,
        targetMonth=service.target_month,
        targetYear=service.target_year,
        scheduledDate=service.scheduled_date,
        jobId=service.job_id,
        status=service.status,
    )


def to_program_treatment_response(treatment: ClientProgramTreatment) -> ProgramTreatmentResponse:
    return ProgramTreatmentResponse(
        id=treatment.id,
        clientProgramId=treatment.client_program_id,
        treatmentTypeId=treatment.treatment_type_id,
        treatmentTypeName=treatment.treatment_type.name if treatment.treatment_type else None,
        targetMonth=treatment.target_month,
        targetYear=treatment.target_year,
        dueDate=treatment.due_date,
        jobId=treatment.job_id,
        status=treatment.status,
        quantity=treatment.quantity,
        instructions=treatment.instructions,
        completedById=treatment.completed_by_id,
        completedAt=treatment.completed_at,
    )


# ============================================================================
# DISTRIBUTION
# ============================================================================


@router.get("/programs/distribution", response_model=list[MonthlyDistribution])
async def get_distribution(
    annualServices: int = Query(..., ge=0),
    year: Optional[int] = Query(None),
    cadence: Cadence = Query(Cadence.TWO_WEEK),
    current: CurrentStaff = Depends(get_current_staff),
):
    """Spread annualServices across the months of a year, weighted by weeks per month"""
    return ProgramService.get_distribution(year or date.today().year, annualServices, cadence)


# ============================================================================
# PROGRAM TEMPLATES
# ============================================================================


@router.get("/program-templates", response_model=list[ProgramTemplateResponse])
async def get_templates(
    includeInactive: bool = Query(False),
    current: CurrentStaff = Depends(get_current_staff),
    service: ProgramService = Depends(get_program_service),
):
    return [to_template_response(t, current) for t in service.get_templates(includeInactive)]


@router.get("/program-templates/{template_id}", response_model=ProgramTemplateDetailResponse)
async def get_template(
    template_id: int,
    current: CurrentStaff = Depends(get_current_staff),
    service: ProgramService = Depends(get_program_service),
):
    """Template with its monthly treatments"""
    return to_template_response(service.get_template(template_id), current, detail=True)


@router.post("/program-templates", response_model=ProgramTemplateResponse, status_code=201)
async def create_template(
    data: ProgramTemplateCreate,
    current: CurrentStaff = Depends(get_current_staff),
    service: ProgramService = Depends(get_program_service),
):
    return to_template_response(service.create_template(data, current), current)


@router.put("/program-templates/{template_id}", response_model=ProgramTemplateResponse)
async def update_template(
    template_id: int,
    data: ProgramTemplateUpdate,
    current: CurrentStaff = Depends(get_current_staff),
    service: ProgramService = Depends(get_program_service),
):
    return to_template_response(service.update_template(template_id, data, current), current)


@router.put("/program-templates/{template_id}/distribution", response_model=ProgramTemplateResponse)
async def set_monthly_distribution(
    template_id: int,
    data: MonthlyDistributionUpdate,
    current: CurrentStaff = Depends(get_current_staff),
    service: ProgramService = Depends(get_program_service),
):
    """Replace the template's servicesPerMonth; the total must equal servicesPerYear"""
    template = service.set_monthly_distribution(template_id, data.servicesPerMonth, current)
    return to_template_response(template, current)


@router.post(
    "/program-templates/{template_id}/treatments",
    response_model=TemplateTreatmentResponse,
    status_code=201,
)
async def link_treatment_to_template(
    template_id: int,
    data: TemplateTreatmentCreate,
    current: CurrentStaff = Depends(get_current_staff),
    service: ProgramService = Depends(get_program_service),
):
    treatment = service.link_treatment_to_template(
        template_id,
        data.treatmentTypeId,
        data.month,
        data.quantity,
        data.instructions,
        current,
    )
    return to_template_treatment_response(treatment)


@router.delete("/program-templates/treatments/{treatment_id}")
async def remove_template_treatment(
    treatment_id: int,
    current: CurrentStaff = Depends(get_current_staff),
    service: ProgramService = Depends(get_program_service),
):
    return service.remove_template_treatment(treatment_id, current)


# ============================================================================
# CLIENT PROGRAMS
# ============================================================================


@router.get("/clients/{client_id}/programs", response_model=list[ClientProgramResponse])
async def get_client_programs(
    client_id: int,
    current: CurrentStaff = Depends(get_current_staff),
    service: ProgramService = Depends(get_program_service),
):
    return [to_client_program_response(p) for p in service.get_client_programs(client_id)]


@router.post("/clients/{client_id}/programs", response_model=ClientProgramResponse, status_code=201)
async def assign_program(
    client_id: int,
    data: AssignProgramRequest,
    current: CurrentStaff = Depends(get_current_staff),
    service: ProgramService = Depends(get_program_service),
):
    """Assign a program template to a client"""
    client_program = service.assign_program(
        client_id,
        data.templateId,
        data.startDate,
        current,
        cadence=data.cadence,
        custom_name=data.customName,
    )
    return to_client_program_response(client_program)


@router.get("/client-programs/{client_program_id}", response_model=ClientProgramResponse)
async def get_client_program(
    client_program_id: int,
    current: CurrentStaff = Depends(get_current_staff),
    service: ProgramService = Depends(get_program_service),
):
    return to_client_program_response(service.get_client_program(client_program_id))


@router.patch("/client-programs/{client_program_id}", response_model=ClientProgramResponse)
async def update_client_program(
    client_program_id: int,
    data: ClientProgramUpdate,
    current: CurrentStaff = Depends(get_current_staff),
    service: ProgramService = Depends(get_program_service),
):
    """Pause, resume, complete or cancel a program, or change its cadence or name"""
    return to_client_program_response(
        service.update_client_program(client_program_id, data, current)
    )


# ============================================================================
# PLANNED SERVICES
# ============================================================================


@router.get(
    "/client-programs/{client_program_id}/services",
    response_model=list[ProgramServiceResponse],
)
async def get_program_services(
    client_program_id: int,
    current: CurrentStaff = Depends(get_current_staff),
    service: ProgramService = Depends(get_program_service),
):
    return [to_program_service_response(s) for s in service.get_program_services(client_program_id)]


@router.post(
    "/client-programs/{client_program_id}/services",
    response_model=ProgramServiceResponse,
    status_code=201,
)
async def add_program_service(
    client_program_id: int,
    data: ProgramServiceCreate,
    current: CurrentStaff = Depends(get_current_staff),
    service: ProgramService = Depends(get_program_service),
):
    program_service = service.add_program_service(
        client_program_id,
        data.targetMonth,
        data.targetYear,
        current,
        scheduled_date=data.scheduledDate,
    )
    return to_program_service_response(program_service)


@router.patch("/program-services/{service_id}", response_model=ProgramServiceResponse)
async def update_program_service(
    service_id: int,
    data: ProgramServiceUpdate,
    current: CurrentStaff = Depends(get_current_staff),
    service: ProgramService = Depends(get_program_service),
):
    program_service = service.update_program_service_status(
        service_id, data.status, current, scheduled_date=data.scheduledDate
    )
    return to_program_service_response(program_service)


@router.post("/program-services/{service_id}/fulfill", response_model=ProgramServiceResponse)
async def fulfill_program_service(
    service_id: int,
    data: FulfillWithJobRequest,
    current: CurrentStaff = Depends(get_current_staff),
    service: ProgramService = Depends(get_program_service),
):
    """Link a job to a planned service"""
    return to_program_service_response(
        service.fulfill_service_with_job(service_id, data.jobId, current)
    )


# ============================================================================
# PLANNED TREATMENTS
# ============================================================================


@router.get(
    "/client-programs/{client_program_id}/treatments",
    response_model=list[ProgramTreatmentResponse],
)
async def get_program_treatments(
    client_program_id: int,
    current: CurrentStaff = Depends(get_current_staff),
    service: ProgramService = Depends(get_program_service),
):
    return [
        to_program_treatment_response(t)
        for t in service.get_program_treatments(client_program_id)
    ]


@router.post(
    "/client-programs/{client_program_id}/treatments",
    response_model=ProgramTreatmentResponse,
    status_code=201,
)
async def add_program_treatment(
    client_program_id: int,
    data: ProgramTreatmentCreate,
    current: CurrentStaff = Depends(get_current_staff),
    service: ProgramService = Depends(get_program_service),
):
    treatment = service.add_program_treatment(
        client_program_id,
        data.treatmentTypeId,
        data.targetMonth,
        data.targetYear,
        current,
        due_date=data.dueDate,
        quantity=data.quantity,
        instructions=data.instructions,
    )
    return to_program_treatment_response(treatment)


@router.patch("/program-treatments/{treatment_id}", response_model=ProgramTreatmentResponse)
async def update_program_treatment(
    treatment_id: int,
    data: ProgramTreatmentUpdate,
    current: CurrentStaff = Depends(get_current_staff),
    service: ProgramService = Depends(get_program_service),
):
    treatment = service.update_program_treatment_status(
        treatment_id, data.status, current, due_date=data.dueDate
    )
    return to_program_treatment_response(treatment)


@router.post("/program-treatments/{treatment_id}/fulfill", response_model=ProgramTreatmentResponse)
async def fulfill_program_treatment(
    treatment_id: int,
    data: FulfillWithJobRequest,
    current: CurrentStaff = Depends(get_current_staff),
    service: ProgramService = Depends(get_program_service),
):
    """Link a job to a planned treatment"""
    return to_program_treatment_response(
        service.fulfill_treatment_with_job(treatment_id, data.jobId, current)
    )


@router.post("/program-treatments/{treatment_id}/complete", response_model=ProgramTreatmentResponse)
async def complete_program_treatment(
    treatment_id: int,
    data: CompleteTreatmentRequest,
    current: CurrentStaff = Depends(get_current_staff),
    service: ProgramService = Depends(get_program_service),
):
    return to_program_treatment_response(
        service.complete_treatment(treatment_id, data.completedById, current)
    )
