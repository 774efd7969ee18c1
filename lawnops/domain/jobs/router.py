"""Job router - FastAPI endpoints for jobs and job treatments"""

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...auth import CurrentStaff, get_current_staff
from ...database import get_db
from ...models import Job, JobTreatment
from ..programs.router import to_program_treatment_response
from ..programs.schemas import ProgramTreatmentResponse
from .schemas import (
    JobCreate,
    JobResponse,
    JobTreatmentCreate,
    JobTreatmentResponse,
    JobTreatmentUpdate,
    JobUpdate,
    SeedTreatmentsRequest,
)
from .service import JobService

router = APIRouter(prefix="/jobs", tags=["Jobs"])


def get_job_service(db: Session = Depends(get_db)) -> JobService:
    """Dependency injection for JobService"""
    return JobService(db)


def to_job_response(job: Job, current: CurrentStaff) -> JobResponse:
    client = job.client
    return JobResponse(
        id=job.id,
        clientId=job.client_id,
        clientName=client.name if client else None,
        clientAddress=client.address if client else None,
        gateCode=client.gate_code if client and current.can_view_gate_code else None,
        assignedToId=job.assigned_to_id,
        scheduledDate=job.scheduled_date,
        status=job.status,
        startTime=job.start_time,
        endTime=job.end_time,
        notes=job.notes,
        created_at=job.created_at,
    )


def to_job_treatment_response(treatment: JobTreatment) -> JobTreatmentResponse:
    return JobTreatmentResponse(
        id=treatment.id,
        jobId=treatment.job_id,
        treatmentTypeId=treatment.treatment_type_id,
        treatmentTypeName=treatment.treatment_type.name if treatment.treatment_type else None,
        programTemplateTreatmentId=treatment.program_template_treatment_id,
        treatmentProgramScheduleId=treatment.treatment_program_schedule_id,
        seeded=(
            treatment.program_template_treatment_id is not None
            or treatment.treatment_program_schedule_id is not None
        ),
        status=treatment.status,
        quantity=treatment.quantity,
        instructions=treatment.instructions,
    )


@router.get("", response_model=list[JobResponse])
async def get_jobs(
    assignedToId: Optional[int] = Query(None),
    status: Optional[str] = Query(None),
    onDate: Optional[date] = Query(None, alias="date"),
    clientId: Optional[int] = Query(None),
    current: CurrentStaff = Depends(get_current_staff),
    service: JobService = Depends(get_job_service),
):
    """Get jobs, optionally filtered by assignee, status, day or client"""
    jobs = service.get_jobs(assignedToId, status, onDate, clientId)
    return [to_job_response(j, current) for j in jobs]


@router.get("/{job_id}", response_model=JobResponse)
async def get_job(
    job_id: int,
    current: CurrentStaff = Depends(get_current_staff),
    service: JobService = Depends(get_job_service),
):
    return to_job_response(service.get_job(job_id), current)


@router.post("", response_model=JobResponse, status_code=201)
async def create_job(
    data: JobCreate,
    current: CurrentStaff = Depends(get_current_staff),
    service: JobService = Depends(get_job_service),
):
    return to_job_response(service.create_job(data, current), current)


@router.patch("/{job_id}", response_model=JobResponse)
async def update_job(
    job_id: int,
    data: JobUpdate,
    current: CurrentStaff = Depends(get_current_staff),
    service: JobService = Depends(get_job_service),
):
    """Update a job; completing or cancelling it updates the planned visits it fulfils"""
    return to_job_response(service.update_job(job_id, data, current), current)


@router.delete("/{job_id}")
async def delete_job(
    job_id: int,
    current: CurrentStaff = Depends(get_current_staff),
    service: JobService = Depends(get_job_service),
):
    return service.delete_job(job_id, current)


# ============================================================================
# JOB TREATMENTS
# ============================================================================


@router.get("/{job_id}/treatments", response_model=list[JobTreatmentResponse])
async def get_job_treatments(
    job_id: int,
    current: CurrentStaff = Depends(get_current_staff),
    service: JobService = Depends(get_job_service),
):
    return [to_job_treatment_response(t) for t in service.get_job_treatments(job_id)]


@router.post("/{job_id}/treatments", response_model=JobTreatmentResponse, status_code=201)
async def add_job_treatment(
    job_id: int,
    data: JobTreatmentCreate,
    current: CurrentStaff = Depends(get_current_staff),
    service: JobService = Depends(get_job_service),
):
    return to_job_treatment_response(service.add_job_treatment(job_id, data, current))


@router.patch("/treatments/{job_treatment_id}", response_model=JobTreatmentResponse)
async def update_job_treatment(
    job_treatment_id: int,
    data: JobTreatmentUpdate,
    current: CurrentStaff = Depends(get_current_staff),
    service: JobService = Depends(get_job_service),
):
    return to_job_treatment_response(service.update_job_treatment(job_treatment_id, data, current))


@router.post("/{job_id}/treatments/seed", response_model=list[JobTreatmentResponse])
async def seed_job_treatments(
    job_id: int,
    data: SeedTreatmentsRequest,
    current: CurrentStaff = Depends(get_current_staff),
    service: JobService = Depends(get_job_service),
):
    """Replace seeded treatments from a program template or a treatment program"""
    treatments = service.seed_treatments(
        job_id,
        current,
        template_id=data.templateId,
        treatment_program_id=data.treatmentProgramId,
    )
    return [to_job_treatment_response(t) for t in treatments]


@router.delete("/{job_id}/treatments/seeded")
async def clear_seeded_treatments(
    job_id: int,
    current: CurrentStaff = Depends(get_current_staff),
    service: JobService = Depends(get_job_service),
):
    return service.clear_seeded_treatments(job_id, current)


@router.get("/{job_id}/treatments-due", response_model=list[ProgramTreatmentResponse])
async def get_treatments_due(
    job_id: int,
    current: CurrentStaff = Depends(get_current_staff),
    service: JobService = Depends(get_job_service),
):
    """Planned treatments of the client's active programs due in the job's month"""
    return [to_program_treatment_response(t) for t in service.get_treatments_due(job_id)]
