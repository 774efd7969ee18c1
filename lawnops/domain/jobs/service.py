"""Job service - Business logic for jobs and their treatment checklists"""

import logging
from datetime import date, datetime
from typing import Optional

from sqlalchemy.orm import Session

from ...auth import CurrentStaff
from ...models import ClientProgramTreatment, InstanceStatus, Job, JobStatus, JobTreatment
from ...permissions import Capability
from ...services import treatment_seeding
from ...shared.errors import NotFoundError, ValidationError
from ..clients.repository import ClientRepository
from ..programs.repository import ProgramRepository
from ..programs.service import INSTANCE_TRANSITIONS, ProgramService, check_transition
from ..staff.repository import StaffRepository
from ..treatments.repository import TreatmentRepository
from .repository import JobRepository
from .schemas import JobCreate, JobTreatmentCreate, JobTreatmentUpdate, JobUpdate

logger = logging.getLogger(__name__)

JOB_TRANSITIONS = {
    JobStatus.SCHEDULED: {JobStatus.IN_PROGRESS, JobStatus.COMPLETED, JobStatus.CANCELLED},
    JobStatus.IN_PROGRESS: {JobStatus.COMPLETED, JobStatus.CANCELLED},
    JobStatus.COMPLETED: set(),
    JobStatus.CANCELLED: set(),
}


class JobService:
    """Service layer for job operations"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = JobRepository()
        self.clients = ClientRepository()
        self.staff = StaffRepository()
        self.treatments = TreatmentRepository()
        self.programs = ProgramService(db)

    def get_jobs(
        self,
        assigned_to_id: Optional[int] = None,
        status: Optional[str] = None,
        on_date: Optional[date] = None,
        client_id: Optional[int] = None,
    ) -> list[Job]:
        return self.repo.get_jobs(self.db, assigned_to_id, status, on_date, client_id)

    def get_job(self, job_id: int) -> Job:
        job = self.repo.get_job_by_id(self.db, job_id)
        if not job:
            raise NotFoundError("Job not found")
        return job

    def create_job(self, data: JobCreate, current: CurrentStaff) -> Job:
        current.require(Capability.MANAGE_CLIENTS)
        if not self.clients.get_client_by_id(self.db, data.clientId):
            raise NotFoundError("Client not found")
        self._check_assignee(data.assignedToId)

        job = self.repo.create_job(
            self.db,
            client_id=data.clientId,
            assigned_to_id=data.assignedToId,
            scheduled_date=data.scheduledDate,
            status=JobStatus.SCHEDULED.value,
            notes=data.notes,
        )
        logger.info(f"📅 Created job {job.id} for client {job.client_id} on {job.scheduled_date:%Y-%m-%d}")
        return job

    def update_job(self, job_id: int, data: JobUpdate, current: CurrentStaff) -> Job:
        """
        Update a job. Any role may move a job through its status lifecycle;
        rescheduling or reassigning needs manage_clients.
        """
        job = self.get_job(job_id)

        if data.scheduledDate is not None or data.assignedToId is not None:
            current.require(Capability.MANAGE_CLIENTS)
            self._check_assignee(data.assignedToId)

        rescheduled = data.scheduledDate is not None and data.scheduledDate != job.scheduled_date
        status_changed = False
        if data.status is not None:
            check_transition(JOB_TRANSITIONS, job.status, data.status, "job")
            if data.status.value != job.status:
                status_changed = True
                job.status = data.status.value
                if data.status == JobStatus.IN_PROGRESS:
                    job.start_time = datetime.utcnow()
                elif data.status == JobStatus.COMPLETED:
                    job.end_time = datetime.utcnow()

        job = self.repo.update_job(
            self.db,
            job,
            scheduled_date=data.scheduledDate,
            assigned_to_id=data.assignedToId,
            notes=data.notes,
        )

        if status_changed:
            logger.info(f"🔄 Job {job.id} is now {job.status}")
        if rescheduled:
            logger.info(f"📅 Job {job.id} moved to {job.scheduled_date:%Y-%m-%d}")
        if status_changed or rescheduled:
            self.programs.sync_instances_for_job(job)
        return job

    def delete_job(self, job_id: int, current: CurrentStaff) -> dict:
        """Delete a job; planned visits it fulfilled go back to pending unless already closed"""
        current.require(Capability.MANAGE_CLIENTS)
        job = self.get_job(job_id)

        for instance in (
            ProgramRepository.get_program_service_by_job(self.db, job.id),
            ProgramRepository.get_program_treatment_by_job(self.db, job.id),
        ):
            if instance is None:
                continue
            instance.job_id = None
            if instance.status == InstanceStatus.SCHEDULED.value:
                instance.status = InstanceStatus.PENDING.value

        self.repo.delete_job(self.db, job)
        logger.info(f"🗑️ Deleted job {job_id}")
        return {"success": True}

    def _check_assignee(self, staff_id: Optional[int]) -> None:
        if staff_id is not None and not self.staff.get_staff_by_id(self.db, staff_id):
            raise NotFoundError("Staff not found")

    # ========================================================================
    # JOB TREATMENTS
    # ========================================================================

    def get_job_treatments(self, job_id: int) -> list[JobTreatment]:
        self.get_job(job_id)
        return self.repo.get_job_treatments(self.db, job_id)

    def add_job_treatment(
        self, job_id: int, data: JobTreatmentCreate, current: CurrentStaff
    ) -> JobTreatment:
        """Add a manual treatment; manual entries survive re-seeding"""
        job = self.get_job(job_id)
        if data.quantity is not None and data.quantity < 1:
            raise ValidationError("quantity must be a positive integer")
        if not self.treatments.get_treatment_type_by_id(self.db, data.treatmentTypeId):
            raise NotFoundError("Treatment type not found")

        created = self.repo.create_job_treatments(
            self.db,
            [
                {
                    "job_id": job.id,
                    "treatment_type_id": data.treatmentTypeId,
                    "status": InstanceStatus.PENDING.value,
                    "quantity": data.quantity,
                    "instructions": data.instructions,
                }
            ],
        )
        return created[0]

    def update_job_treatment(
        self, job_treatment_id: int, data: JobTreatmentUpdate, current: CurrentStaff
    ) -> JobTreatment:
        job_treatment = self.repo.get_job_treatment_by_id(self.db, job_treatment_id)
        if not job_treatment:
            raise NotFoundError("Job treatment not found")
        if data.quantity is not None and data.quantity < 1:
            raise ValidationError("quantity must be a positive integer")
        if data.status is not None:
            check_transition(INSTANCE_TRANSITIONS, job_treatment.status, data.status, "treatment")

        return self.repo.update_job_treatment(
            self.db,
            job_treatment,
            status=data.status.value if data.status else None,
            quantity=data.quantity,
            instructions=data.instructions,
        )

    def seed_treatments(
        self,
        job_id: int,
        current: CurrentStaff,
        template_id: Optional[int] = None,
        treatment_program_id: Optional[int] = None,
    ) -> list[JobTreatment]:
        """Seed the job's checklist from exactly one source"""
        current.require(Capability.MANAGE_CLIENTS)
        if (template_id is None) == (treatment_program_id is None):
            raise ValidationError("Provide exactly one of templateId or treatmentProgramId")

        job = self.get_job(job_id)
        if template_id is not None:
            treatment_seeding.seed_from_template(self.db, job, template_id)
        else:
            treatment_seeding.seed_from_treatment_program(self.db, job, treatment_program_id)
        return self.repo.get_job_treatments(self.db, job.id)

    def clear_seeded_treatments(self, job_id: int, current: CurrentStaff) -> dict:
        current.require(Capability.MANAGE_CLIENTS)
        job = self.get_job(job_id)
        return {"removed": treatment_seeding.clear_seeded_treatments(self.db, job)}

    def get_treatments_due(self, job_id: int) -> list[ClientProgramTreatment]:
        """Planned program treatments due in the job's month"""
        return self.programs.get_treatments_for_job(self.get_job(job_id))
