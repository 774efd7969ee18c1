"""Program service - Business logic for program templates and client program assignments"""

import logging
from datetime import date, datetime
from typing import Optional

from sqlalchemy.orm import Session

from ...auth import CurrentStaff
from ...models import (
    ClientProgram,
    ClientProgramService,
    ClientProgramStatus,
    ClientProgramTreatment,
    InstanceStatus,
    Job,
    JobStatus,
    ProgramTemplate,
    ProgramTemplateTreatment,
)
from ...permissions import Capability
from ...services import treatment_seeding
from ...services.service_distribution import (
    Cadence,
    MonthlyDistribution,
    calculate_monthly_distribution,
    get_services_array,
)
from ...shared.errors import NotFoundError, PermissionDeniedError, ValidationError
from ...shared.services_per_month import parse_services_per_month, serialize_services_per_month
from ...shared.validators import validate_month, validate_monthly_counts
from ..clients.repository import ClientRepository
from ..jobs.repository import JobRepository
from ..staff.repository import StaffRepository
from ..treatments.repository import TreatmentRepository
from .repository import ProgramRepository
from .schemas import ClientProgramUpdate, ProgramTemplateCreate, ProgramTemplateUpdate

logger = logging.getLogger(__name__)

# Allowed status changes; completed and cancelled programs are closed for good
CLIENT_PROGRAM_TRANSITIONS = {
    ClientProgramStatus.ACTIVE: {
        ClientProgramStatus.PAUSED,
        ClientProgramStatus.COMPLETED,
        ClientProgramStatus.CANCELLED,
    },
    ClientProgramStatus.PAUSED: {
        ClientProgramStatus.ACTIVE,
        ClientProgramStatus.COMPLETED,
        ClientProgramStatus.CANCELLED,
    },
    ClientProgramStatus.COMPLETED: set(),
    ClientProgramStatus.CANCELLED: set(),
}

# Planned services and treatments share one lifecycle
INSTANCE_TRANSITIONS = {
    InstanceStatus.PENDING: {InstanceStatus.SCHEDULED, InstanceStatus.COMPLETED, InstanceStatus.SKIPPED},
    InstanceStatus.SCHEDULED: {InstanceStatus.PENDING, InstanceStatus.COMPLETED, InstanceStatus.SKIPPED},
    InstanceStatus.COMPLETED: set(),
    InstanceStatus.SKIPPED: set(),
}

OPEN_PROGRAM_STATUSES = {ClientProgramStatus.ACTIVE.value, ClientProgramStatus.PAUSED.value}


def check_transition(transitions: dict, current_status: str, new_status, label: str) -> None:
    """Raise ValidationError unless current_status → new_status is allowed"""
    current_enum = type(new_status)(current_status)
    if new_status == current_enum:
        return
    if new_status not in transitions[current_enum]:
        raise ValidationError(
            f"Cannot change {label} status from {current_enum.value} to {new_status.value}"
        )


class ProgramService:
    """Service layer for programs: templates, assignments and planned instances"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = ProgramRepository()
        self.clients = ClientRepository()
        self.jobs = JobRepository()
        self.staff = StaffRepository()
        self.treatments = TreatmentRepository()

    # ========================================================================
    # DISTRIBUTION
    # ========================================================================

    @staticmethod
    def get_distribution(
        year: int, annual_services: int, cadence: Cadence = Cadence.TWO_WEEK
    ) -> list[MonthlyDistribution]:
        if annual_services < 0:
            raise ValidationError("annualServices must not be negative")
        return calculate_monthly_distribution(year, annual_services, cadence)

    @staticmethod
    def template_months(template: ProgramTemplate) -> list[int]:
        """Decoded servicesPerMonth of a template"""
        return parse_services_per_month(template.services_per_month)

    # ========================================================================
    # PROGRAM TEMPLATES
    # ========================================================================

    def get_templates(self, include_inactive: bool = False) -> list[ProgramTemplate]:
        return self.repo.get_templates(self.db, include_inactive)

    def get_template(self, template_id: int) -> ProgramTemplate:
        template = self.repo.get_template_by_id(self.db, template_id)
        if not template:
            raise NotFoundError("Program template not found")
        return template

    def create_template(self, data: ProgramTemplateCreate, current: CurrentStaff) -> ProgramTemplate:
        """Create a template; without servicesPerMonth the counts come from this year's distribution"""
        current.require(Capability.MANAGE_SETTINGS)
        if data.servicesPerYear < 0:
            raise ValidationError("servicesPerYear must not be negative")

        if data.servicesPerMonth is None:
            monthly = get_services_array(date.today().year, data.servicesPerYear, data.defaultCadence)
        else:
            monthly = validate_monthly_counts(data.servicesPerMonth, data.servicesPerYear)

        template = self.repo.create_template(
            self.db,
            name=data.name,
            description=data.description,
            services_per_year=data.servicesPerYear,
            services_per_month=serialize_services_per_month(monthly),
            default_cadence=data.defaultCadence.value,
            price_per_visit=data.pricePerVisit,
        )
        logger.info(
            f"📋 Created program template {template.id} ({template.name}, {template.services_per_year}/yr)"
        )
        return template

    def update_template(
        self, template_id: int, data: ProgramTemplateUpdate, current: CurrentStaff
    ) -> ProgramTemplate:
        """
        Update a template. servicesPerYear and servicesPerMonth are checked
        together against the state that would be stored.
        """
        current.require(Capability.MANAGE_SETTINGS)
        if data.pricePerVisit is not None and not current.can_view_money:
            raise PermissionDeniedError("pricePerVisit cannot be set without access to pricing")
        template = self.get_template(template_id)

        services_per_year = (
            data.servicesPerYear if data.servicesPerYear is not None else template.services_per_year
        )
        if services_per_year < 0:
            raise ValidationError("servicesPerYear must not be negative")
        monthly = (
            data.servicesPerMonth
            if data.servicesPerMonth is not None
            else self.template_months(template)
        )
        monthly = validate_monthly_counts(monthly, services_per_year)

        updates = {
            "services_per_year": services_per_year,
            "services_per_month": serialize_services_per_month(monthly),
        }
        if data.name is not None:
            updates["name"] = data.name
        if data.description is not None:
            updates["description"] = data.description
        if data.defaultCadence is not None:
            updates["default_cadence"] = data.defaultCadence.value
        if data.pricePerVisit is not None:
            updates["price_per_visit"] = data.pricePerVisit
        if data.isActive is not None:
            updates["is_active"] = data.isActive

        return self.repo.update_template(self.db, template, **updates)

    def set_monthly_distribution(
        self, template_id: int, monthly_counts: list[int], current: CurrentStaff
    ) -> ProgramTemplate:
        """
        Replace a template's servicesPerMonth.

        Raises:
            ValidationError: counts are not 12 non-negative ints summing to servicesPerYear
            NotFoundError: template does not exist
        """
        current.require(Capability.MANAGE_SETTINGS)
        template = self.get_template(template_id)

        try:
            monthly = validate_monthly_counts(monthly_counts, template.services_per_year)
        except ValidationError:
            logger.warning(
                f"⚠️ Rejected distribution for template {template_id}: {monthly_counts}"
            )
            raise

        template.services_per_month = serialize_services_per_month(monthly)
        return self.repo.save(self.db, template)

    def link_treatment_to_template(
        self,
        template_id: int,
        treatment_type_id: int,
        month: int,
        quantity: Optional[int],
        instructions: Optional[str],
        current: CurrentStaff,
    ) -> ProgramTemplateTreatment:
        """
        Schedule a treatment type in a given month (1-12) of a template.
        Several treatments may share a month.
        """
        current.require(Capability.MANAGE_SETTINGS)
        validate_month(month)
        if quantity is not None and quantity < 1:
            raise ValidationError("quantity must be a positive integer")

        template = self.get_template(template_id)
        if not self.treatments.get_treatment_type_by_id(self.db, treatment_type_id):
            raise NotFoundError("Treatment type not found")

        treatment = self.repo.create_template_treatment(
            self.db,
            program_template_id=template.id,
            treatment_type_id=treatment_type_id,
            month=month,
            quantity=quantity,
            instructions=instructions,
        )
        logger.info(f"🧪 Linked treatment type {treatment_type_id} to template {template.id} in month {month}")
        return treatment

    def remove_template_treatment(self, treatment_id: int, current: CurrentStaff) -> dict:
        current.require(Capability.MANAGE_SETTINGS)
        treatment = self.repo.get_template_treatment_by_id(self.db, treatment_id)
        if not treatment:
            raise NotFoundError("Template treatment not found")
        treatment_seeding.drop_treatments_from_source(self.db, template_treatment_id=treatment.id)
        self.repo.delete_template_treatment(self.db, treatment)
        return {"success": True}

    # ========================================================================
    # CLIENT PROGRAMS
    # ========================================================================

    def assign_program(
        self,
        client_id: int,
        template_id: int,
        start_date: date,
        current: CurrentStaff,
        cadence: Optional[Cadence] = None,
        custom_name: Optional[str] = None,
    ) -> ClientProgram:
        """
        Assign a template to a client. The new program starts active with no
        planned services or treatments.
        """
        current.require(Capability.MANAGE_CLIENTS)

        client = self.clients.get_client_by_id(self.db, client_id)
        if not client:
            raise NotFoundError("Client not found")
        template = self.repo.get_template_by_id(self.db, template_id)
        if not template:
            raise NotFoundError("Program template not found")
        if not template.is_active:
            raise ValidationError("Program template is not active")

        client_program = self.repo.create_client_program(
            self.db,
            client_id=client.id,
            program_template_id=template.id,
            start_date=start_date,
            cadence=cadence.value if cadence else None,
            status=ClientProgramStatus.ACTIVE.value,
            custom_name=custom_name,
        )
        logger.info(
            f"✅ Assigned template {template.id} to client {client.id} as program {client_program.id}"
        )
        return client_program

    def get_client_programs(self, client_id: int) -> list[ClientProgram]:
        if not self.clients.get_client_by_id(self.db, client_id):
            raise NotFoundError("Client not found")
        return self.repo.get_client_programs(self.db, client_id)

    def get_client_program(self, client_program_id: int) -> ClientProgram:
        client_program = self.repo.get_client_program_by_id(self.db, client_program_id)
        if not client_program:
            raise NotFoundError("Client program not found")
        return client_program

    @staticmethod
    def effective_cadence(client_program: ClientProgram) -> Cadence:
        """The program's own cadence, falling back to the template default"""
        return Cadence(client_program.cadence or client_program.template.default_cadence)

    def update_client_program(
        self, client_program_id: int, data: ClientProgramUpdate, current: CurrentStaff
    ) -> ClientProgram:
        current.require(Capability.MANAGE_CLIENTS)
        client_program = self.get_client_program(client_program_id)

        if data.status is not None:
            check_transition(CLIENT_PROGRAM_TRANSITIONS, client_program.status, data.status, "program")
            if data.status.value != client_program.status:
                logger.info(
                    f"🔄 Client program {client_program.id}: {client_program.status} → {data.status.value}"
                )
            client_program.status = data.status.value
        if data.cadence is not None:
            client_program.cadence = data.cadence.value
        if data.customName is not None:
            client_program.custom_name = data.customName

        return self.repo.save(self.db, client_program)

    def _get_open_program(self, client_program_id: int) -> ClientProgram:
        client_program = self.get_client_program(client_program_id)
        if client_program.status not in OPEN_PROGRAM_STATUSES:
            raise ValidationError(f"Client program is {client_program.status}")
        return client_program

    # ========================================================================
    # PLANNED SERVICES
    # ========================================================================

    def get_program_services(self, client_program_id: int) -> list[ClientProgramService]:
        self.get_client_program(client_program_id)
        return self.repo.get_program_services(self.db, client_program_id)

    def get_program_service(self, service_id: int) -> ClientProgramService:
        service = self.repo.get_program_service_by_id(self.db, service_id)
        if not service:
            raise NotFoundError("Program service not found")
        return service

    def add_program_service(
        self,
        client_program_id: int,
        target_month: int,
        target_year: int,
        current: CurrentStaff,
        scheduled_date: Optional[date] = None,
    ) -> ClientProgramService:
        current.require(Capability.MANAGE_CLIENTS)
        validate_month(target_month, "targetMonth")
        client_program = self._get_open_program(client_program_id)

        return self.repo.create_program_service(
            self.db,
            client_program_id=client_program.id,
            target_month=target_month,
            target_year=target_year,
            scheduled_date=scheduled_date,
            status=(
                InstanceStatus.SCHEDULED.value if scheduled_date else InstanceStatus.PENDING.value
            ),
        )

    def update_program_service_status(
        self,
        service_id: int,
        status: InstanceStatus,
        current: CurrentStaff,
        scheduled_date: Optional[date] = None,
    ) -> ClientProgramService:
        current.require(Capability.MANAGE_CLIENTS)
        service = self.get_program_service(service_id)
        check_transition(INSTANCE_TRANSITIONS, service.status, status, "service")

        service.status = status.value
        if status == InstanceStatus.PENDING:
            # A pending visit is no longer fulfilled by a job
            service.job_id = None
        if scheduled_date is not None:
            service.scheduled_date = scheduled_date
        return self.repo.save(self.db, service)

    def fulfill_service_with_job(
        self, service_id: int, job_id: int, current: CurrentStaff
    ) -> ClientProgramService:
        """Link a job to a planned service; a job fulfils at most one service"""
        current.require(Capability.MANAGE_CLIENTS)
        service = self.get_program_service(service_id)
        client_program = self._get_open_program(service.client_program_id)
        job = self._get_job_for_program(job_id, client_program)

        linked = self.repo.get_program_service_by_job(self.db, job.id)
        if linked and linked.id != service.id:
            raise ValidationError(f"Job {job.id} already fulfils service {linked.id}")
        if service.job_id and service.job_id != job.id:
            raise ValidationError(f"Service is already fulfilled by job {service.job_id}")

        new_status = self._status_for_job(job)
        check_transition(INSTANCE_TRANSITIONS, service.status, new_status, "service")

        service.job_id = job.id
        service.scheduled_date = job.scheduled_date.date()
        service.status = new_status.value
        logger.info(f"🔗 Job {job.id} fulfils program service {service.id}")
        return self.repo.save(self.db, service)

    # ========================================================================
    # PLANNED TREATMENTS
    # ========================================================================

    def get_program_treatments(self, client_program_id: int) -> list[ClientProgramTreatment]:
        self.get_client_program(client_program_id)
        return self.repo.get_program_treatments(self.db, client_program_id)

    def get_program_treatment(self, treatment_id: int) -> ClientProgramTreatment:
        treatment = self.repo.get_program_treatment_by_id(self.db, treatment_id)
        if not treatment:
            raise NotFoundError("Program treatment not found")
        return treatment

    def add_program_treatment(
        self,
        client_program_id: int,
        treatment_type_id: int,
        target_month: int,
        target_year: int,
        current: CurrentStaff,
        due_date: Optional[date] = None,
        quantity: Optional[int] = None,
        instructions: Optional[str] = None,
    ) -> ClientProgramTreatment:
        current.require(Capability.MANAGE_CLIENTS)
        validate_month(target_month, "targetMonth")
        if quantity is not None and quantity < 1:
            raise ValidationError("quantity must be a positive integer")
        client_program = self._get_open_program(client_program_id)
        if not self.treatments.get_treatment_type_by_id(self.db, treatment_type_id):
            raise NotFoundError("Treatment type not found")

        return self.repo.create_program_treatment(
            self.db,
            client_program_id=client_program.id,
            treatment_type_id=treatment_type_id,
            target_month=target_month,
            target_year=target_year,
            due_date=due_date,
            quantity=quantity,
            instructions=instructions,
            status=InstanceStatus.PENDING.value,
        )

    def update_program_treatment_status(
        self,
        treatment_id: int,
        status: InstanceStatus,
        current: CurrentStaff,
        due_date: Optional[date] = None,
    ) -> ClientProgramTreatment:
        current.require(Capability.MANAGE_CLIENTS)
        if status == InstanceStatus.COMPLETED:
            return self.complete_treatment(treatment_id, current.staff_id, current)

        treatment = self.get_program_treatment(treatment_id)
        check_transition(INSTANCE_TRANSITIONS, treatment.status, status, "treatment")
        treatment.status = status.value
        if status == InstanceStatus.PENDING:
            treatment.job_id = None
        if due_date is not None:
            treatment.due_date = due_date
        return self.repo.save(self.db, treatment)

    def fulfill_treatment_with_job(
        self, treatment_id: int, job_id: int, current: CurrentStaff
    ) -> ClientProgramTreatment:
        """Link a job to a planned treatment; a job fulfils at most one treatment"""
        current.require(Capability.MANAGE_CLIENTS)
        treatment = self.get_program_treatment(treatment_id)
        client_program = self._get_open_program(treatment.client_program_id)
        job = self._get_job_for_program(job_id, client_program)

        linked = self.repo.get_program_treatment_by_job(self.db, job.id)
        if linked and linked.id != treatment.id:
            raise ValidationError(f"Job {job.id} already fulfils treatment {linked.id}")
        if treatment.job_id and treatment.job_id != job.id:
            raise ValidationError(f"Treatment is already fulfilled by job {treatment.job_id}")

        new_status = self._status_for_job(job)
        check_transition(INSTANCE_TRANSITIONS, treatment.status, new_status, "treatment")

        treatment.job_id = job.id
        treatment.status = new_status.value
        if new_status == InstanceStatus.COMPLETED:
            treatment.completed_at = job.end_time or datetime.utcnow()
            treatment.completed_by_id = job.assigned_to_id
        logger.info(f"🔗 Job {job.id} fulfils program treatment {treatment.id}")
        return self.repo.save(self.db, treatment)

    def complete_treatment(
        self, treatment_id: int, completed_by_id: Optional[int], current: CurrentStaff
    ) -> ClientProgramTreatment:
        """Mark a planned treatment done. Any role may record completed work."""
        treatment = self.get_program_treatment(treatment_id)
        check_transition(INSTANCE_TRANSITIONS, treatment.status, InstanceStatus.COMPLETED, "treatment")

        completed_by_id = completed_by_id if completed_by_id is not None else current.staff_id
        if completed_by_id is not None and not self.staff.get_staff_by_id(self.db, completed_by_id):
            raise NotFoundError("Staff not found")

        treatment.status = InstanceStatus.COMPLETED.value
        treatment.completed_by_id = completed_by_id
        treatment.completed_at = datetime.utcnow()
        logger.info(f"✅ Program treatment {treatment.id} completed by staff {completed_by_id}")
        return self.repo.save(self.db, treatment)

    # ========================================================================
    # JOB LINKS
    # ========================================================================

    def get_treatments_for_job(self, job: Job) -> list[ClientProgramTreatment]:
        """Planned treatments of the client's active programs due in the job's month"""
        programs = self.repo.get_active_client_programs(self.db, job.client_id)
        return self.repo.get_program_treatments_for_period(
            self.db,
            [p.id for p in programs],
            job.scheduled_date.month,
            job.scheduled_date.year,
        )

    def sync_instances_for_job(self, job: Job) -> None:
        """
        Carry a job's status and date onto the planned service/treatment it fulfils.
        A completed job completes them; a cancelled job releases them back to pending.
        Otherwise a planned service follows the job's scheduled day.
        """
        instances = [
            self.repo.get_program_service_by_job(self.db, job.id),
            self.repo.get_program_treatment_by_job(self.db, job.id),
        ]
        changed = False
        for instance in instances:
            if instance is None or instance.status in (
                InstanceStatus.COMPLETED.value,
                InstanceStatus.SKIPPED.value,
            ):
                continue
            if job.status == JobStatus.COMPLETED.value:
                instance.status = InstanceStatus.COMPLETED.value
                if isinstance(instance, ClientProgramTreatment):
                    instance.completed_at = job.end_time or datetime.utcnow()
                    instance.completed_by_id = job.assigned_to_id
                changed = True
            elif job.status == JobStatus.CANCELLED.value:
                instance.status = InstanceStatus.PENDING.value
                instance.job_id = None
                changed = True
            elif isinstance(instance, ClientProgramService):
                job_day = job.scheduled_date.date()
                if instance.scheduled_date != job_day:
                    instance.scheduled_date = job_day
                    changed = True

        if changed:
            self.db.commit()
            logger.info(f"🔄 Synced planned instances for job {job.id} ({job.status})")

    def _get_job_for_program(self, job_id: int, client_program: ClientProgram) -> Job:
        job = self.jobs.get_job_by_id(self.db, job_id)
        if not job:
            raise NotFoundError("Job not found")
        if job.client_id != client_program.client_id:
            raise ValidationError("Job belongs to a different client")
        if job.status == JobStatus.CANCELLED.value:
            raise ValidationError("A cancelled job cannot fulfil a planned visit")
        return job

    @staticmethod
    def _status_for_job(job: Job) -> InstanceStatus:
        if job.status == JobStatus.COMPLETED.value:
            return InstanceStatus.COMPLETED
        return InstanceStatus.SCHEDULED
