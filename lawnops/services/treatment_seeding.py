"""
Seed a job's treatment checklist from program settings.

Treatments come either from a program template (the template treatments
scheduled for the job's month) or from a treatment program (the schedule
entries for the job's month plus its flexible entries). Seeded rows keep a
link to their source so re-seeding replaces them; treatments added by hand
are never touched.
"""

import logging
from typing import Optional

from sqlalchemy.orm import Session

from ..domain.jobs.repository import JobRepository
from ..domain.programs.repository import ProgramRepository
from ..domain.treatments.repository import TreatmentRepository
from ..models import InstanceStatus, Job, JobTreatment
from ..shared.errors import NotFoundError

logger = logging.getLogger(__name__)


def seed_from_template(db: Session, job: Job, template_id: int) -> list[JobTreatment]:
    """
    Replace the job's template-seeded treatments with the template's
    treatments for the job's month.

    Returns:
        list: The newly seeded JobTreatment rows
    """
    template = ProgramRepository.get_template_by_id(db, template_id)
    if not template:
        raise NotFoundError("Program template not found")

    month = job.scheduled_date.month
    removed = JobRepository.delete_template_seeded_treatments(db, job.id)

    template_treatments = ProgramRepository.get_template_treatments_for_month(db, template.id, month)
    seeded = JobRepository.create_job_treatments(
        db,
        [
            {
                "job_id": job.id,
                "treatment_type_id": t.treatment_type_id,
                "program_template_treatment_id": t.id,
                "status": InstanceStatus.PENDING.value,
                "quantity": t.quantity or 1,
                "instructions": t.instructions,
            }
            for t in template_treatments
        ],
    )

    logger.info(
        f"🌱 Seeded {len(seeded)} treatments on job {job.id} from template {template.id} "
        f"(month {month}, replaced {removed})"
    )
    return seeded


def seed_from_treatment_program(db: Session, job: Job, treatment_program_id: int) -> list[JobTreatment]:
    """
    Replace treatments previously seeded from this treatment program with its
    entries for the job's month and its flexible entries.
    """
    program = TreatmentRepository.get_treatment_program_by_id(db, treatment_program_id)
    if not program:
        raise NotFoundError("Treatment program not found")

    month = job.scheduled_date.month
    removed = JobRepository.delete_schedule_seeded_treatments(
        db, job.id, [entry.id for entry in program.schedule]
    )

    entries = TreatmentRepository.get_schedule_entries_for_month(db, program.id, month)
    seeded = JobRepository.create_job_treatments(
        db,
        [
            {
                "job_id": job.id,
                "treatment_type_id": entry.treatment_type_id,
                "treatment_program_schedule_id": entry.id,
                "status": InstanceStatus.PENDING.value,
                "quantity": entry.quantity or 1,
                "instructions": entry.instructions,
            }
            for entry in entries
        ],
    )

    logger.info(
        f"🌱 Seeded {len(seeded)} treatments on job {job.id} from treatment program {program.id} "
        f"(month {month}, replaced {removed})"
    )
    return seeded


def clear_seeded_treatments(db: Session, job: Job) -> int:
    """Remove every seeded treatment from a job and return how many were deleted"""
    removed = JobRepository.delete_seeded_treatments(db, job.id)
    if removed:
        logger.info(f"🧹 Cleared {removed} seeded treatments from job {job.id}")
    return removed


def drop_treatments_from_source(
    db: Session, template_treatment_id: Optional[int] = None, schedule_entry_id: Optional[int] = None
) -> int:
    """
    Remove pending job treatments seeded from a source that is about to be deleted.

    Treatments already worked on stay on their jobs as a record of what was done.
    """
    removed = JobRepository.delete_pending_treatments_from_source(
        db, template_treatment_id=template_treatment_id, schedule_entry_id=schedule_entry_id
    )
    if removed:
        source = (
            f"template treatment {template_treatment_id}"
            if template_treatment_id is not None
            else f"schedule entry {schedule_entry_id}"
        )
        logger.info(f"🧹 Dropped {removed} pending job treatments seeded from {source}")
    return removed
