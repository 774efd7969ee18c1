"""Job repository - Database operations for jobs and job treatments"""

from datetime import date, datetime, time, timedelta
from typing import Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session, joinedload

from ...models import InstanceStatus, Job, JobTreatment


class JobRepository:
    """Repository for job database operations"""

    @staticmethod
    def get_jobs(
        db: Session,
        assigned_to_id: Optional[int] = None,
        status: Optional[str] = None,
        on_date: Optional[date] = None,
        client_id: Optional[int] = None,
    ) -> list[Job]:
        """Get jobs with optional filters"""
        query = db.query(Job).options(joinedload(Job.client))

        if assigned_to_id:
            query = query.filter(Job.assigned_to_id == assigned_to_id)
        if status and status != "all":
            query = query.filter(Job.status == status)
        if client_id:
            query = query.filter(Job.client_id == client_id)
        if on_date:
            day_start = datetime.combine(on_date, time.min)
            query = query.filter(
                Job.scheduled_date >= day_start,
                Job.scheduled_date < day_start + timedelta(days=1),
            )

        return query.order_by(Job.scheduled_date.asc()).all()

    @staticmethod
    def get_job_by_id(db: Session, job_id: int) -> Optional[Job]:
        return (
            db.query(Job)
            .options(joinedload(Job.client))
            .filter(Job.id == job_id)
            .first()
        )

    @staticmethod
    def create_job(db: Session, **job_data) -> Job:
        job = Job(**job_data)
        db.add(job)
        db.commit()
        db.refresh(job)
        return job

    @staticmethod
    def update_job(db: Session, job: Job, **updates) -> Job:
        for key, value in updates.items():
            if value is not None and hasattr(job, key):
                setattr(job, key, value)

        db.commit()
        db.refresh(job)
        return job

    @staticmethod
    def delete_job(db: Session, job: Job) -> None:
        db.delete(job)
        db.commit()

    # Job Treatments
    @staticmethod
    def get_job_treatments(db: Session, job_id: int) -> list[JobTreatment]:
        return (
            db.query(JobTreatment)
            .options(joinedload(JobTreatment.treatment_type))
            .filter(JobTreatment.job_id == job_id)
            .order_by(JobTreatment.id.asc())
            .all()
        )

    @staticmethod
    def get_job_treatment_by_id(db: Session, job_treatment_id: int) -> Optional[JobTreatment]:
        return db.query(JobTreatment).filter(JobTreatment.id == job_treatment_id).first()

    @staticmethod
    def create_job_treatments(db: Session, treatments: list[dict]) -> list[JobTreatment]:
        if not treatments:
            return []
        created = [JobTreatment(**data) for data in treatments]
        db.add_all(created)
        db.commit()
        for treatment in created:
            db.refresh(treatment)
        return created

    @staticmethod
    def update_job_treatment(db: Session, job_treatment: JobTreatment, **updates) -> JobTreatment:
        for key, value in updates.items():
            if value is not None and hasattr(job_treatment, key):
                setattr(job_treatment, key, value)

        db.commit()
        db.refresh(job_treatment)
        return job_treatment

    @staticmethod
    def delete_template_seeded_treatments(db: Session, job_id: int) -> int:
        """Delete treatments seeded from a program template, keeping manual entries"""
        deleted = (
            db.query(JobTreatment)
            .filter(
                JobTreatment.job_id == job_id,
                JobTreatment.program_template_treatment_id.isnot(None),
            )
            .delete(synchronize_session=False)
        )
        db.commit()
        return deleted

    @staticmethod
    def delete_schedule_seeded_treatments(db: Session, job_id: int, schedule_ids: list[int]) -> int:
        """Delete treatments seeded from the given treatment program schedule entries"""
        if not schedule_ids:
            return 0
        deleted = (
            db.query(JobTreatment)
            .filter(
                JobTreatment.job_id == job_id,
                JobTreatment.treatment_program_schedule_id.in_(schedule_ids),
            )
            .delete(synchronize_session=False)
        )
        db.commit()
        return deleted

    @staticmethod
    def delete_seeded_treatments(db: Session, job_id: int) -> int:
        """Delete every seeded treatment (template or treatment program), keeping manual entries"""
        deleted = (
            db.query(JobTreatment)
            .filter(
                JobTreatment.job_id == job_id,
                or_(
                    JobTreatment.program_template_treatment_id.isnot(None),
                    JobTreatment.treatment_program_schedule_id.isnot(None),
                ),
            )
            .delete(synchronize_session=False)
        )
        db.commit()
        return deleted

    @staticmethod
    def delete_pending_treatments_from_source(
        db: Session,
        template_treatment_id: Optional[int] = None,
        schedule_entry_id: Optional[int] = None,
    ) -> int:
        """Delete unfinished job treatments seeded from one template treatment or schedule entry"""
        query = db.query(JobTreatment).filter(JobTreatment.status == InstanceStatus.PENDING.value)
        if template_treatment_id is not None:
            query = query.filter(JobTreatment.program_template_treatment_id == template_treatment_id)
        else:
            query = query.filter(JobTreatment.treatment_program_schedule_id == schedule_entry_id)
        deleted = query.delete(synchronize_session=False)
        db.commit()
        return deleted
