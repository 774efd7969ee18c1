"""Program repository - Database operations for program templates and client programs"""

from typing import Optional

from sqlalchemy.orm import Session, joinedload

from ...models import (
    ClientProgram,
    ClientProgramService,
    ClientProgramTreatment,
    ProgramTemplate,
    ProgramTemplateTreatment,
)


class ProgramRepository:
    """Repository for program templates, client programs and their planned instances"""

    @staticmethod
    def save(db: Session, obj):
        """Commit pending changes on ``obj`` and reload it"""
        db.commit()
        db.refresh(obj)
        return obj

    # Program Templates
    @staticmethod
    def get_templates(db: Session, include_inactive: bool = False) -> list[ProgramTemplate]:
        query = db.query(ProgramTemplate)
        if not include_inactive:
            query = query.filter(ProgramTemplate.is_active.is_(True))
        return query.order_by(ProgramTemplate.services_per_year.asc(), ProgramTemplate.name.asc()).all()

    @staticmethod
    def get_template_by_id(db: Session, template_id: int) -> Optional[ProgramTemplate]:
        """Get a template with its treatments and their treatment types loaded"""
        return (
            db.query(ProgramTemplate)
            .options(
                joinedload(ProgramTemplate.treatments).joinedload(ProgramTemplateTreatment.treatment_type)
            )
            .filter(ProgramTemplate.id == template_id)
            .first()
        )

    @staticmethod
    def create_template(db: Session, **template_data) -> ProgramTemplate:
        template = ProgramTemplate(**template_data)
        db.add(template)
        db.commit()
        db.refresh(template)
        return template

    @staticmethod
    def update_template(db: Session, template: ProgramTemplate, **updates) -> ProgramTemplate:
        for key, value in updates.items():
            if value is not None and hasattr(template, key):
                setattr(template, key, value)

        db.commit()
        db.refresh(template)
        return template

    # Program Template Treatments
    @staticmethod
    def get_template_treatment_by_id(db: Session, treatment_id: int) -> Optional[ProgramTemplateTreatment]:
        return (
            db.query(ProgramTemplateTreatment)
            .filter(ProgramTemplateTreatment.id == treatment_id)
            .first()
        )

    @staticmethod
    def get_template_treatments_for_month(
        db: Session, template_id: int, month: int
    ) -> list[ProgramTemplateTreatment]:
        return (
            db.query(ProgramTemplateTreatment)
            .filter(
                ProgramTemplateTreatment.program_template_id == template_id,
                ProgramTemplateTreatment.month == month,
            )
            .order_by(ProgramTemplateTreatment.id.asc())
            .all()
        )

    @staticmethod
    def create_template_treatment(db: Session, **data) -> ProgramTemplateTreatment:
        treatment = ProgramTemplateTreatment(**data)
        db.add(treatment)
        db.commit()
        db.refresh(treatment)
        return treatment

    @staticmethod
    def delete_template_treatment(db: Session, treatment: ProgramTemplateTreatment) -> None:
        db.delete(treatment)
        db.commit()

    # Client Programs
    @staticmethod
    def get_client_programs(db: Session, client_id: int) -> list[ClientProgram]:
        return (
            db.query(ClientProgram)
            .options(joinedload(ClientProgram.template))
            .filter(ClientProgram.client_id == client_id)
            .order_by(ClientProgram.start_date.desc())
            .all()
        )

    @staticmethod
    def get_active_client_programs(db: Session, client_id: int) -> list[ClientProgram]:
        return (
            db.query(ClientProgram)
            .filter(ClientProgram.client_id == client_id, ClientProgram.status == "active")
            .all()
        )

    @staticmethod
    def get_client_program_by_id(db: Session, client_program_id: int) -> Optional[ClientProgram]:
        return (
            db.query(ClientProgram)
            .options(joinedload(ClientProgram.template))
            .filter(ClientProgram.id == client_program_id)
            .first()
        )

    @staticmethod
    def create_client_program(db: Session, **data) -> ClientProgram:
        client_program = ClientProgram(**data)
        db.add(client_program)
        db.commit()
        db.refresh(client_program)
        return client_program

    # Client Program Services
    @staticmethod
    def get_program_services(db: Session, client_program_id: int) -> list[ClientProgramService]:
        return (
            db.query(ClientProgramService)
            .filter(ClientProgramService.client_program_id == client_program_id)
            .order_by(ClientProgramService.target_year.asc(), ClientProgramService.target_month.asc())
            .all()
        )

    @staticmethod
    def get_program_service_by_id(db: Session, service_id: int) -> Optional[ClientProgramService]:
        return db.query(ClientProgramService).filter(ClientProgramService.id == service_id).first()

    @staticmethod
    def get_program_service_by_job(db: Session, job_id: int) -> Optional[ClientProgramService]:
        return db.query(ClientProgramService).filter(ClientProgramService.job_id == job_id).first()

    @staticmethod
    def create_program_service(db: Session, **data) -> ClientProgramService:
        service = ClientProgramService(**data)
        db.add(service)
        db.commit()
        db.refresh(service)
        return service

    # Client Program Treatments
    @staticmethod
    def get_program_treatments(db: Session, client_program_id: int) -> list[ClientProgramTreatment]:
        return (
            db.query(ClientProgramTreatment)
            .options(joinedload(ClientProgramTreatment.treatment_type))
            .filter(ClientProgramTreatment.client_program_id == client_program_id)
            .order_by(
                ClientProgramTreatment.target_year.asc(), ClientProgramTreatment.target_month.asc()
            )
            .all()
        )

    @staticmethod
    def get_program_treatments_for_period(
        db: Session, client_program_ids: list[int], month: int, year: int
    ) -> list[ClientProgramTreatment]:
        if not client_program_ids:
            return []
        return (
            db.query(ClientProgramTreatment)
            .options(joinedload(ClientProgramTreatment.treatment_type))
            .filter(
                ClientProgramTreatment.client_program_id.in_(client_program_ids),
                ClientProgramTreatment.target_month == month,
                ClientProgramTreatment.target_year == year,
            )
            .order_by(ClientProgramTreatment.id.asc())
            .all()
        )

    @staticmethod
    def get_program_treatment_by_id(db: Session, treatment_id: int) -> Optional[ClientProgramTreatment]:
        return db.query(ClientProgramTreatment).filter(ClientProgramTreatment.id == treatment_id).first()

    @staticmethod
    def get_program_treatment_by_job(db: Session, job_id: int) -> Optional[ClientProgramTreatment]:
        return db.query(ClientProgramTreatment).filter(ClientProgramTreatment.job_id == job_id).first()

    @staticmethod
    def create_program_treatment(db: Session, **data) -> ClientProgramTreatment:
        treatment = ClientProgramTreatment(**data)
        db.add(treatment)
        db.commit()
        db.refresh(treatment)
        return treatment
