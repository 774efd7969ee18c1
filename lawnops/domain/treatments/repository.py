"""Treatment repository - treatment catalog and settings-defined treatment schedules"""

from typing import Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session, joinedload

from ...models import TreatmentProgram, TreatmentProgramSchedule, TreatmentType


class TreatmentRepository:
    """Repository for treatment types, treatment programs and schedule entries"""

    # Treatment Types
    @staticmethod
    def get_treatment_types(db: Session, include_inactive: bool = False) -> list[TreatmentType]:
        query = db.query(TreatmentType)
        if not include_inactive:
            query = query.filter(TreatmentType.is_active.is_(True))
        return query.order_by(TreatmentType.category.asc(), TreatmentType.name.asc()).all()

    @staticmethod
    def get_treatment_type_by_id(db: Session, treatment_type_id: int) -> Optional[TreatmentType]:
        return db.query(TreatmentType).filter(TreatmentType.id == treatment_type_id).first()

    @staticmethod
    def create_treatment_type(db: Session, **data) -> TreatmentType:
        treatment_type = TreatmentType(**data)
        db.add(treatment_type)
        db.commit()
        db.refresh(treatment_type)
        return treatment_type

    @staticmethod
    def update_treatment_type(db: Session, treatment_type: TreatmentType, **updates) -> TreatmentType:
        for key, value in updates.items():
            if value is not None and hasattr(treatment_type, key):
                setattr(treatment_type, key, value)

        db.commit()
        db.refresh(treatment_type)
        return treatment_type

    # Treatment Programs
    @staticmethod
    def get_treatment_programs(db: Session, include_inactive: bool = False) -> list[TreatmentProgram]:
        query = db.query(TreatmentProgram)
        if not include_inactive:
            query = query.filter(TreatmentProgram.is_active.is_(True))
        return query.order_by(TreatmentProgram.name.asc()).all()

    @staticmethod
    def get_treatment_program_by_id(db: Session, program_id: int) -> Optional[TreatmentProgram]:
        """Get a treatment program with its schedule and treatment types loaded"""
        return (
            db.query(TreatmentProgram)
            .options(
                joinedload(TreatmentProgram.schedule).joinedload(TreatmentProgramSchedule.treatment_type)
            )
            .filter(TreatmentProgram.id == program_id)
            .first()
        )

    @staticmethod
    def create_treatment_program(db: Session, **data) -> TreatmentProgram:
        program = TreatmentProgram(**data)
        db.add(program)
        db.commit()
        db.refresh(program)
        return program

    @staticmethod
    def update_treatment_program(db: Session, program: TreatmentProgram, **updates) -> TreatmentProgram:
        for key, value in updates.items():
            if value is not None and hasattr(program, key):
                setattr(program, key, value)

        db.commit()
        db.refresh(program)
        return program

    # Schedule Entries
    @staticmethod
    def get_schedule_entry_by_id(db: Session, entry_id: int) -> Optional[TreatmentProgramSchedule]:
        return db.query(TreatmentProgramSchedule).filter(TreatmentProgramSchedule.id == entry_id).first()

    @staticmethod
    def get_schedule_entries_for_month(
        db: Session, program_id: int, month: int, include_flexible: bool = True
    ) -> list[TreatmentProgramSchedule]:
        """Entries anchored to ``month``, plus flexible entries when requested"""
        query = db.query(TreatmentProgramSchedule).filter(
            TreatmentProgramSchedule.treatment_program_id == program_id
        )
        if include_flexible:
            query = query.filter(
                or_(
                    TreatmentProgramSchedule.month == month,
                    TreatmentProgramSchedule.is_flexible.is_(True),
                )
            )
        else:
            query = query.filter(TreatmentProgramSchedule.month == month)
        return query.order_by(TreatmentProgramSchedule.id.asc()).all()

    @staticmethod
    def create_schedule_entry(db: Session, **data) -> TreatmentProgramSchedule:
        entry = TreatmentProgramSchedule(**data)
        db.add(entry)
        db.commit()
        db.refresh(entry)
        return entry

    @staticmethod
    def delete_schedule_entry(db: Session, entry: TreatmentProgramSchedule) -> None:
        db.delete(entry)
        db.commit()
