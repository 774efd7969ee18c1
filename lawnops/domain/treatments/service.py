"""Treatment service - catalog of treatment types and settings-defined treatment schedules"""

import logging
from collections import defaultdict
from typing import Optional

from sqlalchemy.orm import Session

from ...auth import CurrentStaff
from ...models import TreatmentProgram, TreatmentProgramSchedule, TreatmentType
from ...permissions import Capability
from ...services import treatment_seeding
from ...shared.errors import NotFoundError, ValidationError
from ...shared.validators import validate_month
from .repository import TreatmentRepository
from .schemas import (
    TreatmentProgramCreate,
    TreatmentProgramUpdate,
    TreatmentTypeCreate,
    TreatmentTypeUpdate,
)

logger = logging.getLogger(__name__)


class TreatmentService:
    """Service layer for treatment types and treatment programs"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = TreatmentRepository()

    # ========================================================================
    # TREATMENT TYPES
    # ========================================================================

    def get_treatment_types(self, include_inactive: bool = False) -> list[TreatmentType]:
        return self.repo.get_treatment_types(self.db, include_inactive)

    def get_treatment_type(self, treatment_type_id: int) -> TreatmentType:
        treatment_type = self.repo.get_treatment_type_by_id(self.db, treatment_type_id)
        if not treatment_type:
            raise NotFoundError("Treatment type not found")
        return treatment_type

    def create_treatment_type(self, data: TreatmentTypeCreate, current: CurrentStaff) -> TreatmentType:
        current.require(Capability.MANAGE_SETTINGS)
        treatment_type = self.repo.create_treatment_type(
            self.db,
            name=data.name,
            category=data.category.value,
            default_notes=data.defaultNotes,
        )
        logger.info(f"🧪 Created treatment type {treatment_type.id} ({treatment_type.name})")
        return treatment_type

    def update_treatment_type(
        self, treatment_type_id: int, data: TreatmentTypeUpdate, current: CurrentStaff
    ) -> TreatmentType:
        current.require(Capability.MANAGE_SETTINGS)
        treatment_type = self.get_treatment_type(treatment_type_id)

        updates = {}
        if data.name is not None:
            updates["name"] = data.name
        if data.category is not None:
            updates["category"] = data.category.value
        if data.defaultNotes is not None:
            updates["default_notes"] = data.defaultNotes
        if data.isActive is not None:
            updates["is_active"] = data.isActive

        return self.repo.update_treatment_type(self.db, treatment_type, **updates)

    # ========================================================================
    # TREATMENT PROGRAMS
    # ========================================================================

    def get_treatment_programs(self, include_inactive: bool = False) -> list[TreatmentProgram]:
        return self.repo.get_treatment_programs(self.db, include_inactive)

    def get_treatment_program(self, program_id: int) -> TreatmentProgram:
        program = self.repo.get_treatment_program_by_id(self.db, program_id)
        if not program:
            raise NotFoundError("Treatment program not found")
        return program

    def create_treatment_program(
        self, data: TreatmentProgramCreate, current: CurrentStaff
    ) -> TreatmentProgram:
        current.require(Capability.MANAGE_SETTINGS)
        program = self.repo.create_treatment_program(
            self.db, name=data.name, description=data.description
        )
        logger.info(f"📋 Created treatment program {program.id} ({program.name})")
        return program

    def update_treatment_program(
        self, program_id: int, data: TreatmentProgramUpdate, current: CurrentStaff
    ) -> TreatmentProgram:
        current.require(Capability.MANAGE_SETTINGS)
        program = self.get_treatment_program(program_id)

        updates = {}
        if data.name is not None:
            updates["name"] = data.name
        if data.description is not None:
            updates["description"] = data.description
        if data.isActive is not None:
            updates["is_active"] = data.isActive

        return self.repo.update_treatment_program(self.db, program, **updates)

    def add_schedule_entry(
        self,
        treatment_program_id: int,
        treatment_type_id: int,
        month: Optional[int],
        is_flexible: bool,
        visit_number: Optional[int],
        instructions: Optional[str],
        current: CurrentStaff,
        quantity: Optional[int] = None,
    ) -> TreatmentProgramSchedule:
        """
        Add an entry to a treatment program's schedule.

        An entry is either anchored to a month or flexible (applied at any
        visit), never both and never neither.

        Raises:
            ValidationError: month/isFlexible combination is invalid, month is
                out of range, or visit number is not positive
            NotFoundError: treatment program or treatment type does not exist
        """
        current.require(Capability.MANAGE_SETTINGS)

        if month is None and not is_flexible:
            raise ValidationError("A schedule entry needs either a month or isFlexible=true")
        if month is not None and is_flexible:
            raise ValidationError("A schedule entry cannot have a month and be flexible")
        if month is not None:
            validate_month(month)
        if visit_number is not None and visit_number < 1:
            raise ValidationError("visitNumber must be a positive integer")
        if quantity is not None and quantity < 1:
            raise ValidationError("quantity must be a positive integer")

        program = self.get_treatment_program(treatment_program_id)
        self.get_treatment_type(treatment_type_id)

        entry = self.repo.create_schedule_entry(
            self.db,
            treatment_program_id=program.id,
            treatment_type_id=treatment_type_id,
            month=month,
            is_flexible=bool(is_flexible),
            visit_number=visit_number,
            quantity=quantity,
            instructions=instructions,
        )
        slot = "flexible" if entry.is_flexible else f"month {entry.month}"
        logger.info(f"📅 Added schedule entry {entry.id} to treatment program {program.id} ({slot})")
        return entry

    def remove_schedule_entry(self, entry_id: int, current: CurrentStaff) -> dict:
        current.require(Capability.MANAGE_SETTINGS)
        entry = self.repo.get_schedule_entry_by_id(self.db, entry_id)
        if not entry:
            raise NotFoundError("Schedule entry not found")
        treatment_seeding.drop_treatments_from_source(self.db, schedule_entry_id=entry.id)
        self.repo.delete_schedule_entry(self.db, entry)
        return {"success": True}

    @staticmethod
    def group_schedule(
        entries: list[TreatmentProgramSchedule],
    ) -> tuple[dict[int, list[TreatmentProgramSchedule]], list[TreatmentProgramSchedule]]:
        """Split a schedule into month buckets (ordered by visit number) and flexible entries"""
        by_month: dict[int, list[TreatmentProgramSchedule]] = defaultdict(list)
        flexible = []
        for entry in entries:
            if entry.is_flexible:
                flexible.append(entry)
            else:
                by_month[entry.month].append(entry)

        def visit_order(entry: TreatmentProgramSchedule):
            # Entries without a visit number sort after numbered ones
            return (entry.visit_number is None, entry.visit_number or 0, entry.id)

        return (
            {month: sorted(items, key=visit_order) for month, items in sorted(by_month.items())},
            sorted(flexible, key=visit_order),
        )
