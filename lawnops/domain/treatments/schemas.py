"""Treatment domain schemas - Pydantic models for validation"""

from typing import Optional

from pydantic import BaseModel

from ...models import TreatmentCategory


class TreatmentTypeCreate(BaseModel):
    name: str
    category: TreatmentCategory = TreatmentCategory.OTHER
    defaultNotes: Optional[str] = None


class TreatmentTypeUpdate(BaseModel):
    name: Optional[str] = None
    category: Optional[TreatmentCategory] = None
    defaultNotes: Optional[str] = None
    isActive: Optional[bool] = None


class TreatmentTypeResponse(BaseModel):
    id: int
    name: str
    category: TreatmentCategory
    defaultNotes: Optional[str] = None
    isActive: bool

    class Config:
        from_attributes = True


class TreatmentProgramCreate(BaseModel):
    name: str
    description: Optional[str] = None


class TreatmentProgramUpdate(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None
    isActive: Optional[bool] = None


class ScheduleEntryCreate(BaseModel):
    """
    A schedule entry is either month-anchored or flexible.
    The month/isFlexible combination is checked by TreatmentService.
    """

    treatmentTypeId: int
    month: Optional[int] = None
    isFlexible: bool = False
    visitNumber: Optional[int] = None
    quantity: Optional[int] = None
    instructions: Optional[str] = None


class ScheduleEntryResponse(BaseModel):
    id: int
    treatmentProgramId: int
    treatmentTypeId: int
    treatmentTypeName: Optional[str] = None
    month: Optional[int] = None
    isFlexible: bool
    visitNumber: Optional[int] = None
    quantity: Optional[int] = None
    instructions: Optional[str] = None


class TreatmentProgramResponse(BaseModel):
    id: int
    name: str
    description: Optional[str] = None
    isActive: bool


class TreatmentProgramDetailResponse(TreatmentProgramResponse):
    schedule: list[ScheduleEntryResponse] = []
    # month (1-12) → entries ordered by visit number
    byMonth: dict[int, list[ScheduleEntryResponse]] = {}
    flexible: list[ScheduleEntryResponse] = []
