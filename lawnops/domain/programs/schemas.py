"""Program domain schemas - Pydantic models for validation"""

from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel

from ...models import ClientProgramStatus, InstanceStatus
from ...services.service_distribution import Cadence


class ProgramTemplateCreate(BaseModel):
    """servicesPerMonth is derived from servicesPerYear when omitted"""

    name: str
    description: Optional[str] = None
    servicesPerYear: int
    servicesPerMonth: Optional[list[int]] = None
    defaultCadence: Cadence = Cadence.TWO_WEEK
    pricePerVisit: Optional[Decimal] = None


class ProgramTemplateUpdate(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None
    servicesPerYear: Optional[int] = None
    servicesPerMonth: Optional[list[int]] = None
    defaultCadence: Optional[Cadence] = None
    pricePerVisit: Optional[Decimal] = None
    isActive: Optional[bool] = None


class MonthlyDistributionUpdate(BaseModel):
    servicesPerMonth: list[int]


class TemplateTreatmentCreate(BaseModel):
    treatmentTypeId: int
    month: int
    quantity: Optional[int] = None
    instructions: Optional[str] = None


class TemplateTreatmentResponse(BaseModel):
    id: int
    programTemplateId: int
    treatmentTypeId: int
    treatmentTypeName: Optional[str] = None
    month: int
    quantity: Optional[int] = None
    instructions: Optional[str] = None


class ProgramTemplateResponse(BaseModel):
    """pricePerVisit is null for roles without view_money"""

    id: int
    name: str
    description: Optional[str] = None
    servicesPerYear: int
    servicesPerMonth: list[int]
    defaultCadence: Cadence
    pricePerVisit: Optional[Decimal] = None
    isActive: bool


class ProgramTemplateDetailResponse(ProgramTemplateResponse):
    treatments: list[TemplateTreatmentResponse] = []


class AssignProgramRequest(BaseModel):
    templateId: int
    startDate: date
    cadence: Optional[Cadence] = None
    customName: Optional[str] = None


class ClientProgramUpdate(BaseModel):
    status: Optional[ClientProgramStatus] = None
    cadence: Optional[Cadence] = None
    customName: Optional[str] = None


class ClientProgramResponse(BaseModel):
    id: int
    clientId: int
    templateId: int
    templateName: Optional[str] = None
    startDate: date
    cadence: Cadence
    status: ClientProgramStatus
    customName: Optional[str] = None
    created_at: Optional[datetime] = None


class ProgramServiceCreate(BaseModel):
    targetMonth: int
    targetYear: int
    scheduledDate: Optional[date] = None


class ProgramServiceUpdate(BaseModel):
    status: InstanceStatus
    scheduledDate: Optional[date] = None


class ProgramServiceResponse(BaseModel):
    id: int
    clientProgramId: int
    targetMonth: int
    targetYear: int
    scheduledDate: Optional[date] = None
    jobId: Optional[int] = None
    status: InstanceStatus


class ProgramTreatmentCreate(BaseModel):
    treatmentTypeId: int
    targetMonth: int
    targetYear: int
    dueDate: Optional[date] = None
    quantity: Optional[int] = None
    instructions: Optional[str] = None


class ProgramTreatmentUpdate(BaseModel):
    status: InstanceStatus
    dueDate: Optional[date] = None


class ProgramTreatmentResponse(BaseModel):
    id: int
    clientProgramId: int
    treatmentTypeId: int
    treatmentTypeName: Optional[str] = None
    targetMonth: int
    targetYear: int
    dueDate: Optional[date] = None
    jobId: Optional[int] = None
    status: InstanceStatus
    quantity: Optional[int] = None
    instructions: Optional[str] = None
    completedById: Optional[int] = None
    completedAt: Optional[datetime] = None


class FulfillWithJobRequest(BaseModel):
    jobId: int


class CompleteTreatmentRequest(BaseModel):
    """completedById defaults to the caller's X-Staff-Id"""

    completedById: Optional[int] = None
