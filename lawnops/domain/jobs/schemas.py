"""Job domain schemas - Pydantic models for validation"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel

from ...models import InstanceStatus, JobStatus


class JobCreate(BaseModel):
    clientId: int
    scheduledDate: datetime
    assignedToId: Optional[int] = None
    notes: Optional[str] = None


class JobUpdate(BaseModel):
    scheduledDate: Optional[datetime] = None
    assignedToId: Optional[int] = None
    status: Optional[JobStatus] = None
    notes: Optional[str] = None


class JobResponse(BaseModel):
    id: int
    clientId: int
    clientName: Optional[str] = None
    clientAddress: Optional[str] = None
    gateCode: Optional[str] = None  # null unless the caller can view gate codes
    assignedToId: Optional[int] = None
    scheduledDate: datetime
    status: JobStatus
    startTime: Optional[datetime] = None
    endTime: Optional[datetime] = None
    notes: Optional[str] = None
    created_at: Optional[datetime] = None


class JobTreatmentCreate(BaseModel):
    """A treatment added to a job by hand"""

    treatmentTypeId: int
    quantity: Optional[int] = 1
    instructions: Optional[str] = None


class JobTreatmentUpdate(BaseModel):
    status: Optional[InstanceStatus] = None
    quantity: Optional[int] = None
    instructions: Optional[str] = None


class JobTreatmentResponse(BaseModel):
    id: int
    jobId: int
    treatmentTypeId: int
    treatmentTypeName: Optional[str] = None
    programTemplateTreatmentId: Optional[int] = None
    treatmentProgramScheduleId: Optional[int] = None
    seeded: bool
    status: InstanceStatus
    quantity: Optional[int] = None
    instructions: Optional[str] = None


class SeedTreatmentsRequest(BaseModel):
    """Exactly one source: a program template or a treatment program"""

    templateId: Optional[int] = None
    treatmentProgramId: Optional[int] = None
