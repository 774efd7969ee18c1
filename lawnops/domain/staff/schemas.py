"""Staff domain schemas"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel

from ...permissions import StaffRole


class StaffCreate(BaseModel):
    name: str
    phone: Optional[str] = None
    role: StaffRole = StaffRole.STAFF


class StaffUpdate(BaseModel):
    name: Optional[str] = None
    phone: Optional[str] = None
    role: Optional[StaffRole] = None


class StaffResponse(BaseModel):
    id: int
    name: str
    phone: Optional[str] = None
    role: StaffRole
    canViewMoney: bool
    canViewGateCode: bool
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True
