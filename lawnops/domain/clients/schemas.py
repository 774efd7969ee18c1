"""Client domain schemas - Pydantic models for validation"""

from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, field_validator

from ...shared.validators import validate_email


class ClientCreate(BaseModel):
    """Schema for creating a new client"""

    name: str
    address: str
    email: Optional[str] = None
    phone: Optional[str] = None
    gateCode: Optional[str] = None
    monthlyRate: Optional[Decimal] = None
    latitude: Optional[str] = None
    longitude: Optional[str] = None
    notes: Optional[str] = None

    @field_validator("email")
    @classmethod
    def check_email(cls, v):
        if v:
            return validate_email(v)
        return v


class ClientUpdate(BaseModel):
    """Schema for updating an existing client"""

    name: Optional[str] = None
    address: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    gateCode: Optional[str] = None
    monthlyRate: Optional[Decimal] = None
    latitude: Optional[str] = None
    longitude: Optional[str] = None
    notes: Optional[str] = None

    @field_validator("email")
    @classmethod
    def check_email(cls, v):
        if v:
            return validate_email(v)
        return v


class ClientResponse(BaseModel):
    """Schema for client response. gateCode/monthlyRate are null for roles without access."""

    id: int
    name: str
    address: str
    email: Optional[str] = None
    phone: Optional[str] = None
    gateCode: Optional[str] = None
    monthlyRate: Optional[Decimal] = None
    latitude: Optional[str] = None
    longitude: Optional[str] = None
    notes: Optional[str] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True
