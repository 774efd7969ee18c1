"""Client router - FastAPI endpoints for client operations"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...auth import CurrentStaff, get_current_staff
from ...database import get_db
from ...models import Client
from .schemas import ClientCreate, ClientResponse, ClientUpdate
from .service import ClientService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/clients", tags=["Clients"])


def get_client_service(db: Session = Depends(get_db)) -> ClientService:
    """Dependency injection for ClientService"""
    return ClientService(db)


def to_client_response(client: Client, current: CurrentStaff) -> ClientResponse:
    return ClientResponse(
        id=client.id,
        name=client.name,
        address=client.address,
        email=client.email,
        phone=client.phone,
        gateCode=client.gate_code if current.can_view_gate_code else None,
        monthlyRate=client.monthly_rate if current.can_view_money else None,
        latitude=client.latitude,
        longitude=client.longitude,
        notes=client.notes,
        created_at=client.created_at,
    )


@router.get("", response_model=list[ClientResponse])
async def get_clients(
    search: Optional[str] = Query(None),
    current: CurrentStaff = Depends(get_current_staff),
    service: ClientService = Depends(get_client_service),
):
    """Get all clients"""
    return [to_client_response(c, current) for c in service.get_clients(search)]


@router.get("/{client_id}", response_model=ClientResponse)
async def get_client(
    client_id: int,
    current: CurrentStaff = Depends(get_current_staff),
    service: ClientService = Depends(get_client_service),
):
    """Get a specific client"""
    return to_client_response(service.get_client(client_id), current)


@router.post("", response_model=ClientResponse, status_code=201)
async def create_client(
    data: ClientCreate,
    current: CurrentStaff = Depends(get_current_staff),
    service: ClientService = Depends(get_client_service),
):
    """Create a new client"""
    return to_client_response(service.create_client(data, current), current)


@router.patch("/{client_id}", response_model=ClientResponse)
async def update_client(
    client_id: int,
    data: ClientUpdate,
    current: CurrentStaff = Depends(get_current_staff),
    service: ClientService = Depends(get_client_service),
):
    """Update a client"""
    return to_client_response(service.update_client(client_id, data, current), current)


@router.delete("/{client_id}")
async def delete_client(
    client_id: int,
    current: CurrentStaff = Depends(get_current_staff),
    service: ClientService = Depends(get_client_service),
):
    """Delete a client"""
    return service.delete_client(client_id, current)
