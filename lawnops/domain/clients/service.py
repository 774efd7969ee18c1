"""Client service - Business logic for client operations"""

import logging
from typing import Optional

from sqlalchemy.orm import Session

from ...auth import CurrentStaff
from ...models import Client
from ...permissions import Capability
from ...shared.errors import NotFoundError, PermissionDeniedError
from .repository import ClientRepository
from .schemas import ClientCreate, ClientUpdate

logger = logging.getLogger(__name__)


class ClientService:
    """Service layer for client business logic"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = ClientRepository()

    def get_clients(self, search: Optional[str] = None) -> list[Client]:
        """Get all clients"""
        return self.repo.get_clients(self.db, search)

    def get_client(self, client_id: int) -> Client:
        """Get a specific client"""
        client = self.repo.get_client_by_id(self.db, client_id)
        if not client:
            raise NotFoundError("Client not found")
        return client

    def create_client(self, data: ClientCreate, current: CurrentStaff) -> Client:
        """Create a new client"""
        current.require(Capability.MANAGE_CLIENTS)
        self._check_sensitive_fields(data.gateCode, data.monthlyRate, current)

        client_data = {
            "name": data.name,
            "address": data.address,
            "email": data.email,
            "phone": data.phone,
            "gate_code": data.gateCode,
            "monthly_rate": data.monthlyRate,
            "latitude": data.latitude,
            "longitude": data.longitude,
            "notes": data.notes,
        }

        client = self.repo.create_client(self.db, **client_data)
        logger.info(f"📥 Created client {client.id} ({client.name}) as {current.role.value}")
        return client

    def update_client(self, client_id: int, data: ClientUpdate, current: CurrentStaff) -> Client:
        """Update a client"""
        current.require(Capability.MANAGE_CLIENTS)
        self._check_sensitive_fields(data.gateCode, data.monthlyRate, current)
        client = self.get_client(client_id)

        updates = {}
        if data.name is not None:
            updates["name"] = data.name
        if data.address is not None:
            updates["address"] = data.address
        if data.email is not None:
            updates["email"] = data.email
        if data.phone is not None:
            updates["phone"] = data.phone
        if data.gateCode is not None:
            updates["gate_code"] = data.gateCode
        if data.monthlyRate is not None:
            updates["monthly_rate"] = data.monthlyRate
        if data.latitude is not None:
            updates["latitude"] = data.latitude
        if data.longitude is not None:
            updates["longitude"] = data.longitude
        if data.notes is not None:
            updates["notes"] = data.notes

        return self.repo.update_client(self.db, client, **updates)

    def delete_client(self, client_id: int, current: CurrentStaff) -> dict:
        """Delete a client along with its jobs and programs"""
        current.require(Capability.MANAGE_CLIENTS)
        client = self.get_client(client_id)
        self.repo.delete_client(self.db, client)
        logger.info(f"🗑️ Deleted client {client_id}")
        return {"message": "Client deleted"}

    @staticmethod
    def _check_sensitive_fields(gate_code, monthly_rate, current: CurrentStaff) -> None:
        """A caller may only write fields it is allowed to read"""
        if gate_code is not None and not current.can_view_gate_code:
            raise PermissionDeniedError("Not allowed to set gate codes")
        if monthly_rate is not None and not current.can_view_money:
            raise PermissionDeniedError("Not allowed to set monthly rates")
