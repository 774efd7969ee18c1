from decimal import Decimal

import pytest

from lawnops.auth import CurrentStaff
from lawnops.domain.clients.schemas import ClientCreate, ClientUpdate
from lawnops.domain.clients.service import ClientService
from lawnops.permissions import StaffRole
from lawnops.shared.errors import NotFoundError, PermissionDeniedError


@pytest.fixture
def service(db):
    return ClientService(db)


def test_team_leader_creates_client_with_sensitive_fields(service, team_leader):
    client = service.create_client(
        ClientCreate(
            name="Oak Ridge",
            address="9 Oak Rd",
            email="Office@OakRidge.com",
            gateCode="1111",
            monthlyRate=Decimal("120.00"),
        ),
        team_leader,
    )
    assert client.email == "office@oakridge.com"
    assert client.gate_code == "1111"


def test_sensitive_fields_need_matching_capability(service, lawn_client):
    # staff can see neither money nor gate codes, so they may not set them either
    staff = CurrentStaff(role=StaffRole.STAFF)
    with pytest.raises(PermissionDeniedError):
        service.update_client(lawn_client.id, ClientUpdate(gateCode="0000"), staff)


def test_update_client(service, lawn_client, manager):
    updated = service.update_client(lawn_client.id, ClientUpdate(notes="Dog in back yard"), manager)
    assert updated.notes == "Dog in back yard"
    assert updated.gate_code == "4321"


def test_search_clients(service, lawn_client, team_leader):
    service.create_client(ClientCreate(name="Birch Court", address="4 Birch Ct"), team_leader)

    assert [c.name for c in service.get_clients("meadow")] == ["Green Acres HOA"]
    assert [c.name for c in service.get_clients()] == ["Birch Court", "Green Acres HOA"]


def test_delete_client(service, lawn_client, manager):
    client_id = lawn_client.id
    service.delete_client(client_id, manager)
    with pytest.raises(NotFoundError):
        service.get_client(client_id)
