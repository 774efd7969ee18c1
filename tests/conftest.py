import os

os.environ.setdefault("SECURITY_HEADERS_ENABLED", "false")
os.environ.setdefault("DB_LOG_SLOW_QUERIES", "false")

from datetime import datetime

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from lawnops.auth import CurrentStaff
from lawnops.database import Base, get_db
from lawnops.main import app
from lawnops.models import Client, Job, ProgramTemplate, Staff, TreatmentType
from lawnops.permissions import StaffRole
from lawnops.shared.services_per_month import serialize_services_per_month


@pytest.fixture
def db():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSession()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture
def client(db):
    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def owner():
    return CurrentStaff(role=StaffRole.OWNER, staff_id=1)


@pytest.fixture
def manager():
    return CurrentStaff(role=StaffRole.MANAGER)


@pytest.fixture
def team_leader():
    return CurrentStaff(role=StaffRole.TEAM_LEADER)


@pytest.fixture
def crew():
    return CurrentStaff(role=StaffRole.CREW_MEMBER)


@pytest.fixture
def staff_member(db):
    staff = Staff(name="Sam Rivera", role=StaffRole.CREW_MEMBER.value)
    db.add(staff)
    db.commit()
    db.refresh(staff)
    return staff


@pytest.fixture
def lawn_client(db):
    client = Client(
        name="Green Acres HOA",
        address="12 Meadow Lane",
        gate_code="4321",
        monthly_rate=180,
    )
    db.add(client)
    db.commit()
    db.refresh(client)
    return client


@pytest.fixture
def fertilizer(db):
    treatment_type = TreatmentType(name="Spring Fertilizer", category="fertilizer")
    db.add(treatment_type)
    db.commit()
    db.refresh(treatment_type)
    return treatment_type


@pytest.fixture
def template(db):
    template = ProgramTemplate(
        name="Bi-weekly Care",
        services_per_year=24,
        services_per_month=serialize_services_per_month([2] * 12),
        default_cadence="two_week",
        price_per_visit=45,
    )
    db.add(template)
    db.commit()
    db.refresh(template)
    return template


@pytest.fixture
def make_job(db):
    def _make_job(client, scheduled=datetime(2024, 4, 10, 9, 0), assigned_to=None):
        job = Job(
            client_id=client.id,
            scheduled_date=scheduled,
            assigned_to_id=assigned_to.id if assigned_to else None,
            status="scheduled",
        )
        db.add(job)
        db.commit()
        db.refresh(job)
        return job

    return _make_job
