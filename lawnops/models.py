from enum import Enum

from sqlalchemy import (
    Boolean,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from .database import Base
from .shared.services_per_month import DEFAULT_SERVICES_PER_MONTH, serialize_services_per_month


class JobStatus(str, Enum):
    SCHEDULED = "scheduled"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class TreatmentCategory(str, Enum):
    FERTILIZER = "fertilizer"
    SOIL = "soil"
    AERATION = "aeration"
    IRRIGATION = "irrigation"
    PEST = "pest"
    OTHER = "other"


class ClientProgramStatus(str, Enum):
    ACTIVE = "active"
    PAUSED = "paused"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class InstanceStatus(str, Enum):
    """Status of a planned ClientProgramService / ClientProgramTreatment"""

    PENDING = "pending"
    SCHEDULED = "scheduled"
    COMPLETED = "completed"
    SKIPPED = "skipped"


class Staff(Base):
    __tablename__ = "staff"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    phone = Column(String(50), nullable=True)
    # crew_member, staff, team_leader, manager, owner
    role = Column(String(50), default="staff", nullable=False)
    created_at = Column(DateTime, server_default=func.now())

    jobs = relationship("Job", back_populates="assigned_to")


class Client(Base):
    __tablename__ = "clients"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    address = Column(String(500), nullable=False)
    email = Column(String(255), nullable=True)
    phone = Column(String(50), nullable=True)
    gate_code = Column(String(50), nullable=True)  # Hidden from roles without view_gate_code
    monthly_rate = Column(Numeric(10, 2), nullable=True)  # Hidden from roles without view_money
    latitude = Column(String(50), nullable=True)
    longitude = Column(String(50), nullable=True)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime, server_default=func.now())

    jobs = relationship("Job", back_populates="client", cascade="all, delete-orphan")
    programs = relationship(
        "ClientProgram", back_populates="client", cascade="all, delete-orphan"
    )


class Job(Base):
    """A single visit to a client's property"""

    __tablename__ = "jobs"

    id = Column(Integer, primary_key=True, index=True)
    client_id = Column(Integer, ForeignKey("clients.id"), nullable=False, index=True)
    assigned_to_id = Column(Integer, ForeignKey("staff.id"), nullable=True)
    scheduled_date = Column(DateTime, nullable=False)
    # scheduled → in_progress → completed, or cancelled
    status = Column(String(50), default=JobStatus.SCHEDULED.value, nullable=False, index=True)
    start_time = Column(DateTime, nullable=True)
    end_time = Column(DateTime, nullable=True)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime, server_default=func.now())

    client = relationship("Client", back_populates="jobs")
    assigned_to = relationship("Staff", back_populates="jobs")
    treatments = relationship("JobTreatment", back_populates="job", cascade="all, delete-orphan")
    feedback = relationship("Feedback", back_populates="job", cascade="all, delete-orphan")


class TreatmentType(Base):
    """Catalog entry for a chemical or service (fertilizer, aeration, ...)"""

    __tablename__ = "treatment_types"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    category = Column(String(50), default=TreatmentCategory.OTHER.value, nullable=False)
    default_notes = Column(Text, nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, server_default=func.now())


class TreatmentProgram(Base):
    """Settings-defined treatment schedule, independent of any client"""

    __tablename__ = "treatment_programs"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, server_default=func.now())

    schedule = relationship(
        "TreatmentProgramSchedule",
        back_populates="treatment_program",
        cascade="all, delete-orphan",
        order_by="TreatmentProgramSchedule.id",
    )


class TreatmentProgramSchedule(Base):
    """Either anchored to a month (1-12) or flexible (applied at any visit)"""

    __tablename__ = "treatment_program_schedule"

    id = Column(Integer, primary_key=True, index=True)
    treatment_program_id = Column(
        Integer, ForeignKey("treatment_programs.id"), nullable=False, index=True
    )
    treatment_type_id = Column(Integer, ForeignKey("treatment_types.id"), nullable=False)
    month = Column(Integer, nullable=True)
    is_flexible = Column(Boolean, default=False, nullable=False)
    visit_number = Column(Integer, nullable=True)  # Groups entries by visit order within a period
    quantity = Column(Integer, nullable=True)
    instructions = Column(Text, nullable=True)

    treatment_program = relationship("TreatmentProgram", back_populates="schedule")
    treatment_type = relationship("TreatmentType")


class ProgramTemplate(Base):
    """Reusable service offering, e.g. "24 visits/year" """

    __tablename__ = "program_templates"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    services_per_year = Column(Integer, nullable=False)
    # JSON array of 12 ints; sum must equal services_per_year
    services_per_month = Column(
        Text,
        nullable=False,
        default=lambda: serialize_services_per_month(DEFAULT_SERVICES_PER_MONTH),
    )
    default_cadence = Column(String(20), default="two_week", nullable=False)
    price_per_visit = Column(Numeric(10, 2), nullable=True)  # Hidden from roles without view_money
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    treatments = relationship(
        "ProgramTemplateTreatment",
        back_populates="template",
        cascade="all, delete-orphan",
        order_by="ProgramTemplateTreatment.month",
    )
    client_programs = relationship("ClientProgram", back_populates="template")


class ProgramTemplateTreatment(Base):
    __tablename__ = "program_template_treatments"

    id = Column(Integer, primary_key=True, index=True)
    program_template_id = Column(
        Integer, ForeignKey("program_templates.id"), nullable=False, index=True
    )
    treatment_type_id = Column(Integer, ForeignKey("treatment_types.id"), nullable=False)
    month = Column(Integer, nullable=False)  # 1-12
    quantity = Column(Integer, nullable=True)
    instructions = Column(Text, nullable=True)

    template = relationship("ProgramTemplate", back_populates="treatments")
    treatment_type = relationship("TreatmentType")


class ClientProgram(Base):
    """A client's live assignment of a program template"""

    __tablename__ = "client_programs"

    id = Column(Integer, primary_key=True, index=True)
    client_id = Column(Integer, ForeignKey("clients.id"), nullable=False, index=True)
    program_template_id = Column(Integer, ForeignKey("program_templates.id"), nullable=False)
    start_date = Column(Date, nullable=False)
    cadence = Column(String(20), nullable=True)  # Overrides template.default_cadence when set
    # active ↔ paused; active/paused → completed/cancelled
    status = Column(String(50), default=ClientProgramStatus.ACTIVE.value, nullable=False, index=True)
    custom_name = Column(String(255), nullable=True)
    created_at = Column(DateTime, server_default=func.now())

    client = relationship("Client", back_populates="programs")
    template = relationship("ProgramTemplate", back_populates="client_programs")
    services = relationship(
        "ClientProgramService", back_populates="client_program", cascade="all, delete-orphan"
    )
    treatments = relationship(
        "ClientProgramTreatment", back_populates="client_program", cascade="all, delete-orphan"
    )


class ClientProgramService(Base):
    """One planned (or completed) visit of a client program"""

    __tablename__ = "client_program_services"

    id = Column(Integer, primary_key=True, index=True)
    client_program_id = Column(
        Integer, ForeignKey("client_programs.id"), nullable=False, index=True
    )
    target_month = Column(Integer, nullable=False)  # 1-12
    target_year = Column(Integer, nullable=False)
    scheduled_date = Column(Date, nullable=True)
    # A job fulfils at most one planned service
    job_id = Column(Integer, ForeignKey("jobs.id"), nullable=True, unique=True)
    status = Column(String(50), default=InstanceStatus.PENDING.value, nullable=False)

    client_program = relationship("ClientProgram", back_populates="services")
    job = relationship("Job")


class ClientProgramTreatment(Base):
    """One planned (or completed) treatment of a client program"""

    __tablename__ = "client_program_treatments"

    id = Column(Integer, primary_key=True, index=True)
    client_program_id = Column(
        Integer, ForeignKey("client_programs.id"), nullable=False, index=True
    )
    treatment_type_id = Column(Integer, ForeignKey("treatment_types.id"), nullable=False)
    target_month = Column(Integer, nullable=False)  # 1-12
    target_year = Column(Integer, nullable=False)
    due_date = Column(Date, nullable=True)
    # A job fulfils at most one planned treatment
    job_id = Column(Integer, ForeignKey("jobs.id"), nullable=True, unique=True)
    status = Column(String(50), default=InstanceStatus.PENDING.value, nullable=False)
    quantity = Column(Integer, nullable=True)
    instructions = Column(Text, nullable=True)
    completed_by_id = Column(Integer, ForeignKey("staff.id"), nullable=True)
    completed_at = Column(DateTime, nullable=True)

    client_program = relationship("ClientProgram", back_populates="treatments")
    treatment_type = relationship("TreatmentType")
    job = relationship("Job")
    completed_by = relationship("Staff")


class JobTreatment(Base):
    """
    Treatment checklist item on a job.
    Rows with program_template_treatment_id were seeded from a template; the
    rest were added by hand and survive re-seeding.
    """

    __tablename__ = "job_treatments"

    id = Column(Integer, primary_key=True, index=True)
    job_id = Column(Integer, ForeignKey("jobs.id"), nullable=False, index=True)
    treatment_type_id = Column(Integer, ForeignKey("treatment_types.id"), nullable=False)
    program_template_treatment_id = Column(
        Integer, ForeignKey("program_template_treatments.id", ondelete="SET NULL"), nullable=True
    )
    treatment_program_schedule_id = Column(
        Integer, ForeignKey("treatment_program_schedule.id", ondelete="SET NULL"), nullable=True
    )
    status = Column(String(50), default=InstanceStatus.PENDING.value, nullable=False)
    quantity = Column(Integer, default=1, nullable=True)
    instructions = Column(Text, nullable=True)

    job = relationship("Job", back_populates="treatments")
    treatment_type = relationship("TreatmentType")


class Feedback(Base):
    """Customer rating left after a completed job"""

    __tablename__ = "feedback"

    id = Column(Integer, primary_key=True, index=True)
    job_id = Column(Integer, ForeignKey("jobs.id"), nullable=False, index=True)
    rating = Column(Integer, nullable=False)  # 1-5 stars
    comment = Column(Text, nullable=True)
    # positive, neutral, negative; filled by an external analysis step when one exists
    sentiment = Column(String(20), nullable=True)
    ai_analysis = Column(Text, nullable=True)
    created_at = Column(DateTime, server_default=func.now())

    job = relationship("Job", back_populates="feedback")
