from datetime import datetime

import pytest

from lawnops.domain.jobs.schemas import JobCreate, JobTreatmentCreate, JobTreatmentUpdate, JobUpdate
from lawnops.domain.jobs.service import JobService
from lawnops.domain.programs.service import ProgramService
from lawnops.domain.treatments.schemas import TreatmentProgramCreate
from lawnops.domain.treatments.service import TreatmentService
from lawnops.models import InstanceStatus, JobStatus, TreatmentType
from lawnops.shared.errors import NotFoundError, PermissionDeniedError, ValidationError

START = datetime(2024, 3, 1).date()


@pytest.fixture
def service(db):
    return JobService(db)


@pytest.fixture
def programs(db):
    return ProgramService(db)


@pytest.fixture
def aeration(db):
    treatment_type = TreatmentType(name="Core Aeration", category="aeration")
    db.add(treatment_type)
    db.commit()
    db.refresh(treatment_type)
    return treatment_type


def test_create_job(service, lawn_client, staff_member, team_leader):
    job = service.create_job(
        JobCreate(
            clientId=lawn_client.id,
            scheduledDate=datetime(2024, 4, 10, 9, 0),
            assignedToId=staff_member.id,
        ),
        team_leader,
    )
    assert job.status == "scheduled"
    assert service.get_jobs(on_date=datetime(2024, 4, 10).date()) == [job]
    assert service.get_jobs(on_date=datetime(2024, 4, 11).date()) == []


def test_create_job_checks_references(service, lawn_client, team_leader, crew):
    with pytest.raises(NotFoundError):
        service.create_job(JobCreate(clientId=999, scheduledDate=datetime(2024, 4, 10)), team_leader)
    with pytest.raises(NotFoundError):
        service.create_job(
            JobCreate(clientId=lawn_client.id, scheduledDate=datetime(2024, 4, 10), assignedToId=999),
            team_leader,
        )
    with pytest.raises(PermissionDeniedError):
        service.create_job(JobCreate(clientId=lawn_client.id, scheduledDate=datetime(2024, 4, 10)), crew)


def test_crew_moves_job_through_lifecycle(service, lawn_client, make_job, crew):
    job = make_job(lawn_client)

    started = service.update_job(job.id, JobUpdate(status=JobStatus.IN_PROGRESS), crew)
    assert started.start_time is not None
    done = service.update_job(job.id, JobUpdate(status=JobStatus.COMPLETED), crew)
    assert done.end_time is not None

    with pytest.raises(ValidationError):
        service.update_job(job.id, JobUpdate(status=JobStatus.SCHEDULED), crew)


def test_crew_cannot_reschedule(service, lawn_client, make_job, crew):
    job = make_job(lawn_client)
    with pytest.raises(PermissionDeniedError):
        service.update_job(job.id, JobUpdate(scheduledDate=datetime(2024, 5, 1)), crew)


def test_completing_job_completes_fulfilled_instances(
    service, programs, lawn_client, template, fertilizer, staff_member, make_job, manager
):
    program = programs.assign_program(lawn_client.id, template.id, START, manager)
    planned_service = programs.add_program_service(program.id, 4, 2024, manager)
    planned_treatment = programs.add_program_treatment(program.id, fertilizer.id, 4, 2024, manager)
    job = make_job(lawn_client, assigned_to=staff_member)
    programs.fulfill_service_with_job(planned_service.id, job.id, manager)
    programs.fulfill_treatment_with_job(planned_treatment.id, job.id, manager)

    service.update_job(job.id, JobUpdate(status=JobStatus.COMPLETED), manager)

    assert programs.get_program_service(planned_service.id).status == "completed"
    treatment = programs.get_program_treatment(planned_treatment.id)
    assert treatment.status == "completed"
    assert treatment.completed_by_id == staff_member.id
    assert treatment.completed_at is not None


def test_cancelling_job_releases_fulfilled_instances(
    service, programs, lawn_client, template, make_job, manager
):
    program = programs.assign_program(lawn_client.id, template.id, START, manager)
    planned = programs.add_program_service(program.id, 4, 2024, manager)
    job = make_job(lawn_client)
    programs.fulfill_service_with_job(planned.id, job.id, manager)

    service.update_job(job.id, JobUpdate(status=JobStatus.CANCELLED), manager)

    released = programs.get_program_service(planned.id)
    assert released.status == InstanceStatus.PENDING.value
    assert released.job_id is None


def test_delete_job_releases_scheduled_instance(
    service, programs, lawn_client, template, make_job, manager
):
    program = programs.assign_program(lawn_client.id, template.id, START, manager)
    planned = programs.add_program_service(program.id, 4, 2024, manager)
    job = make_job(lawn_client)
    programs.fulfill_service_with_job(planned.id, job.id, manager)

    assert service.delete_job(job.id, manager) == {"success": True}

    released = programs.get_program_service(planned.id)
    assert released.status == "pending"
    assert released.job_id is None


# Treatment seeding


def test_seed_from_template_uses_job_month(
    service, programs, lawn_client, template, fertilizer, aeration, make_job, manager
):
    programs.link_treatment_to_template(template.id, fertilizer.id, 4, 2, "Half rate", manager)
    programs.link_treatment_to_template(template.id, aeration.id, 4, None, None, manager)
    programs.link_treatment_to_template(template.id, aeration.id, 9, None, None, manager)
    job = make_job(lawn_client, scheduled=datetime(2024, 4, 10, 9, 0))

    seeded = service.seed_treatments(job.id, manager, template_id=template.id)

    assert sorted(t.treatment_type_id for t in seeded) == sorted([fertilizer.id, aeration.id])
    fert = next(t for t in seeded if t.treatment_type_id == fertilizer.id)
    assert fert.quantity == 2
    assert fert.instructions == "Half rate"
    assert all(t.status == "pending" for t in seeded)


def test_reseeding_keeps_manual_treatments(
    service, programs, lawn_client, template, fertilizer, aeration, make_job, manager
):
    programs.link_treatment_to_template(template.id, fertilizer.id, 4, None, None, manager)
    job = make_job(lawn_client)
    manual = service.add_job_treatment(job.id, JobTreatmentCreate(treatmentTypeId=aeration.id), manager)

    service.seed_treatments(job.id, manager, template_id=template.id)
    treatments = service.seed_treatments(job.id, manager, template_id=template.id)

    assert len(treatments) == 2
    assert manual.id in {t.id for t in treatments}


def test_seed_from_treatment_program_includes_flexible(
    service, lawn_client, fertilizer, aeration, make_job, manager, db
):
    treatments = TreatmentService(db)
    program = treatments.create_treatment_program(TreatmentProgramCreate(name="Turf"), manager)
    april = treatments.add_schedule_entry(program.id, fertilizer.id, 4, False, 1, None, manager)
    treatments.add_schedule_entry(program.id, fertilizer.id, 6, False, None, None, manager)
    anytime = treatments.add_schedule_entry(program.id, aeration.id, None, True, None, None, manager)
    job = make_job(lawn_client)

    seeded = service.seed_treatments(job.id, manager, treatment_program_id=program.id)
    again = service.seed_treatments(job.id, manager, treatment_program_id=program.id)

    assert {t.treatment_program_schedule_id for t in seeded} == {april.id, anytime.id}
    assert len(again) == 2


def test_seed_needs_exactly_one_source(service, lawn_client, template, make_job, manager):
    job = make_job(lawn_client)
    with pytest.raises(ValidationError):
        service.seed_treatments(job.id, manager)
    with pytest.raises(ValidationError):
        service.seed_treatments(job.id, manager, template_id=template.id, treatment_program_id=1)
    with pytest.raises(NotFoundError):
        service.seed_treatments(job.id, manager, template_id=999)


def test_clear_seeded_treatments(
    service, programs, lawn_client, template, fertilizer, aeration, make_job, manager
):
    programs.link_treatment_to_template(template.id, fertilizer.id, 4, None, None, manager)
    job = make_job(lawn_client)
    service.add_job_treatment(job.id, JobTreatmentCreate(treatmentTypeId=aeration.id), manager)
    service.seed_treatments(job.id, manager, template_id=template.id)

    assert service.clear_seeded_treatments(job.id, manager) == {"removed": 1}
    remaining = service.get_job_treatments(job.id)
    assert [t.treatment_type_id for t in remaining] == [aeration.id]


def test_crew_marks_job_treatment_done(service, lawn_client, fertilizer, make_job, manager, crew):
    job = make_job(lawn_client)
    item = service.add_job_treatment(job.id, JobTreatmentCreate(treatmentTypeId=fertilizer.id), manager)

    done = service.update_job_treatment(item.id, JobTreatmentUpdate(status=InstanceStatus.COMPLETED), crew)

    assert done.status == "completed"
    with pytest.raises(ValidationError):
        service.update_job_treatment(item.id, JobTreatmentUpdate(status=InstanceStatus.PENDING), crew)


def test_rescheduling_job_moves_fulfilled_service(
    service, programs, lawn_client, template, make_job, manager
):
    program = programs.assign_program(lawn_client.id, template.id, START, manager)
    planned = programs.add_program_service(program.id, 4, 2024, manager)
    job = make_job(lawn_client, scheduled=datetime(2024, 4, 10, 9, 0))
    programs.fulfill_service_with_job(planned.id, job.id, manager)

    service.update_job(job.id, JobUpdate(scheduledDate=datetime(2024, 4, 24, 9, 0)), manager)

    moved = programs.get_program_service(planned.id)
    assert moved.scheduled_date == datetime(2024, 4, 24).date()
    assert moved.status == "scheduled"
    assert moved.job_id == job.id


def test_rescheduling_leaves_completed_service_alone(
    service, programs, lawn_client, template, make_job, manager
):
    program = programs.assign_program(lawn_client.id, template.id, START, manager)
    planned = programs.add_program_service(program.id, 4, 2024, manager)
    job = make_job(lawn_client)
    programs.fulfill_service_with_job(planned.id, job.id, manager)
    service.update_job(job.id, JobUpdate(status=JobStatus.COMPLETED), manager)

    service.update_job(job.id, JobUpdate(scheduledDate=datetime(2024, 4, 30, 9, 0)), manager)

    assert programs.get_program_service(planned.id).scheduled_date == datetime(2024, 4, 10).date()


def test_removing_schedule_entry_drops_pending_seeded_rows(
    service, lawn_client, fertilizer, aeration, make_job, manager, crew, db
):
    treatments = TreatmentService(db)
    program = treatments.create_treatment_program(TreatmentProgramCreate(name="Turf"), manager)
    april = treatments.add_schedule_entry(program.id, fertilizer.id, 4, False, None, None, manager)
    anytime = treatments.add_schedule_entry(program.id, aeration.id, None, True, None, None, manager)
    first = make_job(lawn_client)
    second = make_job(lawn_client, scheduled=datetime(2024, 4, 17, 9, 0))
    service.seed_treatments(first.id, manager, treatment_program_id=program.id)
    done = next(
        t
        for t in service.seed_treatments(second.id, manager, treatment_program_id=program.id)
        if t.treatment_program_schedule_id == april.id
    )
    service.update_job_treatment(done.id, JobTreatmentUpdate(status=InstanceStatus.COMPLETED), crew)

    treatments.remove_schedule_entry(april.id, manager)

    assert [t.treatment_program_schedule_id for t in service.get_job_treatments(first.id)] == [anytime.id]
    # Finished work stays on the job
    assert done.id in {t.id for t in service.get_job_treatments(second.id)}
