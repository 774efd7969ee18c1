from datetime import date, datetime

import pytest

from lawnops.domain.jobs.service import JobService
from lawnops.domain.programs.schemas import (
    ClientProgramUpdate,
    ProgramTemplateCreate,
    ProgramTemplateUpdate,
)
from lawnops.domain.programs.service import ProgramService
from lawnops.models import Client, ClientProgramStatus, InstanceStatus
from lawnops.services.service_distribution import Cadence, get_services_array
from lawnops.shared.errors import NotFoundError, PermissionDeniedError, ValidationError

START = date(2024, 3, 1)


@pytest.fixture
def service(db):
    return ProgramService(db)


# Templates


def test_create_template_defaults_to_current_year_distribution(service, manager):
    template = service.create_template(
        ProgramTemplateCreate(name="Monthly", servicesPerYear=13), manager
    )
    months = service.template_months(template)
    assert months == get_services_array(date.today().year, 13)
    assert sum(months) == 13


def test_create_template_with_explicit_months(service, manager):
    months = [0, 0, 2, 3, 3, 3, 3, 3, 3, 2, 0, 0]
    template = service.create_template(
        ProgramTemplateCreate(name="Growing season", servicesPerYear=22, servicesPerMonth=months),
        manager,
    )
    assert service.template_months(template) == months


def test_create_template_rejects_mismatched_months(service, manager):
    with pytest.raises(ValidationError):
        service.create_template(
            ProgramTemplateCreate(name="Bad", servicesPerYear=24, servicesPerMonth=[1] * 12),
            manager,
        )


def test_create_template_requires_manage_settings(service, team_leader):
    with pytest.raises(PermissionDeniedError):
        service.create_template(ProgramTemplateCreate(name="X", servicesPerYear=24), team_leader)


def test_set_monthly_distribution_replaces_counts(service, template, manager):
    months = [1, 1, 3, 3, 3, 2, 2, 2, 3, 2, 1, 1]
    updated = service.set_monthly_distribution(template.id, months, manager)
    assert service.template_months(updated) == months
    assert updated.services_per_month == "[1, 1, 3, 3, 3, 2, 2, 2, 3, 2, 1, 1]"


def test_set_monthly_distribution_rejects_total_mismatch(service, template, manager):
    with pytest.raises(ValidationError) as exc_info:
        service.set_monthly_distribution(template.id, [3] * 12, manager)
    assert "36" in exc_info.value.message
    assert service.template_months(service.get_template(template.id)) == [2] * 12


@pytest.mark.parametrize(
    "counts",
    [
        [2] * 11,
        [2] * 13,
        [4, 2, 2, 2, 2, 2, 2, 2, 2, 2, 2, -2],
    ],
)
def test_set_monthly_distribution_rejects_bad_shapes(service, template, manager, counts):
    with pytest.raises(ValidationError):
        service.set_monthly_distribution(template.id, counts, manager)


def test_set_monthly_distribution_missing_template(service, manager):
    with pytest.raises(NotFoundError):
        service.set_monthly_distribution(999, [2] * 12, manager)


def test_update_template_checks_combined_state(service, template, manager):
    with pytest.raises(ValidationError):
        service.update_template(template.id, ProgramTemplateUpdate(servicesPerYear=26), manager)

    updated = service.update_template(
        template.id,
        ProgramTemplateUpdate(servicesPerYear=26, servicesPerMonth=[3, 3] + [2] * 10),
        manager,
    )
    assert updated.services_per_year == 26


def test_update_template_can_deactivate(service, template, manager):
    updated = service.update_template(template.id, ProgramTemplateUpdate(isActive=False), manager)
    assert updated.is_active is False
    assert service.get_templates() == []
    assert service.get_templates(include_inactive=True) == [updated]


# Template treatments


def test_link_treatment_to_template(service, template, fertilizer, manager):
    treatment = service.link_treatment_to_template(
        template.id, fertilizer.id, 4, 2, "Apply before rain", manager
    )
    again = service.link_treatment_to_template(template.id, fertilizer.id, 4, None, None, manager)

    assert treatment.month == 4
    assert treatment.quantity == 2
    assert {t.id for t in service.get_template(template.id).treatments} == {treatment.id, again.id}


@pytest.mark.parametrize("month", [0, 13, -1])
def test_link_treatment_rejects_month_out_of_range(service, template, fertilizer, manager, month):
    with pytest.raises(ValidationError):
        service.link_treatment_to_template(template.id, fertilizer.id, month, None, None, manager)


def test_link_treatment_missing_records(service, template, fertilizer, manager):
    with pytest.raises(NotFoundError):
        service.link_treatment_to_template(999, fertilizer.id, 4, None, None, manager)
    with pytest.raises(NotFoundError):
        service.link_treatment_to_template(template.id, 999, 4, None, None, manager)


def test_remove_template_treatment(service, template, fertilizer, manager):
    treatment = service.link_treatment_to_template(template.id, fertilizer.id, 5, None, None, manager)
    assert service.remove_template_treatment(treatment.id, manager) == {"success": True}
    with pytest.raises(NotFoundError):
        service.remove_template_treatment(treatment.id, manager)


# Client programs


def test_assign_program_starts_active_and_empty(service, lawn_client, template, team_leader):
    program = service.assign_program(lawn_client.id, template.id, START, team_leader)

    assert program.status == ClientProgramStatus.ACTIVE.value
    assert program.start_date == START
    assert program.services == []
    assert program.treatments == []
    assert service.effective_cadence(program) == Cadence.TWO_WEEK


def test_assign_program_with_cadence_override(service, lawn_client, template, team_leader):
    program = service.assign_program(
        lawn_client.id, template.id, START, team_leader, cadence=Cadence.FOUR_WEEK
    )
    assert service.effective_cadence(program) == Cadence.FOUR_WEEK


def test_assign_program_missing_client_or_template(service, lawn_client, template, team_leader):
    with pytest.raises(NotFoundError):
        service.assign_program(999, template.id, START, team_leader)
    with pytest.raises(NotFoundError):
        service.assign_program(lawn_client.id, 999, START, team_leader)


def test_assign_program_requires_manage_clients(service, lawn_client, template, crew):
    with pytest.raises(PermissionDeniedError):
        service.assign_program(lawn_client.id, template.id, START, crew)


def test_assign_inactive_template_is_rejected(service, lawn_client, template, manager):
    service.update_template(template.id, ProgramTemplateUpdate(isActive=False), manager)
    with pytest.raises(ValidationError):
        service.assign_program(lawn_client.id, template.id, START, manager)


def test_client_program_status_transitions(service, lawn_client, template, manager):
    program = service.assign_program(lawn_client.id, template.id, START, manager)

    paused = service.update_client_program(
        program.id, ClientProgramUpdate(status=ClientProgramStatus.PAUSED), manager
    )
    assert paused.status == "paused"
    resumed = service.update_client_program(
        program.id, ClientProgramUpdate(status=ClientProgramStatus.ACTIVE), manager
    )
    assert resumed.status == "active"
    cancelled = service.update_client_program(
        program.id, ClientProgramUpdate(status=ClientProgramStatus.CANCELLED), manager
    )
    assert cancelled.status == "cancelled"

    with pytest.raises(ValidationError):
        service.update_client_program(
            program.id, ClientProgramUpdate(status=ClientProgramStatus.ACTIVE), manager
        )


def test_closed_program_accepts_no_new_instances(service, lawn_client, template, manager):
    program = service.assign_program(lawn_client.id, template.id, START, manager)
    service.update_client_program(
        program.id, ClientProgramUpdate(status=ClientProgramStatus.COMPLETED), manager
    )
    with pytest.raises(ValidationError):
        service.add_program_service(program.id, 5, 2024, manager)


# Planned services and treatments


def test_program_service_lifecycle(service, lawn_client, template, manager):
    program = service.assign_program(lawn_client.id, template.id, START, manager)
    planned = service.add_program_service(program.id, 4, 2024, manager)
    assert planned.status == InstanceStatus.PENDING.value

    scheduled = service.update_program_service_status(
        planned.id, InstanceStatus.SCHEDULED, manager, scheduled_date=date(2024, 4, 12)
    )
    assert scheduled.status == "scheduled"
    assert scheduled.scheduled_date == date(2024, 4, 12)

    skipped = service.update_program_service_status(planned.id, InstanceStatus.SKIPPED, manager)
    assert skipped.status == "skipped"
    with pytest.raises(ValidationError):
        service.update_program_service_status(planned.id, InstanceStatus.PENDING, manager)


def test_add_program_service_validates_month(service, lawn_client, template, manager):
    program = service.assign_program(lawn_client.id, template.id, START, manager)
    with pytest.raises(ValidationError):
        service.add_program_service(program.id, 13, 2024, manager)


def test_fulfill_service_with_job(service, lawn_client, template, manager, make_job):
    program = service.assign_program(lawn_client.id, template.id, START, manager)
    planned = service.add_program_service(program.id, 4, 2024, manager)
    job = make_job(lawn_client)

    fulfilled = service.fulfill_service_with_job(planned.id, job.id, manager)

    assert fulfilled.job_id == job.id
    assert fulfilled.status == "scheduled"
    assert fulfilled.scheduled_date == date(2024, 4, 10)


def test_job_fulfils_at_most_one_service(service, lawn_client, template, manager, make_job):
    program = service.assign_program(lawn_client.id, template.id, START, manager)
    first = service.add_program_service(program.id, 4, 2024, manager)
    second = service.add_program_service(program.id, 4, 2024, manager)
    job = make_job(lawn_client)

    service.fulfill_service_with_job(first.id, job.id, manager)
    with pytest.raises(ValidationError):
        service.fulfill_service_with_job(second.id, job.id, manager)


def test_fulfil_rejects_other_clients_job(service, db, lawn_client, template, manager, make_job):
    other = Client(name="Other", address="1 Elm St")
    db.add(other)
    db.commit()
    program = service.assign_program(lawn_client.id, template.id, START, manager)
    planned = service.add_program_service(program.id, 4, 2024, manager)

    with pytest.raises(ValidationError):
        service.fulfill_service_with_job(planned.id, make_job(other).id, manager)
    with pytest.raises(NotFoundError):
        service.fulfill_service_with_job(planned.id, 999, manager)


def test_complete_treatment_records_who_and_when(
    service, lawn_client, template, fertilizer, staff_member, manager
):
    program = service.assign_program(lawn_client.id, template.id, START, manager)
    planned = service.add_program_treatment(program.id, fertilizer.id, 4, 2024, manager)

    completed = service.complete_treatment(planned.id, staff_member.id, manager)

    assert completed.status == "completed"
    assert completed.completed_by_id == staff_member.id
    assert isinstance(completed.completed_at, datetime)
    with pytest.raises(ValidationError):
        service.complete_treatment(planned.id, staff_member.id, manager)


def test_complete_treatment_unknown_staff(service, lawn_client, template, fertilizer, manager):
    program = service.assign_program(lawn_client.id, template.id, START, manager)
    planned = service.add_program_treatment(program.id, fertilizer.id, 4, 2024, manager)
    with pytest.raises(NotFoundError):
        service.complete_treatment(planned.id, 999, manager)


def test_treatments_for_job_only_from_active_programs(
    service, lawn_client, template, fertilizer, manager, make_job
):
    active = service.assign_program(lawn_client.id, template.id, START, manager)
    paused = service.assign_program(lawn_client.id, template.id, START, manager)
    service.update_client_program(
        paused.id, ClientProgramUpdate(status=ClientProgramStatus.PAUSED), manager
    )
    due = service.add_program_treatment(active.id, fertilizer.id, 4, 2024, manager)
    service.add_program_treatment(active.id, fertilizer.id, 5, 2024, manager)
    service.add_program_treatment(active.id, fertilizer.id, 4, 2025, manager)
    service.add_program_treatment(paused.id, fertilizer.id, 4, 2024, manager)

    job = make_job(lawn_client, scheduled=datetime(2024, 4, 22, 8, 0))

    assert [t.id for t in service.get_treatments_for_job(job)] == [due.id]


def test_returning_service_to_pending_releases_job(service, lawn_client, template, manager, make_job):
    program = service.assign_program(lawn_client.id, template.id, START, manager)
    planned = service.add_program_service(program.id, 4, 2024, manager)
    job = make_job(lawn_client)
    service.fulfill_service_with_job(planned.id, job.id, manager)

    pending = service.update_program_service_status(planned.id, InstanceStatus.PENDING, manager)

    assert pending.status == "pending"
    assert pending.job_id is None
    # The job is free to fulfil another visit
    other = service.add_program_service(program.id, 4, 2024, manager)
    assert service.fulfill_service_with_job(other.id, job.id, manager).job_id == job.id


def test_returning_treatment_to_pending_releases_job(
    service, lawn_client, template, fertilizer, manager, make_job
):
    program = service.assign_program(lawn_client.id, template.id, START, manager)
    planned = service.add_program_treatment(program.id, fertilizer.id, 4, 2024, manager)
    job = make_job(lawn_client)
    service.fulfill_treatment_with_job(planned.id, job.id, manager)

    pending = service.update_program_treatment_status(planned.id, InstanceStatus.PENDING, manager)

    assert pending.status == "pending"
    assert pending.job_id is None


@pytest.mark.parametrize("closed", [ClientProgramStatus.CANCELLED, ClientProgramStatus.COMPLETED])
def test_closed_program_cannot_be_fulfilled(
    service, lawn_client, template, fertilizer, manager, make_job, closed
):
    program = service.assign_program(lawn_client.id, template.id, START, manager)
    planned_service = service.add_program_service(program.id, 4, 2024, manager)
    planned_treatment = service.add_program_treatment(program.id, fertilizer.id, 4, 2024, manager)
    service.update_client_program(program.id, ClientProgramUpdate(status=closed), manager)
    job = make_job(lawn_client)

    with pytest.raises(ValidationError):
        service.fulfill_service_with_job(planned_service.id, job.id, manager)
    with pytest.raises(ValidationError):
        service.fulfill_treatment_with_job(planned_treatment.id, job.id, manager)
    assert service.get_program_service(planned_service.id).job_id is None
    assert service.get_program_treatment(planned_treatment.id).status == "pending"


def test_removing_template_treatment_drops_pending_seeded_rows(
    service, db, lawn_client, template, fertilizer, manager, make_job
):
    linked = service.link_treatment_to_template(template.id, fertilizer.id, 4, None, None, manager)
    job = make_job(lawn_client)
    JobService(db).seed_treatments(job.id, manager, template_id=template.id)

    service.remove_template_treatment(linked.id, manager)

    assert JobService(db).get_job_treatments(job.id) == []
