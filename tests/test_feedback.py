import pytest

from lawnops.domain.feedback.schemas import FeedbackCreate
from lawnops.domain.feedback.service import FeedbackService
from lawnops.domain.jobs.service import JobService
from lawnops.models import Client, Feedback
from lawnops.shared.errors import NotFoundError, ValidationError

CREW = {"X-Staff-Role": "crew_member"}


@pytest.fixture
def service(db):
    return FeedbackService(db)


@pytest.fixture
def completed_job(db, lawn_client, make_job):
    job = make_job(lawn_client)
    job.status = "completed"
    db.commit()
    db.refresh(job)
    return job


def test_create_feedback_leaves_analysis_empty(service, completed_job):
    feedback = service.create_feedback(
        FeedbackCreate(jobId=completed_job.id, rating=5, comment="  Lawn looks great  ")
    )

    assert feedback.job_id == completed_job.id
    assert feedback.rating == 5
    assert feedback.comment == "Lawn looks great"
    assert feedback.sentiment is None
    assert feedback.ai_analysis is None


@pytest.mark.parametrize("rating", [0, 6, -1])
def test_rating_must_be_one_to_five(service, completed_job, rating):
    with pytest.raises(ValidationError):
        service.create_feedback(FeedbackCreate(jobId=completed_job.id, rating=rating))


def test_feedback_needs_a_completed_job(service, lawn_client, make_job):
    with pytest.raises(NotFoundError):
        service.create_feedback(FeedbackCreate(jobId=999, rating=4))
    with pytest.raises(ValidationError):
        service.create_feedback(FeedbackCreate(jobId=make_job(lawn_client).id, rating=4))


def test_list_feedback_by_job_and_client(service, db, completed_job, make_job):
    other_client = Client(name="Oak Court", address="7 Oak Ct")
    db.add(other_client)
    db.commit()
    other_job = make_job(other_client)
    other_job.status = "completed"
    db.commit()

    service.create_feedback(FeedbackCreate(jobId=completed_job.id, rating=4))
    service.create_feedback(FeedbackCreate(jobId=other_job.id, rating=2, comment="Missed the back"))

    assert len(service.get_feedback()) == 2
    assert [f.rating for f in service.get_feedback(job_id=other_job.id)] == [2]
    assert [f.job_id for f in service.get_feedback(client_id=completed_job.client_id)] == [completed_job.id]


def test_deleting_job_removes_its_feedback(service, db, completed_job, manager):
    service.create_feedback(FeedbackCreate(jobId=completed_job.id, rating=3))

    JobService(db).delete_job(completed_job.id, manager)

    assert db.query(Feedback).count() == 0


def test_feedback_endpoints(client, completed_job, lawn_client):
    created = client.post(
        "/feedback", json={"jobId": completed_job.id, "rating": 5, "comment": "Tidy edges"}, headers=CREW
    )
    assert created.status_code == 201
    body = created.json()
    assert body["clientName"] == lawn_client.name
    assert body["sentiment"] is None
    assert body["aiAnalysis"] is None

    listed = client.get("/feedback", params={"jobId": completed_job.id}, headers=CREW).json()
    assert [f["comment"] for f in listed] == ["Tidy edges"]

    rejected = client.post("/feedback", json={"jobId": completed_job.id, "rating": 9}, headers=CREW)
    assert rejected.status_code == 400
