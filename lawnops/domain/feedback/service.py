"""Feedback service - ratings collected after a job is done"""

import logging
from typing import Optional

from sqlalchemy.orm import Session

from ...models import Feedback, JobStatus
from ...shared.errors import NotFoundError, ValidationError
from ..jobs.repository import JobRepository
from .repository import FeedbackRepository
from .schemas import FeedbackCreate

logger = logging.getLogger(__name__)

MIN_RATING = 1
MAX_RATING = 5


class FeedbackService:
    """Service layer for job feedback"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = FeedbackRepository()
        self.jobs = JobRepository()

    def get_feedback(
        self, job_id: Optional[int] = None, client_id: Optional[int] = None
    ) -> list[Feedback]:
        return self.repo.get_feedback(self.db, job_id, client_id)

    def create_feedback(self, data: FeedbackCreate) -> Feedback:
        """
        Record a rating for a completed job.

        Sentiment and analysis are left empty; no analysis step runs here.
        """
        if not MIN_RATING <= data.rating <= MAX_RATING:
            raise ValidationError(f"rating must be between {MIN_RATING} and {MAX_RATING}")

        job = self.jobs.get_job_by_id(self.db, data.jobId)
        if not job:
            raise NotFoundError("Job not found")
        if job.status != JobStatus.COMPLETED.value:
            raise ValidationError("Feedback can only be left for a completed job")

        comment = data.comment.strip() if data.comment else None
        feedback = self.repo.create_feedback(
            self.db,
            job_id=job.id,
            rating=data.rating,
            comment=comment or None,
        )
        logger.info(f"⭐ Feedback {feedback.id} on job {job.id}: {feedback.rating}/5")
        return feedback
