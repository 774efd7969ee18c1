"""Feedback repository - Database operations for job feedback"""

from typing import Optional

from sqlalchemy.orm import Session, joinedload

from ...models import Feedback, Job


class FeedbackRepository:
    """Repository for feedback database operations"""

    @staticmethod
    def get_feedback(
        db: Session, job_id: Optional[int] = None, client_id: Optional[int] = None
    ) -> list[Feedback]:
        """Get feedback newest first, optionally for one job or one client"""
        query = db.query(Feedback).options(joinedload(Feedback.job).joinedload(Job.client))

        if job_id:
            query = query.filter(Feedback.job_id == job_id)
        if client_id:
            query = query.join(Job, Feedback.job_id == Job.id).filter(Job.client_id == client_id)

        return query.order_by(Feedback.created_at.desc(), Feedback.id.desc()).all()

    @staticmethod
    def create_feedback(db: Session, **feedback_data) -> Feedback:
        feedback = Feedback(**feedback_data)
        db.add(feedback)
        db.commit()
        db.refresh(feedback)
        return feedback
