"""Feedback router - FastAPI endpoints for post-job feedback"""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...auth import CurrentStaff, get_current_staff
from ...database import get_db
from ...models import Feedback
from .schemas import FeedbackCreate, FeedbackResponse
from .service import FeedbackService

router = APIRouter(prefix="/feedback", tags=["Feedback"])


def get_feedback_service(db: Session = Depends(get_db)) -> FeedbackService:
    """Dependency injection for FeedbackService"""
    return FeedbackService(db)


def to_feedback_response(feedback: Feedback) -> FeedbackResponse:
    job = feedback.job
    client = job.client if job else None
    return FeedbackResponse(
        id=feedback.id,
        jobId=feedback.job_id,
        clientId=job.client_id if job else None,
        clientName=client.name if client else None,
        scheduledDate=job.scheduled_date if job else None,
        rating=feedback.rating,
        comment=feedback.comment,
        sentiment=feedback.sentiment,
        aiAnalysis=feedback.ai_analysis,
        created_at=feedback.created_at,
    )


@router.get("", response_model=list[FeedbackResponse])
async def get_feedback(
    jobId: Optional[int] = Query(None),
    clientId: Optional[int] = Query(None),
    current: CurrentStaff = Depends(get_current_staff),
    service: FeedbackService = Depends(get_feedback_service),
):
    """List feedback, newest first"""
    return [to_feedback_response(f) for f in service.get_feedback(jobId, clientId)]


@router.post("", response_model=FeedbackResponse, status_code=201)
async def create_feedback(
    data: FeedbackCreate,
    current: CurrentStaff = Depends(get_current_staff),
    service: FeedbackService = Depends(get_feedback_service),
):
    return to_feedback_response(service.create_feedback(data))
