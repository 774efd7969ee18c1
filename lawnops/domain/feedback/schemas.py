"""Feedback domain schemas"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel


class FeedbackCreate(BaseModel):
    jobId: int
    rating: int
    comment: Optional[str] = None


class FeedbackResponse(BaseModel):
    id: int
    jobId: int
    clientId: Optional[int] = None
    clientName: Optional[str] = None
    scheduledDate: Optional[datetime] = None
    rating: int
    comment: Optional[str] = None
    sentiment: Optional[str] = None
    aiAnalysis: Optional[str] = None
    created_at: Optional[datetime] = None
