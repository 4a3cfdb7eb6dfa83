from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from evalo.models.feedback import Tone


class FeedbackSubmit(BaseModel):
    """Anonymous submission from a student"""
    access_code: str = Field(..., max_length=16, description="4-character code shown by the teacher")
    content: str = Field(..., description="Free-text feedback")


class SubmissionReceipt(BaseModel):
    """Confirmation returned to the student; intentionally carries no identifier"""
    status: str = "received"


class FeedbackReviewUpdate(BaseModel):
    is_reviewed: bool


class Feedback(BaseModel):
    """Feedback response model (teacher-facing)"""
    id: UUID
    event_id: UUID
    content: str
    tone: Tone
    is_reviewed: bool
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
