from fastapi import APIRouter, Depends, status

from evalo.api.deps import get_feedback_service
from evalo.schemas.event import EventLookup
from evalo.schemas.feedback import FeedbackSubmit, SubmissionReceipt
from evalo.services.feedback import FeedbackSubmissionService

router = APIRouter()


@router.get("/{access_code}", response_model=EventLookup)
async def check_access_code(
    access_code: str,
    feedback_service: FeedbackSubmissionService = Depends(get_feedback_service),
):
    """
    Validate an access code before the student writes feedback
    """
    event = await feedback_service.lookup_open_event(access_code)
    return EventLookup(
        course_name=event.course.name,
        course_code=event.course.code,
        event_date=event.event_date,
    )


@router.post("/", response_model=SubmissionReceipt, status_code=status.HTTP_201_CREATED)
async def submit_feedback(
    submission: FeedbackSubmit,
    feedback_service: FeedbackSubmissionService = Depends(get_feedback_service),
):
    """
    Submit anonymous feedback; the response carries no identifier
    """
    await feedback_service.submit(submission.access_code, submission.content)
    return SubmissionReceipt()
