from uuid import UUID

from fastapi import APIRouter, Depends, Response, status

from evalo.api.deps import get_current_profile, get_event_service, get_feedback_service
from evalo.models.profile import Profile
from evalo.schemas.feedback import Feedback, FeedbackReviewUpdate
from evalo.services.course import ensure_course_access
from evalo.services.event import EventService
from evalo.services.feedback import FeedbackSubmissionService

router = APIRouter()


async def _check_feedback_access(
    feedback_id: UUID,
    feedback_service: FeedbackSubmissionService,
    event_service: EventService,
    profile: Profile,
) -> None:
    feedback = await feedback_service.get_feedback(feedback_id)
    event = await event_service.get_event(feedback.event_id)
    ensure_course_access(event.course, profile)


@router.patch("/{feedback_id}", response_model=Feedback)
async def mark_feedback_reviewed(
    feedback_id: UUID,
    review: FeedbackReviewUpdate,
    feedback_service: FeedbackSubmissionService = Depends(get_feedback_service),
    event_service: EventService = Depends(get_event_service),
    current_profile: Profile = Depends(get_current_profile),
):
    await _check_feedback_access(feedback_id, feedback_service, event_service, current_profile)
    return await feedback_service.set_reviewed(feedback_id, review.is_reviewed)


@router.delete("/{feedback_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_feedback(
    feedback_id: UUID,
    feedback_service: FeedbackSubmissionService = Depends(get_feedback_service),
    event_service: EventService = Depends(get_event_service),
    current_profile: Profile = Depends(get_current_profile),
):
    """
    Delete a feedback item; the event counters are decremented with it
    """
    await _check_feedback_access(feedback_id, feedback_service, event_service, current_profile)
    await feedback_service.delete(feedback_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
