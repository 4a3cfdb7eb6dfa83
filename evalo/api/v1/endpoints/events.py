from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, Response, status

from evalo.api.deps import (
    get_analytics_service, get_current_profile, get_event_service, get_feedback_service
)
from evalo.core.logging import get_logger
from evalo.models.event import Event as EventModel
from evalo.models.profile import Profile
from evalo.schemas.analytics import EventAnalytics
from evalo.schemas.event import CounterReconciliation, Event, EventStatusUpdate, EventUpdate
from evalo.schemas.feedback import Feedback
from evalo.services.analytics import AnalyticsService
from evalo.services.course import ensure_course_access
from evalo.services.event import EventService
from evalo.services.feedback import FeedbackSubmissionService

router = APIRouter()
logger = get_logger(__name__)


async def get_accessible_event(
    event_id: UUID,
    event_service: EventService = Depends(get_event_service),
    current_profile: Profile = Depends(get_current_profile),
) -> EventModel:
    """Load an event and check the caller may manage its course"""
    event = await event_service.get_event(event_id)
    ensure_course_access(event.course, current_profile)
    return event


@router.get("/{event_id}", response_model=Event)
async def get_event(event: EventModel = Depends(get_accessible_event)):
    return event


@router.patch("/{event_id}", response_model=Event)
async def update_event(
    event_update: EventUpdate,
    event: EventModel = Depends(get_accessible_event),
    event_service: EventService = Depends(get_event_service),
):
    return await event_service.update_event(event, event_update)


@router.delete("/{event_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_event(
    event: EventModel = Depends(get_accessible_event),
    event_service: EventService = Depends(get_event_service),
):
    """
    Delete an event together with its feedback
    """
    await event_service.delete_event(event)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/{event_id}/status", response_model=Event)
async def change_event_status(
    status_update: EventStatusUpdate,
    event: EventModel = Depends(get_accessible_event),
    event_service: EventService = Depends(get_event_service),
):
    """
    Close or archive an event; closed events stop accepting submissions
    """
    return await event_service.change_status(event, status_update.status)


@router.post("/{event_id}/code", response_model=Event)
async def reset_event_code(
    event: EventModel = Depends(get_accessible_event),
    event_service: EventService = Depends(get_event_service),
):
    return await event_service.reset_code(event)


@router.get("/{event_id}/feedback", response_model=List[Feedback])
async def list_event_feedback(
    event: EventModel = Depends(get_accessible_event),
    feedback_service: FeedbackSubmissionService = Depends(get_feedback_service),
):
    return await feedback_service.list_for_event(event.id)


@router.get("/{event_id}/analytics", response_model=EventAnalytics)
async def get_event_analytics(
    event: EventModel = Depends(get_accessible_event),
    analytics_service: AnalyticsService = Depends(get_analytics_service),
):
    """
    Tone shares and most common words for one event
    """
    return await analytics_service.event_analytics(event.id)


@router.post("/{event_id}/reconcile", response_model=CounterReconciliation)
async def reconcile_event_counters(
    event: EventModel = Depends(get_accessible_event),
    event_service: EventService = Depends(get_event_service),
):
    """
    Recompute the stored counters from the feedback rows
    """
    result = await event_service.reconcile_counters(event)
    if result.drifted:
        logger.warning(f"Manual reconciliation corrected counters of event {event.id}")
    return result
