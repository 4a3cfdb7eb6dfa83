from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, Response, status

from evalo.api.deps import (
    get_analytics_service, get_course_service, get_current_profile,
    get_event_service, get_feedback_service
)
from evalo.models.profile import Profile
from evalo.schemas.analytics import CourseSummary
from evalo.schemas.course import Course, CourseCreate, CourseUpdate
from evalo.schemas.event import Event, EventCreate
from evalo.schemas.feedback import Feedback
from evalo.services.analytics import AnalyticsService
from evalo.services.course import CourseService
from evalo.services.event import EventService
from evalo.services.feedback import FeedbackSubmissionService

router = APIRouter()


@router.get("/", response_model=List[Course])
async def list_courses(
    course_service: CourseService = Depends(get_course_service),
    current_profile: Profile = Depends(get_current_profile),
):
    """
    List courses: teachers get their own, deans every course of their organisation
    """
    return await course_service.list_courses(current_profile)


@router.post("/", response_model=Course, status_code=status.HTTP_201_CREATED)
async def create_course(
    course_in: CourseCreate,
    course_service: CourseService = Depends(get_course_service),
    current_profile: Profile = Depends(get_current_profile),
):
    return await course_service.create_course(current_profile, course_in)


@router.get("/{course_id}", response_model=Course)
async def get_course(
    course_id: UUID,
    course_service: CourseService = Depends(get_course_service),
    current_profile: Profile = Depends(get_current_profile),
):
    return await course_service.get_course_for_profile(course_id, current_profile)


@router.patch("/{course_id}", response_model=Course)
async def update_course(
    course_id: UUID,
    course_update: CourseUpdate,
    course_service: CourseService = Depends(get_course_service),
    current_profile: Profile = Depends(get_current_profile),
):
    course = await course_service.get_course_for_profile(course_id, current_profile)
    return await course_service.update_course(course, course_update)


@router.delete("/{course_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_course(
    course_id: UUID,
    course_service: CourseService = Depends(get_course_service),
    current_profile: Profile = Depends(get_current_profile),
):
    """
    Delete a course with all of its events and feedback
    """
    course = await course_service.get_course_for_profile(course_id, current_profile)
    await course_service.delete_course(course)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/{course_id}/events", response_model=List[Event])
async def list_course_events(
    course_id: UUID,
    course_service: CourseService = Depends(get_course_service),
    event_service: EventService = Depends(get_event_service),
    current_profile: Profile = Depends(get_current_profile),
):
    course = await course_service.get_course_for_profile(course_id, current_profile)
    return await event_service.list_events(course.id)


@router.post("/{course_id}/events", response_model=Event, status_code=status.HTTP_201_CREATED)
async def create_course_event(
    course_id: UUID,
    event_in: EventCreate,
    course_service: CourseService = Depends(get_course_service),
    event_service: EventService = Depends(get_event_service),
    current_profile: Profile = Depends(get_current_profile),
):
    """
    Open a feedback session for the course; the entry code is generated here
    """
    course = await course_service.get_course_for_profile(course_id, current_profile)
    return await event_service.create_event(course, event_in)


@router.get("/{course_id}/feedback", response_model=List[Feedback])
async def list_course_feedback(
    course_id: UUID,
    course_service: CourseService = Depends(get_course_service),
    feedback_service: FeedbackSubmissionService = Depends(get_feedback_service),
    current_profile: Profile = Depends(get_current_profile),
):
    course = await course_service.get_course_for_profile(course_id, current_profile)
    return await feedback_service.list_for_course(course.id)


@router.get("/{course_id}/analytics", response_model=CourseSummary)
async def get_course_analytics(
    course_id: UUID,
    course_service: CourseService = Depends(get_course_service),
    analytics_service: AnalyticsService = Depends(get_analytics_service),
    current_profile: Profile = Depends(get_current_profile),
):
    """
    Course totals and per-event trend, read from the event counters
    """
    course = await course_service.get_course_for_profile(course_id, current_profile)
    return await analytics_service.course_summary(course.id)
