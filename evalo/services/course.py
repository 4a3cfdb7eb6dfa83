from typing import List
from uuid import UUID

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from evalo.core.exceptions import AuthorizationError, NotFoundError
from evalo.core.logging import get_logger
from evalo.models.course import Course
from evalo.models.event import Event
from evalo.models.feedback import Feedback
from evalo.models.profile import Profile
from evalo.schemas.course import CourseCreate, CourseUpdate

logger = get_logger(__name__)


def ensure_course_access(course: Course, profile: Profile) -> None:
    """
    Teachers may act on their own courses, deans on every course of their organisation

    Raises:
        AuthorizationError: the profile may not touch this course
    """
    if course.owner_id == profile.id:
        return
    if profile.is_dean and course.organization_id == profile.organization_id:
        return
    raise AuthorizationError(
        "You do not have access to this course",
        "COURSE_FORBIDDEN",
        {"course_id": str(course.id)},
    )


class CourseService:
    """Course management for teachers and deans"""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def list_courses(self, profile: Profile) -> List[Course]:
        """
        Courses visible to a profile, newest first

        Deans see the whole organisation, teachers only what they own.
        """
        stmt = select(Course).order_by(Course.created_at.desc())
        if profile.is_dean:
            stmt = stmt.where(Course.organization_id == profile.organization_id)
        else:
            stmt = stmt.where(Course.owner_id == profile.id)
        return list((await self.db.execute(stmt)).scalars().all())

    async def get_course(self, course_id: UUID) -> Course:
        course = await self.db.get(Course, course_id)
        if course is None:
            raise NotFoundError("Course", course_id)
        return course

    async def get_course_for_profile(self, course_id: UUID, profile: Profile) -> Course:
        course = await self.get_course(course_id)
        ensure_course_access(course, profile)
        return course

    async def create_course(self, profile: Profile, course_in: CourseCreate) -> Course:
        course = Course(
            **course_in.model_dump(),
            owner_id=profile.id,
            organization_id=profile.organization_id,
        )
        self.db.add(course)
        await self.db.commit()
        await self.db.refresh(course)

        logger.info(f"Course {course.id} created by profile {profile.id}")
        return course

    async def update_course(self, course: Course, course_update: CourseUpdate) -> Course:
        """Apply the fields that were sent; explicit nulls leave a field unchanged"""
        update_data = course_update.model_dump(exclude_unset=True, exclude_none=True)
        for key, value in update_data.items():
            setattr(course, key, value)

        await self.db.commit()
        await self.db.refresh(course)
        return course

    async def delete_course(self, course: Course) -> None:
        """Delete a course together with its events and their feedback"""
        event_ids = select(Event.id).where(Event.course_id == course.id)
        feedback_result = await self.db.execute(
            delete(Feedback)
            .where(Feedback.event_id.in_(event_ids))
            .execution_options(synchronize_session=False)
        )
        event_result = await self.db.execute(
            delete(Event)
            .where(Event.course_id == course.id)
            .execution_options(synchronize_session=False)
        )
        await self.db.delete(course)
        await self.db.commit()

        logger.info(
            f"Course {course.id} deleted with {event_result.rowcount} event(s) "
            f"and {feedback_result.rowcount} feedback item(s)"
        )
