from typing import Dict, List, Set
from uuid import UUID

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from evalo.core.exceptions import EventStateError, NotFoundError
from evalo.core.logging import get_logger
from evalo.models.course import Course
from evalo.models.event import Event, EventStatus
from evalo.models.feedback import Feedback
from evalo.schemas.event import CounterReconciliation, EventCreate, EventUpdate
from evalo.services.access_code import assign_unique_code
from evalo.services.event_counter import EventCounterStore

logger = get_logger(__name__)

ALLOWED_TRANSITIONS: Dict[EventStatus, Set[EventStatus]] = {
    EventStatus.OPEN: {EventStatus.CLOSED, EventStatus.ARCHIVED},
    EventStatus.CLOSED: {EventStatus.ARCHIVED},
    EventStatus.ARCHIVED: set(),
}


class EventService:
    """Lifecycle of feedback-collection events"""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def list_events(self, course_id: UUID) -> List[Event]:
        stmt = (
            select(Event)
            .where(Event.course_id == course_id)
            .order_by(Event.event_date.desc())
        )
        return list((await self.db.execute(stmt)).scalars().all())

    async def get_event(self, event_id: UUID) -> Event:
        event = await self.db.get(Event, event_id)
        if event is None:
            raise NotFoundError("Event", event_id)
        return event

    async def create_event(self, course: Course, event_in: EventCreate) -> Event:
        """Open a new event with zeroed counters and a fresh entry code"""
        event = Event(
            course_id=course.id,
            event_date=event_in.event_date,
            status=EventStatus.OPEN.value,
            entry_code=await assign_unique_code(self.db),
            organization_id=course.organization_id,
            positive_feedback_count=0,
            negative_feedback_count=0,
            neutral_feedback_count=0,
            total_feedback_count=0,
        )
        self.db.add(event)
        await self.db.commit()
        await self.db.refresh(event)

        logger.info(f"Event {event.id} opened for course {course.id} with code {event.entry_code}")
        return event

    async def update_event(self, event: Event, event_update: EventUpdate) -> Event:
        update_data = event_update.model_dump(exclude_unset=True, exclude_none=True)
        for key, value in update_data.items():
            setattr(event, key, value)

        await self.db.commit()
        await self.db.refresh(event)
        return event

    async def change_status(self, event: Event, new_status: EventStatus) -> Event:
        """
        Move an event along open -> closed -> archived (or open -> archived)

        Setting the current status again is a no-op.

        Raises:
            EventStateError: the transition is not allowed
        """
        current = EventStatus(event.status)
        new_status = EventStatus(new_status)
        if new_status == current:
            return event
        if new_status not in ALLOWED_TRANSITIONS[current]:
            raise EventStateError(
                f"Cannot move event from {current.value} to {new_status.value}",
                current_status=current.value,
            )

        event.status = new_status.value
        await self.db.commit()
        await self.db.refresh(event)

        logger.info(f"Event {event.id} moved from {current.value} to {new_status.value}")
        return event

    async def reset_code(self, event: Event) -> Event:
        """
        Give an open event a new entry code

        Raises:
            EventStateError: the event is not open
        """
        if not event.is_open:
            raise EventStateError("Only open events can get a new entry code", current_status=event.status)

        old_code = event.entry_code
        event.entry_code = await assign_unique_code(self.db)
        await self.db.commit()
        await self.db.refresh(event)

        logger.info(f"Event {event.id} entry code reset from {old_code} to {event.entry_code}")
        return event

    async def reconcile_counters(self, event: Event) -> CounterReconciliation:
        """Recompute the event's counters from its feedback rows and persist them"""
        result = await EventCounterStore(self.db).reconcile(event.id)
        await self.db.commit()
        await self.db.refresh(event)
        return result

    async def delete_event(self, event: Event) -> int:
        """
        Delete an event and, in the same transaction, all of its feedback

        Returns:
            int: number of feedback items removed with it
        """
        result = await self.db.execute(
            delete(Feedback)
            .where(Feedback.event_id == event.id)
            .execution_options(synchronize_session=False)
        )
        await self.db.delete(event)
        await self.db.commit()

        logger.info(f"Event {event.id} deleted with {result.rowcount} feedback item(s)")
        return result.rowcount
