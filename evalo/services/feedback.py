from typing import Awaitable, Callable, List, Optional
from uuid import UUID

from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from evalo.core.config import get_settings
from evalo.core.exceptions import (
    CounterUpdateError, InvalidCodeError, NotFoundError, ValidationError
)
from evalo.core.logging import get_logger
from evalo.models.event import Event, EventStatus
from evalo.models.feedback import Feedback, Tone
from evalo.services.access_code import normalize_code
from evalo.services.event_counter import EventCounterStore
from evalo.services.sentiment import SentimentClassifier

settings = get_settings()
logger = get_logger(__name__)

CounterOperation = Callable[[UUID, Tone], Awaitable[None]]


class CounterDriftPublisher:
    """Hands events with suspected counter drift to the Celery reconciliation task"""

    def __init__(self, enabled: bool = True):
        self.enabled = enabled

    def publish(self, event_id: UUID) -> None:
        if not self.enabled:
            return

        try:
            from celery_tasks.tasks.counter_tasks import reconcile_event_counters
            reconcile_event_counters.delay(str(event_id))
            logger.info(f"Queued counter reconciliation for event {event_id}")
        except Exception as e:
            # The periodic full reconciliation still picks the event up
            logger.error(f"Failed to queue counter reconciliation for event {event_id}: {e}")


class FeedbackSubmissionService:
    """
    Anonymous feedback submission and teacher-side feedback management

    The feedback row and its counter update are written in one transaction.
    A failed counter update is rolled back to a savepoint so the feedback
    itself is kept, then reported for reconciliation.
    """

    def __init__(
        self,
        db: AsyncSession,
        classifier: SentimentClassifier,
        counters: Optional[EventCounterStore] = None,
        drift_publisher: Optional[CounterDriftPublisher] = None,
    ):
        self.db = db
        self.classifier = classifier
        self.counters = counters or EventCounterStore(db)
        self.drift_publisher = drift_publisher or CounterDriftPublisher()

    async def lookup_open_event(self, access_code: str) -> Event:
        """
        Resolve an access code to its open event

        Raises:
            InvalidCodeError: bad format, unknown code, or the event is not open
        """
        code = normalize_code(access_code)
        stmt = select(Event).where(
            Event.entry_code == code,
            Event.status == EventStatus.OPEN.value,
        )
        events = (await self.db.execute(stmt)).scalars().all()

        if not events:
            raise InvalidCodeError()
        if len(events) > 1:
            logger.error(f"Entry code {code} is held by {len(events)} open events")
            raise InvalidCodeError()
        return events[0]

    async def submit(self, access_code: str, content: str) -> Feedback:
        """
        Store one anonymous feedback item and count it on its event

        The lookup transaction is ended before the classifier is called so no
        connection is held while the model answers; the event is checked to
        still be open in the write transaction. Anything the session had
        loaded is expired by that rollback.

        Raises:
            InvalidCodeError: the code does not resolve to an open event, or
                the event was closed while the text was being classified
            ValidationError: content empty or too long
            ClassificationUnavailableError: the classifier failed; nothing is stored
        """
        code = normalize_code(access_code)
        text = self._validate_content(content)
        event = await self.lookup_open_event(code)
        event_id, organization_id = event.id, event.organization_id
        await self.db.rollback()

        classification = await self.classifier.classify(text)
        tone = classification.tone

        if not await self._lock_open_event(event_id):
            logger.info(f"Event {event_id} closed during classification, submission rejected")
            raise InvalidCodeError()

        feedback = Feedback(
            event_id=event_id,
            content=text,
            tone=tone.value,
            is_reviewed=False,
            organization_id=organization_id,
        )
        self.db.add(feedback)
        await self.db.flush()

        counted = await self._apply_counter_change(event_id, tone, self.counters.increment)
        await self.db.commit()

        if not counted:
            self.drift_publisher.publish(event_id)

        logger.info(f"Feedback {feedback.id} stored for event {event_id} with tone {tone.value}")
        return feedback

    async def get_feedback(self, feedback_id: UUID) -> Feedback:
        feedback = await self.db.get(Feedback, feedback_id)
        if feedback is None:
            raise NotFoundError("Feedback", feedback_id)
        return feedback

    async def delete(self, feedback_id: UUID) -> None:
        """
        Delete a feedback item and uncount it from its event

        Only a DELETE that actually removed the row is followed by a
        decrement, so a concurrent second delete of the same item fails
        instead of uncounting it twice.

        Raises:
            NotFoundError: the feedback does not exist (or was already deleted)
        """
        result = await self.db.execute(
            delete(Feedback)
            .where(Feedback.id == feedback_id)
            .returning(Feedback.event_id, Feedback.tone)
        )
        row = result.one_or_none()
        if row is None:
            raise NotFoundError("Feedback", feedback_id)

        event_id, tone = row.event_id, Tone(row.tone)
        counted = await self._apply_counter_change(event_id, tone, self.counters.decrement)
        await self.db.commit()

        if not counted:
            self.drift_publisher.publish(event_id)

        logger.info(f"Feedback {feedback_id} deleted from event {event_id}")

    async def set_reviewed(self, feedback_id: UUID, is_reviewed: bool) -> Feedback:
        feedback = await self.get_feedback(feedback_id)
        feedback.is_reviewed = is_reviewed
        await self.db.commit()
        await self.db.refresh(feedback)
        return feedback

    async def list_for_event(self, event_id: UUID) -> List[Feedback]:
        stmt = (
            select(Feedback)
            .where(Feedback.event_id == event_id)
            .order_by(Feedback.created_at.desc())
        )
        return list((await self.db.execute(stmt)).scalars().all())

    async def list_for_course(self, course_id: UUID) -> List[Feedback]:
        stmt = (
            select(Feedback)
            .join(Event, Event.id == Feedback.event_id)
            .where(Event.course_id == course_id)
            .order_by(Feedback.created_at.desc())
        )
        return list((await self.db.execute(stmt)).scalars().all())

    async def _lock_open_event(self, event_id: UUID) -> bool:
        """Whether the event is still open, locking its row until commit"""
        stmt = (
            select(Event.id)
            .where(Event.id == event_id, Event.status == EventStatus.OPEN.value)
            .with_for_update()
        )
        return (await self.db.execute(stmt)).scalar_one_or_none() is not None

    async def _apply_counter_change(self, event_id: UUID, tone: Tone, operation: CounterOperation) -> bool:
        """
        Run a counter operation inside a savepoint

        Returns False when the counters could not be updated; the caller's
        feedback change stands and the event needs reconciliation.
        """
        try:
            async with self.db.begin_nested():
                await operation(event_id, tone)
        except (NotFoundError, SQLAlchemyError) as e:
            error = CounterUpdateError(event_id, f"Counter update failed for event {event_id}: {e}")
            logger.error(error.message)
            return False
        return True

    @staticmethod
    def _validate_content(content: Optional[str]) -> str:
        text = (content or "").strip()
        if not text:
            raise ValidationError("Feedback content must not be empty", field="content")
        if len(text) > settings.FEEDBACK_MAX_LENGTH:
            raise ValidationError(
                f"Feedback content exceeds {settings.FEEDBACK_MAX_LENGTH} characters",
                field="content",
            )
        return text
