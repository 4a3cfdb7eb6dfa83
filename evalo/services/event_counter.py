from typing import Dict, List, Optional
from uuid import UUID

from sqlalchemy import case, func, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from evalo.core.exceptions import NotFoundError
from evalo.core.logging import get_logger
from evalo.models.event import Event
from evalo.models.feedback import Feedback, Tone
from evalo.schemas.event import CounterReconciliation, EventCounters

logger = get_logger(__name__)

TONE_COLUMNS = {
    Tone.POSITIVE: Event.positive_feedback_count,
    Tone.NEGATIVE: Event.negative_feedback_count,
    Tone.NEUTRAL: Event.neutral_feedback_count,
}


def _clamped_decrement(column):
    return case((column > 0, column - 1), else_=0)


def _feedback_count(tone: Optional[Tone] = None):
    """Correlated COUNT of the current event's feedback, optionally by tone"""
    stmt = select(func.count(Feedback.id)).where(Feedback.event_id == Event.id)
    if tone is not None:
        stmt = stmt.where(Feedback.tone == tone.value)
    return stmt.scalar_subquery()


class EventCounterStore:
    """
    Maintains the denormalised feedback counters on event rows

    Every mutation is a single UPDATE computed by the database, so
    concurrent submitters to one event never overwrite each other's
    increments. Methods do not commit; the caller owns the transaction.
    """

    def __init__(self, db: AsyncSession):
        self.db = db

    async def increment(self, event_id: UUID, tone: Tone) -> None:
        """
        Add one to the tone counter and to the total

        Raises:
            NotFoundError: the event does not exist
        """
        column = TONE_COLUMNS[Tone(tone)]
        stmt = (
            update(Event)
            .where(Event.id == event_id)
            .values({
                column: column + 1,
                Event.total_feedback_count: Event.total_feedback_count + 1,
            })
            .execution_options(synchronize_session=False)
        )
        result = await self.db.execute(stmt)
        if result.rowcount == 0:
            raise NotFoundError("Event", event_id)

    async def decrement(self, event_id: UUID, tone: Tone) -> None:
        """
        Remove one from the tone counter and the total, never going below 0

        Raises:
            NotFoundError: the event does not exist
        """
        column = TONE_COLUMNS[Tone(tone)]
        stmt = (
            update(Event)
            .where(Event.id == event_id)
            .values({
                column: _clamped_decrement(column),
                Event.total_feedback_count: _clamped_decrement(Event.total_feedback_count),
            })
            .execution_options(synchronize_session=False)
        )
        result = await self.db.execute(stmt)
        if result.rowcount == 0:
            raise NotFoundError("Event", event_id)

    async def get_counters(self, event_id: UUID) -> EventCounters:
        stmt = select(
            Event.positive_feedback_count,
            Event.negative_feedback_count,
            Event.neutral_feedback_count,
            Event.total_feedback_count,
        ).where(Event.id == event_id)
        row = (await self.db.execute(stmt)).one_or_none()
        if row is None:
            raise NotFoundError("Event", event_id)
        return EventCounters(positive=row[0], negative=row[1], neutral=row[2], total=row[3])

    async def recount(self, event_id: UUID) -> EventCounters:
        """Count the event's feedback rows per tone"""
        stmt = (
            select(Feedback.tone, func.count(Feedback.id))
            .where(Feedback.event_id == event_id)
            .group_by(Feedback.tone)
        )
        by_tone: Dict[str, int] = {tone: count for tone, count in (await self.db.execute(stmt)).all()}
        counters = EventCounters(
            positive=by_tone.get(Tone.POSITIVE.value, 0),
            negative=by_tone.get(Tone.NEGATIVE.value, 0),
            neutral=by_tone.get(Tone.NEUTRAL.value, 0),
        )
        counters.total = counters.positive + counters.negative + counters.neutral
        return counters

    async def reconcile(self, event_id: UUID) -> CounterReconciliation:
        """
        Overwrite the event's counters with the true feedback counts

        Raises:
            NotFoundError: the event does not exist
        """
        stored = await self.get_counters(event_id)
        actual = await self.recount(event_id)
        result = CounterReconciliation(event_id=event_id, stored=stored, actual=actual)

        if result.drifted:
            await self._rewrite_counters([event_id])
            logger.warning(
                f"Corrected counter drift on event {event_id}: "
                f"stored={stored.model_dump()} actual={actual.model_dump()}"
            )
        return result

    async def reconcile_all(self) -> List[CounterReconciliation]:
        """Find every event whose counters disagree with its feedback rows and fix it"""
        tone_sums = [
            func.sum(case((Feedback.tone == tone.value, 1), else_=0)).label(tone.value)
            for tone in Tone
        ]
        counts = (
            select(Feedback.event_id, *tone_sums, func.count(Feedback.id).label("total"))
            .group_by(Feedback.event_id)
            .subquery()
        )
        actual_positive = func.coalesce(counts.c.positive, 0)
        actual_negative = func.coalesce(counts.c.negative, 0)
        actual_neutral = func.coalesce(counts.c.neutral, 0)
        actual_total = func.coalesce(counts.c.total, 0)

        stmt = (
            select(
                Event.id,
                Event.positive_feedback_count,
                Event.negative_feedback_count,
                Event.neutral_feedback_count,
                Event.total_feedback_count,
                actual_positive,
                actual_negative,
                actual_neutral,
                actual_total,
            )
            .outerjoin(counts, counts.c.event_id == Event.id)
            .where(or_(
                Event.positive_feedback_count != actual_positive,
                Event.negative_feedback_count != actual_negative,
                Event.neutral_feedback_count != actual_neutral,
                Event.total_feedback_count != actual_total,
            ))
        )
        rows = (await self.db.execute(stmt)).all()

        results = [
            CounterReconciliation(
                event_id=row[0],
                stored=EventCounters(positive=row[1], negative=row[2], neutral=row[3], total=row[4]),
                actual=EventCounters(positive=row[5], negative=row[6], neutral=row[7], total=row[8]),
            )
            for row in rows
        ]
        if results:
            await self._rewrite_counters([r.event_id for r in results])
            logger.warning(f"Corrected counter drift on {len(results)} event(s)")
        return results

    async def _rewrite_counters(self, event_ids: List[UUID]) -> None:
        # Counts are recomputed inside the UPDATE so rows inserted since the
        # detection query are included
        stmt = (
            update(Event)
            .where(Event.id.in_(event_ids))
            .values({
                Event.positive_feedback_count: _feedback_count(Tone.POSITIVE),
                Event.negative_feedback_count: _feedback_count(Tone.NEGATIVE),
                Event.neutral_feedback_count: _feedback_count(Tone.NEUTRAL),
                Event.total_feedback_count: _feedback_count(),
            })
            .execution_options(synchronize_session=False)
        )
        await self.db.execute(stmt)
