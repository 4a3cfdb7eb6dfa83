"""
Tests for the atomic event counter store
"""

import uuid

import pytest

from evalo.core.exceptions import NotFoundError
from evalo.models.feedback import Feedback, Tone
from evalo.schemas.event import EventCounters
from evalo.services.event_counter import EventCounterStore


async def _add_feedback(db, event, tone: Tone, count: int = 1):
    for i in range(count):
        db.add(Feedback(event_id=event.id, content=f"{tone.value} {i}", tone=tone.value))
    await db.flush()


class TestIncrementDecrement:
    """Single-statement counter changes"""

    @pytest.mark.asyncio
    async def test_increment_updates_tone_and_total(self, db, make_profile, make_course, make_event):
        """The tone counter and the total both go up"""
        course = await make_course(await make_profile())
        event = await make_event(course)
        store = EventCounterStore(db)

        await store.increment(event.id, Tone.POSITIVE)
        await store.increment(event.id, Tone.NEUTRAL)
        await store.increment(event.id, Tone.POSITIVE)

        assert await store.get_counters(event.id) == EventCounters(positive=2, negative=0, neutral=1, total=3)

    @pytest.mark.asyncio
    async def test_decrement_never_goes_below_zero(self, db, make_profile, make_course, make_event):
        """Decrements are clamped at zero"""
        course = await make_course(await make_profile())
        event = await make_event(course)
        store = EventCounterStore(db)

        await store.increment(event.id, Tone.NEGATIVE)
        await store.decrement(event.id, Tone.NEGATIVE)
        await store.decrement(event.id, Tone.NEGATIVE)
        await store.decrement(event.id, Tone.POSITIVE)

        assert await store.get_counters(event.id) == EventCounters()

    @pytest.mark.asyncio
    async def test_unknown_event_raises_not_found(self, db):
        """Every operation reports a missing event"""
        store = EventCounterStore(db)
        missing = uuid.uuid4()

        with pytest.raises(NotFoundError):
            await store.increment(missing, Tone.POSITIVE)
        with pytest.raises(NotFoundError):
            await store.decrement(missing, Tone.POSITIVE)
        with pytest.raises(NotFoundError):
            await store.get_counters(missing)


class TestReconciliation:
    """Counters are rebuilt from the feedback rows"""

    @pytest.mark.asyncio
    async def test_recount_groups_by_tone(self, db, make_profile, make_course, make_event):
        """Recount reflects the stored rows per tone"""
        course = await make_course(await make_profile())
        event = await make_event(course)
        await _add_feedback(db, event, Tone.POSITIVE, 2)
        await _add_feedback(db, event, Tone.NEGATIVE, 1)

        counters = await EventCounterStore(db).recount(event.id)

        assert counters == EventCounters(positive=2, negative=1, neutral=0, total=3)

    @pytest.mark.asyncio
    async def test_reconcile_fixes_drift(self, db, make_profile, make_course, make_event):
        """Stored counters are overwritten with the recount"""
        course = await make_course(await make_profile())
        event = await make_event(course)
        store = EventCounterStore(db)
        # rows written without counting them
        await _add_feedback(db, event, Tone.NEUTRAL, 2)
        await store.increment(event.id, Tone.POSITIVE)

        result = await store.reconcile(event.id)

        assert result.drifted
        assert result.stored == EventCounters(positive=1, negative=0, neutral=0, total=1)
        assert result.actual == EventCounters(positive=0, negative=0, neutral=2, total=2)
        assert await store.get_counters(event.id) == result.actual

    @pytest.mark.asyncio
    async def test_reconcile_without_drift_changes_nothing(self, db, make_profile, make_course, make_event):
        """Consistent counters are reported as not drifted"""
        course = await make_course(await make_profile())
        event = await make_event(course)
        store = EventCounterStore(db)
        await _add_feedback(db, event, Tone.POSITIVE)
        await store.increment(event.id, Tone.POSITIVE)

        result = await store.reconcile(event.id)

        assert not result.drifted
        assert await store.get_counters(event.id) == EventCounters(positive=1, total=1)

    @pytest.mark.asyncio
    async def test_reconcile_all_only_touches_drifted_events(self, db, make_profile, make_course, make_event):
        """Only drifted events are reported and rewritten"""
        course = await make_course(await make_profile())
        consistent = await make_event(course, entry_code="AAAA")
        drifted = await make_event(course, entry_code="BBBB")
        emptied = await make_event(course, entry_code="CCCC")
        store = EventCounterStore(db)

        await _add_feedback(db, consistent, Tone.NEGATIVE)
        await store.increment(consistent.id, Tone.NEGATIVE)
        await _add_feedback(db, drifted, Tone.POSITIVE, 3)
        await store.increment(drifted.id, Tone.POSITIVE)
        # counted but the row is gone
        await store.increment(emptied.id, Tone.NEUTRAL)

        results = await store.reconcile_all()

        assert {r.event_id for r in results} == {drifted.id, emptied.id}
        assert await store.get_counters(consistent.id) == EventCounters(negative=1, total=1)
        assert await store.get_counters(drifted.id) == EventCounters(positive=3, total=3)
        assert await store.get_counters(emptied.id) == EventCounters()
