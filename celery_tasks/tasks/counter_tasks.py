"""
Celery tasks that keep event counters consistent with the feedback table
"""

import uuid
import asyncio
from datetime import datetime, timezone
from typing import Any, Dict

from celery_tasks.celery_app import celery_app
from evalo.core.logging import get_logger
from evalo.db.database import engine
from evalo.db.session import AsyncSessionLocal
from evalo.services.event_counter import EventCounterStore

logger = get_logger(__name__)


async def reconcile_event(event_id: uuid.UUID, session_factory=AsyncSessionLocal) -> Dict[str, Any]:
    """Recompute one event's counters and commit the correction"""
    async with session_factory() as db:
        result = await EventCounterStore(db).reconcile(event_id)
        await db.commit()

    return {
        "event_id": str(event_id),
        "drifted": result.drifted,
        "stored": result.stored.model_dump(),
        "actual": result.actual.model_dump(),
        "reconciled_at": datetime.now(timezone.utc).isoformat(),
    }


async def reconcile_all(session_factory=AsyncSessionLocal) -> Dict[str, Any]:
    """Recompute counters of every drifted event and commit the corrections"""
    async with session_factory() as db:
        results = await EventCounterStore(db).reconcile_all()
        await db.commit()

    return {
        "events_corrected": len(results),
        "event_ids": [str(r.event_id) for r in results],
        "reconciled_at": datetime.now(timezone.utc).isoformat(),
    }


def _run(coro):
    """Run a coroutine on a fresh loop; pooled connections do not outlive it"""
    async def _runner():
        try:
            return await coro
        finally:
            await engine.dispose()

    return asyncio.run(_runner())


@celery_app.task(bind=True)
def reconcile_event_counters(self, event_id: str) -> Dict[str, Any]:
    """
    Reconcile the counters of one event

    Queued by the submission path when a counter update had to be rolled back.

    Args:
        event_id: event ID string

    Returns:
        reconciliation result dict
    """
    logger.info(f"Reconciling counters of event {event_id}")

    try:
        result = _run(reconcile_event(uuid.UUID(event_id)))
    except Exception as e:
        logger.error(f"Counter reconciliation failed for event {event_id}: {str(e)}", exc_info=True)
        return {"status": "error", "message": str(e), "event_id": event_id}

    if result["drifted"]:
        logger.warning(f"Event {event_id} counters corrected: {result['stored']} -> {result['actual']}")
    return result


@celery_app.task(bind=True)
def reconcile_all_event_counters(self) -> Dict[str, Any]:
    """
    Periodic full reconciliation of all event counters

    Returns:
        summary dict with the corrected event IDs
    """
    logger.info("Starting full counter reconciliation")

    try:
        result = _run(reconcile_all())
    except Exception as e:
        logger.error(f"Full counter reconciliation failed: {str(e)}", exc_info=True)
        return {"status": "error", "message": str(e)}

    logger.info(f"Full counter reconciliation done, {result['events_corrected']} event(s) corrected")
    return result
