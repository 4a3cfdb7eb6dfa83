from celery import Celery
from evalo.core.config import get_settings

settings = get_settings()

# Celery application for background counter maintenance
celery_app = Celery(
    "evalo",
    broker=settings.CELERY_BROKER_URL,
    backend=settings.CELERY_RESULT_BACKEND,
    include=[
        "celery_tasks.tasks.counter_tasks",
    ]
)

celery_app.conf.update(
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone="UTC",
    enable_utc=True,
    task_track_started=True,
    worker_prefetch_multiplier=1,
    task_acks_late=True,
)

# Periodic full reconciliation catches drift whose per-event task was never queued
celery_app.conf.beat_schedule = {
    "reconcile-all-event-counters": {
        "task": "celery_tasks.tasks.counter_tasks.reconcile_all_event_counters",
        "schedule": float(settings.COUNTER_RECONCILE_INTERVAL),
    },
}


def get_celery_app():
    return celery_app
