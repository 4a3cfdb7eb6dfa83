from celery_tasks.tasks import counter_tasks

__all__ = ["counter_tasks"]
