"""Celery application running the retention jobs."""

from celery import Celery
from celery.schedules import crontab

from app.core.config import settings

celery_app = Celery(
    "gemini_chat",
    broker=settings.celery_broker_url,
    backend=settings.celery_result_backend,
    include=["app.tasks.cleanup_tasks"],
)

celery_app.conf.update(
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone="UTC",
    enable_utc=True,
    task_track_started=True,
    # Sweeps walk every idle conversation and may touch many blobs
    task_time_limit=60 * 60,
    task_soft_time_limit=55 * 60,
    task_acks_late=True,
    worker_prefetch_multiplier=1,
    result_expires=7 * 24 * 3600,
)

# Retention schedule: idle conversations nightly, orphaned uploads weekly
celery_app.conf.beat_schedule = {
    "cleanup-old-conversations": {
        "task": "app.tasks.cleanup_tasks.cleanup_old_conversations_task",
        "schedule": crontab(hour=2, minute=0),
        "options": {"expires": 3600},
    },
    "cleanup-orphaned-files": {
        "task": "app.tasks.cleanup_tasks.cleanup_orphaned_files_task",
        "schedule": crontab(hour=3, minute=0, day_of_week="sunday"),
        "options": {"expires": 3600},
    },
}

celery_app.conf.task_routes = {
    "app.tasks.cleanup_tasks.*": {"queue": "maintenance"},
}
