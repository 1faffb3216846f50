"""
Celery application configuration.

Defines the Celery app with Redis broker, the task modules to load,
and the periodic beat schedule for rate lock maintenance.
"""

from celery import Celery

from ratelock.config import settings

celery_app = Celery(
    "ratelock",
    broker=settings.CELERY_BROKER_URL,
    backend=settings.CELERY_RESULT_BACKEND,
    include=["ratelock.tasks.cleanup_tasks"],
)

celery_app.conf.update(
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone="UTC",
    enable_utc=True,
    task_track_started=True,
    task_acks_late=True,
    worker_prefetch_multiplier=1,
)

# Beat schedule — periodic tasks
celery_app.conf.beat_schedule = {
    "cleanup-expired-rate-locks": {
        "task": "ratelock.tasks.cleanup_tasks.cleanup_expired_rate_locks",
        "schedule": settings.RATE_LOCK_CLEANUP_INTERVAL_SECONDS,
    },
}
