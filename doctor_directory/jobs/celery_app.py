from __future__ import annotations

from celery import Celery

from doctor_directory.jobs.config import settings

celery_app = Celery(
    "doctor_directory",
    broker=settings.redis_url,
    backend=settings.redis_url,
    include=["doctor_directory.jobs.tasks"],
)

celery_app.conf.timezone = settings.timezone
celery_app.conf.broker_connection_retry_on_startup = True
celery_app.conf.beat_schedule = {
    "report-pending-backlog": {
        "task": "jobs.report_pending_backlog",
        "schedule": 60 * 60,
    },
}
