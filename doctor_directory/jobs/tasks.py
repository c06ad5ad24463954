from __future__ import annotations

from datetime import timedelta
from typing import Any

from celery.utils.log import get_task_logger

from doctor_directory.db.session import SessionLocal
from doctor_directory.jobs.celery_app import celery_app
from doctor_directory.jobs.config import settings
from doctor_directory.models.base import utcnow
from doctor_directory.services.moderation import count_pending_older_than

logger = get_task_logger(__name__)


@celery_app.task(name="jobs.report_pending_backlog")
def report_pending_backlog(max_age_hours: int | None = None) -> dict[str, Any]:
    """Report referrals that have waited for moderation longer than allowed."""

    hours = max_age_hours if max_age_hours is not None else settings.pending_backlog_hours
    cutoff = utcnow() - timedelta(hours=hours)

    session = SessionLocal()
    try:
        overdue = count_pending_older_than(session, cutoff)
    finally:
        session.close()

    if overdue:
        logger.warning(
            "%s referrals pending moderation for more than %s hours",
            overdue,
            hours,
        )
    else:
        logger.info("moderation queue has no referrals older than %s hours", hours)

    return {"pending_over_threshold": overdue, "cutoff": cutoff.isoformat()}
