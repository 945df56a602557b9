"""
Notifications Background Jobs

Schedule:
- notifications_cleanup_expired runs hourly and deletes notifications whose
  expires_at has passed. Expired notifications are already hidden from
  listings, so a missed run only delays the purge.

The job opens its own database session and is idempotent.
"""

import logging
from datetime import UTC, datetime
from typing import Any

from apscheduler.triggers.interval import IntervalTrigger

from app.core.database import async_session_maker
from app.core.scheduler import register_job
from app.modules.notifications import repository

logger = logging.getLogger(__name__)

JOB_ID_CLEANUP_EXPIRED = "notifications_cleanup_expired"
CLEANUP_INTERVAL_HOURS = 1


async def cleanup_expired_notifications() -> dict[str, Any]:
    """
    Delete every expired notification.

    Returns:
        Dict with executed_at and the number of deleted notifications
    """
    executed_at = datetime.now(UTC)
    logger.info(f"Starting expired notification cleanup at {executed_at.isoformat()}")

    async with async_session_maker() as db:
        deleted = await repository.delete_expired(db, now=executed_at)

    logger.info(f"Expired notification cleanup completed. Deleted: {deleted}")
    return {"executed_at": executed_at.isoformat(), "deleted": deleted}


def register_notification_jobs() -> None:
    """Register notification jobs; call during startup before the scheduler starts."""
    register_job(
        job_id=JOB_ID_CLEANUP_EXPIRED,
        func=cleanup_expired_notifications,
        trigger=IntervalTrigger(hours=CLEANUP_INTERVAL_HOURS),
    )
    logger.info(
        f"Registered job: {JOB_ID_CLEANUP_EXPIRED} (interval: {CLEANUP_INTERVAL_HOURS} hour)"
    )
