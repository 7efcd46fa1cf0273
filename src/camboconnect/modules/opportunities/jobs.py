"""
Opportunities Background Jobs

Scheduled tasks:
1. Lifecycle update - status/flag transitions (every few minutes)
2. Deadline reminders - notify users about bookmarked opportunities closing
   today or tomorrow (hourly)

Both jobs are idempotent, open their own database session per run and can be
triggered manually through the scheduler registry. The same runs are exposed
to external schedulers through the cron endpoints in ``cron_router.py``.
"""

import logging
from datetime import UTC, datetime
from typing import Any

from apscheduler.triggers.interval import IntervalTrigger

from camboconnect.core.config import settings
from camboconnect.core.database import async_session_maker
from camboconnect.core.scheduler import register_job
from camboconnect.modules.opportunities import service

logger = logging.getLogger(__name__)

JOB_ID_UPDATE_LIFECYCLE = "opportunities_update_lifecycle"
JOB_ID_DEADLINE_REMINDERS = "opportunities_deadline_reminders"


async def update_lifecycle_job() -> dict[str, Any]:
    """
    Run one lifecycle pass with a fresh session and the current time.

    Errors propagate so the scheduler listener logs them; the next scheduled
    run retries the full pass.
    """
    now = datetime.now(UTC)

    async with async_session_maker() as db:
        summary = await service.run_lifecycle_update(db, now)

    return {"timestamp": summary.timestamp.isoformat(), "updated": summary.counts()}


async def deadline_reminders_job() -> dict[str, Any]:
    """Create deadline reminders with a fresh session and the current time."""
    now = datetime.now(UTC)

    async with async_session_maker() as db:
        summary = await service.send_deadline_reminders(db, now)

    return {
        "timestamp": summary.timestamp.isoformat(),
        "bookmarks_checked": summary.bookmarks_checked,
        "notifications_created": summary.notifications_created,
        "skipped": summary.skipped,
        "errors": summary.errors,
    }


def register_opportunity_jobs() -> None:
    """
    Register the opportunity jobs with the scheduler.

    Intervals come from settings (LIFECYCLE_JOB_INTERVAL_MINUTES and
    DEADLINE_REMINDER_INTERVAL_MINUTES).
    """
    register_job(
        job_id=JOB_ID_UPDATE_LIFECYCLE,
        func=update_lifecycle_job,
        trigger=IntervalTrigger(minutes=settings.lifecycle_job_interval_minutes),
    )
    logger.info(
        f"Registered job: {JOB_ID_UPDATE_LIFECYCLE} "
        f"(interval: {settings.lifecycle_job_interval_minutes} min)"
    )

    register_job(
        job_id=JOB_ID_DEADLINE_REMINDERS,
        func=deadline_reminders_job,
        trigger=IntervalTrigger(minutes=settings.deadline_reminder_interval_minutes),
    )
    logger.info(
        f"Registered job: {JOB_ID_DEADLINE_REMINDERS} "
        f"(interval: {settings.deadline_reminder_interval_minutes} min)"
    )
