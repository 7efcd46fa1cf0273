"""
Opportunities Cron Router

Endpoints called by an external scheduler. Both require the shared secret
(see ``core.auth.verify_cron_secret``); a rejected request mutates nothing and
gets ``401 {"error": "Unauthorized"}``.

Endpoints:
- POST /cron/update-opportunities - Run the opportunity lifecycle update
- POST /cron/check-deadlines - Create deadline reminder notifications

Failures return ``500 {"error": "Internal server error", "details": ...}``.
There is no retry here: the next scheduled call runs the full pass again.
"""

import logging

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from camboconnect.core.auth import verify_cron_secret
from camboconnect.core.database import get_db
from camboconnect.modules.opportunities import service
from camboconnect.modules.opportunities.schemas import (
    CronErrorResponse,
    DeadlineReminderResponse,
    LifecycleUpdateResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter(dependencies=[Depends(verify_cron_secret)])

_ERROR_RESPONSES = {
    401: {"description": "Missing or invalid shared secret", "model": CronErrorResponse},
    500: {"description": "Data store failure", "model": CronErrorResponse},
}


def _internal_error(e: Exception) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": "Internal server error", "details": str(e)},
    )


@router.post(
    "/update-opportunities",
    response_model=LifecycleUpdateResponse,
    summary="Run Opportunity Lifecycle Update",
    description="""
Bring every opportunity's status and flags up to date with the current time.

Steps, in order: activate, mark closing soon, close, mark popular, clear new
flag. Each step commits on its own; a failure leaves earlier steps applied.
""",
    responses=_ERROR_RESPONSES,
)
async def update_opportunities(db: AsyncSession = Depends(get_db)):
    try:
        summary = await service.run_lifecycle_update(db)
    except Exception as e:
        logger.error(f"Error updating opportunities: {e}", exc_info=True)
        return _internal_error(e)

    return LifecycleUpdateResponse.from_summary(summary)


@router.post(
    "/check-deadlines",
    response_model=DeadlineReminderResponse,
    summary="Send Deadline Reminders",
    description="""
Create DEADLINE_REMINDER notifications for users who bookmarked an open
opportunity whose deadline falls today or tomorrow. Users already reminded
about the same opportunity in the last 24 hours are skipped.
""",
    responses=_ERROR_RESPONSES,
)
async def check_deadlines(db: AsyncSession = Depends(get_db)):
    try:
        summary = await service.send_deadline_reminders(db)
    except Exception as e:
        logger.error(f"Error checking deadlines: {e}", exc_info=True)
        return _internal_error(e)

    return DeadlineReminderResponse(
        bookmarks_checked=summary.bookmarks_checked,
        notifications_created=summary.notifications_created,
        skipped=summary.skipped,
        errors=summary.errors,
        notifications_details=summary.created,
        timestamp=summary.timestamp,
    )
