"""
Opportunities Service Layer

Business logic for the opportunity lifecycle, view tracking, bookmarks and
deadline reminders.

1. Lifecycle update:
   - Runs the five lifecycle rules against a store with one injected ``now``
   - Not transactional across steps: each step commits on its own, and a
     failure leaves earlier steps committed. Every step is idempotent and
     monotonic, so the next run completes the remaining work.

2. View tracking and bookmarks:
   - Atomic counter increment plus a view event per signed-in user
   - Idempotent bookmark add/remove; bookmarks feed the deadline reminders

3. Deadline reminders:
   - Notifies users who bookmarked an opportunity closing today or tomorrow,
     at most once per user and opportunity every 24 hours
   - A failing notification is logged and counted, the job carries on
"""

import logging
import math
from dataclasses import dataclass, field
from datetime import UTC, datetime, time, timedelta

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from camboconnect.modules.notifications import repository as notifications_repository
from camboconnect.modules.notifications.models import NotificationType
from camboconnect.modules.opportunities import repository
from camboconnect.modules.opportunities.lifecycle import (
    LIFECYCLE_RULES,
    LifecycleSummary,
    OpportunityStore,
)
from camboconnect.modules.opportunities.models import Bookmark

logger = logging.getLogger(__name__)

# A user gets at most one reminder per opportunity in this window
REMINDER_DEDUP_WINDOW = timedelta(hours=24)
URGENT_THRESHOLD_HOURS = 24


# ============================================
# Exceptions
# ============================================


class OpportunityServiceError(Exception):
    """Base exception for opportunity service errors."""

    def __init__(self, message: str, error_code: str, status_code: int = 400):
        self.message = message
        self.error_code = error_code
        self.status_code = status_code
        super().__init__(message)


class OpportunityNotFoundError(OpportunityServiceError):
    """Raised when an opportunity is not found."""

    def __init__(self, opportunity_id: str | None = None):
        message = (
            f"Opportunity {opportunity_id} not found" if opportunity_id else "Opportunity not found"
        )
        super().__init__(
            message=message,
            error_code="OPPORTUNITY_NOT_FOUND",
            status_code=404,
        )


class LifecycleUpdateError(OpportunityServiceError):
    """
    Raised when a lifecycle step fails at the data store.

    ``summary`` holds the counts of the steps that completed (and committed)
    before the failure.
    """

    def __init__(self, step: str, summary: LifecycleSummary, cause: Exception):
        self.step = step
        self.summary = summary
        super().__init__(
            message=str(cause),
            error_code="LIFECYCLE_UPDATE_FAILED",
            status_code=500,
        )


class DeadlineReminderError(OpportunityServiceError):
    """Raised when the reminder job cannot load bookmarks."""

    def __init__(self, cause: Exception):
        super().__init__(
            message=str(cause),
            error_code="DEADLINE_REMINDER_FAILED",
            status_code=500,
        )


# ============================================
# Lifecycle
# ============================================


async def update_opportunity_lifecycle(
    store: OpportunityStore,
    now: datetime,
) -> LifecycleSummary:
    """
    Apply every lifecycle rule, in order, against ``store`` at instant ``now``.

    Args:
        store: Store applying each rule as one conditional bulk update
        now: The single instant all five steps reason about

    Returns:
        Per-step counts of affected records

    Raises:
        LifecycleUpdateError: If a step fails; earlier steps stay applied
    """
    summary = LifecycleSummary(timestamp=now)

    for rule in LIFECYCLE_RULES:
        try:
            count = await store.update_where(rule, now)
        except SQLAlchemyError as e:
            logger.error(
                f"Lifecycle step '{rule.key}' failed after partial progress {summary.counts()}: {e}",
                exc_info=True,
            )
            raise LifecycleUpdateError(rule.key, summary, e) from e
        setattr(summary, rule.key, count)

    logger.info(f"Opportunity lifecycle updated at {now.isoformat()}: {summary.counts()}")
    return summary


async def run_lifecycle_update(db: AsyncSession, now: datetime | None = None) -> LifecycleSummary:
    """Run the lifecycle update against the database."""
    return await update_opportunity_lifecycle(
        repository.SqlOpportunityStore(db),
        now or datetime.now(UTC),
    )


# ============================================
# View tracking
# ============================================


@dataclass
class ViewStatus:
    has_viewed: bool
    viewed_at: datetime | None = None


async def record_view(db: AsyncSession, opportunity_id: str, user_id: str) -> None:
    """
    Count a view of the opportunity by the user.

    Raises:
        OpportunityNotFoundError: If the opportunity does not exist
    """
    updated = await repository.increment_visit_count(db, opportunity_id)
    if not updated:
        await db.rollback()
        raise OpportunityNotFoundError(opportunity_id)

    await repository.add_view(db, opportunity_id, user_id)
    await db.commit()

    logger.debug(f"Counted view of opportunity {opportunity_id} by user {user_id}")


async def check_view(db: AsyncSession, opportunity_id: str, user_id: str) -> ViewStatus:
    """Whether the user has a recorded view of the opportunity, and when it was first made."""
    view = await repository.get_first_view(db, opportunity_id, user_id)
    if view is None:
        return ViewStatus(has_viewed=False)
    return ViewStatus(has_viewed=True, viewed_at=view.created_at)


# ============================================
# Bookmarks
# ============================================


async def set_bookmark(
    db: AsyncSession,
    opportunity_id: str,
    user_id: str,
    bookmarked: bool,
) -> bool:
    """
    Add or remove the user's bookmark of an opportunity.

    Both directions are idempotent: bookmarking twice keeps one bookmark and
    removing a missing bookmark is not an error.

    Returns:
        The resulting bookmark state

    Raises:
        OpportunityNotFoundError: If the opportunity does not exist
    """
    opportunity = await repository.get_by_id(db, opportunity_id)
    if opportunity is None:
        raise OpportunityNotFoundError(opportunity_id)

    if not bookmarked:
        removed = await repository.delete_bookmark(db, user_id, opportunity_id)
        if removed:
            logger.info(f"User {user_id} removed bookmark of opportunity {opportunity_id}")
        return False

    existing = await repository.get_bookmark(db, user_id, opportunity_id)
    if existing is not None:
        return True

    try:
        await repository.create_bookmark(db, user_id, opportunity_id)
    except IntegrityError:
        # A concurrent request created it first
        await db.rollback()
        return True

    logger.info(f"User {user_id} bookmarked opportunity {opportunity_id}")
    return True


async def is_bookmarked(db: AsyncSession, opportunity_id: str, user_id: str | None) -> bool:
    """Anonymous viewers never have bookmarks."""
    if user_id is None:
        return False
    return await repository.get_bookmark(db, user_id, opportunity_id) is not None


async def list_bookmarks(db: AsyncSession, user_id: str) -> list[Bookmark]:
    return await repository.list_bookmarks_for_user(db, user_id)


# ============================================
# Deadline reminders
# ============================================


@dataclass
class DeadlineReminderSummary:
    timestamp: datetime
    bookmarks_checked: int = 0
    notifications_created: int = 0
    skipped: int = 0
    errors: int = 0
    created: list[dict[str, str]] = field(default_factory=list)


@dataclass
class ReminderTarget:
    user_id: str
    opportunity_id: str
    title: str
    deadline: datetime


def reminder_window(now: datetime) -> tuple[datetime, datetime]:
    """Start of today through the end of tomorrow, in UTC."""
    today = now.astimezone(UTC).date()
    start = datetime.combine(today, time.min, tzinfo=UTC)
    end = datetime.combine(today + timedelta(days=1), time.max, tzinfo=UTC)
    return start, end


def hours_until(deadline: datetime, now: datetime) -> int:
    """Whole hours from ``now`` to ``deadline``, rounding halves up."""
    return math.floor((deadline - now).total_seconds() / 3600 + 0.5)


def build_reminder_message(title: str, hours_remaining: int) -> str:
    if hours_remaining <= URGENT_THRESHOLD_HOURS:
        return f'URGENT: Less than 24 hours left to apply for "{title}"'
    return f'Reminder: Deadline approaching for "{title}"'


async def send_deadline_reminders(
    db: AsyncSession,
    now: datetime | None = None,
) -> DeadlineReminderSummary:
    """
    Create deadline reminder notifications for bookmarked opportunities.

    Idempotent within the dedup window: a user who was reminded about an
    opportunity in the last 24 hours is skipped.

    Raises:
        DeadlineReminderError: If the bookmarks cannot be loaded
    """
    now = now or datetime.now(UTC)
    start, end = reminder_window(now)
    summary = DeadlineReminderSummary(timestamp=now)

    logger.info(f"Checking for deadlines between {start.isoformat()} and {end.isoformat()}")

    try:
        bookmarks = await repository.get_bookmarks_with_deadline_between(db, start, end)
    except SQLAlchemyError as e:
        logger.error(f"Failed to load bookmarks for deadline reminders: {e}", exc_info=True)
        raise DeadlineReminderError(e) from e

    summary.bookmarks_checked = len(bookmarks)
    logger.info(f"Found {len(bookmarks)} bookmarked opportunities with approaching deadlines")

    # Plain values: a rollback below expires every loaded instance
    targets = [
        ReminderTarget(
            user_id=bookmark.user_id,
            opportunity_id=bookmark.opportunity.id,
            title=bookmark.opportunity.title,
            deadline=bookmark.opportunity.deadline,
        )
        for bookmark in bookmarks
    ]

    for target in targets:
        try:
            already_notified = await notifications_repository.exists_since(
                db,
                user_id=target.user_id,
                related_entity_id=target.opportunity_id,
                type=NotificationType.DEADLINE_REMINDER,
                since=now - REMINDER_DEDUP_WINDOW,
            )
            if already_notified:
                summary.skipped += 1
                continue

            notification = await notifications_repository.create(
                db,
                user_id=target.user_id,
                type=NotificationType.DEADLINE_REMINDER,
                message=build_reminder_message(
                    target.title, hours_until(target.deadline, now)
                ),
                related_entity_id=target.opportunity_id,
            )
        except SQLAlchemyError as e:
            await db.rollback()
            logger.error(
                f"Failed to create deadline reminder for user {target.user_id}, "
                f"opportunity {target.opportunity_id}: {e}",
                exc_info=True,
            )
            summary.errors += 1
            continue

        summary.notifications_created += 1
        summary.created.append(
            {
                "id": str(notification.id),
                "userId": str(notification.user_id),
                "opportunityId": str(target.opportunity_id),
                "message": notification.message,
            }
        )

    logger.info(
        f"Deadline reminder job completed. Created: {summary.notifications_created}, "
        f"Skipped: {summary.skipped}, Errors: {summary.errors}"
    )
    return summary
