"""
Opportunities Repository

Database operations for opportunities, view events and bookmarks.
Only data access lives here; the lifecycle rules themselves are defined in
``lifecycle.py``.

Design Principles:
- Lifecycle updates are single conditional UPDATE statements, so overlapping
  runs converge instead of racing on read-modify-write
- Each lifecycle step commits on its own
- Timezone-aware datetime handling (UTC)
"""

from datetime import datetime

from sqlalchemy import delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import contains_eager, selectinload

from .lifecycle import LifecycleRule
from .models import Bookmark, Opportunity, OpportunityStatus, OpportunityView


class SqlOpportunityStore:
    """Lifecycle store backed by the opportunities table."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def update_where(self, rule: LifecycleRule, now: datetime) -> int:
        """Run the rule as one UPDATE ... WHERE and commit it. Returns the affected row count."""
        stmt = (
            update(Opportunity)
            .where(*rule.conditions(now))
            .values(**rule.values)
            .execution_options(synchronize_session=False)
        )
        result = await self.db.execute(stmt)
        await self.db.commit()
        return result.rowcount


async def get_by_id(db: AsyncSession, id: str) -> Opportunity | None:
    """Get opportunity by ID."""
    return await db.get(Opportunity, id)


async def increment_visit_count(db: AsyncSession, id: str) -> int:
    """
    Atomically add one to an opportunity's visit counter.

    Does not commit. Returns the number of rows updated (0 if not found).
    """
    result = await db.execute(
        update(Opportunity)
        .where(Opportunity.id == id)
        .values(visit_count=Opportunity.visit_count + 1)
        .execution_options(synchronize_session=False)
    )
    return result.rowcount


async def add_view(db: AsyncSession, opportunity_id: str, user_id: str) -> OpportunityView:
    """Record a view event. Does not commit."""
    view = OpportunityView(opportunity_id=opportunity_id, user_id=user_id)
    db.add(view)
    return view


async def get_first_view(
    db: AsyncSession, opportunity_id: str, user_id: str
) -> OpportunityView | None:
    """Earliest recorded view of the opportunity by the user."""
    result = await db.execute(
        select(OpportunityView)
        .where(
            OpportunityView.opportunity_id == opportunity_id,
            OpportunityView.user_id == user_id,
        )
        .order_by(OpportunityView.created_at.asc())
        .limit(1)
    )
    return result.scalar_one_or_none()


async def get_bookmarks_with_deadline_between(
    db: AsyncSession,
    start: datetime,
    end: datetime,
) -> list[Bookmark]:
    """
    Bookmarks of open opportunities whose deadline falls in [start, end].

    Only ACTIVE and CLOSING_SOON opportunities are considered.
    """
    result = await db.execute(
        select(Bookmark)
        .join(Bookmark.opportunity)
        .options(contains_eager(Bookmark.opportunity))
        .where(
            Opportunity.deadline >= start,
            Opportunity.deadline <= end,
            Opportunity.status.in_([OpportunityStatus.ACTIVE, OpportunityStatus.CLOSING_SOON]),
        )
        .order_by(Opportunity.deadline.asc())
    )
    return list(result.scalars().unique().all())


async def get_bookmark(db: AsyncSession, user_id: str, opportunity_id: str) -> Bookmark | None:
    """Get the user's bookmark of an opportunity, if any."""
    result = await db.execute(
        select(Bookmark)
        .where(Bookmark.user_id == user_id, Bookmark.opportunity_id == opportunity_id)
        .limit(1)
    )
    return result.scalar_one_or_none()


async def create_bookmark(db: AsyncSession, user_id: str, opportunity_id: str) -> Bookmark:
    """Create and commit a bookmark."""
    bookmark = Bookmark(user_id=user_id, opportunity_id=opportunity_id)

    db.add(bookmark)
    await db.commit()

    return bookmark


async def delete_bookmark(db: AsyncSession, user_id: str, opportunity_id: str) -> int:
    """Delete the user's bookmark of an opportunity and commit. Returns the deleted row count."""
    result = await db.execute(
        delete(Bookmark).where(
            Bookmark.user_id == user_id,
            Bookmark.opportunity_id == opportunity_id,
        )
    )
    await db.commit()
    return result.rowcount


async def list_bookmarks_for_user(db: AsyncSession, user_id: str) -> list[Bookmark]:
    """The user's bookmarks, newest first, with each opportunity and its organization loaded."""
    result = await db.execute(
        select(Bookmark)
        .where(Bookmark.user_id == user_id)
        .options(selectinload(Bookmark.opportunity).selectinload(Opportunity.organization))
        .order_by(Bookmark.created_at.desc())
    )
    return list(result.scalars().all())
