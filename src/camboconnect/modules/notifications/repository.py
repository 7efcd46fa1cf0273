"""
Notifications Repository
"""

from datetime import datetime

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from .models import Notification, NotificationType


async def create(
    db: AsyncSession,
    user_id: str,
    type: NotificationType,
    message: str,
    related_entity_id: str | None = None,
) -> Notification:
    """Create and commit a notification."""
    notification = Notification(
        user_id=user_id,
        type=type,
        message=message,
        related_entity_id=related_entity_id,
    )

    db.add(notification)
    await db.commit()
    await db.refresh(notification)

    return notification


async def exists_since(
    db: AsyncSession,
    user_id: str,
    related_entity_id: str,
    type: NotificationType,
    since: datetime,
) -> bool:
    """Check whether the user got a notification of this type about the entity since ``since``."""
    result = await db.execute(
        select(Notification.id)
        .where(
            Notification.user_id == user_id,
            Notification.related_entity_id == related_entity_id,
            Notification.type == type,
            Notification.created_at >= since,
        )
        .limit(1)
    )
    return result.scalar_one_or_none() is not None


async def list_for_user(
    db: AsyncSession,
    user_id: str,
    limit: int,
    unread_only: bool = False,
) -> list[Notification]:
    """The user's notifications, newest first."""
    query = select(Notification).where(Notification.user_id == user_id)

    if unread_only:
        query = query.where(Notification.is_read.is_(False))

    result = await db.execute(query.order_by(Notification.created_at.desc()).limit(limit))
    return list(result.scalars().all())


async def count_unread(db: AsyncSession, user_id: str) -> int:
    result = await db.execute(
        select(func.count(Notification.id)).where(
            Notification.user_id == user_id,
            Notification.is_read.is_(False),
        )
    )
    return result.scalar_one()


async def get_for_user(
    db: AsyncSession, notification_id: str, user_id: str
) -> Notification | None:
    """Get a notification only if it belongs to ``user_id``."""
    result = await db.execute(
        select(Notification).where(
            Notification.id == notification_id,
            Notification.user_id == user_id,
        )
    )
    return result.scalar_one_or_none()


async def set_read(db: AsyncSession, notification: Notification, is_read: bool) -> Notification:
    notification.is_read = is_read
    await db.commit()
    await db.refresh(notification)
    return notification


async def mark_all_read(db: AsyncSession, user_id: str) -> int:
    """Mark every unread notification of the user as read and commit. Returns the row count."""
    result = await db.execute(
        update(Notification)
        .where(Notification.user_id == user_id, Notification.is_read.is_(False))
        .values(is_read=True)
        .execution_options(synchronize_session=False)
    )
    await db.commit()
    return result.rowcount
