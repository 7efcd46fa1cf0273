"""
Notifications Service Layer

Reading a user's notification feed and changing read state. Notifications are
only ever visible to, and changed by, the user they belong to.
"""

import logging
from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncSession

from camboconnect.modules.notifications import repository
from camboconnect.modules.notifications.models import Notification
from camboconnect.modules.notifications.schemas import NotificationUpdateRequest

logger = logging.getLogger(__name__)

DEFAULT_FEED_LIMIT = 50


class NotificationServiceError(Exception):
    """Base exception for notification service errors."""

    def __init__(self, message: str, error_code: str, status_code: int = 400):
        self.message = message
        self.error_code = error_code
        self.status_code = status_code
        super().__init__(message)


class NotificationNotFoundError(NotificationServiceError):
    def __init__(self, notification_id: str | None = None):
        super().__init__(
            message=(
                f"Notification {notification_id} not found"
                if notification_id
                else "Notification not found"
            ),
            error_code="NOTIFICATION_NOT_FOUND",
            status_code=404,
        )


class InvalidNotificationUpdateError(NotificationServiceError):
    def __init__(self):
        super().__init__(
            message="Provide markAllAsRead, or notificationId together with isRead",
            error_code="INVALID_REQUEST",
            status_code=400,
        )


@dataclass
class NotificationFeed:
    notifications: list[Notification]
    unread_count: int


async def get_feed(
    db: AsyncSession,
    user_id: str,
    limit: int = DEFAULT_FEED_LIMIT,
    unread_only: bool = False,
) -> NotificationFeed:
    """
    The user's newest notifications plus their total unread count.

    The unread count always covers every notification, not only the
    returned page.
    """
    notifications = await repository.list_for_user(db, user_id, limit, unread_only)
    unread_count = await repository.count_unread(db, user_id)
    return NotificationFeed(notifications=notifications, unread_count=unread_count)


async def update_read_state(
    db: AsyncSession,
    user_id: str,
    data: NotificationUpdateRequest,
) -> str:
    """
    Mark all notifications read, or set one notification's read state.

    Returns:
        A message describing what changed

    Raises:
        NotificationNotFoundError: If the notification is missing or not the user's
        InvalidNotificationUpdateError: If the request names neither action
    """
    if data.mark_all_as_read:
        updated = await repository.mark_all_read(db, user_id)
        logger.info(f"Marked {updated} notifications read for user {user_id}")
        return "All notifications marked as read"

    if data.notification_id is None or data.is_read is None:
        raise InvalidNotificationUpdateError()

    notification = await repository.get_for_user(db, data.notification_id, user_id)
    if notification is None:
        raise NotificationNotFoundError(data.notification_id)

    await repository.set_read(db, notification, data.is_read)
    return "Notification marked as read" if data.is_read else "Notification marked as unread"
