"""
Notifications Schemas

camelCase keys, matching the opportunity endpoints' bodies.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from .models import Notification, NotificationType


class NotificationResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    type: NotificationType
    message: str
    related_entity_id: str | None = Field(None, alias="relatedEntityId")
    is_read: bool = Field(..., alias="isRead")
    created_at: datetime = Field(..., alias="createdAt")

    @classmethod
    def from_model(cls, notification: Notification) -> "NotificationResponse":
        return cls(
            id=notification.id,
            type=notification.type,
            message=notification.message,
            related_entity_id=notification.related_entity_id,
            is_read=notification.is_read,
            created_at=notification.created_at,
        )


class NotificationListResponse(BaseModel):
    """Response for GET /notifications."""

    model_config = ConfigDict(populate_by_name=True)

    notifications: list[NotificationResponse]
    unread_count: int = Field(..., alias="unreadCount")


class NotificationUpdateRequest(BaseModel):
    """
    Request body for POST /notifications.

    Either ``markAllAsRead: true``, or a ``notificationId`` together with the
    ``isRead`` state to set.
    """

    model_config = ConfigDict(populate_by_name=True)

    mark_all_as_read: bool = Field(False, alias="markAllAsRead")
    notification_id: str | None = Field(None, alias="notificationId")
    is_read: bool | None = Field(None, alias="isRead")


class NotificationUpdateResponse(BaseModel):
    message: str
