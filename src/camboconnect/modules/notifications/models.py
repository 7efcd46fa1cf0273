"""
Notification Models
"""

import enum

from sqlalchemy import Boolean, Enum, ForeignKey, Index, Text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from camboconnect.modules.shared import BaseModel


class NotificationType(str, enum.Enum):
    """Kinds of in-app notifications."""

    DEADLINE_REMINDER = "DEADLINE_REMINDER"


class Notification(BaseModel):
    """An in-app notification for a single user."""

    __tablename__ = "notifications"

    user_id: Mapped[str] = mapped_column(
        UUID(as_uuid=False),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )
    type: Mapped[NotificationType] = mapped_column(
        Enum(NotificationType, name="notification_type"), nullable=False
    )
    message: Mapped[str] = mapped_column(Text, nullable=False)
    # Id of the opportunity (or other entity) the notification is about
    related_entity_id: Mapped[str | None] = mapped_column(UUID(as_uuid=False), nullable=True)
    is_read: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    __table_args__ = (
        Index(
            "ix_notifications_user_entity_type_created",
            "user_id",
            "related_entity_id",
            "type",
            "created_at",
        ),
    )
