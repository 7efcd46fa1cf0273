"""
Notifications Router

Endpoints:
- GET /notifications - Newest notifications and the unread count
- POST /notifications - Mark all read, or mark one read/unread
"""

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from camboconnect.core.auth import Viewer, get_current_viewer
from camboconnect.core.database import get_db
from camboconnect.modules.notifications import service
from camboconnect.modules.notifications.schemas import (
    NotificationListResponse,
    NotificationResponse,
    NotificationUpdateRequest,
    NotificationUpdateResponse,
)
from camboconnect.modules.notifications.service import NotificationServiceError

router = APIRouter()


def _handle_service_error(e: NotificationServiceError) -> HTTPException:
    return HTTPException(
        status_code=e.status_code,
        detail={"error": e.error_code, "message": e.message},
    )


@router.get(
    "",
    response_model=NotificationListResponse,
    summary="List Notifications",
)
async def list_notifications(
    limit: int = Query(service.DEFAULT_FEED_LIMIT, ge=1, le=100),
    unread: bool = Query(False, description="Only unread notifications"),
    viewer: Viewer = Depends(get_current_viewer),
    db: AsyncSession = Depends(get_db),
) -> NotificationListResponse:
    feed = await service.get_feed(db, viewer.id, limit=limit, unread_only=unread)
    return NotificationListResponse(
        notifications=[NotificationResponse.from_model(n) for n in feed.notifications],
        unread_count=feed.unread_count,
    )


@router.post(
    "",
    response_model=NotificationUpdateResponse,
    summary="Update Notification Read State",
    responses={
        400: {"description": "Neither markAllAsRead nor notificationId with isRead"},
        404: {"description": "Notification not found"},
    },
)
async def update_notifications(
    data: NotificationUpdateRequest,
    viewer: Viewer = Depends(get_current_viewer),
    db: AsyncSession = Depends(get_db),
) -> NotificationUpdateResponse:
    try:
        message = await service.update_read_state(db, viewer.id, data)
    except NotificationServiceError as e:
        raise _handle_service_error(e) from e

    return NotificationUpdateResponse(message=message)
