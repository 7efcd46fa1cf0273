"""
Opportunities Router

View tracking and bookmarks for opportunity detail pages. The view endpoints
require a signed-in user so that anonymous traffic and bots do not inflate
``visit_count``.

Endpoints:
- POST /opportunities/{id}/increment-view - Count a view
- GET /opportunities/{id}/check-view - Has the user viewed it already?
- POST /opportunities/{id}/bookmark - Add or remove a bookmark
- GET /opportunities/{id}/bookmark/status - Bookmark state (false when signed out)
- GET /profile/bookmarks - The signed-in user's bookmarks
"""

import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from camboconnect.core.auth import Viewer, get_current_viewer, get_optional_viewer
from camboconnect.core.config import settings
from camboconnect.core.database import get_db
from camboconnect.core.rate_limit import enforce_rate_limit
from camboconnect.modules.opportunities import service
from camboconnect.modules.opportunities.schemas import (
    BookmarkedOpportunity,
    BookmarkStatusResponse,
    BookmarkUpdateRequest,
    BookmarkUpdateResponse,
    ViewIncrementResponse,
    ViewStatusResponse,
)
from camboconnect.modules.opportunities.service import OpportunityServiceError

logger = logging.getLogger(__name__)

router = APIRouter()

# Mounted without a prefix: lists live under the viewer's profile
bookmarks_router = APIRouter()


def _handle_service_error(e: OpportunityServiceError) -> HTTPException:
    return HTTPException(
        status_code=e.status_code,
        detail={"error": e.error_code, "message": e.message},
    )


@router.post(
    "/{opportunity_id}/increment-view",
    response_model=ViewIncrementResponse,
    summary="Count Opportunity View",
    responses={
        401: {"description": "Not signed in"},
        404: {"description": "Opportunity not found"},
        429: {"description": "Too many views counted for this user"},
    },
)
async def increment_view(
    opportunity_id: str,
    viewer: Viewer = Depends(get_current_viewer),
    db: AsyncSession = Depends(get_db),
) -> ViewIncrementResponse:
    await enforce_rate_limit(
        f"opportunity_view:{viewer.id}",
        settings.view_rate_limit,
        settings.view_rate_limit_window_seconds,
    )

    try:
        await service.record_view(db, opportunity_id, viewer.id)
    except OpportunityServiceError as e:
        raise _handle_service_error(e) from e

    return ViewIncrementResponse()


@router.get(
    "/{opportunity_id}/check-view",
    response_model=ViewStatusResponse,
    summary="Check Opportunity View Status",
)
async def check_view(
    opportunity_id: str,
    viewer: Viewer = Depends(get_current_viewer),
    db: AsyncSession = Depends(get_db),
) -> ViewStatusResponse:
    status = await service.check_view(db, opportunity_id, viewer.id)
    return ViewStatusResponse(has_viewed=status.has_viewed, viewed_at=status.viewed_at)


@router.post(
    "/{opportunity_id}/bookmark",
    response_model=BookmarkUpdateResponse,
    summary="Bookmark Opportunity",
    responses={
        401: {"description": "Not signed in"},
        404: {"description": "Opportunity not found"},
    },
)
async def update_bookmark(
    opportunity_id: str,
    data: BookmarkUpdateRequest,
    viewer: Viewer = Depends(get_current_viewer),
    db: AsyncSession = Depends(get_db),
) -> BookmarkUpdateResponse:
    try:
        bookmarked = await service.set_bookmark(db, opportunity_id, viewer.id, data.bookmarked)
    except OpportunityServiceError as e:
        raise _handle_service_error(e) from e

    message = (
        "Opportunity bookmarked successfully"
        if bookmarked
        else "Opportunity removed from bookmarks"
    )
    return BookmarkUpdateResponse(bookmarked=bookmarked, message=message)


@router.get(
    "/{opportunity_id}/bookmark/status",
    response_model=BookmarkStatusResponse,
    summary="Check Bookmark Status",
)
async def bookmark_status(
    opportunity_id: str,
    viewer: Viewer | None = Depends(get_optional_viewer),
    db: AsyncSession = Depends(get_db),
) -> BookmarkStatusResponse:
    bookmarked = await service.is_bookmarked(db, opportunity_id, viewer.id if viewer else None)
    return BookmarkStatusResponse(is_bookmarked=bookmarked)


@bookmarks_router.get(
    "/profile/bookmarks",
    response_model=list[BookmarkedOpportunity],
    summary="List My Bookmarks",
)
async def list_my_bookmarks(
    viewer: Viewer = Depends(get_current_viewer),
    db: AsyncSession = Depends(get_db),
) -> list[BookmarkedOpportunity]:
    bookmarks = await service.list_bookmarks(db, viewer.id)
    return [BookmarkedOpportunity.from_bookmark(bookmark) for bookmark in bookmarks]
