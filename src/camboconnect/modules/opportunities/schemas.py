"""
Opportunities Schemas

Request and response bodies for the cron, view tracking and bookmark endpoints.
Keys are camelCase because existing schedulers and clients already consume
that shape.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from .lifecycle import LifecycleSummary
from .models import Bookmark, OpportunityStatus


class LifecycleCounts(BaseModel):
    """Records affected by each lifecycle step."""

    model_config = ConfigDict(populate_by_name=True)

    active: int
    closing_soon: int = Field(..., alias="closingSoon")
    closed: int
    popular: int
    not_new: int = Field(..., alias="notNew")


class LifecycleUpdateResponse(BaseModel):
    """Response for POST /cron/update-opportunities."""

    success: bool = True
    updated: LifecycleCounts
    timestamp: datetime

    @classmethod
    def from_summary(cls, summary: LifecycleSummary) -> "LifecycleUpdateResponse":
        return cls(
            updated=LifecycleCounts(**summary.counts()),
            timestamp=summary.timestamp,
        )


class DeadlineReminderResponse(BaseModel):
    """Response for POST /cron/check-deadlines."""

    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    bookmarks_checked: int = Field(..., alias="bookmarksChecked")
    notifications_created: int = Field(..., alias="notificationsCreated")
    skipped: int
    errors: int
    notifications_details: list[dict[str, str]] = Field(
        default_factory=list, alias="notificationsDetails"
    )
    timestamp: datetime


class CronErrorResponse(BaseModel):
    """Error body returned by the cron endpoints."""

    error: str
    details: str | None = None


class ViewIncrementResponse(BaseModel):
    message: str = "View count incremented successfully"


class ViewStatusResponse(BaseModel):
    """Whether the signed-in user has viewed an opportunity."""

    model_config = ConfigDict(populate_by_name=True)

    has_viewed: bool = Field(..., alias="hasViewed")
    viewed_at: datetime | None = Field(None, alias="viewedAt")


# ============================================
# Bookmarks
# ============================================


class BookmarkUpdateRequest(BaseModel):
    """Request body for POST /opportunities/{id}/bookmark."""

    bookmarked: bool


class BookmarkUpdateResponse(BaseModel):
    bookmarked: bool
    message: str


class BookmarkStatusResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    is_bookmarked: bool = Field(..., alias="isBookmarked")


class BookmarkOrganization(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    logo: str | None = None


class BookmarkedOpportunity(BaseModel):
    """One entry of GET /profile/bookmarks: the opportunity plus when it was saved."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    bookmark_id: str = Field(..., alias="bookmarkId")
    title: str
    organization: BookmarkOrganization
    status: OpportunityStatus
    deadline: datetime
    bookmarked_at: datetime = Field(..., alias="bookmarkedAt")

    @classmethod
    def from_bookmark(cls, bookmark: Bookmark) -> "BookmarkedOpportunity":
        opportunity = bookmark.opportunity
        return cls(
            id=opportunity.id,
            bookmark_id=bookmark.id,
            title=opportunity.title,
            organization=BookmarkOrganization.model_validate(opportunity.organization),
            status=opportunity.status,
            deadline=opportunity.deadline,
            bookmarked_at=bookmark.created_at,
        )
