"""
Opportunities Module

Keeps opportunity records consistent with time and popularity:
1. Lifecycle state machine (OPENING_SOON -> ACTIVE -> CLOSING_SOON -> CLOSED)
   plus the derived is_popular / is_new flags
2. View tracking feeding visit_count
3. Bookmarks and deadline reminders for bookmarked opportunities

API Endpoints:
- POST /cron/update-opportunities - Run the lifecycle update (shared secret)
- POST /cron/check-deadlines - Send deadline reminders (shared secret)
- POST /opportunities/{id}/increment-view - Count a view
- GET /opportunities/{id}/check-view - View status for the signed-in user
- POST /opportunities/{id}/bookmark - Add or remove a bookmark
- GET /opportunities/{id}/bookmark/status - Bookmark state
- GET /profile/bookmarks - The signed-in user's bookmarks

Background Jobs (via APScheduler):
- opportunities_update_lifecycle: every LIFECYCLE_JOB_INTERVAL_MINUTES
- opportunities_deadline_reminders: every DEADLINE_REMINDER_INTERVAL_MINUTES
"""

from .cron_router import router as cron_router
from .jobs import register_opportunity_jobs
from .router import bookmarks_router, router

__all__ = ["router", "bookmarks_router", "cron_router", "register_opportunity_jobs"]
