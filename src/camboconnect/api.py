from fastapi import APIRouter

from camboconnect.modules.notifications import router as notifications_router
from camboconnect.modules.opportunities import bookmarks_router, cron_router
from camboconnect.modules.opportunities import router as opportunities_router
from camboconnect.modules.profiles import router as profiles_router

api_router = APIRouter()

api_router.include_router(cron_router, prefix="/cron", tags=["Cron"])

api_router.include_router(
    opportunities_router, prefix="/opportunities", tags=["Opportunities"]
)

api_router.include_router(bookmarks_router, tags=["Opportunities"])

api_router.include_router(
    notifications_router, prefix="/notifications", tags=["Notifications"]
)

api_router.include_router(profiles_router, tags=["Profiles"])
