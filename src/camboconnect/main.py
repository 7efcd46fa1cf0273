"""
CamboConnect API - Main Application Entry Point

This module initializes and configures the FastAPI application including:
- Logging
- Database and Redis connections
- Background job scheduler
- CORS middleware
- API routing
- Health check endpoints
"""

import logging
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware

from camboconnect.api import api_router
from camboconnect.core.auth import CronAuthenticationError, cron_auth_exception_handler
from camboconnect.core.config import settings
from camboconnect.core.database import close_db, init_db
from camboconnect.core.redis import close_redis, init_redis
from camboconnect.core.scheduler import (
    list_registered_jobs,
    start_scheduler,
    stop_scheduler,
    trigger_job_manually,
)
from camboconnect.modules.notifications import models as notification_models  # noqa: F401
from camboconnect.modules.opportunities import register_opportunity_jobs
from camboconnect.modules.users import models as user_models  # noqa: F401

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_app: FastAPI):
    """
    Application lifespan manager.

    Outside production a failed Redis or database connection is logged and
    startup continues; rate limiting then falls back to process memory.
    """
    logger.info(f"Starting CamboConnect API in {settings.python_env} mode...")

    try:
        await init_redis()
        logger.info("[OK] Redis connected")
    except Exception as e:
        logger.error(f"[FAIL] Redis connection failed: {e}")
        if settings.is_production:
            raise

    try:
        await init_db()
        logger.info("[OK] Database connected")
    except Exception as e:
        logger.error(f"[FAIL] Database connection failed: {e}")
        if settings.is_production:
            raise

    if settings.scheduler_enabled:
        try:
            register_opportunity_jobs()
            await start_scheduler()
            logger.info("[OK] Background scheduler started")
        except Exception as e:
            logger.error(f"[FAIL] Background scheduler failed to start: {e}")
            if settings.is_production:
                raise
    else:
        logger.info("Background scheduler disabled, relying on the cron endpoints")

    yield

    logger.info("Shutting down CamboConnect API...")

    await stop_scheduler()
    await close_redis()
    await close_db()
    logger.info("[OK] Cleanup complete")


app = FastAPI(
    title="CamboConnect API",
    description="Opportunity lifecycle, view tracking and privacy-aware profiles",
    version="0.1.0",
    docs_url="/docs" if settings.is_development else None,
    redoc_url="/redoc" if settings.is_development else None,
    lifespan=lifespan,
)

app.add_exception_handler(CronAuthenticationError, cron_auth_exception_handler)

app.include_router(api_router, prefix="/api/v1")

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/", tags=["Root"])
async def root() -> dict[str, str]:
    return {
        "message": "Welcome to CamboConnect API",
        "status": "running",
        "environment": settings.python_env,
    }


@app.get("/health", tags=["Health"])
async def health_check() -> dict[str, str]:
    """Health check endpoint for container orchestration."""
    return {"status": "healthy"}


@app.get("/ready", tags=["Health"])
async def readiness_check() -> dict[str, str]:
    return {"status": "ready"}


# ============================================
# Background Job Debug Endpoints
# ============================================
# Development only. In production the jobs run on schedule or through the
# cron endpoints.


async def require_development() -> None:
    if not settings.is_development:
        raise HTTPException(status_code=404, detail="Not Found")


@app.get("/debug/jobs", tags=["Debug"], dependencies=[Depends(require_development)])
async def list_jobs():
    """List all registered background jobs and their next run time."""
    return {"jobs": list_registered_jobs()}


@app.post(
    "/debug/jobs/{job_id}/trigger",
    tags=["Debug"],
    dependencies=[Depends(require_development)],
)
async def trigger_job(job_id: str):
    """
    Manually trigger a background job.

    Args:
        job_id: The ID of the job to trigger. Available jobs:
            - opportunities_update_lifecycle
            - opportunities_deadline_reminders

    Raises:
        HTTPException 400: If job_id is not found.
    """
    try:
        return await trigger_job_manually(job_id)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
