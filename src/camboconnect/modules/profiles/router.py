"""
Profiles Router

Endpoints:
- GET /profiles/{id} - Privacy-filtered profile (anonymous viewers allowed)
- GET /users/{id}/participations - Privacy-filtered participations
- GET /profile/privacy - Current user's section privacy levels
- PUT /profile/privacy - Update section privacy levels
- GET /participations/{id}/privacy - Privacy level of an own participation
- PUT /participations/{id}/privacy - Update it
"""

import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from camboconnect.core.auth import Viewer, get_current_viewer, get_optional_viewer
from camboconnect.core.database import get_db
from camboconnect.modules.profiles import service
from camboconnect.modules.profiles.schemas import (
    ParticipationListResponse,
    ParticipationPrivacyResponse,
    ParticipationPrivacyUpdate,
    PrivacySettingsResponse,
    PrivacySettingsUpdate,
    ProfileResponse,
)
from camboconnect.modules.profiles.service import ProfileServiceError

logger = logging.getLogger(__name__)

router = APIRouter()


def _handle_service_error(e: ProfileServiceError) -> HTTPException:
    return HTTPException(
        status_code=e.status_code,
        detail={"error": e.error_code, "message": e.message},
    )


def _privacy_settings_response(user) -> PrivacySettingsResponse:
    return PrivacySettingsResponse(id=user.id, **user.privacy_settings)


@router.get("/profiles/{user_id}", response_model=ProfileResponse, summary="Get Profile")
async def get_profile(
    user_id: str,
    viewer: Viewer | None = Depends(get_optional_viewer),
    db: AsyncSession = Depends(get_db),
) -> ProfileResponse:
    try:
        return await service.get_profile(db, user_id, viewer.id if viewer else None)
    except ProfileServiceError as e:
        raise _handle_service_error(e) from e


@router.get(
    "/users/{user_id}/participations",
    response_model=ParticipationListResponse,
    summary="List User Participations",
)
async def list_participations(
    user_id: str,
    viewer: Viewer = Depends(get_current_viewer),
    db: AsyncSession = Depends(get_db),
) -> ParticipationListResponse:
    participations = await service.list_participations(db, user_id, viewer.id)
    return ParticipationListResponse(participations=participations)


@router.get(
    "/profile/privacy",
    response_model=PrivacySettingsResponse,
    summary="Get Privacy Settings",
)
async def get_privacy_settings(
    viewer: Viewer = Depends(get_current_viewer),
    db: AsyncSession = Depends(get_db),
) -> PrivacySettingsResponse:
    try:
        user = await service.get_privacy_settings(db, viewer.id)
    except ProfileServiceError as e:
        raise _handle_service_error(e) from e
    return _privacy_settings_response(user)


@router.put(
    "/profile/privacy",
    response_model=PrivacySettingsResponse,
    summary="Update Privacy Settings",
)
async def update_privacy_settings(
    data: PrivacySettingsUpdate,
    viewer: Viewer = Depends(get_current_viewer),
    db: AsyncSession = Depends(get_db),
) -> PrivacySettingsResponse:
    try:
        user = await service.update_privacy_settings(db, viewer.id, data)
    except ProfileServiceError as e:
        raise _handle_service_error(e) from e
    return _privacy_settings_response(user)


@router.get(
    "/participations/{participation_id}/privacy",
    response_model=ParticipationPrivacyResponse,
    summary="Get Participation Privacy",
)
async def get_participation_privacy(
    participation_id: str,
    viewer: Viewer = Depends(get_current_viewer),
    db: AsyncSession = Depends(get_db),
) -> ParticipationPrivacyResponse:
    try:
        participation = await service.get_participation_privacy(db, participation_id, viewer.id)
    except ProfileServiceError as e:
        raise _handle_service_error(e) from e
    return ParticipationPrivacyResponse.model_validate(participation)


@router.put(
    "/participations/{participation_id}/privacy",
    response_model=ParticipationPrivacyResponse,
    summary="Update Participation Privacy",
)
async def update_participation_privacy(
    participation_id: str,
    data: ParticipationPrivacyUpdate,
    viewer: Viewer = Depends(get_current_viewer),
    db: AsyncSession = Depends(get_db),
) -> ParticipationPrivacyResponse:
    try:
        participation = await service.update_participation_privacy(
            db, participation_id, viewer.id, data.privacy_level
        )
    except ProfileServiceError as e:
        raise _handle_service_error(e) from e

    logger.info(f"User {viewer.id} set participation {participation_id} to {data.privacy_level.value}")
    return ParticipationPrivacyResponse.model_validate(participation)
