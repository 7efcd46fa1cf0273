"""
Profiles Service Layer

Applies the privacy filter to profiles and participations, and manages the
privacy levels users set on their own content.

The friendship lookup is done at most once per request, and only when some
piece of content is FRIENDS_ONLY and the viewer is neither anonymous nor the
owner.
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from camboconnect.modules.profiles.privacy import can_view_content, needs_friendship_check
from camboconnect.modules.profiles.schemas import (
    OrganizationSummary,
    ParticipationItem,
    ParticipationOpportunity,
    PrivacySettingsUpdate,
    ProfileResponse,
    ProfileStats,
)
from camboconnect.modules.users.models import Participation, PrivacyLevel, User
from camboconnect.modules.users.repository import UserRepository

logger = logging.getLogger(__name__)


class ProfileServiceError(Exception):
    """Base exception for profile service errors."""

    def __init__(self, message: str, error_code: str, status_code: int = 400):
        self.message = message
        self.error_code = error_code
        self.status_code = status_code
        super().__init__(message)


class UserNotFoundError(ProfileServiceError):
    def __init__(self, user_id: str | None = None):
        super().__init__(
            message=f"User {user_id} not found" if user_id else "User not found",
            error_code="USER_NOT_FOUND",
            status_code=404,
        )


class ParticipationNotFoundError(ProfileServiceError):
    def __init__(self, participation_id: str | None = None):
        super().__init__(
            message=(
                f"Participation {participation_id} not found"
                if participation_id
                else "Participation not found"
            ),
            error_code="PARTICIPATION_NOT_FOUND",
            status_code=404,
        )


class NotParticipationOwnerError(ProfileServiceError):
    def __init__(self):
        super().__init__(
            message="You can only manage the privacy of your own participations.",
            error_code="FORBIDDEN",
            status_code=403,
        )


def _to_participation_item(participation: Participation) -> ParticipationItem:
    opportunity = participation.opportunity
    return ParticipationItem(
        id=participation.id,
        year=participation.year,
        feedback=participation.feedback,
        opportunity=ParticipationOpportunity(
            id=opportunity.id,
            title=opportunity.title,
            organization=OrganizationSummary(
                id=opportunity.organization.id,
                name=opportunity.organization.name,
            ),
        ),
    )


async def _is_friend(
    db: AsyncSession,
    viewer_id: str | None,
    owner_id: str,
    levels: list[PrivacyLevel],
) -> bool:
    if not needs_friendship_check(viewer_id, owner_id, levels):
        return False
    return await UserRepository.are_friends(db, viewer_id, owner_id)


def filter_participations(
    participations: list[Participation],
    viewer_id: str | None,
    owner_id: str,
    is_friend: bool,
) -> list[ParticipationItem]:
    """Participations the viewer may see, in the given order."""
    return [
        _to_participation_item(participation)
        for participation in participations
        if can_view_content(viewer_id, owner_id, participation.privacy_level, is_friend)
    ]


async def get_profile(
    db: AsyncSession,
    owner_id: str,
    viewer_id: str | None,
) -> ProfileResponse:
    """
    Build the profile of ``owner_id`` as seen by ``viewer_id`` (None = anonymous).

    Raises:
        UserNotFoundError: If the user does not exist
    """
    user = await UserRepository.get_by_id(db, owner_id)
    if user is None:
        raise UserNotFoundError(owner_id)

    participations = await UserRepository.list_participations(db, user.id)

    levels = list(user.privacy_settings.values()) + [p.privacy_level for p in participations]
    is_friend = await _is_friend(db, viewer_id, user.id, levels)

    def visible(level: PrivacyLevel) -> bool:
        return can_view_content(viewer_id, user.id, level, is_friend)

    return ProfileResponse(
        id=user.id,
        first_name=user.first_name,
        last_name=user.last_name,
        profile_image=user.profile_image,
        bio=user.bio,
        education=user.education_entries if visible(user.education_privacy) else [],
        experience=user.experience_entries if visible(user.experience_privacy) else [],
        skills=user.skill_entries if visible(user.skills_privacy) else [],
        social_links=user.social_links if visible(user.contact_url_privacy) else [],
        participations=filter_participations(participations, viewer_id, user.id, is_friend),
        stats=ProfileStats(
            participations_count=len(participations),
            friends_count=await UserRepository.count_friends(db, user.id),
        ),
    )


async def list_participations(
    db: AsyncSession,
    owner_id: str,
    viewer_id: str,
) -> list[ParticipationItem]:
    """Visible participations of ``owner_id``, newest year first."""
    participations = await UserRepository.list_participations(db, owner_id)
    is_friend = await _is_friend(
        db, viewer_id, owner_id, [p.privacy_level for p in participations]
    )
    return filter_participations(participations, viewer_id, owner_id, is_friend)


async def get_privacy_settings(db: AsyncSession, user_id: str) -> User:
    user = await UserRepository.get_by_id(db, user_id)
    if user is None:
        raise UserNotFoundError(user_id)
    return user


async def update_privacy_settings(
    db: AsyncSession,
    user_id: str,
    data: PrivacySettingsUpdate,
) -> User:
    """
    Update the section privacy levels given in ``data``.

    Raises:
        UserNotFoundError: If the user does not exist
    """
    user = await get_privacy_settings(db, user_id)

    changes = data.model_dump(exclude_none=True)
    if not changes:
        return user

    return await UserRepository.update_privacy_settings(db, user, changes)


async def _get_owned_participation(
    db: AsyncSession,
    participation_id: str,
    user_id: str,
) -> Participation:
    participation = await UserRepository.get_participation(db, participation_id)
    if participation is None:
        raise ParticipationNotFoundError(participation_id)

    if participation.user_id != user_id:
        logger.warning(
            f"User {user_id} tried to access privacy of participation {participation_id}"
        )
        raise NotParticipationOwnerError()

    return participation


async def get_participation_privacy(
    db: AsyncSession,
    participation_id: str,
    user_id: str,
) -> Participation:
    return await _get_owned_participation(db, participation_id, user_id)


async def update_participation_privacy(
    db: AsyncSession,
    participation_id: str,
    user_id: str,
    level: PrivacyLevel,
) -> Participation:
    """
    Set the privacy level of one of the user's own participations.

    Raises:
        ParticipationNotFoundError: If it does not exist
        NotParticipationOwnerError: If it belongs to someone else
    """
    participation = await _get_owned_participation(db, participation_id, user_id)
    return await UserRepository.update_participation_privacy(db, participation, level)
