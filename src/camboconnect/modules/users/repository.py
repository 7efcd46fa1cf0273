"""
User Repository

Database operations for profiles, friendships and participations.
"""

import logging

from sqlalchemy import and_, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from camboconnect.modules.opportunities.models import Opportunity
from camboconnect.modules.users.models import Friendship, Participation, PrivacyLevel, User

logger = logging.getLogger(__name__)


class UserRepository:
    """Repository for user database operations."""

    @staticmethod
    async def get_by_id(db: AsyncSession, user_id: str) -> User | None:
        """
        Get a user by ID.

        Args:
            db: Database session
            user_id: User UUID

        Returns:
            User instance or None if not found
        """
        result = await db.execute(select(User).where(User.id == str(user_id)))
        return result.scalar_one_or_none()

    @staticmethod
    async def are_friends(db: AsyncSession, user_id: str, other_id: str) -> bool:
        """Check whether a friendship edge exists in either direction."""
        result = await db.execute(
            select(Friendship.id)
            .where(
                or_(
                    and_(Friendship.user_id == user_id, Friendship.friend_id == other_id),
                    and_(Friendship.user_id == other_id, Friendship.friend_id == user_id),
                )
            )
            .limit(1)
        )
        return result.scalar_one_or_none() is not None

    @staticmethod
    async def count_friends(db: AsyncSession, user_id: str) -> int:
        result = await db.execute(
            select(func.count())
            .select_from(Friendship)
            .where(or_(Friendship.user_id == user_id, Friendship.friend_id == user_id))
        )
        return result.scalar_one()

    @staticmethod
    async def list_participations(db: AsyncSession, user_id: str) -> list[Participation]:
        """All participations of a user, newest year first, with opportunity and organization."""
        result = await db.execute(
            select(Participation)
            .where(Participation.user_id == user_id)
            .options(
                selectinload(Participation.opportunity).selectinload(Opportunity.organization)
            )
            .order_by(Participation.year.desc())
        )
        return list(result.scalars().all())

    @staticmethod
    async def get_participation(db: AsyncSession, participation_id: str) -> Participation | None:
        return await db.get(Participation, participation_id)

    @staticmethod
    async def update_privacy_settings(
        db: AsyncSession, user: User, changes: dict[str, PrivacyLevel]
    ) -> User:
        """
        Apply section privacy changes to a user.

        Args:
            db: Database session
            user: The user to update
            changes: Mapping of privacy field name to new level

        Returns:
            The refreshed user
        """
        for field, level in changes.items():
            setattr(user, field, level)

        await db.commit()
        await db.refresh(user)

        logger.info(f"Updated privacy settings for user {user.id}: {sorted(changes)}")
        return user

    @staticmethod
    async def update_participation_privacy(
        db: AsyncSession, participation: Participation, level: PrivacyLevel
    ) -> Participation:
        participation.privacy_level = level

        await db.commit()
        await db.refresh(participation)

        logger.info(f"Updated privacy of participation {participation.id} to {level.value}")
        return participation

