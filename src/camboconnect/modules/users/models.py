"""
User Models

Profile data, the friendship relation and opportunity participations.
Each profile section and each participation carries its own privacy level.
"""

from enum import Enum

from sqlalchemy import ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.dialects.postgresql import ENUM, JSON, UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from camboconnect.modules.opportunities.models import Opportunity
from camboconnect.modules.shared import BaseModel


class PrivacyLevel(str, Enum):
    """Who may see a piece of profile content."""

    PUBLIC = "PUBLIC"
    FRIENDS_ONLY = "FRIENDS_ONLY"
    ONLY_ME = "ONLY_ME"


privacy_level_enum = ENUM(PrivacyLevel, name="privacy_level", create_type=True)

PRIVACY_FIELDS = (
    "education_privacy",
    "experience_privacy",
    "skills_privacy",
    "contact_url_privacy",
)


class User(BaseModel):
    """
    User profile.

    Section entries are stored as JSON lists of objects; their shape is owned
    by the profile editor and passed through untouched.
    """

    __tablename__ = "users"

    email: Mapped[str] = mapped_column(String(255), unique=True, index=True, nullable=False)
    first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    last_name: Mapped[str] = mapped_column(String(100), nullable=False)
    profile_image: Mapped[str | None] = mapped_column(String(500), nullable=True)
    bio: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Profile sections
    education_entries: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    experience_entries: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    skill_entries: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    social_links: Mapped[list] = mapped_column(JSON, nullable=False, default=list)

    # Per-section privacy
    education_privacy: Mapped[PrivacyLevel] = mapped_column(
        privacy_level_enum, nullable=False, default=PrivacyLevel.PUBLIC
    )
    experience_privacy: Mapped[PrivacyLevel] = mapped_column(
        privacy_level_enum, nullable=False, default=PrivacyLevel.PUBLIC
    )
    skills_privacy: Mapped[PrivacyLevel] = mapped_column(
        privacy_level_enum, nullable=False, default=PrivacyLevel.PUBLIC
    )
    contact_url_privacy: Mapped[PrivacyLevel] = mapped_column(
        privacy_level_enum, nullable=False, default=PrivacyLevel.PUBLIC
    )

    participations: Mapped[list["Participation"]] = relationship(
        "Participation", back_populates="user", cascade="all, delete-orphan"
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email={self.email})>"

    @property
    def privacy_settings(self) -> dict[str, PrivacyLevel]:
        """The four section privacy levels, keyed by field name."""
        return {field: getattr(self, field) for field in PRIVACY_FIELDS}


class Friendship(BaseModel):
    """
    A stored friendship edge.

    Either direction counts: A and B are friends if (A, B) or (B, A) exists.
    """

    __tablename__ = "friendships"

    user_id: Mapped[str] = mapped_column(
        UUID(as_uuid=False),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    friend_id: Mapped[str] = mapped_column(
        UUID(as_uuid=False),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    __table_args__ = (UniqueConstraint("user_id", "friend_id", name="uq_friendships_pair"),)


class Participation(BaseModel):
    """A user's past participation in an opportunity."""

    __tablename__ = "participations"

    user_id: Mapped[str] = mapped_column(
        UUID(as_uuid=False),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    opportunity_id: Mapped[str] = mapped_column(
        UUID(as_uuid=False),
        ForeignKey("opportunities.id", ondelete="CASCADE"),
        nullable=False,
    )
    year: Mapped[int] = mapped_column(Integer, nullable=False)
    feedback: Mapped[str | None] = mapped_column(Text, nullable=True)
    privacy_level: Mapped[PrivacyLevel] = mapped_column(
        privacy_level_enum, nullable=False, default=PrivacyLevel.PUBLIC
    )

    user: Mapped["User"] = relationship("User", back_populates="participations")
    opportunity: Mapped["Opportunity"] = relationship("Opportunity", lazy="selectin")
