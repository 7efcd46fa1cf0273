"""
Opportunities Models

Opportunities posted by organizations, plus the per-user records that hang off
them (bookmarks and view events).
"""

import enum
from datetime import datetime

from sqlalchemy import (
    Boolean,
    DateTime,
    Enum,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from camboconnect.modules.shared import BaseModel


class OpportunityStatus(str, enum.Enum):
    """
    Lifecycle state of an opportunity.

    Transitions only move forward:
    OPENING_SOON -> ACTIVE -> CLOSING_SOON -> CLOSED
    """

    OPENING_SOON = "OPENING_SOON"
    ACTIVE = "ACTIVE"
    CLOSING_SOON = "CLOSING_SOON"
    CLOSED = "CLOSED"


class Organization(BaseModel):
    """An organization that posts opportunities."""

    __tablename__ = "organizations"

    name: Mapped[str] = mapped_column(String(200), nullable=False)
    logo: Mapped[str | None] = mapped_column(String(500), nullable=True)

    opportunities: Mapped[list["Opportunity"]] = relationship(
        "Opportunity", back_populates="organization"
    )


class Opportunity(BaseModel):
    """
    An internship, program or similar opening.

    ``status``, ``is_popular`` and ``is_new`` are maintained by the lifecycle
    job; ``visit_count`` is incremented by view tracking.
    """

    __tablename__ = "opportunities"

    title: Mapped[str] = mapped_column(String(300), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)

    organization_id: Mapped[str] = mapped_column(
        UUID(as_uuid=False),
        ForeignKey("organizations.id", ondelete="CASCADE"),
        nullable=False,
    )

    status: Mapped[OpportunityStatus] = mapped_column(
        Enum(OpportunityStatus, name="opportunity_status"),
        nullable=False,
        default=OpportunityStatus.OPENING_SOON,
    )
    start_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    end_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    deadline: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    visit_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    is_popular: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    is_new: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    organization: Mapped["Organization"] = relationship(
        "Organization", back_populates="opportunities", lazy="selectin"
    )

    __table_args__ = (
        Index("ix_opportunities_status_deadline", "status", "deadline"),
        Index("ix_opportunities_status_start_date", "status", "start_date"),
        Index("ix_opportunities_created_at", "created_at"),
    )

    def __repr__(self) -> str:
        return f"<Opportunity(id={self.id}, title={self.title!r}, status={self.status.value})>"


class Bookmark(BaseModel):
    """A user's bookmark of an opportunity."""

    __tablename__ = "bookmarks"

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

    opportunity: Mapped["Opportunity"] = relationship("Opportunity", lazy="joined")

    __table_args__ = (
        UniqueConstraint("user_id", "opportunity_id", name="uq_bookmarks_user_opportunity"),
    )


class OpportunityView(BaseModel):
    """One counted view of an opportunity's detail page by a signed-in user."""

    __tablename__ = "opportunity_views"

    user_id: Mapped[str] = mapped_column(
        UUID(as_uuid=False),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )
    opportunity_id: Mapped[str] = mapped_column(
        UUID(as_uuid=False),
        ForeignKey("opportunities.id", ondelete="CASCADE"),
        nullable=False,
    )

    __table_args__ = (
        Index("ix_opportunity_views_user_opportunity", "user_id", "opportunity_id"),
    )
