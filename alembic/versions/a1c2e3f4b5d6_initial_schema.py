"""initial schema

Revision ID: a1c2e3f4b5d6
Revises:
Create Date: 2026-10-19 09:00:00.000000

This migration creates:
1. organizations and opportunities, with the lifecycle status enum and the
   indexes the lifecycle job filters on (status + deadline, status +
   start_date, created_at)
2. users with per-section privacy levels, friendships and participations
3. bookmarks and opportunity_views
4. notifications, indexed for the deadline reminder dedup lookup
"""

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "a1c2e3f4b5d6"
down_revision: str | Sequence[str] | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


OPPORTUNITY_STATUS_VALUES = ("OPENING_SOON", "ACTIVE", "CLOSING_SOON", "CLOSED")
PRIVACY_LEVEL_VALUES = ("PUBLIC", "FRIENDS_ONLY", "ONLY_ME")
NOTIFICATION_TYPE_VALUES = ("DEADLINE_REMINDER",)


def _base_columns() -> list[sa.Column]:
    """Primary key and timestamps (from BaseModel)."""
    return [
        sa.Column("id", postgresql.UUID(as_uuid=False), nullable=False),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
    ]


def upgrade() -> None:
    """Create all tables."""
    bind = op.get_bind()

    opportunity_status_enum = postgresql.ENUM(
        *OPPORTUNITY_STATUS_VALUES, name="opportunity_status", create_type=False
    )
    privacy_level_enum = postgresql.ENUM(
        *PRIVACY_LEVEL_VALUES, name="privacy_level", create_type=False
    )
    notification_type_enum = postgresql.ENUM(
        *NOTIFICATION_TYPE_VALUES, name="notification_type", create_type=False
    )
    opportunity_status_enum.create(bind, checkfirst=True)
    privacy_level_enum.create(bind, checkfirst=True)
    notification_type_enum.create(bind, checkfirst=True)

    op.create_table(
        "organizations",
        *_base_columns(),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("logo", sa.String(length=500), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )

    op.create_table(
        "opportunities",
        *_base_columns(),
        sa.Column("title", sa.String(length=300), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("organization_id", postgresql.UUID(as_uuid=False), nullable=False),
        # Lifecycle
        sa.Column(
            "status",
            opportunity_status_enum,
            nullable=False,
            server_default="OPENING_SOON",
        ),
        sa.Column("start_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("end_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("deadline", sa.DateTime(timezone=True), nullable=False),
        # Derived flags
        sa.Column("visit_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("is_popular", sa.Boolean(), nullable=False, server_default="false"),
        sa.Column("is_new", sa.Boolean(), nullable=False, server_default="true"),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(
            ["organization_id"],
            ["organizations.id"],
            name="fk_opportunities_organization_id",
            ondelete="CASCADE",
        ),
    )
    op.create_index(
        "ix_opportunities_status_deadline", "opportunities", ["status", "deadline"], unique=False
    )
    op.create_index(
        "ix_opportunities_status_start_date",
        "opportunities",
        ["status", "start_date"],
        unique=False,
    )
    op.create_index("ix_opportunities_created_at", "opportunities", ["created_at"], unique=False)

    op.create_table(
        "users",
        *_base_columns(),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("first_name", sa.String(length=100), nullable=False),
        sa.Column("last_name", sa.String(length=100), nullable=False),
        sa.Column("profile_image", sa.String(length=500), nullable=True),
        sa.Column("bio", sa.Text(), nullable=True),
        # Profile sections (JSON arrays)
        sa.Column("education_entries", sa.JSON(), nullable=False, server_default="[]"),
        sa.Column("experience_entries", sa.JSON(), nullable=False, server_default="[]"),
        sa.Column("skill_entries", sa.JSON(), nullable=False, server_default="[]"),
        sa.Column("social_links", sa.JSON(), nullable=False, server_default="[]"),
        # Per-section privacy
        sa.Column(
            "education_privacy", privacy_level_enum, nullable=False, server_default="PUBLIC"
        ),
        sa.Column(
            "experience_privacy", privacy_level_enum, nullable=False, server_default="PUBLIC"
        ),
        sa.Column("skills_privacy", privacy_level_enum, nullable=False, server_default="PUBLIC"),
        sa.Column(
            "contact_url_privacy", privacy_level_enum, nullable=False, server_default="PUBLIC"
        ),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_users_email"), "users", ["email"], unique=True)

    op.create_table(
        "friendships",
        *_base_columns(),
        sa.Column("user_id", postgresql.UUID(as_uuid=False), nullable=False),
        sa.Column("friend_id", postgresql.UUID(as_uuid=False), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["friend_id"], ["users.id"], ondelete="CASCADE"),
        sa.UniqueConstraint("user_id", "friend_id", name="uq_friendships_pair"),
    )
    op.create_index(op.f("ix_friendships_user_id"), "friendships", ["user_id"], unique=False)
    op.create_index(op.f("ix_friendships_friend_id"), "friendships", ["friend_id"], unique=False)

    op.create_table(
        "participations",
        *_base_columns(),
        sa.Column("user_id", postgresql.UUID(as_uuid=False), nullable=False),
        sa.Column("opportunity_id", postgresql.UUID(as_uuid=False), nullable=False),
        sa.Column("year", sa.Integer(), nullable=False),
        sa.Column("feedback", sa.Text(), nullable=True),
        sa.Column("privacy_level", privacy_level_enum, nullable=False, server_default="PUBLIC"),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["opportunity_id"], ["opportunities.id"], ondelete="CASCADE"),
    )
    op.create_index(
        op.f("ix_participations_user_id"), "participations", ["user_id"], unique=False
    )

    op.create_table(
        "bookmarks",
        *_base_columns(),
        sa.Column("user_id", postgresql.UUID(as_uuid=False), nullable=False),
        sa.Column("opportunity_id", postgresql.UUID(as_uuid=False), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["opportunity_id"], ["opportunities.id"], ondelete="CASCADE"),
        sa.UniqueConstraint("user_id", "opportunity_id", name="uq_bookmarks_user_opportunity"),
    )
    op.create_index(op.f("ix_bookmarks_user_id"), "bookmarks", ["user_id"], unique=False)

    op.create_table(
        "opportunity_views",
        *_base_columns(),
        sa.Column("user_id", postgresql.UUID(as_uuid=False), nullable=False),
        sa.Column("opportunity_id", postgresql.UUID(as_uuid=False), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["opportunity_id"], ["opportunities.id"], ondelete="CASCADE"),
    )
    op.create_index(
        "ix_opportunity_views_user_opportunity",
        "opportunity_views",
        ["user_id", "opportunity_id"],
        unique=False,
    )

    op.create_table(
        "notifications",
        *_base_columns(),
        sa.Column("user_id", postgresql.UUID(as_uuid=False), nullable=False),
        sa.Column("type", notification_type_enum, nullable=False),
        sa.Column("message", sa.Text(), nullable=False),
        sa.Column("related_entity_id", postgresql.UUID(as_uuid=False), nullable=True),
        sa.Column("is_read", sa.Boolean(), nullable=False, server_default="false"),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
    )
    op.create_index(
        "ix_notifications_user_entity_type_created",
        "notifications",
        ["user_id", "related_entity_id", "type", "created_at"],
        unique=False,
    )


def downgrade() -> None:
    """Drop all tables and enum types."""
    op.drop_index("ix_notifications_user_entity_type_created", table_name="notifications")
    op.drop_table("notifications")

    op.drop_index("ix_opportunity_views_user_opportunity", table_name="opportunity_views")
    op.drop_table("opportunity_views")

    op.drop_index(op.f("ix_bookmarks_user_id"), table_name="bookmarks")
    op.drop_table("bookmarks")

    op.drop_index(op.f("ix_participations_user_id"), table_name="participations")
    op.drop_table("participations")

    op.drop_index(op.f("ix_friendships_friend_id"), table_name="friendships")
    op.drop_index(op.f("ix_friendships_user_id"), table_name="friendships")
    op.drop_table("friendships")

    op.drop_index(op.f("ix_users_email"), table_name="users")
    op.drop_table("users")

    op.drop_index("ix_opportunities_created_at", table_name="opportunities")
    op.drop_index("ix_opportunities_status_start_date", table_name="opportunities")
    op.drop_index("ix_opportunities_status_deadline", table_name="opportunities")
    op.drop_table("opportunities")

    op.drop_table("organizations")

    bind = op.get_bind()
    postgresql.ENUM(name="notification_type").drop(bind, checkfirst=True)
    postgresql.ENUM(name="privacy_level").drop(bind, checkfirst=True)
    postgresql.ENUM(name="opportunity_status").drop(bind, checkfirst=True)
