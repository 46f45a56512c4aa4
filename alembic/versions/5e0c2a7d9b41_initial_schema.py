"""Initial schema: presence, activity journal, notifications,
announcements, assessments, moods

Revision ID: 5e0c2a7d9b41
Revises:
Create Date: 2026-10-18 09:00:00.000000

"""
from collections.abc import Sequence

import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "5e0c2a7d9b41"
down_revision: str | Sequence[str] | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def _created_at() -> sa.Column:
    return sa.Column(
        "created_at",
        sa.DateTime(timezone=True),
        nullable=True,
        server_default=sa.func.now(),
    )


def upgrade() -> None:
    op.create_table(
        "organizations",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("slug", sa.String(64), nullable=False, unique=True),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("status", sa.String(20), nullable=True),
        _created_at(),
    )

    op.create_table(
        "users",
        sa.Column("id", sa.String(64), primary_key=True),
        sa.Column("email", sa.String(255), nullable=True),
        sa.Column("first_name", sa.String(100), nullable=True),
        sa.Column("last_name", sa.String(100), nullable=True),
        sa.Column("org_id", sa.String(64), nullable=True),
        sa.Column("role", sa.String(30), nullable=True),
        _created_at(),
    )
    op.create_index("ix_users_org_id", "users", ["org_id"])

    op.create_table(
        "presence",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("user_id", sa.String(64), nullable=False, unique=True),
        sa.Column("status", sa.String(20), nullable=False),
        sa.Column("last_seen", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_presence_last_seen", "presence", ["last_seen"])

    op.create_table(
        "activity_log",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("user_id", sa.String(64), nullable=False),
        sa.Column("activity_type", sa.String(40), nullable=False),
        sa.Column("metadata", postgresql.JSONB(), nullable=True),
        _created_at(),
    )
    op.create_index("ix_activity_log_user_time", "activity_log", ["user_id", "created_at"])
    op.create_index("ix_activity_log_user_type", "activity_log", ["user_id", "activity_type"])
    op.create_index("ix_activity_log_type", "activity_log", ["activity_type"])

    op.create_table(
        "notifications",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("user_id", sa.String(64), nullable=False),
        sa.Column("type", sa.String(30), nullable=False),
        sa.Column("title", sa.String(300), nullable=False),
        sa.Column("message", sa.Text(), nullable=False),
        sa.Column("is_read", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("related_id", sa.String(64), nullable=True),
        sa.Column("org_id", sa.String(64), nullable=True),
        _created_at(),
    )
    op.create_index("ix_notifications_user_time", "notifications", ["user_id", "created_at"])
    op.create_index("ix_notifications_user_read", "notifications", ["user_id", "is_read"])

    op.create_table(
        "announcements",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("org_id", sa.String(64), nullable=False),
        sa.Column("title", sa.String(300), nullable=False),
        sa.Column("body", sa.Text(), nullable=False),
        sa.Column("visibility", sa.String(20), nullable=True),
        sa.Column("priority", sa.String(20), nullable=True),
        sa.Column("active", sa.Boolean(), nullable=True),
        sa.Column("author_id", sa.String(64), nullable=True),
        _created_at(),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            nullable=True,
            server_default=sa.func.now(),
        ),
    )
    op.create_index("ix_announcements_org_created", "announcements", ["org_id", "created_at"])
    op.create_index("ix_announcements_org_active", "announcements", ["org_id", "active"])

    op.create_table(
        "announcement_reads",
        sa.Column(
            "announcement_id",
            sa.Integer(),
            sa.ForeignKey("announcements.id", ondelete="CASCADE"),
            primary_key=True,
        ),
        sa.Column("user_id", sa.String(64), primary_key=True),
        sa.Column(
            "read_at",
            sa.DateTime(timezone=True),
            nullable=True,
            server_default=sa.func.now(),
        ),
    )

    op.create_table(
        "assessments",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("user_id", sa.String(64), nullable=False),
        sa.Column("assessment_type", sa.String(50), nullable=False),
        sa.Column("responses", postgresql.JSONB(), nullable=True),
        sa.Column("total_score", sa.Float(), nullable=False),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("next_due_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        _created_at(),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            nullable=True,
            server_default=sa.func.now(),
        ),
    )
    op.create_index("ix_assessments_user_completed", "assessments", ["user_id", "completed_at"])
    op.create_index("ix_assessments_next_due", "assessments", ["next_due_at"])

    op.create_table(
        "moods",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("user_id", sa.String(64), nullable=False),
        sa.Column("mood_type", sa.String(30), nullable=False),
        sa.Column("intensity", sa.Integer(), nullable=True),
        sa.Column("factors", postgresql.JSONB(), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("share_with_support_worker", sa.Boolean(), nullable=True),
        sa.Column("mood_emoji", sa.String(16), nullable=True),
        sa.Column("mood_label", sa.String(50), nullable=True),
        _created_at(),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            nullable=True,
            server_default=sa.func.now(),
        ),
    )
    op.create_index("ix_moods_user_created", "moods", ["user_id", "created_at"])


def downgrade() -> None:
    op.drop_index("ix_moods_user_created", table_name="moods")
    op.drop_table("moods")
    op.drop_index("ix_assessments_next_due", table_name="assessments")
    op.drop_index("ix_assessments_user_completed", table_name="assessments")
    op.drop_table("assessments")
    op.drop_table("announcement_reads")
    op.drop_index("ix_announcements_org_active", table_name="announcements")
    op.drop_index("ix_announcements_org_created", table_name="announcements")
    op.drop_table("announcements")
    op.drop_index("ix_notifications_user_read", table_name="notifications")
    op.drop_index("ix_notifications_user_time", table_name="notifications")
    op.drop_table("notifications")
    op.drop_index("ix_activity_log_type", table_name="activity_log")
    op.drop_index("ix_activity_log_user_type", table_name="activity_log")
    op.drop_index("ix_activity_log_user_time", table_name="activity_log")
    op.drop_table("activity_log")
    op.drop_index("ix_presence_last_seen", table_name="presence")
    op.drop_table("presence")
    op.drop_index("ix_users_org_id", table_name="users")
    op.drop_table("users")
    op.drop_table("organizations")
