"""
safespace.database.models — SQLAlchemy 2.0 Data Models
=======================================================

Tables:
- organizations       — Tenants (keyed by slug)
- users               — Members; ``id`` is the identity-provider subject
- presence            — One liveness row per user
- activity_log        — Append-only journal of user actions
- notifications       — Per-user messages (unread → read → deleted)
- announcements       — Org-wide broadcasts
- announcement_reads  — The ``readBy`` set of an announcement
- assessments         — Completed self-assessments with next due date
- moods               — Mood check-ins

User references are identity subjects (strings) and deliberately carry no
foreign key: rows for a user may exist before the profile is synced.
"""

from __future__ import annotations

import enum
from datetime import datetime

from sqlalchemy import (
    Boolean,
    DateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    func,
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


# ---------------------------------------------------------------------------
# Base
# ---------------------------------------------------------------------------
class Base(DeclarativeBase):
    """Shared base for all SafeSpace ORM models."""


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------
class PresenceStatus(enum.StrEnum):
    """Last status a client reported; online-ness is derived at read time."""
    ONLINE = "online"
    AWAY = "away"
    OFFLINE = "offline"


class ActivityType(enum.StrEnum):
    """Every kind of row the activity journal accepts."""
    LOGIN = "login"
    LOGOUT = "logout"
    MOOD_ENTRY = "mood_entry"
    ASSESSMENT_COMPLETED = "assessment_completed"


class NotificationType(enum.StrEnum):
    MESSAGE = "message"
    APPOINTMENT = "appointment"
    SYSTEM = "system"
    REMINDER = "reminder"
    MOOD = "mood"
    JOURNALING = "journaling"
    POST_REACTIONS = "post_reactions"
    SELF_ASSESSMENT = "self_assessment"
    REFERRAL = "referral"
    CRISIS = "crisis"


# ---------------------------------------------------------------------------
# Organizations — tenant boundary
# ---------------------------------------------------------------------------
class Organization(Base):
    __tablename__ = "organizations"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    slug: Mapped[str] = mapped_column(String(64), unique=True, nullable=False)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    status: Mapped[str] = mapped_column(String(20), default="active")
    # {"features": [...]} enables a subset of the platform for this org
    settings: Mapped[dict | None] = mapped_column(JSONB, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )

    def __repr__(self) -> str:
        return f"<Organization slug={self.slug!r} status={self.status!r}>"


# ---------------------------------------------------------------------------
# Users — one row per identity subject
# ---------------------------------------------------------------------------
class User(Base):
    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    email: Mapped[str | None] = mapped_column(String(255), default=None)
    first_name: Mapped[str | None] = mapped_column(String(100), default=None)
    last_name: Mapped[str | None] = mapped_column(String(100), default=None)
    org_id: Mapped[str | None] = mapped_column(String(64), default=None)  # organization slug
    role: Mapped[str | None] = mapped_column(String(30), default=None)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )

    __table_args__ = (
        Index("ix_users_org_id", "org_id"),
    )

    def __repr__(self) -> str:
        return f"<User id={self.id!r} org={self.org_id!r}>"


# ---------------------------------------------------------------------------
# Presence — last-known status + heartbeat timestamp
# ---------------------------------------------------------------------------
class Presence(Base):
    __tablename__ = "presence"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(String(64), unique=True, nullable=False)
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=PresenceStatus.ONLINE
    )
    last_seen: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    __table_args__ = (
        Index("ix_presence_last_seen", "last_seen"),
    )

    def __repr__(self) -> str:
        return f"<Presence user={self.user_id!r} status={self.status!r}>"


# ---------------------------------------------------------------------------
# ActivityLog — append-only event journal
# ---------------------------------------------------------------------------
class ActivityLog(Base):
    __tablename__ = "activity_log"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(String(64), nullable=False)
    activity_type: Mapped[str] = mapped_column(String(40), nullable=False)
    metadata_: Mapped[dict | None] = mapped_column("metadata", JSONB, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )

    __table_args__ = (
        Index("ix_activity_log_user_time", "user_id", "created_at"),
        Index("ix_activity_log_user_type", "user_id", "activity_type"),
        Index("ix_activity_log_type", "activity_type"),
    )

    def __repr__(self) -> str:
        return f"<ActivityLog id={self.id} user={self.user_id!r} type={self.activity_type}>"


# ---------------------------------------------------------------------------
# Notification — one message surfaced to one user
# ---------------------------------------------------------------------------
class Notification(Base):
    __tablename__ = "notifications"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(String(64), nullable=False)
    type: Mapped[str] = mapped_column(String(30), nullable=False)
    title: Mapped[str] = mapped_column(String(300), nullable=False)
    message: Mapped[str] = mapped_column(Text, nullable=False)
    is_read: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    related_id: Mapped[str | None] = mapped_column(String(64), default=None)
    org_id: Mapped[str | None] = mapped_column(String(64), default=None)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )

    __table_args__ = (
        Index("ix_notifications_user_time", "user_id", "created_at"),
        Index("ix_notifications_user_read", "user_id", "is_read"),
    )

    def __repr__(self) -> str:
        return f"<Notification id={self.id} user={self.user_id!r} read={self.is_read}>"


# ---------------------------------------------------------------------------
# Announcement — org-wide broadcast
# ---------------------------------------------------------------------------
class Announcement(Base):
    __tablename__ = "announcements"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    org_id: Mapped[str] = mapped_column(String(64), nullable=False)
    title: Mapped[str] = mapped_column(String(300), nullable=False)
    body: Mapped[str] = mapped_column(Text, nullable=False)
    visibility: Mapped[str] = mapped_column(String(20), default="org")  # org | public
    priority: Mapped[str | None] = mapped_column(String(20), default=None)
    active: Mapped[bool] = mapped_column(Boolean, default=True)
    author_id: Mapped[str | None] = mapped_column(String(64), default=None)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
    updated_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )

    reads: Mapped[list[AnnouncementRead]] = relationship(
        back_populates="announcement",
        cascade="all, delete-orphan",
        order_by="AnnouncementRead.read_at",
    )

    __table_args__ = (
        Index("ix_announcements_org_created", "org_id", "created_at"),
        Index("ix_announcements_org_active", "org_id", "active"),
    )

    @property
    def read_by(self) -> list[str]:
        return [r.user_id for r in self.reads]

    def __repr__(self) -> str:
        return f"<Announcement id={self.id} org={self.org_id!r} title={self.title!r}>"


class AnnouncementRead(Base):
    """One member of an announcement's ``readBy`` set.

    The composite primary key makes append-if-absent safe under races.
    """
    __tablename__ = "announcement_reads"

    announcement_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("announcements.id", ondelete="CASCADE"), primary_key=True
    )
    user_id: Mapped[str] = mapped_column(String(64), primary_key=True)
    read_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )

    announcement: Mapped[Announcement] = relationship(back_populates="reads")


# ---------------------------------------------------------------------------
# Assessment — one completed self-assessment
# ---------------------------------------------------------------------------
class Assessment(Base):
    __tablename__ = "assessments"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(String(64), nullable=False)
    assessment_type: Mapped[str] = mapped_column(String(50), nullable=False)
    responses: Mapped[dict | None] = mapped_column(JSONB, nullable=True)
    total_score: Mapped[float] = mapped_column(Float, nullable=False)
    completed_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    # Null only on legacy rows written before the due date was stored.
    next_due_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    notes: Mapped[str | None] = mapped_column(Text, default=None)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )

    __table_args__ = (
        Index("ix_assessments_user_completed", "user_id", "completed_at"),
        Index("ix_assessments_next_due", "next_due_at"),
    )

    def __repr__(self) -> str:
        return f"<Assessment id={self.id} user={self.user_id!r} score={self.total_score}>"


# ---------------------------------------------------------------------------
# Mood — one check-in
# ---------------------------------------------------------------------------
class Mood(Base):
    __tablename__ = "moods"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(String(64), nullable=False)
    mood_type: Mapped[str] = mapped_column(String(30), nullable=False)
    intensity: Mapped[int] = mapped_column(Integer, default=3)
    factors: Mapped[list | None] = mapped_column(JSONB, nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, default=None)
    share_with_support_worker: Mapped[bool] = mapped_column(Boolean, default=False)
    mood_emoji: Mapped[str | None] = mapped_column(String(16), default=None)
    mood_label: Mapped[str | None] = mapped_column(String(50), default=None)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )

    __table_args__ = (
        Index("ix_moods_user_created", "user_id", "created_at"),
    )

    def __repr__(self) -> str:
        return f"<Mood id={self.id} user={self.user_id!r} type={self.mood_type!r}>"
