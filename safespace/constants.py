"""
safespace.constants — Shared Time Windows & Time Helpers
=========================================================

Single source of truth for every time window the services enforce.
Import from here instead of re-deriving ``5 * 60 * 1000`` in each module.
"""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

# ---------------------------------------------------------------------------
# Presence
# ---------------------------------------------------------------------------
PRESENCE_ONLINE_WINDOW = timedelta(minutes=5)
HEARTBEAT_COALESCE_WINDOW = timedelta(seconds=10)
ONLINE_USERS_DEFAULT_WINDOW = timedelta(minutes=6)

# ---------------------------------------------------------------------------
# Activity log
# ---------------------------------------------------------------------------
LOGIN_DEDUP_WINDOW = timedelta(minutes=5)
DEFAULT_ACTIVITY_LIMIT = 50

# ---------------------------------------------------------------------------
# Notifications / announcements
# ---------------------------------------------------------------------------
DEFAULT_NOTIFICATION_LIMIT = 200
DEFAULT_ANNOUNCEMENT_LIMIT = 100
ANNOUNCEMENT_TITLE_PREFIX = "New Announcement: "

# ---------------------------------------------------------------------------
# Assessments — six months, modeled as a fixed 180 days
# ---------------------------------------------------------------------------
ASSESSMENT_INTERVAL = timedelta(days=6 * 30)
ASSESSMENT_MAX_SCORE = 35
TREND_THRESHOLD = 2
DEFAULT_HISTORY_LIMIT = 10
DEFAULT_UPCOMING_DAYS = 7

ONE_DAY = timedelta(days=1)


# ---------------------------------------------------------------------------
# Time helpers
# ---------------------------------------------------------------------------
def utcnow() -> datetime:
    return datetime.now(UTC)


def as_utc(value: datetime) -> datetime:
    """Attach UTC to naive datetimes (SQLite drops tzinfo on read)."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def to_epoch_ms(value: datetime | None) -> int | None:
    if value is None:
        return None
    return int(as_utc(value).timestamp() * 1000)
