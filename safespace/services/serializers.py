"""
safespace.services.serializers — Client Formatting
===================================================

The one place ORM rows become client dictionaries.  Every read path
(notifications, announcements, assessments, moods, presence, activity)
goes through here, so local-time rendering cannot drift between modules.

Local display strings mimic the ``en-US`` locale the mobile client was
built against:

* ``format_local_datetime``  → ``"10/18/2026, 02:05:09 PM"``
* ``format_local_datetime(hour12=False)`` → ``"10/18/2026, 14:05:09"``
* ``format_local_date``      → ``"10/18/2026"``
"""

from __future__ import annotations

from datetime import datetime
from functools import lru_cache
from zoneinfo import ZoneInfo

from safespace.config import DEFAULT_TIME_ZONE
from safespace.constants import as_utc, to_epoch_ms
from safespace.database.models import (
    ActivityLog,
    Announcement,
    Assessment,
    Mood,
    Notification,
    Presence,
)


# ---------------------------------------------------------------------------
# Time formatting
# ---------------------------------------------------------------------------
@lru_cache(maxsize=16)
def _zone(name: str) -> ZoneInfo:
    return ZoneInfo(name)


def to_local(value: datetime, time_zone: str = DEFAULT_TIME_ZONE) -> datetime:
    return as_utc(value).astimezone(_zone(time_zone))


def iso(value: datetime | None) -> str | None:
    """UTC ISO-8601 with millisecond precision and a ``Z`` suffix."""
    if value is None:
        return None
    return as_utc(value).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def format_local_datetime(
    value: datetime,
    time_zone: str = DEFAULT_TIME_ZONE,
    *,
    hour12: bool = True,
) -> str:
    local = to_local(value, time_zone)
    if hour12:
        return local.strftime("%m/%d/%Y, %I:%M:%S %p")
    return local.strftime("%m/%d/%Y, %H:%M:%S")


def format_local_date(value: datetime, time_zone: str = DEFAULT_TIME_ZONE) -> str:
    return to_local(value, time_zone).strftime("%m/%d/%Y")


# ---------------------------------------------------------------------------
# Row → client dict
# ---------------------------------------------------------------------------
def notification_to_client(n: Notification, time_zone: str = DEFAULT_TIME_ZONE) -> dict:
    return {
        "id": n.id,
        "type": n.type,
        "title": n.title,
        "message": n.message,
        "isRead": n.is_read,
        "is_read": n.is_read,  # REST compatibility
        "relatedId": n.related_id,
        "created_at": iso(n.created_at),
        "time": format_local_datetime(n.created_at, time_zone),
    }


def announcement_to_client(a: Announcement, time_zone: str = DEFAULT_TIME_ZONE) -> dict:
    return {
        "id": a.id,
        "orgId": a.org_id,
        "title": a.title,
        "body": a.body,
        "visibility": a.visibility or "org",
        "priority": a.priority,
        "active": a.active,
        "authorId": a.author_id,
        "readBy": a.read_by,
        "created_at": iso(a.created_at),
        "time": format_local_datetime(a.created_at, time_zone),
    }


def assessment_to_client(a: Assessment, time_zone: str = DEFAULT_TIME_ZONE) -> dict:
    return {
        "id": a.id,
        "userId": a.user_id,
        "assessmentType": a.assessment_type,
        "responses": a.responses,
        "totalScore": a.total_score,
        "completedAt": format_local_datetime(a.completed_at, time_zone, hour12=False),
        "nextDueDate": (
            format_local_date(a.next_due_at, time_zone) if a.next_due_at else None
        ),
        "notes": a.notes,
        "createdAt": iso(a.created_at),
        "updatedAt": iso(a.updated_at),
    }


def mood_to_client(m: Mood, *, emoji: str, label: str) -> dict:
    return {
        "id": m.id,
        "mood_type": m.mood_type,
        "intensity": m.intensity if m.intensity is not None else 3,
        "notes": m.notes,
        "created_at": iso(m.created_at),
        "mood_emoji": m.mood_emoji or emoji,
        "mood_label": m.mood_label or label,
        "mood_factors": [{"factor": f} for f in (m.factors or [])],
    }


def presence_to_client(p: Presence) -> dict:
    return {
        "id": p.id,
        "userId": p.user_id,
        "status": p.status,
        "lastSeen": to_epoch_ms(p.last_seen),
    }


def activity_to_client(a: ActivityLog) -> dict:
    return {
        "id": a.id,
        "userId": a.user_id,
        "activityType": a.activity_type,
        "metadata": a.metadata_ or {},
        "createdAt": to_epoch_ms(a.created_at),
    }
