"""
safespace.services.activity_service — Activity Journal
=======================================================

Append-only record of what users did.  Nothing in this codebase updates
or deletes an ``activity_log`` row, so the table can be replayed as an
audit timeline.

Rapid re-authentication (session refresh, app foregrounding) would
otherwise write a ``login`` row per token refresh; :func:`record_login`
folds every login inside a 5-minute window into the first one.
"""

from __future__ import annotations

import logging
from datetime import datetime

from sqlalchemy import Engine, select
from sqlalchemy.orm import Session

from safespace.constants import (
    DEFAULT_ACTIVITY_LIMIT,
    LOGIN_DEDUP_WINDOW,
    to_epoch_ms,
    utcnow,
)
from safespace.database.engine import get_session
from safespace.database.models import ActivityLog, ActivityType, PresenceStatus
from safespace.engine.activities import ActivityMetadata, LoginMetadata, LogoutMetadata
from safespace.services.presence_service import mark_offline, touch_presence
from safespace.services.serializers import activity_to_client

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Writer (runs inside the caller's transaction)
# ---------------------------------------------------------------------------
def append_activity(
    session: Session,
    user_id: str,
    metadata: ActivityMetadata,
    now: datetime,
) -> ActivityLog:
    """Insert one journal row whose type is taken from *metadata*."""
    row = ActivityLog(
        user_id=user_id,
        activity_type=metadata.activity_type.value,
        metadata_=metadata.to_dict(),
        created_at=now,
    )
    session.add(row)
    return row


def _has_recent_login(session: Session, user_id: str, now: datetime) -> bool:
    cutoff = now - LOGIN_DEDUP_WINDOW
    return session.scalars(
        select(ActivityLog.id)
        .where(
            ActivityLog.user_id == user_id,
            ActivityLog.activity_type == ActivityType.LOGIN.value,
            ActivityLog.created_at > cutoff,
        )
        .limit(1)
    ).first() is not None


# ---------------------------------------------------------------------------
# Mutations
# ---------------------------------------------------------------------------
def record_login(engine: Engine, user_id: str, *, now: datetime | None = None) -> dict:
    """Journal a login (unless one landed in the last 5 minutes) and mark
    the user online.

    Returns ``{"success": True, "timestamp": epoch_ms, "recorded": bool}``
    where ``recorded`` tells whether a new row was written.
    """
    now = now or utcnow()
    ts = to_epoch_ms(now)
    with get_session(engine) as session:
        recorded = not _has_recent_login(session, user_id, now)
        if recorded:
            append_activity(session, user_id, LoginMetadata(timestamp_ms=ts), now)
        else:
            logger.debug("Login for %s folded into a login < 5 min old", user_id)
        touch_presence(session, user_id, PresenceStatus.ONLINE, now)
    return {"success": True, "timestamp": ts, "recorded": recorded}


def record_logout(engine: Engine, user_id: str, *, now: datetime | None = None) -> dict:
    """Journal a logout (never de-duplicated) and mark the user offline."""
    now = now or utcnow()
    ts = to_epoch_ms(now)
    with get_session(engine) as session:
        append_activity(session, user_id, LogoutMetadata(timestamp_ms=ts), now)
        mark_offline(session, user_id, now)
    return {"success": True, "timestamp": ts}


# ---------------------------------------------------------------------------
# Queries
# ---------------------------------------------------------------------------
def get_user_activities(
    engine: Engine,
    user_id: str,
    limit: int = DEFAULT_ACTIVITY_LIMIT,
) -> list[dict]:
    """Newest-first journal rows for *user_id*, at most *limit* of them."""
    with get_session(engine) as session:
        rows = session.scalars(
            select(ActivityLog)
            .where(ActivityLog.user_id == user_id)
            .order_by(ActivityLog.created_at.desc(), ActivityLog.id.desc())
            .limit(max(limit, 0))
        ).all()
        return [activity_to_client(r) for r in rows]
