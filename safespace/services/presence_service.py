"""
safespace.services.presence_service — Presence Heartbeats & Status Reads
=========================================================================

One ``presence`` row per user, upserted by heartbeats, logins and
logouts.  Reads never trust the stored status alone: they go through
:func:`safespace.engine.presence.compute_presence`.

Two clients of the same user may heartbeat concurrently; the later write
wins and nothing here treats a lost update as an error.  The 10-second
coalescing check only keeps the write rate down under frequent polling.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from datetime import datetime, timedelta

from sqlalchemy import Engine, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from safespace.constants import ONLINE_USERS_DEFAULT_WINDOW, to_epoch_ms, utcnow
from safespace.database.engine import get_session
from safespace.database.models import Presence, PresenceStatus
from safespace.engine.presence import compute_presence, should_coalesce
from safespace.services.serializers import presence_to_client

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Session-level helpers (shared with activity_service)
# ---------------------------------------------------------------------------
def _get_presence(session: Session, user_id: str) -> Presence | None:
    return session.scalars(
        select(Presence).where(Presence.user_id == user_id)
    ).first()


def touch_presence(
    session: Session,
    user_id: str,
    status: str,
    now: datetime,
    *,
    coalesce: bool = True,
) -> Presence:
    """Upsert *user_id*'s presence inside the caller's transaction.

    With *coalesce*, a row that already holds *status* and was written
    within the last 10 seconds is left untouched.
    """
    status = str(status)
    row = _get_presence(session, user_id)
    if row is None:
        row = Presence(user_id=user_id, status=status, last_seen=now)
        try:
            with session.begin_nested():   # SAVEPOINT
                session.add(row)
                session.flush()
            return row
        except IntegrityError:
            # A concurrent first heartbeat inserted the row after our read.
            # The SAVEPOINT was rolled back; patch the winner's row instead.
            logger.debug("Presence row for %s created concurrently", user_id)
            row = _get_presence(session, user_id)

    if coalesce and should_coalesce(row.status, row.last_seen, status, now):
        logger.debug("Heartbeat coalesced for %s", user_id)
        return row

    row.status = status
    row.last_seen = now
    return row


def mark_offline(session: Session, user_id: str, now: datetime) -> Presence | None:
    """Set an existing row offline; users who never heartbeated stay absent."""
    row = _get_presence(session, user_id)
    if row is not None:
        row.status = PresenceStatus.OFFLINE.value
        row.last_seen = now
    return row


# ---------------------------------------------------------------------------
# Mutations
# ---------------------------------------------------------------------------
def heartbeat(
    engine: Engine,
    user_id: str,
    status: str = PresenceStatus.ONLINE,
    *,
    now: datetime | None = None,
) -> dict:
    """Record a heartbeat and return ``{"ok": True, "lastSeen": epoch_ms}``.

    ``lastSeen`` is the stored value, so a coalesced heartbeat reports the
    earlier timestamp it was folded into.
    """
    now = now or utcnow()
    with get_session(engine) as session:
        row = touch_presence(session, user_id, status, now)
        session.flush()
        last_seen = to_epoch_ms(row.last_seen)
    return {"ok": True, "lastSeen": last_seen}


# ---------------------------------------------------------------------------
# Queries
# ---------------------------------------------------------------------------
def get_status(engine: Engine, user_id: str, *, now: datetime | None = None) -> dict:
    """``{"online", "presence", "lastSeen"}`` for one user."""
    now = now or utcnow()
    with get_session(engine) as session:
        row = _get_presence(session, user_id)
    if row is None:
        return compute_presence(None, None, now).to_dict()
    return compute_presence(row.status, row.last_seen, now).to_dict()


def get_status_batch(
    engine: Engine,
    user_ids: Iterable[str],
    *,
    now: datetime | None = None,
) -> dict[str, dict]:
    """Same result as calling :func:`get_status` per user, in one query."""
    now = now or utcnow()
    wanted = list(dict.fromkeys(user_ids))
    if not wanted:
        return {}

    with get_session(engine) as session:
        rows = session.scalars(
            select(Presence).where(Presence.user_id.in_(wanted))
        ).all()
    by_user = {r.user_id: r for r in rows}

    result: dict[str, dict] = {}
    for user_id in wanted:
        row = by_user.get(user_id)
        if row is None:
            result[user_id] = compute_presence(None, None, now).to_dict()
        else:
            result[user_id] = compute_presence(row.status, row.last_seen, now).to_dict()
    return result


def online_users(
    engine: Engine,
    since_ms: int | None = None,
    *,
    now: datetime | None = None,
) -> list[dict]:
    """Presence rows with a heartbeat in the last *since_ms* (default 6 min).

    This is a raw recency filter: rows are returned whatever their stored
    status, newest heartbeat first.
    """
    now = now or utcnow()
    window = (
        timedelta(milliseconds=since_ms)
        if since_ms is not None
        else ONLINE_USERS_DEFAULT_WINDOW
    )
    cutoff = now - window
    with get_session(engine) as session:
        rows = session.scalars(
            select(Presence)
            .where(Presence.last_seen >= cutoff)
            .order_by(Presence.last_seen.desc())
        ).all()
        return [presence_to_client(r) for r in rows]
