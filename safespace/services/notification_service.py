"""
safespace.services.notification_service — Per-User Notifications
==================================================================

A notification moves one way only::

    created (is_read=False) ──► read (is_read=True) ──► deleted
             └──────────────────────────────────────────►┘

Nothing flips a read notification back to unread.  Deletion is terminal
and allowed from either state.
"""

from __future__ import annotations

import logging
from datetime import datetime

from sqlalchemy import Engine, delete, func, select, update
from sqlalchemy.orm import Session

from safespace.config import DEFAULT_TIME_ZONE
from safespace.constants import DEFAULT_NOTIFICATION_LIMIT, utcnow
from safespace.database.engine import get_session
from safespace.database.models import Notification, NotificationType
from safespace.errors import NotFound, ValidationError
from safespace.services.serializers import notification_to_client

logger = logging.getLogger(__name__)


def _coerce_type(value: str) -> NotificationType:
    try:
        return NotificationType(value)
    except ValueError:
        raise ValidationError(f"Unknown notification type: {value!r}") from None


def add_notification(
    session: Session,
    *,
    user_id: str,
    type: str,
    title: str,
    message: str,
    now: datetime,
    related_id: str | None = None,
    org_id: str | None = None,
) -> Notification:
    """Insert one unread notification inside the caller's transaction."""
    row = Notification(
        user_id=user_id,
        type=_coerce_type(type).value,
        title=title,
        message=message,
        is_read=False,
        related_id=related_id,
        org_id=org_id,
        created_at=now,
    )
    session.add(row)
    return row


def _owned(session: Session, notification_id: int, user_id: str | None) -> Notification:
    row = session.get(Notification, notification_id)
    if row is None or (user_id is not None and row.user_id != user_id):
        raise NotFound(f"Notification {notification_id} not found")
    return row


# ---------------------------------------------------------------------------
# Mutations
# ---------------------------------------------------------------------------
def create_notification(
    engine: Engine,
    *,
    user_id: str,
    type: str,
    title: str,
    message: str,
    related_id: str | None = None,
    org_id: str | None = None,
    now: datetime | None = None,
) -> dict:
    """Insert one unread notification and return ``{"id": ...}``."""
    now = now or utcnow()
    with get_session(engine) as session:
        row = add_notification(
            session,
            user_id=user_id,
            type=type,
            title=title,
            message=message,
            now=now,
            related_id=related_id,
            org_id=org_id,
        )
        session.flush()
        return {"id": row.id}


def mark_as_read(
    engine: Engine,
    notification_id: int,
    *,
    user_id: str | None = None,
) -> dict:
    """Set ``is_read``; calling it again changes nothing.

    With *user_id*, a notification owned by somebody else is reported as
    missing.
    """
    with get_session(engine) as session:
        row = _owned(session, notification_id, user_id)
        row.is_read = True
    return {"success": True}


def mark_all_as_read(engine: Engine, user_id: str) -> dict:
    """Mark every unread notification of *user_id* read; returns the count."""
    with get_session(engine) as session:
        unread_ids = session.scalars(
            select(Notification.id).where(
                Notification.user_id == user_id,
                Notification.is_read.is_(False),
            )
        ).all()
        if unread_ids:
            session.execute(
                update(Notification)
                .where(Notification.id.in_(unread_ids))
                .values(is_read=True)
            )
    return {"success": True, "count": len(unread_ids)}


def clear_all(engine: Engine, user_id: str) -> dict:
    """Hard-delete every notification of *user_id*; returns the count."""
    with get_session(engine) as session:
        ids = session.scalars(
            select(Notification.id).where(Notification.user_id == user_id)
        ).all()
        if ids:
            session.execute(delete(Notification).where(Notification.id.in_(ids)))
    logger.info("Cleared %d notifications for %s", len(ids), user_id)
    return {"success": True, "count": len(ids)}


def delete_notification(
    engine: Engine,
    notification_id: int,
    *,
    user_id: str | None = None,
) -> dict:
    with get_session(engine) as session:
        row = _owned(session, notification_id, user_id)
        session.delete(row)
    return {"success": True}


# ---------------------------------------------------------------------------
# Queries
# ---------------------------------------------------------------------------
def get_notifications(
    engine: Engine,
    user_id: str,
    limit: int = DEFAULT_NOTIFICATION_LIMIT,
    *,
    time_zone: str = DEFAULT_TIME_ZONE,
) -> dict:
    """Newest-first notifications for *user_id* (at most *limit*)."""
    with get_session(engine) as session:
        rows = session.scalars(
            select(Notification)
            .where(Notification.user_id == user_id)
            .order_by(Notification.created_at.desc(), Notification.id.desc())
            .limit(max(limit, 0))
        ).all()
        return {"notifications": [notification_to_client(n, time_zone) for n in rows]}


def get_unread_count(engine: Engine, user_id: str) -> dict:
    with get_session(engine) as session:
        count = session.scalar(
            select(func.count())
            .select_from(Notification)
            .where(
                Notification.user_id == user_id,
                Notification.is_read.is_(False),
            )
        ) or 0
    return {"count": count}
