"""
safespace.services.announcement_service — Admin-Gated Announcement Fan-out
===========================================================================

An announcement is one row for the organization plus one ``system``
notification per member, all written in a single transaction::

    caller ──► allowlist check ──► INSERT announcement
                                   SELECT members of org   (read once)
                                   INSERT N notifications
                                   COMMIT (all or nothing)

Cost is O(org size) inserts per announcement.  Membership is read once
at the start; somebody joining the organization while the fan-out runs
may or may not be notified.

The allowlist is handed in at construction; the service never looks at
the process environment.
"""

from __future__ import annotations

import logging
from datetime import datetime

from sqlalchemy import Engine, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import selectinload

from safespace.config import DEFAULT_TIME_ZONE, AdminAllowlist
from safespace.constants import (
    ANNOUNCEMENT_TITLE_PREFIX,
    DEFAULT_ANNOUNCEMENT_LIMIT,
    utcnow,
)
from safespace.database.engine import get_session
from safespace.database.models import (
    Announcement,
    AnnouncementRead,
    NotificationType,
    User,
)
from safespace.errors import NotFound, Unauthenticated, Unauthorized
from safespace.services.notification_service import add_notification
from safespace.services.serializers import announcement_to_client

logger = logging.getLogger(__name__)


class AnnouncementService:
    """Creates, lists and tracks reads of org-wide announcements.

    All methods are synchronous and open their own transaction.
    """

    def __init__(
        self,
        engine: Engine,
        admins: AdminAllowlist,
        *,
        time_zone: str = DEFAULT_TIME_ZONE,
    ) -> None:
        self.engine = engine
        self.admins = admins
        self.time_zone = time_zone

    # -------------------------------------------------------------------
    # Mutations
    # -------------------------------------------------------------------
    def create_announcement(
        self,
        caller: str | None,
        *,
        org_id: str,
        title: str,
        body: str,
        visibility: str = "org",
        active: bool = True,
        priority: str | None = None,
        now: datetime | None = None,
    ) -> dict:
        """Broadcast to *org_id*; returns ``{"id", "notified"}``.

        Raises
        ------
        Unauthenticated
            If *caller* is ``None``.
        Unauthorized
            If *caller* is not on the admin allowlist.  Nothing is written.
        """
        if not caller:
            raise Unauthenticated()
        if not self.admins.is_admin(caller):
            logger.warning("Announcement rejected: %s is not an admin", caller)
            raise Unauthorized("Not authorized to create announcements")

        now = now or utcnow()
        with get_session(self.engine) as session:
            announcement = Announcement(
                org_id=org_id,
                title=title,
                body=body,
                visibility=visibility,
                priority=priority,
                active=active,
                author_id=caller,
                created_at=now,
                updated_at=now,
            )
            session.add(announcement)

            member_ids = session.scalars(
                select(User.id).where(User.org_id == org_id)
            ).all()

            for member_id in member_ids:
                add_notification(
                    session,
                    user_id=member_id,
                    type=NotificationType.SYSTEM,
                    title=f"{ANNOUNCEMENT_TITLE_PREFIX}{title}",
                    message=body,
                    now=now,
                    org_id=org_id,
                )

            session.flush()
            announcement_id = announcement.id

        logger.info(
            "Announcement %d published to org %s by %s, %d members notified",
            announcement_id, org_id, caller, len(member_ids),
        )
        return {"id": announcement_id, "notified": len(member_ids)}

    def mark_read(
        self,
        caller: str | None,
        announcement_id: int,
        *,
        now: datetime | None = None,
    ) -> dict:
        """Add *caller* to the announcement's ``readBy`` set (idempotent)."""
        if not caller:
            raise Unauthenticated()

        now = now or utcnow()
        try:
            with get_session(self.engine) as session:
                announcement = session.get(Announcement, announcement_id)
                if announcement is None:
                    raise NotFound(f"Announcement {announcement_id} not found")

                already = session.get(AnnouncementRead, (announcement_id, caller))
                if already is None:
                    session.add(AnnouncementRead(
                        announcement_id=announcement_id,
                        user_id=caller,
                        read_at=now,
                    ))
                    announcement.updated_at = now
        except IntegrityError:
            # A concurrent request inserted the same (announcement, user)
            # pair first; the set already holds the caller.
            logger.debug("Concurrent read of announcement %d by %s", announcement_id, caller)
        return {"success": True}

    # -------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------
    def list_by_org(
        self,
        org_id: str,
        *,
        active_only: bool = True,
        limit: int = DEFAULT_ANNOUNCEMENT_LIMIT,
    ) -> dict:
        """Newest-first announcements for *org_id*.

        ``limit`` is applied before the ``active`` filter, so fewer than
        *limit* rows can come back when inactive ones are in the window.
        """
        with get_session(self.engine) as session:
            rows = session.scalars(
                select(Announcement)
                .options(selectinload(Announcement.reads))
                .where(Announcement.org_id == org_id)
                .order_by(Announcement.created_at.desc(), Announcement.id.desc())
                .limit(max(limit, 0))
            ).all()
            if active_only:
                rows = [a for a in rows if a.active]
            return {
                "announcements": [
                    announcement_to_client(a, self.time_zone) for a in rows
                ]
            }

    def get_announcement(self, announcement_id: int) -> dict | None:
        with get_session(self.engine) as session:
            row = session.get(
                Announcement,
                announcement_id,
                options=[selectinload(Announcement.reads)],
            )
            if row is None:
                return None
            return announcement_to_client(row, self.time_zone)
