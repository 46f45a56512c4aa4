"""
safespace.services.assessment_service — Self-Assessment Submissions & Cadence
==============================================================================

Wellbeing self-assessments (SWEMWBS, 7 items, max score 35) are due every
six months.  A submission writes three rows in one transaction: the
assessment itself, a ``self_assessment`` notification, and an
``assessment_completed`` journal entry.

Due-date maths lives in :mod:`safespace.engine.assessments`.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Any

from sqlalchemy import Engine, select
from sqlalchemy.orm import Session

from safespace.config import DEFAULT_TIME_ZONE
from safespace.constants import (
    ASSESSMENT_MAX_SCORE,
    DEFAULT_HISTORY_LIMIT,
    DEFAULT_UPCOMING_DAYS,
    utcnow,
)
from safespace.database.engine import get_session
from safespace.database.models import Assessment, NotificationType
from safespace.engine.activities import AssessmentCompletedMetadata
from safespace.engine.assessments import (
    average_score,
    classify_trend,
    compute_due_status,
    format_score,
    next_due_date,
)
from safespace.errors import NotFound
from safespace.services.activity_service import append_activity
from safespace.services.notification_service import add_notification
from safespace.services.serializers import assessment_to_client, iso

logger = logging.getLogger(__name__)

COMPLETION_TITLE = "Assessment Completed"


def _latest(session: Session, user_id: str) -> Assessment | None:
    return session.scalars(
        select(Assessment)
        .where(Assessment.user_id == user_id)
        .order_by(Assessment.completed_at.desc(), Assessment.id.desc())
        .limit(1)
    ).first()


# ---------------------------------------------------------------------------
# Mutations
# ---------------------------------------------------------------------------
def submit_assessment(
    engine: Engine,
    *,
    user_id: str,
    assessment_type: str,
    responses: dict[str, Any],
    total_score: float,
    notes: str | None = None,
    now: datetime | None = None,
) -> dict:
    """Record a completed assessment; returns ``{"id", "nextDueDate"}``."""
    now = now or utcnow()
    due = next_due_date(now)

    with get_session(engine) as session:
        row = Assessment(
            user_id=user_id,
            assessment_type=assessment_type,
            responses=responses,
            total_score=total_score,
            completed_at=now,
            next_due_at=due,
            notes=notes,
            created_at=now,
            updated_at=now,
        )
        session.add(row)
        session.flush()

        add_notification(
            session,
            user_id=user_id,
            type=NotificationType.SELF_ASSESSMENT,
            title=COMPLETION_TITLE,
            message=(
                "Your wellbeing assessment has been recorded. "
                f"Score: {format_score(total_score)}/{ASSESSMENT_MAX_SCORE}. "
                "Next assessment due in 6 months."
            ),
            now=now,
            related_id=str(row.id),
        )
        append_activity(
            session,
            user_id,
            AssessmentCompletedMetadata(
                assessment_id=row.id,
                score=total_score,
                assessment_type=assessment_type,
            ),
            now,
        )
        assessment_id = row.id

    logger.info(
        "Assessment %d (%s) recorded for %s, next due %s",
        assessment_id, assessment_type, user_id, due.date().isoformat(),
    )
    return {"id": assessment_id, "nextDueDate": iso(due)}


def update_assessment_notes(
    engine: Engine,
    assessment_id: int,
    notes: str,
    *,
    user_id: str | None = None,
    now: datetime | None = None,
) -> dict:
    """Replace the notes; nothing else changes after submission.

    With *user_id*, somebody else's assessment is reported as missing.
    """
    now = now or utcnow()
    with get_session(engine) as session:
        row = session.get(Assessment, assessment_id)
        if row is None or (user_id is not None and row.user_id != user_id):
            raise NotFound(f"Assessment {assessment_id} not found")
        row.notes = notes
        row.updated_at = now
    return {"success": True}


# ---------------------------------------------------------------------------
# Queries
# ---------------------------------------------------------------------------
def is_assessment_due(engine: Engine, user_id: str, *, now: datetime | None = None) -> dict:
    """``{"isDue", "daysUntilDue"}`` from the user's latest assessment."""
    now = now or utcnow()
    with get_session(engine) as session:
        latest = _latest(session, user_id)
    if latest is None:
        return compute_due_status(None, None, now).to_dict()
    return compute_due_status(latest.completed_at, latest.next_due_at, now).to_dict()


def get_latest_assessment(
    engine: Engine,
    user_id: str,
    *,
    time_zone: str = DEFAULT_TIME_ZONE,
) -> dict | None:
    with get_session(engine) as session:
        latest = _latest(session, user_id)
        return assessment_to_client(latest, time_zone) if latest else None


def get_assessment_history(
    engine: Engine,
    user_id: str,
    limit: int = DEFAULT_HISTORY_LIMIT,
    *,
    time_zone: str = DEFAULT_TIME_ZONE,
) -> list[dict]:
    with get_session(engine) as session:
        rows = session.scalars(
            select(Assessment)
            .where(Assessment.user_id == user_id)
            .order_by(Assessment.completed_at.desc(), Assessment.id.desc())
            .limit(max(limit, 0))
        ).all()
        return [assessment_to_client(a, time_zone) for a in rows]


def get_assessment_stats(engine: Engine, user_id: str) -> dict:
    """Count, average, latest score and trend (latest vs. previous)."""
    with get_session(engine) as session:
        rows = session.scalars(
            select(Assessment)
            .where(Assessment.user_id == user_id)
            .order_by(Assessment.completed_at.desc(), Assessment.id.desc())
        ).all()

    if not rows:
        return {
            "totalAssessments": 0,
            "averageScore": None,
            "latestScore": None,
            "trend": None,
            "scores": [],
        }

    scores = [a.total_score for a in rows]
    trend = classify_trend(scores[0], scores[1]) if len(scores) >= 2 else None

    return {
        "totalAssessments": len(rows),
        "averageScore": average_score(scores),
        "latestScore": scores[0],
        "trend": trend,
        "scores": [
            {"score": a.total_score, "date": iso(a.completed_at)} for a in rows
        ],
    }


def get_upcoming_due_assessments(
    engine: Engine,
    user_id: str,
    days_ahead: int = DEFAULT_UPCOMING_DAYS,
    *,
    now: datetime | None = None,
    time_zone: str = DEFAULT_TIME_ZONE,
) -> list[dict]:
    """Assessments whose next due date falls within the next *days_ahead* days."""
    now = now or utcnow()
    horizon = now + timedelta(days=days_ahead)
    with get_session(engine) as session:
        rows = session.scalars(
            select(Assessment)
            .where(
                Assessment.user_id == user_id,
                Assessment.next_due_at.is_not(None),
                Assessment.next_due_at >= now,
                Assessment.next_due_at <= horizon,
            )
            .order_by(Assessment.next_due_at.asc())
        ).all()
        return [assessment_to_client(a, time_zone) for a in rows]
