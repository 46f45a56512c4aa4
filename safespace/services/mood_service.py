"""
safespace.services.mood_service — Mood Check-ins
=================================================

Recording a mood writes the mood row and a ``mood_entry`` journal row in
the same transaction.
"""

from __future__ import annotations

import logging
from collections import Counter
from datetime import date, datetime, timedelta

from sqlalchemy import Engine, select
from sqlalchemy.orm import Session

from safespace.config import DEFAULT_TIME_ZONE
from safespace.constants import utcnow
from safespace.database.engine import get_session
from safespace.database.models import Mood
from safespace.engine.activities import MoodEntryMetadata
from safespace.errors import NotFound
from safespace.services.activity_service import append_activity
from safespace.services.serializers import mood_to_client, to_local

logger = logging.getLogger(__name__)

# mood_type → (emoji, label, score on a 1–5 scale)
MOOD_CATALOGUE: dict[str, tuple[str, str, float]] = {
    "very-happy": ("\U0001f604", "Very Happy", 5),
    "happy": ("\U0001f642", "Happy", 4),
    "neutral": ("\U0001f610", "Neutral", 3),
    "sad": ("\U0001f641", "Sad", 2),
    "very-sad": ("\U0001f622", "Very Sad", 1),
    "ecstatic": ("\U0001f929", "Ecstatic", 5),
    "content": ("\U0001f60a", "Content", 3.5),
    "displeased": ("\U0001f615", "Displeased", 2.5),
    "frustrated": ("\U0001f616", "Frustrated", 2),
    "annoyed": ("\U0001f612", "Annoyed", 2),
    "angry": ("\U0001f620", "Angry", 1.5),
    "furious": ("\U0001f92c", "Furious", 1),
}

_FALLBACK = ("\U0001f610", "Neutral", 3)


def _meta(mood_type: str) -> tuple[str, str, float]:
    return MOOD_CATALOGUE.get(mood_type, _FALLBACK)


def _to_client(m: Mood) -> dict:
    emoji, label, _ = _meta(m.mood_type)
    return mood_to_client(m, emoji=emoji, label=label)


def _owned(session: Session, mood_id: int, user_id: str | None) -> Mood:
    row = session.get(Mood, mood_id)
    if row is None or (user_id is not None and row.user_id != user_id):
        raise NotFound(f"Mood {mood_id} not found")
    return row


def average_mood(mood_types: list[str]) -> float:
    if not mood_types:
        return 0
    return sum(_meta(t)[2] for t in mood_types) / len(mood_types)


# ---------------------------------------------------------------------------
# Mutations
# ---------------------------------------------------------------------------
def record_mood(
    engine: Engine,
    *,
    user_id: str,
    mood_type: str,
    intensity: int,
    factors: list[str] | None = None,
    notes: str | None = None,
    share_with_support_worker: bool = False,
    now: datetime | None = None,
) -> dict:
    now = now or utcnow()
    known = MOOD_CATALOGUE.get(mood_type)
    with get_session(engine) as session:
        row = Mood(
            user_id=user_id,
            mood_type=mood_type,
            intensity=intensity,
            factors=list(factors or []),
            notes=notes,
            share_with_support_worker=share_with_support_worker,
            mood_emoji=known[0] if known else None,
            mood_label=known[1] if known else None,
            created_at=now,
            updated_at=now,
        )
        session.add(row)
        append_activity(session, user_id, MoodEntryMetadata(mood_type=mood_type), now)
        session.flush()
        mood_id = row.id

    logger.info("Mood %d (%s) recorded for %s", mood_id, mood_type, user_id)
    return {"success": True, "id": mood_id}


def update_mood(
    engine: Engine,
    mood_id: int,
    *,
    mood_type: str | None = None,
    intensity: int | None = None,
    factors: list[str] | None = None,
    notes: str | None = None,
    share_with_support_worker: bool | None = None,
    user_id: str | None = None,
    now: datetime | None = None,
) -> dict:
    """Patch the given fields; ``None`` leaves a field unchanged."""
    now = now or utcnow()
    with get_session(engine) as session:
        row = _owned(session, mood_id, user_id)
        if mood_type:
            known = MOOD_CATALOGUE.get(mood_type)
            row.mood_type = mood_type
            row.mood_emoji = known[0] if known else None
            row.mood_label = known[1] if known else None
        if intensity is not None:
            row.intensity = intensity
        if factors is not None:
            row.factors = list(factors)
        if notes is not None:
            row.notes = notes
        if share_with_support_worker is not None:
            row.share_with_support_worker = share_with_support_worker
        row.updated_at = now
    return {"success": True}


def delete_mood(engine: Engine, mood_id: int, *, user_id: str | None = None) -> dict:
    with get_session(engine) as session:
        row = _owned(session, mood_id, user_id)
        session.delete(row)
    return {"success": True}


# ---------------------------------------------------------------------------
# Queries
# ---------------------------------------------------------------------------
def get_recent_moods(engine: Engine, user_id: str, limit: int = 10) -> list[dict]:
    with get_session(engine) as session:
        rows = session.scalars(
            select(Mood)
            .where(Mood.user_id == user_id)
            .order_by(Mood.created_at.desc(), Mood.id.desc())
            .limit(max(limit, 0))
        ).all()
        return [_to_client(m) for m in rows]


def get_mood_stats(
    engine: Engine,
    user_id: str,
    days: int = 7,
    *,
    now: datetime | None = None,
) -> dict:
    """Distribution and average over the last *days* days."""
    now = now or utcnow()
    cutoff = now - timedelta(days=days)
    with get_session(engine) as session:
        mood_types = session.scalars(
            select(Mood.mood_type).where(
                Mood.user_id == user_id,
                Mood.created_at >= cutoff,
            )
        ).all()
    return {
        "totalEntries": len(mood_types),
        "distribution": dict(Counter(mood_types)),
        "averageMood": average_mood(list(mood_types)),
    }


def get_mood_history(
    engine: Engine,
    user_id: str,
    *,
    limit: int = 20,
    offset: int = 0,
    mood_type: str | None = None,
    start: datetime | None = None,
    end: datetime | None = None,
    factors: list[str] | None = None,
    now: datetime | None = None,
) -> dict:
    """Filtered, offset-paginated history, newest first.

    A row matches *factors* when it shares at least one factor.
    """
    stmt = select(Mood).where(Mood.user_id == user_id)
    if start is not None:
        stmt = stmt.where(Mood.created_at >= start)
        if end is None:
            end = now or utcnow()
    if end is not None:
        stmt = stmt.where(Mood.created_at <= end)
    if mood_type:
        stmt = stmt.where(Mood.mood_type == mood_type)
    stmt = stmt.order_by(Mood.created_at.desc(), Mood.id.desc())

    with get_session(engine) as session:
        rows = session.scalars(stmt).all()
        if factors:
            wanted = set(factors)
            rows = [m for m in rows if wanted.intersection(m.factors or [])]
        page = rows[offset: offset + limit]
        return {"moods": [_to_client(m) for m in page]}


def _longest_run(dates: list[date]) -> int:
    longest = run = 0
    previous = None
    for day in dates:
        run = run + 1 if previous is not None and day - previous == timedelta(days=1) else 1
        longest = max(longest, run)
        previous = day
    return longest


def get_mood_chart_data(
    engine: Engine,
    user_id: str,
    days: int = 30,
    *,
    now: datetime | None = None,
    time_zone: str = DEFAULT_TIME_ZONE,
) -> dict:
    """One chart point per local calendar day for the last *days* days.

    Moods are bucketed by their date in *time_zone*, not by UTC date.  Each
    point carries the day's newest mood and its average score.

    ``currentStreak`` counts consecutive days with a mood ending today, or
    ending yesterday when today has none yet.  ``longestStreak`` is the
    longest such run over the whole history.
    """
    now = now or utcnow()
    with get_session(engine) as session:
        rows = session.scalars(
            select(Mood)
            .where(Mood.user_id == user_id)
            .order_by(Mood.created_at.desc(), Mood.id.desc())
        ).all()
        by_day: dict[date, list[Mood]] = {}
        for m in rows:
            by_day.setdefault(to_local(m.created_at, time_zone).date(), []).append(m)

        today = to_local(now, time_zone).date()
        chart = []
        for offset in range(days - 1, -1, -1):
            day = today - timedelta(days=offset)
            moods = by_day.get(day, [])
            chart.append({
                "date": day.isoformat(),
                "mood": _to_client(moods[0]) if moods else None,
                "averageScore": average_mood([m.mood_type for m in moods]) if moods else None,
                "count": len(moods),
                "hasMood": bool(moods),
            })

    current = 0
    cursor = today if today in by_day else today - timedelta(days=1)
    while cursor in by_day:
        current += 1
        cursor -= timedelta(days=1)

    return {
        "currentStreak": current,
        "longestStreak": max(_longest_run(sorted(by_day)), current),
        "chartData": chart,
        "totalEntries": len(rows),
    }


def get_factors(engine: Engine, user_id: str) -> dict:
    """Distinct factors the user has ever tagged, in first-seen order."""
    with get_session(engine) as session:
        all_factors = session.scalars(
            select(Mood.factors)
            .where(Mood.user_id == user_id)
            .order_by(Mood.created_at.asc(), Mood.id.asc())
        ).all()
    seen: dict[str, None] = {}
    for factors in all_factors:
        for f in factors or []:
            seen.setdefault(f, None)
    return {"factors": [{"factor": f} for f in seen]}
