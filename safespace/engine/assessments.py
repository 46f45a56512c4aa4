"""
safespace.engine.assessments — Due-Date Countdown & Score Trends
=================================================================

Pure calculations for the self-assessment cadence (no I/O).

A user's countdown is driven entirely by their *latest* assessment:

    no assessment ──► due now (0 days)
    latest.next_due_at <= now ──► due, daysUntilDue = -(whole days overdue)
    latest.next_due_at >  now ──► not due, daysUntilDue = ceil(days left)

Legacy rows without ``next_due_at`` are treated as if it were
``completed_at + ASSESSMENT_INTERVAL``.  The interval is a fixed 180 days,
not calendar months.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime
from decimal import ROUND_HALF_DOWN, ROUND_HALF_UP, Decimal

from safespace.constants import ASSESSMENT_INTERVAL, ONE_DAY, TREND_THRESHOLD, as_utc

__all__ = [
    "DueStatus",
    "average_score",
    "classify_trend",
    "compute_due_status",
    "format_score",
    "next_due_date",
]


@dataclass(frozen=True, slots=True)
class DueStatus:
    is_due: bool
    days_until_due: int

    def to_dict(self) -> dict:
        return {"isDue": self.is_due, "daysUntilDue": self.days_until_due}


def next_due_date(completed_at: datetime) -> datetime:
    return as_utc(completed_at) + ASSESSMENT_INTERVAL


def compute_due_status(
    completed_at: datetime | None,
    next_due_at: datetime | None,
    now: datetime,
) -> DueStatus:
    """Countdown for the latest assessment (``None`` → never assessed)."""
    if completed_at is None:
        return DueStatus(is_due=True, days_until_due=0)

    now = as_utc(now)
    due_at = as_utc(next_due_at) if next_due_at is not None else next_due_date(completed_at)

    if now >= due_at:
        days_overdue = math.floor((now - due_at) / ONE_DAY)
        return DueStatus(is_due=True, days_until_due=-days_overdue)

    return DueStatus(is_due=False, days_until_due=math.ceil((due_at - now) / ONE_DAY))


def classify_trend(latest: float, previous: float) -> str:
    diff = latest - previous
    if diff > TREND_THRESHOLD:
        return "improving"
    if diff < -TREND_THRESHOLD:
        return "declining"
    return "stable"


def average_score(scores: list[float]) -> float | None:
    """Mean rounded to one decimal place, halves toward +inf (``None`` when empty).

    ``20.75`` rounds to ``20.8`` and ``-2.25`` rounds to ``-2.2``.
    """
    if not scores:
        return None
    mean = Decimal(str(sum(scores))) / Decimal(len(scores))
    rounding = ROUND_HALF_UP if mean >= 0 else ROUND_HALF_DOWN
    return float(mean.quantize(Decimal("0.1"), rounding=rounding))


def format_score(score: float) -> str:
    """``20.0`` → ``"20"``, ``20.5`` → ``"20.5"``."""
    if float(score).is_integer():
        return str(int(score))
    return f"{score:g}"
