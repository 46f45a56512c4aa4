"""
tests/test_moods.py — Mood Check-ins
=====================================
"""

from __future__ import annotations

from datetime import timedelta

import pytest
from conftest import T0
from sqlalchemy import select
from sqlalchemy.orm import Session

from safespace.database.models import ActivityLog
from safespace.errors import NotFound
from safespace.services import mood_service as ms


def _record(engine, mood_type="happy", *, now=T0, factors=None, user_id="u1"):
    return ms.record_mood(
        engine,
        user_id=user_id,
        mood_type=mood_type,
        intensity=4,
        factors=factors or [],
        now=now,
    )["id"]


class TestRecordMood:
    def test_records_mood_and_journal_entry(self, db_engine):
        _record(db_engine, "content")
        [mood] = ms.get_recent_moods(db_engine, "u1")
        assert mood["mood_emoji"] == "\U0001f60a"
        assert mood["mood_label"] == "Content"
        with Session(db_engine) as session:
            [activity] = session.scalars(select(ActivityLog)).all()
        assert activity.activity_type == "mood_entry"
        assert activity.metadata_ == {"moodType": "content"}

    def test_unknown_type_falls_back_to_neutral(self, db_engine):
        _record(db_engine, "bewildered")
        [mood] = ms.get_recent_moods(db_engine, "u1")
        assert mood["mood_label"] == "Neutral"


class TestStats:
    def test_distribution_and_average(self, db_engine):
        _record(db_engine, "happy", now=T0 - timedelta(days=1))
        _record(db_engine, "happy", now=T0 - timedelta(days=2))
        _record(db_engine, "sad", now=T0 - timedelta(days=3))
        _record(db_engine, "very-sad", now=T0 - timedelta(days=30))

        stats = ms.get_mood_stats(db_engine, "u1", 7, now=T0)

        assert stats["totalEntries"] == 3
        assert stats["distribution"] == {"happy": 2, "sad": 1}
        assert stats["averageMood"] == pytest.approx(10 / 3)

    def test_no_entries(self, db_engine):
        assert ms.get_mood_stats(db_engine, "u1", now=T0) == {
            "totalEntries": 0,
            "distribution": {},
            "averageMood": 0,
        }


class TestHistory:
    def test_filters_and_pagination(self, db_engine):
        _record(db_engine, "happy", now=T0, factors=["work"])
        _record(db_engine, "sad", now=T0 + timedelta(hours=1), factors=["sleep"])
        _record(db_engine, "happy", now=T0 + timedelta(hours=2), factors=["work", "family"])

        by_type = ms.get_mood_history(db_engine, "u1", mood_type="happy")["moods"]
        by_factor = ms.get_mood_history(db_engine, "u1", factors=["sleep", "exercise"])["moods"]
        paged = ms.get_mood_history(db_engine, "u1", limit=1, offset=1)["moods"]
        windowed = ms.get_mood_history(
            db_engine, "u1", start=T0 + timedelta(minutes=30), end=T0 + timedelta(minutes=90),
        )["moods"]

        assert len(by_type) == 2
        assert [m["mood_type"] for m in by_factor] == ["sad"]
        assert [m["mood_type"] for m in paged] == ["sad"]
        assert [m["mood_type"] for m in windowed] == ["sad"]

    def test_factors_are_distinct(self, db_engine):
        _record(db_engine, factors=["work", "sleep"])
        _record(db_engine, now=T0 + timedelta(hours=1), factors=["work", "family"])
        assert ms.get_factors(db_engine, "u1") == {
            "factors": [{"factor": "work"}, {"factor": "sleep"}, {"factor": "family"}]
        }


class TestUpdateDelete:
    def test_update_changes_type_and_label(self, db_engine):
        mid = _record(db_engine, "happy")
        ms.update_mood(db_engine, mid, mood_type="angry", now=T0 + timedelta(minutes=1))
        [mood] = ms.get_recent_moods(db_engine, "u1")
        assert mood["mood_type"] == "angry"
        assert mood["mood_label"] == "Angry"

    def test_delete(self, db_engine):
        mid = _record(db_engine)
        ms.delete_mood(db_engine, mid)
        assert ms.get_recent_moods(db_engine, "u1") == []

    def test_missing_ids(self, db_engine):
        with pytest.raises(NotFound):
            ms.update_mood(db_engine, 42, notes="x")
        with pytest.raises(NotFound):
            ms.delete_mood(db_engine, 42)

    def test_other_users_mood_is_not_found(self, db_engine):
        mid = _record(db_engine, "happy", user_id="u1")
        with pytest.raises(NotFound):
            ms.update_mood(db_engine, mid, mood_type="sad", user_id="u2")
        with pytest.raises(NotFound):
            ms.delete_mood(db_engine, mid, user_id="u2")
        [mood] = ms.get_recent_moods(db_engine, "u1")
        assert mood["mood_type"] == "happy"


class TestChartData:
    def test_days_follow_local_calendar_not_utc(self, db_engine):
        # T0 is 11:00 on Mar 2 in Edmonton (UTC-7).
        _record(db_engine, "happy", now=T0 - timedelta(days=1, hours=21))   # Feb 28 14:00 local
        _record(db_engine, "content", now=T0 - timedelta(hours=15))         # Mar 1 20:00 local, Mar 2 UTC
        _record(db_engine, "happy", now=T0 - timedelta(hours=2))            # Mar 2 09:00 local
        _record(db_engine, "sad", now=T0 - timedelta(hours=1))              # Mar 2 10:00 local

        data = ms.get_mood_chart_data(db_engine, "u1", 7, now=T0)

        assert data["totalEntries"] == 4
        assert data["currentStreak"] == 3
        assert data["longestStreak"] == 3
        chart = data["chartData"]
        assert len(chart) == 7
        assert chart[0]["date"] == "2026-02-24"
        assert [p["date"] for p in chart[-3:]] == ["2026-02-28", "2026-03-01", "2026-03-02"]
        assert [p["count"] for p in chart[-3:]] == [1, 1, 2]

        today = chart[-1]
        assert today["hasMood"] is True
        assert today["mood"]["mood_type"] == "sad"
        assert today["averageScore"] == pytest.approx(3.0)
        assert chart[0] == {
            "date": "2026-02-24", "mood": None, "averageScore": None, "count": 0, "hasMood": False,
        }

    def test_current_streak_may_end_yesterday(self, db_engine):
        for day in range(1, 5):   # Feb 1..4, noon local
            _record(db_engine, now=T0.replace(month=2, day=day, hour=19))
        _record(db_engine, now=T0 - timedelta(days=1))   # Mar 1 local

        data = ms.get_mood_chart_data(db_engine, "u1", now=T0)

        assert data["currentStreak"] == 1
        assert data["longestStreak"] == 4
        assert len(data["chartData"]) == 30
        assert data["chartData"][-1]["hasMood"] is False

    def test_no_moods(self, db_engine):
        data = ms.get_mood_chart_data(db_engine, "u1", 3, now=T0)
        assert data["currentStreak"] == 0
        assert data["longestStreak"] == 0
        assert data["totalEntries"] == 0
        assert [p["date"] for p in data["chartData"]] == ["2026-02-28", "2026-03-01", "2026-03-02"]
