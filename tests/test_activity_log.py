"""
tests/test_activity_log.py — Activity Journal
==============================================
"""

from __future__ import annotations

from datetime import timedelta
from unittest.mock import patch

import pytest
from conftest import T0
from sqlalchemy import select
from sqlalchemy.orm import Session

from safespace.constants import to_epoch_ms
from safespace.database.models import ActivityLog
from safespace.engine.activities import (
    AssessmentCompletedMetadata,
    LoginMetadata,
    MoodEntryMetadata,
    parse_metadata,
)
from safespace.services import activity_service, presence_service


def _rows(engine, user_id: str) -> list[ActivityLog]:
    with Session(engine) as session:
        return list(session.scalars(
            select(ActivityLog)
            .where(ActivityLog.user_id == user_id)
            .order_by(ActivityLog.id)
        ))


# ===========================================================================
# Typed metadata
# ===========================================================================
class TestMetadata:
    def test_login_payload_shape(self):
        assert LoginMetadata(timestamp_ms=1700).to_dict() == {"timestamp": 1700}

    def test_assessment_payload_parses_back(self):
        meta = AssessmentCompletedMetadata(assessment_id=7, score=21.0, assessment_type="swemwbs")
        parsed = parse_metadata("assessment_completed", meta.to_dict())
        assert parsed == meta

    def test_mood_entry_payload(self):
        assert parse_metadata("mood_entry", {"moodType": "happy"}) == MoodEntryMetadata("happy")

    def test_unknown_type_rejected(self):
        with pytest.raises(ValueError, match="Unknown activity type"):
            parse_metadata("page_view", {})

    def test_malformed_payload_rejected(self):
        with pytest.raises(ValueError, match="Malformed"):
            parse_metadata("login", {})


# ===========================================================================
# Login / logout
# ===========================================================================
class TestRecordLogin:
    def test_first_login_is_recorded(self, db_engine):
        result = activity_service.record_login(db_engine, "u1", now=T0)
        assert result == {"success": True, "timestamp": to_epoch_ms(T0), "recorded": True}
        rows = _rows(db_engine, "u1")
        assert len(rows) == 1
        assert rows[0].activity_type == "login"
        assert rows[0].metadata_ == {"timestamp": to_epoch_ms(T0)}

    def test_second_login_within_five_minutes_is_folded(self, db_engine):
        activity_service.record_login(db_engine, "u1", now=T0)
        result = activity_service.record_login(db_engine, "u1", now=T0 + timedelta(minutes=3))
        assert result["recorded"] is False
        assert len(_rows(db_engine, "u1")) == 1

    def test_logins_six_minutes_apart_are_both_recorded(self, db_engine):
        activity_service.record_login(db_engine, "u1", now=T0)
        activity_service.record_login(db_engine, "u1", now=T0 + timedelta(minutes=6))
        assert len(_rows(db_engine, "u1")) == 2

    def test_dedup_is_per_user(self, db_engine):
        activity_service.record_login(db_engine, "u1", now=T0)
        result = activity_service.record_login(db_engine, "u2", now=T0)
        assert result["recorded"] is True

    def test_login_marks_user_online(self, db_engine):
        activity_service.record_login(db_engine, "u1", now=T0)
        status = presence_service.get_status(db_engine, "u1", now=T0 + timedelta(minutes=1))
        assert status["online"] is True

    def test_folded_login_still_refreshes_presence(self, db_engine):
        activity_service.record_login(db_engine, "u1", now=T0)
        activity_service.record_login(db_engine, "u1", now=T0 + timedelta(minutes=4))
        status = presence_service.get_status(db_engine, "u1", now=T0 + timedelta(minutes=8))
        assert status["online"] is True

    def test_login_racing_first_heartbeat_still_commits(self, db_engine):
        presence_service.heartbeat(db_engine, "u1", "away", now=T0)
        real = presence_service._get_presence
        reads = []

        def stale_first_read(session, user_id):
            reads.append(user_id)
            return None if len(reads) == 1 else real(session, user_id)

        with patch.object(presence_service, "_get_presence", stale_first_read):
            result = activity_service.record_login(db_engine, "u1", now=T0 + timedelta(minutes=1))

        assert result["recorded"] is True
        assert len(_rows(db_engine, "u1")) == 1
        status = presence_service.get_status(db_engine, "u1", now=T0 + timedelta(minutes=2))
        assert status["online"] is True


class TestRecordLogout:
    def test_logout_appends_and_sets_offline(self, db_engine):
        activity_service.record_login(db_engine, "u1", now=T0)
        activity_service.record_logout(db_engine, "u1", now=T0 + timedelta(minutes=1))

        types = [r.activity_type for r in _rows(db_engine, "u1")]
        assert types == ["login", "logout"]
        status = presence_service.get_status(db_engine, "u1", now=T0 + timedelta(minutes=1))
        assert status["online"] is False

    def test_logout_is_never_deduplicated(self, db_engine):
        activity_service.record_logout(db_engine, "u1", now=T0)
        activity_service.record_logout(db_engine, "u1", now=T0 + timedelta(seconds=5))
        assert len(_rows(db_engine, "u1")) == 2

    def test_logout_without_presence_row_creates_none(self, db_engine):
        activity_service.record_logout(db_engine, "u1", now=T0)
        assert presence_service.get_status(db_engine, "u1", now=T0)["lastSeen"] is None


class TestGetUserActivities:
    def test_newest_first_and_bounded(self, db_engine):
        for i in range(5):
            activity_service.record_logout(db_engine, "u1", now=T0 + timedelta(minutes=i))

        rows = activity_service.get_user_activities(db_engine, "u1", limit=3)

        assert len(rows) == 3
        stamps = [r["createdAt"] for r in rows]
        assert stamps == sorted(stamps, reverse=True)
        assert stamps[0] == to_epoch_ms(T0 + timedelta(minutes=4))

    def test_other_users_excluded(self, db_engine):
        activity_service.record_logout(db_engine, "u2", now=T0)
        assert activity_service.get_user_activities(db_engine, "u1") == []
