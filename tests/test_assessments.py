"""
tests/test_assessments.py — Assessment Due-Date Scheduler
==========================================================
"""

from __future__ import annotations

from datetime import timedelta

import pytest
from conftest import T0
from sqlalchemy import select
from sqlalchemy.orm import Session

from safespace.database.models import ActivityLog, Assessment, Notification
from safespace.engine.assessments import (
    average_score,
    classify_trend,
    compute_due_status,
    format_score,
)
from safespace.errors import NotFound
from safespace.services import assessment_service as svc


def _submit(engine, score=20.0, *, now=T0, user_id="u1"):
    return svc.submit_assessment(
        engine,
        user_id=user_id,
        assessment_type="swemwbs",
        responses={"q1": 3, "q2": 4},
        total_score=score,
        now=now,
    )


# ===========================================================================
# Pure calculations
# ===========================================================================
class TestComputeDueStatus:
    def test_never_assessed(self):
        assert compute_due_status(None, None, T0).to_dict() == {"isDue": True, "daysUntilDue": 0}

    def test_one_day_before_due(self):
        status = compute_due_status(T0, T0 + timedelta(days=180), T0 + timedelta(days=179))
        assert (status.is_due, status.days_until_due) == (False, 1)

    def test_one_day_overdue(self):
        status = compute_due_status(T0, T0 + timedelta(days=180), T0 + timedelta(days=181))
        assert (status.is_due, status.days_until_due) == (True, -1)

    def test_partial_days_round_up_before_due(self):
        status = compute_due_status(T0, T0 + timedelta(days=180), T0 + timedelta(days=178, hours=1))
        assert status.days_until_due == 2

    def test_due_exactly_now(self):
        status = compute_due_status(T0, T0 + timedelta(days=180), T0 + timedelta(days=180))
        assert status.is_due is True
        assert status.days_until_due == 0

    def test_legacy_row_uses_completed_at(self):
        status = compute_due_status(T0, None, T0 + timedelta(days=179))
        assert (status.is_due, status.days_until_due) == (False, 1)


class TestTrendAndAverage:
    @pytest.mark.parametrize(
        ("latest", "previous", "expected"),
        [
            (25, 20, "improving"),
            (23, 25, "stable"),
            (22, 20, "stable"),
            (17, 20, "declining"),
        ],
    )
    def test_classify_trend(self, latest, previous, expected):
        assert classify_trend(latest, previous) == expected

    def test_average_rounds_half_up(self):
        assert average_score([20, 21, 21, 21]) == 20.8  # 20.75

    def test_average_negative_half_rounds_toward_positive(self):
        assert average_score([-2.25]) == -2.2
        assert average_score([-2, -3]) == -2.5

    def test_average_of_nothing(self):
        assert average_score([]) is None

    def test_format_score_drops_trailing_zero(self):
        assert format_score(20.0) == "20"
        assert format_score(20.5) == "20.5"


# ===========================================================================
# Services
# ===========================================================================
class TestSubmitAssessment:
    def test_writes_assessment_notification_and_activity(self, db_engine):
        result = _submit(db_engine, 20.0)

        assert result["nextDueDate"] == "2026-08-29T18:00:00.000Z"
        with Session(db_engine) as session:
            assessment = session.get(Assessment, result["id"])
            [note] = session.scalars(select(Notification)).all()
            [activity] = session.scalars(select(ActivityLog)).all()

        assert assessment.total_score == 20.0
        assert note.type == "self_assessment"
        assert note.title == "Assessment Completed"
        assert note.message == (
            "Your wellbeing assessment has been recorded. Score: 20/35. "
            "Next assessment due in 6 months."
        )
        assert note.related_id == str(result["id"])
        assert activity.activity_type == "assessment_completed"
        assert activity.metadata_ == {"assessmentId": result["id"], "score": 20.0, "type": "swemwbs"}


class TestIsAssessmentDue:
    def test_no_assessment_is_due_now(self, db_engine):
        assert svc.is_assessment_due(db_engine, "u1", now=T0) == {"isDue": True, "daysUntilDue": 0}

    def test_countdown_after_submission(self, db_engine):
        _submit(db_engine, now=T0)
        before = svc.is_assessment_due(db_engine, "u1", now=T0 + timedelta(days=179))
        after = svc.is_assessment_due(db_engine, "u1", now=T0 + timedelta(days=181))
        assert before == {"isDue": False, "daysUntilDue": 1}
        assert after == {"isDue": True, "daysUntilDue": -1}

    def test_latest_assessment_drives_countdown(self, db_engine):
        _submit(db_engine, now=T0)
        _submit(db_engine, now=T0 + timedelta(days=100))
        status = svc.is_assessment_due(db_engine, "u1", now=T0 + timedelta(days=181))
        assert status["isDue"] is False

    def test_legacy_row_without_due_date(self, db_engine):
        with Session(db_engine) as session:
            session.add(Assessment(
                user_id="u1",
                assessment_type="swemwbs",
                total_score=18,
                completed_at=T0,
                next_due_at=None,
                created_at=T0,
                updated_at=T0,
            ))
            session.commit()
        status = svc.is_assessment_due(db_engine, "u1", now=T0 + timedelta(days=181))
        assert status == {"isDue": True, "daysUntilDue": -1}


class TestStats:
    def test_improving(self, db_engine):
        _submit(db_engine, 20, now=T0)
        _submit(db_engine, 25, now=T0 + timedelta(days=1))
        stats = svc.get_assessment_stats(db_engine, "u1")
        assert stats["trend"] == "improving"
        assert stats["latestScore"] == 25
        assert stats["averageScore"] == 22.5
        assert stats["totalAssessments"] == 2
        assert [s["score"] for s in stats["scores"]] == [25, 20]

    def test_stable(self, db_engine):
        _submit(db_engine, 25, now=T0)
        _submit(db_engine, 23, now=T0 + timedelta(days=1))
        assert svc.get_assessment_stats(db_engine, "u1")["trend"] == "stable"

    def test_single_assessment_has_no_trend(self, db_engine):
        _submit(db_engine, 25)
        assert svc.get_assessment_stats(db_engine, "u1")["trend"] is None

    def test_empty(self, db_engine):
        assert svc.get_assessment_stats(db_engine, "u1") == {
            "totalAssessments": 0,
            "averageScore": None,
            "latestScore": None,
            "trend": None,
            "scores": [],
        }


class TestReads:
    def test_latest_is_formatted_for_client(self, db_engine):
        _submit(db_engine, 21)
        latest = svc.get_latest_assessment(db_engine, "u1")
        assert latest["totalScore"] == 21
        assert latest["completedAt"] == "03/02/2026, 11:00:00"
        assert latest["nextDueDate"] == "08/29/2026"

    def test_latest_missing(self, db_engine):
        assert svc.get_latest_assessment(db_engine, "u1") is None

    def test_history_newest_first(self, db_engine):
        for i in range(3):
            _submit(db_engine, 10 + i, now=T0 + timedelta(days=i))
        history = svc.get_assessment_history(db_engine, "u1", limit=2)
        assert [h["totalScore"] for h in history] == [12, 11]

    def test_upcoming_window(self, db_engine):
        _submit(db_engine, now=T0)
        near = svc.get_upcoming_due_assessments(db_engine, "u1", 7, now=T0 + timedelta(days=175))
        far = svc.get_upcoming_due_assessments(db_engine, "u1", 7, now=T0 + timedelta(days=100))
        assert len(near) == 1
        assert far == []


class TestUpdateNotes:
    def test_updates_notes(self, db_engine):
        aid = _submit(db_engine)["id"]
        svc.update_assessment_notes(db_engine, aid, "felt rushed", now=T0 + timedelta(hours=1))
        assert svc.get_latest_assessment(db_engine, "u1")["notes"] == "felt rushed"

    def test_missing_assessment(self, db_engine):
        with pytest.raises(NotFound):
            svc.update_assessment_notes(db_engine, 999, "x")

    def test_notes_scoped_to_owner(self, db_engine):
        aid = _submit(db_engine, user_id="u1")["id"]
        with pytest.raises(NotFound):
            svc.update_assessment_notes(db_engine, aid, "not mine", user_id="u2")
        assert svc.get_latest_assessment(db_engine, "u1")["notes"] != "not mine"
        svc.update_assessment_notes(db_engine, aid, "mine", user_id="u1")
        assert svc.get_latest_assessment(db_engine, "u1")["notes"] == "mine"
