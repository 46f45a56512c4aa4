"""
safespace.api.routes.assessments — Wellbeing self-assessments
==============================================================
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field
from sqlalchemy import Engine

from safespace.api.deps import get_config, get_engine, require_identity
from safespace.config import SafeSpaceConfig
from safespace.constants import (
    ASSESSMENT_MAX_SCORE,
    DEFAULT_HISTORY_LIMIT,
    DEFAULT_UPCOMING_DAYS,
)
from safespace.services import assessment_service

router = APIRouter(prefix="/assessments", tags=["assessments"])


class AssessmentSubmit(BaseModel):
    assessment_type: str = "swemwbs"
    responses: dict[str, Any] = Field(default_factory=dict)
    total_score: float = Field(ge=0, le=ASSESSMENT_MAX_SCORE)
    notes: str | None = None


class NotesUpdate(BaseModel):
    notes: str


@router.post("", status_code=201)
def submit(
    body: AssessmentSubmit,
    user_id: str = Depends(require_identity),
    engine: Engine = Depends(get_engine),
):
    return assessment_service.submit_assessment(
        engine,
        user_id=user_id,
        assessment_type=body.assessment_type,
        responses=body.responses,
        total_score=body.total_score,
        notes=body.notes,
    )


@router.get("/due")
def due(
    user_id: str = Depends(require_identity),
    engine: Engine = Depends(get_engine),
):
    return assessment_service.is_assessment_due(engine, user_id)


@router.get("/latest")
def latest(
    user_id: str = Depends(require_identity),
    engine: Engine = Depends(get_engine),
    cfg: SafeSpaceConfig = Depends(get_config),
):
    return {
        "assessment": assessment_service.get_latest_assessment(
            engine, user_id, time_zone=cfg.time_zone,
        )
    }


@router.get("/history")
def history(
    limit: int = Query(DEFAULT_HISTORY_LIMIT, ge=0, le=100),
    user_id: str = Depends(require_identity),
    engine: Engine = Depends(get_engine),
    cfg: SafeSpaceConfig = Depends(get_config),
):
    return {
        "assessments": assessment_service.get_assessment_history(
            engine, user_id, limit, time_zone=cfg.time_zone,
        )
    }


@router.get("/stats")
def stats(
    user_id: str = Depends(require_identity),
    engine: Engine = Depends(get_engine),
):
    return assessment_service.get_assessment_stats(engine, user_id)


@router.get("/upcoming")
def upcoming(
    days_ahead: int = Query(DEFAULT_UPCOMING_DAYS, ge=0, le=365),
    user_id: str = Depends(require_identity),
    engine: Engine = Depends(get_engine),
    cfg: SafeSpaceConfig = Depends(get_config),
):
    return {
        "assessments": assessment_service.get_upcoming_due_assessments(
            engine, user_id, days_ahead, time_zone=cfg.time_zone,
        )
    }


@router.patch("/{assessment_id}/notes")
def update_notes(
    assessment_id: int,
    body: NotesUpdate,
    user_id: str = Depends(require_identity),
    engine: Engine = Depends(get_engine),
):
    return assessment_service.update_assessment_notes(
        engine, assessment_id, body.notes, user_id=user_id,
    )
