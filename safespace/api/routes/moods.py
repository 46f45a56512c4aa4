"""
safespace.api.routes.moods — Mood check-ins
============================================
"""

from __future__ import annotations

from datetime import datetime

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field
from sqlalchemy import Engine

from safespace.api.deps import get_config, get_engine, require_identity
from safespace.config import SafeSpaceConfig
from safespace.services import mood_service

router = APIRouter(prefix="/moods", tags=["moods"])


class MoodCreate(BaseModel):
    mood_type: str
    intensity: int = Field(3, ge=1, le=5)
    factors: list[str] = Field(default_factory=list)
    notes: str | None = None
    share_with_support_worker: bool = False


class MoodUpdate(BaseModel):
    mood_type: str | None = None
    intensity: int | None = Field(None, ge=1, le=5)
    factors: list[str] | None = None
    notes: str | None = None
    share_with_support_worker: bool | None = None


@router.post("", status_code=201)
def record(
    body: MoodCreate,
    user_id: str = Depends(require_identity),
    engine: Engine = Depends(get_engine),
):
    return mood_service.record_mood(
        engine,
        user_id=user_id,
        mood_type=body.mood_type,
        intensity=body.intensity,
        factors=body.factors,
        notes=body.notes,
        share_with_support_worker=body.share_with_support_worker,
    )


@router.get("/recent")
def recent(
    limit: int = Query(10, ge=0, le=100),
    user_id: str = Depends(require_identity),
    engine: Engine = Depends(get_engine),
):
    return {"moods": mood_service.get_recent_moods(engine, user_id, limit)}


@router.get("/stats")
def stats(
    days: int = Query(7, ge=1, le=365),
    user_id: str = Depends(require_identity),
    engine: Engine = Depends(get_engine),
):
    return mood_service.get_mood_stats(engine, user_id, days)


@router.get("/chart")
def chart(
    days: int = Query(30, ge=1, le=365),
    user_id: str = Depends(require_identity),
    engine: Engine = Depends(get_engine),
    cfg: SafeSpaceConfig = Depends(get_config),
):
    return mood_service.get_mood_chart_data(engine, user_id, days, time_zone=cfg.time_zone)


@router.get("/history")
def history(
    limit: int = Query(20, ge=0, le=100),
    offset: int = Query(0, ge=0),
    mood_type: str | None = None,
    start: datetime | None = None,
    end: datetime | None = None,
    factors: list[str] | None = Query(None),
    user_id: str = Depends(require_identity),
    engine: Engine = Depends(get_engine),
):
    return mood_service.get_mood_history(
        engine,
        user_id,
        limit=limit,
        offset=offset,
        mood_type=mood_type,
        start=start,
        end=end,
        factors=factors,
    )


@router.get("/factors")
def factors(
    user_id: str = Depends(require_identity),
    engine: Engine = Depends(get_engine),
):
    return mood_service.get_factors(engine, user_id)


@router.patch("/{mood_id}")
def update(
    mood_id: int,
    body: MoodUpdate,
    user_id: str = Depends(require_identity),
    engine: Engine = Depends(get_engine),
):
    return mood_service.update_mood(engine, mood_id, user_id=user_id, **body.model_dump())


@router.delete("/{mood_id}")
def delete(
    mood_id: int,
    user_id: str = Depends(require_identity),
    engine: Engine = Depends(get_engine),
):
    return mood_service.delete_mood(engine, mood_id, user_id=user_id)
