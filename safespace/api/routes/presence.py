"""
safespace.api.routes.presence — Heartbeats & online status
===========================================================
"""

from __future__ import annotations

from typing import Literal

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field
from sqlalchemy import Engine

from safespace.api.deps import get_engine, require_identity
from safespace.services import presence_service

router = APIRouter(prefix="/presence", tags=["presence"])


class HeartbeatBody(BaseModel):
    status: Literal["online", "away", "offline"] = "online"


class BatchBody(BaseModel):
    user_ids: list[str] = Field(default_factory=list)


@router.post("/heartbeat")
def heartbeat(
    body: HeartbeatBody | None = None,
    user_id: str = Depends(require_identity),
    engine: Engine = Depends(get_engine),
):
    status = body.status if body else "online"
    return presence_service.heartbeat(engine, user_id, status)


@router.get("/online")
def online(
    since_ms: int | None = Query(None, ge=0),
    _caller: str = Depends(require_identity),
    engine: Engine = Depends(get_engine),
):
    return {"users": presence_service.online_users(engine, since_ms)}


@router.post("/batch")
def batch(
    body: BatchBody,
    _caller: str = Depends(require_identity),
    engine: Engine = Depends(get_engine),
):
    return presence_service.get_status_batch(engine, body.user_ids)


@router.get("/{user_id}")
def status_of(
    user_id: str,
    _caller: str = Depends(require_identity),
    engine: Engine = Depends(get_engine),
):
    return presence_service.get_status(engine, user_id)
