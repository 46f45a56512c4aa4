"""
safespace.api.routes.activities — Login / logout journal
=========================================================
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from sqlalchemy import Engine

from safespace.api.deps import get_engine, require_identity
from safespace.constants import DEFAULT_ACTIVITY_LIMIT
from safespace.services import activity_service

router = APIRouter(prefix="/activities", tags=["activities"])


@router.post("/login")
def login(
    user_id: str = Depends(require_identity),
    engine: Engine = Depends(get_engine),
):
    return activity_service.record_login(engine, user_id)


@router.post("/logout")
def logout(
    user_id: str = Depends(require_identity),
    engine: Engine = Depends(get_engine),
):
    return activity_service.record_logout(engine, user_id)


@router.get("/{user_id}")
def list_activities(
    user_id: str,
    limit: int = Query(DEFAULT_ACTIVITY_LIMIT, ge=0, le=500),
    _caller: str = Depends(require_identity),
    engine: Engine = Depends(get_engine),
):
    return {"activities": activity_service.get_user_activities(engine, user_id, limit)}
