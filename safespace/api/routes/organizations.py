"""
safespace.api.routes.organizations — The caller's org feature flags
====================================================================
"""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy import Engine

from safespace.api.deps import get_engine, require_identity
from safespace.services import organization_service

router = APIRouter(prefix="/organizations", tags=["organizations"])


@router.get("/features")
def features(
    user_id: str = Depends(require_identity),
    engine: Engine = Depends(get_engine),
):
    return {"features": organization_service.get_features(engine, user_id)}
