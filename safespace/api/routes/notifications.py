"""
safespace.api.routes.notifications — The caller's notification inbox
=====================================================================

Reads, bulk operations and per-id mutations are scoped to the caller's identity; ``POST``
creates a notification for any user (system and staff integrations).
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel
from sqlalchemy import Engine

from safespace.api.deps import get_config, get_engine, require_identity
from safespace.config import SafeSpaceConfig
from safespace.constants import DEFAULT_NOTIFICATION_LIMIT
from safespace.services import notification_service

router = APIRouter(prefix="/notifications", tags=["notifications"])


class NotificationCreate(BaseModel):
    user_id: str
    type: str
    title: str
    message: str
    related_id: str | None = None
    org_id: str | None = None


@router.get("")
def list_notifications(
    limit: int = Query(DEFAULT_NOTIFICATION_LIMIT, ge=0, le=1000),
    user_id: str = Depends(require_identity),
    engine: Engine = Depends(get_engine),
    cfg: SafeSpaceConfig = Depends(get_config),
):
    return notification_service.get_notifications(
        engine, user_id, limit, time_zone=cfg.time_zone,
    )


@router.get("/unread-count")
def unread_count(
    user_id: str = Depends(require_identity),
    engine: Engine = Depends(get_engine),
):
    return notification_service.get_unread_count(engine, user_id)


@router.post("", status_code=201)
def create(
    body: NotificationCreate,
    _caller: str = Depends(require_identity),
    engine: Engine = Depends(get_engine),
):
    return notification_service.create_notification(
        engine,
        user_id=body.user_id,
        type=body.type,
        title=body.title,
        message=body.message,
        related_id=body.related_id,
        org_id=body.org_id,
    )


@router.post("/read-all")
def read_all(
    user_id: str = Depends(require_identity),
    engine: Engine = Depends(get_engine),
):
    return notification_service.mark_all_as_read(engine, user_id)


@router.post("/clear")
def clear(
    user_id: str = Depends(require_identity),
    engine: Engine = Depends(get_engine),
):
    return notification_service.clear_all(engine, user_id)


@router.post("/{notification_id}/read")
def read_one(
    notification_id: int,
    user_id: str = Depends(require_identity),
    engine: Engine = Depends(get_engine),
):
    return notification_service.mark_as_read(engine, notification_id, user_id=user_id)


@router.delete("/{notification_id}")
def delete_one(
    notification_id: int,
    user_id: str = Depends(require_identity),
    engine: Engine = Depends(get_engine),
):
    return notification_service.delete_notification(engine, notification_id, user_id=user_id)
