"""
safespace.api.routes.announcements — Org-wide announcements
============================================================

Creation is admin-only; the allowlist check happens in
:class:`~safespace.services.announcement_service.AnnouncementService`,
so an anonymous ``POST`` reaches the service and comes back as a 401.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel

from safespace.api.deps import get_announcement_service, get_identity
from safespace.constants import DEFAULT_ANNOUNCEMENT_LIMIT
from safespace.services.announcement_service import AnnouncementService

router = APIRouter(prefix="/announcements", tags=["announcements"])


class AnnouncementCreate(BaseModel):
    org_id: str
    title: str
    body: str
    visibility: str = "org"
    active: bool = True
    priority: str | None = None


@router.get("")
def list_announcements(
    org_id: str,
    active_only: bool = True,
    limit: int = Query(DEFAULT_ANNOUNCEMENT_LIMIT, ge=0, le=500),
    svc: AnnouncementService = Depends(get_announcement_service),
):
    return svc.list_by_org(org_id, active_only=active_only, limit=limit)


@router.post("", status_code=201)
def create(
    body: AnnouncementCreate,
    caller: str | None = Depends(get_identity),
    svc: AnnouncementService = Depends(get_announcement_service),
):
    return svc.create_announcement(
        caller,
        org_id=body.org_id,
        title=body.title,
        body=body.body,
        visibility=body.visibility,
        active=body.active,
        priority=body.priority,
    )


@router.get("/{announcement_id}")
def get_one(
    announcement_id: int,
    svc: AnnouncementService = Depends(get_announcement_service),
):
    found = svc.get_announcement(announcement_id)
    if found is None:
        raise HTTPException(404, "Announcement not found")
    return found


@router.post("/{announcement_id}/read")
def mark_read(
    announcement_id: int,
    caller: str | None = Depends(get_identity),
    svc: AnnouncementService = Depends(get_announcement_service),
):
    return svc.mark_read(caller, announcement_id)
