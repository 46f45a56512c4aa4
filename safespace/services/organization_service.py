"""
safespace.services.organization_service — Per-Org Feature Flags
================================================================

An organization may narrow the platform to a subset of features through
``settings["features"]``.  Orgs without that key get every feature; users
with no org, or whose org slug matches nothing, get none.
"""

from __future__ import annotations

import logging

from sqlalchemy import Engine, select

from safespace.database.engine import get_session
from safespace.database.models import Organization, User

logger = logging.getLogger(__name__)

DEFAULT_FEATURES: tuple[str, ...] = (
    "appointments",
    "video_consultation",
    "mood_tracking",
    "crisis_support",
    "resources",
    "community",
    "messaging",
    "assessments",
)


def get_features(engine: Engine, user_id: str) -> list[str]:
    """Feature names enabled for *user_id*'s organization."""
    with get_session(engine) as session:
        user = session.get(User, user_id)
        if user is None or not user.org_id:
            return []
        org = session.scalars(
            select(Organization).where(Organization.slug == user.org_id)
        ).first()
        if org is None:
            logger.debug("User %s references unknown org %r", user_id, user.org_id)
            return []
        features = (org.settings or {}).get("features")
    if features is None:
        return list(DEFAULT_FEATURES)
    return list(features)
