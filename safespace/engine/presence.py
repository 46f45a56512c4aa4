"""
safespace.engine.presence — Online/Offline Derivation
======================================================

The stored ``status`` is only the last thing a client said.  Whether a
user is *online* is recomputed on every read from ``(status, last_seen,
now)`` so a client that vanished without logging out drops offline on
its own once the window passes.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from safespace.constants import (
    HEARTBEAT_COALESCE_WINDOW,
    PRESENCE_ONLINE_WINDOW,
    as_utc,
    to_epoch_ms,
)
from safespace.database.models import PresenceStatus

__all__ = ["PresenceView", "compute_presence", "should_coalesce"]


@dataclass(frozen=True, slots=True)
class PresenceView:
    """What callers see; never persisted."""

    online: bool
    last_seen: datetime | None

    def to_dict(self) -> dict:
        return {
            "online": self.online,
            "presence": PresenceStatus.ONLINE.value if self.online else PresenceStatus.OFFLINE.value,
            "lastSeen": to_epoch_ms(self.last_seen),
        }


def compute_presence(
    status: str | None,
    last_seen: datetime | None,
    now: datetime,
) -> PresenceView:
    """Online iff the last status was ``online`` and the heartbeat is at
    most :data:`PRESENCE_ONLINE_WINDOW` old.  No record means offline."""
    if last_seen is None:
        return PresenceView(online=False, last_seen=None)
    last_seen = as_utc(last_seen)
    fresh = as_utc(now) - last_seen <= PRESENCE_ONLINE_WINDOW
    return PresenceView(online=fresh and status == PresenceStatus.ONLINE, last_seen=last_seen)


def should_coalesce(
    stored_status: str,
    stored_last_seen: datetime,
    new_status: str,
    now: datetime,
) -> bool:
    """True when a heartbeat would only repeat what was written < 10 s ago."""
    if stored_status != new_status:
        return False
    return as_utc(now) - as_utc(stored_last_seen) <= HEARTBEAT_COALESCE_WINDOW
