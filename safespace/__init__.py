"""
SafeSpace — Engagement Backend for a Mental-Health Support App
===============================================================
Tracks who is around, what they did, and what they need to hear about:
presence heartbeats, an append-only activity journal, per-user
notifications with org-wide announcement fan-out, and the six-month
self-assessment cadence.  Every organization is a tenant; every write is
one transaction.

Package layout::

    safespace/
    ├── config.py          # YAML + env → typed Python config
    ├── constants.py       # Time windows + UTC/epoch-ms helpers
    ├── errors.py          # Unauthenticated / Unauthorized / NotFound
    ├── database/
    │   ├── engine.py      # SQLAlchemy engine + transactional session helper
    │   └── models.py      # All ORM models
    ├── engine/
    │   ├── presence.py    # Pure online/offline derivation
    │   ├── activities.py  # Typed activity metadata (tagged union)
    │   └── assessments.py # Due-date countdown, trend, averages
    ├── services/
    │   ├── presence_service.py      # Heartbeats + status reads
    │   ├── activity_service.py      # Login/logout journal
    │   ├── notification_service.py  # Per-user notification CRUD
    │   ├── announcement_service.py  # Admin-gated org fan-out
    │   ├── assessment_service.py    # Submissions + due checks
    │   ├── mood_service.py          # Mood entries + stats, chart, streaks
    │   ├── organization_service.py  # Per-org feature flags
    │   ├── email_service.py         # Best-effort outbound email
    │   └── serializers.py           # The one client formatting utility
    └── api/
        ├── main.py        # FastAPI app
        ├── deps.py        # JWT identity + injected singletons
        └── routes/        # REST endpoints per module
"""

__version__ = "0.1.0"
