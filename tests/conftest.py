"""
tests/conftest.py — Shared Test Fixtures
=========================================
"""

from __future__ import annotations

import os
from datetime import UTC, datetime

# ---------------------------------------------------------------------------
# Ensure a valid JWT_SECRET is always set for test runs.
# This must happen before any import of safespace.api.deps which validates
# the secret at module-load time.
# ---------------------------------------------------------------------------
_TEST_JWT_SECRET = "test-secret-for-pytest-only-" + "x" * 40  # > 32 chars
os.environ.setdefault("JWT_SECRET", _TEST_JWT_SECRET)

import pytest  # noqa: E402
from sqlalchemy import Engine, create_engine  # noqa: E402

# ---------------------------------------------------------------------------
# SQLite has no JSONB; render it as TEXT so the same models create tables.
# ---------------------------------------------------------------------------
from sqlalchemy.dialects.postgresql import JSONB as PG_JSONB  # noqa: E402
from sqlalchemy.ext.compiler import compiles  # noqa: E402
from sqlalchemy.orm import Session  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from safespace.config import AdminAllowlist, EmailProviderKeys, SafeSpaceConfig  # noqa: E402
from safespace.database.models import Base, User  # noqa: E402


@compiles(PG_JSONB, "sqlite")
def _compile_jsonb_as_text(type_, compiler, **kw):
    return "TEXT"


T0 = datetime(2026, 3, 2, 18, 0, 0, tzinfo=UTC)
ADMIN_ID = "user_admin"


@pytest.fixture
def db_engine() -> Engine:
    """In-memory SQLite engine with all SafeSpace tables.

    StaticPool keeps one connection so the TestClient's worker thread sees
    the same in-memory database.
    """
    engine = create_engine(
        "sqlite://",
        echo=False,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    return engine


@pytest.fixture
def config() -> SafeSpaceConfig:
    return SafeSpaceConfig(
        app_name="SafeSpace Test",
        api_port=8000,
        admins=AdminAllowlist.from_iterable([ADMIN_ID]),
        email_keys=EmailProviderKeys(),
    )


def add_members(engine: Engine, org_id: str, *user_ids: str) -> None:
    with Session(engine) as session:
        session.add_all(User(id=uid, org_id=org_id) for uid in user_ids)
        session.commit()


def make_token(sub: str | None = "user_1") -> str:
    import jwt

    from safespace.api.deps import JWT_ALGORITHM, JWT_SECRET

    claims = {"sub": sub} if sub is not None else {}
    return jwt.encode(claims, JWT_SECRET, algorithm=JWT_ALGORITHM)


def auth(sub: str = "user_1") -> dict:
    return {"Authorization": f"Bearer {make_token(sub)}"}


@pytest.fixture
def client(db_engine: Engine, config: SafeSpaceConfig):
    """TestClient wired to the in-memory engine and test config."""
    from fastapi.testclient import TestClient

    from safespace.api import deps
    from safespace.api.main import app

    app.dependency_overrides[deps.get_engine] = lambda: db_engine
    app.dependency_overrides[deps.get_config] = lambda: config
    try:
        yield TestClient(app, raise_server_exceptions=False)
    finally:
        app.dependency_overrides.clear()
