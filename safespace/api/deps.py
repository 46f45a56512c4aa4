"""
safespace.api.deps — FastAPI dependency injection
==================================================

The identity subject (``sub`` claim of an HS256 bearer token) is the only
thing the API trusts about a caller.  Everything else (engine, config,
announcement service, email sender) is an ``lru_cache`` singleton that
tests swap out through ``app.dependency_overrides``.
"""

from __future__ import annotations

import os
from functools import lru_cache
from typing import Annotated

import jwt
from fastapi import Depends, Header, HTTPException, status
from jwt.exceptions import InvalidTokenError
from sqlalchemy import Engine

from safespace.config import SafeSpaceConfig, load_config
from safespace.database.engine import create_db_engine
from safespace.services.announcement_service import AnnouncementService
from safespace.services.email_service import EmailSender

_WEAK_SECRETS = frozenset({
    "safespace-dev-secret-change-me",
    "change-me",
    "secret",
    "dev",
    "",
})

_MIN_SECRET_LENGTH = 32

JWT_ALGORITHM = "HS256"


def _load_jwt_secret() -> str:
    """Load and validate JWT_SECRET from the environment.

    Raises RuntimeError if the secret is missing, blank, too short
    (< 32 chars), or a known weak default.
    """
    secret = os.getenv("JWT_SECRET", "")
    if not secret:
        raise RuntimeError(
            "JWT_SECRET environment variable is not set. "
            "Generate one with: python -c \"import secrets; print(secrets.token_urlsafe(64))\""
        )
    if secret in _WEAK_SECRETS:
        raise RuntimeError(
            f"JWT_SECRET is set to a known weak default ('{secret}'). "
            "Please set a strong, unique secret."
        )
    if len(secret) < _MIN_SECRET_LENGTH:
        raise RuntimeError(
            f"JWT_SECRET is too short ({len(secret)} chars). "
            f"Minimum length is {_MIN_SECRET_LENGTH} characters."
        )
    return secret


JWT_SECRET: str = _load_jwt_secret()


@lru_cache(maxsize=1)
def get_engine() -> Engine:
    return create_db_engine()


@lru_cache(maxsize=1)
def get_config() -> SafeSpaceConfig:
    return load_config(os.getenv("SAFESPACE_CONFIG", "config.yaml"))


def get_announcement_service(
    engine: Annotated[Engine, Depends(get_engine)],
    cfg: Annotated[SafeSpaceConfig, Depends(get_config)],
) -> AnnouncementService:
    return AnnouncementService(engine, cfg.admins, time_zone=cfg.time_zone)


def get_email_sender(
    cfg: Annotated[SafeSpaceConfig, Depends(get_config)],
) -> EmailSender:
    return EmailSender(cfg)


# ---------------------------------------------------------------------------
# Identity
# ---------------------------------------------------------------------------
def get_identity(
    authorization: Annotated[str | None, Header()] = None,
) -> str | None:
    """Return the token's ``sub`` claim, or ``None`` when no token is sent.

    A token that is present but fails verification is a 401, not an
    anonymous request.
    """
    if not authorization:
        return None
    if not authorization.startswith("Bearer "):
        raise HTTPException(status.HTTP_401_UNAUTHORIZED, "Malformed authorization header")
    token = authorization.split(" ", 1)[1]
    try:
        payload = jwt.decode(token, JWT_SECRET, algorithms=[JWT_ALGORITHM])
    except InvalidTokenError:
        raise HTTPException(status.HTTP_401_UNAUTHORIZED, "Invalid token")
    sub = payload.get("sub")
    return str(sub) if sub else None


def require_identity(
    identity: Annotated[str | None, Depends(get_identity)],
) -> str:
    if not identity:
        raise HTTPException(status.HTTP_401_UNAUTHORIZED, "Unauthenticated")
    return identity
