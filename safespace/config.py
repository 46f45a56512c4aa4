"""
safespace.config — YAML Configuration Loader
=============================================

Reads ``config.yaml`` for deployment settings (identity, time zone, admin
allowlist, outbound email).  Secrets stay in the environment (``.env``)
and are layered on top here, once, at startup.  Business logic never
reads ``os.environ`` directly: it receives the typed objects below.

Usage::

    from safespace.config import load_config

    cfg = load_config()                    # reads ./config.yaml by default
    cfg.admins.is_admin("user_2abc")       # True / False
    cfg.time_zone                          # "America/Edmonton"
"""

from __future__ import annotations

import os
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from pathlib import Path

import yaml

DEFAULT_TIME_ZONE = "America/Edmonton"
DEFAULT_EMAIL_FROM = "alerts@safespace.local"


# ---------------------------------------------------------------------------
# Admin allowlist — injected into the announcement fan-out
# ---------------------------------------------------------------------------
@dataclass(frozen=True, slots=True)
class AdminAllowlist:
    """Set of identity subjects allowed to broadcast announcements."""

    subjects: frozenset[str] = frozenset()

    @classmethod
    def from_csv(cls, csv: str | None) -> AdminAllowlist:
        """Build from a comma-separated list, ignoring blanks and whitespace."""
        if not csv:
            return cls()
        return cls.from_iterable(csv.split(","))

    @classmethod
    def from_iterable(cls, values: Iterable[str]) -> AdminAllowlist:
        return cls(frozenset(v.strip() for v in values if v and v.strip()))

    def is_admin(self, subject: str | None) -> bool:
        if not subject:
            return False
        return subject in self.subjects

    def __len__(self) -> int:
        return len(self.subjects)


# ---------------------------------------------------------------------------
# Outbound email provider keys
# ---------------------------------------------------------------------------
@dataclass(frozen=True, slots=True)
class EmailProviderKeys:
    """API keys for the supported HTTP email providers (first set wins)."""

    brevo: str | None = None
    resend: str | None = None
    sendgrid: str | None = None

    @classmethod
    def from_env(cls, env: Mapping[str, str] | None = None) -> EmailProviderKeys:
        env = os.environ if env is None else env
        return cls(
            brevo=env.get("AUTH_BREVO_KEY") or None,
            resend=env.get("RESEND_API_KEY") or None,
            sendgrid=env.get("SENDGRID_API_KEY") or None,
        )

    @property
    def any_configured(self) -> bool:
        return bool(self.brevo or self.resend or self.sendgrid)


# ---------------------------------------------------------------------------
# Typed settings object
# ---------------------------------------------------------------------------
@dataclass(frozen=True, slots=True)
class SafeSpaceConfig:
    """Immutable configuration loaded from ``config.yaml`` + environment."""

    # Identity
    app_name: str

    # API
    api_port: int

    # Display: all client-facing local times are rendered in this zone
    time_zone: str = DEFAULT_TIME_ZONE

    # Access control
    admins: AdminAllowlist = field(default_factory=AdminAllowlist)

    # Outbound email
    email_from: str = DEFAULT_EMAIL_FROM
    email_keys: EmailProviderKeys = field(default_factory=EmailProviderKeys)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------
def load_config(
    path: str | Path = "config.yaml",
    env: Mapping[str, str] | None = None,
) -> SafeSpaceConfig:
    """Read *path* and return a :class:`SafeSpaceConfig` instance.

    Parameters
    ----------
    path:
        Filesystem path to the YAML configuration file.
        Defaults to ``config.yaml`` in the current working directory.
    env:
        Environment mapping used for secrets and overrides.
        Defaults to ``os.environ``.

    Raises
    ------
    FileNotFoundError
        If the YAML file doesn't exist.
    KeyError
        If a required key is missing from the YAML file.
    """
    env = os.environ if env is None else env
    config_path = Path(path)
    if not config_path.exists():
        raise FileNotFoundError(
            f"Configuration file not found: {config_path.resolve()}\n"
            "Hint: copy config.yaml.example → config.yaml and edit it."
        )

    with open(config_path, encoding="utf-8") as fh:
        raw: dict = yaml.safe_load(fh) or {}

    # ADMIN_USER_IDS (CSV) wins over the YAML list so the allowlist can be
    # rotated without redeploying the config file.
    admin_csv = env.get("ADMIN_USER_IDS", "").strip()
    if admin_csv:
        admins = AdminAllowlist.from_csv(admin_csv)
    else:
        admins = AdminAllowlist.from_iterable(
            str(v) for v in (raw.get("admin_user_ids") or [])
        )

    return SafeSpaceConfig(
        app_name=raw["app_name"],
        api_port=int(raw["api_port"]),
        time_zone=raw.get("time_zone") or DEFAULT_TIME_ZONE,
        admins=admins,
        email_from=env.get("EMAIL_FROM") or raw.get("email_from") or DEFAULT_EMAIL_FROM,
        email_keys=EmailProviderKeys.from_env(env),
    )
