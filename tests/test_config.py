"""
tests/test_config.py — YAML + Environment Configuration
========================================================
"""

from __future__ import annotations

import pytest

from safespace.config import (
    DEFAULT_EMAIL_FROM,
    DEFAULT_TIME_ZONE,
    AdminAllowlist,
    load_config,
)


def _write(tmp_path, text: str):
    path = tmp_path / "config.yaml"
    path.write_text(text, encoding="utf-8")
    return path


class TestAdminAllowlist:
    def test_csv_strips_blanks(self):
        admins = AdminAllowlist.from_csv(" a, ,b ,")
        assert admins.subjects == frozenset({"a", "b"})
        assert len(admins) == 2

    def test_empty(self):
        admins = AdminAllowlist.from_csv(None)
        assert not admins.is_admin("a")
        assert not admins.is_admin(None)


class TestLoadConfig:
    def test_minimal_file_uses_defaults(self, tmp_path):
        cfg = load_config(_write(tmp_path, "app_name: S\napi_port: 9000\n"), env={})
        assert cfg.app_name == "S"
        assert cfg.api_port == 9000
        assert cfg.time_zone == DEFAULT_TIME_ZONE
        assert cfg.email_from == DEFAULT_EMAIL_FROM
        assert len(cfg.admins) == 0
        assert not cfg.email_keys.any_configured

    def test_yaml_admins(self, tmp_path):
        path = _write(tmp_path, "app_name: S\napi_port: 1\nadmin_user_ids: [u1, u2]\n")
        cfg = load_config(path, env={})
        assert cfg.admins.is_admin("u2")

    def test_env_overrides(self, tmp_path):
        path = _write(
            tmp_path,
            "app_name: S\napi_port: 1\nadmin_user_ids: [u1]\nemail_from: a@b.c\n",
        )
        cfg = load_config(path, env={
            "ADMIN_USER_IDS": "boss",
            "EMAIL_FROM": "ops@b.c",
            "RESEND_API_KEY": "re_123",
        })
        assert cfg.admins.is_admin("boss")
        assert not cfg.admins.is_admin("u1")
        assert cfg.email_from == "ops@b.c"
        assert cfg.email_keys.resend == "re_123"
        assert cfg.email_keys.brevo is None

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError, match="config.yaml.example"):
            load_config(tmp_path / "nope.yaml", env={})

    def test_missing_required_key(self, tmp_path):
        with pytest.raises(KeyError):
            load_config(_write(tmp_path, "app_name: S\n"), env={})
