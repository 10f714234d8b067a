"""Tests for environment-driven settings (hophuddles.config)."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from hophuddles.config import Settings


class TestSettingsDefaults:
    def test_defaults(self, monkeypatch):
        for name in (
            "HOP_LOG_FORMAT",
            "HOP_LOG_LEVEL",
            "HOP_AUDIT_ROLE_SWITCHES",
            "HOP_DEFAULT_NAV_CONTEXT",
        ):
            monkeypatch.delenv(name, raising=False)
        s = Settings()
        assert s.log_format == "text"
        assert s.log_level == "INFO"
        assert s.audit_role_switches is True
        assert s.default_nav_context == "legacy"

    def test_reads_environment(self, monkeypatch):
        monkeypatch.setenv("HOP_AUDIT_ROLE_SWITCHES", "false")
        monkeypatch.setenv("HOP_DEFAULT_NAV_CONTEXT", "hop-huddles")
        s = Settings()
        assert s.audit_role_switches is False
        assert s.default_nav_context == "hop-huddles"


class TestSettingsValidation:
    def test_invalid_log_format(self):
        with pytest.raises(ValidationError, match="HOP_LOG_FORMAT"):
            Settings(log_format="yaml")

    def test_log_format_normalized(self):
        assert Settings(log_format="JSON").log_format == "json"

    def test_invalid_log_level(self):
        with pytest.raises(ValidationError, match="HOP_LOG_LEVEL"):
            Settings(log_level="SUPERVERBOSE")

    def test_log_level_normalized(self):
        assert Settings(log_level="debug").log_level == "DEBUG"

    def test_invalid_nav_context(self):
        with pytest.raises(ValidationError, match="HOP_DEFAULT_NAV_CONTEXT"):
            Settings(default_nav_context="back-office")

    def test_nav_context_normalized(self):
        assert Settings(default_nav_context="Main-Platform").default_nav_context == (
            "main-platform"
        )

    def test_invalid_env_value(self, monkeypatch):
        monkeypatch.setenv("HOP_LOG_FORMAT", "xml")
        with pytest.raises(ValidationError, match="HOP_LOG_FORMAT"):
            Settings()
