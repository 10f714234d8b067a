"""Centralized configuration for HOP Huddles.

Uses Pydantic BaseSettings with environment variable loading and validation.
All HOP_* environment variables are validated at import time.
"""

from __future__ import annotations

import logging

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings

NAV_CONTEXTS = ("main-platform", "hop-huddles", "legacy")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = {"env_prefix": "HOP_", "case_sensitive": False, "extra": "ignore"}

    # Logging
    log_format: str = Field(default="text", description="Log format: text or json")
    log_level: str = Field(default="INFO", description="Python log level")

    # Session
    audit_role_switches: bool = Field(
        default=True, description="Emit audit log lines for rejected role switches"
    )

    # Navigation
    default_nav_context: str = Field(
        default="legacy", description="Sidebar used when no context is requested"
    )

    @field_validator("log_format")
    @classmethod
    def validate_log_format(cls, v: str) -> str:
        v = v.lower()
        if v not in ("text", "json"):
            msg = f"HOP_LOG_FORMAT must be 'text' or 'json', got '{v}'"
            raise ValueError(msg)
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        v = v.upper()
        if not isinstance(getattr(logging, v, None), int):
            msg = f"HOP_LOG_LEVEL must be a valid Python log level, got '{v}'"
            raise ValueError(msg)
        return v

    @field_validator("default_nav_context")
    @classmethod
    def validate_default_nav_context(cls, v: str) -> str:
        v = v.lower()
        if v not in NAV_CONTEXTS:
            msg = f"HOP_DEFAULT_NAV_CONTEXT must be one of {', '.join(NAV_CONTEXTS)}, got '{v}'"
            raise ValueError(msg)
        return v


# Singleton, validated at import time.
settings = Settings()
