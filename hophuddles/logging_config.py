"""Logging setup for HOP Huddles.

Format and level come from the validated ``Settings`` (``HOP_LOG_FORMAT``,
``HOP_LOG_LEVEL``), so a bad value is rejected when the settings load
rather than silently replaced here.
"""

from __future__ import annotations

import logging
import traceback
from typing import Any

from pythonjsonlogger.json import JsonFormatter

from hophuddles.config import Settings
from hophuddles.config import settings as default_settings

JSON_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"
TEXT_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


class StructuredJsonFormatter(JsonFormatter):
    """One JSON object per record.

    Extras passed by the access-model loggers (``user_id``, ``active_role``,
    ``requested_role``, ``permission``, ``granted``, ``assignment_count``)
    become top-level keys. Exceptions are emitted as a ``traceback`` list
    instead of the flat ``exc_info`` string.
    """

    def __init__(self) -> None:
        super().__init__(fmt=JSON_FORMAT, datefmt="%Y-%m-%dT%H:%M:%S")

    def add_fields(
        self,
        log_data: dict[str, Any],
        record: logging.LogRecord,
        message_dict: dict[str, Any],
    ) -> None:
        super().add_fields(log_data, record, message_dict)
        if record.exc_info and record.exc_info[1] is not None:
            log_data.pop("exc_info", None)
            log_data["traceback"] = traceback.format_exception(*record.exc_info)


def build_handler(settings: Settings | None = None) -> logging.Handler:
    """Stream handler with the formatter and level selected by *settings*."""
    settings = settings or default_settings
    handler = logging.StreamHandler()
    handler.setLevel(getattr(logging, settings.log_level))
    if settings.log_format == "json":
        handler.setFormatter(StructuredJsonFormatter())
    else:
        handler.setFormatter(logging.Formatter(TEXT_FORMAT))
    return handler


def setup_logging(settings: Settings | None = None) -> None:
    """Install a single handler on the root logger; safe to call repeatedly."""
    settings = settings or default_settings
    root = logging.getLogger()
    root.setLevel(getattr(logging, settings.log_level))
    root.handlers.clear()
    root.addHandler(build_handler(settings))
