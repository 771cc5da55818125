"""Centralized logging configuration.

Logs are JSON lines on stdout. Mood tags, context text, prompts and model
output are never passed to loggers, and neither are the shared secret or the
OpenAI key. Extra fields are optional; the formatter must never raise due to
missing keys.
"""

from __future__ import annotations

import json
import logging
import logging.config
import os
from datetime import UTC, datetime
from typing import Any

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

_EXTRA_FIELDS = (
    "request_id",
    "status_code",
    "duration_ms",
    "desired_state",
    "mood_tag_count",
    "upstream_status",
    "outcome",
    "success",
)


class JsonFormatter(logging.Formatter):
    """Emit one JSON object per record, tolerating records without our extras."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "method": getattr(record, "method", getattr(record, "http_method", None)),
            "path": getattr(record, "path", getattr(record, "request_path", None)),
        }
        for name in _EXTRA_FIELDS:
            payload[name] = getattr(record, name, None)

        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)

        return json.dumps(payload, ensure_ascii=False)


def setup_logging(level: str = LOG_LEVEL) -> None:
    """Configure application logging (JSON to stdout)."""

    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "json": {
                    "()": "kings_mirror.core.logging.JsonFormatter",
                }
            },
            "handlers": {
                "default": {
                    "class": "logging.StreamHandler",
                    "formatter": "json",
                    "stream": "ext://sys.stdout",
                }
            },
            "root": {
                "level": level.upper(),
                "handlers": ["default"],
            },
        }
    )
