"""Logging configuration with optional JSON formatting."""

from __future__ import annotations

import json
import logging
import os
import sys
from datetime import datetime, timezone
from typing import Any, TextIO


class JSONFormatter(logging.Formatter):
    """Format log records as JSON for structured logging."""

    def format(self, record: logging.LogRecord) -> str:
        log_data: dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        # Add exception info if present
        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        # Add extra fields if present (e.g., frame, source)
        for key in ("frame", "window_length", "sample_rate", "source"):
            if hasattr(record, key):
                log_data[key] = getattr(record, key)

        return json.dumps(log_data)


def configure_logging(
    level: str | int | None = None,
    json_format: bool | None = None,
    stream: TextIO | None = None,
) -> None:
    """Configure root logging.

    Args:
        level: Log level name or number (default: $SPECTRAL_VIZ_LOG_LEVEL or INFO)
        json_format: Force JSON output on/off (default: JSON when
            $SPECTRAL_VIZ_ENV is production/prod/staging)
        stream: Output stream (default: stdout)
    """
    if level is None:
        level = os.environ.get("SPECTRAL_VIZ_LOG_LEVEL", "INFO")
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    if json_format is None:
        env = os.environ.get("SPECTRAL_VIZ_ENV", "development").lower()
        json_format = env in ("production", "prod", "staging")

    # Root logger configuration
    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    # Remove existing handlers
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler(stream if stream is not None else sys.stdout)
    console_handler.setLevel(level)

    if json_format:
        formatter = JSONFormatter()
    else:
        # Human-readable format for development
        formatter = logging.Formatter(
            fmt="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)
