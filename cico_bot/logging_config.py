# cico_bot/logging_config.py
"""
Stderr-only logging configuration.

Supports a human-readable format for interactive runs and JSON lines for
hosted deployments.
"""

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any

HUMAN_FORMAT = "%(asctime)s  %(levelname)-7s  %(name)s  %(message)s"

# Chatty third-party loggers (httpx logs every request URL, including tokens in query strings)
QUIET_LOGGERS = ("httpx", "httpcore", "telegram", "apscheduler")


class JsonFormatter(logging.Formatter):
    """Formats log records as JSON for structured logging."""

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON line."""
        log_data: dict[str, Any] = {
            "ts": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }

        if record.exc_info:
            log_data["exc"] = self.formatException(record.exc_info)

        return json.dumps(log_data)


def configure_logging(level: str = "INFO", json_output: bool = False) -> None:
    """
    Install a single stderr handler on the root logger.

    Clears existing handlers so repeated calls don't duplicate output.
    """
    handler = logging.StreamHandler(sys.stderr)
    if json_output:
        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(logging.Formatter(HUMAN_FORMAT, datefmt="%H:%M:%S"))

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(level)

    for logger_name in QUIET_LOGGERS:
        logging.getLogger(logger_name).setLevel(logging.WARNING)
