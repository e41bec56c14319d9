"""
toolkit-hub Structured Logging

Diagnostic logging for the hub using stdlib logging with structured
context. Everything goes to stderr so stdout stays reserved for a
stdio transport.

Usage:
    from toolkit_hub.logging import get_logger

    logger = get_logger("toolkit_hub.loader")
    logger.info("Package loaded", extra={"package": "sheets", "tool_count": 4})

For machine-readable output:
    from toolkit_hub.logging import configure_logging
    configure_logging(json_output=True, level="DEBUG")
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any

# Context attached via ``extra=``, in the order it is rendered. package
# and tool are folded into a single invocation target.
_TARGET_KEYS = ("package", "tool")
_EXTRA_KEYS = (
    "outcome",
    "error_code",
    "duration_ms",
    "tool_count",
    "path",
)


def _target(record: logging.LogRecord) -> str | None:
    """Exposed-name style target, e.g. ``sheets_list_sheets``."""
    package = getattr(record, "package", None)
    tool = getattr(record, "tool", None)
    if package and tool:
        return f"{package}_{tool}"
    return package or tool


class HubFormatter(logging.Formatter):
    """Structured log formatter for the hub.

    Outputs either human-readable or JSON format depending on configuration.
    Records about a single tool call carry their target up front, so
    diagnostics line up with invocation log entries for the same tool.
    """

    def __init__(self, json_output: bool = False):
        super().__init__()
        self._json_output = json_output

    def format(self, record: logging.LogRecord) -> str:
        timestamp = datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat()
        target = _target(record)
        extras: dict[str, Any] = {}
        for key in _EXTRA_KEYS:
            value = getattr(record, key, None)
            if value is not None:
                extras[key] = value

        if self._json_output:
            log_data: dict[str, Any] = {
                "timestamp": timestamp,
                "level": record.levelname,
                "logger": record.name,
                "message": record.getMessage(),
            }
            for key in _TARGET_KEYS:
                value = getattr(record, key, None)
                if value is not None:
                    log_data[key] = value
            if target is not None:
                log_data["target"] = target
            log_data.update(extras)
            if record.exc_info:
                log_data["exception"] = self.formatException(record.exc_info)
            return json.dumps(log_data, default=str)

        target_str = f" [{target}]" if target else ""
        extra_str = ""
        if extras:
            extra_str = " | " + " ".join(f"{k}={v}" for k, v in extras.items())
        line = (
            f"[{timestamp}] {record.levelname:8s} {record.name}{target_str}: "
            f"{record.getMessage()}{extra_str}"
        )
        if record.exc_info:
            line += "\n" + self.formatException(record.exc_info)
        return line


def configure_logging(
    level: str = "INFO",
    json_output: bool = False,
) -> None:
    """Configure hub diagnostic logging.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        json_output: If True, emit one JSON object per line.
    """
    root_logger = logging.getLogger("toolkit_hub")
    root_logger.setLevel(getattr(logging, level.upper(), logging.INFO))

    root_logger.handlers.clear()

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(HubFormatter(json_output=json_output))
    root_logger.addHandler(handler)

    root_logger.propagate = False


def get_logger(name: str = "toolkit_hub") -> logging.Logger:
    """Get a hub logger instance.

    Args:
        name: Logger name (usually module path like "toolkit_hub.loader").
    """
    return logging.getLogger(name)


# Auto-configure with sensible defaults on import
configure_logging()
