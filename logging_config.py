"""Centralized logging configuration.

This module provides:
- PlainFormatter for human-readable stderr output
- JSONFormatter for structured logging (one JSON object per line)
- setup_logging() to configure the root logger once at process start

Messages follow the "[TAG] message" convention; the JSON formatter lifts
the tag into its own field.
"""

import json
import logging
import re
import sys
from datetime import datetime, timezone

_TAG_RE = re.compile(r'\[([A-Z_]+)\]\s*(.*)', re.DOTALL)


class JSONFormatter(logging.Formatter):
    """JSON formatter for structured logging."""

    def __init__(self, service_name: str = None):
        super().__init__()
        self.service_name = service_name or "spotify-auth-relay"

    def format(self, record: logging.LogRecord) -> str:
        # Extract tag from message if present: [TAG] message
        tag = None
        message = record.getMessage()
        tag_match = _TAG_RE.match(message)
        if tag_match:
            tag = tag_match.group(1)
            message = tag_match.group(2)

        log_entry = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "service": self.service_name,
            "level": record.levelname,
            "tag": tag,
            "message": message,
            "logger": record.name,
            "extra": {
                "function": record.funcName,
                "line": record.lineno,
            }
        }

        if record.exc_info:
            log_entry["extra"]["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_entry)


class PlainFormatter(logging.Formatter):
    """Plain text formatter for stderr output (local debugging)."""

    def __init__(self):
        super().__init__(
            fmt='%(asctime)s [%(levelname)s] %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )


def setup_logging(
    level: str = "INFO",
    log_format: str = "plain",
    service_name: str = None,
) -> logging.Logger:
    """Configure the root logger.

    Args:
        level: Root log level name (INFO, DEBUG, ...).
        log_format: "plain" for human-readable lines, "json" for structured.
        service_name: Service identifier included in JSON records.

    Returns:
        Configured root logger.
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, str(level).upper(), logging.INFO))
    root_logger.handlers.clear()

    stderr_handler = logging.StreamHandler(sys.stderr)
    if log_format == "json":
        stderr_handler.setFormatter(JSONFormatter(service_name))
    else:
        stderr_handler.setFormatter(PlainFormatter())
    root_logger.addHandler(stderr_handler)

    # Suppress noisy HTTP client logs (request lines would include tokens in URLs)
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)

    logger = logging.getLogger(__name__)
    logger.info(f"[STARTUP] Logging configured: level={root_logger.level}, format={log_format}")

    return root_logger
