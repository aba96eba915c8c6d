"""Logging configuration for the origin server.

All modules log below the ``http_server`` logger. ``configure_logging``
installs exactly one handler on that logger, either stdout or a rotating
file, rendering records as sorted-key JSON or as a single text line.
"""

import json
import logging
import re
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, Optional

from origin_server.domain.correlation_id import CorrelationLoggerAdapter

LOGGER_NAME = "http_server"
LOG_FORMAT = "%(asctime)s %(levelname)s [%(correlation_id)s] %(name)s :: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
MAX_BYTES = 10 * 1024 * 1024
BACKUP_COUNT = 5
REDACTED = "[REDACTED]"

# A credential name only counts when a value is attached to it.
_CREDENTIAL_HEADER = re.compile(
    r"(?i)\b(?:proxy-)?authorization\s*:|\bcookie\s*:"
)
_CREDENTIAL_ASSIGNMENT = re.compile(
    r"(?i)\b(?:token|secret|password|passwd|signature|api[_-]?key|access[_-]?key)"
    r"\s*[=:]"
)
_LONG_HEX = re.compile(r"\b[A-Fa-f0-9]{32,}\b")
_LONG_BASE64 = re.compile(r"\b[A-Za-z0-9+/]{32,}={0,2}")

SENSITIVE_PATTERNS = (
    _CREDENTIAL_HEADER,
    _CREDENTIAL_ASSIGNMENT,
    _LONG_HEX,
    _LONG_BASE64,
)

# Extras copied verbatim into JSON records.
CONNECTION_KEYS = ("client", "connection_id", "close", "bytes_in", "bytes_out")
REQUEST_KEYS = ("request_line", "route", "method", "path", "version")
LIMIT_KEYS = (
    "reason",
    "status",
    "status_code",
    "limit",
    "header_count",
    "header_bytes",
    "content_length",
    "size",
    "compressed_size",
    "error_type",
)
PROCESS_KEYS = (
    "host",
    "port",
    "directory",
    "log_destination",
    "log_level",
    "use_json",
    "socket_timeout",
    "shutdown_grace_seconds",
    "remaining_workers",
    "signal",
)
EXTRA_KEYS = CONNECTION_KEYS + REQUEST_KEYS + LIMIT_KEYS + PROCESS_KEYS

# Only values that originate from the client are checked for credentials.
REDACTED_KEYS = frozenset(REQUEST_KEYS)


def redact_sensitive(value: str) -> str:
    """Return ``[REDACTED]`` when ``value`` carries something credential-like."""
    if value and any(pattern.search(value) for pattern in SENSITIVE_PATTERNS):
        return REDACTED
    return value


class CorrelationIdFilter(logging.Filter):  # pylint: disable=too-few-public-methods
    """Give records logged outside an adapter a ``-`` correlation id."""

    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "correlation_id"):
            record.correlation_id = "-"
        return True


class JsonFormatter(logging.Formatter):
    """One JSON object per record, keys sorted."""

    def format(self, record: logging.LogRecord) -> str:
        payload = self._base_fields(record)
        payload.update(self._extra_fields(record))
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, sort_keys=True)

    def _base_fields(self, record: logging.LogRecord) -> dict[str, Any]:
        fields = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "correlation_id": getattr(record, "correlation_id", "-"),
            "component": getattr(record, "component", "unknown"),
            "message": record.getMessage(),
        }
        if hasattr(record, "event"):
            fields["event"] = record.event
        return fields

    @staticmethod
    def _extra_fields(record: logging.LogRecord) -> dict[str, Any]:
        fields = {}
        for key in EXTRA_KEYS:
            if not hasattr(record, key):
                continue
            value = getattr(record, key)
            if key in REDACTED_KEYS and isinstance(value, str):
                value = redact_sensitive(value)
            fields[key] = value
        return fields


def _resolve_level(level_name: str) -> int:
    level = logging.getLevelName(level_name.upper())
    return level if isinstance(level, int) else logging.INFO


def _open_stream(destination: Optional[str]) -> logging.Handler:
    if not destination or destination.lower() == "stdout":
        return logging.StreamHandler(sys.stdout)
    log_path = Path(destination)
    log_path.parent.mkdir(parents=True, exist_ok=True)
    return RotatingFileHandler(log_path, maxBytes=MAX_BYTES, backupCount=BACKUP_COUNT)


def _build_handler(
    destination: Optional[str], level: int, use_json: bool = True
) -> logging.Handler:
    """Create the single handler installed on the project logger."""
    handler = _open_stream(destination)
    handler.setLevel(level)
    formatter = (
        JsonFormatter(datefmt=DATE_FORMAT)
        if use_json
        else logging.Formatter(LOG_FORMAT, DATE_FORMAT)
    )
    handler.setFormatter(formatter)
    handler.addFilter(CorrelationIdFilter())
    return handler


def configure_logging(
    level: str = "INFO", destination: Optional[str] = None, use_json: bool = True
) -> CorrelationLoggerAdapter:
    """Install the requested handler and return an adapter on the project logger."""
    logger = logging.getLogger(LOGGER_NAME)
    numeric_level = _resolve_level(level)
    logger.setLevel(numeric_level)
    logger.propagate = False

    for previous in list(logger.handlers):
        previous.close()
        logger.removeHandler(previous)
    logger.addHandler(_build_handler(destination, numeric_level, use_json))

    adapter = CorrelationLoggerAdapter(logger, {})
    adapter.info(
        "Logging configured",
        extra={
            "event": "logging_configured",
            "log_destination": destination or "stdout",
            "log_level": logging.getLevelName(numeric_level),
            "use_json": use_json,
        },
    )
    return adapter
