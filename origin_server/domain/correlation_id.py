"""Connection and request correlation tags for log records."""

import contextvars
import logging
import uuid
from typing import Any, MutableMapping, Optional

_correlation_id_var: contextvars.ContextVar[Optional[str]] = contextvars.ContextVar(
    "correlation_id", default=None
)

LOGGER_PREFIX = "http_server."


def generate_connection_id() -> str:
    """Return a short random identifier for an accepted connection."""
    return uuid.uuid4().hex[:12]


def request_correlation_id(connection_id: str, sequence: int) -> str:
    """Tag the ``sequence``-th request read on a connection."""
    return f"{connection_id}/{sequence}"


def get_correlation_id() -> Optional[str]:
    """Retrieve the correlation ID bound to the current worker thread."""
    return _correlation_id_var.get()


def set_correlation_id(correlation_id: str) -> None:
    """Bind a correlation ID to the current worker thread."""
    _correlation_id_var.set(correlation_id)


def clear_correlation_id() -> None:
    """Remove the correlation ID from the current context."""
    _correlation_id_var.set(None)


class CorrelationLoggerAdapter(logging.LoggerAdapter):
    """Logger adapter that stamps records with correlation ID and component."""

    def process(
        self, msg: str, kwargs: MutableMapping[str, Any]
    ) -> tuple[str, MutableMapping[str, Any]]:
        extra = dict(kwargs.get("extra") or {})
        correlation_id = get_correlation_id()
        extra["correlation_id"] = correlation_id if correlation_id is not None else "-"

        logger_name = self.logger.name
        if logger_name.startswith(LOGGER_PREFIX):
            logger_name = logger_name[len(LOGGER_PREFIX) :]
        extra["component"] = logger_name

        kwargs["extra"] = extra
        return msg, kwargs
