"""Response rendering: connection headers, gzip and wire serialization."""

import gzip
import logging
import zlib
from typing import Mapping

from origin_server.domain.correlation_id import CorrelationLoggerAdapter
from origin_server.domain.http_types import HttpResponse
from origin_server.domain.response_builders import (
    DEFAULT_VERSION,
    SERVER_ERROR_MARKER,
    server_error_bytes,
)

COMPRESSION_LOGGER = CorrelationLoggerAdapter(
    logging.getLogger("http_server.compression"), {}
)

CONNECTION_CLOSE_MARKER = b"Connection: close"


def wants_close(request_headers: Mapping[str, str]) -> bool:
    """Return True when the client sent ``Connection: close``."""
    return request_headers.get("Connection") == "close"


def accepts_gzip(request_headers: Mapping[str, str]) -> bool:
    """Return True when Accept-Encoding mentions gzip anywhere."""
    return "gzip" in request_headers.get("Accept-Encoding", "")


def serialize_response(
    status_line: str, headers: Mapping[str, str], body: bytes
) -> bytes:
    """Return the exact bytes for a status line, headers and body."""
    header_lines = [status_line]
    header_lines.extend(f"{name}: {value}" for name, value in headers.items())
    return "\r\n".join(header_lines).encode("latin-1") + b"\r\n\r\n" + body


def should_close(wire_bytes: bytes) -> bool:
    """Decide from the rendered bytes whether the connection must close."""
    return CONNECTION_CLOSE_MARKER in wire_bytes or SERVER_ERROR_MARKER in wire_bytes


def render_response(
    response: HttpResponse, request_headers: Mapping[str, str]
) -> tuple[bytes, bool]:
    """Render ``response`` for the request that produced it.

    Returns the wire bytes and whether the connection closes after sending.
    """
    headers = dict(response.headers)
    body = response.body

    if wants_close(request_headers):
        headers["Connection"] = "close"

    # Closure is decided on the uncompressed rendering.
    close_after = should_close(
        serialize_response(response.status_line, headers, response.body)
    )

    if accepts_gzip(request_headers):
        try:
            body = gzip.compress(body)
        except (OSError, zlib.error) as error:
            COMPRESSION_LOGGER.error(
                "Compression failed",
                extra={
                    "event": "compression_failed",
                    "error_type": type(error).__name__,
                },
            )
            version = response.status_line.split(" ", 1)[0] or DEFAULT_VERSION
            return server_error_bytes(version), True
        headers["Content-Encoding"] = "gzip"
        headers["Content-Length"] = str(len(body))
        if COMPRESSION_LOGGER.logger.isEnabledFor(logging.DEBUG):
            COMPRESSION_LOGGER.debug(
                "Compressed payload",
                extra={"size": len(response.body), "compressed_size": len(body)},
            )

    return serialize_response(response.status_line, headers, body), close_after
