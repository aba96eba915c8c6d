"""Request parsing under strict size and format limits."""

import logging
import re
import urllib.parse
from typing import BinaryIO, Optional

from origin_server.bootstrap.config import (
    ALLOWED_METHODS,
    HTTP_VERSION,
    MAX_BODY_BYTES,
    MAX_HEADER_BYTES,
    MAX_HEADER_COUNT,
    MAX_HEADER_LINE_BYTES,
    MAX_REQUEST_LINE_BYTES,
)
from origin_server.domain.correlation_id import CorrelationLoggerAdapter
from origin_server.domain.errors import (
    MalformedRequest,
    ParseServerError,
    PayloadTooLarge,
)
from origin_server.domain.http_types import HttpMethod, HttpRequest

PARSER_LOGGER = CorrelationLoggerAdapter(
    logging.getLogger("http_server.pipeline.parser"), {}
)

FORBIDDEN_PATH_FRAGMENTS = (b"..", b"//", b"http://", b"https://", b"\x00")
_INVALID_ESCAPE = re.compile(r"%(?![0-9A-Fa-f]{2})")


def decode_path(raw_path: str) -> bytes:
    """Percent-decode a request path, rejecting incomplete escapes."""
    if _INVALID_ESCAPE.search(raw_path):
        raise ValueError(f"Invalid escape in path: {raw_path!r}")
    return urllib.parse.unquote_to_bytes(raw_path)


def is_safe_path(raw_path: str) -> bool:
    """Return True when the decoded path carries no traversal or URL fragments."""
    try:
        decoded = decode_path(raw_path)
    except ValueError:
        return False
    return not any(fragment in decoded for fragment in FORBIDDEN_PATH_FRAGMENTS)


def is_printable_ascii(data: bytes) -> bool:
    """Return True when every byte lies in 0x20-0x7E."""
    return all(0x20 <= byte <= 0x7E for byte in data)


def _read_request_line(reader: BinaryIO) -> Optional[str]:
    raw_line = reader.readline(MAX_REQUEST_LINE_BYTES + 1)
    if not raw_line:
        return None
    if len(raw_line) > MAX_REQUEST_LINE_BYTES:
        PARSER_LOGGER.warning(
            "Request line exceeds maximum length",
            extra={"event": "request_line_too_long", "limit": MAX_REQUEST_LINE_BYTES},
        )
        raise MalformedRequest("Request line too long")
    if not raw_line.endswith(b"\n"):
        raise MalformedRequest("Request line not terminated")
    return raw_line.rstrip(b"\r\n ").decode("latin-1")


def _validate_request_line(method: str, path: str, version: str) -> bool:
    """Check every request line rule, logging each violation found."""
    valid = True
    if version != HTTP_VERSION:
        PARSER_LOGGER.info("Invalid HTTP version", extra={"version": version})
        valid = False
    if method not in ALLOWED_METHODS:
        PARSER_LOGGER.info("Invalid HTTP method", extra={"method": method})
        valid = False
    if not is_safe_path(path):
        PARSER_LOGGER.info("Invalid request path", extra={"route": path})
        valid = False
    return valid


def _read_header_line(reader: BinaryIO, version: str) -> bytes:
    line = reader.readline(MAX_HEADER_LINE_BYTES)
    if line.endswith(b"\n"):
        return line
    if len(line) >= MAX_HEADER_LINE_BYTES:
        PARSER_LOGGER.warning(
            "Header line exceeds maximum length",
            extra={"event": "header_line_too_long", "limit": MAX_HEADER_LINE_BYTES},
        )
        raise MalformedRequest("Header line too long", version)
    raise MalformedRequest("Header section not terminated", version)


def split_header_line(line: str) -> tuple[str, str]:
    """Split ``Key: Value`` on the first colon.

    Both parts must be non-empty, except that a ``Host`` line may carry an
    empty value.
    """
    key, _, value = line.partition(":")
    key = key.strip(" ")
    value = value.strip()
    if (not key or not value) and key != "Host":
        raise ValueError(f"Malformed header line: {line!r}")
    return key, value


def read_headers(reader: BinaryIO, version: str = HTTP_VERSION) -> dict[str, str]:
    """Read header lines up to the blank line that ends the section."""
    headers: dict[str, str] = {}
    header_count = 0
    header_bytes = 0
    seen_content_length = False

    while True:
        line = _read_header_line(reader, version)
        if line in (b"\r\n", b"\n"):
            return headers

        stripped = line.strip(b"\r\n ")
        if not is_printable_ascii(stripped):
            raise MalformedRequest("Header line is not printable ASCII", version)
        try:
            key, value = split_header_line(stripped.decode("ascii"))
        except ValueError as exc:
            raise MalformedRequest(str(exc), version) from exc

        if key == "Content-Length":
            if seen_content_length:
                PARSER_LOGGER.warning(
                    "Duplicated Content-Length header",
                    extra={"event": "duplicate_content_length"},
                )
                raise MalformedRequest("Duplicate Content-Length", version)
            seen_content_length = True

        headers[key] = value
        header_count += 1
        header_bytes += len(key) + len(value)

        if header_count > MAX_HEADER_COUNT:
            PARSER_LOGGER.warning(
                "Header count exceeds limit",
                extra={
                    "event": "header_limit_exceeded",
                    "header_count": header_count,
                    "limit": MAX_HEADER_COUNT,
                },
            )
            raise MalformedRequest("Too many headers", version)
        if header_bytes > MAX_HEADER_BYTES:
            PARSER_LOGGER.warning(
                "Header section size exceeds limit",
                extra={
                    "event": "header_limit_exceeded",
                    "header_bytes": header_bytes,
                    "limit": MAX_HEADER_BYTES,
                },
            )
            raise MalformedRequest("Header section too large", version)


def read_body(reader: BinaryIO, headers: dict[str, str], version: str) -> bytes:
    """Read exactly the number of bytes declared by Content-Length."""
    declared = headers.get("Content-Length")
    if declared is None:
        raise MalformedRequest("POST without Content-Length", version)
    if not declared.isdigit():
        raise ParseServerError(f"Invalid Content-Length: {declared!r}", version)
    content_length = int(declared)
    if content_length > MAX_BODY_BYTES:
        PARSER_LOGGER.warning(
            "Content-Length exceeds maximum body size",
            extra={
                "event": "body_size_exceeded",
                "content_length": content_length,
                "limit": MAX_BODY_BYTES,
            },
        )
        raise PayloadTooLarge("Body too large", version)

    body = reader.read(content_length)
    if len(body) != content_length:
        raise ParseServerError(
            f"Body ended after {len(body)} of {content_length} bytes", version
        )
    return body


def read_request(reader: BinaryIO) -> Optional[HttpRequest]:
    """Read one request from ``reader``.

    Returns None when the peer closed the stream before sending anything.
    Raises a ``RequestParseError`` subclass for every rejected request.
    """
    request_line = _read_request_line(reader)
    if request_line is None:
        return None

    parts = request_line.split(" ")
    if len(parts) != 3:
        raise MalformedRequest(f"Request line has {len(parts)} parts")
    method, path, version = parts
    if not _validate_request_line(method, path, version):
        raise MalformedRequest("Invalid request line")

    headers = read_headers(reader, version)
    if not headers.get("Host"):
        raise MalformedRequest("Missing Host header", version)

    body = None
    if method == HttpMethod.POST.value:
        body = read_body(reader, headers, version)

    if PARSER_LOGGER.logger.isEnabledFor(logging.DEBUG):
        PARSER_LOGGER.debug(
            "Parsed request",
            extra={"event": "request_parsed", "method": method, "route": path},
        )
    return HttpRequest(request_line, HttpMethod(method), path, version, headers, body)
