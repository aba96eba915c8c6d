"""Pure HTTP response builders and the fixed literal error responses."""

from origin_server.domain.http_types import HttpResponse

DEFAULT_VERSION = "HTTP/1.1"

MALFORMED_REQUEST_BODY = b"400 Bad Request: Malformed Request\r\n"
PAYLOAD_TOO_LARGE_BODY = b"413 Content Too Large"
SERVER_ERROR_BODY = b"500 Server Error\r\n"
NOT_FOUND_BODY = b"404 Not Found\n"

# Marker searched for in rendered responses to force the connection closed.
SERVER_ERROR_MARKER = b"500 Server Error"

# Declared lengths are part of the wire contract and are not recomputed
# from the body bytes.
_MALFORMED_REQUEST_HEADERS = {"Content-Length": "34", "Content-Type": "text/plain"}
_PAYLOAD_TOO_LARGE_HEADERS = {"Content-Length": "21", "Content-Type": "text/plain"}
_SERVER_ERROR_HEADERS = {"Content-Length": "16", "Content-Type": "text/plain"}
_NOT_FOUND_HEADERS = {"Content-Length": "13", "Content-Type": "text/plain"}


def _literal(status_line: str, headers: dict[str, str], body: bytes) -> bytes:
    header_lines = [status_line]
    header_lines.extend(f"{name}: {value}" for name, value in headers.items())
    return "\r\n".join(header_lines).encode() + b"\r\n\r\n" + body


def malformed_request_bytes(version: str = DEFAULT_VERSION) -> bytes:
    """Return the literal 400 response written for malformed requests."""
    return _literal(
        f"{version} 400 Bad Request: Malformed Request Error",
        _MALFORMED_REQUEST_HEADERS,
        MALFORMED_REQUEST_BODY,
    )


def payload_too_large_bytes(version: str = DEFAULT_VERSION) -> bytes:
    """Return the literal 413 response written for oversized bodies."""
    return _literal(
        f"{version} 413 Payload too large",
        _PAYLOAD_TOO_LARGE_HEADERS,
        PAYLOAD_TOO_LARGE_BODY,
    )


def server_error_bytes(version: str = DEFAULT_VERSION) -> bytes:
    """Return the literal 500 response."""
    return _literal(
        f"{version} 500 Internal Server Error",
        _SERVER_ERROR_HEADERS,
        SERVER_ERROR_BODY,
    )


def empty_response(version: str = DEFAULT_VERSION) -> HttpResponse:
    """Return a 200 OK response with no body."""
    return HttpResponse(f"{version} 200 OK", {}, b"")


def text_response(text: str, version: str = DEFAULT_VERSION) -> HttpResponse:
    """Return a text/plain 200 response carrying ``text``.

    Text taken from the request line or headers is latin-1, so it is encoded
    back byte for byte.
    """
    payload = text.encode("latin-1")
    headers = {"Content-Type": "text/plain", "Content-Length": str(len(payload))}
    return HttpResponse(f"{version} 200 OK", headers, payload)


def octet_stream_response(data: bytes, version: str = DEFAULT_VERSION) -> HttpResponse:
    """Return a 200 response serving raw file bytes."""
    headers = {
        "Content-Type": "application/octet-stream",
        "Content-Length": str(len(data)),
    }
    return HttpResponse(f"{version} 200 OK", headers, data)


def created_response() -> HttpResponse:
    """Return the 201 response acknowledging a stored upload."""
    return HttpResponse("HTTP/1.1 201 Created", {}, b"")


def not_found_response(version: str = DEFAULT_VERSION) -> HttpResponse:
    """Return the fixed 404 response used for missing files and routes."""
    return HttpResponse(
        f"{version} 404 Not Found", dict(_NOT_FOUND_HEADERS), NOT_FOUND_BODY
    )


def server_error_response(version: str = DEFAULT_VERSION) -> HttpResponse:
    """Return the fixed 500 response used for route-time I/O failures."""
    return HttpResponse(
        f"{version} 500 Internal Server Error",
        dict(_SERVER_ERROR_HEADERS),
        SERVER_ERROR_BODY,
    )
