"""Integration tests for request limits and validation failures."""

from __future__ import annotations

import socket
from typing import TYPE_CHECKING

import pytest

from origin_server.bootstrap.config import MAX_BODY_BYTES
from tests.utils.http import read_until_closed, send_raw_request

pytestmark = pytest.mark.integration

if TYPE_CHECKING:
    from tests.conftest import ServerProcessInfo

MALFORMED = (
    b"HTTP/1.1 400 Bad Request: Malformed Request Error\r\n"
    b"Content-Length: 34\r\n"
    b"Content-Type: text/plain\r\n\r\n"
    b"400 Bad Request: Malformed Request\r\n"
)
TOO_LARGE = (
    b"HTTP/1.1 413 Payload too large\r\n"
    b"Content-Length: 21\r\n"
    b"Content-Type: text/plain\r\n\r\n"
    b"413 Content Too Large"
)
SERVER_ERROR = (
    b"HTTP/1.1 500 Internal Server Error\r\n"
    b"Content-Length: 16\r\n"
    b"Content-Type: text/plain\r\n\r\n"
    b"500 Server Error\r\n"
)


def _send(server_process: "ServerProcessInfo", request_bytes: bytes) -> bytes:
    return send_raw_request(
        server_process["host"], server_process["port"], request_bytes
    )


def test_request_line_at_limit_is_accepted(server_process) -> None:
    """A request line of exactly 128 bytes including CRLF is served."""
    prefix, suffix = b"GET /echo/", b" HTTP/1.1\r\n"
    text = b"a" * (128 - len(prefix) - len(suffix))
    request = prefix + text + suffix + b"Host: a\r\nConnection: close\r\n\r\n"

    reply = _send(server_process, request)

    assert reply.startswith(b"HTTP/1.1 200 OK\r\n")
    assert reply.endswith(text)


def test_request_line_over_limit_is_rejected(server_process) -> None:
    """One byte over the request-line cap yields the literal 400."""
    prefix, suffix = b"GET /echo/", b" HTTP/1.1\r\n"
    text = b"a" * (129 - len(prefix) - len(suffix))
    request = prefix + text + suffix + b"Host: a\r\n\r\n"

    assert _send(server_process, request) == MALFORMED


def test_too_many_headers_are_rejected(server_process) -> None:
    """Fifty-one header lines exceed the header count cap."""
    headers = b"Host: a\r\n" + b"".join(
        f"X-H{i}: v\r\n".encode() for i in range(50)
    )

    reply = _send(server_process, b"GET / HTTP/1.1\r\n" + headers + b"\r\n")

    assert reply == MALFORMED


def test_duplicate_content_length_is_rejected(server_process) -> None:
    """Content-Length may appear only once."""
    request = (
        b"POST /files/dup HTTP/1.1\r\nHost: a\r\n"
        b"Content-Length: 1\r\nContent-Length: 1\r\n\r\nx"
    )

    assert _send(server_process, request) == MALFORMED


def test_missing_host_is_rejected(server_process) -> None:
    """Every request needs a Host header."""
    assert _send(server_process, b"GET / HTTP/1.1\r\n\r\n") == MALFORMED


def test_empty_host_is_rejected(server_process) -> None:
    """A Host header with no value is treated as missing."""
    assert _send(server_process, b"GET / HTTP/1.1\r\nHost:\r\n\r\n") == MALFORMED


@pytest.mark.parametrize(
    "request_line",
    [
        b"PUT / HTTP/1.1",
        b"GET / HTTP/1.0",
        b"GET /files/../secret HTTP/1.1",
        b"GET /files/%2e%2e/secret HTTP/1.1",
        b"GET //evil HTTP/1.1",
        b"GET /echo/bad%zz HTTP/1.1",
    ],
)
def test_invalid_request_lines_are_rejected(server_process, request_line) -> None:
    """Bad methods, versions and unsafe paths yield the literal 400."""
    request = request_line + b"\r\nHost: a\r\n\r\n"

    assert _send(server_process, request) == MALFORMED


def test_oversized_body_is_rejected(server_process) -> None:
    """Declaring more than the body cap yields the literal 413 unread."""
    request = (
        b"POST /files/huge HTTP/1.1\r\nHost: a\r\n"
        + f"Content-Length: {MAX_BODY_BYTES + 1}\r\n\r\n".encode()
    )

    assert _send(server_process, request) == TOO_LARGE


def test_body_at_limit_is_stored(server_process) -> None:
    """A body of exactly the cap is accepted."""
    body = b"z" * MAX_BODY_BYTES
    request = (
        b"POST /files/max HTTP/1.1\r\nHost: a\r\nConnection: close\r\n"
        + f"Content-Length: {MAX_BODY_BYTES}\r\n\r\n".encode()
        + body
    )

    reply = _send(server_process, request)

    assert reply.startswith(b"HTTP/1.1 201 Created\r\n")
    assert (server_process["directory"] / "max").stat().st_size == MAX_BODY_BYTES


def test_post_without_content_length_is_rejected(server_process) -> None:
    """POST requires a declared body length."""
    request = b"POST /files/x HTTP/1.1\r\nHost: a\r\n\r\n"

    assert _send(server_process, request) == MALFORMED


def test_non_numeric_content_length_is_server_error(server_process) -> None:
    """An unparsable Content-Length is reported as a 500."""
    request = b"POST /files/x HTTP/1.1\r\nHost: a\r\nContent-Length: ten\r\n\r\n"

    assert _send(server_process, request) == SERVER_ERROR


def test_short_body_is_server_error(server_process) -> None:
    """A body shorter than declared is a 500 once the client stops sending."""
    host, port = server_process["host"], server_process["port"]
    with socket.create_connection((host, port), timeout=5) as sock:
        sock.sendall(
            b"POST /files/short HTTP/1.1\r\nHost: a\r\nContent-Length: 10\r\n\r\nabc"
        )
        sock.shutdown(socket.SHUT_WR)
        assert read_until_closed(sock) == SERVER_ERROR

    assert not (server_process["directory"] / "short").exists()


def test_connection_stays_usable_after_not_found(server_process) -> None:
    """A 404 does not close the connection."""
    request = (
        b"GET /missing HTTP/1.1\r\nHost: a\r\n\r\n"
        b"GET /echo/after HTTP/1.1\r\nHost: a\r\nConnection: close\r\n\r\n"
    )

    reply = _send(server_process, request)

    assert reply.startswith(b"HTTP/1.1 404 Not Found\r\n")
    assert reply.endswith(b"\r\n\r\nafter")
