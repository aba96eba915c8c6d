"""Integration tests exercising the public HTTP endpoints."""

from __future__ import annotations

import gzip
import os
import socket
import stat
from pathlib import Path
from typing import TYPE_CHECKING

import pytest
import requests

from tests.utils.http import read_http_response, send_raw_request

pytestmark = pytest.mark.integration

if TYPE_CHECKING:
    from tests.conftest import ServerProcessInfo


def test_root_endpoint_returns_empty_body(base_url: str) -> None:
    """Root should respond with an empty payload."""

    response = requests.get(f"{base_url}/", timeout=5)
    assert response.status_code == 200
    assert response.content == b""


def test_root_endpoint_raw_bytes(server_process: "ServerProcessInfo") -> None:
    """Without gzip the root answer is a bare status line."""

    reply = send_raw_request(
        server_process["host"],
        server_process["port"],
        b"GET / HTTP/1.1\r\nHost: localhost\r\nConnection: close\r\n\r\n",
    )
    assert reply == b"HTTP/1.1 200 OK\r\nConnection: close\r\n\r\n"


def test_echo_endpoint_round_trips_payload(base_url: str) -> None:
    """Echo path should round-trip the payload unmodified."""

    response = requests.get(f"{base_url}/echo/sample", timeout=5)
    assert response.status_code == 200
    assert response.text == "sample"
    assert response.headers["Content-Type"] == "text/plain"


def test_user_agent_endpoint_reflects_header(base_url: str) -> None:
    """User-agent endpoint must mirror the request header."""

    headers = {"User-Agent": "pytest-agent"}
    response = requests.get(f"{base_url}/user-agent", headers=headers, timeout=5)
    assert response.status_code == 200
    assert response.text == "pytest-agent"


def test_echo_responds_with_gzip_when_requested(base_url: str) -> None:
    """Echo should gzip payloads when the client opts in."""

    headers = {"Accept-Encoding": "gzip"}
    with requests.get(
        f"{base_url}/echo/zip",
        headers=headers,
        timeout=5,
        stream=True,
    ) as response:
        assert response.status_code == 200
        assert response.headers.get("Content-Encoding") == "gzip"
        response.raw.decode_content = False
        payload = response.raw.read()
    assert int(response.headers["Content-Length"]) == len(payload)
    assert gzip.decompress(payload) == b"zip"


def test_echo_without_gzip_is_plain(server_process: "ServerProcessInfo") -> None:
    """A client that does not mention gzip gets the body as is."""

    with socket.create_connection(
        (server_process["host"], server_process["port"]), timeout=5
    ) as sock:
        sock.sendall(
            b"GET /echo/abc HTTP/1.1\r\nHost: localhost\r\nAccept-Encoding: br\r\n\r\n"
        )
        response = read_http_response(sock)
    assert response.headers == {"content-type": "text/plain", "content-length": "3"}
    assert response.body == b"abc"


def test_file_round_trip(base_url: str, server_process: "ServerProcessInfo") -> None:
    """Uploading a file then reading it back returns the same bytes."""

    filename = "payload.txt"
    payload = b"file-body"
    post_response = requests.post(
        f"{base_url}/files/{filename}",
        data=payload,
        timeout=5,
    )
    assert post_response.status_code == 201

    get_response = requests.get(f"{base_url}/files/{filename}", timeout=5)
    assert get_response.status_code == 200
    assert get_response.content == payload
    assert get_response.headers["Content-Type"] == "application/octet-stream"

    stored_path = Path(server_process["directory"]) / filename
    assert stored_path.read_bytes() == payload
    assert stat.S_IMODE(os.stat(stored_path).st_mode) & 0o077 == 0


def test_file_get_serves_preexisting_file(
    base_url: str, server_process: "ServerProcessInfo"
) -> None:
    """Files placed in the directory out of band are served."""

    (Path(server_process["directory"]) / "existing.bin").write_bytes(b"\x00\x01\x02")

    response = requests.get(f"{base_url}/files/existing.bin", timeout=5)
    assert response.status_code == 200
    assert response.content == b"\x00\x01\x02"


def test_missing_file_returns_not_found(base_url: str) -> None:
    """Unknown files answer 404."""

    response = requests.get(f"{base_url}/files/nonexistent", timeout=5)
    assert response.status_code == 404


def test_unknown_route_returns_literal_not_found(
    server_process: "ServerProcessInfo",
) -> None:
    """Unmatched routes get the fixed 404 bytes."""

    reply = send_raw_request(
        server_process["host"],
        server_process["port"],
        b"GET /nope HTTP/1.1\r\nHost: localhost\r\nConnection: close\r\n\r\n",
    )
    assert reply.startswith(b"HTTP/1.1 404 Not Found\r\n")
    assert b"Content-Length: 13\r\n" in reply
    assert b"Content-Type: text/plain\r\n" in reply
    assert reply.endswith(b"\r\n\r\n404 Not Found\n")


def test_requests_are_logged_with_correlation_ids(
    base_url: str, server_process: "ServerProcessInfo"
) -> None:
    """Request handling is logged as JSON tagged with connection/sequence."""

    requests.post(f"{base_url}/files/logged.txt", data=b"x", timeout=5)

    log_content = Path(server_process["log_file"]).read_text(encoding="utf-8")
    assert '"event": "request_received"' in log_content
    assert '"event": "file_write_complete"' in log_content
    write_lines = [
        line for line in log_content.splitlines() if "file_write_complete" in line
    ]
    assert any('/1"' in line for line in write_lines)
