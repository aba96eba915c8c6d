"""Shared fixtures for unit tests."""

import io
import logging

import pytest


@pytest.fixture(autouse=True)
def enable_log_propagation():
    """Ensure logs propagate to root so caplog can catch them."""
    logger = logging.getLogger("http_server")
    old_propagate = logger.propagate
    logger.propagate = True
    yield
    logger.propagate = old_propagate


@pytest.fixture(name="stream")
def fixture_stream():
    """Wrap raw request bytes the way ``socket.makefile("rb")`` does."""

    def _stream(data: bytes) -> io.BufferedReader:
        return io.BufferedReader(io.BytesIO(data))

    return _stream
