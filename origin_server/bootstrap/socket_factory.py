"""Listening socket creation."""

import logging
import socket

from origin_server.domain.correlation_id import CorrelationLoggerAdapter

SOCKET_LOGGER = CorrelationLoggerAdapter(logging.getLogger("http_server.socket"), {})

ACCEPT_POLL_SECONDS = 0.5


def create_server_socket(host: str, port: int) -> socket.socket:
    """Bind the listening socket; accept() wakes periodically to poll shutdown."""
    try:
        server_socket = socket.create_server((host, port), reuse_port=True)
    except OSError as error:
        SOCKET_LOGGER.critical(
            "Error starting server on port",
            extra={
                "event": "bind_failed",
                "host": host,
                "port": port,
                "error_type": type(error).__name__,
            },
        )
        raise
    server_socket.settimeout(ACCEPT_POLL_SECONDS)
    return server_socket
