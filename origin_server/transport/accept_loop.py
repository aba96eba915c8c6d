"""Main connection acceptance loop."""

import logging
import socket
import threading

from origin_server.bootstrap.config import ServerConfig
from origin_server.bootstrap.socket_factory import create_server_socket
from origin_server.domain.correlation_id import (
    CorrelationLoggerAdapter,
    generate_connection_id,
)
from origin_server.domain.file_store import FileStore
from origin_server.lifecycle.state import ServerLifecycle
from origin_server.transport.context import WorkerContext
from origin_server.transport.worker import handle_client

ACCEPT_LOGGER = CorrelationLoggerAdapter(
    logging.getLogger("http_server.transport.accept"), {}
)


def build_worker_context(
    config: ServerConfig, lifecycle: ServerLifecycle
) -> WorkerContext:
    """Create the read-only context shared by every connection worker."""
    return WorkerContext(
        store=FileStore(config.directory, config.file_mode),
        socket_timeout=config.socket_timeout or None,
        lifecycle=lifecycle,
    )


def spawn_worker(
    client_socket: socket.socket,
    client_address: tuple[str, int],
    context: WorkerContext,
) -> threading.Thread:
    """Start the thread that owns ``client_socket`` from now on."""
    connection_id = generate_connection_id()
    if ACCEPT_LOGGER.logger.isEnabledFor(logging.DEBUG):
        ACCEPT_LOGGER.debug(
            "Client connection accepted",
            extra={
                "event": "client_accepted",
                "client": f"{client_address[0]}:{client_address[1]}",
                "connection_id": connection_id,
            },
        )
    thread = threading.Thread(
        target=handle_client,
        args=(client_socket, client_address, context, connection_id),
        name=f"conn-{connection_id}",
        daemon=False,
    )
    thread.start()
    return thread


def run_server(config: ServerConfig, lifecycle: ServerLifecycle) -> None:
    """Accept connections until shutdown, one worker thread per connection."""
    server_socket = create_server_socket(config.host, config.port)
    ACCEPT_LOGGER.info(
        "Server listening for connections",
        extra={
            "event": "server_listening",
            "host": config.host,
            "port": config.port,
            "directory": config.directory,
        },
    )
    context = build_worker_context(config, lifecycle)

    try:
        while not lifecycle.should_stop():
            try:
                client_socket, client_address = server_socket.accept()
            except socket.timeout:
                continue
            except OSError as error:
                if lifecycle.should_stop():
                    break
                ACCEPT_LOGGER.error(
                    "Error accepting connection",
                    extra={"event": "accept_error", "error_type": type(error).__name__},
                )
                continue
            spawn_worker(client_socket, client_address, context)
    finally:
        server_socket.close()
        ACCEPT_LOGGER.info(
            "Waiting for active connections to complete",
            extra={
                "event": "shutdown_waiting",
                "shutdown_grace_seconds": config.shutdown_grace_seconds,
            },
        )
        lifecycle.wait_for_workers(config.shutdown_grace_seconds)
        ACCEPT_LOGGER.info(
            "Server shutdown complete", extra={"event": "server_stopped"}
        )
