"""Per-connection read/respond loop run on a dedicated worker thread."""

import logging
import socket
import threading
from dataclasses import dataclass
from typing import BinaryIO, Optional

from origin_server.domain.correlation_id import (
    CorrelationLoggerAdapter,
    clear_correlation_id,
    generate_connection_id,
    request_correlation_id,
    set_correlation_id,
)
from origin_server.domain.errors import RequestParseError
from origin_server.pipeline.parser import read_request
from origin_server.pipeline.renderer import render_response
from origin_server.pipeline.router import route_request
from origin_server.transport.context import WorkerContext

WORKER_LOGGER = CorrelationLoggerAdapter(
    logging.getLogger("http_server.transport.worker"), {}
)


@dataclass
class _Connection:
    client_socket: socket.socket
    reader: BinaryIO
    client_addr_str: str
    connection_id: str


def send_bytes(connection: _Connection, data: bytes) -> bool:
    """Write ``data`` to the client, returning False when the write failed."""
    try:
        connection.client_socket.sendall(data)
    except OSError as error:
        WORKER_LOGGER.error(
            "Error writing response to client",
            extra={
                "event": "write_failed",
                "client": connection.client_addr_str,
                "error_type": type(error).__name__,
            },
        )
        return False
    return True


def serve_request(connection: _Connection, context: WorkerContext) -> bool:
    """Run one parse/route/render cycle; return True to keep reading."""
    try:
        request = read_request(connection.reader)
    except RequestParseError as error:
        WORKER_LOGGER.warning(
            "Request rejected",
            extra={
                "event": "parse_failed",
                "client": connection.client_addr_str,
                "status_code": error.status_code,
                "reason": error.reason,
            },
        )
        send_bytes(connection, error.to_bytes())
        return False

    if request is None:
        if WORKER_LOGGER.logger.isEnabledFor(logging.DEBUG):
            WORKER_LOGGER.debug(
                "Client closed connection",
                extra={
                    "event": "client_disconnected",
                    "client": connection.client_addr_str,
                },
            )
        return False

    WORKER_LOGGER.info(
        "Request received",
        extra={
            "event": "request_received",
            "client": connection.client_addr_str,
            "request_line": request.request_line,
        },
    )

    response, matched = route_request(request, context.store)
    if not matched:
        WORKER_LOGGER.warning(
            "No matching route found",
            extra={
                "event": "route_not_found",
                "route": request.path,
                "method": request.method.value,
            },
        )

    wire_bytes, close_after = render_response(response, request.headers)
    if not send_bytes(connection, wire_bytes):
        return False

    if WORKER_LOGGER.logger.isEnabledFor(logging.DEBUG):
        WORKER_LOGGER.debug(
            "Response sent",
            extra={
                "event": "response_sent",
                "status": response.status_line,
                "bytes_out": len(wire_bytes),
                "close": close_after,
            },
        )
    return not close_after


def _should_stop(context: WorkerContext) -> bool:
    return context.lifecycle is not None and context.lifecycle.should_stop()


def _cleanup_worker(
    context: WorkerContext, connection: _Connection, thread: threading.Thread
) -> None:
    if context.lifecycle is not None:
        context.lifecycle.cleanup_worker(thread)
    connection.reader.close()
    try:
        connection.client_socket.shutdown(socket.SHUT_WR)
    except OSError:
        pass
    connection.client_socket.close()
    WORKER_LOGGER.debug(
        "Socket closed",
        extra={"event": "connection_closed", "client": connection.client_addr_str},
    )
    clear_correlation_id()


def handle_client(
    client_socket: socket.socket,
    client_address: tuple[str, int],
    context: WorkerContext,
    connection_id: Optional[str] = None,
) -> None:
    """Serve requests on ``client_socket`` until the connection closes."""
    connection = _Connection(
        client_socket=client_socket,
        reader=client_socket.makefile("rb"),
        client_addr_str=f"{client_address[0]}:{client_address[1]}",
        connection_id=connection_id or generate_connection_id(),
    )
    current_thread = threading.current_thread()
    if context.lifecycle is not None:
        context.lifecycle.register_worker(current_thread, client_socket)
    if context.socket_timeout:
        client_socket.settimeout(context.socket_timeout)

    sequence = 0
    set_correlation_id(request_correlation_id(connection.connection_id, sequence))
    WORKER_LOGGER.debug(
        "Connection opened",
        extra={"event": "connection_opened", "client": connection.client_addr_str},
    )
    try:
        while not _should_stop(context):
            sequence += 1
            set_correlation_id(
                request_correlation_id(connection.connection_id, sequence)
            )
            if not serve_request(connection, context):
                break
    except (ConnectionError, TimeoutError, OSError) as error:
        WORKER_LOGGER.error(
            "Error handling client connection",
            extra={
                "event": "connection_error",
                "client": connection.client_addr_str,
                "error_type": type(error).__name__,
            },
        )
    except Exception as error:  # pylint: disable=broad-except
        WORKER_LOGGER.error(
            "Unexpected error in worker",
            extra={
                "event": "worker_error",
                "client": connection.client_addr_str,
                "error_type": type(error).__name__,
                "error": str(error),
            },
            exc_info=True,
        )
    finally:
        _cleanup_worker(context, connection, current_thread)
