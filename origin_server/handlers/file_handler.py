"""File serving and upload handlers."""

import logging
import urllib.parse

from origin_server.bootstrap.config import FILES_ENDPOINT_PREFIX
from origin_server.domain.correlation_id import CorrelationLoggerAdapter
from origin_server.domain.file_store import FileStore
from origin_server.domain.http_types import HttpMethod, HttpRequest, HttpResponse
from origin_server.domain.response_builders import (
    created_response,
    not_found_response,
    octet_stream_response,
    server_error_response,
)

FILE_LOGGER = CorrelationLoggerAdapter(
    logging.getLogger("http_server.handlers.file"), {}
)


def file_name_from_path(path: str) -> str:
    """Return the unescaped file name following the files prefix.

    Raises UnicodeDecodeError when the escapes do not decode as UTF-8.
    """
    return urllib.parse.unquote(path[len(FILES_ENDPOINT_PREFIX) :], errors="strict")


def _read_file(request: HttpRequest, store: FileStore, name: str) -> HttpResponse:
    try:
        data = store.read(name)
    except FileNotFoundError:
        FILE_LOGGER.info(
            "File not found",
            extra={"event": "file_not_found", "path": name, "method": "GET"},
        )
        return not_found_response(request.version)
    except OSError as error:
        FILE_LOGGER.error(
            "File read failed",
            extra={
                "event": "file_io_error",
                "path": name,
                "method": "GET",
                "error_type": type(error).__name__,
            },
        )
        return server_error_response(request.version)

    FILE_LOGGER.info(
        "File read operation complete",
        extra={"event": "file_read_complete", "path": name, "bytes_out": len(data)},
    )
    return octet_stream_response(data, request.version)


def _write_file(request: HttpRequest, store: FileStore, name: str) -> HttpResponse:
    # The parser only admits POSTs whose body matches Content-Length.
    body = request.body or b""
    if FILE_LOGGER.logger.isEnabledFor(logging.DEBUG):
        FILE_LOGGER.debug(
            "File write started",
            extra={"event": "file_write_started", "path": name, "bytes_in": len(body)},
        )
    try:
        store.write(name, body)
    except OSError as error:
        FILE_LOGGER.error(
            "File write failed",
            extra={
                "event": "file_io_error",
                "path": name,
                "method": "POST",
                "error_type": type(error).__name__,
            },
        )
        return server_error_response(request.version)

    FILE_LOGGER.info(
        "File write complete",
        extra={"event": "file_write_complete", "path": name, "bytes_in": len(body)},
    )
    return created_response()


def file_response(request: HttpRequest, store: FileStore) -> HttpResponse:
    """Serve or store a file depending on the request method."""
    try:
        name = file_name_from_path(request.path)
    except UnicodeDecodeError:
        FILE_LOGGER.info(
            "File name is not valid UTF-8",
            extra={
                "event": "file_not_found",
                "path": request.path,
                "method": request.method.value,
            },
        )
        if request.method is HttpMethod.POST:
            return server_error_response(request.version)
        return not_found_response(request.version)

    if request.method is HttpMethod.POST:
        return _write_file(request, store, name)
    return _read_file(request, store, name)
