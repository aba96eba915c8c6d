"""Request routing logic."""

import logging

from origin_server.bootstrap.config import (
    ECHO_ENDPOINT_PREFIX,
    FILES_ENDPOINT_PREFIX,
    USER_AGENT_ENDPOINT_PREFIX,
)
from origin_server.domain.correlation_id import CorrelationLoggerAdapter
from origin_server.domain.file_store import FileStore
from origin_server.domain.http_types import HttpRequest, HttpResponse
from origin_server.domain.response_builders import not_found_response
from origin_server.handlers.file_handler import file_response
from origin_server.handlers.system_handlers import (
    handle_echo,
    handle_root,
    handle_user_agent,
)

ROUTER_LOGGER = CorrelationLoggerAdapter(
    logging.getLogger("http_server.pipeline.router"), {}
)


def _matched(route: str) -> None:
    if ROUTER_LOGGER.logger.isEnabledFor(logging.DEBUG):
        ROUTER_LOGGER.debug(
            "Route matched", extra={"event": "route_matched", "route": route}
        )


def route_request(request: HttpRequest, store: FileStore) -> tuple[HttpResponse, bool]:
    """Return the response for ``request`` and whether any route matched.

    Unmatched paths still get the fixed 404 response; the flag only lets
    the caller log the miss.
    """
    path = request.path
    if path == "/":
        _matched("/")
        return handle_root(request), True

    if path.startswith(ECHO_ENDPOINT_PREFIX):
        _matched("/echo/*")
        return handle_echo(request), True

    if path.startswith(USER_AGENT_ENDPOINT_PREFIX):
        _matched("/user-agent")
        return handle_user_agent(request), True

    if path.startswith(FILES_ENDPOINT_PREFIX):
        _matched("/files/*")
        return file_response(request, store), True

    if ROUTER_LOGGER.logger.isEnabledFor(logging.DEBUG):
        ROUTER_LOGGER.debug(
            "No matching route found",
            extra={"route": path, "method": request.method.value},
        )
    return not_found_response(request.version), False
