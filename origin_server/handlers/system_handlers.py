"""Handlers for the root, echo and user-agent routes."""

import logging

from origin_server.bootstrap.config import ECHO_ENDPOINT_PREFIX
from origin_server.domain.correlation_id import CorrelationLoggerAdapter
from origin_server.domain.http_types import HttpRequest, HttpResponse
from origin_server.domain.response_builders import empty_response, text_response

SYSTEM_LOGGER = CorrelationLoggerAdapter(
    logging.getLogger("http_server.handlers.system"), {}
)


def handle_root(request: HttpRequest) -> HttpResponse:
    """Handle ``/`` with an empty 200."""
    return empty_response(request.version)


def handle_echo(request: HttpRequest) -> HttpResponse:
    """Handle /echo/ requests by returning the raw path suffix."""
    content = request.path[len(ECHO_ENDPOINT_PREFIX) :]
    if SYSTEM_LOGGER.logger.isEnabledFor(logging.DEBUG):
        SYSTEM_LOGGER.debug(
            "Echo request processed",
            extra={"event": "echo_request", "content_length": len(content)},
        )
    return text_response(content, request.version)


def handle_user_agent(request: HttpRequest) -> HttpResponse:
    """Handle /user-agent requests by returning the User-Agent header."""
    agent = request.headers.get("User-Agent", "")
    if SYSTEM_LOGGER.logger.isEnabledFor(logging.DEBUG):
        SYSTEM_LOGGER.debug(
            "User-agent request processed", extra={"event": "user_agent_request"}
        )
    return text_response(agent, request.version)
