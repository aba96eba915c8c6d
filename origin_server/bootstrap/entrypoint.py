"""Process bootstrap: CLI, logging, signal handling and the accept loop."""

import logging
import signal
import sys
from typing import Optional

from origin_server.bootstrap.config import ServerConfig, parse_cli_args
from origin_server.bootstrap.logging_setup import configure_logging
from origin_server.domain.correlation_id import CorrelationLoggerAdapter
from origin_server.lifecycle.state import ServerLifecycle
from origin_server.transport.accept_loop import run_server

SERVER_LOGGER = CorrelationLoggerAdapter(logging.getLogger("http_server.server"), {})


def install_signal_handlers(lifecycle: ServerLifecycle) -> None:
    """Turn SIGTERM and SIGINT into a graceful shutdown."""

    def shutdown_handler(signum: int, _frame) -> None:
        SERVER_LOGGER.info(
            "Received shutdown signal",
            extra={"event": "shutdown_signal", "signal": signum},
        )
        lifecycle.begin_shutdown()

    signal.signal(signal.SIGTERM, shutdown_handler)
    signal.signal(signal.SIGINT, shutdown_handler)


def main(argv: Optional[list[str]] = None) -> None:
    """Start the HTTP server and spawn a worker thread per connection."""
    args = parse_cli_args(sys.argv[1:] if argv is None else argv)
    configure_logging(args.log_level, args.log_destination, args.log_json)

    config = ServerConfig.from_args(args)
    lifecycle = ServerLifecycle()
    install_signal_handlers(lifecycle)

    SERVER_LOGGER.info(
        "Starting HTTP server",
        extra={
            "event": "server_starting",
            "host": config.host,
            "port": config.port,
            "directory": config.directory,
            "socket_timeout": config.socket_timeout,
            "shutdown_grace_seconds": config.shutdown_grace_seconds,
        },
    )
    run_server(config, lifecycle)
