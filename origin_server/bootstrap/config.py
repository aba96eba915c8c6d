"""Server configuration, protocol limits and CLI argument parsing."""

import argparse
import os
from dataclasses import dataclass


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    return int(value) if value is not None else default


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.lower() in {"1", "true", "yes", "on"}


def _octal(value: str) -> int:
    """Parse a permission mode such as ``600`` or ``0o644``."""
    try:
        mode = int(value, 8)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid octal mode: {value!r}") from exc
    if not 0 <= mode <= 0o777:
        raise argparse.ArgumentTypeError(f"mode out of range: {value!r}")
    return mode


HTTP_VERSION = "HTTP/1.1"
ALLOWED_METHODS = {"GET", "POST"}

MAX_REQUEST_LINE_BYTES = 128
MAX_HEADER_LINE_BYTES = 512
MAX_HEADER_COUNT = 50
MAX_HEADER_BYTES = 1024
MAX_BODY_BYTES = 1_048_576

ECHO_ENDPOINT_PREFIX = "/echo/"
USER_AGENT_ENDPOINT_PREFIX = "/user-agent"
FILES_ENDPOINT_PREFIX = "/files/"

DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 4221
DEFAULT_SOCKET_TIMEOUT = _env_int("HTTP_SERVER_SOCKET_TIMEOUT", 60)
DEFAULT_SHUTDOWN_GRACE_SECONDS = _env_int("HTTP_SERVER_SHUTDOWN_GRACE_SECONDS", 30)
DEFAULT_FILE_MODE = "600"


@dataclass(frozen=True)
class ServerConfig:
    """Values handed from bootstrap to the accept loop and its workers."""

    directory: str
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    socket_timeout: int = DEFAULT_SOCKET_TIMEOUT
    shutdown_grace_seconds: int = DEFAULT_SHUTDOWN_GRACE_SECONDS
    file_mode: int = 0o600

    @classmethod
    def from_args(cls, args: argparse.Namespace) -> "ServerConfig":
        """Build the configuration from parsed CLI arguments."""
        return cls(
            directory=args.directory,
            host=args.host,
            port=args.port,
            socket_timeout=args.socket_timeout,
            shutdown_grace_seconds=args.shutdown_grace_seconds,
            file_mode=args.file_mode,
        )


def parse_cli_args(argv: list[str]) -> argparse.Namespace:
    """Return parsed CLI arguments for server configuration."""
    parser = argparse.ArgumentParser(description="Minimal HTTP/1.1 origin server")
    parser.add_argument(
        "--directory",
        default=os.getenv("HTTP_SERVER_DIRECTORY", ""),
        help="Directory served by the /files/ endpoint",
    )
    parser.add_argument("--host", default=os.getenv("HTTP_SERVER_HOST", DEFAULT_HOST))
    parser.add_argument(
        "--port", type=int, default=_env_int("HTTP_SERVER_PORT", DEFAULT_PORT)
    )
    parser.add_argument(
        "--log-level",
        default=os.getenv("HTTP_SERVER_LOG_LEVEL", "INFO").upper(),
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        type=str.upper,
    )
    parser.add_argument(
        "--log-destination",
        default=os.getenv("HTTP_SERVER_LOG_DESTINATION", "stdout"),
        help="stdout or a file path",
    )
    parser.add_argument(
        "--log-json",
        action=argparse.BooleanOptionalAction,
        default=_env_bool("HTTP_SERVER_LOG_JSON", True),
        help="Emit structured JSON log lines",
    )
    parser.add_argument(
        "--socket-timeout",
        type=int,
        default=DEFAULT_SOCKET_TIMEOUT,
        help="Seconds a connection may stay idle while a request is read",
    )
    parser.add_argument(
        "--shutdown-grace-seconds",
        type=int,
        default=DEFAULT_SHUTDOWN_GRACE_SECONDS,
        help="Grace period in seconds for graceful shutdown",
    )
    parser.add_argument(
        "--file-mode",
        type=_octal,
        default=_octal(os.getenv("HTTP_SERVER_FILE_MODE", DEFAULT_FILE_MODE)),
        help="Octal permission bits for uploaded files (default: 600)",
    )
    return parser.parse_args(argv)
