"""Parse failures that already know their literal wire response."""

from origin_server.domain.response_builders import (
    DEFAULT_VERSION,
    malformed_request_bytes,
    payload_too_large_bytes,
    server_error_bytes,
)


class RequestParseError(Exception):
    """Base class for failures detected while reading a request."""

    status_code = 0

    def __init__(self, reason: str, version: str = DEFAULT_VERSION) -> None:
        super().__init__(reason)
        self.reason = reason
        self.version = version

    def to_bytes(self) -> bytes:
        """Return the response that must be written before closing."""
        raise NotImplementedError


class MalformedRequest(RequestParseError):
    """Raised when the request violates syntax or size rules."""

    status_code = 400

    def to_bytes(self) -> bytes:
        return malformed_request_bytes(self.version)


class PayloadTooLarge(RequestParseError):
    """Raised when the declared body exceeds the allowed size."""

    status_code = 413

    def to_bytes(self) -> bytes:
        return payload_too_large_bytes(self.version)


class ParseServerError(RequestParseError):
    """Raised when the body cannot be read as declared."""

    status_code = 500

    def to_bytes(self) -> bytes:
        return server_error_bytes(self.version)
