"""Request and response values passed between pipeline stages."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Mapping, Optional


class HttpMethod(str, Enum):
    """Methods accepted by the request parser."""

    GET = "GET"
    POST = "POST"


@dataclass(frozen=True)
class HttpRequest:
    """Represents a parsed and validated HTTP request."""

    request_line: str
    method: HttpMethod
    path: str
    version: str
    headers: Mapping[str, str]
    body: Optional[bytes] = None


@dataclass(frozen=True)
class HttpResponse:
    """Represents an HTTP response before it is rendered to wire bytes."""

    status_line: str
    headers: Mapping[str, str] = field(default_factory=dict)
    body: bytes = b""
