"""Read-only context shared by worker threads."""

from dataclasses import dataclass
from typing import Optional

from origin_server.domain.file_store import FileStore
from origin_server.lifecycle.state import ServerLifecycle


@dataclass(frozen=True)
class WorkerContext:
    """Dependencies handed to every connection worker."""

    store: FileStore
    socket_timeout: Optional[float] = None
    lifecycle: Optional[ServerLifecycle] = None
