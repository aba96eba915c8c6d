"""Server lifecycle state management."""

import logging
import socket
import threading
import time

from origin_server.domain.correlation_id import CorrelationLoggerAdapter

LIFECYCLE_LOGGER = CorrelationLoggerAdapter(
    logging.getLogger("http_server.lifecycle"), {}
)


class ServerLifecycle:
    """Tracks the shutdown flag and the live connection workers."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._stop_event = threading.Event()
        self._workers: dict[threading.Thread, socket.socket] = {}

    def should_stop(self) -> bool:
        """Check if the server has begun shutting down."""
        return self._stop_event.is_set()

    def begin_shutdown(self) -> None:
        """Stop accepting connections and let workers finish their request."""
        self._stop_event.set()
        LIFECYCLE_LOGGER.info(
            "Beginning graceful shutdown", extra={"event": "shutdown"}
        )

    def register_worker(
        self, thread: threading.Thread, client_socket: socket.socket
    ) -> None:
        """Track a worker and the socket it owns."""
        with self._lock:
            self._workers[thread] = client_socket

    def cleanup_worker(self, thread: threading.Thread) -> None:
        """Stop tracking a finished worker."""
        with self._lock:
            self._workers.pop(thread, None)

    def active_worker_count(self) -> int:
        """Return the number of currently tracked worker threads."""
        with self._lock:
            return len(self._workers)

    def wait_for_workers(self, timeout: float) -> bool:
        """Wait for workers to finish; shut down stragglers' sockets on timeout."""
        deadline = time.monotonic() + timeout
        while True:
            with self._lock:
                self._workers = {
                    thread: sock
                    for thread, sock in self._workers.items()
                    if thread.is_alive()
                }
                active_workers = list(self._workers)
            if not active_workers:
                return True
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                LIFECYCLE_LOGGER.warning(
                    "Shutdown timeout exceeded",
                    extra={
                        "event": "shutdown_timeout",
                        "remaining_workers": len(active_workers),
                    },
                )
                self._abort_remaining()
                return False
            for worker in active_workers:
                worker.join(timeout=min(0.1, remaining))
                if time.monotonic() >= deadline:
                    break

    def _abort_remaining(self) -> None:
        with self._lock:
            sockets = list(self._workers.values())
        for client_socket in sockets:
            try:
                client_socket.shutdown(socket.SHUT_RDWR)
            except OSError:
                pass
