"""Host port allocation.

The returned port is a snapshot: nothing holds it between allocation and
Docker binding it, so an unrelated process can still grab it in between.
Within one process, ports handed out and not yet released are never handed
out twice.
"""

import socket
import threading
from typing import Optional, Set

import structlog

from ..models.errors import AllocationError

logger = structlog.get_logger(__name__)

DEFAULT_POSTGRES_PORT = 5432


class PortAllocator:
    """Hands out free host ports, remembering live allocations."""

    def __init__(self, max_attempts: int = 10, bind_host: str = "0.0.0.0"):
        self._max_attempts = max_attempts
        self._bind_host = bind_host
        self._claimed: Set[int] = set()
        self._lock = threading.Lock()

    @property
    def claimed(self) -> Set[int]:
        """Ports currently held by live instances in this process."""
        with self._lock:
            return set(self._claimed)

    def allocate(self, preferred: Optional[int] = DEFAULT_POSTGRES_PORT) -> int:
        """Return a free host port, preferring ``preferred``.

        Raises:
            AllocationError: if no port could be bound within the attempt budget
        """
        with self._lock:
            if preferred and preferred not in self._claimed and self._is_free(preferred):
                self._claimed.add(preferred)
                logger.debug("Allocated preferred port", port=preferred)
                return preferred

            for attempt in range(1, self._max_attempts + 1):
                try:
                    port = self._ephemeral_port()
                except OSError as e:
                    logger.debug(
                        "Ephemeral port bind failed", attempt=attempt, error=str(e)
                    )
                    continue
                if port in self._claimed:
                    continue
                self._claimed.add(port)
                logger.debug(
                    "Allocated ephemeral port",
                    port=port,
                    preferred=preferred,
                    attempt=attempt,
                )
                return port

        raise AllocationError(
            f"Unable to allocate a host port after {self._max_attempts} attempts"
        )

    def release(self, port: Optional[int]) -> None:
        """Forget a claim so the port can be handed out again."""
        if port is None:
            return
        with self._lock:
            self._claimed.discard(port)

    def _is_free(self, port: int) -> bool:
        with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
            try:
                sock.bind((self._bind_host, port))
            except OSError:
                return False
        return True

    def _ephemeral_port(self) -> int:
        with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
            sock.bind((self._bind_host, 0))
            return sock.getsockname()[1]


# Process-wide registry of live allocations
port_allocator = PortAllocator()
