"""Instance data models.

An InstanceDescriptor tracks the one container an orchestrator owns for a
single start/shutdown cycle. Probe attempts and pull progress events are
ephemeral and only ever logged.
"""

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional

DEFAULT_IDENTIFIER = "postgres"


class LifecycleState(str, Enum):
    """Lifecycle state of a dockerized postgres instance."""

    CREATED = "created"
    PULLING = "pulling"
    STARTING = "starting"
    AWAITING_READY = "awaiting_ready"
    READY = "ready"
    ACTIVE = "active"
    STOPPING = "stopping"
    STOPPED = "stopped"


def generate_instance_name(prefix: str = DEFAULT_IDENTIFIER) -> str:
    """Generate a collision-resistant container name."""
    return f"{prefix}-{uuid.uuid4().hex}"


@dataclass(frozen=True)
class PostgresCredentials:
    """Fixed connection parameters for the throwaway database."""

    host: str = "localhost"
    user: str = DEFAULT_IDENTIFIER
    password: str = DEFAULT_IDENTIFIER
    database: str = DEFAULT_IDENTIFIER

    def dsn(self, port: int) -> str:
        """Render a libpq connection string for the given host port."""
        return (
            f"host={self.host} port={port} user={self.user} "
            f"password={self.password} dbname={self.database}"
        )

    def container_environment(self) -> Dict[str, str]:
        """Environment variables understood by the postgres image."""
        return {
            "POSTGRES_USER": self.user,
            "POSTGRES_PASSWORD": self.password,
            "POSTGRES_DB": self.database,
        }


@dataclass
class InstanceDescriptor:
    """In-memory record of one ephemeral postgres container."""

    name: str
    image: str
    tag: str
    port: Optional[int] = None
    state: LifecycleState = LifecycleState.CREATED
    container_id: Optional[str] = None
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def image_ref(self) -> str:
        return f"{self.image}:{self.tag}"

    @property
    def labels(self) -> Dict[str, str]:
        """Docker labels that let an external reaper find leftovers."""
        return {
            "com.dockerized-postgres.managed": "true",
            "com.dockerized-postgres.instance": self.name,
            "com.dockerized-postgres.port": str(self.port or ""),
            "com.dockerized-postgres.created-at": self.created_at.isoformat(),
        }


@dataclass
class ProbeAttempt:
    """Outcome of a single readiness probe."""

    attempt: int
    elapsed: float
    succeeded: bool
    error: Optional[str] = None


@dataclass
class PullProgress:
    """One decoded event from the image pull stream."""

    status: Optional[str] = None
    id: Optional[str] = None
    progress: Optional[str] = None
    error: Optional[str] = None

    @property
    def is_error(self) -> bool:
        return self.error is not None

    @classmethod
    def from_event(cls, event: Dict[str, Any]) -> "PullProgress":
        error = event.get("error")
        if error is None and isinstance(event.get("errorDetail"), dict):
            error = event["errorDetail"].get("message")
        return cls(
            status=event.get("status"),
            id=event.get("id"),
            progress=event.get("progress"),
            error=error,
        )
