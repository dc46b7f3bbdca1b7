"""Services for provisioning a dockerized postgres instance.

- ports.py: Host port allocation
- runtime/: Docker client factory and container operations
- readiness.py: SELECT 1 readiness polling
- orchestrator.py: Lifecycle state machine tying the above together
"""

from .orchestrator import DockerizedPostgres
from .ports import DEFAULT_POSTGRES_PORT, PortAllocator, port_allocator
from .readiness import ReadinessProber
from .runtime import DockerClientFactory, RuntimeClient

__all__ = [
    "DockerizedPostgres",
    "DEFAULT_POSTGRES_PORT",
    "PortAllocator",
    "port_allocator",
    "ReadinessProber",
    "DockerClientFactory",
    "RuntimeClient",
]
