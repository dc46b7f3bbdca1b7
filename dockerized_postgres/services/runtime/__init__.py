"""Container runtime services.

This package provides Docker container management functionality split into:
- client.py: Docker client factory for local socket or remote TLS endpoints
- manager.py: Container lifecycle operations (pull, create, start, stop, delete)
"""

from .client import DockerClientFactory
from .manager import RuntimeClient

__all__ = [
    "DockerClientFactory",
    "RuntimeClient",
]
