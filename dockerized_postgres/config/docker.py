"""Docker endpoint configuration.

Resolves DOCKER_HOST / DOCKER_USE_HTTPS / DOCKER_CERT_PATH into either a
local unix socket or a remote TCP endpoint with optional TLS material.
"""

import re
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

from pydantic import Field
from pydantic_settings import BaseSettings

from ..models.errors import ConfigurationError, ErrorDetail

DEFAULT_SOCKET_PATH = "/var/run/docker.sock"

_REMOTE_HOST_PATTERN = re.compile(r"^(?:(?:tcp|http|https)://)?([^:/\s]+):([0-9]+)/?$")


@dataclass(frozen=True)
class TlsMaterial:
    """Paths to the client certificate bundle for a TLS endpoint."""

    ca_cert: Path
    client_cert: Path
    client_key: Path


@dataclass(frozen=True)
class LocalSocket:
    """Docker daemon reachable through a unix socket."""

    path: str = DEFAULT_SOCKET_PATH

    @property
    def base_url(self) -> str:
        return f"unix://{self.path}"


@dataclass(frozen=True)
class RemoteEndpoint:
    """Docker daemon reachable over TCP, optionally with TLS."""

    host: str
    port: int
    tls: Optional[TlsMaterial] = None

    @property
    def protocol(self) -> str:
        return "https" if self.tls else "http"

    @property
    def base_url(self) -> str:
        return f"tcp://{self.host}:{self.port}"


DockerEndpoint = Union[LocalSocket, RemoteEndpoint]


class DockerConfig(BaseSettings):
    """Docker daemon connection settings."""

    docker_host: Optional[str] = Field(default=None, alias="docker_host")
    docker_use_https: bool = Field(default=False, alias="docker_use_https")
    docker_cert_path: Optional[str] = Field(default=None, alias="docker_cert_path")
    docker_timeout: int = Field(default=120, ge=1, le=3600, alias="docker_timeout")

    class Config:
        env_prefix = ""
        extra = "ignore"

    def resolve_endpoint(self) -> DockerEndpoint:
        """Resolve the configured endpoint, failing fast on malformed input."""
        host = (self.docker_host or "").strip()

        if not host:
            return LocalSocket()

        if host.startswith("unix://"):
            return LocalSocket(path=host[len("unix://"):] or DEFAULT_SOCKET_PATH)

        match = _REMOTE_HOST_PATTERN.match(host)
        if not match:
            raise ConfigurationError(
                "DOCKER_HOST env variable should be something like tcp://localhost:1234",
                details=[ErrorDetail(field="docker_host", message=f"got {host!r}")],
            )

        port = int(match.group(2))
        if not 1 <= port <= 65535:
            raise ConfigurationError(
                f"DOCKER_HOST port out of range: {port}",
                details=[ErrorDetail(field="docker_host", message=f"got {host!r}")],
            )

        tls = self._load_tls_material() if self.docker_use_https else None
        return RemoteEndpoint(host=match.group(1), port=port, tls=tls)

    def _load_tls_material(self) -> TlsMaterial:
        if not self.docker_cert_path:
            raise ConfigurationError(
                "DOCKER_CERT_PATH environment variable is not set.",
                details=[ErrorDetail(field="docker_cert_path", message="required for https")],
            )

        cert_dir = Path(self.docker_cert_path)
        material = TlsMaterial(
            ca_cert=cert_dir / "ca.pem",
            client_cert=cert_dir / "cert.pem",
            client_key=cert_dir / "key.pem",
        )
        missing = [
            str(path)
            for path in (material.ca_cert, material.client_cert, material.client_key)
            if not path.is_file()
        ]
        if missing:
            raise ConfigurationError(
                f"Unable to read docker certificates: {', '.join(missing)}",
                details=[
                    ErrorDetail(field="docker_cert_path", message=f"missing {path}")
                    for path in missing
                ],
            )
        return material
