"""Docker client factory."""

import docker
import docker.tls
import structlog
from docker.errors import DockerException

from ...config.docker import DockerEndpoint, RemoteEndpoint
from ...models.errors import ConfigurationError

logger = structlog.get_logger(__name__)


class DockerClientFactory:
    """Builds docker-py clients for a resolved endpoint."""

    @staticmethod
    def create(endpoint: DockerEndpoint, timeout: int = 120) -> docker.DockerClient:
        """Create a Docker client for a local socket or remote endpoint.

        Raises:
            ConfigurationError: if the SDK rejects the endpoint or TLS material
        """
        tls = None
        if isinstance(endpoint, RemoteEndpoint) and endpoint.tls is not None:
            tls = docker.tls.TLSConfig(
                client_cert=(
                    str(endpoint.tls.client_cert),
                    str(endpoint.tls.client_key),
                ),
                ca_cert=str(endpoint.tls.ca_cert),
                verify=True,
            )

        try:
            client = docker.DockerClient(
                base_url=endpoint.base_url, tls=tls, timeout=timeout
            )
        except DockerException as e:
            raise ConfigurationError(
                f"Unable to create Docker client for {endpoint.base_url}: {e}"
            ) from e

        logger.debug(
            "Docker client created",
            base_url=endpoint.base_url,
            tls=tls is not None,
        )
        return client
