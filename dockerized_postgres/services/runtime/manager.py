"""Container lifecycle operations over the Docker SDK.

Every method here is blocking; the orchestrator runs them through
``run_in_executor``. SDK errors are translated into the package's error
taxonomy so callers never see ``docker.errors`` directly.
"""

from typing import Dict, Iterator, Optional

import docker
import structlog
from docker.errors import DockerException
from docker.models.containers import Container
from requests.exceptions import RequestException

from ...models.errors import CreateError, PullError, StartError, TeardownError
from ...models.instance import PullProgress

logger = structlog.get_logger(__name__)


class RuntimeClient:
    """Translates lifecycle intents into Docker control-plane calls."""

    def __init__(self, client: docker.DockerClient):
        self._client = client

    @property
    def client(self) -> docker.DockerClient:
        return self._client

    def pull_image(self, image: str, tag: str) -> Iterator[PullProgress]:
        """Pull an image, yielding decoded progress events.

        The iterator is lazy, finite and cannot be restarted. It ends when the
        stream completes.

        Raises:
            PullError: if the stream reports an error or the request fails
        """
        try:
            stream = self._client.api.pull(image, tag=tag, stream=True, decode=True)
            for event in stream:
                progress = PullProgress.from_event(event)
                if progress.is_error:
                    raise PullError(f"Failed to pull {image}:{tag}: {progress.error}")
                yield progress
        except (DockerException, RequestException) as e:
            raise PullError(f"Failed to pull {image}:{tag}: {e}") from e

    def create_container(
        self,
        image_ref: str,
        name: str,
        container_port: int,
        host_port: int,
        environment: Optional[Dict[str, str]] = None,
        labels: Optional[Dict[str, str]] = None,
    ) -> Container:
        """Create a container with ``container_port`` bound to ``host_port``.

        Raises:
            CreateError: on name collisions, bad image references, etc.
        """
        try:
            container = self._client.containers.create(
                image_ref,
                name=name,
                environment=environment or {},
                ports={f"{container_port}/tcp": host_port},
                labels=labels or {},
            )
        except (DockerException, RequestException) as e:
            raise CreateError(f"Failed to create container {name}: {e}") from e

        logger.debug(
            "Created container",
            container_id=container.id[:12],
            name=name,
            host_port=host_port,
        )
        return container

    def start_container(self, container: Container) -> None:
        """Start a created container.

        Raises:
            StartError: if the daemon reports a start failure
        """
        try:
            container.start()
        except (DockerException, RequestException) as e:
            raise StartError(f"Failed to start container {container.name}: {e}") from e

    def stop_container(self, container: Container, timeout: int = 10) -> None:
        """Stop a running container.

        Raises:
            TeardownError: if the daemon refuses to stop it
        """
        try:
            container.stop(timeout=timeout)
        except (DockerException, RequestException) as e:
            raise TeardownError(
                "stop_container", f"Failed to stop container {container.name}: {e}"
            ) from e

    def delete_container(self, container: Container) -> None:
        """Remove a container together with its anonymous volumes.

        Raises:
            TeardownError: if the daemon refuses to remove it
        """
        try:
            container.remove(v=True, force=True)
        except (DockerException, RequestException) as e:
            raise TeardownError(
                "delete_container", f"Failed to delete container {container.name}: {e}"
            ) from e

    def close(self) -> None:
        """Close the underlying Docker client."""
        self._client.close()
