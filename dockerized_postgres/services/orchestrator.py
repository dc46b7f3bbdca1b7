"""Lifecycle orchestration for a throwaway postgres container.

The orchestrator sequences:
1. Port allocation
2. Image pull (fatal on failure)
3. Container creation (fatal on failure)
4. Container start (reported only)
5. Readiness wait (fatal on timeout, container is left running)
6. before_hook (reported only)

and on shutdown:
1. after_hook (reported only)
2. Container stop, then delete (each reported only)

Usage::

    pg = DockerizedPostgres(before_hook=migrate, after_hook=close_pool)
    await pg.start()
    # ... tests talk to localhost:pg.port ...
    await pg.shutdown()
"""

import asyncio
import threading
from contextlib import contextmanager
from typing import Any, Awaitable, Callable, Optional, Union

import structlog
from docker.models.containers import Container

from ..config import Settings, settings as default_settings
from ..config.docker import DockerConfig
from ..models.errors import (
    DockerizedPostgresError,
    HookError,
    LifecycleError,
    PullError,
)
from ..models.instance import (
    InstanceDescriptor,
    LifecycleState,
    PostgresCredentials,
    generate_instance_name,
)
from ..utils.steps import best_effort, run_in_executor
from .ports import DEFAULT_POSTGRES_PORT, PortAllocator
from .ports import port_allocator as shared_port_allocator
from .readiness import ReadinessProber
from .runtime import DockerClientFactory, RuntimeClient

Hook = Callable[[int], Union[None, Awaitable[None]]]

_PULL_DONE = object()


def _hook_error(operation: str, error: Exception) -> HookError:
    return HookError(f"Failed to execute {operation}: {error}")


class DockerizedPostgres:
    """Provisions one ephemeral postgres container for a test run.

    One instance owns exactly one InstanceDescriptor. After ``shutdown()``
    the instance is spent; build a new one for the next run.
    """

    def __init__(
        self,
        before_hook: Optional[Hook] = None,
        after_hook: Optional[Hook] = None,
        tag: Optional[str] = None,
        connection_timeout: Optional[float] = None,
        connection_interval: Optional[float] = None,
        logger: Any = None,
        credentials: Optional[PostgresCredentials] = None,
        settings: Optional[Settings] = None,
        docker_config: Optional[DockerConfig] = None,
        port_allocator: Optional[PortAllocator] = None,
        runtime_client: Optional[RuntimeClient] = None,
        prober: Optional[ReadinessProber] = None,
    ):
        """Initialize the orchestrator.

        Args:
            before_hook: Called with the host port once postgres is ready
            after_hook: Called with the host port at the start of shutdown
            tag: postgres image tag (defaults to ``settings.postgres_tag``)
            connection_timeout: Readiness budget in seconds
            connection_interval: Sleep between readiness probes in seconds
            logger: structlog-style logger; events are bound to the instance name
            credentials: Database credentials, defaults built from settings
            settings: Settings object, defaults to the global settings
            docker_config: Docker endpoint settings, defaults to ``settings.docker``
            port_allocator: Host port allocator, defaults to the process registry
            runtime_client: Pre-built runtime client; built on start when omitted
            prober: Readiness prober

        Raises:
            ConfigurationError: if the Docker endpoint configuration is malformed
        """
        self._settings = settings or default_settings
        self._before_hook = before_hook
        self._after_hook = after_hook
        self._connection_timeout = (
            connection_timeout
            if connection_timeout is not None
            else self._settings.connection_timeout
        )
        self._connection_interval = (
            connection_interval
            if connection_interval is not None
            else self._settings.connection_interval
        )
        self._credentials = credentials or PostgresCredentials(
            host=self._settings.postgres_host,
            user=self._settings.postgres_user,
            password=self._settings.postgres_password,
            database=self._settings.postgres_db,
        )

        self._descriptor = InstanceDescriptor(
            name=generate_instance_name(self._settings.container_name_prefix),
            image=self._settings.postgres_image,
            tag=tag or self._settings.postgres_tag,
        )

        self._log = (logger or structlog.get_logger(__name__)).bind(
            instance=self._descriptor.name
        )

        # Resolved now so a malformed DOCKER_HOST fails before any step runs
        self._docker_config = docker_config or self._settings.docker
        self._endpoint = self._docker_config.resolve_endpoint()

        self._port_allocator = port_allocator or shared_port_allocator
        self._runtime = runtime_client
        self._owns_runtime = runtime_client is None
        self._prober = prober or ReadinessProber(
            connect_timeout=self._settings.probe_connect_timeout, log=self._log
        )
        self._container: Optional[Container] = None

    # -- read-only views -----------------------------------------------------

    @property
    def name(self) -> str:
        return self._descriptor.name

    @property
    def port(self) -> Optional[int]:
        return self._descriptor.port

    @property
    def state(self) -> LifecycleState:
        return self._descriptor.state

    @property
    def descriptor(self) -> InstanceDescriptor:
        return self._descriptor

    @property
    def credentials(self) -> PostgresCredentials:
        return self._credentials

    @property
    def connection_dsn(self) -> str:
        """libpq connection string for the running instance."""
        if self._descriptor.port is None:
            raise LifecycleError("No port has been allocated yet; call start() first")
        return self._credentials.dsn(self._descriptor.port)

    # -- lifecycle -----------------------------------------------------------

    async def start(self) -> None:
        """Bring up postgres and run ``before_hook``.

        Raises:
            LifecycleError: if this instance was already started
            AllocationError: if no host port could be allocated
            PullError: if the image could not be pulled
            CreateError: if the container could not be created
            ReadinessTimeoutError: if postgres never answered ``SELECT 1``;
                the container keeps running and ``shutdown()`` must still be called
        """
        descriptor = self._descriptor
        if descriptor.state is not LifecycleState.CREATED:
            raise LifecycleError(
                f"Cannot start instance in state {descriptor.state.value}; "
                "create a new DockerizedPostgres instead"
            )

        with self._fatal_phase("allocate_port"):
            descriptor.port = self._port_allocator.allocate(self._settings.preferred_port)

        with self._fatal_phase("connect"):
            runtime = self._ensure_runtime()

        descriptor.state = LifecycleState.PULLING
        with self._fatal_phase("pull_image"):
            await self._pull_image(runtime)

        descriptor.state = LifecycleState.STARTING
        with self._fatal_phase("create_container"):
            self._container = await run_in_executor(
                runtime.create_container,
                descriptor.image_ref,
                descriptor.name,
                DEFAULT_POSTGRES_PORT,
                descriptor.port,
                self._credentials.container_environment(),
                descriptor.labels,
            )
            descriptor.container_id = self._container.id

        outcome = await best_effort(
            "start_container",
            run_in_executor,
            runtime.start_container,
            self._container,
            log=self._log,
        )
        if outcome.succeeded:
            self._log.info("Started postgres instance", port=descriptor.port)

        descriptor.state = LifecycleState.AWAITING_READY
        with self._fatal_phase("wait_ready"):
            await self._prober.wait_ready(
                descriptor.port,
                self._credentials,
                timeout=self._connection_timeout,
                interval=self._connection_interval,
            )
        descriptor.state = LifecycleState.READY

        if self._before_hook is not None:
            self._log.info("Going to call before_hook")
            outcome = await best_effort(
                "before_hook",
                self._before_hook,
                descriptor.port,
                log=self._log,
                wrap=_hook_error,
            )
            if outcome.succeeded:
                self._log.info("Called before_hook")

        descriptor.state = LifecycleState.ACTIVE

    async def shutdown(self) -> None:
        """Run ``after_hook`` and remove the container.

        Every step is best-effort: failures are logged and teardown carries on.

        Raises:
            LifecycleError: if this instance was already shut down
        """
        descriptor = self._descriptor
        if descriptor.state is LifecycleState.STOPPED:
            raise LifecycleError("Instance has already been shut down")

        descriptor.state = LifecycleState.STOPPING
        try:
            # No port means start() never got far enough to hand one out
            if self._after_hook is not None and descriptor.port is not None:
                self._log.info("Going to call after_hook")
                outcome = await best_effort(
                    "after_hook",
                    self._after_hook,
                    descriptor.port,
                    log=self._log,
                    wrap=_hook_error,
                )
                if outcome.succeeded:
                    self._log.info("Called after_hook")

            if self._container is not None:
                await best_effort(
                    "stop_container",
                    run_in_executor,
                    self._runtime.stop_container,
                    self._container,
                    self._settings.stop_timeout,
                    log=self._log,
                )
                await best_effort(
                    "delete_container",
                    run_in_executor,
                    self._runtime.delete_container,
                    self._container,
                    log=self._log,
                )
        finally:
            self._port_allocator.release(descriptor.port)
            if self._owns_runtime and self._runtime is not None:
                await best_effort("close_client", self._runtime.close, log=self._log)
            self._container = None
            descriptor.state = LifecycleState.STOPPED

        self._log.info("Stopped postgres instance", port=descriptor.port)

    async def __aenter__(self) -> "DockerizedPostgres":
        await self.start()
        return self

    async def __aexit__(self, *args) -> None:
        await self.shutdown()

    # -- helpers -------------------------------------------------------------

    def _ensure_runtime(self) -> RuntimeClient:
        if self._runtime is None:
            client = DockerClientFactory.create(
                self._endpoint, timeout=self._docker_config.docker_timeout
            )
            self._runtime = RuntimeClient(client)
        return self._runtime

    async def _pull_image(self, runtime: RuntimeClient) -> None:
        """Drain the pull stream, bounded by ``settings.pull_timeout``."""
        descriptor = self._descriptor
        events = runtime.pull_image(descriptor.image, descriptor.tag)
        abandoned = threading.Event()
        loop = asyncio.get_running_loop()
        deadline = loop.time() + self._settings.pull_timeout

        def advance():
            progress = next(events, _PULL_DONE)
            if abandoned.is_set():
                events.close()
            return progress

        while True:
            remaining = deadline - loop.time()
            if remaining <= 0:
                self._abandon_pull(events, abandoned)
                raise PullError(
                    f"Pull of {descriptor.image_ref} did not finish within "
                    f"{self._settings.pull_timeout}s"
                )
            try:
                progress = await asyncio.wait_for(run_in_executor(advance), remaining)
            except asyncio.TimeoutError:
                self._abandon_pull(events, abandoned)
                raise PullError(
                    f"Pull of {descriptor.image_ref} did not finish within "
                    f"{self._settings.pull_timeout}s"
                ) from None
            if progress is _PULL_DONE:
                break
            self._log.debug(
                "Pull progress",
                status=progress.status,
                layer=progress.id,
                progress=progress.progress,
            )

        self._log.info("Pulled image", image=descriptor.image_ref)

    def _abandon_pull(self, events, abandoned: threading.Event) -> None:
        """Close the pull stream, or leave it to the worker still reading it."""
        abandoned.set()
        try:
            events.close()
        except ValueError:
            # Generator is running in the executor; advance() closes it on return
            self._log.debug("Pull stream still busy, closing after current read")

    @contextmanager
    def _fatal_phase(self, phase: str):
        """Log a fatal start failure with the phase it happened in, then re-raise."""
        try:
            yield
        except Exception as e:
            if isinstance(e, DockerizedPostgresError):
                error_type = e.error_type.value
            else:
                error_type = type(e).__name__
            self._log.error(
                "Failed to start postgres instance",
                phase=phase,
                error=str(e),
                error_type=error_type,
                state=self._descriptor.state.value,
            )
            raise
