"""Pytest configuration and shared fixtures."""

import pytest
from unittest.mock import AsyncMock, MagicMock

from dockerized_postgres.config import Settings
from dockerized_postgres.config.docker import DockerConfig
from dockerized_postgres.models.instance import ProbeAttempt, PullProgress
from dockerized_postgres.services.ports import PortAllocator
from dockerized_postgres.services.readiness import ReadinessProber
from dockerized_postgres.services.runtime import RuntimeClient


@pytest.fixture(autouse=True)
def clean_docker_env(monkeypatch):
    """Keep the developer's Docker environment out of the tests."""
    for name in ("DOCKER_HOST", "DOCKER_USE_HTTPS", "DOCKER_CERT_PATH"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def test_settings():
    """Settings with short timeouts for unit tests."""
    return Settings(
        connection_timeout=3.0,
        connection_interval=1.0,
        pull_timeout=30.0,
        stop_timeout=1,
    )


@pytest.fixture
def docker_config():
    """Local socket Docker configuration."""
    return DockerConfig(docker_host="unix:///var/run/docker.sock")


@pytest.fixture
def mock_container():
    """Mock docker-py Container."""
    container = MagicMock()
    container.id = "c0ffee1234567890abcdef"
    container.name = "postgres-test"
    return container


@pytest.fixture
def mock_runtime(mock_container):
    """Mock RuntimeClient whose operations all succeed."""
    runtime = MagicMock(spec=RuntimeClient)
    runtime.pull_image.return_value = iter(
        [
            PullProgress(status="Pulling from library/postgres", id="latest"),
            PullProgress(status="Download complete", id="a1b2c3"),
        ]
    )
    runtime.create_container.return_value = mock_container
    runtime.start_container.return_value = None
    runtime.stop_container.return_value = None
    runtime.delete_container.return_value = None
    return runtime


@pytest.fixture
def mock_prober():
    """Mock ReadinessProber that reports ready on the first attempt."""
    prober = MagicMock(spec=ReadinessProber)
    prober.wait_ready = AsyncMock(
        return_value=ProbeAttempt(attempt=1, elapsed=1.0, succeeded=True)
    )
    return prober


@pytest.fixture
def mock_allocator():
    """Mock PortAllocator handing out a fixed port."""
    allocator = MagicMock(spec=PortAllocator)
    allocator.allocate.return_value = 55432
    return allocator


@pytest.fixture
def mock_logger():
    """Injected logger; ``bound`` is what the orchestrator logs through."""
    logger = MagicMock()
    logger.bound = MagicMock()
    logger.bind.return_value = logger.bound
    return logger
