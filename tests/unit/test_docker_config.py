"""Unit tests for Docker endpoint resolution and settings."""

import pytest
from pydantic import ValidationError as PydanticValidationError

from dockerized_postgres.config import Settings
from dockerized_postgres.config.docker import (
    DEFAULT_SOCKET_PATH,
    DockerConfig,
    LocalSocket,
    RemoteEndpoint,
)
from dockerized_postgres.models.errors import ConfigurationError, ErrorType


@pytest.fixture
def cert_dir(tmp_path):
    """Directory holding a complete (fake) client certificate bundle."""
    for name in ("ca.pem", "cert.pem", "key.pem"):
        (tmp_path / name).write_text("-----BEGIN CERTIFICATE-----\n")
    return tmp_path


class TestLocalSocket:
    """DOCKER_HOST unset or unix://."""

    def test_unset_host_uses_default_socket(self):
        endpoint = DockerConfig().resolve_endpoint()

        assert endpoint == LocalSocket(path=DEFAULT_SOCKET_PATH)
        assert endpoint.base_url == "unix:///var/run/docker.sock"

    def test_empty_unix_path_uses_default_socket(self):
        endpoint = DockerConfig(docker_host="unix://").resolve_endpoint()

        assert endpoint.path == DEFAULT_SOCKET_PATH

    def test_explicit_unix_path(self):
        endpoint = DockerConfig(docker_host="unix:///tmp/docker.sock").resolve_endpoint()

        assert endpoint == LocalSocket(path="/tmp/docker.sock")

    def test_reads_environment(self, monkeypatch):
        monkeypatch.setenv("DOCKER_HOST", "unix:///run/user/1000/docker.sock")

        endpoint = DockerConfig().resolve_endpoint()

        assert endpoint.path == "/run/user/1000/docker.sock"


class TestRemoteEndpoint:
    """DOCKER_HOST pointing at a TCP endpoint."""

    def test_tcp_endpoint(self):
        endpoint = DockerConfig(docker_host="tcp://localhost:2375").resolve_endpoint()

        assert isinstance(endpoint, RemoteEndpoint)
        assert endpoint.host == "localhost"
        assert endpoint.port == 2375
        assert endpoint.tls is None
        assert endpoint.protocol == "http"
        assert endpoint.base_url == "tcp://localhost:2375"

    def test_scheme_is_optional(self):
        endpoint = DockerConfig(docker_host="10.0.0.5:2375").resolve_endpoint()

        assert endpoint == RemoteEndpoint(host="10.0.0.5", port=2375)

    @pytest.mark.parametrize(
        "docker_host",
        ["tcp://localhost", "localhost", "tcp://:2375", "tcp://host:port", "tcp://host:0"],
    )
    def test_malformed_host_fails_fast(self, docker_host):
        with pytest.raises(ConfigurationError) as exc_info:
            DockerConfig(docker_host=docker_host).resolve_endpoint()

        assert exc_info.value.error_type is ErrorType.CONFIGURATION
        assert exc_info.value.details[0].field == "docker_host"

    def test_https_requires_cert_path(self):
        config = DockerConfig(docker_host="tcp://docker:2376", docker_use_https=True)

        with pytest.raises(ConfigurationError, match="DOCKER_CERT_PATH"):
            config.resolve_endpoint()

    def test_https_with_certificates(self, cert_dir):
        config = DockerConfig(
            docker_host="tcp://docker:2376",
            docker_use_https=True,
            docker_cert_path=str(cert_dir),
        )

        endpoint = config.resolve_endpoint()

        assert endpoint.protocol == "https"
        assert endpoint.tls.ca_cert == cert_dir / "ca.pem"
        assert endpoint.tls.client_cert == cert_dir / "cert.pem"
        assert endpoint.tls.client_key == cert_dir / "key.pem"

    def test_https_with_missing_certificate(self, cert_dir):
        (cert_dir / "key.pem").unlink()
        config = DockerConfig(
            docker_host="tcp://docker:2376",
            docker_use_https=True,
            docker_cert_path=str(cert_dir),
        )

        with pytest.raises(ConfigurationError, match="key.pem"):
            config.resolve_endpoint()

    def test_https_flag_from_environment(self, monkeypatch, cert_dir):
        monkeypatch.setenv("DOCKER_HOST", "tcp://docker:2376")
        monkeypatch.setenv("DOCKER_USE_HTTPS", "1")
        monkeypatch.setenv("DOCKER_CERT_PATH", str(cert_dir))

        endpoint = DockerConfig().resolve_endpoint()

        assert endpoint.protocol == "https"


class TestSettings:
    """Test fixture settings."""

    def test_defaults(self):
        config = Settings()

        assert config.postgres_image == "postgres"
        assert config.postgres_tag == "latest"
        assert config.preferred_port == 5432
        assert config.connection_timeout == 20.0
        assert config.connection_interval == 1.0

    def test_log_level_is_normalized(self):
        assert Settings(log_level="debug").log_level == "DEBUG"

    def test_unknown_log_level_rejected(self):
        with pytest.raises(PydanticValidationError):
            Settings(log_level="chatty")

    def test_unknown_log_format_rejected(self):
        with pytest.raises(PydanticValidationError):
            Settings(log_format="xml")

    def test_docker_group_carries_endpoint_settings(self):
        config = Settings(docker_host="tcp://docker:2375", docker_timeout=30)

        docker_config = config.docker

        assert docker_config.docker_timeout == 30
        assert docker_config.resolve_endpoint() == RemoteEndpoint(host="docker", port=2375)
