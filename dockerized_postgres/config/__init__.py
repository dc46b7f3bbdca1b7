"""Configuration management for dockerized-postgres.

Usage:
    from dockerized_postgres.config import settings

    settings.postgres_tag
    settings.connection_timeout
    settings.docker.resolve_endpoint()
"""

from typing import Optional

from pydantic import Field, validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .docker import (
    DEFAULT_SOCKET_PATH,
    DockerConfig,
    DockerEndpoint,
    LocalSocket,
    RemoteEndpoint,
    TlsMaterial,
)


class Settings(BaseSettings):
    """Fixture settings with environment variable support."""

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", case_sensitive=False, extra="ignore"
    )

    # Postgres image and credentials
    postgres_image: str = Field(default="postgres")
    postgres_tag: str = Field(default="latest")
    preferred_port: int = Field(default=5432, ge=1, le=65535)
    postgres_host: str = Field(default="localhost")
    postgres_user: str = Field(default="postgres", min_length=1)
    postgres_password: str = Field(default="postgres", min_length=1)
    postgres_db: str = Field(default="postgres", min_length=1)
    container_name_prefix: str = Field(default="postgres", min_length=1)

    # Readiness probing (seconds)
    connection_timeout: float = Field(
        default=20.0,
        gt=0,
        description="How long to wait for postgres to answer SELECT 1",
    )
    connection_interval: float = Field(
        default=1.0,
        gt=0,
        description="Sleep between readiness probes",
    )
    probe_connect_timeout: int = Field(
        default=2,
        ge=1,
        le=60,
        description="libpq connect_timeout for a single probe",
    )

    # Container runtime
    pull_timeout: float = Field(
        default=300.0,
        gt=0,
        description="Ceiling for draining the image pull stream",
    )
    stop_timeout: int = Field(default=10, ge=0, le=300)
    port_allocation_attempts: int = Field(default=10, ge=1, le=1000)

    # Docker endpoint
    docker_host: Optional[str] = Field(default=None)
    docker_use_https: bool = Field(default=False)
    docker_cert_path: Optional[str] = Field(default=None)
    docker_timeout: int = Field(default=120, ge=1, le=3600)

    # Logging Configuration
    log_level: str = Field(default="INFO")
    log_format: str = Field(default="console")

    @validator("log_level")
    def normalize_log_level(cls, v):
        """Accept any casing for the log level."""
        level = v.upper()
        if level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"Unknown log level: {v}")
        return level

    @validator("log_format")
    def validate_log_format(cls, v):
        """Only json and console renderers are available."""
        if v not in ("json", "console"):
            raise ValueError("log_format must be 'json' or 'console'")
        return v

    @property
    def docker(self) -> DockerConfig:
        """Access Docker endpoint configuration group."""
        return DockerConfig(
            docker_host=self.docker_host,
            docker_use_https=self.docker_use_https,
            docker_cert_path=self.docker_cert_path,
            docker_timeout=self.docker_timeout,
        )


# Global settings instance
settings = Settings()

__all__ = [
    "Settings",
    "settings",
    "DockerConfig",
    "DockerEndpoint",
    "LocalSocket",
    "RemoteEndpoint",
    "TlsMaterial",
    "DEFAULT_SOCKET_PATH",
]
