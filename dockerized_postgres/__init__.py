"""Ephemeral postgres containers for test suites."""

from .config import Settings, settings
from .models import (
    AllocationError,
    ConfigurationError,
    CreateError,
    DockerizedPostgresError,
    HookError,
    LifecycleError,
    LifecycleState,
    PostgresCredentials,
    PullError,
    ReadinessTimeoutError,
    StartError,
    TeardownError,
)
from .services import DockerizedPostgres
from .utils import setup_logging

__version__ = "0.1.0"

__all__ = [
    "DockerizedPostgres",
    "Settings",
    "settings",
    "LifecycleState",
    "PostgresCredentials",
    "DockerizedPostgresError",
    "AllocationError",
    "ConfigurationError",
    "CreateError",
    "HookError",
    "LifecycleError",
    "PullError",
    "ReadinessTimeoutError",
    "StartError",
    "TeardownError",
    "setup_logging",
]
