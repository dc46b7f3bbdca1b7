"""Data models for dockerized-postgres."""

from .instance import (
    DEFAULT_IDENTIFIER,
    InstanceDescriptor,
    LifecycleState,
    PostgresCredentials,
    ProbeAttempt,
    PullProgress,
    generate_instance_name,
)
from .errors import (
    ErrorType,
    ErrorDetail,
    DockerizedPostgresError,
    ConfigurationError,
    LifecycleError,
    AllocationError,
    PullError,
    CreateError,
    StartError,
    ReadinessTimeoutError,
    HookError,
    TeardownError,
)

__all__ = [
    # Instance models
    "DEFAULT_IDENTIFIER",
    "InstanceDescriptor",
    "LifecycleState",
    "PostgresCredentials",
    "ProbeAttempt",
    "PullProgress",
    "generate_instance_name",
    # Error models
    "ErrorType",
    "ErrorDetail",
    "DockerizedPostgresError",
    "ConfigurationError",
    "LifecycleError",
    "AllocationError",
    "PullError",
    "CreateError",
    "StartError",
    "ReadinessTimeoutError",
    "HookError",
    "TeardownError",
]
