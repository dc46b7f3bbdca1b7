"""Error models and exception classes for dockerized-postgres."""

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field


class ErrorType(str, Enum):
    """Error type enumeration."""

    CONFIGURATION = "configuration"
    LIFECYCLE = "lifecycle"
    ALLOCATION = "allocation"
    PULL = "pull"
    CREATE = "create"
    START = "start"
    READINESS_TIMEOUT = "readiness_timeout"
    HOOK = "hook"
    TEARDOWN = "teardown"


class ErrorDetail(BaseModel):
    """Detailed error information."""

    field: Optional[str] = Field(None, description="Setting or parameter name")
    message: str = Field(..., description="Human-readable error message")
    code: Optional[str] = Field(None, description="Machine-readable error code")


# Custom Exception Classes


class DockerizedPostgresError(Exception):
    """Base exception for dockerized-postgres."""

    error_type: ErrorType = ErrorType.LIFECYCLE

    def __init__(
        self,
        message: str,
        error_type: Optional[ErrorType] = None,
        details: Optional[List[ErrorDetail]] = None,
    ):
        self.message = message
        if error_type is not None:
            self.error_type = error_type
        self.details = details or []
        super().__init__(message)


class ConfigurationError(DockerizedPostgresError):
    """Invalid Docker endpoint or settings."""

    error_type = ErrorType.CONFIGURATION


class LifecycleError(DockerizedPostgresError):
    """Operation called in a state that does not allow it."""

    error_type = ErrorType.LIFECYCLE


class AllocationError(DockerizedPostgresError):
    """No free host port could be bound."""

    error_type = ErrorType.ALLOCATION


class PullError(DockerizedPostgresError):
    """Image pull failed or did not finish in time."""

    error_type = ErrorType.PULL


class CreateError(DockerizedPostgresError):
    """Container creation failed."""

    error_type = ErrorType.CREATE


class StartError(DockerizedPostgresError):
    """Container start was reported as failed."""

    error_type = ErrorType.START


class ReadinessTimeoutError(DockerizedPostgresError, TimeoutError):
    """Database did not answer a liveness query within the timeout."""

    error_type = ErrorType.READINESS_TIMEOUT

    def __init__(
        self,
        port: int,
        timeout: float,
        attempts: int,
        last_error: Optional[str] = None,
    ):
        self.port = port
        self.timeout = timeout
        self.attempts = attempts
        self.last_error = last_error
        message = (
            f"Failed to connect to postgres on port {port} "
            f"after {attempts} attempts within {timeout}s"
        )
        if last_error:
            message = f"{message}: {last_error}"
        super().__init__(message)


class HookError(DockerizedPostgresError):
    """A caller-supplied lifecycle hook raised."""

    error_type = ErrorType.HOOK


class TeardownError(DockerizedPostgresError):
    """Stopping or deleting the container failed."""

    error_type = ErrorType.TEARDOWN

    def __init__(self, operation: str, message: str, **kwargs):
        self.operation = operation
        super().__init__(message, **kwargs)
