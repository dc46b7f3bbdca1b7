"""Shared step primitives for the lifecycle orchestrator.

This module contains the patterns that every lifecycle step shares:
running blocking Docker SDK calls off the event loop and running
report-only steps whose failure is logged but never propagated.
"""

import asyncio
import inspect
from dataclasses import dataclass
from typing import Any, Callable, Optional

import structlog

logger = structlog.get_logger(__name__)


@dataclass
class StepOutcome:
    """Result of a best-effort step."""

    operation: str
    succeeded: bool
    result: Any = None
    error: Optional[BaseException] = None


async def run_in_executor(func, *args):
    """
    Run a blocking function in the default thread pool executor.

    Args:
        func: Blocking function to run
        *args: Arguments to pass to the function

    Returns:
        Result of the function
    """
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(None, func, *args)


async def call_maybe_async(func: Callable[..., Any], *args) -> Any:
    """Call a plain or coroutine function and await the result if needed."""
    result = func(*args)
    if inspect.isawaitable(result):
        result = await result
    return result


async def best_effort(
    operation: str,
    func: Callable[..., Any],
    *args,
    log=None,
    wrap: Optional[Callable[[str, Exception], Exception]] = None,
    **log_context,
) -> StepOutcome:
    """
    Run a step whose failure is reported but never raised.

    Args:
        operation: Name of the step, used in log events
        func: Plain or coroutine function to call
        *args: Arguments to pass to the function
        log: Logger to report with (defaults to this module's logger)
        wrap: Optional factory turning the raw exception into a domain error
        **log_context: Extra key/values attached to the log events

    Returns:
        StepOutcome describing what happened
    """
    log = log or logger
    try:
        result = await call_maybe_async(func, *args)
    except Exception as e:
        error = wrap(operation, e) if wrap else e
        log.warning(
            "Best-effort step failed",
            operation=operation,
            error=str(error),
            error_type=type(error).__name__,
            **log_context,
        )
        return StepOutcome(operation=operation, succeeded=False, error=error)

    log.debug("Best-effort step succeeded", operation=operation, **log_context)
    return StepOutcome(operation=operation, succeeded=True, result=result)
