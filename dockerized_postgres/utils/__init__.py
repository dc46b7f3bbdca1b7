"""Utility modules for dockerized-postgres."""

from .logging import setup_logging, get_logger
from .steps import StepOutcome, best_effort, call_maybe_async, run_in_executor

__all__ = [
    "setup_logging",
    "get_logger",
    "StepOutcome",
    "best_effort",
    "call_maybe_async",
    "run_in_executor",
]
