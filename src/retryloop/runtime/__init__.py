"""Runtime layer: retry orchestration, concurrency primitives, observability."""

from .concurrency import AsyncioSleeper, ExecutionContext, GroupContext, LoopContext, Sleeper, WaitOutcome
from .observability import configure_logging, get_logger
from .retry import (
    BACKOFF_MULTIPLIER,
    MAX_DELAY,
    STOP_RETRYING,
    RetryDecision,
    RetryHandle,
    RetryRunner,
    default_backoff,
    retry,
    retry_on,
    run_with_retry,
    with_backoff,
)

__all__ = [
    "AsyncioSleeper",
    "ExecutionContext",
    "GroupContext",
    "LoopContext",
    "Sleeper",
    "WaitOutcome",
    "configure_logging",
    "get_logger",
    "BACKOFF_MULTIPLIER",
    "MAX_DELAY",
    "STOP_RETRYING",
    "RetryDecision",
    "RetryHandle",
    "RetryRunner",
    "default_backoff",
    "retry",
    "retry_on",
    "run_with_retry",
    "with_backoff",
]
