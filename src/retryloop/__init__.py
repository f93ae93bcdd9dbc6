"""retryloop - Policy-driven async retry with exponential backoff.

Runs an unreliable async operation, asks a caller-supplied policy after each
failure whether to try again, and waits an escalating delay between
attempts. The caller gets one outcome: a value, or a single terminal error
carrying the history of every failed attempt.

Quick Start:
    >>> from retryloop import RetryRunner, RetryDecision, STOP_RETRYING
    >>>
    >>> def decide(error: Exception, attempt: int) -> RetryDecision:
    ...     if isinstance(error, PermissionError) or attempt >= 3:
    ...         return STOP_RETRYING
    ...     return RetryDecision.after(0.5)  # 0.5s, then 0.55s, then 0.605s
    >>>
    >>> handle = RetryRunner().run(lambda: session.get(url), decide)
    >>> response = await handle

Built-in Policy:
    >>> from retryloop import default_backoff, run_with_retry
    >>> response = await run_with_retry(lambda: session.get(url), default_backoff)

Decorator:
    >>> from retryloop import retry, retry_on
    >>>
    >>> @retry(retry_on(ConnectionError, max_retries=4, delay=1.0))
    ... async def fetch(url: str) -> bytes:
    ...     ...

Failures:
    >>> from retryloop import RetryError, InterruptedWait
    >>> try:
    ...     await handle
    ... except RetryError as e:
    ...     print(e.render())  # every attempt's error, in order
"""

from .foundation.config import RetryloopSettings, clear_settings_cache, get_settings
from .foundation.errors import AttemptRecord, InterruptedWait, RetryError
from .runtime.concurrency import AsyncioSleeper, ExecutionContext, GroupContext, LoopContext, Sleeper, WaitOutcome
from .runtime.observability import configure_from_settings, configure_logging, get_logger
from .runtime.retry import (
    BACKOFF_MULTIPLIER,
    MAX_DELAY,
    STOP_RETRYING,
    DecisionPolicy,
    RetryDecision,
    RetryHandle,
    RetryRunner,
    default_backoff,
    retry,
    retry_on,
    run_with_retry,
    with_backoff,
)

__version__ = "0.1.0"

__all__ = [
    # Execution
    "RetryRunner",
    "RetryHandle",
    "run_with_retry",
    "retry",
    # Decisions
    "RetryDecision",
    "STOP_RETRYING",
    "DecisionPolicy",
    "default_backoff",
    "retry_on",
    # Backoff
    "BACKOFF_MULTIPLIER",
    "MAX_DELAY",
    "with_backoff",
    # Errors
    "RetryError",
    "InterruptedWait",
    "AttemptRecord",
    # Concurrency
    "ExecutionContext",
    "LoopContext",
    "GroupContext",
    "Sleeper",
    "AsyncioSleeper",
    "WaitOutcome",
    # Settings & logging
    "RetryloopSettings",
    "get_settings",
    "clear_settings_cache",
    "configure_logging",
    "configure_from_settings",
    "get_logger",
]
