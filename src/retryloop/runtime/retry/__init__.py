"""Policy-driven retry with exponential backoff.

Example:
    >>> from retryloop.runtime.retry import RetryRunner, RetryDecision, STOP_RETRYING
    >>>
    >>> def decide(error: Exception, attempt: int) -> RetryDecision:
    ...     if attempt >= 5:
    ...         return STOP_RETRYING
    ...     return RetryDecision.after(0.2)
    >>>
    >>> handle = RetryRunner().run(lambda: api.fetch(order_id), decide)
    >>> order = await handle
"""

from .backoff import BACKOFF_MULTIPLIER, MAX_DELAY, with_backoff
from .decision import STOP_RETRYING, DecisionPolicy, RetryDecision, default_backoff, retry_on
from .runner import AttemptFactory, RetryHandle, RetryRunner, retry, run_with_retry

__all__ = [
    # Backoff
    "BACKOFF_MULTIPLIER",
    "MAX_DELAY",
    "with_backoff",
    # Decisions
    "RetryDecision",
    "STOP_RETRYING",
    "DecisionPolicy",
    "default_backoff",
    "retry_on",
    # Execution
    "AttemptFactory",
    "RetryHandle",
    "RetryRunner",
    "retry",
    "run_with_retry",
]
