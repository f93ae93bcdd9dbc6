"""Retry decisions returned by caller-supplied policies.

After every failed attempt the runner calls the policy with the error and
the zero-based attempt index. The policy answers with a RetryDecision:
whether to try again, and the base delay before doing so.

Example:
    >>> def decide(error: Exception, attempt: int) -> RetryDecision:
    ...     if isinstance(error, PermissionError) or attempt >= 4:
    ...         return STOP_RETRYING
    ...     return RetryDecision.after(0.5)
"""

from __future__ import annotations

from datetime import timedelta
from typing import Callable

from pydantic import BaseModel, ConfigDict, Field

from retryloop.foundation.config import get_settings

# Policy signature: (error from the failed attempt, zero-based attempt index) -> decision
DecisionPolicy = Callable[[Exception, int], "RetryDecision"]


class RetryDecision(BaseModel):
    """Whether to retry and how long to wait first.

    ``retry_after`` is the base delay for the next wait; the runner scales it
    by the backoff factor for the current retry count. Accepts a timedelta
    or a number of seconds. Zero and negative values are not rejected: they
    mean "retry without waiting".

    Attributes:
        should_retry: False ends the loop with a RetryError
        retry_after: Base delay before the next attempt
    """

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        revalidate_instances="never",
        json_schema_extra={
            "title": "Retry Decision",
            "examples": [{"should_retry": True, "retry_after": 0.05}],
        },
    )

    should_retry: bool = True
    retry_after: timedelta = Field(default=timedelta(0))

    @classmethod
    def stop(cls) -> RetryDecision:
        """Decision that ends the loop."""
        return STOP_RETRYING

    @classmethod
    def after(cls, delay: timedelta | float) -> RetryDecision:
        """Retry after ``delay`` (seconds or timedelta), capped at the configured max_delay."""
        if not isinstance(delay, timedelta):
            delay = timedelta(seconds=delay)
        return cls(should_retry=True, retry_after=min(delay, get_settings().retry.max_delay_td))


# Singleton for the "give up" answer
STOP_RETRYING = RetryDecision(should_retry=False)


def default_backoff(error: Exception, attempt: int) -> RetryDecision:
    """Retry with the configured default delay until max_retries is reached.

    With default settings this allows 10 retries, each based on 50ms.
    Usable directly as a runner's decision policy.
    """
    retry = get_settings().retry
    if attempt < retry.max_retries:
        return RetryDecision.after(retry.default_delay_td)
    return STOP_RETRYING


def retry_on(*types: type[BaseException], max_retries: int, delay: timedelta | float) -> DecisionPolicy:
    """Build a policy retrying only errors of the given types, up to ``max_retries`` times.

    Example:
        >>> decide = retry_on(ConnectionError, TimeoutError, max_retries=3, delay=1.0)
    """
    retryable = types or (Exception,)

    def decide(error: Exception, attempt: int) -> RetryDecision:
        if attempt >= max_retries or not isinstance(error, retryable):
            return STOP_RETRYING
        return RetryDecision.after(delay)

    return decide
