"""Backoff arithmetic for the retry loop.

The wait before the n-th retry (1-based) is::

    delay = retry_after * multiplier ** (n - 1)

so the first retry waits exactly the policy's ``retry_after``. The factor
applies to whatever base delay the latest decision returned, not to the
previous actual wait. There is no jitter.
"""

from __future__ import annotations

from datetime import timedelta

BACKOFF_MULTIPLIER = 1.1

# Largest duration Python can represent; overflowing products clamp here
MAX_DELAY = timedelta.max

_ZERO = timedelta(0)


def with_backoff(delay: timedelta, retry_count: int, multiplier: float = BACKOFF_MULTIPLIER) -> timedelta:
    """Scale a base delay for the given 1-based retry count.

    Args:
        delay: Base delay from the latest decision
        retry_count: Retries granted so far, including this one
        multiplier: Geometric growth factor per retry

    Returns:
        The wait before the next attempt, clamped to MAX_DELAY on overflow
    """
    try:
        factor = multiplier ** (retry_count - 1)
        return delay * factor
    except OverflowError:
        # Negative bases have no meaningful wait; the sleeper treats them as zero
        return MAX_DELAY if delay > _ZERO else _ZERO
