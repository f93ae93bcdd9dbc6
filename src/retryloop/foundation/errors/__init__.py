"""Terminal error types for retry loops.

- RetryError: policy declined further attempts; carries every failure
- InterruptedWait: backoff wait was interrupted before the next attempt
- AttemptRecord: serializable per-attempt summary for diagnostics
"""

from .errors import DEFAULT_MESSAGE, AttemptRecord, InterruptedWait, RetryError

__all__ = ["DEFAULT_MESSAGE", "AttemptRecord", "InterruptedWait", "RetryError"]
