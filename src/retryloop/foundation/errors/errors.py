"""Terminal errors raised when a retry loop stops without a result.

Only two error types ever reach the caller of a retried operation:
- RetryError: the decision callback declined another attempt
- InterruptedWait: the backoff wait between attempts was interrupted

Individual attempt failures are never raised on their own; they are
collected in order and carried on the terminal error as ``causes``.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_MESSAGE = "Exceeded retry count"


class AttemptRecord(BaseModel):
    """Serializable summary of one failed attempt."""

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        revalidate_instances="never",
        json_schema_extra={
            "title": "Attempt Record",
            "examples": [{"index": 0, "error_type": "ConnectionError", "message": "connection reset"}],
        },
    )

    index: Annotated[int, Field(ge=0, description="Zero-based attempt index")]
    error_type: Annotated[str, Field(min_length=1)]
    message: str = ""

    @classmethod
    def from_exception(cls, index: int, exc: BaseException) -> AttemptRecord:
        return cls(index=index, error_type=type(exc).__name__, message=str(exc))

    def __str__(self) -> str:
        return f"#{self.index} {self.error_type}: {self.message}" if self.message else f"#{self.index} {self.error_type}"


class _HistoryError(Exception):
    """Base for terminal errors carrying the ordered failure history."""

    def __init__(self, message: str, causes: Sequence[BaseException] = ()) -> None:
        super().__init__(message)
        self.message = message
        self.causes: tuple[BaseException, ...] = tuple(causes)

    @property
    def attempts(self) -> int:
        """Number of failed attempts recorded."""
        return len(self.causes)

    @property
    def last(self) -> BaseException | None:
        """Most recent attempt failure, if any."""
        return self.causes[-1] if self.causes else None

    def records(self) -> list[AttemptRecord]:
        return [AttemptRecord.from_exception(i, exc) for i, exc in enumerate(self.causes)]

    def render(self) -> str:
        """Multi-line report of every recorded failure."""
        if not self.causes:
            return self.message
        lines = [f"{self.message} ({self.attempts} failed attempt{'s' if self.attempts != 1 else ''}):"]
        lines += [f"  {r}" for r in self.records()]
        return "\n".join(lines)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.message!r}, attempts={self.attempts})"


class RetryError(_HistoryError):
    """Raised when the decision callback declines a further retry.

    Attributes:
        message: Human-readable summary
        causes: Every attempt failure, in the order the attempts ran
    """

    def __init__(self, message: str = DEFAULT_MESSAGE, causes: Sequence[BaseException] = ()) -> None:
        super().__init__(message, causes)
        if self.causes:
            self.__cause__ = self.causes[-1]


class InterruptedWait(_HistoryError):
    """Raised when the backoff wait between attempts is interrupted.

    Not a RetryError: the policy had approved another attempt, but the wait
    never elapsed. ``causes`` holds only the failures seen before the wait.
    """

    def __init__(self, message: str = "Backoff wait interrupted", causes: Sequence[BaseException] = (), *, retry_count: int = 0) -> None:
        super().__init__(message, causes)
        self.retry_count = retry_count
