"""Retry orchestration loop.

Runs an async attempt, and after each failure asks a policy whether to try
again. Approved retries wait ``retry_after * 1.1 ** (n - 1)`` before the
n-th retry. The caller sees exactly one outcome: the first successful
value, a RetryError carrying every failure once the policy declines, or
InterruptedWait if a backoff wait is interrupted.

Example:
    >>> runner = RetryRunner()
    >>> handle = runner.run(lambda: client.get("/health"), default_backoff)
    >>> # ... caller continues immediately ...
    >>> response = await handle

    >>> # Or inline, without a separate work unit
    >>> response = await runner.execute(lambda: client.get("/health"), default_backoff)
"""

from __future__ import annotations

import asyncio
import functools
import itertools
from collections.abc import Awaitable
from dataclasses import dataclass, field
from typing import Callable, Generator, Generic, ParamSpec, TypeVar

from retryloop.foundation.errors import DEFAULT_MESSAGE, InterruptedWait, RetryError
from retryloop.runtime.concurrency import AsyncioSleeper, ExecutionContext, LoopContext, Sleeper, WaitOutcome
from retryloop.runtime.observability import BoundLogger, get_logger

from .backoff import BACKOFF_MULTIPLIER, with_backoff
from .decision import DecisionPolicy, default_backoff

T = TypeVar("T")
P = ParamSpec("P")

AttemptFactory = Callable[[], Awaitable[T]]

logger = get_logger("retryloop.retry")

_run_ids = itertools.count(1)


@dataclass(slots=True)
class _RunState:
    """Mutable bookkeeping for one run; discarded when the run settles."""

    causes: list[BaseException] = field(default_factory=list)
    retry_count: int = 0
    waiting: bool = False


class RetryHandle(Generic[T]):
    """Caller's view of a run submitted with RetryRunner.run().

    Awaiting the handle returns the successful value or raises the terminal
    error. The underlying ``outcome`` future settles exactly once.
    """

    __slots__ = ("name", "_outcome", "_interrupt", "_task")

    def __init__(self, name: str, outcome: asyncio.Future[T], interrupt: asyncio.Event, task: asyncio.Future[None]) -> None:
        self.name = name
        self._outcome = outcome
        self._interrupt = interrupt
        self._task = task

    @property
    def outcome(self) -> asyncio.Future[T]:
        return self._outcome

    @property
    def done(self) -> bool:
        return self._outcome.done()

    def interrupt(self) -> None:
        """Interrupt the current or next backoff wait.

        The run settles with InterruptedWait instead of retrying. Has no
        effect if the run already settled or succeeds without waiting again.
        """
        self._interrupt.set()

    def cancel(self, msg: str | None = None) -> bool:
        """Cancel the work unit. An active backoff wait maps to InterruptedWait."""
        return self._task.cancel(msg)

    def result(self) -> T:
        """Settled value, or raise the terminal error (asyncio.InvalidStateError if pending)."""
        return self._outcome.result()

    def __await__(self) -> Generator[object, None, T]:
        return self._outcome.__await__()

    def __repr__(self) -> str:
        state = "pending" if not self._outcome.done() else "cancelled" if self._outcome.cancelled() else "settled"
        return f"RetryHandle({self.name!r}, {state})"


class RetryRunner:
    """Drives sequential attempts with policy-controlled exponential backoff.

    A runner holds no per-run state; one instance can serve any number of
    concurrent runs, each with its own failure history and retry count.

    Args:
        context: Where run() submits work units (default: running event loop)
        sleeper: Backoff wait implementation (default: asyncio timers)
        multiplier: Growth factor between consecutive retries

    Example:
        >>> runner = RetryRunner()
        >>> def decide(error: Exception, attempt: int) -> RetryDecision:
        ...     return RetryDecision.after(0.1) if attempt < 3 else STOP_RETRYING
        >>> value = await runner.run(fetch_quote, decide)
    """

    __slots__ = ("_context", "_sleeper", "_multiplier")

    def __init__(
        self,
        context: ExecutionContext | None = None,
        sleeper: Sleeper | None = None,
        *,
        multiplier: float = BACKOFF_MULTIPLIER,
    ) -> None:
        self._context: ExecutionContext = context or LoopContext()
        self._sleeper: Sleeper = sleeper or AsyncioSleeper()
        self._multiplier = multiplier

    def run(self, attempt_factory: AttemptFactory[T], decide: DecisionPolicy, *, name: str | None = None) -> RetryHandle[T]:
        """Submit a retry loop to the execution context and return immediately.

        Must be called with an event loop running; the outcome future belongs
        to that loop.

        Args:
            attempt_factory: Produces a fresh awaitable per attempt
            decide: Called after each failure with (error, attempt index)
            name: Label for logs and the work unit (default: generated)

        Returns:
            RetryHandle whose outcome settles exactly once
        """
        loop = asyncio.get_running_loop()
        name = name or f"retry-{next(_run_ids)}"
        outcome: asyncio.Future[T] = loop.create_future()
        interrupt = asyncio.Event()
        task = self._context.submit(self._drive(attempt_factory, decide, outcome, interrupt, name), name=name)
        # Cancelled before its first step, the work unit never reaches _drive
        task.add_done_callback(lambda _: outcome.done() or outcome.cancel())
        return RetryHandle(name, outcome, interrupt, task)

    async def execute(
        self,
        attempt_factory: AttemptFactory[T],
        decide: DecisionPolicy,
        *,
        interrupt: asyncio.Event | None = None,
        name: str | None = None,
    ) -> T:
        """Run the retry loop inline in the current task.

        Returns:
            Value of the first successful attempt

        Raises:
            RetryError: The policy declined a retry
            InterruptedWait: ``interrupt`` was set during a backoff wait
        """
        log = logger.bind(run=name or f"retry-{next(_run_ids)}")
        return await self._loop(attempt_factory, decide, _RunState(), interrupt, log)

    async def _drive(
        self,
        attempt_factory: AttemptFactory[T],
        decide: DecisionPolicy,
        outcome: asyncio.Future[T],
        interrupt: asyncio.Event,
        name: str,
    ) -> None:
        """Work unit body: run the loop and settle ``outcome`` exactly once."""
        state = _RunState()
        log = logger.bind(run=name)
        try:
            value = await self._loop(attempt_factory, decide, state, interrupt, log)
        except asyncio.CancelledError:
            if not outcome.done():
                if state.waiting:
                    log.warning("backoff wait cancelled", retries=state.retry_count)
                    outcome.set_exception(InterruptedWait(causes=state.causes, retry_count=state.retry_count))
                else:
                    outcome.cancel()
            raise
        except Exception as exc:
            # RetryError, InterruptedWait, or a fault raised by the policy itself (already logged)
            if not outcome.done():
                outcome.set_exception(exc)
        else:
            if not outcome.done():
                outcome.set_result(value)

    async def _loop(
        self,
        attempt_factory: AttemptFactory[T],
        decide: DecisionPolicy,
        state: _RunState,
        interrupt: asyncio.Event | None,
        log: BoundLogger,
    ) -> T:
        while True:
            attempt = len(state.causes)
            log.debug("attempt started", attempt=attempt)
            try:
                value = await attempt_factory()
            except Exception as exc:
                state.causes.append(exc)
            else:
                if attempt:
                    log.info("attempt succeeded after retries", attempt=attempt)
                return value

            error = state.causes[-1]
            try:
                decision = decide(error, state.retry_count)
            except Exception:
                log.exception("decision policy raised", attempt=attempt, error=repr(error))
                raise
            if not decision.should_retry:
                log.error("retries exhausted", attempts=len(state.causes), error=repr(error))
                raise RetryError(DEFAULT_MESSAGE, state.causes)

            state.retry_count += 1
            delay = with_backoff(decision.retry_after, state.retry_count, self._multiplier)
            log.warning("attempt failed, retrying", attempt=attempt, error=repr(error), delay=delay.total_seconds())

            state.waiting = True
            waited = await self._sleeper.suspend(delay, interrupt)
            state.waiting = False

            if waited is WaitOutcome.INTERRUPTED:
                log.warning("backoff wait interrupted", retries=state.retry_count)
                raise InterruptedWait(causes=state.causes, retry_count=state.retry_count)


def run_with_retry(
    attempt_factory: AttemptFactory[T],
    decide: DecisionPolicy,
    *,
    context: ExecutionContext | None = None,
    sleeper: Sleeper | None = None,
    name: str | None = None,
) -> RetryHandle[T]:
    """Submit a one-off retry loop. Shorthand for RetryRunner(context, sleeper).run(...)."""
    return RetryRunner(context, sleeper).run(attempt_factory, decide, name=name)


def retry(
    decide: DecisionPolicy = default_backoff,
    *,
    runner: RetryRunner | None = None,
) -> Callable[[Callable[P, Awaitable[T]]], Callable[P, Awaitable[T]]]:
    """Decorator retrying every call of an async function under ``decide``.

    Each call builds a fresh attempt from the same arguments.

    Example:
        >>> @retry(retry_on(ConnectionError, max_retries=3, delay=0.2))
        ... async def fetch(url: str) -> bytes:
        ...     ...
    """
    def decorator(func: Callable[P, Awaitable[T]]) -> Callable[P, Awaitable[T]]:
        @functools.wraps(func)
        async def wrapper(*args: P.args, **kwargs: P.kwargs) -> T:
            return await (runner or RetryRunner()).execute(
                lambda: func(*args, **kwargs), decide, name=func.__qualname__,
            )
        return wrapper
    return decorator
