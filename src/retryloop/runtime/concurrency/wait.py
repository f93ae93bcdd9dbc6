"""Cancellation-aware suspension between retry attempts.

A backoff wait can end two ways: the delay elapses, or the environment
interrupts it. Rather than raising, ``suspend`` reports which one happened
so the caller can map an interruption to its own terminal error.

Example:
    >>> interrupt = asyncio.Event()
    >>> outcome = await AsyncioSleeper().suspend(timedelta(seconds=2), interrupt)
    >>> if outcome is WaitOutcome.INTERRUPTED:
    ...     ...  # stop retrying
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from datetime import timedelta
from enum import StrEnum
from typing import Protocol, runtime_checkable


class WaitOutcome(StrEnum):
    """How a backoff wait ended."""
    ELAPSED = "elapsed"
    INTERRUPTED = "interrupted"


@runtime_checkable
class Sleeper(Protocol):
    """Suspends the current task for a backoff delay."""

    async def suspend(self, delay: timedelta, interrupt: asyncio.Event | None = None) -> WaitOutcome:
        """Wait for ``delay`` unless ``interrupt`` is set first.

        Raises:
            asyncio.CancelledError: If the waiting task itself is cancelled
        """
        ...


@dataclass(slots=True, frozen=True)
class AsyncioSleeper:
    """Sleeper backed by the running event loop's timers.

    Non-positive delays do not wait but still yield to the loop once, so a
    policy returning zero cannot starve other tasks.
    """

    async def suspend(self, delay: timedelta, interrupt: asyncio.Event | None = None) -> WaitOutcome:
        if interrupt is not None and interrupt.is_set():
            return WaitOutcome.INTERRUPTED

        seconds = max(delay.total_seconds(), 0.0)
        if interrupt is None:
            await asyncio.sleep(seconds)
            return WaitOutcome.ELAPSED

        try:
            async with asyncio.timeout(seconds):
                await interrupt.wait()
        except TimeoutError:
            return WaitOutcome.ELAPSED
        return WaitOutcome.INTERRUPTED
