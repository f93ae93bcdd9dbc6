"""Concurrency primitives used by the retry runner.

Key Components:
    - ExecutionContext: Protocol for anything that accepts a work unit
    - LoopContext / GroupContext: Event-loop and TaskGroup backed contexts
    - Sleeper / AsyncioSleeper: Interruptible backoff waits
    - WaitOutcome: Whether a wait elapsed or was interrupted

Pure asyncio (Python 3.11+), no external dependencies.
"""

from __future__ import annotations

from .context import ExecutionContext, GroupContext, LoopContext
from .wait import AsyncioSleeper, Sleeper, WaitOutcome

__all__ = [
    "ExecutionContext",
    "GroupContext",
    "LoopContext",
    "AsyncioSleeper",
    "Sleeper",
    "WaitOutcome",
]
