"""Execution contexts that accept and run retry work units.

A retry run is one unit of asynchronous work. The runner never starts it
directly: it hands the coroutine to an ExecutionContext and returns to the
caller at once. Any object with a matching ``submit`` method qualifies.

Key Components:
    - LoopContext: Fire-and-forget tasks on the running event loop
    - GroupContext: Tasks owned by a caller's asyncio.TaskGroup

Example:
    >>> async with asyncio.TaskGroup() as tg:
    ...     runner = RetryRunner(context=GroupContext(tg))
    ...     handle = runner.run(fetch, default_backoff)
    >>> # handle has settled; the group waited for it
"""

from __future__ import annotations

import asyncio
from collections.abc import Coroutine
from dataclasses import dataclass, field
from typing import Protocol, TypeVar, runtime_checkable

T = TypeVar("T")


@runtime_checkable
class ExecutionContext(Protocol):
    """Anything that can schedule a coroutine without blocking the submitter."""

    def submit(self, coro: Coroutine[object, object, T], *, name: str | None = None) -> asyncio.Future[T]:
        """Schedule ``coro`` and return a future for its completion."""
        ...


@dataclass(slots=True)
class LoopContext:
    """Schedule work units as tasks on the event loop running at submit time.

    Holds strong references to in-flight tasks so they are not garbage
    collected mid-run; references drop as tasks finish. Work units share
    the submitter's loop, so the runner's outcome future is always settled
    from the thread that owns it.
    """

    _tasks: set[asyncio.Task[object]] = field(default_factory=set, repr=False)

    def submit(self, coro: Coroutine[object, object, T], *, name: str | None = None) -> asyncio.Task[T]:
        task = asyncio.get_running_loop().create_task(coro, name=name)
        self._tasks.add(task)  # type: ignore[arg-type]
        task.add_done_callback(self._tasks.discard)
        return task

    @property
    def pending(self) -> int:
        """Number of work units not yet finished."""
        return len(self._tasks)


@dataclass(slots=True, frozen=True)
class GroupContext:
    """Schedule work units inside a caller-owned asyncio.TaskGroup.

    Runs cannot outlive the group: leaving the ``async with`` block waits
    for every submitted run to settle.
    """

    group: asyncio.TaskGroup

    def submit(self, coro: Coroutine[object, object, T], *, name: str | None = None) -> asyncio.Task[T]:
        return self.group.create_task(coro, name=name)
