"""Hosts that drive suspended continuations.

The suspend effect hands its continuation to a host, which calls it back
later. Two hosts are provided:

- ``Scheduler``: a discrete-event queue with a virtual clock. Tasks are
  ordered by due time, then by insertion sequence, so tasks due at the same
  time run first-in first-out. Nothing actually sleeps, which keeps runs
  deterministic.
- ``AsyncioHost``: the same protocol on top of a running asyncio loop.

A host belongs to exactly one run. It is the only shared mutable structure in
the runtime and is only touched from the single thread driving that run.
"""

from __future__ import annotations

import asyncio
import heapq
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any, Protocol, runtime_checkable

from loguru import logger

from efftree.errors import SchedulerStepLimitError

logger = logger.bind(component="scheduler")

Callback = Callable[..., Any]


@runtime_checkable
class Host(Protocol):
    """Protocol for the external environment suspended flows are handed to."""

    def call_later(self, delay: float, callback: Callback, *args: Any) -> None: ...

    def call_soon(self, callback: Callback, *args: Any) -> None: ...

    def time(self) -> float: ...


@dataclass
class ScheduledTask:
    """An entry in the scheduler's priority queue.

    Attributes:
        time: The virtual time at which the task runs
        sequence: Tie-breaker for tasks due at the same time (FIFO order)
        callback: The callable to run
        args: Positional arguments for ``callback``
    """

    time: float
    sequence: int
    callback: Callback
    args: tuple[Any, ...] = ()

    def __lt__(self, other: ScheduledTask) -> bool:
        """Compare by time, then by sequence for FIFO ordering."""
        if self.time != other.time:
            return self.time < other.time
        return self.sequence < other.sequence


@dataclass
class Scheduler:
    """Priority-queue scheduler with a virtual clock.

    Attributes:
        start_time: Initial value of the virtual clock.
        max_steps: Upper bound on the number of tasks ``run`` executes, or
            ``None`` for no bound.
    """

    start_time: float = 0.0
    max_steps: int | None = None
    queue: list[ScheduledTask] = field(default_factory=list, init=False, repr=False)
    sequence_counter: int = field(default=0, init=False)
    steps: int = field(default=0, init=False)
    current_time: float = field(default=0.0, init=False)

    def __post_init__(self) -> None:
        if self.max_steps is not None and self.max_steps < 0:
            raise ValueError("max_steps must be >= 0 or None")
        self.current_time = self.start_time

    def time(self) -> float:
        return self.current_time

    def call_later(self, delay: float, callback: Callback, *args: Any) -> None:
        """Schedule ``callback(*args)`` to run ``delay`` time units from now."""

        if delay < 0:
            raise ValueError(f"delay must be non-negative, got {delay}")
        task = ScheduledTask(
            time=self.current_time + delay,
            sequence=self.sequence_counter,
            callback=callback,
            args=args,
        )
        self.sequence_counter += 1
        heapq.heappush(self.queue, task)
        logger.debug("scheduled task #{} at t={}", task.sequence, task.time)

    def call_soon(self, callback: Callback, *args: Any) -> None:
        self.call_later(0.0, callback, *args)

    @property
    def pending(self) -> int:
        return len(self.queue)

    def is_empty(self) -> bool:
        """Check if the scheduler has no pending tasks."""
        return not self.queue

    def peek_time(self) -> float | None:
        """Get the time of the next scheduled task, or None if empty."""
        if self.queue:
            return self.queue[0].time
        return None

    def step(self) -> bool:
        """Run the earliest task. Returns ``False`` when nothing was pending."""

        if not self.queue:
            return False
        if self.max_steps is not None and self.steps >= self.max_steps:
            raise SchedulerStepLimitError(self.max_steps)
        task = heapq.heappop(self.queue)
        self.current_time = task.time
        self.steps += 1
        logger.debug("running task #{} at t={}", task.sequence, task.time)
        task.callback(*task.args)
        return True

    def run(self) -> int:
        """Run tasks until the queue drains. Returns the number of tasks run."""

        executed = 0
        while self.step():
            executed += 1
        return executed


class AsyncioHost:
    """Host backed by an asyncio event loop.

    Counts outstanding callbacks so a caller can await the moment every
    suspended flow has been resumed, and records the first exception a
    callback raises instead of letting the loop swallow it.
    """

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None) -> None:
        self._loop = loop or asyncio.get_running_loop()
        self._outstanding = 0
        self._idle = asyncio.Event()
        self._idle.set()
        self.error: BaseException | None = None

    def time(self) -> float:
        return self._loop.time()

    def call_later(self, delay: float, callback: Callback, *args: Any) -> None:
        if delay < 0:
            raise ValueError(f"delay must be non-negative, got {delay}")
        self._outstanding += 1
        self._idle.clear()
        self._loop.call_later(delay, self._run, callback, args)

    def call_soon(self, callback: Callback, *args: Any) -> None:
        self._outstanding += 1
        self._idle.clear()
        self._loop.call_soon(self._run, callback, args)

    def _run(self, callback: Callback, args: tuple[Any, ...]) -> None:
        try:
            if self.error is None:
                callback(*args)
        except Exception as exc:
            logger.debug("callback raised {!r}", exc)
            self.error = exc
        finally:
            self._outstanding -= 1
            if self._outstanding == 0:
                self._idle.set()

    async def wait_idle(self) -> None:
        """Wait until no scheduled callback remains."""

        await self._idle.wait()


__all__ = ["AsyncioHost", "Callback", "Host", "ScheduledTask", "Scheduler"]
