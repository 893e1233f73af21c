"""Entry points that evaluate a program to a final value.

``run`` raises on failure; ``sync_run``, ``run_scheduled`` and ``async_run``
return a ``RunResult``. Handlers are given innermost first. An operation that
is still unhandled once every handler has run is reported as
``UnhandledEffectError`` rather than returned as a partial value.
"""

from __future__ import annotations

import sys
from collections.abc import Callable, Iterator, Mapping, Sequence
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Generic, TypeVar, cast

from loguru import logger

from efftree._vendor import Err, Ok, Result
from efftree.effects.chance import random_handler
from efftree.effects.output import print_handler
from efftree.effects.reader import reader_handler
from efftree.effects.suspend import ensure_handled, suspend_handler
from efftree.errors import NoResultError, UnhandledEffectError
from efftree.handler import apply_handlers
from efftree.program import Operation, Program, Pure, bind
from efftree.scheduler import AsyncioHost, Scheduler

T = TypeVar("T")

logger = logger.bind(component="run")

HandlerLike = Callable[[Program[Any]], Program[Any]]


@dataclass(frozen=True)
class RunResult(Generic[T]):
    """Outcome of a run.

    Attributes:
        result: ``Ok`` with the program's value or ``Err`` with the error.
        values: Every value that reached the end of the program, in order.
            Synchronous runs have at most one; scheduled runs have one per
            flow that was not ended by ``Exit``.
    """

    result: Result[T]
    values: tuple[Any, ...] = ()

    @property
    def is_ok(self) -> bool:
        return self.result.is_ok()

    @property
    def is_err(self) -> bool:
        return self.result.is_err()

    @property
    def value(self) -> T:
        return self.result.unwrap()

    @property
    def error(self) -> Exception:
        if isinstance(self.result, Err):
            return self.result.error
        raise ValueError("Cannot access error on successful result")

    def unwrap(self) -> T:
        return self.result.unwrap()


@contextmanager
def raised_recursion_limit(limit: int | None) -> Iterator[None]:
    """Raise Python's recursion limit for the duration of one run."""

    if limit is None:
        yield
        return
    if limit <= 0:
        raise ValueError("recursion_limit must be > 0 or None")
    previous = sys.getrecursionlimit()
    sys.setrecursionlimit(max(limit, previous))
    try:
        yield
    finally:
        sys.setrecursionlimit(previous)


def run(
    program: Program[T] | T,
    handlers: Sequence[HandlerLike] = (),
    *,
    recursion_limit: int | None = None,
) -> T:
    """Evaluate ``program`` under ``handlers`` and return its value.

    Evaluation recurses once per operation; ``recursion_limit`` raises
    Python's limit for this call when a program performs many of them.

    Raises:
        UnhandledEffectError: When an operation is left over.
    """

    with raised_recursion_limit(recursion_limit):
        residual = apply_handlers(program, handlers)
    if isinstance(residual, Operation):
        logger.debug("unhandled effect {!r} reached the top level", residual.name)
        raise UnhandledEffectError(residual.name, residual.params)
    return cast(Pure[T], residual).value


def sync_run(
    program: Program[T] | T,
    handlers: Sequence[HandlerLike] = (),
    *,
    recursion_limit: int | None = None,
) -> RunResult[T]:
    """Like ``run`` but captures errors in the returned ``RunResult``."""

    try:
        value = run(program, handlers, recursion_limit=recursion_limit)
    except Exception as exc:
        logger.debug("sync_run failed: {!r}", exc)
        return RunResult(Err(exc))
    return RunResult(Ok(value), (value,))


def run_scheduled(
    program: Program[T] | T,
    handlers: Sequence[HandlerLike] = (),
    *,
    scheduler: Scheduler | None = None,
    recursion_limit: int | None = None,
) -> RunResult[T]:
    """Evaluate a program that may suspend, driving a virtual-clock scheduler.

    ``handlers`` run inside the suspend handler, which is always outermost.
    The scheduler is drained before returning. The first flow to reach the
    end of the program provides the value; a run in which every flow ended
    at ``Exit`` fails with ``NoResultError``.
    """

    scheduler = scheduler or Scheduler()
    completed: list[Any] = []

    def record(value: Any) -> Program[Any]:
        completed.append(value)
        return Pure(value)

    with raised_recursion_limit(recursion_limit):
        try:
            tracked = bind(program, record)
            residual = apply_handlers(tracked, [*handlers, suspend_handler(scheduler)])
            ensure_handled(residual)
            executed = scheduler.run()
        except Exception as exc:
            logger.debug("run_scheduled failed: {!r}", exc)
            return RunResult(Err(exc), tuple(completed))

    logger.debug("scheduler drained after {} tasks at t={}", executed, scheduler.time())
    return _settle(completed)


async def async_run(
    program: Program[T] | T,
    handlers: Sequence[HandlerLike] = (),
) -> RunResult[T]:
    """Evaluate a program that may suspend on the running asyncio loop.

    Suspended flows are resumed by loop callbacks; the coroutine completes
    once none is outstanding.
    """

    host = AsyncioHost()
    completed: list[Any] = []

    def record(value: Any) -> Program[Any]:
        completed.append(value)
        return Pure(value)

    try:
        tracked = bind(program, record)
        residual = apply_handlers(tracked, [*handlers, suspend_handler(host)])
        ensure_handled(residual)
    except Exception as exc:
        logger.debug("async_run failed: {!r}", exc)
        return RunResult(Err(exc), tuple(completed))

    await host.wait_idle()
    if host.error is not None:
        return RunResult(Err(cast(Exception, host.error)), tuple(completed))
    return _settle(completed)


def _settle(completed: list[Any]) -> RunResult[Any]:
    if not completed:
        return RunResult(Err(NoResultError()))
    return RunResult(Ok(completed[0]), tuple(completed))


def handlers_preset(
    env: Mapping[Any, Any] | None = None,
    sink: Callable[[Any], Any] = print,
    seed: Any = None,
) -> list[HandlerLike]:
    """Handlers for the common ambient effects, innermost first.

    Provides:
    - Reader effects (Read, Ask) from ``env``
    - Output effects (Print) written to ``sink``
    - Random effects from a generator seeded with ``seed``

    Example:
        result = sync_run(program(), handlers=handlers_preset(env={"name": "ada"}))
    """

    return [reader_handler(env), print_handler(sink), random_handler(seed)]


__all__ = [
    "RunResult",
    "async_run",
    "handlers_preset",
    "raised_recursion_limit",
    "run",
    "run_scheduled",
    "sync_run",
]
