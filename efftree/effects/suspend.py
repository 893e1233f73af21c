"""
Suspend-for-callback effects and cooperative concurrency built on them.

``Suspend(start)`` hands its continuation to the host instead of resuming it:
``start(resume, host)`` registers ``resume`` with the host (a timer, a task
queue) and returns at once, so ``evaluate`` returns to its caller without
blocking. This is the only source of asynchrony; every other effect resolves
within one ``evaluate`` call.

``Wait``, ``Exit``, ``Fork`` and ``par`` are ordinary programs over
``Suspend``. A flow only yields control at a ``Suspend``; there is no
preemption.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any, TypeVar

from efftree.errors import UnhandledEffectError
from efftree.handler import Handler, handler
from efftree.program import Operation, Program, Pure, bind
from efftree.scheduler import Host

T = TypeVar("T")
U = TypeVar("U")

SUSPEND = "suspend"
NOW = "now"

Start = Callable[[Callable[..., Program[Any]], Host], Any]


def Suspend(start: Start) -> Operation[Any]:
    """Suspend: give the continuation to ``start(resume, host)``."""
    if not callable(start):
        raise TypeError("start must be callable")
    return Operation(SUSPEND, (start,))


def Now() -> Operation[float]:
    """Suspend: answer the host clock."""
    return Operation(NOW)


def Wait(delay: float) -> Operation[None]:
    """Resume this flow after ``delay`` time units of the host clock."""

    if delay < 0:
        raise ValueError(f"Wait delay must be non-negative, got {delay}")
    return Suspend(lambda resume, host: host.call_later(delay, resume))


def Exit() -> Operation[Any]:
    """End this flow. Its continuation is never called."""
    return Suspend(lambda resume, host: None)


def _fork(resume: Callable[..., Program[Any]], host: Host) -> None:
    host.call_soon(resume, True)
    resume(False)


def Fork() -> Operation[bool]:
    """Split this flow in two.

    The current flow continues at once with ``False``; a second flow resumes
    the same continuation with ``True`` from the host queue.
    """
    return Suspend(_fork)


class _NotAvailable:
    def __repr__(self) -> str:
        return "NOT_AVAILABLE"


NOT_AVAILABLE = _NotAvailable()


def _allocate_cells(resume: Callable[..., Program[Any]], host: Host) -> None:
    resume([NOT_AVAILABLE, NOT_AVAILABLE])


def par(left: Program[T] | T, right: Program[U] | U) -> Program[tuple[T, U]]:
    """Run ``left`` and ``right`` as two cooperative flows.

    The flow that finishes first stores its value and exits; the second one
    delivers ``(left_value, right_value)`` to the rest of the program. The
    result cells are allocated by the suspend handler each time evaluation
    reaches this point, not when the tree is built, so the same tree can be
    evaluated more than once.
    """

    def start(cells: list[Any]) -> Program[tuple[T, U]]:

        def finish(index: int) -> Callable[[Any], Program[tuple[T, U]]]:
            def settle(value: Any) -> Program[tuple[T, U]]:
                cells[index] = value
                if NOT_AVAILABLE in (cells[0], cells[1]):
                    return Exit()
                return Pure((cells[0], cells[1]))

            return settle

        return bind(
            Fork(),
            lambda forked: bind(right, finish(1)) if forked else bind(left, finish(0)),
        )

    return bind(Suspend(_allocate_cells), start)


def suspend_handler(host: Host) -> Handler[Any, Any]:
    """Interpret ``Suspend`` and ``Now`` against ``host``.

    This handler must be the outermost one: whatever a resumed flow leaves
    behind is returned to the host, not to an enclosing handler.
    The continuation given to ``start`` checks what the resumed flow left
    behind: an operation no handler claimed raises ``UnhandledEffectError``
    from the host callback instead of vanishing.
    """

    def suspend(start: Start, resume: Callable[..., Program[Any]]) -> Program[Any]:
        def resume_checked(answer: Any = None) -> Program[Any]:
            return ensure_handled(resume(answer))

        start(resume_checked, host)
        return Pure(None)

    def now(resume: Callable[..., Program[Any]]) -> Program[Any]:
        return resume(host.time())

    return handler({SUSPEND: suspend, NOW: now})


def ensure_handled(program: Program[T]) -> Program[T]:
    program = Program.lift(program)
    if isinstance(program, Operation):
        raise UnhandledEffectError(program.name, program.params)
    return program


__all__ = [
    "Exit",
    "Fork",
    "NOT_AVAILABLE",
    "NOW",
    "Now",
    "SUSPEND",
    "Suspend",
    "Wait",
    "ensure_handled",
    "par",
    "suspend_handler",
]
