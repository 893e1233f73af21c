"""
Nondeterministic choice.

``Decide`` answers a boolean and ``Fail`` is a dead end that is never
resumed. Search strategies are handlers that decide how often, and with which
answers, to resume a ``Decide``:

- ``backtrack`` tries ``False`` first and falls back to ``True`` when the
  evaluated branch still fails;
- ``pick_max``/``pick_min`` resume with both answers and combine the results,
  each exactly once;
- ``all_choices`` enumerates every solution.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any, TypeVar

from efftree.handler import Handler, handle, handler
from efftree.program import Operation, Program, Pure, bind

T = TypeVar("T")

DECIDE = "decide"
FAIL = "fail"


def Decide() -> Operation[bool]:
    """Choice: answer ``True`` or ``False``, at the handler's discretion."""
    return Operation(DECIDE)


def Fail() -> Operation[Any]:
    """Choice: abandon this branch."""
    return Operation(FAIL)


def choose(first: Program[T] | T, second: Program[T] | T) -> Program[T]:
    return bind(Decide(), lambda decided: first if decided else second)


def choose_in(low: int, high: int) -> Program[int]:
    """Choose an integer in ``[low, high]``; fails once the range is empty."""

    if low > high:
        return Fail()
    return bind(Decide(), lambda decided: Pure(low) if decided else choose_in(low + 1, high))


def guard(condition: bool) -> Program[None]:
    return Pure(None) if condition else Fail()


def _backtrack_decide(resume: Callable[[bool], Program[Any]]) -> Program[Any]:
    return handle(resume(False), {FAIL: lambda _resume: resume(True)})


backtrack: Handler[Any, Any] = handler({DECIDE: _backtrack_decide})


def _combine_both(combine: Callable[[Any, Any], Any]) -> Callable[..., Program[Any]]:
    def decide(resume: Callable[[bool], Program[Any]]) -> Program[Any]:
        return bind(resume(True), lambda x: bind(resume(False), lambda y: combine(x, y)))

    return decide


pick_max: Handler[Any, Any] = handler({DECIDE: _combine_both(max)})
pick_min: Handler[Any, Any] = handler({DECIDE: _combine_both(min)})


def _all_decide(resume: Callable[[bool], Program[list[Any]]]) -> Program[list[Any]]:
    return bind(resume(True), lambda xs: resume(False).map(lambda ys: [*xs, *ys]))


all_choices: Handler[Any, list[Any]] = handler(
    {DECIDE: _all_decide, FAIL: lambda _resume: Pure([])},
    return_=lambda value: [value],
)

_fail_to_none: Handler[Any, Any] = handler({FAIL: lambda _resume: Pure(None)})


def first_solution(program: Program[T]) -> Program[T | None]:
    """First solution ``backtrack`` finds, or ``None`` when every branch fails."""

    return _fail_to_none(backtrack(program))


__all__ = [
    "DECIDE",
    "Decide",
    "FAIL",
    "Fail",
    "all_choices",
    "backtrack",
    "choose",
    "choose_in",
    "first_solution",
    "guard",
    "pick_max",
    "pick_min",
]
