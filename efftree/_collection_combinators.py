"""Combinators derived from ``bind``."""

from __future__ import annotations

from collections.abc import Callable, Iterable
from typing import Any, TypeVar

from efftree.program import Program, Pure, bind

T = TypeVar("T")


def collect_all(programs: Iterable[Program[T] | T]) -> Program[list[T]]:
    """Run ``programs`` left to right and collect their results in order."""

    programs = [Program.lift(program) for program in programs]

    def step(index: int, collected: tuple[Any, ...]) -> Program[list[T]]:
        if index == len(programs):
            return Pure(list(collected))
        return bind(programs[index], lambda value: step(index + 1, (*collected, value)))

    return step(0, ())


def sequence(*programs: Program[Any] | Any) -> Program[Any]:
    """Run ``programs`` left to right and keep only the last result."""

    if not programs:
        return Pure(None)
    return bind(collect_all(programs), lambda values: values[-1])


def apply(cfunc: Program[Callable[..., Any]] | Callable[..., Any], *cargs: Program[Any] | Any) -> Program[Any]:
    """Apply a tree-valued function to tree-valued arguments."""

    return bind(cfunc, lambda func: bind(collect_all(cargs), lambda args: func(*args)))


__all__ = ["apply", "collect_all", "sequence"]
