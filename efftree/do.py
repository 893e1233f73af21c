"""
The do decorator for the efftree system.

This module turns sequentially written generator functions into program
trees. Each ``yield`` is a suspension point: the yielded value is a
sub-program, and the rest of the generator is grafted onto every leaf of it.

MULTI-SHOT RESUMPTION BY REPLAY:
Python generators can only be resumed once, but a handler may call a
continuation many times (backtracking, maximising over choices). To resume a
suspension point again, the builder starts a fresh generator from the
beginning and sends it the full history of earlier answers plus the new one.

REPLAY PRECONDITION:
Everything a generator body does before a ``yield`` runs again on every
replay. The body must therefore be deterministic up to each suspension
point: no printing, no mutation of outside state, no reads of clocks or
random sources. Perform those through operations instead, so a handler
decides what happens. A body that returns before its recorded answers run
out raises ``ReplayDivergenceError``; other violations cannot be detected.

    WRONG:
        @do
        def program():
            calls.append("start")       # runs once per replay
            x = yield choose(1, 2)
            return x

    CORRECT:
        @do
        def program():
            yield Log("start")          # a handler decides what to do
            x = yield choose(1, 2)
            return x
"""

from __future__ import annotations

import inspect
from collections.abc import Callable, Generator, Mapping
from functools import wraps
from typing import Any, ParamSpec, TypeVar

from efftree.errors import ReplayDivergenceError
from efftree.kleisli import KleisliProgram
from efftree.program import Program, bind

P = ParamSpec("P")
T = TypeVar("T")

ProgramGenerator = Generator[Any, Any, T]


def build_program(
    factory: Callable[..., ProgramGenerator[T] | Program[T] | T],
    args: tuple[Any, ...] = (),
    kwargs: Mapping[str, Any] | None = None,
    history: tuple[Any, ...] = (),
) -> Program[T]:
    """Translate a generator factory into a program tree.

    Args:
        factory: Called with ``args``/``kwargs`` to create a fresh generator.
            A factory that returns something other than a generator has its
            result lifted into a program.
        args: Positional arguments for ``factory``.
        kwargs: Keyword arguments for ``factory``.
        history: Answers already supplied to earlier suspension points. They
            are replayed into the fresh generator before it is inspected.

    Returns:
        A ``Pure`` leaf if the generator finishes, otherwise the yielded
        sub-program bound to the builder for the next answer.
    """

    kwargs = dict(kwargs or {})
    result = factory(*args, **kwargs)
    if not inspect.isgenerator(result):
        return Program.lift(result)

    gen = result
    consumed = 0
    try:
        current = next(gen)
        for answer in history:
            consumed += 1
            current = gen.send(answer)
    except StopIteration as stop_exc:
        if consumed < len(history):
            raise ReplayDivergenceError(
                getattr(factory, "__qualname__", repr(factory)),
                expected=len(history),
                consumed=consumed,
            ) from None
        return Program.lift(stop_exc.value)

    return bind(
        Program.lift(current),
        lambda answer: build_program(factory, args, kwargs, (*history, answer)),
    )


class DoYieldFunction(KleisliProgram[P, T]):
    """Specialised KleisliProgram for generator-based @do functions."""

    def __init__(self, func: Callable[P, ProgramGenerator[T]]) -> None:
        @wraps(func)
        def program_factory(*args: P.args, **kwargs: P.kwargs) -> Program[T]:
            return build_program(func, args, kwargs)

        super().__init__(program_factory)
        self.original_func = func

    @property
    def original_generator(self) -> Callable[P, ProgramGenerator[T]]:
        """Expose the user-defined generator for downstream tooling."""

        return self.original_func


def do(
    func: Callable[P, ProgramGenerator[T]],
) -> KleisliProgram[P, T]:
    """
    Decorator that converts a generator function into a KleisliProgram.

    Calling the decorated function runs the generator up to its first
    ``yield`` and returns the program tree; the remainder is produced lazily
    as handlers supply answers. See the module docstring for the replay
    precondition every body must respect.

    Usage:
        @do
        def pythagorean(low: int, high: int):
            a = yield choose_in(low, high - 1)
            b = yield choose_in(a + 1, high)
            c = math.isqrt(a * a + b * b)
            yield guard(c * c == a * a + b * b)
            return (a, b, c)

        first_solution(pythagorean(4, 15))  # Pure((9, 12, 15))

    Args:
        func: A generator function that yields programs (or plain values,
            which are treated as leaves) and returns the final value.

    Returns:
        KleisliProgram producing ``Program[T]`` when called.
    """

    return DoYieldFunction(func)


__all__ = ["DoYieldFunction", "ProgramGenerator", "build_program", "do"]
