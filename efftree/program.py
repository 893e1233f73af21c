"""
Program tree for the efftree system.

A program is plain data: either a ``Pure`` leaf carrying a finished value or an
``Operation`` node naming an effect, the parameters it was invoked with, and a
``resume`` continuation from the answer the interpreter will supply to the rest
of the tree. Building a tree never performs an effect; performing it is the job
of whichever handler later interprets the node.

``resume`` may be invoked any number of times. Every call builds a fresh
subtree and nothing is mutated in place, which is what lets handlers resume an
operation zero, one or many times.
"""

from __future__ import annotations

from abc import ABC
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

T = TypeVar("T")
U = TypeVar("U")


class ProgramBase(ABC, Generic[T]):
    """Runtime base class for program trees (leaves and operations)."""

    def map(self, f: Callable[[T], U]) -> Program[U]:
        """Map a function over this program's result."""

        if not callable(f):
            raise TypeError("mapper must be callable")
        return bind(self, lambda value: Pure(f(value)))

    def flat_map(self, f: Callable[[T], Program[U] | U]) -> Program[U]:
        """Monadic bind operation."""

        return bind(self, f)

    def and_then_k(self, binder: Callable[[T], Program[U] | U]) -> Program[U]:
        """Alias for flat_map for Kleisli-style composition."""

        return self.flat_map(binder)

    def __rshift__(self, binder: Callable[[T], Program[U] | U]) -> Program[U]:
        return self.flat_map(binder)

    @staticmethod
    def pure(value: T) -> Program[T]:
        return Pure(value)

    @staticmethod
    def of(value: T) -> Program[T]:
        return Pure(value)

    @staticmethod
    def lift(value: Program[U] | U) -> Program[U]:
        if isinstance(value, ProgramBase):
            return value
        return Pure(value)

    @staticmethod
    def collect_all(programs: Iterable[Program[T] | T]) -> Program[list[T]]:
        """Run ``programs`` left to right and collect their results in a list."""

        from efftree._collection_combinators import collect_all

        return collect_all(programs)

    @staticmethod
    def traverse(
        items: Iterable[T],
        func: Callable[[T], Program[U] | U],
    ) -> Program[list[U]]:
        return ProgramBase.collect_all([func(item) for item in items])

    @staticmethod
    def list(*values: Program[U] | U) -> Program[list[U]]:
        return ProgramBase.collect_all(values)

    @staticmethod
    def tuple(*values: Program[U] | U) -> Program[tuple[U, ...]]:
        return ProgramBase.collect_all(values).map(tuple)


@dataclass(frozen=True)
class Pure(ProgramBase[T]):
    """Leaf of a program tree: a finished value with no further effect."""

    value: T

    def __repr__(self) -> str:
        return f"Pure({self.value!r})"


@dataclass(frozen=True, eq=False)
class Operation(ProgramBase[T]):
    """Node of a program tree.

    Attributes:
        name: Effect name the handler table is keyed by.
        params: Positional arguments the effect was invoked with.
        resume: The rest of the program, keyed by the answer the handler
            supplies. Defaults to ``Pure`` so a bare operation evaluates to
            its own answer.
    """

    name: str
    params: tuple[Any, ...] = ()
    resume: Callable[[Any], Program[T] | T] = Pure

    def __post_init__(self) -> None:
        if not isinstance(self.name, str):
            raise TypeError(f"effect name must be a str, got {type(self.name).__name__}")
        if not callable(self.resume):
            raise TypeError("resume must be callable")
        if isinstance(self.params, (str, bytes)):
            raise TypeError("params must be an iterable of arguments, not a single str or bytes")
        if not isinstance(self.params, tuple):
            object.__setattr__(self, "params", tuple(self.params))

    def continue_with(self, answer: Any = None) -> Program[T]:
        """Build the subtree that follows this operation for ``answer``."""

        return ProgramBase.lift(self.resume(answer))

    def __repr__(self) -> str:
        return f"Operation({self.name!r}, {self.params!r})"


def pure(value: T) -> Pure[T]:
    """Wrap ``value`` as a leaf."""

    return Pure(value)


def operation(
    name: str,
    params: Iterable[Any] = (),
    resume: Callable[[Any], Program[T] | T] = Pure,
) -> Operation[T]:
    """Build an operation node. Nothing is performed until a handler sees it."""

    return Operation(name, params, resume)


def bind(program: Program[T] | T, then: Callable[[T], Program[U] | U]) -> Program[U]:
    """Graft ``then`` onto every leaf of ``program``.

    A leaf is replaced by the tree ``then`` produces for its value; every
    operation along the way is preserved and only its continuation is
    composed, so ``bind`` is structural substitution and associative.
    """

    if not callable(then):
        raise TypeError("binder must be callable returning a Program")
    program = ProgramBase.lift(program)
    if isinstance(program, Pure):
        return ProgramBase.lift(then(program.value))
    resume = program.resume
    return Operation(
        program.name,
        program.params,
        lambda answer: bind(resume(answer), then),
    )


Program = ProgramBase

__all__ = ["Operation", "Program", "ProgramBase", "Pure", "bind", "operation", "pure"]
