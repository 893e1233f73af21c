"""
Handlers: generic interpreters for program trees.

A handler is a table from effect name to implementation plus an optional
``return_`` transform applied at leaves. Evaluating a tree walks it through
its own continuations:

- a leaf is passed through ``return_`` (or kept as is);
- an operation whose name is in the table calls the implementation with the
  operation's parameters followed by a continuation ``answer -> evaluate(resume(answer))``.
  The implementation decides how many times to call it: zero times aborts the
  branch, once resumes normally, several times branches;
- any other operation is forwarded: the node is rebuilt with the same name and
  parameters so an enclosing handler can still interpret it, and only the
  subtree behind it is evaluated under this handler.

The result is always a program, so handlers stack: the residual tree of an
inner handler is the input of an outer one.
"""

from __future__ import annotations

import inspect
from collections.abc import Callable, Generator, Iterable, Mapping
from dataclasses import dataclass, field
from functools import wraps
from typing import Any, Generic, TypeVar

from efftree._vendor import FrozenDict
from efftree.do import build_program
from efftree.program import Operation, Program, Pure

T = TypeVar("T")
U = TypeVar("U")

RETURN = "return"

Implementation = Callable[..., Any]
Continuation = Callable[..., Program[Any]]


@dataclass(frozen=True)
class Handler(Generic[T, U]):
    """Immutable effect table plus optional leaf transform.

    Attributes:
        table: Mapping from effect name to ``(*params, resume) -> Program | value``.
            Generator implementations are built by replay, so they may
            ``yield`` the trees their continuations return; a replay reuses
            the subtree of every ``resume`` call already made.
        return_: Transform applied to every leaf value reached under this
            handler. ``None`` leaves values untouched.
    """

    table: FrozenDict = field(default_factory=FrozenDict)
    return_: Callable[[T], Program[U] | U] | None = None

    def __post_init__(self) -> None:
        if not isinstance(self.table, FrozenDict):
            object.__setattr__(self, "table", FrozenDict(self.table))
        for name, implementation in self.table.items():
            if not isinstance(name, str):
                raise TypeError(f"effect names must be str, got {type(name).__name__}")
            if not callable(implementation):
                raise TypeError(f"implementation for {name!r} must be callable")
        if self.return_ is not None and not callable(self.return_):
            raise TypeError("return_ must be callable")

    @property
    def names(self) -> frozenset[str]:
        return frozenset(self.table)

    def handles(self, name: str) -> bool:
        return name in self.table

    def extend(self, **implementations: Implementation) -> Handler[T, U]:
        """Return a new handler with extra or overriding table entries."""

        return Handler(FrozenDict({**self.table, **implementations}), self.return_)

    def __call__(self, program: Program[T] | T) -> Program[U]:
        return self.evaluate(program)

    def evaluate(self, program: Program[T] | T) -> Program[U]:
        program = Program.lift(program)
        if isinstance(program, Pure):
            if self.return_ is None:
                return program
            return Program.lift(self.return_(program.value))

        resume = program.resume

        def continuation(answer: Any = None) -> Program[U]:
            return self.evaluate(resume(answer))

        implementation = self.table.get(program.name)
        if implementation is None:
            return Operation(program.name, program.params, continuation)
        if inspect.isgeneratorfunction(implementation):
            return build_program(_replay_safe(implementation, program.params, continuation))
        return build_program(implementation, (*program.params, continuation))


def _replay_safe(
    implementation: Implementation,
    params: tuple[Any, ...],
    continuation: Continuation,
) -> Callable[[], Generator[Any, Any, Any]]:
    """Wrap a generator implementation so replay never resumes twice.

    ``build_program`` re-runs the generator from the start for every answer,
    and with it every ``resume`` call made before the last ``yield``. Each call
    is remembered by the answers the generator had received when it was made,
    its position among the calls since the last answer, and its argument. A
    replay that repeats a call gets the remembered subtree back, so handlers
    nested inside act once per requested resumption.
    """

    made: list[tuple[tuple[Any, ...], int, Any, Program[Any]]] = []

    @wraps(implementation)
    def factory() -> Generator[Any, Any, Any]:
        received: list[Any] = []
        calls = 0

        def resume(answer: Any = None) -> Program[Any]:
            nonlocal calls
            history, index = tuple(received), calls
            calls += 1
            for seen, seen_index, seen_answer, subtree in made:
                if (
                    seen_index == index
                    and _same(seen_answer, answer)
                    and len(seen) == len(history)
                    and all(a is b for a, b in zip(seen, history))
                ):
                    return subtree
            subtree = continuation(answer)
            made.append((history, index, answer, subtree))
            return subtree

        def recording() -> Generator[Any, Any, Any]:
            nonlocal calls
            gen = implementation(*params, resume)
            try:
                value = next(gen)
                while True:
                    answer = yield value
                    received.append(answer)
                    calls = 0
                    value = gen.send(answer)
            except StopIteration as stop_exc:
                return stop_exc.value

        return recording()

    return factory


def _same(left: Any, right: Any) -> bool:
    return left is right or (type(left) is type(right) and left == right)


def handler(
    table: Mapping[str, Implementation] | None = None,
    /,
    *,
    return_: Callable[[Any], Any] | None = None,
    **implementations: Implementation,
) -> Handler[Any, Any]:
    """Build a handler from a table and/or keyword implementations.

    A ``"return"`` entry in ``table`` is taken as the leaf transform, so
    models written as a single mapping work unchanged::

        hcollect = handler({
            "return": lambda value: (value, ()),
            "print": lambda message, resume: resume().map(
                lambda result: (result[0], (message, *result[1]))
            ),
        })
    """

    entries = dict(table or {})
    if RETURN in entries:
        if return_ is not None:
            raise TypeError("leaf transform given both as 'return' entry and return_")
        return_ = entries.pop(RETURN)
    entries.update(implementations)
    return Handler(FrozenDict(entries), return_)


def handle(
    program: Program[T] | T,
    model: Mapping[str, Implementation] | Handler[T, U],
    return_: Callable[[T], Any] | None = None,
) -> Program[Any]:
    """Evaluate ``program`` under ``model`` (a handler or a plain table)."""

    if isinstance(model, Handler):
        if return_ is not None:
            raise TypeError("return_ cannot be combined with a Handler instance")
        return model.evaluate(program)
    return handler(model, return_=return_).evaluate(program)


def compose(*handlers: Callable[[Program[Any]], Program[Any]]) -> Callable[[Program[Any]], Program[Any]]:
    """Stack handlers. ``handlers[0]`` is innermost, ``handlers[-1]`` outermost."""

    return _Stack(tuple(handlers))


@dataclass(frozen=True)
class _Stack:
    handlers: tuple[Callable[[Program[Any]], Program[Any]], ...]

    def __call__(self, program: Program[Any] | Any) -> Program[Any]:
        return apply_handlers(program, self.handlers)


def apply_handlers(
    program: Program[Any] | Any,
    handlers: Iterable[Callable[[Program[Any]], Program[Any]]],
) -> Program[Any]:
    result = Program.lift(program)
    for current in handlers:
        result = Program.lift(current(result))
    return result


__all__ = [
    "Continuation",
    "Handler",
    "Implementation",
    "RETURN",
    "apply_handlers",
    "compose",
    "handle",
    "handler",
]
