"""
State effects in state-passing style.

``state_handler`` never stores the state anywhere. Leaves and implementations
return functions from the current state to the rest of the program, and those
functions are chained with ``apply``; ``run_state`` feeds in the initial
state. Each resumption therefore sees exactly the state threaded into it.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any, TypeVar

from efftree._collection_combinators import apply
from efftree.handler import Handler, handler
from efftree.program import Operation, Program, Pure, bind

S = TypeVar("S")
T = TypeVar("T")

GET = "get"
PUT = "put"


def Get() -> Operation[Any]:
    """State: answer the current state."""
    return Operation(GET)


def Put(value: Any) -> Operation[None]:
    """State: replace the current state with ``value``."""
    return Operation(PUT, (value,))


def Modify(func: Callable[[Any], Any]) -> Program[Any]:
    """State: apply ``func`` to the current state; answers the new state."""

    def update(old: Any) -> Program[Any]:
        new = func(old)
        return Put(new).map(lambda _: new)

    return bind(Get(), update)


def state_handler(*, with_final_state: bool = False) -> Handler[Any, Callable[[Any], Any]]:
    """Interpret ``Get``/``Put`` as functions of the incoming state.

    Args:
        with_final_state: When true the eventual result is ``(value, state)``
            instead of the bare value.
    """

    def get(resume: Callable[..., Program[Any]]) -> Callable[[Any], Program[Any]]:
        return lambda state: apply(resume(state), Pure(state))

    def put(value: Any, resume: Callable[..., Program[Any]]) -> Callable[[Any], Program[Any]]:
        return lambda _state: apply(resume(), Pure(value))

    if with_final_state:
        finish = lambda value: lambda state: (value, state)  # noqa: E731
    else:
        finish = lambda value: lambda _state: value  # noqa: E731

    return handler({GET: get, PUT: put}, return_=finish)


def run_state(
    program: Program[T] | T,
    initial: S,
    *,
    with_final_state: bool = False,
) -> Program[Any]:
    """Handle state operations in ``program`` starting from ``initial``."""

    carrier = state_handler(with_final_state=with_final_state)(program)
    return apply(carrier, Pure(initial))


__all__ = ["GET", "Get", "Modify", "PUT", "Put", "run_state", "state_handler"]
