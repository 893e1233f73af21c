"""
Output effects.

``Print`` is a nullary-answer operation. Where a handler calls the
continuation relative to the visible action decides the output order:
acting first gives natural order, resuming first defers the action until the
rest of the program (including later prints) has unwound.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from efftree.handler import Handler, handler
from efftree.program import Operation, Program, bind

PRINT = "print"


def Print(message: Any) -> Operation[None]:
    """Output: emit ``message``; answers ``None``."""
    return Operation(PRINT, (message,))


def print_handler(sink: Callable[[Any], Any] = print) -> Handler[Any, Any]:
    """Perform each print with ``sink`` and then resume (natural order)."""

    if not callable(sink):
        raise TypeError("sink must be callable")

    def print_(message: Any, resume: Callable[..., Program[Any]]) -> Program[Any]:
        sink(message)
        return resume()

    return handler({PRINT: print_})


def reverse_print_handler() -> Handler[Any, Any]:
    """Resume first, then re-emit each print outward.

    Once an outer ``print_handler`` performs them, messages appear in reverse
    program order. The program's value is preserved.
    """

    def print_(message: Any, resume: Callable[..., Program[Any]]) -> Program[Any]:
        return bind(resume(), lambda value: Print(message).map(lambda _: value))

    return handler({PRINT: print_})


def collect_print_handler() -> Handler[Any, tuple[Any, tuple[Any, ...]]]:
    """Collect messages instead of printing: the result is ``(value, messages)``."""

    def print_(message: Any, resume: Callable[..., Program[Any]]) -> Program[Any]:
        return resume().map(lambda result: (result[0], (message, *result[1])))

    return handler({PRINT: print_}, return_=lambda value: (value, ()))


__all__ = [
    "PRINT",
    "Print",
    "collect_print_handler",
    "print_handler",
    "reverse_print_handler",
]
