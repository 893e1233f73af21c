"""Writer effects: ``Log`` messages collected purely or sent to loguru."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from loguru import logger

from efftree.handler import Handler, handler
from efftree.program import Operation, Program

LOG = "log"


def Log(message: Any) -> Operation[None]:
    """Writer: append ``message`` to the log; answers ``None``."""
    return Operation(LOG, (message,))


def Tell(message: Any) -> Operation[None]:
    """Alias of :func:`Log`."""
    return Log(message)


def writer_handler() -> Handler[Any, tuple[Any, tuple[Any, ...]]]:
    """Collect logged messages: the result becomes ``(value, messages)``.

    Messages are threaded through leaf values, so each branch of a
    multi-shot continuation carries its own log.
    """

    def log(message: Any, resume: Callable[..., Program[Any]]) -> Program[Any]:
        return resume().map(lambda result: (result[0], (message, *result[1])))

    return handler({LOG: log}, return_=lambda value: (value, ()))


def logger_handler(level: str = "INFO") -> Handler[Any, Any]:
    """Send logged messages to loguru at ``level`` and resume.

    ``level`` may be any level registered with loguru, custom ones included.
    """

    # raises ValueError for a level loguru does not know
    logger.level(level)
    program_logger = logger.bind(component="program")

    def log(message: Any, resume: Callable[..., Program[Any]]) -> Program[Any]:
        program_logger.log(level, "{}", message)
        return resume()

    return handler({LOG: log})


__all__ = ["LOG", "Log", "Tell", "logger_handler", "writer_handler"]
