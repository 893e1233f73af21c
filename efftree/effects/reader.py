"""Reader effects: read-only access to an environment supplied by the handler."""

from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import Any

from efftree._vendor import FrozenDict
from efftree.errors import MissingEnvKeyError
from efftree.handler import Handler, handler
from efftree.program import Operation, Program

READ = "read"
ASK = "ask"


def Read() -> Operation[Any]:
    """Reader: answer the whole environment."""
    return Operation(READ)


def Ask(key: Any) -> Operation[Any]:
    """Reader: answer the environment entry for ``key``."""
    return Operation(ASK, (key,))


def reader_handler(env: Mapping[Any, Any] | None = None) -> Handler[Any, Any]:
    """Answer ``Read``/``Ask`` from a frozen copy of ``env``.

    Raises:
        MissingEnvKeyError: When a program asks for a key ``env`` lacks.
    """

    frozen_env = FrozenDict(env or {})

    def read(resume: Callable[..., Program[Any]]) -> Program[Any]:
        return resume(frozen_env)

    def ask(key: Any, resume: Callable[..., Program[Any]]) -> Program[Any]:
        if key not in frozen_env:
            raise MissingEnvKeyError(key)
        return resume(frozen_env[key])

    return handler({READ: read, ASK: ask})


__all__ = ["ASK", "Ask", "READ", "Read", "reader_handler"]
