from __future__ import annotations

from typing import Any


class EffectTreeError(Exception):
    """Base class for errors raised by the efftree runtime."""


class UnhandledEffectError(EffectTreeError):
    """Raised when an operation reaches the outermost evaluation unhandled."""

    def __init__(self, name: str, params: tuple[Any, ...] = ()) -> None:
        self.name = name
        self.params = params
        super().__init__(
            f"No handler for effect {name!r} (params={params!r})\n"
            f"Hint: evaluate the program with a handler whose table defines {name!r}"
        )


class ReplayDivergenceError(EffectTreeError):
    """Raised when a replayed generator finishes before its recorded answers run out."""

    def __init__(self, function_name: str, expected: int, consumed: int) -> None:
        self.function_name = function_name
        self.expected = expected
        self.consumed = consumed
        super().__init__(
            f"{function_name} finished after receiving {consumed} of {expected} recorded answers "
            "during replay; its body is not deterministic up to each yield"
        )


class NoResultError(EffectTreeError):
    """Raised by scheduled runs when no flow reached the end of the program."""

    def __init__(self) -> None:
        super().__init__("every flow ended at a dead end; the program produced no value")


class SchedulerStepLimitError(EffectTreeError):
    """Raised when a scheduler runs more tasks than its configured limit."""

    def __init__(self, max_steps: int) -> None:
        self.max_steps = max_steps
        super().__init__(f"scheduler exceeded max_steps ({max_steps})")


class MissingEnvKeyError(EffectTreeError, KeyError):
    """Raised when Ask cannot find the requested key in the environment."""

    def __init__(self, key: Any) -> None:
        self.key = key
        super().__init__(
            f"Environment key not found: {key!r}\n"
            f"Hint: Provide this key via `reader_handler({{'{key}': value}})`"
        )

    def __str__(self) -> str:
        return str(self.args[0])


__all__ = [
    "EffectTreeError",
    "MissingEnvKeyError",
    "NoResultError",
    "ReplayDivergenceError",
    "SchedulerStepLimitError",
    "UnhandledEffectError",
]
