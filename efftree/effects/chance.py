"""Random effect: the program asks, the handler decides where numbers come from."""

from __future__ import annotations

import random
from collections.abc import Callable
from typing import Any

from efftree.handler import Handler, handler
from efftree.program import Operation, Program

RANDOM = "random"


def Random() -> Operation[float]:
    """Random: answer a float in ``[0, 1)``."""
    return Operation(RANDOM)


def random_handler(seed: Any = None) -> Handler[Any, Any]:
    """Answer ``Random`` from a private generator seeded with ``seed``."""

    rng = random.Random(seed)

    def random_(resume: Callable[..., Program[Any]]) -> Program[Any]:
        return resume(rng.random())

    return handler({RANDOM: random_})


__all__ = ["RANDOM", "Random", "random_handler"]
