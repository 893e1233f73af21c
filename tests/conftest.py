"""
Shared fixtures for the efftree test-suite.

``trace`` walks a program tree by feeding it a fixed list of answers, which
gives an observational notion of equality for trees whose continuations are
closures.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from typing import Any

import pytest

from efftree.program import Operation, Program, Pure
from efftree.scheduler import Scheduler

Trace = tuple[tuple[tuple[str, tuple[Any, ...]], ...], Any]


def _trace(program: Program[Any] | Any, answers: Iterable[Any] = ()) -> Trace:
    pending = list(answers)
    seen: list[tuple[str, tuple[Any, ...]]] = []
    current = Program.lift(program)
    while isinstance(current, Operation):
        seen.append((current.name, current.params))
        answer = pending.pop(0) if pending else None
        current = current.continue_with(answer)
    assert isinstance(current, Pure)
    return tuple(seen), current.value


@pytest.fixture
def trace() -> Callable[..., Trace]:
    """Follow a tree with the given answers; returns (operations seen, final value)."""

    return _trace


@pytest.fixture
def scheduler() -> Scheduler:
    return Scheduler()


@pytest.fixture
def sink() -> list[Any]:
    """A list used as an output sink: pass ``sink.append`` to print_handler."""

    return []
