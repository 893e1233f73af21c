"""
Kleisli arrow implementation for the efftree system.

This module contains the KleisliProgram class returned by ``@do``: a callable
that produces a program tree for each call, plus composition helpers.
"""

from __future__ import annotations

import inspect
import types
from collections.abc import Callable
from dataclasses import dataclass
from functools import wraps
from typing import Any, Generic, ParamSpec, TypeVar

from efftree.program import Program, ProgramBase

P = ParamSpec("P")
T = TypeVar("T")
U = TypeVar("U")


@dataclass
class KleisliProgram(Generic[P, T]):
    """
    Thin wrapper around a callable representing a Kleisli arrow.

    The callable stored in ``func`` is expected to produce a Program when
    invoked. Generators are single-use, so every call builds a new tree.
    """

    func: Callable[P, Program[T]]

    def __post_init__(self) -> None:
        wrapped = getattr(self.func, "__wrapped__", self.func)

        signature = _safe_signature(wrapped) or _safe_signature(self.func)
        if signature is not None:
            self.__signature__ = signature  # type: ignore[attr-defined]

        for attr in ("__name__", "__qualname__", "__doc__", "__module__"):
            value = getattr(wrapped, attr, None)
            if value is not None:
                setattr(self, attr, value)

    def __get__(self, instance: Any, owner: type | None = None) -> Any:
        if instance is None:
            return self
        return types.MethodType(self, instance)

    def __call__(self, *args: P.args, **kwargs: P.kwargs) -> Program[T]:
        program = self.func(*args, **kwargs)
        return ProgramBase.lift(program)

    def partial(
        self, /, *args: Any, **kwargs: Any
    ) -> PartiallyAppliedKleisliProgram[P, T]:
        return PartiallyAppliedKleisliProgram(self, args, kwargs)

    def and_then_k(
        self,
        binder: Callable[[T], Program[U] | U],
    ) -> KleisliProgram[P, U]:
        if not callable(binder):
            raise TypeError("binder must be callable returning a Program")

        @wraps(self.func)
        def composed(*args: P.args, **kwargs: P.kwargs) -> Program[U]:
            return self(*args, **kwargs).and_then_k(binder)

        return KleisliProgram(composed)

    def __rshift__(
        self,
        binder: Callable[[T], Program[U] | U],
    ) -> KleisliProgram[P, U]:
        return self.and_then_k(binder)

    def fmap(
        self,
        mapper: Callable[[T], U],
    ) -> KleisliProgram[P, U]:
        if not callable(mapper):
            raise TypeError("mapper must be callable")

        @wraps(self.func)
        def mapped(*args: P.args, **kwargs: P.kwargs) -> Program[U]:
            return self(*args, **kwargs).map(mapper)

        return KleisliProgram(mapped)


class PartiallyAppliedKleisliProgram(KleisliProgram[P, T]):
    """Lightweight wrapper returned by ``KleisliProgram.partial``."""

    def __init__(
        self,
        base: KleisliProgram[P, T],
        pre_args: tuple[Any, ...],
        pre_kwargs: dict[str, Any],
    ) -> None:
        self._base = base
        self._pre_args = pre_args
        self._pre_kwargs = dict(pre_kwargs)
        self.__name__ = getattr(base, "__name__", "<partial>")

    @property
    def func(self) -> Callable[P, Program[T]]:  # type: ignore[override]
        return self._base.func

    def __call__(self, *args: Any, **kwargs: Any) -> Program[T]:
        merged_args = self._pre_args + args
        merged_kwargs = {**self._pre_kwargs, **kwargs}
        return self._base(*merged_args, **merged_kwargs)

    def partial(
        self, /, *args: Any, **kwargs: Any
    ) -> PartiallyAppliedKleisliProgram[P, T]:
        merged_args = self._pre_args + args
        merged_kwargs = {**self._pre_kwargs, **kwargs}
        return PartiallyAppliedKleisliProgram(self._base, merged_args, merged_kwargs)


def _safe_signature(target: Any) -> inspect.Signature | None:
    try:
        return inspect.signature(target)
    except (TypeError, ValueError):
        return None


__all__ = ["KleisliProgram", "PartiallyAppliedKleisliProgram"]
