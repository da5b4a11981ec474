"""
The generator decorator for the genseq system.

This module provides the @generator decorator that turns a Python generator
function into a factory of LazySequence handles.
"""

from __future__ import annotations

import inspect
import types
from collections.abc import Callable, Iterator
from typing import Any, Generic, ParamSpec, TypeVar, overload

from genseq.handle import LazySequence
from genseq.storage import Storage, storage_for_function
from genseq.utils import capture_creation_context

P = ParamSpec("P")
T = TypeVar("T")


class GeneratorFunction(Generic[P, T]):
    """Callable wrapper whose calls return a fresh, not yet started LazySequence."""

    def __init__(
        self,
        func: Callable[P, Iterator[T]],
        *,
        storage: Storage | str | None = None,
        name: str | None = None,
        trace: bool | None = None,
    ) -> None:
        if not inspect.isgeneratorfunction(func):
            raise TypeError(
                f"@generator expects a generator function, got {func!r}\n"
                "Hint: the function body must contain a `yield`"
            )
        self.func = func
        self.storage = Storage.parse(storage) if storage is not None else storage_for_function(func)
        self.sequence_name = name
        self.trace = trace

        for attr in ("__doc__", "__module__", "__name__", "__qualname__", "__annotations__"):
            value = getattr(func, attr, None)
            if value is not None:
                setattr(self, attr, value)
        self.__wrapped__ = func

        try:
            signature = inspect.signature(func)
        except (TypeError, ValueError):
            signature = None
        if signature is not None:
            self.__signature__ = signature

    def __get__(self, instance: Any, owner: type | None = None) -> Any:
        if instance is None:
            return self
        return types.MethodType(self, instance)

    def __call__(self, *args: P.args, **kwargs: P.kwargs) -> LazySequence[T]:
        # Calling a generator function runs none of its body
        producer = self.func(*args, **kwargs)
        return LazySequence(
            producer,
            storage=self.storage,
            name=self.sequence_name or getattr(self, "__qualname__", None),
            created_at=capture_creation_context(skip_frames=2),
            trace=self.trace,
        )

    def __repr__(self) -> str:
        storage = self.storage.value if self.storage is not None else "default"
        return f"<GeneratorFunction {getattr(self, '__qualname__', self.func)!s} storage={storage}>"


@overload
def generator(func: Callable[P, Iterator[T]]) -> GeneratorFunction[P, T]: ...


@overload
def generator(
    func: None = None,
    *,
    storage: Storage | str | None = None,
    name: str | None = None,
    trace: bool | None = None,
) -> Callable[[Callable[P, Iterator[T]]], GeneratorFunction[P, T]]: ...


def generator(
    func: Callable[P, Iterator[T]] | None = None,
    *,
    storage: Storage | str | None = None,
    name: str | None = None,
    trace: bool | None = None,
) -> Any:
    """
    Decorator that converts a generator function into a sequence factory.

    Each call of the decorated function returns a new LazySequence. Nothing
    inside the function body runs until the sequence's first cursor is
    requested, and afterwards the body only runs up to the next ``yield`` per
    advance.

    The storage strategy for yielded values is, in order of precedence:

    - the ``storage=`` argument,
    - a ``Ref[T]`` / ``Move[T]`` marker on the element type of the return
      annotation (``Iterator[Ref[T]]``, ``Generator[Move[T], None, None]``),
    - ``GENSEQ_DEFAULT_STORAGE`` (``value`` unless configured).

    Usage:
        @generator
        def firstn(n: int) -> Iterator[int]:
            num = 0
            while num < n:
                yield num
                num += 1

        @generator(storage=Storage.REFERENCE)
        def rows(table):
            for row in table:
                yield row

        for n in firstn(20):
            ...

    Args:
        func: A generator function
        storage: Explicit storage strategy for yielded values
        name: Name used in errors, traces and reprs (defaults to the qualname)
        trace: Record transitions (defaults to ``GENSEQ_DEBUG``)

    Returns:
        GeneratorFunction producing LazySequence handles.
    """

    def decorate(target: Callable[P, Iterator[T]]) -> GeneratorFunction[P, T]:
        return GeneratorFunction(target, storage=storage, name=name, trace=trace)

    if func is not None:
        return decorate(func)
    return decorate


__all__ = ["GeneratorFunction", "generator"]
