"""
Adaptors written as producers over the minimal cursor contract.

Each adaptor returns a callable taking a source, so it can be applied
directly (``take(3)(seq)``) or piped (``seq | take(3)``). A source may be a
LazySequence or any iterable; iterables are wrapped and closed by the adaptor,
LazySequence sources stay owned by the caller. Values pass through by
reference, so whatever storage the source used is what the consumer sees.
"""

from __future__ import annotations

from collections.abc import Callable, Generator, Iterable
from contextlib import AbstractContextManager, nullcontext
from typing import Any, TypeVar

from genseq.handle import LazySequence
from genseq.storage import Storage

T = TypeVar("T")


def _source_sequence(source: LazySequence[T] | Iterable[T]) -> AbstractContextManager[LazySequence[T]]:
    if isinstance(source, LazySequence):
        return nullcontext(source)
    return LazySequence.from_iterable(source, storage=Storage.REFERENCE)


def _take_producer(source: LazySequence[T] | Iterable[T], count: int) -> Generator[T, None, None]:
    if count == 0:
        return
    with _source_sequence(source) as sequence:
        cursor = sequence.begin()
        taken = 0
        while not cursor.is_end():
            yield cursor.current()
            taken += 1
            if taken == count:
                # Stop without resuming the source again
                return
            cursor.advance()


def _enumerate_producer(
    source: LazySequence[T] | Iterable[T], start: int
) -> Generator[tuple[int, T], None, None]:
    with _source_sequence(source) as sequence:
        cursor = sequence.begin()
        index = start
        while not cursor.is_end():
            yield (index, cursor.current())
            index += 1
            cursor.advance()


def take(count: int) -> Callable[[LazySequence[T] | Iterable[T]], LazySequence[T]]:
    """Bounded prefix: the first ``count`` values of the source, lazily."""

    if not isinstance(count, int) or isinstance(count, bool):
        raise TypeError(f"take() expects an int count, got {type(count).__name__}")
    if count < 0:
        raise ValueError(f"take() count must be non-negative, got {count}")

    def adaptor(source: LazySequence[T] | Iterable[T]) -> LazySequence[T]:
        return LazySequence(
            _take_producer(source, count),
            storage=Storage.REFERENCE,
            name=f"take({count})",
        )

    return adaptor


def enumerate_seq(
    start: int = 0,
) -> Callable[[LazySequence[T] | Iterable[T]], LazySequence[tuple[int, T]]]:
    """Index pairing: ``(start, v0), (start + 1, v1), ...``."""

    def adaptor(source: LazySequence[T] | Iterable[T]) -> LazySequence[tuple[int, Any]]:
        return LazySequence(
            _enumerate_producer(source, start),
            storage=Storage.REFERENCE,
            name=f"enumerate_seq({start})",
        )

    return adaptor


__all__ = ["enumerate_seq", "take"]
