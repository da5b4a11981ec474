"""Abandoning a suspended sequence unwinds the producer deterministically."""

from collections.abc import Iterator

import pytest

from genseq import ContextState, generator


def test_close_releases_in_reverse_acquisition_order(resource_log, tracked):
    @generator
    def nested() -> Iterator[int]:
        with tracked("outer"):
            yield 1
            with tracked("inner"):
                yield 2
                yield 3

    seq = nested()
    cursor = seq.begin()
    cursor.advance()
    assert cursor.current() == 2
    seq.close()
    assert resource_log == [
        "acquire outer",
        "acquire inner",
        "release inner",
        "release outer",
    ]


def test_abandonment_produces_no_further_values(resource_log, tracked):
    produced = []

    @generator
    def chatty() -> Iterator[int]:
        try:
            for value in range(10):
                produced.append(value)
                yield value
        finally:
            resource_log.append("finally")

    seq = chatty()
    assert seq.begin().current() == 0
    seq.close()
    assert produced == [0]
    assert resource_log == ["finally"]


def test_early_loop_exit_releases_once(resource_log, tracked):
    @generator
    def guarded() -> Iterator[int]:
        with tracked("file"):
            yield from range(100)

    with guarded() as seq:
        for value in seq:
            if value == 3:
                break
    assert resource_log == ["acquire file", "release file"]


def test_completed_sequence_close_does_not_release_again(resource_log, tracked):
    @generator
    def guarded() -> Iterator[int]:
        with tracked("a"):
            yield 1

    seq = guarded()
    assert list(seq) == [1]
    seq.close()
    assert resource_log == ["acquire a", "release a"]
    assert seq.state is ContextState.DESTROYED


def test_producer_error_during_unwind_propagates():
    @generator
    def broken_cleanup() -> Iterator[int]:
        try:
            yield 1
        finally:
            raise ValueError("cleanup failed")

    seq = broken_cleanup()
    seq.begin()
    with pytest.raises(ValueError, match="cleanup failed"):
        seq.close()
    assert seq.state is ContextState.DESTROYED


@pytest.mark.filterwarnings("ignore::pytest.PytestUnraisableExceptionWarning")
def test_producer_yielding_during_unwind_is_rejected():
    @generator
    def stubborn() -> Iterator[int]:
        try:
            yield 1
        finally:
            yield 2

    seq = stubborn()
    seq.begin()
    with pytest.raises(RuntimeError, match="GeneratorExit"):
        seq.close()
    assert seq.state is ContextState.DESTROYED
