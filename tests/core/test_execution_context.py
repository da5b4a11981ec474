"""ExecutionContext state machine and snapshots."""

import copy

import pytest

from genseq import (
    ConcurrentResumeError,
    ContextState,
    Err,
    ExecutionContext,
    Ok,
    ResumeNotAllowedError,
    Storage,
)


def counter(limit):
    total = 0
    for step in range(limit):
        total += step
        yield total
    return total


def make_context(producer, storage=Storage.VALUE):
    return ExecutionContext(producer, storage=storage, name="counter")


def test_state_transitions():
    context = make_context(counter(2))
    assert context.state is ContextState.NOT_STARTED
    assert context.position == -1
    assert not context.slot.filled

    assert context.resume() is True
    assert context.state is ContextState.SUSPENDED
    assert context.position == 0
    assert context.current() == 0

    assert context.resume() is True
    assert context.current() == 1
    assert context.position == 1

    assert context.resume() is False
    assert context.state is ContextState.COMPLETED
    assert context.state.is_terminal
    assert context.outcome == Ok(1)
    assert context.outcome.is_ok()
    assert not context.outcome.is_err()
    assert context.outcome.ok() == 1
    assert context.outcome.err() is None
    assert not context.slot.filled


def test_resume_after_completion_is_rejected():
    context = make_context(counter(0))
    assert context.resume() is False
    with pytest.raises(ResumeNotAllowedError, match="COMPLETED"):
        context.resume()


def test_failure_is_recorded_and_raised_once():
    error = KeyError("missing")

    def failing():
        yield 1
        raise error

    context = make_context(failing())
    context.resume()
    with pytest.raises(KeyError) as exc_info:
        context.resume()
    assert exc_info.value is error
    assert context.state is ContextState.FAILED
    assert context.outcome == Err(error)
    assert context.outcome.err() is error
    assert context.outcome.is_err()
    assert context.outcome.ok() is None
    with pytest.raises(ResumeNotAllowedError, match="FAILED"):
        context.resume()


def test_current_requires_suspended_state():
    context = make_context(counter(1))
    with pytest.raises(ResumeNotAllowedError):
        context.current()


def test_destroy_from_running_state_is_rejected():
    holder = {}

    def producer():
        holder["context"].destroy()
        yield 1

    context = make_context(producer())
    holder["context"] = context
    with pytest.raises(ConcurrentResumeError):
        context.resume()
    assert context.state is ContextState.FAILED


def test_snapshot_of_suspended_context():
    context = make_context(counter(3))
    context.resume()
    context.resume()
    snapshot = context.snapshot()
    assert snapshot.state is ContextState.SUSPENDED
    assert snapshot.position == 1
    assert snapshot.name == "counter"
    assert snapshot.filename.endswith("test_execution_context.py")
    assert isinstance(snapshot.line, int)
    assert snapshot.local_names["total"] == 1
    assert snapshot.local_names["limit"] == 3
    assert snapshot.format_location() == f"{snapshot.filename}:{snapshot.line}"
    with pytest.raises(TypeError):
        snapshot.local_names["total"] = 5


def test_snapshot_outside_suspension():
    context = make_context(counter(1))
    snapshot = context.snapshot()
    assert snapshot.state is ContextState.NOT_STARTED
    assert snapshot.filename is None
    assert snapshot.format_location() == "<not suspended>"
    assert dict(snapshot.local_names) == {}


def test_context_is_not_copyable():
    context = make_context(counter(1))
    with pytest.raises(TypeError):
        copy.copy(context)
    with pytest.raises(TypeError):
        copy.deepcopy(context)


def test_destroy_releases_slot_and_is_idempotent():
    context = make_context(counter(3), storage=Storage.MOVE)
    context.resume()
    assert context.slot.filled
    context.destroy()
    context.destroy()
    assert context.state is ContextState.DESTROYED
    assert not context.slot.filled
    assert context.outcome is None
    with pytest.raises(ResumeNotAllowedError):
        context.resume()


class CopyFails:
    def __copy__(self):
        raise RuntimeError("copy refused")


def test_failing_value_copy_finishes_the_context(tracked, resource_log):
    def producer():
        with tracked("buffer"):
            yield CopyFails()
            yield CopyFails()

    context = make_context(producer())
    with pytest.raises(RuntimeError, match="copy refused") as exc_info:
        context.resume()
    assert context.state is ContextState.FAILED
    assert context.outcome.err() is exc_info.value
    assert not context.slot.filled
    assert resource_log == ["acquire buffer", "release buffer"]
    with pytest.raises(ResumeNotAllowedError, match="FAILED"):
        context.resume()
    context.destroy()
    assert context.state is ContextState.DESTROYED
