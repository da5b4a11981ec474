"""
Execution context for one producer invocation.

The context drives a suspended Python generator through the lifecycle::

    NOT_STARTED -> SUSPENDED -> ... -> SUSPENDED -> COMPLETED | FAILED

``RUNNING`` is held only while a resume is in flight and ``DESTROYED`` is the
state after teardown. The generator object is the saved continuation point;
its frame keeps every local alive across suspensions, so a resume never
re-executes code that ran before the last ``yield``.
"""

from __future__ import annotations

import logging
from collections.abc import Generator
from dataclasses import dataclass
from enum import Enum
from typing import Any, Generic, TypeVar

from genseq._vendor import Err, FrozenDict, Ok, Result
from genseq.errors import ConcurrentResumeError, ResumeNotAllowedError
from genseq.storage import Storage, YieldedSlot
from genseq.trace import SequenceTracer
from genseq.utils import CreationContext

T = TypeVar("T")

logger = logging.getLogger(__name__)


class ContextState(Enum):
    NOT_STARTED = "not_started"
    RUNNING = "running"
    SUSPENDED = "suspended"
    COMPLETED = "completed"
    FAILED = "failed"
    DESTROYED = "destroyed"

    def __str__(self) -> str:
        return self.name

    @property
    def is_terminal(self) -> bool:
        return self in (ContextState.COMPLETED, ContextState.FAILED, ContextState.DESTROYED)


@dataclass(frozen=True)
class ContextSnapshot:
    """
    Point-in-time, read-only view of an execution context.

    Attributes:
        name: Producer name.
        state: Lifecycle state when the snapshot was taken.
        position: Index of the value in the slot, ``-1`` before the first value.
        filename: Source file of the suspension point, if suspended.
        line: Line of the suspension point, if suspended.
        local_names: Frozen copy of the producer's locals at the suspension point.
    """

    name: str
    state: ContextState
    position: int
    filename: str | None
    line: int | None
    local_names: FrozenDict

    def format_location(self) -> str:
        if self.filename is None:
            return "<not suspended>"
        return f"{self.filename}:{self.line}"


class ExecutionContext(Generic[T]):
    """Owns one producer generator, its yielded slot and its completion record."""

    def __init__(
        self,
        producer: Generator[T, Any, Any],
        *,
        storage: Storage,
        name: str | None = None,
        created_at: CreationContext | None = None,
        tracer: SequenceTracer | None = None,
    ) -> None:
        self._generator: Generator[T, Any, Any] | None = producer
        self.name = name or getattr(producer, "__qualname__", None) or repr(producer)
        self.created_at = created_at
        self.slot = YieldedSlot(storage)
        self.outcome: Result[Any] | None = None
        self.position = -1
        self.tracer = tracer
        self._state = ContextState.NOT_STARTED
        self._trace("created")

    @property
    def state(self) -> ContextState:
        return self._state

    @property
    def storage(self) -> Storage:
        return self.slot.strategy

    def resume(self) -> bool:
        """Run the producer to its next ``yield``.

        Returns ``True`` when a new value sits in the slot and ``False`` when
        the producer finished normally. A failure raised by the producer is
        recorded and re-raised unchanged.
        """

        if self._state is ContextState.RUNNING:
            raise ConcurrentResumeError(sequence=self)
        if self._state not in (ContextState.NOT_STARTED, ContextState.SUSPENDED):
            raise ResumeNotAllowedError(self._state, sequence=self)
        assert self._generator is not None

        self.slot.clear()
        self._state = ContextState.RUNNING
        self._trace("resumed")
        logger.debug("Resuming %s after position %d", self.name, self.position)

        try:
            value = next(self._generator)
        except StopIteration as stop:
            self._finish(Ok(stop.value))
            return False
        except BaseException as exc:
            self._finish(Err(exc))
            raise

        try:
            self.slot.store(value)
        except BaseException as exc:
            # The producer is parked at a yield whose value cannot be kept
            try:
                self._close_generator()
            finally:
                self._finish(Err(exc))
            raise

        self.position += 1
        self._state = ContextState.SUSPENDED
        self._trace("yielded", value=value)
        return True

    def current(self) -> T:
        """Return the value in the slot; only valid while suspended."""

        if self._state is not ContextState.SUSPENDED:
            raise ResumeNotAllowedError(self._state, sequence=self)
        return self.slot.load()

    def destroy(self) -> None:
        """Tear the context down from whatever state it is in.

        A suspended producer is unwound from its suspension point: its
        ``finally`` blocks and ``with`` exits run in reverse order and no
        further value is produced. Calling this twice is a no-op.
        """

        if self._state is ContextState.DESTROYED:
            return
        if self._state is ContextState.RUNNING:
            raise ConcurrentResumeError(sequence=self)

        previous = self._state
        self.slot.clear()
        try:
            self._close_generator()
        finally:
            self._state = ContextState.DESTROYED
            self._trace("destroyed")
            logger.debug("Destroyed %s (was %s)", self.name, previous)

    def snapshot(self) -> ContextSnapshot:
        frame = getattr(self._generator, "gi_frame", None) if self._generator else None
        if frame is not None and self._state is ContextState.SUSPENDED:
            filename: str | None = frame.f_code.co_filename
            line: int | None = frame.f_lineno
            local_names = FrozenDict(frame.f_locals)
        else:
            filename = None
            line = None
            local_names = FrozenDict()
        return ContextSnapshot(
            name=self.name,
            state=self._state,
            position=self.position,
            filename=filename,
            line=line,
            local_names=local_names,
        )

    def _close_generator(self) -> None:
        generator, self._generator = self._generator, None
        if generator is not None:
            generator.close()

    def _finish(self, outcome: Result[Any]) -> None:
        self._generator = None
        self.slot.clear()
        self.outcome = outcome
        if outcome.is_err():
            self._state = ContextState.FAILED
            self._trace("failed", error=outcome.err())
            logger.debug("%s failed after position %d: %r", self.name, self.position, outcome.err())
        else:
            self._state = ContextState.COMPLETED
            self._trace("completed")
            logger.debug("%s completed after position %d", self.name, self.position)

    def _trace(self, action: Any, *, value: object = None, error: BaseException | None = None) -> None:
        if self.tracer is not None:
            self.tracer.record(action, self.position, value=value, error=error)

    def __copy__(self) -> ExecutionContext[T]:
        raise TypeError("ExecutionContext cannot be copied; it is owned by exactly one sequence")

    def __deepcopy__(self, memo: dict[int, Any]) -> ExecutionContext[T]:
        raise TypeError("ExecutionContext cannot be copied; it is owned by exactly one sequence")

    def __repr__(self) -> str:
        location = f" created at {self.created_at.format_location()}" if self.created_at else ""
        return f"<ExecutionContext {self.name} {self._state} pos={self.position}{location}>"


__all__ = ["ContextSnapshot", "ContextState", "ExecutionContext"]
