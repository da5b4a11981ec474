"""
LazySequence: the unique owner of one producer's execution context.

ARCHITECTURAL SIGNIFICANCE:
A sequence is created by calling a producer, but no producer code runs until
a start cursor is requested. From then on the producer is resumed exactly
once per ``advance()``. Closing the sequence (explicitly, through ``with`` or
by dropping the last reference) unwinds a suspended producer from its
``yield`` so every ``with`` block and ``finally`` clause it entered is exited
in reverse order.

Ownership is unique. Copying a sequence is refused; ``move()`` hands the
context to a new sequence and leaves the source inert, and an inert sequence
behaves like an empty one.
"""

from __future__ import annotations

import inspect
import logging
from collections.abc import Callable, Generator, Iterable
from typing import Any, Generic, TypeVar

from genseq._vendor import Result
from genseq.context import ContextSnapshot, ContextState, ExecutionContext
from genseq.cursor import END, Cursor, EndMarker, SequenceIterator
from genseq.errors import ConcurrentResumeError, CursorRestartError
from genseq.storage import Storage, default_storage
from genseq.trace import SequenceTracer, TraceEvent, tracing_enabled_by_default
from genseq.utils import CreationContext, capture_creation_context

T = TypeVar("T")
U = TypeVar("U")

logger = logging.getLogger(__name__)


class LazySequence(Generic[T]):
    """Single-pass, pull-based sequence backed by a suspended producer."""

    def __init__(
        self,
        producer: Generator[T, Any, Any],
        *,
        storage: Storage | str | None = None,
        name: str | None = None,
        created_at: CreationContext | None = None,
        trace: bool | None = None,
    ) -> None:
        if not inspect.isgenerator(producer):
            raise TypeError(
                f"LazySequence expects a generator object, got {type(producer).__name__}\n"
                "Hint: use LazySequence.from_iterable() for other iterables"
            )
        strategy = Storage.parse(storage) if storage is not None else default_storage()
        name = name or producer.__qualname__
        if trace is None:
            trace = tracing_enabled_by_default()
        tracer = SequenceTracer(name) if trace else None
        if created_at is None:
            created_at = capture_creation_context(skip_frames=2)

        self._name = name
        self._context: ExecutionContext[T] | None = ExecutionContext(
            producer,
            storage=strategy,
            name=name,
            created_at=created_at,
            tracer=tracer,
        )
        self._advanced = False

    @classmethod
    def from_iterable(
        cls,
        iterable: Iterable[U],
        *,
        storage: Storage | str | None = None,
        name: str | None = None,
        trace: bool | None = None,
    ) -> LazySequence[U]:
        """Wrap any iterable; it is not iterated until the first cursor is requested."""

        def from_iterable_producer() -> Generator[U, None, None]:
            yield from iterable

        return cls(
            from_iterable_producer(),
            storage=storage,
            name=name or f"from_iterable({type(iterable).__name__})",
            created_at=capture_creation_context(skip_frames=2),
            trace=trace,
        )

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------
    @property
    def name(self) -> str:
        return self._name

    @property
    def context(self) -> ExecutionContext[T] | None:
        return self._context

    @property
    def state(self) -> ContextState | None:
        """Lifecycle state, or ``None`` once the context was moved out."""
        return self._context.state if self._context is not None else None

    @property
    def storage(self) -> Storage | None:
        return self._context.storage if self._context is not None else None

    @property
    def outcome(self) -> Result[Any] | None:
        return self._context.outcome if self._context is not None else None

    @property
    def result(self) -> Any:
        """The producer's ``return`` value once it completed normally."""
        outcome = self.outcome
        return outcome.ok() if outcome is not None else None

    @property
    def created_at(self) -> CreationContext | None:
        return self._context.created_at if self._context is not None else None

    @property
    def trace_events(self) -> list[TraceEvent]:
        context = self._context
        if context is None or context.tracer is None:
            return []
        return list(context.tracer.events)

    def snapshot(self) -> ContextSnapshot | None:
        return self._context.snapshot() if self._context is not None else None

    # ------------------------------------------------------------------
    # Iteration contract
    # ------------------------------------------------------------------
    def begin(self) -> Cursor[T]:
        """Return a cursor at the first value, or at the end marker if empty.

        The first call resumes the producer. Further calls before any advance
        return an equivalent cursor without resuming again; after an advance
        they raise ``CursorRestartError``.
        """

        context = self._context
        if context is None:
            return Cursor(self, -1, exhausted=True)
        if self._advanced:
            raise CursorRestartError(sequence=self)
        if context.state is ContextState.NOT_STARTED:
            self._resume(context, advancing=False)
        if context.state is ContextState.SUSPENDED:
            return Cursor(self, context.position, exhausted=False)
        return Cursor(self, context.position, exhausted=True)

    start = begin

    def end(self) -> EndMarker:
        return END

    def _resume(self, context: ExecutionContext[T], *, advancing: bool) -> bool:
        if advancing:
            self._advanced = True
        return context.resume()

    def __iter__(self) -> SequenceIterator[T]:
        return SequenceIterator(self)

    def __or__(self, adaptor: Callable[[LazySequence[T]], U]) -> U:
        if not callable(adaptor):
            return NotImplemented
        return adaptor(self)

    # ------------------------------------------------------------------
    # Ownership
    # ------------------------------------------------------------------
    def close(self) -> None:
        """Destroy the execution context from whatever state it is in."""

        context = self._context
        if context is not None:
            context.destroy()

    def move(self) -> LazySequence[T]:
        """Transfer ownership of the context to a new sequence.

        The source keeps no context afterwards: its ``begin()`` returns an
        exhausted cursor and cursors taken from it become stale.
        """

        context = self._context
        if context is not None and context.state is ContextState.RUNNING:
            raise ConcurrentResumeError(sequence=self)

        target: LazySequence[T] = LazySequence.__new__(LazySequence)
        target._name = self._name
        target._context = context
        target._advanced = self._advanced
        self._context = None
        if context is not None and context.tracer is not None:
            context.tracer.record("moved", context.position)
        return target

    def __enter__(self) -> LazySequence[T]:
        return self

    def __exit__(self, exc_type: Any, exc: Any, tb: Any) -> None:
        self.close()

    def __del__(self) -> None:
        context = getattr(self, "_context", None)
        if context is None or context.state in (ContextState.DESTROYED, ContextState.RUNNING):
            return
        if context.state is ContextState.SUSPENDED:
            logger.debug("Reclaiming suspended sequence %s at position %d", self._name, context.position)
        context.destroy()

    def __copy__(self) -> LazySequence[T]:
        raise TypeError("LazySequence is move-only; use .move() to transfer ownership")

    def __deepcopy__(self, memo: dict[int, Any]) -> LazySequence[T]:
        raise TypeError("LazySequence is move-only; use .move() to transfer ownership")

    def __reduce_ex__(self, protocol: Any) -> Any:
        raise TypeError("LazySequence cannot be pickled")

    def __repr__(self) -> str:
        state = self._context.state if self._context is not None else "MOVED"
        return f"<LazySequence {self._name} {state}>"


__all__ = ["LazySequence"]
