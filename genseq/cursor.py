"""
Cursors over a sequence and the end marker they compare against.

A cursor is a small, copyable reference into a live sequence. It remembers
the position of the value it exposes, so a copy that falls behind (another
copy advanced) or that outlives its sequence fails fast instead of returning
stale data.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Final, Generic, TypeVar

from genseq.context import ContextState, ExecutionContext
from genseq.errors import ConcurrentResumeError, ExhaustedCursorError, StaleCursorError

if TYPE_CHECKING:
    from genseq.handle import LazySequence

T = TypeVar("T")


class EndMarker:
    """Singleton sentinel a cursor compares equal to once exhausted."""

    __slots__ = ()
    _instance: EndMarker | None = None

    def __new__(cls) -> EndMarker:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Cursor):
            return other.is_end()
        return other is self

    def __ne__(self, other: object) -> bool:
        return not self.__eq__(other)

    def __hash__(self) -> int:
        return id(self)

    def __repr__(self) -> str:
        return "END"


END: Final[EndMarker] = EndMarker()


class Cursor(Generic[T]):
    """Forward-only read/advance interface over a sequence's current value."""

    __slots__ = ("_sequence", "_position", "_exhausted")

    def __init__(self, sequence: LazySequence[T], position: int, *, exhausted: bool) -> None:
        self._sequence = sequence
        self._position = position
        self._exhausted = exhausted

    @property
    def position(self) -> int:
        return self._position

    @property
    def sequence(self) -> LazySequence[T]:
        return self._sequence

    def is_end(self) -> bool:
        return self._exhausted

    def current(self) -> T:
        """Return the value at this position.

        The object comes straight out of the yielded slot: reference storage
        hands back the very object the producer yielded, value and move
        storage hand back the slot's own instance. Nothing is copied here.
        """

        return self._live_context("dereference").current()

    @property
    def value(self) -> T:
        return self.current()

    def advance(self) -> Cursor[T]:
        """Resume the producer once and move to its next value.

        A failure raised by the producer propagates from here and leaves the
        cursor exhausted, as does normal completion.
        """

        context = self._live_context("advance")
        try:
            has_value = self._sequence._resume(context, advancing=True)
        except BaseException:
            self._exhausted = True
            raise
        if has_value:
            self._position = context.position
        else:
            self._exhausted = True
        return self

    def _live_context(self, operation: str) -> ExecutionContext[T]:
        if self._exhausted:
            raise ExhaustedCursorError(operation, sequence=self._sequence)
        context = self._sequence._context
        if context is None:
            raise StaleCursorError("its sequence was moved", sequence=self._sequence)
        state = context.state
        if state is ContextState.RUNNING:
            raise ConcurrentResumeError(sequence=self._sequence)
        if state is ContextState.DESTROYED:
            raise StaleCursorError("its sequence was closed", sequence=self._sequence)
        if state is not ContextState.SUSPENDED or context.position != self._position:
            raise StaleCursorError(
                f"the sequence has moved past position {self._position}",
                sequence=self._sequence,
            )
        return context

    def __eq__(self, other: object) -> bool:
        if isinstance(other, EndMarker):
            return self._exhausted
        if isinstance(other, Cursor):
            if other._sequence is not self._sequence:
                return False
            if self._exhausted or other._exhausted:
                return self._exhausted and other._exhausted
            return self._position == other._position
        return NotImplemented

    __hash__ = None  # type: ignore[assignment]

    def __copy__(self) -> Cursor[T]:
        return Cursor(self._sequence, self._position, exhausted=self._exhausted)

    def __repr__(self) -> str:
        where = "END" if self._exhausted else f"pos={self._position}"
        return f"<Cursor {self._sequence.name} {where}>"


class SequenceIterator(Generic[T]):
    """Python iterator protocol on top of a sequence's cursor.

    The producer is resumed only when the next value is requested, so
    ``itertools.islice`` and friends never trigger extra work.
    """

    __slots__ = ("_sequence", "_cursor")

    def __init__(self, sequence: LazySequence[T]) -> None:
        self._sequence = sequence
        self._cursor: Cursor[T] | None = None

    def __iter__(self) -> SequenceIterator[T]:
        return self

    def __next__(self) -> T:
        cursor = self._cursor
        if cursor is None:
            cursor = self._cursor = self._sequence.begin()
        elif not cursor.is_end():
            cursor.advance()
        if cursor.is_end():
            raise StopIteration
        return cursor.current()

    def __repr__(self) -> str:
        return f"<SequenceIterator over {self._sequence.name}>"


__all__ = ["END", "Cursor", "EndMarker", "SequenceIterator"]
