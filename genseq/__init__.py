"""
genseq - Lazy, pull-based sequences on top of Python generators.

A producer is an ordinary generator function. Decorating it with
``@generator`` makes each call return a LazySequence: a single-pass, move-only
handle that runs the producer only as far as the consumer asks, exposes each
value through a cursor without copying it behind the consumer's back, and
unwinds the producer cleanly when abandoned.

Example:
    >>> from genseq import generator, take
    >>>
    >>> @generator
    >>> def iota(start=0):
    ...     while True:
    ...         yield start
    ...         start += 1
    >>>
    >>> list(iota() | take(3))
    [0, 1, 2]
"""

from genseq._vendor import Err, FrozenDict, Ok, Result
from genseq.adaptors import enumerate_seq, take
from genseq.context import ContextSnapshot, ContextState, ExecutionContext
from genseq.cursor import END, Cursor, EndMarker, SequenceIterator
from genseq.decorators import GeneratorFunction, generator
from genseq.errors import (
    ConcurrentResumeError,
    CursorRestartError,
    ExhaustedCursorError,
    ResumeNotAllowedError,
    SequenceProtocolError,
    StaleCursorError,
)
from genseq.handle import LazySequence
from genseq.storage import Move, Ref, Storage, YieldedSlot
from genseq.trace import SequenceTracer, TraceEvent

__all__ = [
    # Core
    "LazySequence",
    "ExecutionContext",
    "ContextState",
    "ContextSnapshot",
    "Cursor",
    "SequenceIterator",
    "END",
    "EndMarker",
    # Decorator
    "generator",
    "GeneratorFunction",
    # Storage
    "Storage",
    "Ref",
    "Move",
    "YieldedSlot",
    # Adaptors
    "take",
    "enumerate_seq",
    # Completion record
    "Result",
    "Ok",
    "Err",
    "FrozenDict",
    # Tracing
    "SequenceTracer",
    "TraceEvent",
    # Errors
    "SequenceProtocolError",
    "ResumeNotAllowedError",
    "ConcurrentResumeError",
    "ExhaustedCursorError",
    "StaleCursorError",
    "CursorRestartError",
]
