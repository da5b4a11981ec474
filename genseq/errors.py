from __future__ import annotations

from typing import Any


class SequenceProtocolError(RuntimeError):
    """Raised when a sequence, its context or a cursor is used out of protocol."""

    def __init__(self, message: str, *, sequence: Any = None) -> None:
        self.sequence = sequence
        if sequence is not None:
            message = f"{message} (sequence: {sequence!r})"
        super().__init__(message)


class ResumeNotAllowedError(SequenceProtocolError):
    """Raised when resuming a context that is not started or suspended."""

    def __init__(self, state: Any, *, sequence: Any = None) -> None:
        self.state = state
        super().__init__(
            f"Cannot resume a producer in state {state}\n"
            "Hint: only a NOT_STARTED or SUSPENDED producer can be resumed; "
            "create a new sequence to iterate again",
            sequence=sequence,
        )


class ConcurrentResumeError(SequenceProtocolError):
    """Raised when a resume is requested while another one is in flight."""

    def __init__(self, *, sequence: Any = None) -> None:
        super().__init__(
            "Producer is already running; a sequence cannot be resumed from inside itself",
            sequence=sequence,
        )


class ExhaustedCursorError(SequenceProtocolError, IndexError):
    """Raised when dereferencing or advancing a cursor at the end marker."""

    def __init__(self, operation: str, *, sequence: Any = None) -> None:
        self.operation = operation
        super().__init__(f"Cannot {operation} an exhausted cursor", sequence=sequence)


class StaleCursorError(SequenceProtocolError):
    """Raised when a cursor no longer refers to the live slot of its sequence."""

    def __init__(self, reason: str, *, sequence: Any = None) -> None:
        self.reason = reason
        super().__init__(f"Stale cursor: {reason}", sequence=sequence)


class CursorRestartError(SequenceProtocolError):
    """Raised when asking for a start cursor after the sequence has advanced."""

    def __init__(self, *, sequence: Any = None) -> None:
        super().__init__(
            "Sequence has already advanced past its first value\n"
            "Hint: sequences are single-pass; call the producer again for a fresh sequence",
            sequence=sequence,
        )


__all__ = [
    "ConcurrentResumeError",
    "CursorRestartError",
    "ExhaustedCursorError",
    "ResumeNotAllowedError",
    "SequenceProtocolError",
    "StaleCursorError",
]
