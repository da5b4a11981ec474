"""Transition tracing for sequences."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal, TypeAlias

from loguru import logger as loguru_logger

from genseq.utils import DEBUG_SEQUENCES

loguru_logger = loguru_logger.bind(component="genseq.trace")

TraceAction: TypeAlias = Literal[
    "created",
    "resumed",
    "yielded",
    "completed",
    "failed",
    "destroyed",
    "moved",
]

_REPR_LIMIT = 120


def _short_repr(value: object) -> str:
    try:
        text = repr(value)
    except Exception:
        text = object.__repr__(value)
    if len(text) > _REPR_LIMIT:
        return text[: _REPR_LIMIT - 3] + "..."
    return text


@dataclass(frozen=True)
class TraceEvent:
    sequence_name: str
    action: TraceAction
    position: int
    value_repr: str | None = None
    exception_repr: str | None = None

    def format(self) -> str:
        text = f"{self.sequence_name}#{self.position} {self.action}"
        if self.value_repr is not None:
            text += f" value={self.value_repr}"
        if self.exception_repr is not None:
            text += f" error={self.exception_repr}"
        return text


class SequenceTracer:
    """Collects the transitions of one sequence and mirrors them to loguru."""

    def __init__(self, sequence_name: str, *, emit: bool = True) -> None:
        self.sequence_name = sequence_name
        self.emit = emit
        self.events: list[TraceEvent] = []

    def record(
        self,
        action: TraceAction,
        position: int,
        *,
        value: object = None,
        error: BaseException | None = None,
    ) -> TraceEvent:
        event = TraceEvent(
            sequence_name=self.sequence_name,
            action=action,
            position=position,
            value_repr=_short_repr(value) if action == "yielded" else None,
            exception_repr=_short_repr(error) if error is not None else None,
        )
        self.events.append(event)
        if self.emit:
            loguru_logger.debug("{}", event.format())
        return event

    def actions(self) -> list[TraceAction]:
        return [event.action for event in self.events]


def tracing_enabled_by_default() -> bool:
    return DEBUG_SEQUENCES


__all__ = [
    "SequenceTracer",
    "TraceAction",
    "TraceEvent",
    "tracing_enabled_by_default",
]
