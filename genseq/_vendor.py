"""
Small value types shared by the genseq modules.

``Result`` / ``Ok`` / ``Err`` form the completion record of an execution
context. ``FrozenDict`` backs read-only snapshots.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, NoReturn, TypeVar

from frozendict import frozendict

# =========================================================
# Type Vars
# =========================================================
T = TypeVar("T")
T_co = TypeVar("T_co", covariant=True)


class Result(Generic[T_co]):
    """Terminal outcome of a producer: its return value or the error it raised."""

    __slots__ = ()

    def is_ok(self) -> bool:
        """Return ``True`` when the producer finished normally."""

        return isinstance(self, Ok)

    def is_err(self) -> bool:
        """Return ``True`` when the producer finished with a failure."""

        return isinstance(self, Err)

    def ok(self) -> T_co | None:
        """Return the return value, or ``None`` if this is an error."""

        if isinstance(self, Ok):
            return self.value
        return None

    def err(self) -> BaseException | None:
        """Return the carried error, or ``None`` if this is a success."""

        if isinstance(self, Err):
            return self.error
        return None


@dataclass(frozen=True)
class Ok(Result[T], Generic[T]):
    """Normal completion, carrying the producer's ``return`` value."""
    value: T


@dataclass(frozen=True)
class Err(Result[NoReturn]):
    """Failed completion, carrying the exception raised by the producer."""
    error: BaseException


# =========================================================
# Frozen Dict
# =========================================================
FrozenDict = frozendict

__all__ = [
    "Err",
    "FrozenDict",
    "Ok",
    "Result",
]
