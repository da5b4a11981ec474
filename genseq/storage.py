"""
Value-category storage for the most recently yielded value.

A sequence stores what its producer yields according to one of three
strategies:

- ``Storage.VALUE``: the slot owns a shallow copy of the yielded object, so
  later mutation of the producer's local does not leak into values the
  consumer is looking at.
- ``Storage.REFERENCE``: the slot keeps the yielded object itself. The
  consumer observes the very same object (``current() is original``).
- ``Storage.MOVE``: stored exactly like ``REFERENCE``; the two differ only in
  intent. ``MOVE`` marks objects the producer hands over and no longer uses,
  typically ones that refuse to be copied. Python cannot revoke the
  producer's own binding, so nothing enforces the handover.

Under every strategy the slot drops its reference as soon as it is
overwritten or the sequence is torn down.

Pointer-like elements (strings, ids, weak references, ...) are plain values:
the handle itself is stored, never whatever it points at.

The strategy is chosen per sequence, either explicitly or from the producer's
return annotation using the ``Ref[T]`` / ``Move[T]`` markers::

    @generator
    def names() -> Iterator[Ref[Node]]:
        ...
"""

from __future__ import annotations

import copy
import inspect
import types
from enum import Enum
from typing import (
    Annotated,
    Any,
    ForwardRef,
    Union,
    get_args,
    get_origin,
    get_type_hints,
)

from genseq.utils import DEFAULT_STORAGE


class Storage(Enum):
    VALUE = "value"
    REFERENCE = "reference"
    MOVE = "move"

    @classmethod
    def parse(cls, value: Storage | str) -> Storage:
        if isinstance(value, Storage):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            choices = ", ".join(member.value for member in cls)
            raise ValueError(f"Unknown storage strategy {value!r}; expected one of: {choices}") from None


class Ref:
    """Annotation marker: ``Ref[T]`` yields ``T`` by reference."""

    def __class_getitem__(cls, item: Any) -> Any:
        return Annotated[item, Storage.REFERENCE]


class Move:
    """Annotation marker: ``Move[T]`` yields ``T`` by move."""

    def __class_getitem__(cls, item: Any) -> Any:
        return Annotated[item, Storage.MOVE]


def default_storage() -> Storage:
    return Storage.parse(DEFAULT_STORAGE)


# Containers whose first type argument is the element type
_ELEMENT_CONTAINERS = frozenset(
    {
        "Iterator",
        "Iterable",
        "Generator",
        "LazySequence",
    }
)


def _string_annotation_storage(annotation_text: str) -> Storage | None:
    stripped = annotation_text.strip()
    if not stripped:
        return None
    bracket = stripped.find("[")
    if bracket == -1 or not stripped.endswith("]"):
        return None
    head = stripped[:bracket].rsplit(".", 1)[-1]
    inner = stripped[bracket + 1 : -1].strip()
    if head in _ELEMENT_CONTAINERS:
        element = inner.split(",", 1)[0] if head == "Generator" else inner
        element = element.strip().replace(" ", "")
        marker = element.split("[", 1)[0].rsplit(".", 1)[-1]
        if marker == "Ref":
            return Storage.REFERENCE
        if marker == "Move":
            return Storage.MOVE
        if marker == "Annotated":
            for member in Storage:
                if f"Storage.{member.name}" in element:
                    return member
    return None


def _element_storage(element: Any) -> Storage | None:
    if get_origin(element) is Annotated:
        for meta in element.__metadata__:
            if isinstance(meta, Storage):
                return meta
    return None


def storage_from_annotation(annotation: Any) -> Storage | None:
    """Return the storage marked on a producer return annotation, if any."""

    if annotation is inspect.Signature.empty or annotation is None:
        return None
    if isinstance(annotation, ForwardRef):
        return _string_annotation_storage(annotation.__forward_arg__)
    if isinstance(annotation, str):
        return _string_annotation_storage(annotation)

    origin = get_origin(annotation)
    if origin is None:
        return None
    union_type = getattr(types, "UnionType", None)
    if origin is Union or (union_type is not None and origin is union_type):
        for arg in get_args(annotation):
            found = storage_from_annotation(arg)
            if found is not None:
                return found
        return None
    if origin is Annotated:
        return storage_from_annotation(get_args(annotation)[0])

    args = get_args(annotation)
    if not args:
        return None
    return _element_storage(args[0])


def storage_for_function(func: Any) -> Storage | None:
    """Resolve the storage declared by ``func``'s return annotation."""

    try:
        hints = get_type_hints(func, include_extras=True)
    except Exception:
        # Unresolvable forward references: fall back to the raw annotation text
        hints = dict(getattr(func, "__annotations__", None) or {})
    return storage_from_annotation(hints.get("return", inspect.Signature.empty))


_EMPTY = object()


class YieldedSlot:
    """Holds the most recently yielded value according to a storage strategy."""

    __slots__ = ("strategy", "_value")

    def __init__(self, strategy: Storage) -> None:
        self.strategy = strategy
        self._value: Any = _EMPTY

    @property
    def filled(self) -> bool:
        return self._value is not _EMPTY

    def store(self, value: Any) -> None:
        if self.strategy is Storage.VALUE:
            try:
                value = copy.copy(value)
            except TypeError as exc:
                raise TypeError(
                    f"Cannot store {type(value).__name__} by value: {exc}\n"
                    "Hint: yield it with Storage.MOVE (or annotate the element as Move[T])"
                ) from exc
        self._value = value

    def load(self) -> Any:
        if self._value is _EMPTY:
            raise LookupError("Yielded slot is empty")
        return self._value

    def clear(self) -> None:
        self._value = _EMPTY

    def __repr__(self) -> str:
        if self._value is _EMPTY:
            return f"YieldedSlot({self.strategy.value}, <empty>)"
        return f"YieldedSlot({self.strategy.value}, {self._value!r})"


__all__ = [
    "Move",
    "Ref",
    "Storage",
    "YieldedSlot",
    "default_storage",
    "storage_for_function",
    "storage_from_annotation",
]
