"""
Pytest configuration for genseq tests.

Provides resource-tracking helpers for abandonment tests and a counting
infinite producer for laziness tests.
"""

from collections.abc import Iterator
from typing import Any

import pytest

from genseq import GeneratorFunction, generator


class TrackedResource:
    """Context manager that records acquisition and release in a shared log."""

    def __init__(self, name: str, log: list[str]):
        self.name = name
        self.log = log
        self.released = False

    def __enter__(self) -> "TrackedResource":
        self.log.append(f"acquire {self.name}")
        return self

    def __exit__(self, exc_type: Any, exc: Any, tb: Any) -> None:
        assert not self.released, f"{self.name} released twice"
        self.released = True
        self.log.append(f"release {self.name}")


@pytest.fixture
def resource_log() -> list[str]:
    return []


@pytest.fixture
def tracked(resource_log):
    """Factory for TrackedResource bound to this test's log."""

    def make(name: str) -> TrackedResource:
        return TrackedResource(name, resource_log)

    return make


@pytest.fixture
def counted_iota() -> tuple[GeneratorFunction, list[int]]:
    """Unbounded counter that records every value it computes."""
    computed: list[int] = []

    @generator
    def iota(start: int = 0) -> Iterator[int]:
        value = start
        while True:
            computed.append(value)
            yield value
            value += 1

    return iota, computed
