"""
Basic LazySequence Usage
========================

This example walks through the core ideas of genseq:
- Producers are plain generator functions decorated with @generator
- Nothing runs until the first cursor is requested
- Storage strategies decide whether the consumer sees copies or originals
- Closing a sequence unwinds the producer's `with` blocks
"""

from collections.abc import Iterator

from genseq import END, Ref, enumerate_seq, generator, take

# =============================================================================
# Example 1: Cursor walk over a finite producer
# =============================================================================


@generator
def firstn(n: int) -> Iterator[int]:
    """Yield 0 .. n-1."""
    num = 0
    while num < n:
        yield num
        num += 1


def example_cursor():
    print("=== Example 1: Cursor walk ===")
    seq = firstn(5)
    cursor = seq.begin()
    while cursor != END:
        print(f"position {cursor.position}: {cursor.current()}")
        cursor.advance()
    print()


# =============================================================================
# Example 2: Infinite producer with a bounded prefix
# =============================================================================


@generator
def iota(start: int = 0) -> Iterator[int]:
    """Count up forever."""
    while True:
        yield start
        start += 1


def example_take():
    print("=== Example 2: iota() | take(10) ===")
    print(list(iota() | take(10)))
    print()


# =============================================================================
# Example 3: Reference storage keeps identity
# =============================================================================


class Node:
    def __init__(self, label: str):
        self.label = label


NODES = [Node("a"), Node("b"), Node("c")]


@generator
def nodes() -> Iterator[Ref[Node]]:
    yield from NODES


def example_references():
    print("=== Example 3: Reference storage ===")
    for index, node in nodes() | enumerate_seq():
        print(f"{index}: {node.label} is original: {node is NODES[index]}")
    print()


# =============================================================================
# Example 4: Early exit releases resources
# =============================================================================


class Connection:
    def __enter__(self):
        print("  open connection")
        return self

    def __exit__(self, *exc_info):
        print("  close connection")


@generator
def rows() -> Iterator[str]:
    with Connection():
        for number in range(1000):
            yield f"row {number}"


def example_abandonment():
    print("=== Example 4: Early exit ===")
    with rows() as seq:
        for row in seq:
            print(f"  {row}")
            if row == "row 2":
                break
    print()


if __name__ == "__main__":
    example_cursor()
    example_take()
    example_references()
    example_abandonment()
