"""Traversal orders over a frozen listener snapshot.

An iterator factory takes the snapshot and returns a one-shot iterator; it never
mutates the snapshot.
"""

from typing import Iterator, Sequence, TypeVar

T = TypeVar("T")


def left_to_right(listeners: Sequence[T]) -> Iterator[T]:
    """Registration order: index 0 .. n-1."""
    for index in range(len(listeners)):
        yield listeners[index]


def right_to_left(listeners: Sequence[T]) -> Iterator[T]:
    """Reverse registration order: index n-1 .. 0."""
    for index in range(len(listeners) - 1, -1, -1):
        yield listeners[index]
