"""
Permutation generator (iterative Heap's algorithm).

Yields the identity ordering first, then each following ordering by a
single swap of the previous one. The iterator is single-pass.
"""

from __future__ import annotations

from typing import Generic, Iterable, TypeVar

T = TypeVar("T")


class Permutations(Generic[T]):
    """Every ordering of *items* exactly once, as fresh lists."""

    def __init__(self, items: Iterable[T]):
        self.items: list[T] = list(items)
        self._counters = [0] * len(self.items)
        self._index = 0
        self._started = False

    def __iter__(self):
        return self

    def __next__(self) -> list[T]:
        if not self._started:
            self._started = True
            return list(self.items)

        items = self.items
        while self._index < len(items):
            i = self._index
            if self._counters[i] < i:
                j = 0 if i % 2 == 0 else self._counters[i]
                items[j], items[i] = items[i], items[j]
                self._counters[i] += 1
                self._index = 0
                return list(items)
            self._counters[i] = 0
            self._index += 1
        raise StopIteration
