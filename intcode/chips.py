"""
Storage primitives for the Intcode machine.

Models the two pieces of state the machine owns: a fixed-length Memory and
the FIFO queues used for program input and output.
"""

from __future__ import annotations

import collections
from typing import Iterable

from .errors import IndexOutsideProgram


class Memory:
    """Fixed-length word store. Every access is bounds-checked."""

    def __init__(self, contents: Iterable[int]):
        self.data: list[int] = list(contents)
        self.reads = 0
        self.writes = 0

    def __len__(self) -> int:
        return len(self.data)

    def _check(self, addr: int):
        if addr < 0 or addr >= len(self.data):
            raise IndexOutsideProgram(addr, len(self.data))

    def read(self, addr: int) -> int:
        self._check(addr)
        self.reads += 1
        return self.data[addr]

    def write(self, addr: int, val: int):
        self._check(addr)
        self.writes += 1
        self.data[addr] = val

    def peek(self, addr: int) -> int | None:
        """Read without counting or raising. Used by the debugger."""
        if 0 <= addr < len(self.data):
            return self.data[addr]
        return None


class FIFO:
    """Unbounded integer queue. Input is popped from the front, output appended."""

    def __init__(self, items: Iterable[int] | None = None):
        self.buffer: collections.deque[int] = collections.deque(items or ())

    def push(self, value: int):
        self.buffer.append(value)

    def pop(self) -> int | None:
        return self.buffer.popleft() if self.buffer else None

    def ready(self) -> bool:
        return len(self.buffer) > 0

    def to_list(self) -> list[int]:
        return list(self.buffer)

    def __len__(self) -> int:
        return len(self.buffer)

    def __iter__(self):
        return iter(self.buffer)
