"""
Instruction decoder for the Intcode machine.

A word is split into an opcode (the two low decimal digits) and a run of
mode digits, one per *read* parameter, least significant first:

    1002  ->  opcode 02 (MUL), modes: left=Position, right=Immediate

Write targets are never mode-resolved, so a three-parameter instruction
consumes only two mode digits. Higher digits are ignored.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import Iterator, Sequence

from .errors import InvalidOperationCode


class ParameterMode(IntEnum):
    POSITION = 0
    IMMEDIATE = 1


class Opcode(IntEnum):
    ADD = 1
    MULTIPLY = 2
    STORE_INPUT = 3
    PRODUCE_OUTPUT = 4
    JUMP_IF_TRUE = 5
    JUMP_IF_FALSE = 6
    LESS_THAN = 7
    EQUAL_TO = 8
    TERMINATE = 99


# ---------------------------------------------------------------------------
# Operation variants
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Operation:
    """Base for decoded instructions. Subclasses form a closed set."""

    OPCODE = None
    MNEMONIC = "???"
    READS = 0           # mode-resolved parameters
    WRITES = 0          # raw destination slots

    def __post_init__(self):
        if self.OPCODE is None:
            raise TypeError(f"{type(self).__name__} is not a concrete operation")

    @property
    def parameter_count(self) -> int:
        return self.READS + self.WRITES

    @property
    def width(self) -> int:
        return 1 + self.parameter_count

    @property
    def modes(self) -> tuple[ParameterMode, ...]:
        return ()


@dataclass(frozen=True)
class BinaryOperation(Operation):
    left: ParameterMode = ParameterMode.POSITION
    right: ParameterMode = ParameterMode.POSITION

    READS = 2
    WRITES = 1

    @property
    def modes(self) -> tuple[ParameterMode, ...]:
        return (self.left, self.right)


@dataclass(frozen=True)
class Add(BinaryOperation):
    OPCODE = Opcode.ADD
    MNEMONIC = "ADD"


@dataclass(frozen=True)
class Multiply(BinaryOperation):
    OPCODE = Opcode.MULTIPLY
    MNEMONIC = "MUL"


@dataclass(frozen=True)
class LessThan(BinaryOperation):
    OPCODE = Opcode.LESS_THAN
    MNEMONIC = "LT"


@dataclass(frozen=True)
class EqualTo(BinaryOperation):
    OPCODE = Opcode.EQUAL_TO
    MNEMONIC = "EQ"


@dataclass(frozen=True)
class StoreInput(Operation):
    OPCODE = Opcode.STORE_INPUT
    MNEMONIC = "IN"
    WRITES = 1


@dataclass(frozen=True)
class ProduceOutput(Operation):
    mode: ParameterMode = ParameterMode.POSITION

    OPCODE = Opcode.PRODUCE_OUTPUT
    MNEMONIC = "OUT"
    READS = 1

    @property
    def modes(self) -> tuple[ParameterMode, ...]:
        return (self.mode,)


@dataclass(frozen=True)
class JumpOperation(Operation):
    test: ParameterMode = ParameterMode.POSITION
    target: ParameterMode = ParameterMode.POSITION

    READS = 2

    @property
    def modes(self) -> tuple[ParameterMode, ...]:
        return (self.test, self.target)


@dataclass(frozen=True)
class JumpIfTrue(JumpOperation):
    OPCODE = Opcode.JUMP_IF_TRUE
    MNEMONIC = "JNZ"


@dataclass(frozen=True)
class JumpIfFalse(JumpOperation):
    OPCODE = Opcode.JUMP_IF_FALSE
    MNEMONIC = "JZ"


@dataclass(frozen=True)
class Terminate(Operation):
    OPCODE = Opcode.TERMINATE
    MNEMONIC = "HALT"


OPERATIONS: dict[int, type[Operation]] = {
    cls.OPCODE: cls
    for cls in (Add, Multiply, StoreInput, ProduceOutput, JumpIfTrue,
                JumpIfFalse, LessThan, EqualTo, Terminate)
}


# ---------------------------------------------------------------------------
# Decoding
# ---------------------------------------------------------------------------

def decode(word: int, index: int = 0) -> Operation:
    """Decode one memory word fetched from *index*."""
    if word < 0:
        raise InvalidOperationCode(index, word)

    cls = OPERATIONS.get(word % 100)
    if cls is None:
        raise InvalidOperationCode(index, word)

    digits = word // 100
    modes = []
    for _ in range(cls.READS):
        digits, digit = divmod(digits, 10)
        try:
            modes.append(ParameterMode(digit))
        except ValueError:
            raise InvalidOperationCode(index, word) from None
    return cls(*modes)


# ---------------------------------------------------------------------------
# Disassembly
# ---------------------------------------------------------------------------

def format_operation(op: Operation, params: Sequence[int]) -> str:
    """Render a decoded operation with its raw parameter words.

    Position operands print as ``[n]``, immediates as ``#n`` and raw
    destination slots as ``-> n``.
    """
    parts = []
    for mode, value in zip(op.modes, params):
        parts.append(f"[{value}]" if mode == ParameterMode.POSITION else f"#{value}")
    for value in params[op.READS:]:
        parts.append(f"-> {value}")
    return f"{op.MNEMONIC:<4} {' '.join(parts)}".rstrip()


def disassemble(memory: Sequence[int], start: int = 0,
                count: int | None = None) -> Iterator[tuple[int, str]]:
    """Yield ``(address, text)`` lines walking *memory* from *start*.

    Words that do not decode, or whose parameters would run past the end
    of memory, are shown as DATA and skipped one word at a time.
    """
    addr = start
    emitted = 0
    while 0 <= addr < len(memory) and (count is None or emitted < count):
        word = memory[addr]
        try:
            op = decode(word, addr)
        except InvalidOperationCode:
            op = None
        if op is None or addr + op.width > len(memory):
            yield addr, f"DATA {word}"
            addr += 1
        else:
            params = memory[addr + 1:addr + op.width]
            yield addr, format_operation(op, params)
            addr += op.width
        emitted += 1
