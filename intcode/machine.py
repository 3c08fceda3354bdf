"""
Intcode machine — fetch/decode/execute state machine over integer memory.

One instance owns one memory image, one input FIFO and one output FIFO.
Each tick fetches the word at the program counter, decodes it and
dispatches on the operation variant. The run ends at the first HALT or
the first error; there is no reset.
"""

from __future__ import annotations

from typing import Callable, Iterable

from .chips import FIFO, Memory
from .decoder import (
    Operation, ParameterMode, decode,
    Add, Multiply, LessThan, EqualTo, StoreInput, ProduceOutput,
    JumpIfTrue, JumpIfFalse, Terminate,
)
from .errors import (
    IndexOutsideProgram, InputUnavailable, InvalidOperationIndex,
)


# State machine states
S_ONGOING    = 0
S_TERMINATED = 1

STATE_NAMES = {S_ONGOING: "ONGOING", S_TERMINATED: "TERMINATED"}


class IntcodeMachine:
    """Stored-program interpreter for the nine-opcode Intcode set.

    Args:
        memory: Initial memory image. Copied, so the caller's sequence is
            never mutated.
        inputs: Optional values pre-seeded into the input queue, consumed
            front to back by IN instructions.
    """

    def __init__(self, memory: Iterable[int], inputs: Iterable[int] | None = None):
        self.memory = Memory(memory)
        self.input = FIFO(inputs)
        self.output = FIFO()
        self.pc = 0
        self.state = S_ONGOING

        # --- Counters ---
        self.cycles = 0
        self.inputs_consumed = 0
        self.last_operation: Operation | None = None

        self._dispatch: dict[type, Callable[[Operation], None]] = {
            Add: self._exec_add,
            Multiply: self._exec_multiply,
            LessThan: self._exec_less_than,
            EqualTo: self._exec_equal_to,
            StoreInput: self._exec_store_input,
            ProduceOutput: self._exec_produce_output,
            JumpIfTrue: self._exec_jump_if_true,
            JumpIfFalse: self._exec_jump_if_false,
            Terminate: self._exec_terminate,
        }

    @property
    def halted(self) -> bool:
        return self.state == S_TERMINATED

    # -------------------------------------------------------------------
    # Parameter resolution
    # -------------------------------------------------------------------

    def resolve(self, mode: ParameterMode, slot: int) -> int:
        """Value of the parameter stored at *slot* under *mode*.

        Immediate returns the slot's word. Position treats the word as an
        address and dereferences it exactly once.
        """
        value = self.memory.read(slot)
        if mode == ParameterMode.IMMEDIATE:
            return value
        if value < 0:
            raise IndexOutsideProgram(value, len(self.memory))
        return self.memory.read(value)

    def _destination(self, slot: int) -> int:
        """Raw write target stored at *slot*; never mode-resolved."""
        return self.memory.read(slot)

    def _operands(self, op: Operation) -> list[int]:
        return [self.resolve(mode, self.pc + 1 + i) for i, mode in enumerate(op.modes)]

    # -------------------------------------------------------------------
    # Operations
    # -------------------------------------------------------------------

    def _store_binary(self, op: Operation, fn: Callable[[int, int], int]):
        left, right = self._operands(op)
        dest = self._destination(self.pc + 3)
        self.memory.write(dest, fn(left, right))
        self.pc += op.width

    def _exec_add(self, op: Add):
        self._store_binary(op, lambda a, b: a + b)

    def _exec_multiply(self, op: Multiply):
        self._store_binary(op, lambda a, b: a * b)

    def _exec_less_than(self, op: LessThan):
        self._store_binary(op, lambda a, b: 1 if a < b else 0)

    def _exec_equal_to(self, op: EqualTo):
        self._store_binary(op, lambda a, b: 1 if a == b else 0)

    def _exec_store_input(self, op: StoreInput):
        if not self.input.ready():
            raise InputUnavailable(self.pc)
        value = self.input.pop()
        self.inputs_consumed += 1
        dest = self._destination(self.pc + 1)
        self.memory.write(dest, value)
        self.pc += op.width

    def _exec_produce_output(self, op: ProduceOutput):
        (value,) = self._operands(op)
        self.output.push(value)
        self.pc += op.width

    def _jump(self, op: Operation, taken: Callable[[int], bool]):
        test = self.resolve(op.test, self.pc + 1)
        if not taken(test):
            self.pc += op.width
            return
        target = self.resolve(op.target, self.pc + 2)
        if target < 0:
            raise InvalidOperationIndex(target)
        self.pc = target

    def _exec_jump_if_true(self, op: JumpIfTrue):
        self._jump(op, lambda v: v != 0)

    def _exec_jump_if_false(self, op: JumpIfFalse):
        self._jump(op, lambda v: v == 0)

    def _exec_terminate(self, op: Terminate):
        self.pc += op.width
        self.state = S_TERMINATED

    # -------------------------------------------------------------------
    # State machine
    # -------------------------------------------------------------------

    def fetch(self) -> Operation:
        """Decode the instruction at the program counter."""
        if self.pc < 0 or self.pc >= len(self.memory):
            raise InvalidOperationIndex(self.pc)
        word = self.memory.read(self.pc)
        return decode(word, self.pc)

    def tick(self) -> int:
        """Execute one instruction. Returns the resulting state."""
        if self.state == S_TERMINATED:
            return self.state
        op = self.fetch()
        self.cycles += 1
        self.last_operation = op
        self._dispatch[type(op)](op)
        return self.state

    def run(self) -> list[int]:
        """Run until HALT and return every emitted value in order.

        The first error propagates; memory and queues are left as they
        were when it was raised.
        """
        while self.tick() != S_TERMINATED:
            pass
        return self.output.to_list()


def run_program(memory: Iterable[int], inputs: Iterable[int] | None = None) -> list[int]:
    """Build a fresh machine, run it to completion and return its output."""
    return IntcodeMachine(memory, inputs).run()
