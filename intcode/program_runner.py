"""
program_runner — step-by-step control of one Intcode run.

Wraps IntcodeMachine for the debugger: loads programs, advances one
instruction per tick, records a short execution trace and turns machine
errors into a "faulted" phase instead of raising.
"""

from __future__ import annotations

import collections
from pathlib import Path
from typing import Callable, Iterable, Sequence

from intcode.decoder import decode, format_operation
from intcode.errors import IntcodeError
from intcode.loader import load_program_file, parse_program
from intcode.machine import IntcodeMachine, S_TERMINATED

TRACE_DEPTH = 64


class ProgramRunner:
    """Manages a single machine run for the debugger."""

    def __init__(self, program: Sequence[int] | None = None,
                 inputs: Iterable[int] | None = None):
        self.inputs: list[int] = list(inputs or ())
        self.program: list[int] = []
        self.machine: IntcodeMachine | None = None
        self.output_lines: list[str] = []
        self.trace: collections.deque[tuple[int, str]] = collections.deque(maxlen=TRACE_DEPTH)
        self.error: IntcodeError | None = None
        self.phase: str = "idle"  # "idle" | "running" | "done" | "faulted"
        if program is not None:
            self.load_program(program)

    # -------------------------------------------------------------------
    # Loading
    # -------------------------------------------------------------------

    def load_file(self, path: str | Path):
        """Parse a program file and prepare a fresh machine."""
        self.load_program(load_program_file(path))

    def load_text(self, text: str):
        self.load_program(parse_program(text))

    def load_program(self, program: Sequence[int]):
        self.program = list(program)
        self.machine = IntcodeMachine(self.program, self.inputs)
        self.output_lines = []
        self.trace.clear()
        self.error = None
        self.phase = "running"

    # -------------------------------------------------------------------
    # Tick interface
    # -------------------------------------------------------------------

    @property
    def finished(self) -> bool:
        return self.phase in ("done", "faulted")

    def current_text(self) -> str:
        """Disassembly of the instruction about to execute, or '' if none."""
        m = self.machine
        if m is None or self.finished:
            return ""
        word = m.memory.peek(m.pc)
        if word is None:
            return "?"
        try:
            op = decode(word, m.pc)
        except IntcodeError:
            return "?"
        params = [m.memory.peek(m.pc + 1 + i) for i in range(op.parameter_count)]
        return format_operation(op, [p if p is not None else "?" for p in params])

    def tick(self) -> bool:
        """Advance the machine one instruction.

        Returns False once the program has halted or faulted.
        """
        if self.machine is None or self.finished:
            return False

        m = self.machine
        pc = m.pc
        text = self.current_text()
        emitted = len(m.output)
        try:
            state = m.tick()
        except IntcodeError as e:
            self.error = e
            self.phase = "faulted"
            self.output_lines.append(f"[FAULT] {e}")
            return False

        self.trace.append((pc, text))
        for value in m.output.to_list()[emitted:]:
            self.output_lines.append(str(value))
        if state == S_TERMINATED:
            self.phase = "done"
            self.output_lines.append(f"[HALT] after {m.cycles} instructions")
            return False
        return True

    def run(self, max_steps: int | None = None,
            should_stop: Callable[[], bool] | None = None) -> bool:
        """Tick until finished, *max_steps* run, or *should_stop* returns True.

        *should_stop* is checked after every executed instruction. Returns
        True if the program finished.
        """
        steps = 0
        while max_steps is None or steps < max_steps:
            if not self.tick():
                return True
            steps += 1
            if should_stop is not None and should_stop():
                break
        return self.finished
