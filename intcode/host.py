"""
High-level interface to the Intcode machine.

Runs programs to completion and interprets their output. The diagnostic
runner feeds a system ID, then classifies the run by its final output: a
test program emits one value per self-check (0 meaning pass) followed by a
diagnostic code.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable, Sequence

from .errors import IntcodeError
from .machine import IntcodeMachine

logger = logging.getLogger(__name__)


def execute(program: Sequence[int], inputs: Iterable[int] | None = None) -> IntcodeMachine:
    """Run *program* to completion and return the halted machine.

    Useful when the caller needs final memory as well as output.
    Errors propagate.
    """
    machine = IntcodeMachine(program, inputs)
    machine.run()
    logger.debug("halted after %d cycles (%d reads, %d writes, %d outputs)",
                 machine.cycles, machine.memory.reads, machine.memory.writes,
                 len(machine.output))
    return machine


# ---------------------------------------------------------------------------
# Diagnostic runner
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class DiagnosticResult:
    """Base for the four diagnostic outcomes."""

    @property
    def ok(self) -> bool:
        return False


@dataclass(frozen=True)
class EmptyOutput(DiagnosticResult):
    pass


@dataclass(frozen=True)
class DiagnosticSuccess(DiagnosticResult):
    code: int
    output: list[int] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True)
class DiagnosticFailure(DiagnosticResult):
    code: int
    output: list[int] = field(default_factory=list)


@dataclass(frozen=True)
class DiagnosticError(DiagnosticResult):
    error: IntcodeError


def run_diagnostic(program: Sequence[int], inputs: Iterable[int] | None = None) -> DiagnosticResult:
    """Run a self-test program and classify its output.

    The last output is the diagnostic code. The run succeeds only if every
    earlier output is zero. Machine errors are wrapped, not raised.
    """
    try:
        output = IntcodeMachine(program, inputs).run()
    except IntcodeError as e:
        logger.debug("diagnostic run failed: %s", e)
        return DiagnosticError(e)

    if not output:
        return EmptyOutput()
    *checks, code = output
    if all(v == 0 for v in checks):
        return DiagnosticSuccess(code, checks)
    logger.debug("diagnostic checks failed: %s", checks)
    return DiagnosticFailure(code, checks)
