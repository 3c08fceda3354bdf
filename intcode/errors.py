"""
Error taxonomy for the Intcode machine.

Every failure is fatal to the run that raised it. The machine keeps its
memory and queues as they were at the moment of failure.
"""

from __future__ import annotations


class IntcodeError(Exception):
    """Base for all machine-generated errors."""

    fields: tuple[str, ...] = ()

    def __eq__(self, other):
        if type(self) is not type(other):
            return NotImplemented
        return all(getattr(self, f) == getattr(other, f) for f in self.fields)

    def __hash__(self):
        return hash((type(self),) + tuple(getattr(self, f) for f in self.fields))

    def __repr__(self):
        args = ", ".join(f"{f}={getattr(self, f)!r}" for f in self.fields)
        return f"{type(self).__name__}({args})"


class InvalidOperationCode(IntcodeError):
    fields = ("index", "code")

    def __init__(self, index: int, code: int):
        self.index = index
        self.code = code
        super().__init__(
            f"Unsupported operation code {code} found at position {index}")


class IndexOutsideProgram(IntcodeError):
    fields = ("index", "program_length")

    def __init__(self, index: int, program_length: int):
        self.index = index
        self.program_length = program_length
        super().__init__(
            f"Operation attempted to index position {index}, "
            f"but program has the length of {program_length}")


class InvalidOperationIndex(IntcodeError):
    fields = ("index",)

    def __init__(self, index: int):
        self.index = index
        super().__init__(
            f"Invalid operation index found for operation at position {index}")


class InputUnavailable(IntcodeError):
    fields = ("index",)

    def __init__(self, index: int):
        self.index = index
        super().__init__(f"No input available for operation at position {index}")


class AmplifierError(IntcodeError):
    """Raised by the amplifier chain, never by the machine itself."""

    fields = ("message",)

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)
