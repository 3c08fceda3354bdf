"""
Program text loader.

Intcode programs are comma-separated base-10 signed integers, usually on a
single line. Whitespace and newlines around the numbers are ignored.
"""

from __future__ import annotations

from pathlib import Path

from lark import Lark, Transformer, UnexpectedInput

GRAMMAR = r"""
    start: INT ("," INT)*

    INT: /[+-]?[0-9]+/

    %import common.WS
    %ignore WS
"""

parser = Lark(GRAMMAR, parser="lalr")


class ProgramBuilder(Transformer):
    def INT(self, tok):
        return int(tok)

    def start(self, items):
        return list(items)


program_builder = ProgramBuilder()


def parse_program(text: str) -> list[int]:
    """Parse program text into an initial memory image."""
    try:
        tree = parser.parse(text)
    except UnexpectedInput as e:
        raise ValueError(
            f"Malformed program text at line {e.line}, column {e.column}"
        ) from None
    return program_builder.transform(tree)


def load_program_file(path: str | Path) -> list[int]:
    return parse_program(Path(path).read_text())


def format_program(memory) -> str:
    """Inverse of parse_program, for writing memory images back out."""
    return ",".join(str(v) for v in memory)
