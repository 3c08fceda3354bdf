"""
Command line front end for the Intcode machine.

Usage:
    python -m intcode.cli run examples/compare_to_8.intcode -i 8
    python -m intcode.cli diagnostic program.intcode -i 5
    python -m intcode.cli amplify examples/amplifier_stage.intcode
    python -m intcode.cli search program.intcode --target 19690720
    python -m intcode.cli disasm examples/compare_to_8.intcode
"""

from __future__ import annotations

import argparse
import logging
import sys

from intcode.amplifier import DEFAULT_PHASE_SETTINGS, maximize_amplifier_output
from intcode.decoder import disassemble
from intcode.errors import IntcodeError
from intcode.gravity import GRAVITY_ASSIST_TARGET, NOUN_VERB_LIMIT, find_noun_verb
from intcode.host import (
    DiagnosticError, DiagnosticFailure, DiagnosticSuccess, execute, run_diagnostic,
)
from intcode.loader import format_program, load_program_file

logger = logging.getLogger("intcode")


def setup_logging(verbose: int, quiet: bool):
    if quiet:
        level = logging.ERROR
    elif verbose == 0:
        level = logging.WARNING
    elif verbose == 1:
        level = logging.INFO
    else:
        level = logging.DEBUG
    logging.basicConfig(
        level=level,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
        force=True,
    )


# ---------------------------------------------------------------------------
# Subcommands
# ---------------------------------------------------------------------------

def cmd_run(args) -> int:
    program = load_program_file(args.file)
    machine = execute(program, args.input)
    logger.info("%s halted after %d instructions", args.file, machine.cycles)
    for value in machine.output:
        print(value)
    if args.dump:
        print(format_program(machine.memory.data))
    return 0


def cmd_diagnostic(args) -> int:
    result = run_diagnostic(load_program_file(args.file), args.input)
    if isinstance(result, DiagnosticSuccess):
        print(f"Diagnostic code: {result.code}")
        return 0
    if isinstance(result, DiagnosticFailure):
        failed = sum(1 for v in result.output if v != 0)
        print(f"Diagnostic code: {result.code} ({failed} checks failed: {result.output})")
        return 2
    if isinstance(result, DiagnosticError):
        print(f"Error: {result.error}", file=sys.stderr)
        return 1
    print("Diagnostic produced no output", file=sys.stderr)
    return 2


def cmd_amplify(args) -> int:
    settings = args.phases or DEFAULT_PHASE_SETTINGS
    signal, phases = maximize_amplifier_output(load_program_file(args.file), settings)
    print(f"Got {signal}, for setting {list(phases)}")
    return 0


def cmd_search(args) -> int:
    try:
        noun, verb = find_noun_verb(load_program_file(args.file), args.target, args.limit)
    except LookupError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2
    print(f"Inputs of {noun} and {verb} produce the output ({100 * noun + verb})")
    return 0


def cmd_disasm(args) -> int:
    for addr, text in disassemble(load_program_file(args.file), args.start):
        print(f"{addr:5d}  {text}")
    return 0


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Intcode machine tools",
        prog="python -m intcode.cli",
    )
    parser.add_argument("-v", "--verbose", action="count", default=0,
                        help="Increase verbosity (-v, -vv)")
    parser.add_argument("-q", "--quiet", action="store_true",
                        help="Suppress all log output except errors")
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("run", help="Run a program to completion")
    p.add_argument("file")
    p.add_argument("-i", "--input", type=int, action="append", default=[],
                   help="Value for the input queue (repeatable)")
    p.add_argument("--dump", action="store_true",
                   help="Print final memory after the outputs")
    p.set_defaults(func=cmd_run)

    p = sub.add_parser("diagnostic", help="Run a self-test program")
    p.add_argument("file")
    p.add_argument("-i", "--input", type=int, action="append", default=[],
                   help="System ID to feed (repeatable)")
    p.set_defaults(func=cmd_diagnostic)

    p = sub.add_parser("amplify", help="Find the best amplifier phase ordering")
    p.add_argument("file")
    p.add_argument("--phases", type=int, nargs="+",
                   help=f"Phase settings to permute (default {list(DEFAULT_PHASE_SETTINGS)})")
    p.set_defaults(func=cmd_amplify)

    p = sub.add_parser("search", help="Find the noun/verb pair producing a target")
    p.add_argument("file")
    p.add_argument("--target", type=int, default=GRAVITY_ASSIST_TARGET)
    p.add_argument("--limit", type=int, default=NOUN_VERB_LIMIT)
    p.set_defaults(func=cmd_search)

    p = sub.add_parser("disasm", help="Print a program as mnemonics")
    p.add_argument("file")
    p.add_argument("--start", type=int, default=0)
    p.set_defaults(func=cmd_disasm)

    return parser


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging(args.verbose, args.quiet)

    try:
        code = args.func(args)
    except (IntcodeError, ValueError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        code = 1
    sys.exit(code)


if __name__ == "__main__":
    main()
