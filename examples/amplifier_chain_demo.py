#!/usr/bin/env python3
"""
Amplifier chain demo.

Runs the five-stage amplifier program once with a fixed phase ordering,
then searches every ordering for the strongest signal.

Usage:
  python examples/amplifier_chain_demo.py
  python examples/amplifier_chain_demo.py path/to/program.intcode
"""

from __future__ import annotations

import sys
from pathlib import Path

# Allow imports from repository root when launched via examples/ path.
sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from intcode.amplifier import evaluate_phase_sequence, maximize_amplifier_output
from intcode.loader import load_program_file

DEFAULT_PROGRAM = Path(__file__).with_name("amplifier_stage.intcode")


def main():
    path = Path(sys.argv[1]) if len(sys.argv) > 1 else DEFAULT_PROGRAM
    program = load_program_file(path)
    print(f"Loaded {len(program)} words from {path.name}")

    phases = [4, 3, 2, 1, 0]
    signal = evaluate_phase_sequence(program, phases)
    print(f"Phases {phases} -> signal {signal}")

    best, best_phases = maximize_amplifier_output(program)
    print(f"Best of 120 orderings: {list(best_phases)} -> signal {best}")


if __name__ == "__main__":
    main()
