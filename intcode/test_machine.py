"""
Verification suite for the Intcode machine.

Covers every opcode, both addressing modes, the error taxonomy and the
canonical example programs.
"""

from __future__ import annotations

import sys
import os

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import pytest

from intcode.decoder import (
    Add, EqualTo, JumpIfFalse, JumpIfTrue, LessThan, ParameterMode,
    ProduceOutput, StoreInput, Terminate,
)
from intcode.errors import (
    IndexOutsideProgram, InputUnavailable, InvalidOperationCode, InvalidOperationIndex,
)
from intcode.machine import IntcodeMachine, S_ONGOING, S_TERMINATED, run_program

P = ParameterMode.POSITION
I = ParameterMode.IMMEDIATE

# Compares its input to 8: 999 below, 1000 equal, 1001 above.
COMPARE_TO_8 = [
    3, 21, 1008, 21, 8, 20, 1005, 20, 22, 107, 8, 21, 20, 1006, 20, 31,
    1106, 0, 36, 98, 0, 0, 1002, 21, 125, 20, 4, 20, 1105, 1, 46, 104,
    999, 1105, 1, 46, 1101, 1000, 1, 20, 4, 20, 1105, 1, 46, 98, 99,
]


def run(memory, inputs=None) -> IntcodeMachine:
    machine = IntcodeMachine(memory, inputs)
    machine.run()
    return machine


# ---------------------------------------------------------------------------
# Whole programs
# ---------------------------------------------------------------------------

def test_halt_only():
    m = run([99])
    assert m.output.to_list() == []
    assert m.state == S_TERMINATED
    assert m.pc == 1
    assert m.cycles == 1


def test_self_add():
    assert run([1, 0, 0, 0, 99]).memory.data == [2, 0, 0, 0, 99]


def test_add_multiply_example():
    m = run([1, 9, 10, 3, 2, 3, 11, 0, 99, 30, 40, 50])
    assert m.memory.read(0) == 3500
    assert m.memory.data == [3500, 9, 10, 70, 2, 3, 11, 0, 99, 30, 40, 50]


def test_small_programs():
    assert run([2, 3, 0, 3, 99]).memory.data == [2, 3, 0, 6, 99]
    assert run([2, 4, 4, 5, 99, 0]).memory.data == [2, 4, 4, 5, 99, 9801]
    assert run([1, 1, 1, 4, 99, 5, 6, 0, 99]).memory.data == [30, 1, 1, 4, 2, 5, 6, 0, 99]


def test_entire_program_output():
    assert run_program([1, 0, 0, 3, 4, 3, 99]) == [2]


def test_echo_input():
    assert run_program([3, 0, 4, 0, 99], [-42]) == [-42]


def test_caller_memory_not_mutated():
    program = [1, 0, 0, 0, 99]
    run(program)
    assert program == [1, 0, 0, 0, 99]


def test_compare_to_8():
    assert run_program(COMPARE_TO_8, [7]) == [999]
    assert run_program(COMPARE_TO_8, [8]) == [1000]
    assert run_program(COMPARE_TO_8, [9]) == [1001]


def test_equal_and_less_than_programs():
    cases = [
        ([3, 9, 8, 9, 10, 9, 4, 9, 99, -1, 8], lambda x: x == 8),
        ([3, 9, 7, 9, 10, 9, 4, 9, 99, -1, 8], lambda x: x < 8),
        ([3, 3, 1108, -1, 8, 3, 4, 3, 99], lambda x: x == 8),
        ([3, 3, 1107, -1, 8, 3, 4, 3, 99], lambda x: x < 8),
    ]
    for program, expected in cases:
        for value in (-3, 0, 7, 8, 9):
            assert run_program(program, [value]) == [1 if expected(value) else 0]


def test_jump_programs():
    programs = [
        [3, 12, 6, 12, 15, 1, 13, 14, 13, 4, 13, 99, -1, 0, 1, 9],
        [3, 3, 1105, -1, 9, 1101, 0, 0, 12, 4, 12, 99, 1],
    ]
    for program in programs:
        assert run_program(program, [0]) == [0]
        assert run_program(program, [5]) == [1]
        assert run_program(program, [-1]) == [1]


def test_determinism():
    first = IntcodeMachine(COMPARE_TO_8, [7])
    second = IntcodeMachine(COMPARE_TO_8, [7])
    assert first.run() == second.run()
    assert first.memory.data == second.memory.data
    assert first.cycles == second.cycles


def test_output_order():
    program = [104, 3, 104, 1, 104, 2, 99]
    assert run_program(program) == [3, 1, 2]


# ---------------------------------------------------------------------------
# Addressing
# ---------------------------------------------------------------------------

def test_immediate_mode_arithmetic():
    m = run([1101, 100, -1, 4, 0])
    assert m.memory.data == [1101, 100, -1, 4, 99]
    assert run([1002, 4, 3, 4, 33]).memory.data == [1002, 4, 3, 4, 99]


def test_position_mode_equivalent_writes_same_slot():
    m = run([1, 5, 6, 4, 0, 100, -1])
    assert m.memory.read(4) == 99
    assert m.pc == 5


def test_resolve_single_indirection():
    m = IntcodeMachine([2, 3, 0, 7])
    assert m.resolve(I, 1) == 3
    assert m.resolve(P, 1) == 7
    # Position reads the slot then dereferences once, never twice.
    assert m.resolve(P, 0) == 0


def test_resolve_out_of_range():
    m = IntcodeMachine([5, -2, 0])
    with pytest.raises(IndexOutsideProgram) as exc:
        m.resolve(I, 3)
    assert exc.value == IndexOutsideProgram(3, 3)
    with pytest.raises(IndexOutsideProgram) as exc:
        m.resolve(P, 0)
    assert exc.value == IndexOutsideProgram(5, 3)
    with pytest.raises(IndexOutsideProgram) as exc:
        m.resolve(P, 1)
    assert exc.value == IndexOutsideProgram(-2, 3)


# ---------------------------------------------------------------------------
# Single operations
# ---------------------------------------------------------------------------

def test_comparisons_write_zero_or_one():
    pairs = [(-5, 3), (3, -5), (0, 0), (7, 7), (-1, -1), (10**12, 10**12 + 1)]
    for left, right in pairs:
        for opcode, expected in ((1107, left < right), (1108, left == right)):
            m = run([opcode, left, right, 0, 99])
            assert m.memory.read(0) == (1 if expected else 0)
    assert isinstance(IntcodeMachine([1107, 1, 2, 0]).fetch(), LessThan)
    assert isinstance(IntcodeMachine([1108, 1, 2, 0]).fetch(), EqualTo)


def test_equal_to_tick():
    m = IntcodeMachine([1108, 1, 0, 4, 1])
    assert m.tick() == S_ONGOING
    assert m.memory.data == [1108, 1, 0, 4, 0]
    assert m.pc == 4


def test_jump_if_true():
    m = IntcodeMachine([1105, 1, 7, 99])
    assert m.tick() == S_ONGOING
    assert m.pc == 7
    m = IntcodeMachine([1105, 0, 7, 99])
    m.tick()
    assert m.pc == 3
    assert m.last_operation == JumpIfTrue(I, I)


def test_jump_if_false():
    m = IntcodeMachine([1106, 0, 9, 99])
    m.tick()
    assert m.pc == 9
    m = IntcodeMachine([1106, 3, 9, 99])
    m.tick()
    assert m.pc == 3
    assert m.last_operation == JumpIfFalse(I, I)


def test_jump_target_position_mode():
    m = IntcodeMachine([5, 4, 5, 99, 1, 0])
    m.tick()
    assert m.pc == 0


def test_store_input():
    m = IntcodeMachine([3, 3, 99, 0], [17, 18])
    m.tick()
    assert m.memory.data == [3, 3, 99, 17]
    assert m.pc == 2
    assert m.input.to_list() == [18]
    assert m.inputs_consumed == 1
    assert m.last_operation == StoreInput()


def test_produce_output_modes():
    m = IntcodeMachine([4, 2, 99])
    m.tick()
    assert m.output.to_list() == [99]
    m = IntcodeMachine([104, 2, 99])
    m.tick()
    assert m.output.to_list() == [2]
    assert m.last_operation == ProduceOutput(I)


def test_terminate_advances_counter():
    m = IntcodeMachine([99])
    assert m.tick() == S_TERMINATED
    assert m.memory.data == [99]
    assert m.pc == 1
    assert m.last_operation == Terminate()
    # Ticking a halted machine is a no-op.
    assert m.tick() == S_TERMINATED
    assert m.cycles == 1


def test_add_tick():
    m = IntcodeMachine([101, 2, 0, 3])
    m.tick()
    assert m.memory.data == [101, 2, 0, 103]
    assert m.last_operation == Add(I, P)


# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------

def test_index_outside_program():
    m = IntcodeMachine([1, 5, 2, 3])
    with pytest.raises(IndexOutsideProgram) as exc:
        m.tick()
    assert exc.value == IndexOutsideProgram(5, 4)
    assert exc.value.index == 5 and exc.value.program_length == 4
    assert m.memory.data == [1, 5, 2, 3]
    assert m.pc == 0

    m = IntcodeMachine([1, -5, 2, 3])
    with pytest.raises(IndexOutsideProgram) as exc:
        m.tick()
    assert exc.value == IndexOutsideProgram(-5, 4)


def test_write_outside_program():
    with pytest.raises(IndexOutsideProgram) as exc:
        run([1101, 1, 1, 10, 99])
    assert exc.value == IndexOutsideProgram(10, 5)
    with pytest.raises(IndexOutsideProgram) as exc:
        run([1101, 1, 1, -1, 99])
    assert exc.value == IndexOutsideProgram(-1, 5)


def test_missing_destination_slot():
    with pytest.raises(IndexOutsideProgram) as exc:
        run([1, 0, 0])
    assert exc.value == IndexOutsideProgram(3, 3)


def test_invalid_operation_index():
    m = IntcodeMachine([1, 0, 0, 3])
    with pytest.raises(InvalidOperationIndex) as exc:
        m.run()
    assert exc.value == InvalidOperationIndex(4)
    assert m.memory.data == [1, 0, 0, 2]
    assert m.pc == 4


def test_negative_jump_target():
    m = IntcodeMachine([1105, 1, -1])
    with pytest.raises(InvalidOperationIndex) as exc:
        m.run()
    assert exc.value == InvalidOperationIndex(-1)
    assert m.pc == 0


def test_jump_past_end():
    with pytest.raises(InvalidOperationIndex) as exc:
        run([1105, 1, 100])
    assert exc.value == InvalidOperationIndex(100)


def test_input_unavailable():
    m = IntcodeMachine([3, 3, 0, 0])
    with pytest.raises(InputUnavailable) as exc:
        m.tick()
    assert exc.value == InputUnavailable(0)
    assert m.memory.data == [3, 3, 0, 0]
    assert m.input.to_list() == []
    assert m.pc == 0


def test_input_exhausted_mid_run():
    m = IntcodeMachine([3, 0, 3, 1, 99], [5])
    with pytest.raises(InputUnavailable) as exc:
        m.run()
    assert exc.value == InputUnavailable(2)
    assert m.memory.data == [5, 0, 3, 1, 99]


def test_negative_operation_code():
    m = IntcodeMachine([-1, 0, 0, 3])
    with pytest.raises(InvalidOperationCode) as exc:
        m.run()
    assert exc.value == InvalidOperationCode(0, -1)
    assert m.memory.data == [-1, 0, 0, 3]
    assert m.pc == 0


def test_unknown_opcode_and_mode():
    with pytest.raises(InvalidOperationCode) as exc:
        run([1101, 1, 1, 5, 42, 99])
    assert exc.value == InvalidOperationCode(4, 42)
    with pytest.raises(InvalidOperationCode) as exc:
        run([201, 0, 0, 0, 99])
    assert exc.value == InvalidOperationCode(0, 201)


def test_error_messages():
    assert str(InvalidOperationCode(3, 42)) == "Unsupported operation code 42 found at position 3"
    assert str(IndexOutsideProgram(9, 4)) == (
        "Operation attempted to index position 9, but program has the length of 4")
    assert str(InvalidOperationIndex(-1)) == (
        "Invalid operation index found for operation at position -1")
    assert str(InputUnavailable(0)) == "No input available for operation at position 0"
    assert InputUnavailable(0) != InvalidOperationIndex(0)


def test_output_kept_after_error():
    m = IntcodeMachine([104, 7, 3, 0])
    with pytest.raises(InputUnavailable):
        m.run()
    assert m.output.to_list() == [7]


# ---------------------------------------------------------------------------
# Script entry point
# ---------------------------------------------------------------------------

def main():
    tests = [(name, fn) for name, fn in sorted(globals().items())
             if name.startswith("test_") and callable(fn)]
    failed = 0
    print("\n--- Intcode Machine ---")
    for name, fn in tests:
        try:
            fn()
        except (Exception, pytest.fail.Exception) as e:
            failed += 1
            print(f"  FAIL: {name} {e}")
        else:
            print(f"  ok    {name}")

    print("\n" + "=" * 60)
    if failed:
        print(f"{failed} TESTS FAILED")
        sys.exit(1)
    print("ALL TESTS PASSED")


if __name__ == "__main__":
    main()
