"""
Noun/verb search.

Programs of this kind take their inputs in memory slots 1 (noun) and 2
(verb) and leave their answer in slot 0.
"""

from __future__ import annotations

import logging
from typing import Sequence

from .errors import IntcodeError
from .machine import IntcodeMachine

logger = logging.getLogger(__name__)

NOUN_VERB_LIMIT = 100
GRAVITY_ASSIST_TARGET = 19690720


def run_with_noun_verb(program: Sequence[int], noun: int, verb: int) -> int:
    if len(program) < 3:
        raise ValueError(
            f"Program has {len(program)} words, needs at least 3 for noun and verb")
    memory = list(program)
    memory[1] = noun
    memory[2] = verb
    machine = IntcodeMachine(memory)
    machine.run()
    return machine.memory.read(0)


def find_noun_verb(program: Sequence[int], target: int = GRAVITY_ASSIST_TARGET,
                   limit: int = NOUN_VERB_LIMIT) -> tuple[int, int]:
    """First ``(noun, verb)`` in ``range(limit)`` squared that yields *target*."""
    for noun in range(limit):
        for verb in range(limit):
            try:
                result = run_with_noun_verb(program, noun, verb)
            except IntcodeError as e:
                logger.debug("noun=%d verb=%d failed: %s", noun, verb, e)
                continue
            if result == target:
                return noun, verb
    raise LookupError(f"No noun/verb below {limit} produces {target}")
