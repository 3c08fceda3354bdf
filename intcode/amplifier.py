"""
Amplifier chain: N copies of one program wired output-to-input in series.

Each stage receives its phase setting followed by the signal carried from
the previous stage, and its first output becomes the next signal. Stages
run one after another to completion; there is no feedback loop.
"""

from __future__ import annotations

import logging
from typing import Iterable, Sequence

from .errors import AmplifierError, IntcodeError
from .machine import IntcodeMachine
from .permutations import Permutations

logger = logging.getLogger(__name__)

DEFAULT_PHASE_SETTINGS = (0, 1, 2, 3, 4)


def evaluate_phase_sequence(program: Sequence[int], phases: Iterable[int],
                            signal: int = 0) -> int:
    """Thread *signal* through one amplifier per phase and return the result."""
    for stage, phase in enumerate(phases):
        output = IntcodeMachine(program, [phase, signal]).run()
        if not output:
            raise AmplifierError(f"Amplifier stage {stage} produced no output")
        signal = output[0]
    return signal


def maximize_amplifier_output(program: Sequence[int],
                              settings: Iterable[int] = DEFAULT_PHASE_SETTINGS,
                              ) -> tuple[int, tuple[int, ...]]:
    """Try every ordering of *settings*, return ``(best_signal, phases)``.

    Orderings whose run fails are skipped. On ties the last ordering
    produced wins.
    """
    best: tuple[int, tuple[int, ...]] | None = None
    tried = failed = 0
    for phases in Permutations(settings):
        tried += 1
        try:
            signal = evaluate_phase_sequence(program, phases)
        except IntcodeError as e:
            failed += 1
            logger.debug("phases %s failed: %s", phases, e)
            continue
        if best is None or signal >= best[0]:
            best = (signal, tuple(phases))

    logger.debug("tried %d phase orderings, %d failed", tried, failed)
    if best is None:
        raise AmplifierError("Did not get a maximum value")
    return best
