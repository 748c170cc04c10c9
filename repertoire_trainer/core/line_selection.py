# repertoire_trainer/core/line_selection.py
"""
Line selection policies and depth capping for practice sessions.

These are small, deterministic building blocks: the random policy draws from
an injected `random.Random`, so a seeded generator reproduces a session.
"""
import random
from typing import Optional, Sequence

from repertoire_trainer.types import Line, PracticeMode

FULL_LINE_DEPTH = 0


def cap_line(line: Line, max_depth: int) -> Line:
    """
    Returns the effective practice line: `line` truncated to `max_depth` plies.

    A depth of 0 (the "Full line" preset) means no truncation.
    """
    if max_depth < 0:
        raise ValueError(f"max_depth must be non-negative, got {max_depth}")
    if max_depth == FULL_LINE_DEPTH:
        return tuple(line)
    return tuple(line[:max_depth])


class LineSelector:
    """
    Picks the next line to practice from a candidate set.

    In random mode each request draws uniformly with replacement. In
    sequential mode a rotating pointer walks the candidates in order and
    wraps around to the start.
    """

    def __init__(self, lines: Sequence[Line] = (), mode: PracticeMode = PracticeMode.RANDOM,
                 rng: Optional[random.Random] = None):
        self._lines = list(lines)
        self._mode = mode
        self._rng = rng or random.Random()
        self._pointer = 0

    @property
    def mode(self) -> PracticeMode:
        return self._mode

    @property
    def pointer(self) -> int:
        return self._pointer

    @property
    def lines(self) -> Sequence[Line]:
        return tuple(self._lines)

    def set_lines(self, lines: Sequence[Line]) -> None:
        self._lines = list(lines)
        self.reset()

    def set_mode(self, mode: PracticeMode) -> None:
        self._mode = mode
        self.reset()

    def reset(self) -> None:
        """Rewinds the sequential rotation to the first candidate."""
        self._pointer = 0

    def next_line(self) -> Line:
        """Returns the next line, or an empty line when there are no candidates."""
        if not self._lines:
            return ()

        if self._mode is PracticeMode.RANDOM:
            return self._lines[self._rng.randrange(len(self._lines))]

        pointer = self._pointer % len(self._lines)
        self._pointer = (pointer + 1) % len(self._lines)
        return self._lines[pointer]
