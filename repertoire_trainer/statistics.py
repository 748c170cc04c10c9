"""
Manages practice statistics for the Repertoire Trainer.

This module provides the `PracticeStatistics` class, which accumulates
finished attempts for one practice session, and `AttemptTracker`, which
follows the attempt currently in progress. Keys are a type-safe Enum.
"""
from collections import Counter
from enum import Enum, auto
from typing import Dict

import structlog

from repertoire_trainer.types import StatsSnapshot
from repertoire_trainer.utils import metrics

logger = structlog.get_logger(__name__)


class StatKey(Enum):
    """Enumeration for keys used in PracticeStatistics for type safety."""
    ATTEMPTS = auto()
    FIRST_TRY_SUCCESSES = auto()
    TOTAL_DEPTH = auto()


# A mapping for user-friendly display names, decoupled from the keys.
STAT_DISPLAY_NAMES: Dict[StatKey, str] = {
    StatKey.ATTEMPTS: "Attempts",
    StatKey.FIRST_TRY_SUCCESSES: "First-Try Wins",
    StatKey.TOTAL_DEPTH: "Moves Played In Finished Attempts",
}


class AttemptTracker:
    """The user's progress through the line currently on the board."""

    def __init__(self):
        self.moves = 0
        self.mistakes = False

    def reset(self) -> None:
        self.moves = 0
        self.mistakes = False


class PracticeStatistics:
    """
    A stateful class to aggregate statistics across the attempts of a session.
    """

    def __init__(self):
        """Initializes the statistics with all counters set to zero."""
        self.stats: Counter[StatKey] = Counter()

    def reset(self) -> None:
        """Resets all statistics, e.g. when the user switches openings."""
        self.stats.clear()

    def add_stat(self, key: StatKey, count: int = 1) -> None:
        self.stats[key] += count

    def finalize_attempt(self, attempt: AttemptTracker) -> bool:
        """
        Records `attempt` and resets it for the next line.

        An attempt without a single user move is discarded rather than counted.

        Returns:
            True if the attempt was recorded.
        """
        moves, mistakes = attempt.moves, attempt.mistakes
        attempt.reset()
        if moves == 0:
            return False

        self.add_stat(StatKey.ATTEMPTS)
        self.add_stat(StatKey.TOTAL_DEPTH, moves)
        if not mistakes:
            self.add_stat(StatKey.FIRST_TRY_SUCCESSES)
        metrics.ATTEMPTS_FINALIZED_TOTAL.labels(first_try=str(not mistakes).lower()).inc()
        logger.debug("Practice attempt recorded.", moves=moves, first_try=not mistakes)
        return True

    @property
    def attempts(self) -> int:
        return self.stats[StatKey.ATTEMPTS]

    @property
    def first_try_count(self) -> int:
        return self.stats[StatKey.FIRST_TRY_SUCCESSES]

    @property
    def total_depth(self) -> int:
        return self.stats[StatKey.TOTAL_DEPTH]

    @property
    def average_depth(self) -> float:
        """Average number of user moves per recorded attempt, to one decimal."""
        if self.attempts == 0:
            return 0.0
        return round(self.total_depth / self.attempts, 1)

    def snapshot(self) -> StatsSnapshot:
        return StatsSnapshot(
            attempts=self.attempts,
            first_try_count=self.first_try_count,
            total_depth=self.total_depth,
            average_depth=self.average_depth,
        )

    def log_summary(self) -> None:
        """Logs a formatted summary of the session's statistics."""
        logger.info("\n" + "=" * 12 + " Practice Summary " + "=" * 12)

        for key in StatKey:
            display_text = STAT_DISPLAY_NAMES.get(key, key.name.replace("_", " ").title())
            logger.info(f"{display_text:<36}: {self.stats[key]:>6}")

        logger.info("-" * 42)
        logger.info(f"{'Average Depth':<36}: {self.average_depth:>6}")
        logger.info("=" * 42)
