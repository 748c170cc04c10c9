# tests/test_statistics.py
from repertoire_trainer.statistics import AttemptTracker, PracticeStatistics, StatKey


def test_clean_attempt_counts_as_first_try():
    stats = PracticeStatistics()
    attempt = AttemptTracker()
    attempt.moves = 2

    assert stats.finalize_attempt(attempt) is True
    assert stats.attempts == 1
    assert stats.first_try_count == 1
    assert stats.total_depth == 2
    assert attempt.moves == 0 and attempt.mistakes is False


def test_attempt_with_mistake_is_not_first_try():
    stats = PracticeStatistics()
    attempt = AttemptTracker()
    attempt.moves, attempt.mistakes = 3, True

    stats.finalize_attempt(attempt)

    assert stats.attempts == 1
    assert stats.first_try_count == 0


def test_attempt_without_moves_is_discarded():
    stats = PracticeStatistics()
    attempt = AttemptTracker()
    attempt.mistakes = True

    assert stats.finalize_attempt(attempt) is False
    assert stats.attempts == 0
    assert attempt.mistakes is False


def test_average_depth_is_rounded_to_one_decimal():
    stats = PracticeStatistics()
    assert stats.average_depth == 0.0

    stats.add_stat(StatKey.ATTEMPTS, 3)
    stats.add_stat(StatKey.TOTAL_DEPTH, 7)

    assert stats.average_depth == 2.3
    assert stats.snapshot().average_depth == 2.3


def test_reset_clears_everything():
    stats = PracticeStatistics()
    stats.add_stat(StatKey.ATTEMPTS)
    stats.reset()

    assert stats.snapshot().attempts == 0
