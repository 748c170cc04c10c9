"""
Centralized Prometheus metrics definitions for the Repertoire Trainer.

This module uses the prometheus-client library to define the counters the
walker and the practice session update. Grouping them here provides a single,
clear overview of the application's instrumentation points.
"""
from prometheus_client import Counter

# A common prefix for all application-specific metrics.
PREFIX = "repertoire_trainer"

# --- PGN Metrics ---

PGN_GAMES_SKIPPED_TOTAL = Counter(
    f"{PREFIX}_pgn_games_skipped_total",
    "Total number of embedded PGN games skipped while extracting lines.",
    ["reason"],  # e.g., reason="invalid_start"
)

# --- Practice Metrics ---

MOVE_ATTEMPTS_TOTAL = Counter(
    f"{PREFIX}_move_attempts_total",
    "Total number of moves submitted by the user, by outcome.",
    ["outcome"],  # e.g., outcome="accepted", "mismatch", "illegal"
)

LINES_STARTED_TOTAL = Counter(
    f"{PREFIX}_lines_started_total",
    "Total number of practice lines drawn for a session.",
    ["mode"],
)

ATTEMPTS_FINALIZED_TOTAL = Counter(
    f"{PREFIX}_attempts_finalized_total",
    "Total number of practice attempts recorded into statistics.",
    ["first_try"],  # "true" or "false"
)

STALE_ACTIONS_DISCARDED_TOTAL = Counter(
    f"{PREFIX}_stale_actions_discarded_total",
    "Scheduled session actions that fired after their session generation ended.",
)
