# repertoire_trainer/orchestration/practice_session.py
"""
Defines the `PracticeSession`, the state machine that drills repertoire lines.

A session picks a line, waits for the user's move, checks it against the
expected SAN through the move oracle, then plays the opponent's scripted
reply after a short delay. Finished attempts are folded into the session's
statistics, and a new line starts once the completed position has been shown
for a moment.

Every delayed action is tagged with the session generation that scheduled
it. Starting a new line, switching opening, mode or depth, and closing the
session all bump the generation and cancel pending actions, so a late timer
can never touch the state of a newer line.
"""
import random
from dataclasses import replace
from typing import Callable, List, Optional, Sequence

import structlog

from repertoire_trainer.config.settings import PracticeSettings
from repertoire_trainer.core.line_selection import LineSelector, cap_line
from repertoire_trainer.core.repertoire_editor import build_annotation_index
from repertoire_trainer.core.variation_walker import parse_repertoire_pgn
from repertoire_trainer.exceptions import OracleError
from repertoire_trainer.services.move_oracle import STARTING_FEN
from repertoire_trainer.statistics import AttemptTracker, PracticeStatistics
from repertoire_trainer.tracing import SessionTrace, trace_transition
from repertoire_trainer.types import (FEN, Annotation, HintArrow, Line, MoveInput, MoveOracle,
                                      MoveOutcome, MovePath, Opening, PracticeMode,
                                      ScheduledHandle, Scheduler, SessionListener,
                                      SessionSnapshot, SessionState, Side)
from repertoire_trainer.utils import metrics

logger = structlog.get_logger(__name__)


class PracticeSession:
    """Runs the drilling protocol for one opening at a time."""

    def __init__(
        self,
        oracle: MoveOracle,
        settings: PracticeSettings,
        scheduler: Scheduler,
        rng: Optional[random.Random] = None,
        start_fen: FEN = STARTING_FEN,
    ):
        """
        Initializes an idle session.

        Args:
            oracle: Validates moves and produces positions and notation.
            settings: Pacing delays and the default mode and depth.
            scheduler: Runs the delayed reply and next-line transitions.
            rng: Source of randomness for random line selection.
            start_fen: The position every line starts from.
        """
        self._oracle = oracle
        self._settings = settings
        self._scheduler = scheduler
        self._start_fen = start_fen
        self._selector = LineSelector(mode=settings.default_mode, rng=rng)
        self._max_depth = settings.default_max_depth

        self._opening: Optional[Opening] = None
        self._side = Side.WHITE
        self._annotation_index = {}
        self._statistics = PracticeStatistics()
        self._attempt = AttemptTracker()
        self._listeners: List[SessionListener] = []

        self._generation = 0
        self._pending: List[ScheduledHandle] = []
        self.trace = SessionTrace.new()

        self._selected_line: Line = ()
        self._line: Line = ()
        self._index = 0
        self._fen: FEN = start_fen
        self._path: MovePath = ()
        self._hint: Optional[HintArrow] = None
        self._state = SessionState.IDLE

    # --- Read-only views -------------------------------------------------

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def fen(self) -> FEN:
        return self._fen

    @property
    def path(self) -> MovePath:
        return self._path

    @property
    def index(self) -> int:
        return self._index

    @property
    def line(self) -> Line:
        """The effective, depth-capped line of the current attempt."""
        return self._line

    @property
    def mode(self) -> PracticeMode:
        return self._selector.mode

    @property
    def max_depth(self) -> int:
        return self._max_depth

    @property
    def hint(self) -> Optional[HintArrow]:
        return self._hint

    @property
    def statistics(self) -> PracticeStatistics:
        return self._statistics

    @property
    def opening(self) -> Optional[Opening]:
        return self._opening

    @property
    def generation(self) -> int:
        return self._generation

    def current_annotation(self) -> Optional[Annotation]:
        """The annotation attached to the position on the board, if any."""
        return self._annotation_index.get(self._path)

    def snapshot(self) -> SessionSnapshot:
        try:
            destinations = self._oracle.legal_destinations(self._fen)
        except OracleError:
            logger.warning("Could not list legal moves for the session position.", fen=self._fen)
            destinations = {}
        return SessionSnapshot(
            state=self._state,
            fen=self._fen,
            mode=self.mode,
            max_depth=self._max_depth,
            line=self._line,
            index=self._index,
            path=self._path,
            legal_destinations=destinations,
            hint=self._hint,
            annotation=self.current_annotation(),
            stats=self._statistics.snapshot(),
        )

    def subscribe(self, listener: SessionListener) -> Callable[[], None]:
        """Registers a listener for snapshots; returns a function that unregisters it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)
        return unsubscribe

    # --- Configuration transitions ----------------------------------------

    @trace_transition
    def load_opening(self, opening: Opening, lines: Optional[Sequence[Line]] = None) -> None:
        """
        Makes `opening` the active repertoire and starts a fresh line.

        Statistics are reset and the abandoned line, if any, is not counted.

        Args:
            opening: The repertoire to practice.
            lines: Pre-parsed lines of `opening.pgn`; parsed here when omitted.
        """
        self._opening = opening
        self._side = Side(opening.side)
        if lines is None:
            lines = parse_repertoire_pgn(opening.pgn).lines
        self._selector.set_lines(lines)
        self._annotation_index = build_annotation_index(opening.annotations)
        self.trace = SessionTrace.new(opening_id=opening.id, generation=self._generation)
        logger.info("Opening loaded for practice.", opening=opening.name,
                    side=self._side.value, lines=len(lines))
        self._start_new_line(record_attempt=False)
        self._statistics.reset()
        self._notify()

    def update_annotations(self, annotations: Sequence[Annotation]) -> None:
        """Refreshes the commentary after an edit without disturbing the attempt."""
        self._annotation_index = build_annotation_index(annotations)
        self._notify()

    @trace_transition
    def set_mode(self, mode: PracticeMode) -> None:
        self._selector.set_mode(PracticeMode(mode))
        self._start_new_line(record_attempt=False)

    @trace_transition
    def set_max_depth(self, max_depth: int) -> None:
        """Changes the depth cap, keeping the selected line and restarting it."""
        if max_depth < 0:
            raise ValueError(f"max_depth must be non-negative, got {max_depth}")
        self._max_depth = max_depth
        self._selector.reset()
        self._start_new_line(preserve_line=True, record_attempt=False)

    @trace_transition
    def restart(self) -> None:
        """Counts the attempt in progress, then starts a new line."""
        self._start_new_line(record_attempt=True)

    def close(self) -> None:
        """Discards pending actions; the session goes back to idle."""
        self._invalidate_pending()
        self._state = SessionState.IDLE
        logger.debug("Practice session closed.", **self.trace.as_dict())

    # --- Move handling -------------------------------------------------------

    @trace_transition
    def attempt_move(self, move: MoveInput) -> MoveOutcome:
        """
        Submits the user's move for the current ply of the line.

        Returns:
            `MoveOutcome.ACCEPTED` when the move is the expected one. Illegal
            moves leave the session untouched. A legal but wrong move marks the
            attempt as containing a mistake and sets a hint arrow towards the
            expected move. A move past the end of the line starts a new line.
        """
        outcome = self._attempt_move(move)
        metrics.MOVE_ATTEMPTS_TOTAL.labels(outcome=outcome.value).inc()
        return outcome

    def _attempt_move(self, move: MoveInput) -> MoveOutcome:
        if self._state in (SessionState.IDLE, SessionState.AUTO_PLAYING_REPLY) or not self._line:
            return MoveOutcome.UNAVAILABLE

        try:
            applied = self._oracle.apply_move(self._fen, move)
        except OracleError as e:
            logger.debug("Rejected illegal move.", move=str(move), reason=str(e))
            return MoveOutcome.ILLEGAL

        self._hint = None
        expected = self._line[self._index] if self._index < len(self._line) else None
        if expected is None:
            logger.debug("Move submitted after the line ended; starting a new line.")
            self._start_new_line(record_attempt=False)
            return MoveOutcome.LINE_EXHAUSTED

        if applied.san != expected:
            self._attempt.mistakes = True
            self._hint = self._hint_for(expected)
            logger.debug("Move does not match the line.", played=applied.san, expected=expected)
            self._notify()
            return MoveOutcome.MISMATCH

        self._attempt.moves += 1
        self._fen = applied.fen_after
        self._path = self._path + (applied.san,)
        self._index += 1

        if self._index < len(self._line):
            self._state = SessionState.AUTO_PLAYING_REPLY
            self._schedule(self._settings.reply_delay_s, self._play_scripted_move)
        else:
            self._complete_line()
        self._notify()
        return MoveOutcome.ACCEPTED

    def _hint_for(self, expected: str) -> Optional[HintArrow]:
        try:
            notation = self._oracle.notation_of(self._fen, expected)
        except OracleError:
            logger.warning("Expected move is not playable in the current position.",
                           expected=expected, fen=self._fen)
            return None
        return HintArrow(orig=notation.uci[:2], dest=notation.uci[2:4])

    def _play_scripted_move(self) -> None:
        """Plays the line's next ply for the side the user is not practicing."""
        if self._index >= len(self._line):
            self._complete_line()
            self._notify()
            return

        scripted = self._line[self._index]
        try:
            applied = self._oracle.apply_move(self._fen, scripted)
        except OracleError as e:
            logger.warning("Scripted move could not be played; ending the attempt.",
                           move=scripted, error=str(e))
            self._complete_line()
            self._notify()
            return

        self._fen = applied.fen_after
        self._path = self._path + (applied.san,)
        self._index += 1

        if self._index >= len(self._line):
            self._complete_line()
        else:
            self._state = SessionState.AWAITING_USER_MOVE
        self._notify()

    # --- Line lifecycle ------------------------------------------------------

    def _complete_line(self) -> None:
        self._state = SessionState.LINE_COMPLETE
        recorded = self._statistics.finalize_attempt(self._attempt)
        logger.info("Practice line completed.", plies=len(self._line), recorded=recorded,
                    attempts=self._statistics.attempts)
        self._schedule(self._settings.completion_delay_s, self._advance_after_completion)

    def _advance_after_completion(self) -> None:
        self._start_new_line(record_attempt=False)

    def _start_new_line(self, preserve_line: bool = False, record_attempt: bool = True) -> None:
        self._invalidate_pending()

        if record_attempt:
            self._statistics.finalize_attempt(self._attempt)
        else:
            self._attempt.reset()

        self._fen = self._start_fen
        self._index = 0
        self._path = ()
        self._hint = None

        if not preserve_line:
            self._selected_line = self._selector.next_line()
            metrics.LINES_STARTED_TOTAL.labels(mode=self.mode.value).inc()
        self._line = cap_line(self._selected_line, self._max_depth)

        if not self._line:
            self._state = SessionState.IDLE
            logger.info("No lines to practice; add lines to start practicing.")
        elif self._side is Side.BLACK:
            self._state = SessionState.AUTO_PLAYING_REPLY
            self._schedule(self._settings.first_move_delay_s, self._play_scripted_move)
        else:
            self._state = SessionState.AWAITING_USER_MOVE

        logger.debug("Practice line started.", plies=len(self._line), mode=self.mode.value,
                     max_depth=self._max_depth, generation=self._generation)
        self._notify()

    # --- Scheduling ------------------------------------------------------------

    def _invalidate_pending(self) -> None:
        self._generation += 1
        self.trace = replace(self.trace, generation=self._generation)
        for handle in self._pending:
            handle.cancel()
        self._pending.clear()

    def _schedule(self, delay_s: float, action: Callable[[], None]) -> None:
        generation = self._generation
        handle: Optional[ScheduledHandle] = None

        def fire() -> None:
            if handle in self._pending:
                self._pending.remove(handle)
            if generation != self._generation:
                metrics.STALE_ACTIONS_DISCARDED_TOTAL.inc()
                logger.debug("Discarding stale session action.", action=action.__name__,
                             scheduled_for=generation, current=self._generation)
                return
            action()

        handle = self._scheduler.schedule(delay_s, fire)
        self._pending.append(handle)

    def _notify(self) -> None:
        if not self._listeners:
            return
        snapshot = self.snapshot()
        for listener in list(self._listeners):
            try:
                listener(snapshot)
            except Exception:
                logger.error("Session listener failed.", exc_info=True)
