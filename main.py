# main.py
"""
The main entry point for drilling a repertoire in the terminal.

Loads an opening from the JSON store, runs a `PracticeSession` on the asyncio
event loop and reads moves (SAN or UCI) from standard input. Besides moves
the drill understands `restart`, `mode random|sequential`, `depth N` and
`quit`. Ctrl+C ends the drill and prints the practice summary.
"""
import argparse
import asyncio
import sys
from typing import Optional

import chess
import structlog

from repertoire_trainer.config.settings import Settings, settings
from repertoire_trainer.containers import get_container
from repertoire_trainer.core.opening_defaults import difficulty_label
from repertoire_trainer.core.repertoire_editor import format_path
from repertoire_trainer.exceptions import RepertoireTrainerError
from repertoire_trainer.orchestration.practice_session import PracticeSession
from repertoire_trainer.types import (MoveOutcome, OpeningStore, PracticeMode, SessionSnapshot,
                                      SessionState, Side)
from repertoire_trainer.utils.logging_config import setup_logging
from repertoire_trainer.utils.signal_manager import AsyncSignalManager

logger = structlog.get_logger(__name__)

_OUTCOME_MESSAGES = {
    MoveOutcome.MISMATCH: "Not the repertoire move. Follow the arrow and try again.",
    MoveOutcome.ILLEGAL: "That move is not legal here.",
    MoveOutcome.LINE_EXHAUSTED: "The line is over; starting a new one.",
    MoveOutcome.UNAVAILABLE: "Wait for the opponent's reply.",
}


def parse_args(argv: Optional[list] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Drill an opening repertoire line by line.")
    parser.add_argument("opening", nargs="?", default=None,
                        help="Name of the opening to practice (underscores match spaces). Defaults to the newest.")
    parser.add_argument("--mode", choices=[m.value for m in PracticeMode],
                        default=settings.practice.default_mode.value, help="Line selection policy.")
    presets = settings.practice.depth_presets
    parser.add_argument("--depth", type=int, choices=[p.value for p in presets],
                        default=settings.practice.default_max_depth,
                        help="Maximum plies per line: " + ", ".join(f"{p.value} ({p.label})" for p in presets) + ".")
    parser.add_argument("--store", default=None, help="Path to the openings JSON file.")
    parser.add_argument("--list", action="store_true", help="List the stored openings and exit.")
    parser.add_argument("--log-level", default=None, help="Overrides the configured log level.")
    return parser.parse_args(argv)


class TerminalDrill:
    """Renders session snapshots to stdout and feeds typed moves back into the session."""

    def __init__(self, session: PracticeSession):
        self._session = session
        self._last_state: Optional[SessionState] = None
        self._last_path = ()

    def render(self, snapshot: SessionSnapshot) -> None:
        if snapshot.path == self._last_path and snapshot.state == self._last_state and snapshot.hint is None:
            return
        self._last_path, self._last_state = snapshot.path, snapshot.state

        board = chess.Board(snapshot.fen)
        flipped = self._session.opening is not None and self._session.opening.side is Side.BLACK
        print()
        print(board.unicode(orientation=chess.BLACK if flipped else chess.WHITE, empty_square="."))
        print(f"Moves: {format_path(snapshot.path)}")
        if snapshot.annotation is not None:
            label = f"[{snapshot.annotation.label}] " if snapshot.annotation.label else ""
            print(f"  {label}{snapshot.annotation.comment}")
        if snapshot.hint is not None:
            print(f"  Hint: {snapshot.hint.orig} -> {snapshot.hint.dest}")
        if snapshot.state is SessionState.LINE_COMPLETE:
            stats = snapshot.stats
            print(f"Line complete. Attempts: {stats.attempts}, first try: {stats.first_try_count}, "
                  f"average depth: {stats.average_depth}")
        elif snapshot.state is SessionState.IDLE:
            print("No lines to practice in this opening.")

    def handle_command(self, text: str) -> bool:
        """Applies one input line; returns False when the user wants to quit."""
        command, _, argument = text.strip().partition(" ")
        if not command:
            return True
        if command in ("quit", "exit"):
            return False
        if command == "restart":
            self._session.restart()
        elif command == "mode":
            try:
                self._session.set_mode(PracticeMode(argument.strip()))
            except ValueError:
                print("Modes: random, sequential")
        elif command == "depth":
            try:
                self._session.set_max_depth(int(argument))
            except ValueError:
                print("Depth must be a non-negative whole number.")
        else:
            outcome = self._session.attempt_move(command)
            if not outcome.accepted:
                print(_OUTCOME_MESSAGES[outcome])
        return True


async def _read_line(reader: asyncio.StreamReader, shutdown_event: asyncio.Event) -> Optional[str]:
    """Waits for one line of input or for shutdown, whichever comes first."""
    read_task = asyncio.ensure_future(reader.readline())
    stop_task = asyncio.ensure_future(shutdown_event.wait())
    done, pending = await asyncio.wait({read_task, stop_task}, return_when=asyncio.FIRST_COMPLETED)
    for task in pending:
        task.cancel()
    if read_task not in done:
        return None
    data = read_task.result()
    return data.decode("utf-8", errors="replace") if data else None


def settings_for_run(args: argparse.Namespace, base: Settings = settings) -> Settings:
    """Layers the command-line choices over `base` without modifying it."""
    practice = base.practice.model_copy(update={
        "default_mode": PracticeMode(args.mode),
        "default_max_depth": args.depth,
    })
    store = base.store.model_copy(update={"json_filepath": args.store}) if args.store else base.store
    return base.model_copy(update={"practice": practice, "store": store})


async def run_drill(args: argparse.Namespace, shutdown_event: asyncio.Event) -> int:
    container = get_container(settings_for_run(args))
    store = container.resolve(OpeningStore)

    try:
        openings = await store.load_all()
    except RepertoireTrainerError as e:
        logger.error("Could not load openings.", error=str(e))
        return 1

    if args.list:
        for opening in openings:
            print(f"{opening.name:<28} {opening.side.value:<6} {difficulty_label(opening.difficulty):<9} {opening.created}")
        return 0

    opening = await store.find_by_name(args.opening)
    if opening is None:
        print("The opening store is empty.")
        return 1

    session = container.resolve(PracticeSession)
    drill = TerminalDrill(session)
    session.subscribe(drill.render)

    print(f"Practicing {opening.name} as {opening.side.value}. Type moves in SAN or UCI; 'quit' to stop.")
    session.load_opening(opening)

    loop = asyncio.get_running_loop()
    reader = asyncio.StreamReader()
    await loop.connect_read_pipe(lambda: asyncio.StreamReaderProtocol(reader), sys.stdin)

    try:
        while not shutdown_event.is_set():
            line = await _read_line(reader, shutdown_event)
            if line is None or not drill.handle_command(line):
                break
    finally:
        session.close()
        session.statistics.log_summary()
    return 0


async def amain(args: argparse.Namespace) -> int:
    shutdown_event = asyncio.Event()
    async with AsyncSignalManager(shutdown_event):
        return await run_drill(args, shutdown_event)


def main() -> None:
    args = parse_args()
    setup_logging(settings.logging, level_override=args.log_level)
    sys.exit(asyncio.run(amain(args)))


if __name__ == "__main__":
    main()
