# repertoire_trainer/services/move_oracle.py
"""
Provides the move legality oracle backed by the `python-chess` library.

This module is a stateless adapter: positions travel in and out as FEN
strings, and every call rebuilds a `chess.Board` from the FEN it is given.
The practice session depends only on the `MoveOracle` protocol and never on
`python-chess` directly, which keeps chess rules out of the session logic.
"""
from collections import defaultdict
from typing import Dict, List

import chess
import structlog

from repertoire_trainer.exceptions import IllegalMoveError, InvalidPositionError
from repertoire_trainer.types import FEN, AppliedMove, MoveInput, MoveNotation

logger = structlog.get_logger(__name__)

STARTING_FEN: FEN = chess.STARTING_FEN


class ChessMoveOracle:
    """A stateless `MoveOracle` implementation on top of `python-chess`."""

    @staticmethod
    def _board(fen: FEN) -> chess.Board:
        try:
            return chess.Board(fen)
        except ValueError as e:
            raise InvalidPositionError(f"Invalid FEN '{fen}': {e}") from e

    @staticmethod
    def _with_auto_queen(board: chess.Board, move: chess.Move) -> chess.Move:
        """A pawn dropped on the last rank without a piece choice becomes a queen."""
        if move.promotion is None and board.piece_type_at(move.from_square) == chess.PAWN \
                and chess.square_rank(move.to_square) in (0, 7):
            return chess.Move(move.from_square, move.to_square, promotion=chess.QUEEN)
        return move

    def _resolve(self, board: chess.Board, move: MoveInput) -> chess.Move:
        """
        Turns a SAN string, a UCI string or a `chess.Move` into a legal move.

        Raises:
            IllegalMoveError: If the input cannot be parsed or is not legal here.
        """
        if isinstance(move, chess.Move):
            candidate = self._with_auto_queen(board, move)
        else:
            text = str(move).strip()
            try:
                candidate = board.parse_san(text)
            except ValueError:
                try:
                    candidate = self._with_auto_queen(board, chess.Move.from_uci(text))
                except ValueError as e:
                    raise IllegalMoveError(
                        f"Unreadable move '{text}'.", fen=board.fen(), move=text
                    ) from e

        # Null moves parse fine but are never part of a line.
        if not candidate or candidate not in board.legal_moves:
            logger.debug("Move is not legal in this position.", move=candidate.uci(), fen=board.fen())
            raise IllegalMoveError(
                f"Illegal move '{candidate.uci()}'.", fen=board.fen(), move=candidate.uci()
            )
        return candidate

    def apply_move(self, fen: FEN, move: MoveInput) -> AppliedMove:
        """
        Plays `move` in `fen`.

        Returns:
            The position after the move together with the move's canonical
            SAN and UCI notation.

        Raises:
            InvalidPositionError: If `fen` is not a valid position.
            IllegalMoveError: If the move is illegal or unreadable.
        """
        board = self._board(fen)
        resolved = self._resolve(board, move)
        san = board.san(resolved)
        board.push(resolved)
        return AppliedMove(fen_before=fen, fen_after=board.fen(), san=san, uci=resolved.uci())

    def notation_of(self, fen: FEN, move: MoveInput) -> MoveNotation:
        board = self._board(fen)
        resolved = self._resolve(board, move)
        return MoveNotation(san=board.san(resolved), uci=resolved.uci())

    def legal_moves(self, fen: FEN) -> List[MoveNotation]:
        board = self._board(fen)
        return [MoveNotation(san=board.san(move), uci=move.uci()) for move in board.legal_moves]

    def legal_destinations(self, fen: FEN) -> Dict[str, List[str]]:
        """Maps every origin square with a legal move to its destination squares."""
        board = self._board(fen)
        destinations: Dict[str, List[str]] = defaultdict(list)
        for move in board.legal_moves:
            dest = chess.square_name(move.to_square)
            origin = destinations[chess.square_name(move.from_square)]
            if dest not in origin:
                origin.append(dest)
        return {origin: sorted(dests) for origin, dests in destinations.items()}
