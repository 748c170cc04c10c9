# repertoire_trainer/exceptions.py
"""
Defines custom exceptions for the Repertoire Trainer application.

All application errors derive from `RepertoireTrainerError` so callers can
catch the whole family in one place. None of these errors are fatal to a
practice session: the walker and the session engine translate them into
empty results or move outcomes, and only the store and the oracle adapter
let them reach their callers.
"""

from typing import Optional


class RepertoireTrainerError(Exception):
    """Base class for all application-specific, catchable errors."""
    pass


class PgnError(RepertoireTrainerError):
    """Base class for errors related to PGN (Portable Game Notation) handling."""
    pass


class PgnParsingError(PgnError):
    """
    Raised for game-level PGN integrity errors.

    The variation walker raises this internally for a game whose starting
    position cannot be established and recovers from it by skipping that game.
    """
    pass


class OracleError(RepertoireTrainerError):
    """Base class for errors raised by the move legality oracle."""
    pass


class InvalidPositionError(OracleError):
    """Raised when a FEN string cannot be turned into a board."""
    pass


class IllegalMoveError(OracleError):
    """
    Raised when a candidate move is illegal or cannot be parsed in a position.

    Attributes:
        fen: The position the move was tried in.
        move: The textual form of the rejected move.
    """
    def __init__(self, message: str, fen: Optional[str] = None, move: Optional[str] = None):
        super().__init__(message)
        self.fen = fen
        self.move = move


class OpeningStoreError(RepertoireTrainerError):
    """Raised for I/O or decoding failures in the opening store."""
    pass


class OpeningNotFoundError(OpeningStoreError):
    """Raised when an opening id is not present in the store."""
    pass


class AnnotationError(RepertoireTrainerError):
    """Base class for errors raised while editing annotations."""
    pass


class NoCommentsFoundError(AnnotationError):
    """Raised when importing comments from a PGN that contains none."""
    pass
