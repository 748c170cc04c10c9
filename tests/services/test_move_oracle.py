# tests/services/test_move_oracle.py
import chess
import pytest

from repertoire_trainer.exceptions import IllegalMoveError, InvalidPositionError, OracleError
from repertoire_trainer.services.move_oracle import STARTING_FEN

PROMOTION_FEN = "8/4P3/8/8/8/8/k7/4K3 w - - 0 1"


def test_apply_san_move(oracle):
    applied = oracle.apply_move(STARTING_FEN, "e4")

    assert applied.san == "e4"
    assert applied.uci == "e2e4"
    assert applied.fen_before == STARTING_FEN
    assert applied.fen_after.startswith("rnbqkbnr/pppppppp/8/8/4P3/8/PPPP1PPP/RNBQKBNR b")


def test_apply_uci_move_returns_canonical_san(oracle):
    applied = oracle.apply_move(STARTING_FEN, "g1f3")

    assert applied.san == "Nf3"


def test_apply_chess_move_object(oracle):
    applied = oracle.apply_move(STARTING_FEN, chess.Move.from_uci("d2d4"))

    assert applied.san == "d4"


def test_pawn_reaching_last_rank_promotes_to_queen(oracle):
    applied = oracle.apply_move(PROMOTION_FEN, chess.Move.from_uci("e7e8"))

    assert applied.uci == "e7e8q"
    assert applied.san.startswith("e8=Q")


def test_illegal_move_is_rejected(oracle):
    with pytest.raises(IllegalMoveError) as excinfo:
        oracle.apply_move(STARTING_FEN, "e5")

    assert excinfo.value.fen == STARTING_FEN


@pytest.mark.parametrize("move", ["", "hello", "--", "0000"])
def test_unreadable_or_null_moves_are_rejected(oracle, move):
    with pytest.raises(OracleError):
        oracle.apply_move(STARTING_FEN, move)


def test_invalid_fen_raises(oracle):
    with pytest.raises(InvalidPositionError):
        oracle.legal_moves("not a fen")


def test_legal_moves_from_start(oracle):
    moves = oracle.legal_moves(STARTING_FEN)

    assert len(moves) == 20
    assert {m.san for m in moves} >= {"e4", "Nf3", "a3"}


def test_legal_destinations(oracle):
    destinations = oracle.legal_destinations(STARTING_FEN)

    assert destinations["e2"] == ["e3", "e4"]
    assert destinations["g1"] == ["f3", "h3"]
    assert "e1" not in destinations


def test_notation_of(oracle):
    notation = oracle.notation_of(STARTING_FEN, "Nf3")

    assert (notation.san, notation.uci) == ("Nf3", "g1f3")
