"""Unit tests for /thunderdome/chess/notation.py"""

import pytest

from thunderdome.chess.board import Board
from thunderdome.chess.moves import Move, generate_legal_moves
from thunderdome.chess.notation import moves_to_san, parse_move_text, to_san
from thunderdome.core.exceptions import InvalidNotationError

CASTLING_FEN = "r3k2r/8/8/8/8/8/8/R3K2R w KQkq - 0 1"


# -- PARSING TEXT TYPED BY A PERSON --
@pytest.mark.parametrize(
    "text, uci",
    [
        ("e2e4", "e2e4"),
        ("e2 e4", "e2e4"),
        ("E2 to E4", "e2e4"),
        ("  e2   to e4 ", "e2e4"),
        ("e7e8q", "e7e8q"),
        ("e7 to e8 queen", "e7e8q"),
        ("e7 e8 knight", "e7e8n"),
        ("e7 e8 r", "e7e8r"),
    ],
)
def test_parse_move_text(text: str, uci: str) -> None:
    assert parse_move_text(text, Board.starting_position()) == Move.from_uci(uci)


@pytest.mark.parametrize(
    "text, fen, uci",
    [
        ("O-O", CASTLING_FEN, "e1g1"),
        ("0-0-0", CASTLING_FEN, "e1c1"),
        ("castle kingside", CASTLING_FEN.replace(" w ", " b "), "e8g8"),
        ("o-o-o", CASTLING_FEN.replace(" w ", " b "), "e8c8"),
    ],
)
def test_parse_castling_text(text: str, fen: str, uci: str) -> None:
    """Castling words depend on whose turn it is"""
    assert parse_move_text(text, Board.from_fen(fen)) == Move.from_uci(uci)


@pytest.mark.parametrize("text", ["", "e2", "e2 to", "e7 e8 king", "e2 e4 e5 e6", "castle"])
def test_parse_invalid_text(text: str) -> None:
    with pytest.raises(InvalidNotationError):
        parse_move_text(text, Board.starting_position())


# -- SAN --
@pytest.mark.parametrize(
    "fen, uci, san",
    [
        (Board.starting_position().to_fen(), "g1f3", "Nf3"),
        (Board.starting_position().to_fen(), "e2e4", "e4"),
        ("rnbqkbnr/ppp1pppp/8/3p4/4P3/8/PPPP1PPP/RNBQKBNR w KQkq d6 0 2", "e4d5", "exd5"),
        (CASTLING_FEN, "e1g1", "O-O"),
        (CASTLING_FEN, "e1c1", "O-O-O"),
        (CASTLING_FEN, "a1a8", "Rxa8+"),
        ("4k3/P7/8/8/8/8/8/4K3 w - - 0 1", "a7a8q", "a8=Q+"),
        ("6k1/5ppp/8/8/8/8/8/R5K1 w - - 0 1", "a1a8", "Ra8#"),
        ("4k3/8/8/8/8/8/4K3/R6R w - - 0 1", "a1d1", "Rad1"),
        ("4k3/8/8/8/R7/8/8/R3K3 w - - 0 1", "a1a2", "R1a2"),
        ("4k3/8/8/3pP3/8/8/8/4K3 w - d6 0 2", "e5d6", "exd6"),
    ],
)
def test_to_san(fen: str, uci: str, san: str) -> None:
    board = Board.from_fen(fen)
    move = Move.from_uci(uci)
    assert move in generate_legal_moves(board)
    assert to_san(board, move) == san


def test_moves_to_san() -> None:
    moves = [Move.from_uci(uci) for uci in ["f2f3", "e7e5", "g2g4", "d8h4"]]
    assert moves_to_san(Board.starting_position(), moves) == ["f3", "e5", "g4", "Qh4#"]
