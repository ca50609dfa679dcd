"""Unit tests for /thunderdome/chess/pieces.py"""

import pytest

from thunderdome.chess.pieces import PIECE_POINTS, Color, Piece, PieceType
from thunderdome.core.exceptions import InvalidFENError


@pytest.mark.parametrize(
    "character, piece_type, color",
    [
        ("P", PieceType.PAWN, Color.WHITE),
        ("n", PieceType.KNIGHT, Color.BLACK),
        ("B", PieceType.BISHOP, Color.WHITE),
        ("r", PieceType.ROOK, Color.BLACK),
        ("Q", PieceType.QUEEN, Color.WHITE),
        ("k", PieceType.KING, Color.BLACK),
    ],
)
def test_piece_from_fen(character: str, piece_type: PieceType, color: Color) -> None:
    """Upper case for white, lower case for black"""
    piece = Piece.from_fen(character)
    assert piece == Piece(piece_type, color)
    assert piece.to_fen() == character


@pytest.mark.parametrize("character", ["x", "1", "", "K1"])
def test_unknown_piece_character(character: str) -> None:
    with pytest.raises(InvalidFENError):
        Piece.from_fen(character)


def test_points() -> None:
    """The classic values. The king is not worth any points."""
    assert Piece(PieceType.QUEEN, Color.BLACK).points == 9
    assert Piece(PieceType.PAWN, Color.WHITE).points == 1
    assert Piece(PieceType.KING, Color.WHITE).points == 0
    assert PieceType.KING not in PIECE_POINTS


def test_promotion_keeps_color() -> None:
    pawn = Piece(PieceType.PAWN, Color.BLACK)
    knight = pawn.promote_to(PieceType.KNIGHT)
    assert knight == Piece(PieceType.KNIGHT, Color.BLACK)
    assert pawn.type == PieceType.PAWN  # immutable


def test_color_helpers() -> None:
    assert Color.WHITE.opponent == Color.BLACK
    assert Color.BLACK.opponent == Color.WHITE
    assert Color.WHITE.forward == 1
    assert Color.BLACK.forward == -1
