"""Defines the types of chess pieces"""

from dataclasses import dataclass
from enum import Enum, auto
from typing import Self

from thunderdome.core.exceptions import InvalidFENError


class PieceType(Enum):
    PAWN = auto()
    KNIGHT = auto()
    BISHOP = auto()
    ROOK = auto()
    QUEEN = auto()
    KING = auto()


class Color(Enum):
    WHITE = auto()
    BLACK = auto()

    @property
    def opponent(self) -> "Color":
        return Color.BLACK if self == Color.WHITE else Color.WHITE

    @property
    def forward(self) -> int:
        """White moves UP the board, black moves DOWN"""
        return 1 if self == Color.WHITE else -1


FEN_TO_PIECE: dict[str, PieceType] = {
    "p": PieceType.PAWN,
    "n": PieceType.KNIGHT,
    "b": PieceType.BISHOP,
    "r": PieceType.ROOK,
    "q": PieceType.QUEEN,
    "k": PieceType.KING,
}

PIECE_TO_FEN: dict[PieceType, str] = {value: key for key, value in FEN_TO_PIECE.items()}


PIECE_POINTS: dict[PieceType, int] = {
    PieceType.PAWN: 1,
    PieceType.KNIGHT: 3,
    PieceType.BISHOP: 3,
    PieceType.ROOK: 5,
    PieceType.QUEEN: 9,
}


@dataclass(frozen=True, slots=True)
class Piece:
    type: PieceType
    color: Color

    @property
    def points(self) -> int:
        # NOTE: The King's worth is undefined (does not count towards total points)
        return PIECE_POINTS.get(self.type, 0)

    @classmethod
    def from_fen(cls, character: str) -> Self:
        # lower case: Black pieces, upper case: White pieces
        if character.lower() not in FEN_TO_PIECE:
            raise InvalidFENError(f"Unknown piece character: {character!r}")
        color = Color.WHITE if character.isupper() else Color.BLACK
        piece_type = FEN_TO_PIECE[character.lower()]
        return cls(piece_type, color)

    def to_fen(self) -> str:
        return (
            PIECE_TO_FEN[self.type].upper()
            if self.color == Color.WHITE
            else PIECE_TO_FEN[self.type].lower()
        )

    def promote_to(self, new_type: PieceType) -> Self:
        return type(self)(new_type, self.color)
