"""
Representation of a single position on the board. The part that can be encoded in a FEN string.
"""

from dataclasses import dataclass
from typing import Optional, Self

from thunderdome.chess.castling import (
    CASTLING_ORDER,
    CastlingDirection,
    castling_from_fen,
    castling_to_fen,
)
from thunderdome.chess.pieces import FEN_TO_PIECE, Color, Piece
from thunderdome.chess.square import BOARD_DIMENSIONS, FILE_NAMES, SQUARES, Square
from thunderdome.core.exceptions import InvalidFENError

STARTING_FEN = "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR w KQkq - 0 1"

Placement = tuple[Optional[Piece], ...]


def is_valid_fen(fen: str) -> bool:
    """
    Check if given string follows proper FEN notation.
    """

    # there should be 6 parts to the string
    parts = fen.split(" ")
    if len(parts) != 6:
        return False

    position, color, castling, en_passant, half_move_counter, full_move_counter = parts
    return (
        is_valid_position(position)
        and is_valid_color_code(color)
        and is_valid_castling_rights(castling)
        and is_valid_en_passant(en_passant, color)
        and is_valid_move_counter(half_move_counter)
        and is_valid_move_counter(full_move_counter)
    )


def is_valid_position(position: str) -> bool:
    """Only check the part of the FEN encoding for the board position."""
    num_files, num_ranks = BOARD_DIMENSIONS
    rank_fens = position.split("/")
    if len(rank_fens) != num_ranks:
        return False

    for rank_fen in rank_fens:
        file_count = 0
        for character in rank_fen:
            if character.isdigit():
                file_count += int(character)
            elif character.lower() in FEN_TO_PIECE:
                file_count += 1
            else:
                return False

        # make sure you are creating a correctly sized board
        if file_count != num_files:
            return False
    return True


def is_valid_color_code(color: str) -> bool:
    return color in {"w", "b"}


def is_valid_castling_rights(castling: str) -> bool:
    """Either '-' or a non-empty subsequence of KQkq (in that order)."""
    if castling == "-":
        return True
    order = "".join(direction.value for direction in CASTLING_ORDER)
    remaining = iter(order)
    return bool(castling) and all(character in remaining for character in castling)


def is_valid_en_passant(en_passant: str, color: str = "w") -> bool:
    """
    Valid en passant square encoding is a '-' or the square the opponent's pawn just skipped:
    on the 6th rank when white (`color` "w") is to move, on the 3rd rank when black is.
    """
    if en_passant == "-":
        return True
    return is_valid_square(en_passant) and en_passant[1] == ("6" if color == "w" else "3")


def is_valid_square(square: str) -> bool:
    """Valid square should be a letter for the file + a number for the rank"""
    if len(square) != 2:
        return False
    file_char, rank_char = square[0], square[1]
    return (
        file_char in FILE_NAMES
        and rank_char.isdigit()
        and 1 <= int(rank_char) <= BOARD_DIMENSIONS[1]
    )


def is_valid_move_counter(counter: str) -> bool:
    return counter.isdigit()


def placement_from_fen(position: str) -> Placement:
    """
    ex. standard starting position:
    rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR
    means:
    * black pieces are on the 8th rank, starting with rook on a8, knight on b8, etc.
    * pawns cover 7th rank entirely
    * ranks 6 through 3 have 8 consecutive empty squares
    * rank 2 are the white pawns (capital letters)
    """
    placement: list[Optional[Piece]] = [None] * len(SQUARES)
    for rank_idx, fen_one_rank in enumerate(position.split("/")):
        # FEN string is read from top rank (8th) to bottom rank (1st)
        rank = BOARD_DIMENSIONS[1] - 1 - rank_idx
        # ... but the first character is the a-file, so reads in normal direction
        file = 0
        for character in fen_one_rank:
            if character.isalpha():
                placement[Square(file, rank).index] = Piece.from_fen(character)
                file += 1
            else:
                # A number denotes the amount of empty squares after each other
                file += int(character)
    return tuple(placement)


def placement_to_fen(placement: Placement) -> str:
    """Ranks are separated by slashes in FEN string."""
    return "/".join(
        _rank_to_fen(placement, rank)
        for rank in range(BOARD_DIMENSIONS[1] - 1, -1, -1)
    )


def _rank_to_fen(placement: Placement, rank: int) -> str:
    """FEN string of a single rank"""
    fen_characters: list[str] = []
    empty_count = 0
    for file in range(BOARD_DIMENSIONS[0]):
        piece = placement[Square(file, rank).index]
        if piece is not None:
            if empty_count > 0:
                fen_characters.append(str(empty_count))
                empty_count = 0
            fen_characters.append(piece.to_fen())
        else:
            empty_count += 1

    # if the entire rank is empty, then we still place this number in the string
    if empty_count > 0:
        fen_characters.append(str(empty_count))
    return "".join(fen_characters)


@dataclass(frozen=True)
class FENState:
    """
    Data that can be constructed from a FEN string.
    ----

    FEN, or Forsyth-Edwards Notation, is a standard notation for describing a particular board position of a chess game.

    <board position string><active color><castling rights><en passant square><# half move clock><number turns played>

    * The active color is either "w" or "b"
    * Castling rights are denoted as "k" for king-side or "q" for queen-side. Capital letters for the white pieces, small letters for the black pieces.
    * The en passant square indicates the square a pawn can take on. If not available a "-" is used.
    * The half move clock counts the half moves made since the last pawn move or capture.
    * The number of turns starts at 1 and increments after every move black makes.
    """

    placement: Placement
    color_to_move: Color
    castling_rights: frozenset[CastlingDirection]
    en_passant_square: Optional[Square]
    half_move_clock: int
    num_turns: int

    @classmethod
    def from_fen(cls, fen: str) -> Self:
        """Parse the FEN into data"""

        # raise an exception if invalid FEN:
        if not is_valid_fen(fen):
            raise InvalidFENError(f"Cannot interpret supplied string as FEN: {fen}")

        (
            position,
            active_color,
            castling_str,
            en_passant_algebraic,
            half_move_clock,
            num_turns,
        ) = fen.split(" ")

        en_passant_square = (
            Square.from_algebraic(en_passant_algebraic)
            if en_passant_algebraic != "-"
            else None
        )
        return cls(
            placement=placement_from_fen(position),
            color_to_move=Color.WHITE if active_color == "w" else Color.BLACK,
            castling_rights=castling_from_fen(castling_str),
            en_passant_square=en_passant_square,
            half_move_clock=int(half_move_clock),
            num_turns=int(num_turns),
        )

    def to_fen(self) -> str:
        """reverse operation: write a FEN from the given data"""
        active_color = "w" if self.color_to_move == Color.WHITE else "b"
        en_passant_algebraic = (
            self.en_passant_square.to_algebraic()
            if self.en_passant_square is not None
            else "-"
        )
        return (
            f"{placement_to_fen(self.placement)} {active_color} {castling_to_fen(self.castling_rights)} "
            f"{en_passant_algebraic} {self.half_move_clock} {self.num_turns}"
        )
