"""
The Board is an immutable value describing a position: piece placement, side to move, castling rights,
en passant target and the two move counters.

Making a move never changes a Board, it returns the successor Board.
"""

from dataclasses import dataclass, replace
from functools import cached_property
from typing import Optional, Self

from thunderdome.chess.castling import (
    ALL_CASTLING_RIGHTS,
    CASTLING_RULES,
    CastlingDirection,
    rights_lost_by_square,
)
from thunderdome.chess.fen import STARTING_FEN, FENState, Placement
from thunderdome.chess.moves import Move, castling_direction, is_en_passant
from thunderdome.chess.pieces import Color, Piece, PieceType
from thunderdome.chess.square import SQUARES, Square
from thunderdome.chess.zobrist import fingerprint
from thunderdome.core.exceptions import BoardInvariantError

EMPTY_PLACEMENT: Placement = (None,) * len(SQUARES)


@dataclass(frozen=True)
class Board:
    placement: Placement
    color_to_move: Color = Color.WHITE
    castling_rights: frozenset[CastlingDirection] = ALL_CASTLING_RIGHTS
    en_passant_square: Optional[Square] = None
    half_move_clock: int = 0
    full_move_number: int = 1

    @classmethod
    def from_fen(cls, fen: str) -> Self:
        """Construct a board using a full FEN string (all six fields)."""
        state = FENState.from_fen(fen)
        return cls(
            placement=state.placement,
            color_to_move=state.color_to_move,
            castling_rights=state.castling_rights,
            en_passant_square=state.en_passant_square,
            half_move_clock=state.half_move_clock,
            full_move_number=state.num_turns,
        )

    @classmethod
    def starting_position(cls) -> Self:
        return cls.from_fen(STARTING_FEN)

    @classmethod
    def empty(cls) -> Self:
        """No pieces, no castling rights. Mostly useful to build test positions with `place_piece()`"""
        return cls(placement=EMPTY_PLACEMENT, castling_rights=frozenset())

    def to_fen(self) -> str:
        return FENState(
            placement=self.placement,
            color_to_move=self.color_to_move,
            castling_rights=self.castling_rights,
            en_passant_square=self.en_passant_square,
            half_move_clock=self.half_move_clock,
            num_turns=self.full_move_number,
        ).to_fen()

    @cached_property
    def fingerprint(self) -> int:
        """Deterministic hash of placement, side to move, castling rights and en passant target."""
        return fingerprint(
            self.placement,
            self.color_to_move,
            self.castling_rights,
            self.en_passant_square,
        )

    # --- QUERIES ---
    def piece(self, square: Square) -> Optional[Piece]:
        return self.placement[square.index]

    def locate_pieces(self, piece_type: PieceType, color: Optional[Color] = None) -> list[Square]:
        return [
            SQUARES[idx]
            for idx, piece in enumerate(self.placement)
            if piece is not None
            and piece.type == piece_type
            and (color is None or piece.color == color)
        ]

    def locate_color(self, color: Color) -> list[Square]:
        return [
            SQUARES[idx]
            for idx, piece in enumerate(self.placement)
            if piece is not None and piece.color == color
        ]

    def pieces(self) -> list[tuple[Square, Piece]]:
        """All occupied squares with their piece, in square order."""
        return [
            (SQUARES[idx], piece)
            for idx, piece in enumerate(self.placement)
            if piece is not None
        ]

    def king_square(self, color: Color) -> Square:
        king_square = self._king_squares.get(color)
        if king_square is None:
            raise BoardInvariantError(f"No {color.name.lower()} king on the board: {self.to_fen()}")
        return king_square

    @cached_property
    def _king_squares(self) -> dict[Color, Square]:
        return {
            piece.color: square
            for square, piece in self.pieces()
            if piece.type == PieceType.KING
        }

    def validate(self) -> None:
        """Exactly one king of each color must be present during legal play."""
        for color in Color:
            kings = self.locate_pieces(PieceType.KING, color)
            if len(kings) != 1:
                raise BoardInvariantError(
                    f"Expected exactly one {color.name.lower()} king, found {len(kings)}: {self.to_fen()}"
                )

    def count_material(self) -> dict[Color, int]:
        """Tally the points of material each player has on the board"""
        totals = {color: 0 for color in Color}
        for _, piece in self.pieces():
            totals[piece.color] += piece.points
        return totals

    # --- BUILDING POSITIONS ---
    def place_piece(self, piece: Piece, square: Square) -> Self:
        placement = list(self.placement)
        placement[square.index] = piece
        return replace(self, placement=tuple(placement))

    def remove_piece(self, square: Square) -> Self:
        placement = list(self.placement)
        placement[square.index] = None
        return replace(self, placement=tuple(placement))

    def with_color_to_move(self, color: Color) -> Self:
        """Same placement, other side to move. The en passant target only makes sense for the original side, so it is dropped."""
        return replace(self, color_to_move=color, en_passant_square=None)

    # --- MAKING MOVES ---
    def make_move(self, move: Move) -> Self:
        """
        The successor Board after `move` (which must at least be a candidate move of the side to move).
        ----

        1. move the piece (substituting the promotion piece if any)
        2. castling: relocate the rook as well
        3. en passant: remove the pawn that got taken (it stands next to the moving pawn)
        4. revoke castling rights when the king or a rook leaves home, or a rook gets captured at home
        5. set the en passant target only after a double pawn push
        6. half move clock: reset on pawn moves and captures, otherwise increment
        7. full move number increments after black moved
        """
        moving_piece = self.piece(move.from_square)
        if moving_piece is None:
            raise BoardInvariantError(f"No piece to move on {move.from_square}: {self.to_fen()}")

        placement = list(self.placement)
        captured_piece = placement[move.to_square.index]

        direction = castling_direction(self, move)
        if direction is not None:
            rule = CASTLING_RULES[direction]
            placement[rule.rook_to.index] = placement[rule.rook_from.index]
            placement[rule.rook_from.index] = None
        elif is_en_passant(self, move):
            # the pawn taken stands on the file of the en passant square, on the rank the moving pawn started from
            taken_square = Square(move.to_square.file, move.from_square.rank)
            captured_piece = placement[taken_square.index]
            placement[taken_square.index] = None

        placement[move.from_square.index] = None
        placement[move.to_square.index] = (
            moving_piece.promote_to(move.promote_to)
            if move.promote_to is not None
            else moving_piece
        )

        castling_rights = (
            self.castling_rights
            - rights_lost_by_square(move.from_square)
            - rights_lost_by_square(move.to_square)
        )

        is_pawn_move = moving_piece.type == PieceType.PAWN
        en_passant_square = None
        if is_pawn_move and abs(move.to_square.rank - move.from_square.rank) == 2:
            en_passant_square = Square(
                move.from_square.file, move.from_square.rank + moving_piece.color.forward
            )

        half_move_clock = (
            0 if is_pawn_move or captured_piece is not None else self.half_move_clock + 1
        )
        full_move_number = self.full_move_number + (
            1 if self.color_to_move == Color.BLACK else 0
        )

        return type(self)(
            placement=tuple(placement),
            color_to_move=self.color_to_move.opponent,
            castling_rights=castling_rights,
            en_passant_square=en_passant_square,
            half_move_clock=half_move_clock,
            full_move_number=full_move_number,
        )

    def __str__(self) -> str:
        """Plain text diagram, white at the bottom."""
        rows: list[str] = []
        for rank in range(7, -1, -1):
            cells = [
                piece.to_fen() if (piece := self.piece(Square(file, rank))) else "."
                for file in range(8)
            ]
            rows.append(f"{rank + 1} {' '.join(cells)}")
        rows.append("  a b c d e f g h")
        return "\n".join(rows)
