"""
Static evaluation of a Board.

Every term is computed as (White minus Black) and only then signed for the side to move,
so `evaluate()` is antisymmetric: the same placement scores `x` with White to move and `-x` with Black to move.

Scores are centipawns. Which terms count, and how strongly, is set by EngineWeights.
An engine is identified in the tournament by its weights written as six digits, ex. "111000".
"""

from dataclasses import astuple, dataclass, fields
from typing import Callable, Optional, Self

from thunderdome.chess.board import Board
from thunderdome.chess.moves import generate_legal_moves, is_square_attacked
from thunderdome.chess.pieces import PIECE_POINTS, Color, PieceType
from thunderdome.chess.square import SQUARES
from thunderdome.core.exceptions import InvalidRequestError

# material in centipawns: the classic 1/3/3/5/9 points. The king is excluded: it is never traded.
PIECE_VALUES: dict[PieceType, int] = {
    piece_type: points * 100 for piece_type, points in PIECE_POINTS.items()
}
STARTING_MATERIAL = 2 * (
    8 * PIECE_VALUES[PieceType.PAWN]
    + 2 * PIECE_VALUES[PieceType.KNIGHT]
    + 2 * PIECE_VALUES[PieceType.BISHOP]
    + 2 * PIECE_VALUES[PieceType.ROOK]
    + PIECE_VALUES[PieceType.QUEEN]
)

MOBILITY_CP = 5  # per legal move
CONTROL_CP = 2  # per attacked square
KING_PROXIMITY_CP = 2  # per step closer to the enemy king

# Piece-square tables (simplified evaluation function), written from White's point of view:
# the first row is the 8th rank, so a White piece on (file, rank) reads index (7 - rank) * 8 + file.
# A Black piece reads the mirrored square, index rank * 8 + file.
# fmt: off
PAWN_TABLE = (
     0,   0,   0,   0,   0,   0,   0,   0,
    50,  50,  50,  50,  50,  50,  50,  50,
    10,  10,  20,  30,  30,  20,  10,  10,
     5,   5,  10,  25,  25,  10,   5,   5,
     0,   0,   0,  20,  20,   0,   0,   0,
     5,  -5, -10,   0,   0, -10,  -5,   5,
     5,  10,  10, -20, -20,  10,  10,   5,
     0,   0,   0,   0,   0,   0,   0,   0,
)
KNIGHT_TABLE = (
   -50, -40, -30, -30, -30, -30, -40, -50,
   -40, -20,   0,   0,   0,   0, -20, -40,
   -30,   0,  10,  15,  15,  10,   0, -30,
   -30,   5,  15,  20,  20,  15,   5, -30,
   -30,   0,  15,  20,  20,  15,   0, -30,
   -30,   5,  10,  15,  15,  10,   5, -30,
   -40, -20,   0,   5,   5,   0, -20, -40,
   -50, -40, -30, -30, -30, -30, -40, -50,
)
BISHOP_TABLE = (
   -20, -10, -10, -10, -10, -10, -10, -20,
   -10,   0,   0,   0,   0,   0,   0, -10,
   -10,   0,   5,  10,  10,   5,   0, -10,
   -10,   5,   5,  10,  10,   5,   5, -10,
   -10,   0,  10,  10,  10,  10,   0, -10,
   -10,  10,  10,  10,  10,  10,  10, -10,
   -10,   5,   0,   0,   0,   0,   5, -10,
   -20, -10, -10, -10, -10, -10, -10, -20,
)
ROOK_TABLE = (
     0,   0,   0,   0,   0,   0,   0,   0,
     5,  10,  10,  10,  10,  10,  10,   5,
    -5,   0,   0,   0,   0,   0,   0,  -5,
    -5,   0,   0,   0,   0,   0,   0,  -5,
    -5,   0,   0,   0,   0,   0,   0,  -5,
    -5,   0,   0,   0,   0,   0,   0,  -5,
    -5,   0,   0,   0,   0,   0,   0,  -5,
     0,   0,   0,   5,   5,   0,   0,   0,
)
QUEEN_TABLE = (
   -20, -10, -10,  -5,  -5, -10, -10, -20,
   -10,   0,   0,   0,   0,   0,   0, -10,
   -10,   0,   5,   5,   5,   5,   0, -10,
    -5,   0,   5,   5,   5,   5,   0,  -5,
     0,   0,   5,   5,   5,   5,   0,  -5,
   -10,   5,   5,   5,   5,   5,   0, -10,
   -10,   0,   5,   0,   0,   0,   0, -10,
   -20, -10, -10,  -5,  -5, -10, -10, -20,
)
KING_TABLE = (
   -30, -40, -40, -50, -50, -40, -40, -30,
   -30, -40, -40, -50, -50, -40, -40, -30,
   -30, -40, -40, -50, -50, -40, -40, -30,
   -30, -40, -40, -50, -50, -40, -40, -30,
   -20, -30, -30, -40, -40, -30, -30, -20,
   -10, -20, -20, -20, -20, -20, -20, -10,
    20,  20,   0,   0,   0,   0,  20,  20,
    20,  30,  10,   0,   0,  10,  30,  20,
)
# fmt: on

PIECE_SQUARE_TABLES: dict[PieceType, tuple[int, ...]] = {
    PieceType.PAWN: PAWN_TABLE,
    PieceType.KNIGHT: KNIGHT_TABLE,
    PieceType.BISHOP: BISHOP_TABLE,
    PieceType.ROOK: ROOK_TABLE,
    PieceType.QUEEN: QUEEN_TABLE,
    PieceType.KING: KING_TABLE,
}


@dataclass(frozen=True)
class EngineWeights:
    """Multiplier (0-9) per evaluation term."""

    material: int = 1
    positional: int = 1
    mobility: int = 1
    control: int = 0
    king_proximity: int = 0
    trade: int = 0

    def __post_init__(self) -> None:
        for weight in astuple(self):
            if not 0 <= weight <= 9:
                raise InvalidRequestError(f"Weights must be single digits, got {weight}")

    @classmethod
    def from_engine_id(cls, engine_id: str) -> Self:
        """ex. "111000": material, positional and mobility switched on"""
        if len(engine_id) != len(fields(cls)) or not engine_id.isdigit():
            raise InvalidRequestError(
                f"Engine id must be {len(fields(cls))} digits, got {engine_id!r}"
            )
        return cls(*(int(digit) for digit in engine_id))

    def to_engine_id(self) -> str:
        return "".join(str(weight) for weight in astuple(self))


DEFAULT_WEIGHTS = EngineWeights()


# --- EVALUATION TERMS (White minus Black) ---
def material_term(board: Board, side_to_move_moves: Optional[int] = None) -> int:
    score = 0
    for _, piece in board.pieces():
        value = PIECE_VALUES.get(piece.type, 0)
        score += value if piece.color == Color.WHITE else -value
    return score


def positional_term(board: Board, side_to_move_moves: Optional[int] = None) -> int:
    score = 0
    for square, piece in board.pieces():
        table = PIECE_SQUARE_TABLES[piece.type]
        if piece.color == Color.WHITE:
            score += table[(7 - square.rank) * 8 + square.file]
        else:
            score -= table[square.rank * 8 + square.file]
    return score


def mobility_term(board: Board, side_to_move_moves: Optional[int] = None) -> int:
    """
    Legal move count differential. Both counts are taken on the same placement with that color to move
    and without en passant target, so the term does not depend on whose turn it is.
    """
    white_moves = _legal_move_count(board, Color.WHITE, side_to_move_moves)
    black_moves = _legal_move_count(board, Color.BLACK, side_to_move_moves)
    return MOBILITY_CP * (white_moves - black_moves)


def control_term(board: Board, side_to_move_moves: Optional[int] = None) -> int:
    """Squares attacked by White minus squares attacked by Black."""
    white = sum(1 for square in SQUARES if is_square_attacked(square, Color.WHITE, board))
    black = sum(1 for square in SQUARES if is_square_attacked(square, Color.BLACK, board))
    return CONTROL_CP * (white - black)


def king_proximity_term(board: Board, side_to_move_moves: Optional[int] = None) -> int:
    """Reward pieces standing close to the enemy king (distance in king steps)."""
    score = 0
    for color in Color:
        enemy_king = board.king_square(color.opponent)
        pressure = sum(
            7 - max(abs(square.file - enemy_king.file), abs(square.rank - enemy_king.rank))
            for square, piece in board.pieces()
            if piece.color == color and piece.type != PieceType.KING
        )
        score += pressure if color == Color.WHITE else -pressure
    return KING_PROXIMITY_CP * score


def trade_term(board: Board, side_to_move_moves: Optional[int] = None) -> int:
    """The side ahead in material gains from trading down: the lead counts more as material leaves the board."""
    material = material_term(board)
    on_board = sum(PIECE_VALUES.get(piece.type, 0) for _, piece in board.pieces())
    traded = max(STARTING_MATERIAL - on_board, 0)
    return material * traded // STARTING_MATERIAL


TermFn = Callable[[Board, Optional[int]], int]
EVALUATION_TERMS: dict[str, TermFn] = {
    "material": material_term,
    "positional": positional_term,
    "mobility": mobility_term,
    "control": control_term,
    "king_proximity": king_proximity_term,
    "trade": trade_term,
}


def evaluate(
    board: Board,
    weights: EngineWeights = DEFAULT_WEIGHTS,
    side_to_move_moves: Optional[int] = None,
) -> int:
    """
    Score of the position from the perspective of the side to move (positive: side to move is better).

    `side_to_move_moves` is the number of legal moves of the side to move, if the caller already knows it.
    """
    white_score = 0
    for name, term in EVALUATION_TERMS.items():
        weight = getattr(weights, name)
        if weight:
            white_score += weight * term(board, side_to_move_moves)
    return white_score if board.color_to_move == Color.WHITE else -white_score


def _legal_move_count(board: Board, color: Color, known: Optional[int]) -> int:
    if known is not None and color == board.color_to_move and board.en_passant_square is None:
        return known
    return len(generate_legal_moves(board.with_color_to_move(color)))
