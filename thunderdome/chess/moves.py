"""
Geometry/Base movement and capturing/attacking rules, and the legal move generator built on top of them.

Key idea: Use strategy pattern to define candidate move sets for each piece type.
A candidate (pseudo-legal) move obeys the movement pattern of the piece; it is legal if the mover's king is not attacked afterwards.

Generation order is deterministic and the search relies on it for its tie-break:
* pieces of the side to move in square order a1, b1, ..., h8
* per piece the direction order of the tables below
* pawn promotions in the order Queen, Rook, Bishop, Knight
* castling king side before queen side
"""

from dataclasses import dataclass
from typing import Callable, Optional, Protocol, Self

from thunderdome.chess.castling import (
    CASTLING_RULES,
    CastlingDirection,
    castling_options,
)
from thunderdome.chess.pieces import FEN_TO_PIECE, PIECE_TO_FEN, Color, Piece, PieceType
from thunderdome.chess.square import BOARD_DIMENSIONS, Square
from thunderdome.core.exceptions import InvalidNotationError


class Board(Protocol):
    """Just the parts the movement strategies need"""

    @property
    def color_to_move(self) -> Color: ...
    @property
    def castling_rights(self) -> frozenset[CastlingDirection]: ...
    @property
    def en_passant_square(self) -> Optional[Square]: ...

    def piece(self, square: Square) -> Optional[Piece]: ...
    def locate_color(self, color: Color) -> list[Square]: ...
    def king_square(self, color: Color) -> Square: ...
    def make_move(self, move: "Move") -> Self: ...


Vector = tuple[int, int]

PROMOTION_CHARS = "qrbn"


@dataclass(frozen=True, slots=True)
class Move:
    """
    basic definition of a move to be made

    NOTE: castling and en passant are not stored. They follow from the board the move is played on (see `is_castling()`, `is_en_passant()`).
    """

    from_square: Square
    to_square: Square
    promote_to: Optional[PieceType] = None

    @classmethod
    def from_uci(cls, uci: str) -> Self:
        """
        Universal Chess Interface:
        ---
        One of the standard chess notations for moves

        examples:
        * "e2e4": move the piece that was on e2 to e4
        * "e7e8q" : (pawn) moves from e7 to e8 and promotes to a queen (the q)
        * "e1g1": the king castles king side
        """
        text = uci.strip().lower()
        if len(text) not in (4, 5):
            raise InvalidNotationError(f"Expected 4 or 5 characters, got: {uci!r}")
        try:
            from_sq = Square.from_algebraic(text[:2])
            to_sq = Square.from_algebraic(text[2:4])
        except ValueError as exc:
            raise InvalidNotationError(f"Cannot parse move {uci!r}: {exc}") from exc

        promote_to: Optional[PieceType] = None
        if len(text) == 5:
            if text[4] not in PROMOTION_CHARS:
                raise InvalidNotationError(f"Cannot promote into {text[4]!r}: {uci!r}")
            promote_to = FEN_TO_PIECE[text[4]]
        if from_sq == to_sq:
            raise InvalidNotationError(f"A move must change squares: {uci!r}")
        return cls(from_sq, to_sq, promote_to)

    def to_uci(self) -> str:
        """Convert into UCI notation"""
        piece_char = PIECE_TO_FEN[self.promote_to] if self.promote_to else ""
        return f"{self.from_square.to_algebraic()}{self.to_square.to_algebraic()}{piece_char}"

    def __str__(self) -> str:
        return self.to_uci()


# --- DERIVED MOVE FLAGS ---
def is_castling(board: Board, move: Move) -> bool:
    """A king moving two files sideways is castling."""
    piece = board.piece(move.from_square)
    return (
        piece is not None
        and piece.type == PieceType.KING
        and abs(move.to_square.file - move.from_square.file) == 2
    )


def castling_direction(board: Board, move: Move) -> Optional[CastlingDirection]:
    if not is_castling(board, move):
        return None
    return next(
        direction
        for direction, rule in CASTLING_RULES.items()
        if rule.king_from == move.from_square and rule.king_to == move.to_square
    )


def is_en_passant(board: Board, move: Move) -> bool:
    """A pawn moving diagonally onto the (empty) en passant square."""
    piece = board.piece(move.from_square)
    return (
        piece is not None
        and piece.type == PieceType.PAWN
        and move.to_square == board.en_passant_square
        and move.from_square.file != move.to_square.file
    )


def is_capture(board: Board, move: Move) -> bool:
    return board.piece(move.to_square) is not None or is_en_passant(board, move)


# --- MOVEMENT RULES ---
def raycasting_move(
    square: Square, board: Board, directions: list[Vector]
) -> list[Move]:
    """
    Raycasting algorithm
    -----
    The main trick we use to check the 'line of sight of a piece'.
    We move along the directions until we hit another piece or the edge of the board.
    """
    player_color = _color_on(square, board)
    moves: list[Move] = []
    for df, dr in directions:
        target_square = square.offset(df, dr)
        while target_square is not None:
            piece_found = board.piece(target_square)
            if piece_found is not None:
                # only the first occupied square counts, and only if it is the opponent's: then it can be captured.
                if piece_found.color != player_color:
                    moves.append(Move(square, target_square))
                break
            moves.append(Move(square, target_square))
            target_square = target_square.offset(df, dr)
    return moves


def single_step_move(square: Square, board: Board, deltas: list[Vector]) -> list[Move]:
    """Raycasting is for sliding pieces. This is the equivalent for kings and knights that just can move a single step along a direction"""
    player_color = _color_on(square, board)
    moves: list[Move] = []
    for df, dr in deltas:
        target_square = square.offset(df, dr)
        if target_square is None:
            continue
        piece_found = board.piece(target_square)
        if piece_found is None or piece_found.color != player_color:
            moves.append(Move(square, target_square))
    return moves


def candidate_pawn_moves(square: Square, board: Board) -> list[Move]:
    """
    A pawn:
    - moves by a single square forward.
    - It can move by two in their first move (so when on their starting rank)
    - takes diagonally, including en passant on the board's en passant square
    - promotes when reaching the final rank
    """
    color = _color_on(square, board)
    forward = color.forward
    start_rank = 1 if color == Color.WHITE else BOARD_DIMENSIONS[1] - 2
    moves: list[Move] = []

    one_step = square.offset(0, forward)
    if one_step is not None and board.piece(one_step) is None:
        moves.append(Move(square, one_step))
        two_steps = one_step.offset(0, forward)
        if (
            square.rank == start_rank
            and two_steps is not None
            and board.piece(two_steps) is None
        ):
            moves.append(Move(square, two_steps))

    for df in (-1, 1):
        target_square = square.offset(df, forward)
        if target_square is None:
            continue
        piece_found = board.piece(target_square)
        is_opponent_piece = piece_found is not None and piece_found.color != color
        if is_opponent_piece or target_square == board.en_passant_square:
            moves.append(Move(square, target_square))

    expanded: list[Move] = []
    for move in moves:
        if is_promotion_square(move.to_square):
            expanded.extend(pawn_pushes_w_promotion(move))
        else:
            expanded.append(move)
    return expanded


KNIGHT_DELTAS: list[Vector] = [
    (1, 2),
    (2, 1),
    (2, -1),
    (1, -2),
    (-1, -2),
    (-2, -1),
    (-2, 1),
    (-1, 2),
]
DIAGONALS: list[Vector] = [(1, 1), (1, -1), (-1, -1), (-1, 1)]
STRAIGHTS: list[Vector] = [(0, 1), (1, 0), (0, -1), (-1, 0)]
KING_DELTAS: list[Vector] = STRAIGHTS + DIAGONALS


def candidate_knight_moves(square: Square, board: Board) -> list[Move]:
    """Knights always move such that |delta_rank| + |delta_file| = 3"""
    return single_step_move(square, board, KNIGHT_DELTAS)


def candidate_bishop_moves(square: Square, board: Board) -> list[Move]:
    """Bishops move diagonally: |delta_rank| = |delta_file|"""
    return raycasting_move(square, board, DIAGONALS)


def candidate_rook_moves(square: Square, board: Board) -> list[Move]:
    """Rooks move either horizontally or vertically"""
    return raycasting_move(square, board, STRAIGHTS)


def candidate_queen_moves(square: Square, board: Board) -> list[Move]:
    """
    The Queen combines the rook moves (horizontal + vertical movements) and bishop moves (diagonal movement)
    """
    return raycasting_move(square, board, STRAIGHTS + DIAGONALS)


def candidate_king_moves(square: Square, board: Board) -> list[Move]:
    """
    The king can move by a single square at the time.
    Castling is modelled as a king move of two squares.
    """
    return single_step_move(square, board, KING_DELTAS) + candidate_castling_moves(
        square, board
    )


# -- STRATEGY PATTERN: MOVEMENT RULES ---
CandidateMovesFn = Callable[[Square, Board], list[Move]]
MOVEMENT_RULES: dict[PieceType, CandidateMovesFn] = {
    PieceType.PAWN: candidate_pawn_moves,
    PieceType.KNIGHT: candidate_knight_moves,
    PieceType.BISHOP: candidate_bishop_moves,
    PieceType.ROOK: candidate_rook_moves,
    PieceType.QUEEN: candidate_queen_moves,
    PieceType.KING: candidate_king_moves,
}


# --- CAPTURING RULES / ATTACKING RULES ---
def raycasting_attack(
    square: Square,
    by_color: Color,
    by_piece_types: tuple[PieceType, ...],
    board: Board,
    directions: list[Vector],
) -> bool:
    """
    Raycasting algorithm for attacks.
    ---
    Where `raycasting_move()` determines
    _"What is the line-of-sight of the piece standing on the specified square?"_

    This function determines:
    _"Is the specified square in the line-of-sight of a piece of the specified color that is allowed to move along the given direction?"_
    """
    for df, dr in directions:
        target_square = square.offset(df, dr)
        while target_square is not None:
            piece_found = board.piece(target_square)
            if piece_found is not None:
                if piece_found.color == by_color and piece_found.type in by_piece_types:
                    return True
                break
            target_square = target_square.offset(df, dr)
    return False


def single_step_attack(
    square: Square,
    by_color: Color,
    by_piece_type: PieceType,
    board: Board,
    deltas: list[Vector],
) -> bool:
    """The equivalent of raycasting for pawns, kings, and knights."""
    for df, dr in deltas:
        target_square = square.offset(df, dr)
        if target_square is None:
            continue
        piece_found = board.piece(target_square)
        if (
            piece_found is not None
            and piece_found.color == by_color
            and piece_found.type == by_piece_type
        ):
            return True
    return False


def is_attacked_by_pawn(square: Square, by_color: Color, board: Board) -> bool:
    """
    Pawns take diagonally
    ----
    NOTE: Pawn moves are not symmetric. To check IF a white pawn could take on your square --> look one rank DOWN the board.
    """
    backward = -by_color.forward
    return single_step_attack(
        square, by_color, PieceType.PAWN, board, [(-1, backward), (1, backward)]
    )


def is_attacked_by_knight(square: Square, by_color: Color, board: Board) -> bool:
    return single_step_attack(square, by_color, PieceType.KNIGHT, board, KNIGHT_DELTAS)


def is_attacked_on_diagonal(square: Square, by_color: Color, board: Board) -> bool:
    """Bishops and the queen"""
    return raycasting_attack(
        square, by_color, (PieceType.BISHOP, PieceType.QUEEN), board, DIAGONALS
    )


def is_attacked_on_straight(square: Square, by_color: Color, board: Board) -> bool:
    """Rooks and the queen"""
    return raycasting_attack(
        square, by_color, (PieceType.ROOK, PieceType.QUEEN), board, STRAIGHTS
    )


def is_attacked_by_king(square: Square, by_color: Color, board: Board) -> bool:
    return single_step_attack(square, by_color, PieceType.KING, board, KING_DELTAS)


# --- STRATEGY PATTERN: ATTACKING RULES ---
IsAttackedFn = Callable[[Square, Color, Board], bool]
ATTACK_RULES: tuple[IsAttackedFn, ...] = (
    is_attacked_by_pawn,
    is_attacked_by_knight,
    is_attacked_on_diagonal,
    is_attacked_on_straight,
    is_attacked_by_king,
)


def is_square_attacked(square: Square, by_color: Color, board: Board) -> bool:
    return any(rule(square, by_color, board) for rule in ATTACK_RULES)


def is_in_check(board: Board, color: Optional[Color] = None) -> bool:
    """Is the king of `color` (default: the side to move) attacked?"""
    color = color or board.color_to_move
    return is_square_attacked(board.king_square(color), color.opponent, board)


# -- CASTLING MOVES ---
def candidate_castling_moves(square: Square, board: Board) -> list[Move]:
    """
    **you are allowed to castle if**

    * Castling rights are not yet revoked (neither the king nor that rook moved).
    * The squares in between the king and the rook are empty.
    * You are not in check, and the king does not pass through or land on an attacked square.
    """
    color = _color_on(square, board)
    moves: list[Move] = []
    for direction in castling_options(color):
        rule = CASTLING_RULES[direction]
        if direction not in board.castling_rights or square != rule.king_from:
            continue
        if board.piece(rule.rook_from) != Piece(PieceType.ROOK, color):
            continue
        if any(board.piece(between) is not None for between in rule.path()):
            continue
        if any(
            is_square_attacked(walked, color.opponent, board)
            for walked in rule.king_walk()
        ):
            continue
        moves.append(Move(rule.king_from, rule.king_to))
    return moves


# -- PAWN PROMOTION MOVES --
PROMOTION_OPTIONS: list[PieceType] = [
    PieceType.QUEEN,
    PieceType.ROOK,
    PieceType.BISHOP,
    PieceType.KNIGHT,
]


def is_promotion_square(square: Square) -> bool:
    return square.rank in (0, BOARD_DIMENSIONS[1] - 1)


def pawn_pushes_w_promotion(pawn_push: Move) -> list[Move]:
    """Return multiple copies of the pawn push with the piece type to promote into filled in."""
    return [
        Move(pawn_push.from_square, pawn_push.to_square, promote_to=piece_type)
        for piece_type in PROMOTION_OPTIONS
    ]


# --- MOVE GENERATOR ---
def generate_candidate_moves(board: Board) -> list[Move]:
    """
    Before knowing the set of legal moves, we use the movement rules to find candidate moves,
    which will later be tested for legality (making sure it does not put yourself in check.)
    """
    candidate_moves: list[Move] = []
    for starting_square in board.locate_color(board.color_to_move):
        piece = board.piece(starting_square)
        assert piece is not None
        candidate_moves.extend(MOVEMENT_RULES[piece.type](starting_square, board))
    return candidate_moves


def generate_legal_moves(board: Board) -> list[Move]:
    """
    List of legal moves for the side to move, in generation order.
    ----
    A candidate move is legal iff it does not leave (or put) the own king in check.
    """
    color = board.color_to_move
    return [
        move
        for move in generate_candidate_moves(board)
        if not is_in_check(board.make_move(move), color)
    ]


def has_legal_move(board: Board) -> bool:
    color = board.color_to_move
    return any(
        not is_in_check(board.make_move(move), color)
        for move in generate_candidate_moves(board)
    )


def _color_on(square: Square, board: Board) -> Color:
    piece = board.piece(square)
    if piece is None:
        raise ValueError(f"No piece on {square}")
    return piece.color
