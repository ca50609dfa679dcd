"""
Move text for humans.

* `parse_move_text()` accepts what people type at a prompt: "e2e4", "e2 e4", "e2 to e4", "e7 to e8 queen", "O-O", "0-0-0".
* `to_san()` renders Standard Algebraic Notation for move lists ("Nf3", "exd5", "O-O", "e8=Q+").

The machine format stays UCI (`Move.to_uci()` / `Move.from_uci()`).
"""

from thunderdome.chess.board import Board
from thunderdome.chess.castling import CASTLING_RULES, castling_options
from thunderdome.chess.moves import (
    Move,
    castling_direction,
    generate_legal_moves,
    is_capture,
    is_in_check,
)
from thunderdome.chess.pieces import PIECE_TO_FEN, PieceType
from thunderdome.core.exceptions import InvalidNotationError

KING_SIDE_TEXT = {"o-o", "0-0", "castle kingside", "kingside castle"}
QUEEN_SIDE_TEXT = {"o-o-o", "0-0-0", "castle queenside", "queenside castle"}

PROMOTION_WORDS: dict[str, PieceType] = {
    "q": PieceType.QUEEN,
    "queen": PieceType.QUEEN,
    "r": PieceType.ROOK,
    "rook": PieceType.ROOK,
    "b": PieceType.BISHOP,
    "bishop": PieceType.BISHOP,
    "n": PieceType.KNIGHT,
    "knight": PieceType.KNIGHT,
}


def parse_move_text(text: str, board: Board) -> Move:
    """
    Parse a move typed by a person. Only the syntax is checked here, not legality.
    Castling needs the board to know whose king is castling.
    """
    cleaned = " ".join(text.strip().lower().split())
    if cleaned in KING_SIDE_TEXT or cleaned in QUEEN_SIDE_TEXT:
        king_side, queen_side = castling_options(board.color_to_move)
        rule = CASTLING_RULES[king_side if cleaned in KING_SIDE_TEXT else queen_side]
        return Move(rule.king_from, rule.king_to)

    words = [word for word in cleaned.split(" ") if word != "to"]
    if len(words) == 1:
        return Move.from_uci(words[0])
    if len(words) == 2:
        return Move.from_uci(words[0] + words[1])
    if len(words) == 3:
        promotion = PROMOTION_WORDS.get(words[2])
        if promotion is None:
            raise InvalidNotationError(f"Cannot promote into {words[2]!r}")
        return Move.from_uci(words[0] + words[1] + PIECE_TO_FEN[promotion])
    raise InvalidNotationError(f"Invalid move format: {text!r}")


def to_san(board: Board, move: Move) -> str:
    """Convert a legal `move` to SAN given the `board` before the move."""
    piece = board.piece(move.from_square)
    if piece is None:
        raise InvalidNotationError(f"No piece on {move.from_square}")

    direction = castling_direction(board, move)
    if direction is not None:
        san = "O-O" if move.to_square.file > move.from_square.file else "O-O-O"
    else:
        capture = is_capture(board, move)
        san = ""
        if piece.type == PieceType.PAWN:
            if capture:
                san += move.from_square.to_algebraic()[0]
        else:
            san += PIECE_TO_FEN[piece.type].upper()
            san += _disambiguation(board, move, piece.type)

        if capture:
            san += "x"
        san += move.to_square.to_algebraic()
        if move.promote_to is not None:
            san += "=" + PIECE_TO_FEN[move.promote_to].upper()

    # Check / checkmate suffix
    after = board.make_move(move)
    if is_in_check(after):
        san += "#" if not generate_legal_moves(after) else "+"
    return san


def _disambiguation(board: Board, move: Move, piece_type: PieceType) -> str:
    """File, rank or full square of the origin when another piece of the same type can reach the same square."""
    ambiguous = [
        other
        for other in generate_legal_moves(board)
        if other.to_square == move.to_square
        and other.from_square != move.from_square
        and (other_piece := board.piece(other.from_square)) is not None
        and other_piece.type == piece_type
    ]
    if not ambiguous:
        return ""
    origin = move.from_square.to_algebraic()
    if all(other.from_square.file != move.from_square.file for other in ambiguous):
        return origin[0]
    if all(other.from_square.rank != move.from_square.rank for other in ambiguous):
        return origin[1]
    return origin


def moves_to_san(initial: Board, moves: list[Move]) -> list[str]:
    """Render a whole move list, starting from `initial`."""
    board = initial
    rendered: list[str] = []
    for move in moves:
        rendered.append(to_san(board, move))
        board = board.make_move(move)
    return rendered
