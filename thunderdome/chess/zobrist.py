"""
Position fingerprints (Zobrist hashing).

The keys are derived from a fixed seed, so fingerprints are identical across processes and runs.
"""

from typing import Final, Optional

from thunderdome.chess.castling import CASTLING_ORDER, CastlingDirection
from thunderdome.chess.pieces import Color, Piece, PieceType
from thunderdome.chess.square import SQUARES, Square

_SEED: Final = 0x7D4E3C2B1A0F9E8D
_MASK_64: Final = 0xFFFFFFFFFFFFFFFF

_COLOR_INDEX: Final = {Color.WHITE: 0, Color.BLACK: 1}
_TYPE_INDEX: Final = {piece_type: idx for idx, piece_type in enumerate(PieceType)}


def _splitmix64(state: int) -> int:
    """Deterministic 64-bit bit-mixer suitable for static key generation."""
    z = (state + 0x9E3779B97F4A7C15) & _MASK_64
    z = ((z ^ (z >> 30)) * 0xBF58476D1CE4E5B9) & _MASK_64
    z = ((z ^ (z >> 27)) * 0x94D049BB133111EB) & _MASK_64
    return z ^ (z >> 31)


def _nth_key(index: int) -> int:
    return _splitmix64(_SEED + index)


_PIECE_KEYS: Final = tuple(
    tuple(
        tuple(_nth_key((color * 384) + (ptype * 64) + sq) for sq in range(len(SQUARES)))
        for ptype in range(len(PieceType))
    )
    for color in range(2)
)
_SIDE_TO_MOVE_KEY: Final = _nth_key(2 * 6 * 64)
_CASTLING_KEYS: Final = {
    direction: _nth_key((2 * 6 * 64) + 1 + idx)
    for idx, direction in enumerate(CASTLING_ORDER)
}
_EN_PASSANT_KEYS: Final = tuple(
    _nth_key((2 * 6 * 64) + 1 + len(CASTLING_ORDER) + idx) for idx in range(len(SQUARES))
)


def fingerprint(
    placement: tuple[Optional[Piece], ...],
    color_to_move: Color,
    castling_rights: frozenset[CastlingDirection],
    en_passant_square: Optional[Square],
) -> int:
    """
    Hash of everything that decides which moves are legal: pieces, side to move, castling rights, en passant target.
    Move counters are not part of it: positions that only differ in the clocks count as repetitions.
    """
    key = 0
    for idx, piece in enumerate(placement):
        if piece is not None:
            key ^= _PIECE_KEYS[_COLOR_INDEX[piece.color]][_TYPE_INDEX[piece.type]][idx]
    if color_to_move == Color.BLACK:
        key ^= _SIDE_TO_MOVE_KEY
    for direction in castling_rights:
        key ^= _CASTLING_KEYS[direction]
    if en_passant_square is not None:
        key ^= _EN_PASSANT_KEYS[en_passant_square.index]
    return key
