"""
Negamax search with (fail-soft) alpha-beta pruning over GameStates.

Scores are always from the perspective of the side to move at the searched node.
Results are deterministic: moves are examined in a fixed order and the first move reaching the best score wins.
"""

import logging
from dataclasses import dataclass, replace
from typing import Optional

from thunderdome.chess.board import Board
from thunderdome.chess.game import GameState, Status
from thunderdome.chess.moves import Move, is_en_passant, is_in_check
from thunderdome.chess.pieces import PieceType
from thunderdome.engine.cache import Bound, CacheEntry, TranspositionCache
from thunderdome.engine.evaluate import DEFAULT_WEIGHTS, PIECE_VALUES, EngineWeights, evaluate

logger = logging.getLogger(__name__)

INF_SCORE = 1_000_000
MATE_SCORE = 100_000

KING_ORDER_VALUE = 10_000  # a king capturing comes last among captures


@dataclass(frozen=True)
class SearchResult:
    best_move: Optional[Move]
    score: int
    depth: int
    nodes: int = 0


def terminal_score(state: GameState, depth: int) -> int:
    """Checkmated side to move scores -(MATE_SCORE + remaining depth), so quicker mates are preferred; draws score 0."""
    if state.status.status == Status.CHECKMATE:
        return -(MATE_SCORE + depth)
    return 0


def is_mate_score(score: int) -> bool:
    return abs(score) >= MATE_SCORE


# --- MOVE ORDERING ---
def order_moves(board: Board, moves: list[Move]) -> list[Move]:
    """
    Captures first (most valuable victim, then least valuable attacker), then checks, then the rest.
    The sort is stable: moves with equal keys keep their generation order.
    """
    return sorted(moves, key=lambda move: _order_key(board, move))


def _order_key(board: Board, move: Move) -> tuple[int, int, int]:
    attacker = board.piece(move.from_square)
    assert attacker is not None
    victim = board.piece(move.to_square)
    if victim is not None or is_en_passant(board, move):
        victim_value = PIECE_VALUES[victim.type] if victim is not None else PIECE_VALUES[PieceType.PAWN]
        attacker_value = PIECE_VALUES.get(attacker.type, KING_ORDER_VALUE)
        return (0, -victim_value, attacker_value)
    if is_in_check(board.make_move(move)):
        return (1, 0, 0)
    return (2, 0, 0)


class Searcher:
    """
    One search worker: the shared cache, the evaluation weights, and a private node counter.
    Several Searchers may share one TranspositionCache across threads.
    """

    def __init__(
        self,
        cache: Optional[TranspositionCache] = None,
        weights: EngineWeights = DEFAULT_WEIGHTS,
    ):
        self.cache = cache if cache is not None else TranspositionCache()
        self.weights = weights
        self.nodes = 0

    def search(
        self,
        state: GameState,
        depth: int,
        alpha: int = -INF_SCORE,
        beta: int = INF_SCORE,
    ) -> SearchResult:
        self.nodes += 1

        if state.is_over:
            return SearchResult(None, terminal_score(state, depth), depth)
        if depth <= 0:
            score = evaluate(state.board, self.weights, len(state.legal_moves()))
            return SearchResult(None, score, 0)

        fingerprint = state.board.fingerprint
        entry = self.cache.get(fingerprint)
        if entry is not None and entry.depth >= depth and entry.is_usable(alpha, beta):
            return SearchResult(entry.best_move, entry.score, entry.depth)

        alpha_orig = alpha
        best_score = -INF_SCORE
        best_move: Optional[Move] = None
        for move in order_moves(state.board, state.legal_moves()):
            child = self.search(state.play_unchecked(move), depth - 1, -beta, -alpha)
            score = -child.score
            if score > best_score:
                best_score = score
                best_move = move
            alpha = max(alpha, best_score)
            if alpha >= beta:
                break

        if best_score <= alpha_orig:
            bound = Bound.UPPER
        elif best_score >= beta:
            bound = Bound.LOWER
        else:
            bound = Bound.EXACT
        self.cache.put(fingerprint, CacheEntry(depth, best_score, best_move, bound))
        return SearchResult(best_move, best_score, depth)


def search(
    state: GameState,
    depth: int,
    alpha: int = -INF_SCORE,
    beta: int = INF_SCORE,
    cache: Optional[TranspositionCache] = None,
    weights: EngineWeights = DEFAULT_WEIGHTS,
) -> SearchResult:
    """Single-threaded search of `state` to `depth` plies. A fresh cache is used when none is given."""
    searcher = Searcher(cache, weights)
    result = searcher.search(state, depth, alpha, beta)
    logger.debug(
        "search depth=%d move=%s score=%d nodes=%d",
        depth,
        result.best_move,
        result.score,
        searcher.nodes,
    )
    return replace(result, nodes=searcher.nodes)
