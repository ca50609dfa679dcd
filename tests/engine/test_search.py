"""Unit tests for /thunderdome/engine/search.py"""

import pytest

from thunderdome.chess.board import Board
from thunderdome.chess.game import GameState
from thunderdome.chess.moves import Move, generate_legal_moves
from thunderdome.engine.cache import TranspositionCache
from thunderdome.engine.evaluate import DEFAULT_WEIGHTS, EngineWeights, evaluate
from thunderdome.engine.search import (
    INF_SCORE,
    MATE_SCORE,
    Searcher,
    is_mate_score,
    order_moves,
    search,
    terminal_score,
)

BACK_RANK_MATE = "6k1/5ppp/8/8/8/8/8/R5K1 w - - 0 1"
CAPTURES = "4k3/8/2r1q3/3P2N1/8/8/8/3K4 w - - 0 1"
LONE_ROOK = "4k3/8/8/8/8/8/8/4K2R w - - 0 1"
FOOLS_MATE = ["f2f3", "e7e5", "g2g4", "d8h4"]


def uci(move: Move | None) -> str | None:
    return move.to_uci() if move else None


def plain_negamax(state: GameState, depth: int, weights: EngineWeights) -> int:
    """Reference: no pruning, no cache"""
    if state.is_over:
        return terminal_score(state, depth)
    if depth == 0:
        return evaluate(state.board, weights)
    return max(-plain_negamax(state.play_unchecked(move), depth - 1, weights) for move in state.legal_moves())


# -- MOVE ORDERING --
def test_captures_ordered_most_valuable_victim_first() -> None:
    board = Board.from_fen(CAPTURES)
    ordered = order_moves(board, generate_legal_moves(board))
    assert [move.to_uci() for move in ordered[:3]] == ["d5e6", "g5e6", "d5c6"]


def test_checks_come_before_quiet_moves() -> None:
    board = Board.from_fen(LONE_ROOK)
    ordered = order_moves(board, generate_legal_moves(board))
    assert ordered[0] == Move.from_uci("h1h8")


def test_ordering_is_stable() -> None:
    """Quiet moves keep their generation order"""
    board = Board.starting_position()
    moves = generate_legal_moves(board)
    assert order_moves(board, moves) == moves


# -- BASE CASES --
def test_depth_zero_is_static_evaluation() -> None:
    state = GameState.from_fen(CAPTURES)
    result = search(state, 0)
    assert result.best_move is None
    assert result.score == evaluate(state.board, DEFAULT_WEIGHTS)


def test_checkmated_side_gets_mate_score() -> None:
    state = GameState.new_game()
    for move in FOOLS_MATE:
        state = state.apply(Move.from_uci(move))
    result = search(state, 3)
    assert result.best_move is None
    assert result.score == -(MATE_SCORE + 3)


def test_stalemate_scores_zero() -> None:
    result = search(GameState.from_fen("7k/5Q2/6K1/8/8/8/8/8 b - - 0 1"), 2)
    assert result.best_move is None
    assert result.score == 0


# -- SEARCH --
@pytest.mark.parametrize("depth", [1, 2, 3])
def test_finds_mate_in_one(depth: int) -> None:
    result = search(GameState.from_fen(BACK_RANK_MATE), depth)
    assert uci(result.best_move) == "a1a8"
    assert is_mate_score(result.score)
    # quicker mates score higher: mated with depth - 1 plies to spare
    assert result.score == MATE_SCORE + depth - 1


def test_takes_the_queen() -> None:
    """Both captures of the queen win the same material: the pawn capture is ordered first."""
    result = search(GameState.from_fen(CAPTURES), 1, weights=EngineWeights.from_engine_id("100000"))
    assert result.score == (100 + 300) - 500  # pawn and knight against the rook
    assert uci(result.best_move) == "d5e6"


def test_tie_break_first_in_ordering_order() -> None:
    """Counting material only, every rook move is worth the same: the first ordered move (the check) wins."""
    state = GameState.from_fen(LONE_ROOK)
    result = search(state, 1, weights=EngineWeights.from_engine_id("100000"))
    assert result.score == 500
    assert uci(result.best_move) == "h1h8"


@pytest.mark.parametrize("fen", [CAPTURES, LONE_ROOK, BACK_RANK_MATE])
def test_alpha_beta_matches_plain_negamax(fen: str) -> None:
    """Pruning and caching never change the score"""
    state = GameState.from_fen(fen)
    assert search(state, 2).score == plain_negamax(state, 2, DEFAULT_WEIGHTS)


def test_deterministic() -> None:
    state = GameState.from_fen(CAPTURES)
    first = search(state, 3, cache=TranspositionCache())
    second = search(state, 3, cache=TranspositionCache())
    assert (first.best_move, first.score) == (second.best_move, second.score)


def test_cache_is_filled_and_reused() -> None:
    state = GameState.from_fen(LONE_ROOK)
    cache = TranspositionCache()
    first = Searcher(cache)
    result = first.search(state, 2)
    assert len(cache) > 0
    assert cache.get(state.board.fingerprint).depth == 2

    second = Searcher(cache)
    again = second.search(state, 2)
    assert (again.best_move, again.score) == (result.best_move, result.score)
    assert second.nodes == 1  # answered from the cache


def test_counts_nodes() -> None:
    result = search(GameState.from_fen(LONE_ROOK), 1)
    assert result.nodes == 1 + len(GameState.from_fen(LONE_ROOK).legal_moves())


def test_full_window_defaults() -> None:
    result = Searcher().search(GameState.from_fen(LONE_ROOK), 1, -INF_SCORE, INF_SCORE)
    assert result.best_move is not None
