"""
Root-level parallel search: one task per legal root move on a thread pool, all tasks sharing one TranspositionCache.

Every root move is searched to the full depth with a full window, so the scores do not depend on
which task finishes first. The winner is picked after all tasks are done (barrier), first in ordering order on ties.
"""

import logging
from concurrent.futures import ThreadPoolExecutor, wait
from typing import Optional

from thunderdome.chess.game import GameState
from thunderdome.chess.moves import Move
from thunderdome.engine.cache import TranspositionCache
from thunderdome.engine.evaluate import DEFAULT_WEIGHTS, EngineWeights
from thunderdome.engine.search import INF_SCORE, Searcher, SearchResult, order_moves, terminal_score

logger = logging.getLogger(__name__)

DEFAULT_WORKERS = 4


def search_root(
    state: GameState,
    depth: int,
    cache: Optional[TranspositionCache] = None,
    *,
    weights: EngineWeights = DEFAULT_WEIGHTS,
    workers: int = DEFAULT_WORKERS,
) -> SearchResult:
    """Score every root move concurrently and return the best one with its score."""
    if depth < 1:
        raise ValueError(f"Search depth must be at least 1, got {depth}")
    if workers < 1:
        raise ValueError(f"Number of workers must be at least 1, got {workers}")

    if state.is_over:
        return SearchResult(None, terminal_score(state, depth), depth)

    if cache is None:
        cache = TranspositionCache()
    root_moves = order_moves(state.board, state.legal_moves())

    with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="thunderdome-search") as executor:
        futures = [
            executor.submit(_score_root_move, state, move, depth, cache, weights)
            for move in root_moves
        ]
        wait(futures)

    best_move: Optional[Move] = None
    best_score = -INF_SCORE
    nodes = 1
    for move, future in zip(root_moves, futures):
        score, task_nodes = future.result()
        nodes += task_nodes
        if score > best_score:
            best_move, best_score = move, score

    logger.debug(
        "root search depth=%d moves=%d best=%s score=%d nodes=%d cache=%d",
        depth,
        len(root_moves),
        best_move,
        best_score,
        nodes,
        len(cache),
    )
    return SearchResult(best_move, best_score, depth, nodes)


def best_move(
    state: GameState,
    depth: int,
    cache: Optional[TranspositionCache] = None,
    *,
    weights: EngineWeights = DEFAULT_WEIGHTS,
    workers: int = DEFAULT_WORKERS,
) -> Optional[Move]:
    """The move the engine plays in `state`, or None when the game is over."""
    return search_root(state, depth, cache, weights=weights, workers=workers).best_move


def _score_root_move(
    state: GameState,
    move: Move,
    depth: int,
    cache: TranspositionCache,
    weights: EngineWeights,
) -> tuple[int, int]:
    searcher = Searcher(cache, weights)
    result = searcher.search(state.play_unchecked(move), depth - 1)
    return -result.score, searcher.nodes
