"""
Command line front end.

    python -m thunderdome play [--depth N] [--color white|black] [--fen FEN] [--engine ID]
    python -m thunderdome bestmove [--fen FEN] [--depth N] [--engine ID]
    python -m thunderdome tournament [--games N] [--engine ID ...] [--concurrency N] [--depth N]
    python -m thunderdome register ID
    python -m thunderdome standings
"""

import argparse
import logging
from typing import Callable, Optional

from thunderdome.api.models import (
    BestMoveRequest,
    BestMoveResponse,
    EngineResponse,
    PlayRequest,
    RegisterEngineRequest,
    TournamentRequest,
)
from thunderdome.chess.fen import STARTING_FEN
from thunderdome.chess.game import GameState
from thunderdome.chess.notation import moves_to_san, parse_move_text, to_san
from thunderdome.chess.pieces import Color
from thunderdome.core.config import Settings, load_settings
from thunderdome.core.exceptions import GameError
from thunderdome.db.database import get_db, make_session_factory
from thunderdome.db.sql_repository import SQLTournamentRepository
from thunderdome.engine.cache import TranspositionCache
from thunderdome.engine.evaluate import DEFAULT_WEIGHTS, EngineWeights
from thunderdome.engine.parallel import DEFAULT_WORKERS, search_root
from thunderdome.services.tournament_service import TournamentService

logger = logging.getLogger(__name__)

Reader = Callable[[str], str]
Writer = Callable[[str], None]


# --- HUMAN VS ENGINE ---
def play(
    state: GameState,
    human: Color,
    depth: int,
    weights: EngineWeights = DEFAULT_WEIGHTS,
    workers: int = DEFAULT_WORKERS,
    read: Reader = input,
    write: Writer = print,
) -> GameState:
    """
    Interactive game on stdin/stdout. Besides moves the human may type
    "moves" (list legal moves), "undo" (take back the last own move) or "resign".
    Returns the final state.
    """
    cache = TranspositionCache()
    while not state.is_over:
        write(str(state.board))
        if state.color_to_move != human:
            result = search_root(state, depth, cache, weights=weights, workers=workers)
            assert result.best_move is not None
            write(
                f"Engine plays {to_san(state.board, result.best_move)} "
                f"(score {result.score}, {result.nodes} boards evaluated)"
            )
            state = state.apply(result.best_move)
            continue

        text = read(f"{human.name.capitalize()} to move> ").strip().lower()
        if text == "resign":
            write(f"{human.name.capitalize()} resigns.")
            return state
        if text == "moves":
            write(" ".join(to_san(state.board, move) for move in state.legal_moves()))
            continue
        if text == "undo":
            state = _undo_own_move(state, human, write)
            continue
        try:
            state = state.apply(parse_move_text(text, state.board))
        except GameError as e:
            write(f"Error: {e}")

    write(str(state.board))
    write(f"Game over: {state.status.describe()} ({state.status.outcome.value})")
    write(" ".join(moves_to_san(state.initial_board, list(state.moves))))
    return state


def _undo_own_move(state: GameState, human: Color, write: Writer) -> GameState:
    """Take back the engine's reply and the human's move before it."""
    try:
        state = state.undo()
        if state.color_to_move != human:
            state = state.undo()
    except GameError as e:
        write(f"Error: {e}")
    return state


# --- SUBCOMMANDS ---
def cmd_play(args: argparse.Namespace, settings: Settings) -> int:
    request = PlayRequest(fen=args.fen or STARTING_FEN, depth=args.depth, engine_id=args.engine)
    weights = (
        EngineWeights.from_engine_id(request.engine_id) if request.engine_id else DEFAULT_WEIGHTS
    )
    human = Color.WHITE if args.color == "white" else Color.BLACK
    play(
        GameState.from_fen(request.fen),
        human,
        request.depth or settings.search_depth,
        weights=weights,
        workers=settings.search_workers,
    )
    return 0


def cmd_bestmove(args: argparse.Namespace, settings: Settings) -> int:
    request = BestMoveRequest(fen=args.fen, depth=args.depth, engine_id=args.engine)
    print(best_move_response(request, settings).model_dump_json(indent=2))
    return 0


def best_move_response(request: BestMoveRequest, settings: Settings) -> BestMoveResponse:
    state = GameState.from_fen(request.fen)
    weights = (
        EngineWeights.from_engine_id(request.engine_id) if request.engine_id else DEFAULT_WEIGHTS
    )
    depth = request.depth or settings.search_depth
    result = search_root(state, depth, weights=weights, workers=settings.search_workers)
    move = result.best_move
    return BestMoveResponse(
        fen=request.fen,
        best_move=move.to_uci() if move else None,
        san=to_san(state.board, move) if move else None,
        score=result.score,
        depth=result.depth,
        nodes=result.nodes,
    )


def cmd_tournament(args: argparse.Namespace, settings: Settings) -> int:
    request = TournamentRequest(
        engines=args.engine or [],
        games=args.games,
        depth=args.depth,
        concurrency=args.concurrency,
        max_plies=args.max_plies,
    )
    with get_db(make_session_factory(settings.database_url)) as db:
        service = TournamentService(SQLTournamentRepository(db), settings)
        response = service.run(request)
    for game in response.games:
        print(
            f"{game.white_engine} vs {game.black_engine}: {game.result.value} "
            f"({game.status}, {game.num_moves} plies)"
        )
    print_standings(response.standings)
    return 0


def cmd_register(args: argparse.Namespace, settings: Settings) -> int:
    with get_db(make_session_factory(settings.database_url)) as db:
        service = TournamentService(SQLTournamentRepository(db), settings)
        engine = service.register_engine(RegisterEngineRequest(engine_id=args.engine_id))
    print(f"Registered {engine.engine_id} at {engine.elo:.0f}")
    return 0


def cmd_standings(args: argparse.Namespace, settings: Settings) -> int:
    with get_db(make_session_factory(settings.database_url)) as db:
        standings = TournamentService(SQLTournamentRepository(db), settings).standings()
    if not standings:
        print("No engines registered")
        return 0
    print_standings(standings)
    return 0


def print_standings(standings: list[EngineResponse]) -> None:
    print(f"\n{'Engine':<10} {'Elo':>8} {'W':>5} {'L':>5} {'D':>5}")
    print("-" * 37)
    for engine in standings:
        print(
            f"{engine.engine_id:<10} {engine.elo:>8.0f} {engine.wins:>5} "
            f"{engine.losses:>5} {engine.draws:>5}"
        )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="thunderdome",
        description="Chess engine: play against it, ask it for a move, or let engine configurations fight it out.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    play_parser = subparsers.add_parser("play", help="Play against the engine")
    play_parser.add_argument("--depth", "-d", type=int, default=None, help="Search depth (plies)")
    play_parser.add_argument("--color", choices=["white", "black"], default="white",
                             help="Your color (default: white)")
    play_parser.add_argument("--fen", type=str, default=None, help="Start from this position")
    play_parser.add_argument("--engine", type=str, default=None, metavar="ID",
                             help="Engine weights, ex. 111000")
    play_parser.set_defaults(handler=cmd_play)

    bestmove_parser = subparsers.add_parser("bestmove", help="Print the engine's move for a position")
    bestmove_parser.add_argument("--fen", type=str, default=STARTING_FEN,
                                 help="Position (default: initial position)")
    bestmove_parser.add_argument("--depth", "-d", type=int, default=None, help="Search depth (plies)")
    bestmove_parser.add_argument("--engine", type=str, default=None, metavar="ID",
                                 help="Engine weights, ex. 111000")
    bestmove_parser.set_defaults(handler=cmd_bestmove)

    tournament_parser = subparsers.add_parser("tournament", help="Play rated engine games")
    tournament_parser.add_argument("--games", "-g", type=int, default=10, help="Number of games")
    tournament_parser.add_argument("--engine", "-e", type=str, action="append", metavar="ID",
                                   help="Engine taking part (repeatable); default: all registered engines")
    tournament_parser.add_argument("--concurrency", "-c", type=int, default=None,
                                   help="Games played at the same time")
    tournament_parser.add_argument("--depth", "-d", type=int, default=None, help="Search depth (plies)")
    tournament_parser.add_argument("--max-plies", type=int, default=None,
                                   help="Stop (and record as unfinished) games longer than this")
    tournament_parser.set_defaults(handler=cmd_tournament)

    register_parser = subparsers.add_parser("register", help="Register an engine configuration")
    register_parser.add_argument("engine_id", help="Six digit weights, ex. 111000")
    register_parser.set_defaults(handler=cmd_register)

    standings_parser = subparsers.add_parser("standings", help="List registered engines by rating")
    standings_parser.set_defaults(handler=cmd_standings)
    return parser


def main(argv: Optional[list[str]] = None) -> int:
    """Main entry point for the CLI."""
    args = build_parser().parse_args(argv)
    settings = load_settings()
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logger.debug("Settings: %s", settings)
    try:
        return args.handler(args, settings)
    except GameError as e:
        print(f"Error: {e}")
        return 1
