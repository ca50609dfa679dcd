"""Orchestration of engine games between the search engine, the rules engine and the persistence layer."""

import logging
import random
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Optional

from thunderdome.api.models import (
    EngineResponse,
    GameResultResponse,
    RegisterEngineRequest,
    TournamentRequest,
    TournamentResponse,
)
from thunderdome.chess.game import GameState
from thunderdome.chess.pieces import Color
from thunderdome.core.config import Settings
from thunderdome.core.exceptions import InvalidRequestError, RepositoryError
from thunderdome.core.models import EngineId, EngineRecord, GameRecord
from thunderdome.core.shared_types import Outcome
from thunderdome.db.repository import TournamentRepository
from thunderdome.engine.cache import TranspositionCache
from thunderdome.engine.evaluate import EngineWeights
from thunderdome.engine.parallel import DEFAULT_WORKERS, best_move
from thunderdome.services.elo import update_elo

logger = logging.getLogger(__name__)


def play_engine_game(
    white: EngineWeights,
    black: EngineWeights,
    depth: int,
    workers: int = DEFAULT_WORKERS,
    start_fen: Optional[str] = None,
    max_plies: Optional[int] = None,
) -> GameRecord:
    """
    Let two engine configurations play one game to completion.
    Each side keeps its own fresh cache for the game: the stored scores depend on the weights.
    With `max_plies` the game may stop early; it is then recorded as unfinished.
    """
    state = GameState.from_fen(start_fen) if start_fen else GameState.new_game()
    engines = {Color.WHITE: white, Color.BLACK: black}
    caches = {Color.WHITE: TranspositionCache(), Color.BLACK: TranspositionCache()}

    while not state.is_over:
        if max_plies is not None and len(state.moves) >= max_plies:
            break
        color = state.color_to_move
        move = best_move(state, depth, caches[color], weights=engines[color], workers=workers)
        assert move is not None, "a game in progress always has a legal move"
        state = state.apply(move)

    record = state.to_record(white.to_engine_id(), black.to_engine_id())
    logger.debug(
        "%s vs %s: %s after %d plies",
        record.white_engine,
        record.black_engine,
        record.status,
        len(record.moves_uci),
    )
    return record


class TournamentService:
    """Orchestration of layers for engine tournaments."""

    def __init__(
        self,
        repository: TournamentRepository,
        settings: Optional[Settings] = None,
        rng: Optional[random.Random] = None,
    ) -> None:
        self.repo = repository
        self.settings = settings if settings is not None else Settings()
        self.rng = rng if rng is not None else random.Random()

    # -- ENGINES ---
    def register_engine(self, request: RegisterEngineRequest) -> EngineResponse:
        """Add an engine configuration, starting at the initial rating."""
        engine = self.repo.create_engine(
            EngineRecord(engine_id=request.engine_id, elo=self.settings.initial_elo)
        )
        logger.info("Registered engine %s at %.0f", engine.engine_id, engine.elo)
        return self._create_engine_response(engine)

    def standings(self) -> list[EngineResponse]:
        """Registered engines, highest rating first."""
        return [self._create_engine_response(engine) for engine in self.repo.list_engines()]

    # -- TOURNAMENT ---
    def run(self, request: TournamentRequest) -> TournamentResponse:
        """
        Play the requested number of games, `concurrency` at a time.
        Results are persisted (and ratings updated) on this thread as the games finish.
        """
        engine_ids = self._participants(request)
        depth = request.depth or self.settings.search_depth
        concurrency = request.concurrency or self.settings.tournament_concurrency
        pairings = [tuple(self.rng.sample(engine_ids, 2)) for _ in range(request.games)]
        logger.info(
            "Tournament: %d games between %d engines (depth %d, %d at a time)",
            len(pairings),
            len(engine_ids),
            depth,
            concurrency,
        )

        results: list[GameResultResponse] = []
        with ThreadPoolExecutor(
            max_workers=concurrency, thread_name_prefix="thunderdome-game"
        ) as executor:
            futures = [
                executor.submit(
                    play_engine_game,
                    EngineWeights.from_engine_id(white_id),
                    EngineWeights.from_engine_id(black_id),
                    depth,
                    self.settings.search_workers,
                    request.start_fen,
                    request.max_plies,
                )
                for white_id, black_id in pairings
            ]
            for future in as_completed(futures):
                record = future.result()
                self._record_game(record)
                results.append(
                    GameResultResponse(
                        white_engine=record.white_engine,
                        black_engine=record.black_engine,
                        result=record.result,
                        status=record.status,
                        num_moves=len(record.moves_uci),
                    )
                )

        return TournamentResponse(games=results, standings=self.standings())

    # -- Internal helpers --
    def _participants(self, request: TournamentRequest) -> list[EngineId]:
        """The listed engines (registered on the fly if new), otherwise every registered engine."""
        if request.engines:
            for engine_id in request.engines:
                if self.repo.get_engine(engine_id) is None:
                    self.register_engine(RegisterEngineRequest(engine_id=engine_id))
            return list(request.engines)

        engine_ids = [engine.engine_id for engine in self.repo.list_engines()]
        if len(engine_ids) < 2:
            raise InvalidRequestError("A tournament needs at least two registered engines.")
        return engine_ids

    def _record_game(self, record: GameRecord) -> None:
        """Persist the game, then update rating and score of both engines."""
        self.repo.create_game(record)
        logger.info(
            "%s (white) vs %s (black): %s, %s",
            record.white_engine,
            record.black_engine,
            record.result.value,
            record.status,
        )
        if record.result == Outcome.UNFINISHED:
            return

        white = self._fetch_engine(record.white_engine)
        black = self._fetch_engine(record.black_engine)
        white.elo, black.elo = update_elo(white.elo, black.elo, record.result)
        if record.result == Outcome.WHITE_WINS:
            white.wins += 1
            black.losses += 1
        elif record.result == Outcome.BLACK_WINS:
            white.losses += 1
            black.wins += 1
        else:
            white.draws += 1
            black.draws += 1
        self.repo.update_engine(white)
        self.repo.update_engine(black)

    def _fetch_engine(self, engine_id: Optional[EngineId]) -> EngineRecord:
        engine = self.repo.get_engine(engine_id) if engine_id is not None else None
        if engine is None:
            raise RepositoryError(f"Engine {engine_id!r} is not registered.")
        return engine

    def _create_engine_response(self, engine: EngineRecord) -> EngineResponse:
        return EngineResponse(
            engine_id=engine.engine_id,
            elo=engine.elo,
            wins=engine.wins,
            losses=engine.losses,
            draws=engine.draws,
        )
