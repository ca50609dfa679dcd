"""Unit tests for thunderdome/services/tournament_service.py"""

import random
from typing import Iterator, Optional
from unittest.mock import patch
from uuid import UUID, uuid4

import pytest
from sqlalchemy.orm import Session

from thunderdome.api.models import RegisterEngineRequest, TournamentRequest
from thunderdome.core.config import Settings
from thunderdome.core.exceptions import InvalidRequestError, RepositoryError
from thunderdome.core.models import EngineId, EngineRecord, GameRecord
from thunderdome.core.shared_types import Outcome
from thunderdome.db.sql_repository import SQLTournamentRepository
from thunderdome.engine.evaluate import EngineWeights
from thunderdome.services.tournament_service import TournamentService, play_engine_game

# White mates on the back rank in one move, whatever the weights
BACK_RANK_MATE = "6k1/5ppp/8/8/8/8/8/R5K1 w - - 0 1"


# --- MOCK DEPENDENCIES ----
class MockRepository:
    """Mock the TournamentRepository using dictionaries."""

    def __init__(self) -> None:
        self._games: dict[UUID, GameRecord] = {}
        self._engines: dict[EngineId, EngineRecord] = {}

    def get_game(self, game_id: UUID) -> GameRecord | None:
        return self._games.get(game_id)

    def create_game(self, game: GameRecord) -> UUID:
        game_id = uuid4()
        self._games[game_id] = game
        return game_id

    def list_games(self, engine_id: Optional[EngineId] = None) -> list[GameRecord]:
        return [
            game
            for game in self._games.values()
            if engine_id is None or engine_id in (game.white_engine, game.black_engine)
        ]

    def get_engine(self, engine_id: EngineId) -> EngineRecord | None:
        engine = self._engines.get(engine_id)
        return EngineRecord(**vars(engine)) if engine else None

    def create_engine(self, engine: EngineRecord) -> EngineRecord:
        if engine.engine_id in self._engines:
            raise RepositoryError(f"Engine {engine.engine_id!r} is already registered.")
        self._engines[engine.engine_id] = engine
        return engine

    def update_engine(self, engine: EngineRecord) -> EngineRecord | None:
        if engine.engine_id not in self._engines:
            return None
        self._engines[engine.engine_id] = engine
        return engine

    def list_engines(self) -> list[EngineRecord]:
        return sorted(self._engines.values(), key=lambda engine: (-engine.elo, engine.engine_id))


@pytest.fixture
def mock_repository() -> Iterator[MockRepository]:
    yield MockRepository()


@pytest.fixture
def service(mock_repository: MockRepository) -> TournamentService:
    settings = Settings(search_depth=1, search_workers=2, tournament_concurrency=2)
    return TournamentService(mock_repository, settings, rng=random.Random(7))


# --- SINGLE GAMES ---
def test_play_engine_game_to_mate() -> None:
    record = play_engine_game(
        EngineWeights.from_engine_id("111000"),
        EngineWeights.from_engine_id("100000"),
        depth=1,
        workers=1,
        start_fen=BACK_RANK_MATE,
    )
    assert record.moves_uci == ["a1a8"]
    assert record.result == Outcome.WHITE_WINS
    assert record.winner == "white"
    assert (record.white_engine, record.black_engine) == ("111000", "100000")
    assert record.initial_fen == BACK_RANK_MATE


def test_play_engine_game_ply_limit() -> None:
    """A game cut short by the ply limit is unfinished."""
    record = play_engine_game(
        EngineWeights.from_engine_id("111000"),
        EngineWeights.from_engine_id("111000"),
        depth=1,
        workers=1,
        max_plies=2,
    )
    assert len(record.moves_uci) == 2
    assert record.result == Outcome.UNFINISHED
    assert record.winner is None


# --- ENGINES ---
def test_register_engine(service: TournamentService) -> None:
    response = service.register_engine(RegisterEngineRequest(engine_id="111000"))
    assert response.engine_id == "111000"
    assert response.elo == 1000.0
    assert (response.wins, response.losses, response.draws) == (0, 0, 0)


def test_register_engine_twice(service: TournamentService) -> None:
    service.register_engine(RegisterEngineRequest(engine_id="111000"))
    with pytest.raises(RepositoryError):
        service.register_engine(RegisterEngineRequest(engine_id="111000"))


def test_register_uses_initial_elo(mock_repository: MockRepository) -> None:
    service = TournamentService(mock_repository, Settings(initial_elo=1500.0))
    assert service.register_engine(RegisterEngineRequest(engine_id="123456")).elo == 1500.0


def test_standings_highest_rating_first(
    service: TournamentService, mock_repository: MockRepository
) -> None:
    mock_repository.create_engine(EngineRecord("100000", 990.0))
    mock_repository.create_engine(EngineRecord("111000", 1010.0))
    assert [engine.engine_id for engine in service.standings()] == ["111000", "100000"]


# --- TOURNAMENT ---
def test_tournament_needs_two_engines(service: TournamentService) -> None:
    with pytest.raises(InvalidRequestError):
        service.run(TournamentRequest(games=1))

    service.register_engine(RegisterEngineRequest(engine_id="111000"))
    with pytest.raises(InvalidRequestError):
        service.run(TournamentRequest(games=1))


def test_tournament_single_game(service: TournamentService, mock_repository: MockRepository) -> None:
    """The winner gains exactly what the loser drops."""
    response = service.run(
        TournamentRequest(engines=["111000", "100000"], games=1, start_fen=BACK_RANK_MATE)
    )

    assert len(response.games) == 1
    game = response.games[0]
    assert game.result == Outcome.WHITE_WINS
    assert game.num_moves == 1
    assert {game.white_engine, game.black_engine} == {"111000", "100000"}

    white = mock_repository.get_engine(game.white_engine)
    black = mock_repository.get_engine(game.black_engine)
    assert white.elo == pytest.approx(1016.0)
    assert black.elo == pytest.approx(984.0)
    assert (white.wins, white.losses, black.wins, black.losses) == (1, 0, 0, 1)

    # Winner on top of the standings
    assert response.standings[0].engine_id == game.white_engine
    assert len(mock_repository.list_games()) == 1


def test_tournament_registers_listed_engines(
    service: TournamentService, mock_repository: MockRepository
) -> None:
    service.run(TournamentRequest(engines=["111000", "100000"], games=1, start_fen=BACK_RANK_MATE))
    assert mock_repository.get_engine("111000") is not None
    assert mock_repository.get_engine("100000") is not None


def test_tournament_concurrent_games(service: TournamentService, mock_repository: MockRepository) -> None:
    for engine_id in ["111000", "100000", "010000"]:
        service.register_engine(RegisterEngineRequest(engine_id=engine_id))

    response = service.run(TournamentRequest(games=6, concurrency=3, start_fen=BACK_RANK_MATE))

    assert len(response.games) == 6
    assert len(mock_repository.list_games()) == 6
    engines = mock_repository.list_engines()
    assert sum(engine.games for engine in engines) == 12
    assert sum(engine.wins for engine in engines) == 6
    # Rating points move between engines, never appear or vanish
    assert sum(engine.elo for engine in engines) == pytest.approx(3000.0)
    for game in response.games:
        assert game.white_engine != game.black_engine


def test_unfinished_games_leave_ratings(
    service: TournamentService, mock_repository: MockRepository
) -> None:
    response = service.run(TournamentRequest(engines=["111000", "100000"], games=2, max_plies=1))

    assert [game.result for game in response.games] == [Outcome.UNFINISHED] * 2
    assert len(mock_repository.list_games()) == 2
    for engine in mock_repository.list_engines():
        assert engine.elo == 1000.0
        assert engine.games == 0


def test_tournament_with_sql_repository(db_session_repo: Session) -> None:
    """Same flow against the real persistence layer."""
    repo = SQLTournamentRepository(db_session_repo)
    service = TournamentService(repo, Settings(search_depth=1, search_workers=1))

    service.run(TournamentRequest(engines=["111000", "100000"], games=2, start_fen=BACK_RANK_MATE))

    games = repo.list_games()
    assert len(games) == 2
    assert all(game.moves_uci == ["a1a8"] for game in games)
    ratings = [engine.elo for engine in repo.list_engines()]
    assert sum(ratings) == pytest.approx(2000.0)
    assert sum(engine.games for engine in repo.list_engines()) == 4


def test_tournament_results_drive_ratings(service: TournamentService, mock_repository: MockRepository) -> None:
    """Canned game results: a draw between equals changes no rating, a win moves 16 points."""
    draw = GameRecord("fen", "fen", ["e2e4"], "draw by stalemate", Outcome.DRAW, None, "111000", "100000")
    win = GameRecord("fen", "fen", ["e2e4"], "checkmate, black wins", Outcome.BLACK_WINS, "black", "111000", "100000")

    with patch(
        "thunderdome.services.tournament_service.play_engine_game", return_value=draw
    ) as play:
        service.run(TournamentRequest(engines=["111000", "100000"], games=1, depth=2))
    play.assert_called_once()
    assert play.call_args.args[2] == 2  # depth from the request
    assert mock_repository.get_engine("111000").elo == pytest.approx(1000.0)
    assert mock_repository.get_engine("111000").draws == 1

    with patch("thunderdome.services.tournament_service.play_engine_game", return_value=win):
        service.run(TournamentRequest(engines=["111000", "100000"], games=1))
    assert mock_repository.get_engine("100000").elo == pytest.approx(1016.0)
    assert mock_repository.get_engine("100000").wins == 1
    assert mock_repository.get_engine("111000").losses == 1
