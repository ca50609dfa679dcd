"""Implementation of (Tournament)Repository using SQLAlchemy"""

from typing import Optional
from uuid import UUID, uuid4

from sqlalchemy import or_, select
from sqlalchemy.orm import Session

from thunderdome.core.exceptions import RepositoryError
from thunderdome.core.models import EngineId, EngineRecord, GameRecord
from thunderdome.core.shared_types import Outcome
from thunderdome.db.schema import DBEngine, DBGame


class SQLTournamentRepository:
    """Data stored using SQL / methods implemented using SQLAlchemy"""

    def __init__(self, db_session: Session) -> None:
        self.db = db_session

    # --- GAMES ---
    def get_game(self, game_id: UUID) -> GameRecord | None:
        """Get game by ID, if record exists."""
        game_db = self.db.scalar(select(DBGame).where(DBGame.id == game_id))
        if game_db:
            return self._to_game_record(game_db)
        return None

    def create_game(self, game: GameRecord) -> UUID:
        """Store a played game and return its newly created ID."""
        new_id = uuid4()
        game_db = DBGame(
            id=new_id,
            initial_fen=game.initial_fen,
            final_fen=game.final_fen,
            moves_uci=list(game.moves_uci),
            status=game.status,
            result=game.result.value,
            winner=game.winner,
            white_engine=game.white_engine,
            black_engine=game.black_engine,
        )
        self.db.add(game_db)
        self.db.commit()
        return new_id

    def list_games(self, engine_id: Optional[EngineId] = None) -> list[GameRecord]:
        query = select(DBGame).order_by(DBGame.created_at)
        if engine_id is not None:
            query = query.where(
                or_(DBGame.white_engine == engine_id, DBGame.black_engine == engine_id)
            )
        return [self._to_game_record(game_db) for game_db in self.db.scalars(query)]

    # --- ENGINES ---
    def get_engine(self, engine_id: EngineId) -> EngineRecord | None:
        """Get engine by ID, if registered."""
        engine_db = self._fetch_engine(engine_id)
        if engine_db:
            return self._to_engine_record(engine_db)
        return None

    def create_engine(self, engine: EngineRecord) -> EngineRecord:
        if self._fetch_engine(engine.engine_id) is not None:
            raise RepositoryError(f"Engine {engine.engine_id!r} is already registered.")
        engine_db = DBEngine(
            engine_id=engine.engine_id,
            elo=engine.elo,
            wins=engine.wins,
            losses=engine.losses,
            draws=engine.draws,
        )
        self.db.add(engine_db)
        self.db.commit()
        self.db.refresh(engine_db)
        return self._to_engine_record(engine_db)

    def update_engine(self, engine: EngineRecord) -> EngineRecord | None:
        """Store new rating / score of a registered engine."""
        engine_db = self._fetch_engine(engine.engine_id)
        if not engine_db:
            return None
        engine_db.elo = engine.elo
        engine_db.wins = engine.wins
        engine_db.losses = engine.losses
        engine_db.draws = engine.draws
        self.db.commit()
        self.db.refresh(engine_db)
        return self._to_engine_record(engine_db)

    def list_engines(self) -> list[EngineRecord]:
        query = select(DBEngine).order_by(DBEngine.elo.desc(), DBEngine.engine_id)
        return [self._to_engine_record(engine_db) for engine_db in self.db.scalars(query)]

    # --- CONVERSIONS ---
    def _fetch_engine(self, engine_id: EngineId) -> DBEngine | None:
        return self.db.scalar(select(DBEngine).where(DBEngine.engine_id == engine_id))

    def _to_game_record(self, game_db: DBGame) -> GameRecord:
        """Convert SQLAlchemy model to data transfer model."""
        return GameRecord(
            initial_fen=game_db.initial_fen,
            final_fen=game_db.final_fen,
            moves_uci=list(game_db.moves_uci),
            status=game_db.status,
            result=Outcome(game_db.result),
            winner=game_db.winner,
            white_engine=game_db.white_engine,
            black_engine=game_db.black_engine,
        )

    def _to_engine_record(self, engine_db: DBEngine) -> EngineRecord:
        return EngineRecord(
            engine_id=engine_db.engine_id,
            elo=engine_db.elo,
            wins=engine_db.wins,
            losses=engine_db.losses,
            draws=engine_db.draws,
        )
