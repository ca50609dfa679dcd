"""Protocol repository (implemented with SQLAlchemy, a fake in tests)"""

from typing import Optional, Protocol
from uuid import UUID

from thunderdome.core.models import EngineId, EngineRecord, GameRecord


class TournamentRepository(Protocol):
    """Persistence layer orchestration"""

    def get_game(self, game_id: UUID) -> GameRecord | None:
        """Get game by ID, if record exists."""
        ...

    def create_game(self, game: GameRecord) -> UUID:
        """Store a played game and return its newly created ID."""
        ...

    def list_games(self, engine_id: Optional[EngineId] = None) -> list[GameRecord]:
        """All stored games in the order they were stored, optionally only those an engine took part in."""
        ...

    def get_engine(self, engine_id: EngineId) -> EngineRecord | None:
        """Get engine by ID, if registered."""
        ...

    def create_engine(self, engine: EngineRecord) -> EngineRecord:
        """Register a new engine. Raises RepositoryError if the ID is taken."""
        ...

    def update_engine(self, engine: EngineRecord) -> EngineRecord | None:
        """Store new rating / score of a registered engine."""
        ...

    def list_engines(self) -> list[EngineRecord]:
        """Registered engines, highest rating first."""
        ...
