"""
Boundary layer data model(s).

These objects are used to communicate between the rules engine, the tournament service and the persistence layer.
(Decouples the data model specific to the DB layer from the domain objects)
"""

from dataclasses import dataclass
from typing import Optional

from thunderdome.core.shared_types import Outcome

# Type aliases to make the models easier to read
EngineId = str


@dataclass
class GameRecord:
    """Transport-safe representation of a finished (or abandoned) game."""

    initial_fen: str
    final_fen: str
    moves_uci: list[str]
    status: str
    result: Outcome
    winner: Optional[str] = None
    white_engine: Optional[EngineId] = None
    black_engine: Optional[EngineId] = None


@dataclass
class EngineRecord:
    """An engine configuration taking part in the tournament, with its rating and score."""

    engine_id: EngineId
    elo: float
    wins: int = 0
    losses: int = 0
    draws: int = 0

    @property
    def games(self) -> int:
        return self.wins + self.losses + self.draws
