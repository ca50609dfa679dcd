"""Requests and Response models"""

from typing import Optional

from pydantic import BaseModel, field_validator

from thunderdome.chess.fen import STARTING_FEN, is_valid_fen
from thunderdome.chess.game import GameState
from thunderdome.core.exceptions import BoardInvariantError, InvalidRequestError
from thunderdome.core.shared_types import Outcome
from thunderdome.engine.evaluate import EngineWeights

EngineId = str
MAX_SEARCH_DEPTH = 8


def _validate_engine_id(value: str) -> str:
    # raises InvalidRequestError if not six digits
    return EngineWeights.from_engine_id(value.strip()).to_engine_id()


def _validate_fen(value: str) -> str:
    """Well-formed FEN of a position a game can be played from."""
    fen = value.strip()
    if not is_valid_fen(fen):
        raise InvalidRequestError(f"Invalid FEN: {value!r}")
    try:
        GameState.from_fen(fen)
    except BoardInvariantError as e:
        raise InvalidRequestError(f"Impossible position: {e}") from e
    return fen


def _validate_depth(value: Optional[int]) -> Optional[int]:
    if value is None:
        return value
    if not 1 <= value <= MAX_SEARCH_DEPTH:
        raise InvalidRequestError(
            f"Search depth must be between 1 and {MAX_SEARCH_DEPTH}, got {value}"
        )
    return value


# --- REQUEST MODELS ---
class RegisterEngineRequest(BaseModel):
    engine_id: EngineId

    @field_validator("engine_id")
    @classmethod
    def validate_engine_id(cls, value: str) -> str:
        return _validate_engine_id(value)


class TournamentRequest(BaseModel):
    """
    Play `games` games. Without `engines`, every game pairs two registered engines at random;
    with `engines`, only those take part.
    """

    engines: list[EngineId] = []
    games: int = 10
    depth: Optional[int] = None
    concurrency: Optional[int] = None
    max_plies: Optional[int] = None
    start_fen: Optional[str] = None

    @field_validator("engines")
    @classmethod
    def validate_engines(cls, value: list[str]) -> list[str]:
        engines = [_validate_engine_id(engine_id) for engine_id in value]
        if len(set(engines)) != len(engines):
            raise InvalidRequestError("An engine cannot be listed twice.")
        if len(engines) == 1:
            raise InvalidRequestError("A tournament needs at least two engines.")
        return engines

    @field_validator("games")
    @classmethod
    def validate_games(cls, value: int) -> int:
        if value < 1:
            raise InvalidRequestError(f"Number of games must be positive, got {value}")
        return value

    @field_validator("depth")
    @classmethod
    def validate_depth(cls, value: Optional[int]) -> Optional[int]:
        return _validate_depth(value)

    @field_validator(*["concurrency", "max_plies"])
    @classmethod
    def validate_positive(cls, value: Optional[int]) -> Optional[int]:
        if value is not None and value < 1:
            raise InvalidRequestError(f"Must be at least 1, got {value}")
        return value

    @field_validator("start_fen")
    @classmethod
    def validate_start_fen(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return value
        return _validate_fen(value)


class BestMoveRequest(BaseModel):
    fen: str = STARTING_FEN
    depth: Optional[int] = None
    engine_id: Optional[EngineId] = None

    @field_validator("fen")
    @classmethod
    def validate_fen(cls, value: str) -> str:
        return _validate_fen(value)

    @field_validator("depth")
    @classmethod
    def validate_depth(cls, value: Optional[int]) -> Optional[int]:
        return _validate_depth(value)

    @field_validator("engine_id")
    @classmethod
    def validate_engine_id(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return value
        return _validate_engine_id(value)


class PlayRequest(BestMoveRequest):
    """A game against a human: the start position, the search depth and the engine the human plays against."""


# --- RESPONSE MODELS ---
class BestMoveResponse(BaseModel):
    fen: str
    best_move: Optional[str]
    san: Optional[str]
    score: int
    depth: int
    nodes: int


class EngineResponse(BaseModel):
    engine_id: EngineId
    elo: float
    wins: int
    losses: int
    draws: int


class GameResultResponse(BaseModel):
    white_engine: EngineId
    black_engine: EngineId
    result: Outcome
    status: str
    num_moves: int


class TournamentResponse(BaseModel):
    games: list[GameResultResponse]
    standings: list[EngineResponse]
