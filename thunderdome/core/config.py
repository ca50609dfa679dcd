"""
Runtime settings, read from the environment (a `.env` file in the working directory is loaded first).

THUNDERDOME_DATABASE_URL            SQLAlchemy URL of the tournament database
THUNDERDOME_SEARCH_DEPTH            plies searched per engine move
THUNDERDOME_SEARCH_WORKERS          threads of the root search
THUNDERDOME_TOURNAMENT_CONCURRENCY  games played at the same time
THUNDERDOME_INITIAL_ELO             rating of a newly registered engine
THUNDERDOME_LOG_LEVEL               DEBUG, INFO, WARNING, ...
"""

import logging
import os
from pathlib import Path
from typing import Mapping, Optional, Self

from dotenv import load_dotenv
from pydantic import BaseModel, field_validator

ENV_PREFIX = "THUNDERDOME_"


class Settings(BaseModel):
    database_url: str = "sqlite:///thunderdome.db"
    search_depth: int = 3
    search_workers: int = 4
    tournament_concurrency: int = 2
    initial_elo: float = 1000.0
    log_level: str = "INFO"

    @field_validator(*["search_depth", "search_workers", "tournament_concurrency"])
    @classmethod
    def validate_positive(cls, value: int) -> int:
        if value < 1:
            raise ValueError(f"Must be at least 1, got {value}")
        return value

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        level = value.strip().upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"Unknown log level: {value!r}")
        return level

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> Self:
        """Collect the THUNDERDOME_* variables; unset ones keep their defaults."""
        environ = os.environ if environ is None else environ
        values = {
            name: environ[ENV_PREFIX + name.upper()]
            for name in cls.model_fields
            if ENV_PREFIX + name.upper() in environ
        }
        return cls(**values)


def load_settings(env_file: Path = Path(".env")) -> Settings:
    load_dotenv(env_file)
    return Settings.from_env()
