"""Unit tests for thunderdome/core/config.py"""

from pathlib import Path

import pytest
from pydantic import ValidationError

from thunderdome.core.config import Settings, load_settings


def test_defaults() -> None:
    settings = Settings.from_env({})
    assert settings == Settings()
    assert settings.search_depth == 3
    assert settings.log_level == "INFO"


def test_from_env() -> None:
    settings = Settings.from_env(
        {
            "THUNDERDOME_DATABASE_URL": "sqlite:///:memory:",
            "THUNDERDOME_SEARCH_DEPTH": "5",
            "THUNDERDOME_SEARCH_WORKERS": "8",
            "THUNDERDOME_TOURNAMENT_CONCURRENCY": "1",
            "THUNDERDOME_INITIAL_ELO": "1500",
            "THUNDERDOME_LOG_LEVEL": "debug",
            "UNRELATED": "ignored",
        }
    )
    assert settings.database_url == "sqlite:///:memory:"
    assert settings.search_depth == 5
    assert settings.search_workers == 8
    assert settings.tournament_concurrency == 1
    assert settings.initial_elo == 1500.0
    assert settings.log_level == "DEBUG"


@pytest.mark.parametrize(
    "variable, value",
    [
        ("THUNDERDOME_SEARCH_DEPTH", "0"),
        ("THUNDERDOME_SEARCH_WORKERS", "-1"),
        ("THUNDERDOME_TOURNAMENT_CONCURRENCY", "three"),
        ("THUNDERDOME_LOG_LEVEL", "chatty"),
    ],
)
def test_invalid_values(variable: str, value: str) -> None:
    with pytest.raises(ValidationError):
        Settings.from_env({variable: value})


def test_load_settings_reads_dotenv(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """A .env file in the working directory fills in unset variables."""
    (tmp_path / ".env").write_text("THUNDERDOME_SEARCH_DEPTH=2\n")
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("THUNDERDOME_SEARCH_DEPTH", raising=False)
    try:
        assert load_settings().search_depth == 2
    finally:
        monkeypatch.delenv("THUNDERDOME_SEARCH_DEPTH", raising=False)
