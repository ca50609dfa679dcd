"""Unit tests for thunderdome/services/elo.py"""

import pytest

from thunderdome.core.shared_types import Outcome
from thunderdome.services.elo import expected_score, update_elo


def test_expected_score_equal_ratings() -> None:
    assert expected_score(1000.0, 1000.0) == pytest.approx(0.5)


def test_expected_score_400_points_apart() -> None:
    """400 points difference: 10 to 1 odds"""
    assert expected_score(1400.0, 1000.0) == pytest.approx(10 / 11)
    assert expected_score(1000.0, 1400.0) == pytest.approx(1 / 11)


@pytest.mark.parametrize(
    "outcome, white, black",
    [
        (Outcome.WHITE_WINS, 1016.0, 984.0),
        (Outcome.BLACK_WINS, 984.0, 1016.0),
        (Outcome.DRAW, 1000.0, 1000.0),
    ],
)
def test_update_equal_ratings(outcome: Outcome, white: float, black: float) -> None:
    new_white, new_black = update_elo(1000.0, 1000.0, outcome)
    assert new_white == pytest.approx(white)
    assert new_black == pytest.approx(black)


def test_draw_moves_ratings_towards_each_other() -> None:
    new_white, new_black = update_elo(1200.0, 1000.0, Outcome.DRAW)
    assert new_white < 1200.0
    assert new_black > 1000.0


def test_upset_pays_more() -> None:
    underdog_win, _ = update_elo(1000.0, 1400.0, Outcome.WHITE_WINS)
    favourite_win, _ = update_elo(1400.0, 1000.0, Outcome.WHITE_WINS)
    assert underdog_win - 1000.0 > favourite_win - 1400.0


@pytest.mark.parametrize("outcome", list(Outcome))
def test_sum_preserved(outcome: Outcome) -> None:
    new_white, new_black = update_elo(1234.0, 987.0, outcome)
    assert new_white + new_black == pytest.approx(1234.0 + 987.0)


def test_unfinished_game_changes_nothing() -> None:
    assert update_elo(1234.0, 987.0, Outcome.UNFINISHED) == (1234.0, 987.0)


def test_k_factor() -> None:
    new_white, _ = update_elo(1000.0, 1000.0, Outcome.WHITE_WINS, k=16.0)
    assert new_white == pytest.approx(1008.0)
