"""Elo rating updates after a game between two engines."""

from thunderdome.core.shared_types import Outcome

K_FACTOR = 32.0
ELO_SCALE = 400.0


def expected_score(rating: float, opponent_rating: float) -> float:
    """Probability-like expected score of a player rated `rating` against `opponent_rating` (logistic curve)."""
    return 1.0 / (1.0 + 10.0 ** ((opponent_rating - rating) / ELO_SCALE))


def update_elo(
    white_elo: float, black_elo: float, outcome: Outcome, k: float = K_FACTOR
) -> tuple[float, float]:
    """
    New (white, black) ratings. An unfinished game leaves both untouched.
    The sum of both ratings is preserved.
    """
    actual = outcome.score_for_white()
    if actual is None:
        return white_elo, black_elo
    delta = k * (actual - expected_score(white_elo, black_elo))
    return white_elo + delta, black_elo - delta
