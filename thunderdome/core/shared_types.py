"""
Type definitions used across layers
"""

from enum import StrEnum


class Outcome(StrEnum):
    """Game result as written in PGN"""

    WHITE_WINS = "1-0"
    BLACK_WINS = "0-1"
    DRAW = "1/2-1/2"
    UNFINISHED = "*"

    def score_for_white(self) -> float | None:
        """1 for a white win, 0.5 for a draw, 0 for a loss. None when the game did not finish."""
        return {
            Outcome.WHITE_WINS: 1.0,
            Outcome.DRAW: 0.5,
            Outcome.BLACK_WINS: 0.0,
        }.get(self)
