"""
Errors raised across layers.

Everything deriving from GameError is recoverable: the caller re-prompts, re-searches or starts a new game.
BoardInvariantError is a programming error and should never be caught.
"""


class GameError(Exception):
    """Base class for all recoverable errors of the chess domain."""


class IllegalMoveError(GameError):
    """The move is not in the legal move set of the current position."""


class GameOverError(GameError):
    """The game already reached a terminal status. Start a new game."""


class InvalidNotationError(GameError):
    """A text move could not be parsed into a Move."""


class InvalidFENError(GameError):
    """A string could not be interpreted as FEN."""


class GameStateError(GameError):
    """Request does not make sense in the current state of the game (ex. undo before the first move)."""


class RepositoryError(GameError):
    """Record not found or could not be stored."""


class InvalidRequestError(GameError):
    """Boundary layer received data it cannot work with."""


class BoardInvariantError(RuntimeError):
    """A board broke one of the rules that must hold during legal play (ex. two white kings)."""
