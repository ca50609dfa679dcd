"""
The GameState is the entrypoint into the rules engine for the engine, the tournament and the CLI.
It wraps the current Board with the history needed for undo and repetition detection, and decides when the game is over.

GameState is immutable: `apply()` returns the successor state, so search workers can share states freely.
"""

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Optional, Self

from thunderdome.chess.board import Board
from thunderdome.chess.moves import Move, generate_legal_moves, is_in_check
from thunderdome.chess.pieces import Color, PieceType
from thunderdome.core.exceptions import (
    BoardInvariantError,
    GameOverError,
    GameStateError,
    IllegalMoveError,
)
from thunderdome.core.models import GameRecord
from thunderdome.core.shared_types import Outcome

FIFTY_MOVE_HALF_MOVES = 100
REPETITIONS_FOR_DRAW = 3


class Status(Enum):
    IN_PROGRESS = auto()
    CHECKMATE = auto()
    STALEMATE = auto()
    DRAW = auto()


class DrawReason(Enum):
    FIFTY_MOVE = auto()
    THREEFOLD_REPETITION = auto()
    INSUFFICIENT_MATERIAL = auto()


@dataclass(frozen=True)
class GameStatus:
    """InProgress | Checkmate(winner) | Stalemate | Draw(reason)"""

    status: Status
    winner: Optional[Color] = None
    draw_reason: Optional[DrawReason] = None

    @property
    def is_terminal(self) -> bool:
        return self.status != Status.IN_PROGRESS

    @property
    def outcome(self) -> Outcome:
        if self.status == Status.CHECKMATE:
            return Outcome.WHITE_WINS if self.winner == Color.WHITE else Outcome.BLACK_WINS
        if self.is_terminal:
            return Outcome.DRAW
        return Outcome.UNFINISHED

    def describe(self) -> str:
        """Human readable, also the value stored with a game record"""
        if self.status == Status.CHECKMATE:
            assert self.winner is not None
            return f"checkmate, {self.winner.name.lower()} wins"
        if self.status == Status.DRAW:
            assert self.draw_reason is not None
            return f"draw by {self.draw_reason.name.lower().replace('_', ' ')}"
        return self.status.name.lower().replace("_", " ")


IN_PROGRESS = GameStatus(Status.IN_PROGRESS)


@dataclass(frozen=True)
class GameState:
    # --- RULES ENGINE API CALLED BY ENGINE / TOURNAMENT / CLI ---

    board: Board
    previous_boards: tuple[Board, ...] = ()
    history: tuple[int, ...] = ()  # fingerprints of every position reached, the current one included
    moves: tuple[Move, ...] = ()
    status: GameStatus = IN_PROGRESS
    _legal_moves: list[Move] = field(default_factory=list, compare=False, repr=False)

    @classmethod
    def new_game(cls) -> Self:
        """Standard initial position"""
        return cls.from_board(Board.starting_position())

    @classmethod
    def from_board(cls, board: Board) -> Self:
        """
        Start a game from any position. The position may already be terminal (ex. a checkmate set up for analysis).
        Raises BoardInvariantError for positions legal play cannot reach (see `validate_position`).
        """
        validate_position(board)
        return cls._evaluated(board, previous_boards=(), history=(board.fingerprint,), moves=())

    @classmethod
    def from_fen(cls, fen: str) -> Self:
        return cls.from_board(Board.from_fen(fen))

    @property
    def color_to_move(self) -> Color:
        return self.board.color_to_move

    @property
    def initial_board(self) -> Board:
        return self.previous_boards[0] if self.previous_boards else self.board

    @property
    def is_over(self) -> bool:
        return self.status.is_terminal

    def legal_moves(self) -> list[Move]:
        """
        Legal moves in generation order. Empty once the game is over, even for draws where the board itself still has moves.
        """
        if self.is_over:
            return []
        return list(self._legal_moves)

    def is_check(self) -> bool:
        return is_in_check(self.board)

    def apply(self, move: Move) -> Self:
        """
        Attempt to make a move
        -----
        1. the game must still be in progress (GameOverError otherwise)
        2. the move must be legal (IllegalMoveError otherwise)
        3. compute the successor board, extend the history
        4. update game status (if needed)
        """
        if self.is_over:
            raise GameOverError(f"Game is over: {self.status.describe()}")

        if move not in self._legal_moves:
            raise IllegalMoveError(f"Move not allowed: {move.to_uci()}")

        return self.play_unchecked(move)

    def play_unchecked(self, move: Move) -> Self:
        """
        Successor state without re-validating the move. Only for moves taken from `legal_moves()` of this very state
        (the search does this thousands of times).
        """
        new_board = self.board.make_move(move)
        return self._evaluated(
            new_board,
            previous_boards=self.previous_boards + (self.board,),
            history=self.history + (new_board.fingerprint,),
            moves=self.moves + (move,),
        )

    def undo(self) -> Self:
        """Take back the last move."""
        if not self.moves:
            raise GameStateError("No move to undo.")
        return self._evaluated(
            self.previous_boards[-1],
            previous_boards=self.previous_boards[:-1],
            history=self.history[:-1],
            moves=self.moves[:-1],
        )

    def repetition_count(self) -> int:
        """How often the current position occurred (this occurrence included)"""
        return self.history.count(self.board.fingerprint)

    def to_record(
        self, white: Optional[str] = None, black: Optional[str] = None
    ) -> GameRecord:
        """Encode into the format the tournament / persistence layers use"""
        return GameRecord(
            initial_fen=self.initial_board.to_fen(),
            final_fen=self.board.to_fen(),
            moves_uci=[move.to_uci() for move in self.moves],
            status=self.status.describe(),
            result=self.status.outcome,
            winner=self.status.winner.name.lower() if self.status.winner else None,
            white_engine=white,
            black_engine=black,
        )

    # -- PRIVATE HELPERS ---
    @classmethod
    def _evaluated(
        cls,
        board: Board,
        previous_boards: tuple[Board, ...],
        history: tuple[int, ...],
        moves: tuple[Move, ...],
    ) -> Self:
        """Build the state and determine its status. Legal moves are generated once and kept."""
        legal_moves = generate_legal_moves(board)
        status = _determine_status(board, legal_moves, history)
        return cls(
            board=board,
            previous_boards=previous_boards,
            history=history,
            moves=moves,
            status=status,
            _legal_moves=legal_moves,
        )


# --- POSITIONS A GAME CAN START FROM ---
def validate_position(board: Board) -> None:
    """
    Raise BoardInvariantError for positions legal play never produces:
    * a missing or extra king
    * the side that just moved left its king in check (the king could be captured)
    * an en passant target the opponent's last move cannot have created
    """
    board.validate()
    mover = board.color_to_move
    if is_in_check(board, mover.opponent):
        raise BoardInvariantError(
            f"The {mover.opponent.name.lower()} king is in check with {mover.name.lower()} to move: {board.to_fen()}"
        )

    target = board.en_passant_square
    if target is None:
        return
    # the opponent's pawn stands one step past the target, its start square one step before
    pushed_to = target.offset(0, mover.opponent.forward)
    pushed_from = target.offset(0, -mover.opponent.forward)
    pawn = board.piece(pushed_to) if pushed_to is not None else None
    if (
        pawn is None
        or pawn.type != PieceType.PAWN
        or pawn.color != mover.opponent
        or board.piece(target) is not None
        or pushed_from is None
        or board.piece(pushed_from) is not None
    ):
        raise BoardInvariantError(
            f"No double pawn push could have left en passant target {target}: {board.to_fen()}"
        )


# --- CHECKS FOR ENDING THE GAME ---
def _determine_status(
    board: Board, legal_moves: list[Move], history: tuple[int, ...]
) -> GameStatus:
    """
    Order matters: a mate delivered on the 100th half move is still a mate.
    """
    if not legal_moves:
        if is_in_check(board):
            return GameStatus(Status.CHECKMATE, winner=board.color_to_move.opponent)
        return GameStatus(Status.STALEMATE)

    if board.half_move_clock >= FIFTY_MOVE_HALF_MOVES:
        return GameStatus(Status.DRAW, draw_reason=DrawReason.FIFTY_MOVE)

    if history.count(board.fingerprint) >= REPETITIONS_FOR_DRAW:
        return GameStatus(Status.DRAW, draw_reason=DrawReason.THREEFOLD_REPETITION)

    if is_insufficient_material(board):
        return GameStatus(Status.DRAW, draw_reason=DrawReason.INSUFFICIENT_MATERIAL)

    return IN_PROGRESS


def is_insufficient_material(board: Board) -> bool:
    """K vs K, K+B vs K, K+N vs K, K+B vs K+B (bishops on the same square color)."""
    others = [
        (square, piece) for square, piece in board.pieces() if piece.type != PieceType.KING
    ]
    if not others:
        return True

    if len(others) == 1:
        return others[0][1].type in (PieceType.KNIGHT, PieceType.BISHOP)

    if len(others) == 2:
        (square_a, piece_a), (square_b, piece_b) = others
        return (
            piece_a.type == PieceType.BISHOP
            and piece_b.type == PieceType.BISHOP
            and piece_a.color != piece_b.color
            and square_a.is_light == square_b.is_light
        )
    return False


# --- FUNCTIONAL API ---
def new_game() -> GameState:
    return GameState.new_game()


def new_game_from(board: Board) -> GameState:
    return GameState.from_board(board)


def legal_moves(state: GameState) -> list[Move]:
    return state.legal_moves()


def apply(state: GameState, move: Move) -> GameState:
    """Raises IllegalMoveError or GameOverError, the original state stays untouched."""
    return state.apply(move)


def status(state: GameState) -> GameStatus:
    return state.status
