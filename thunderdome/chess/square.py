"""
A square on the board

(placed in its own module as multiple other modules need to import it)
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

# Chess board is always 8x8.
BOARD_DIMENSIONS = (8, 8)
FILE_NAMES = "abcdefgh"


@dataclass(frozen=True, slots=True)
class Square:
    """Zero based coordinates: a1 is (0, 0), h8 is (7, 7)"""

    file: int
    rank: int

    def __post_init__(self) -> None:
        # NOTE: never wrap around the edge of the board. Stepping off the board is done through `offset()` which returns None.
        if not is_within_bounds(self.file, self.rank):
            raise ValueError(f"Square out of bounds: file={self.file}, rank={self.rank}")

    @classmethod
    def from_algebraic(cls, sq: str) -> Square:
        """Algebraic notation: 'a1' - 'h8' get converted to (0,0) - (7,7)"""
        if len(sq) != 2 or sq[0] not in FILE_NAMES or not sq[1].isdigit():
            raise ValueError(f"Not a square name: {sq!r}")
        return cls(FILE_NAMES.index(sq[0]), int(sq[1]) - 1)

    @classmethod
    def from_index(cls, index: int) -> Square:
        return SQUARES[index]

    def to_algebraic(self) -> str:
        return f"{FILE_NAMES[self.file]}{self.rank + 1}"

    @property
    def index(self) -> int:
        """Position in the 64 slot placement: a1=0, b1=1, ..., h8=63"""
        return self.rank * BOARD_DIMENSIONS[0] + self.file

    @property
    def is_light(self) -> bool:
        return (self.file + self.rank) % 2 == 1

    def offset(self, df: int, dr: int) -> Optional[Square]:
        """The square `df` files and `dr` ranks away. None is the off-board marker."""
        file = self.file + df
        rank = self.rank + dr
        if not is_within_bounds(file, rank):
            return None
        return SQUARES[rank * BOARD_DIMENSIONS[0] + file]

    def __str__(self) -> str:
        return self.to_algebraic()


def is_within_bounds(file: int, rank: int) -> bool:
    return (0 <= file < BOARD_DIMENSIONS[0]) and (0 <= rank < BOARD_DIMENSIONS[1])


# every square, in index order (a1, b1, ..., h8)
SQUARES: tuple[Square, ...] = tuple(
    Square(file, rank)
    for rank in range(BOARD_DIMENSIONS[1])
    for file in range(BOARD_DIMENSIONS[0])
)
