"""Board positions and file/rank notation.

Positions are board-relative and independent of orientation:

    row 0 = rank 8, row 7 = rank 1
    col 0 = file a, col 7 = file h

So ``Position(0, 0)`` is a8 and ``Position(7, 4)`` is e1.
"""

from __future__ import annotations

from dataclasses import dataclass

from tapboard.core.enums import Color
from tapboard.core.errors import InvalidNotation

BOARD_SIZE = 8
FILES = "abcdefgh"
RANKS = "12345678"


@dataclass(frozen=True, slots=True, order=True)
class Position:
    """A square as (row, col), both 0–7."""

    row: int
    col: int

    def __post_init__(self) -> None:
        if not (0 <= self.row < BOARD_SIZE and 0 <= self.col < BOARD_SIZE):
            raise ValueError(f"Position out of range: ({self.row}, {self.col})")

    def __str__(self) -> str:
        return to_notation(self)


def to_notation(pos: Position) -> str:
    """Position → square name, e.g. ``Position(4, 4)`` → ``'e4'``."""
    return FILES[pos.col] + str(BOARD_SIZE - pos.row)


def from_notation(square: str) -> Position:
    """Square name → Position, e.g. ``'e4'`` → ``Position(4, 4)``."""
    if (
        not isinstance(square, str)
        or len(square) != 2
        or square[0] not in FILES
        or square[1] not in RANKS
    ):
        raise InvalidNotation(square)
    return Position(BOARD_SIZE - int(square[1]), FILES.index(square[0]))


def is_last_rank(pos: Position) -> bool:
    """True for rank 8 or rank 1."""
    return pos.row in (0, BOARD_SIZE - 1)


def display_order(orientation: Color) -> list[Position]:
    """Squares in rendering order, top-left to bottom-right.

    White at the bottom renders rank 8 first with files a→h; Black at the
    bottom reverses both axes.
    """
    order = range(BOARD_SIZE)
    if orientation == Color.BLACK:
        order = range(BOARD_SIZE - 1, -1, -1)
    return [Position(r, c) for r in order for c in order]
