"""Core value types: colors, pieces, positions, notation and errors."""

from tapboard.core.coords import (
    Position,
    display_order,
    from_notation,
    is_last_rank,
    to_notation,
)
from tapboard.core.enums import Color, GameMode, GameResult, PieceType
from tapboard.core.errors import (
    IllegalMoveError,
    InvalidNotation,
    OracleUnavailable,
    TapboardError,
)
from tapboard.core.piece import Piece

__all__ = [
    "Color",
    "GameMode",
    "GameResult",
    "IllegalMoveError",
    "InvalidNotation",
    "OracleUnavailable",
    "Piece",
    "PieceType",
    "Position",
    "TapboardError",
    "display_order",
    "from_notation",
    "is_last_rank",
    "to_notation",
]
