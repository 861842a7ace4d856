"""Piece value object."""

from __future__ import annotations

from dataclasses import dataclass

from tapboard.core.enums import Color, PieceType

_LETTERS = "pnbrqk"


@dataclass(frozen=True, slots=True)
class Piece:
    """Immutable occupant of a square."""

    color: Color
    piece_type: PieceType

    def __str__(self) -> str:
        """FEN letter (uppercase = white, lowercase = black)."""
        letter = _LETTERS[self.piece_type - 1]
        return letter.upper() if self.color == Color.WHITE else letter

    @classmethod
    def from_char(cls, char: str) -> Piece:
        """Create piece from FEN letter, e.g. 'N' → white knight."""
        if len(char) != 1 or char.lower() not in _LETTERS:
            raise ValueError(f"Invalid piece character: {char!r}")
        color = Color.WHITE if char.isupper() else Color.BLACK
        return cls(color, PieceType(_LETTERS.index(char.lower()) + 1))
