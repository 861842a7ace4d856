"""Exception hierarchy."""

from __future__ import annotations


class TapboardError(Exception):
    """Base class for all tapboard errors."""


class InvalidNotation(TapboardError, ValueError):
    """A square string is not one file letter a–h followed by one rank digit 1–8."""

    def __init__(self, square: object) -> None:
        super().__init__(f"Invalid square name: {square!r}")
        self.square = square


class IllegalMoveError(TapboardError):
    """The rules oracle refused to apply a move."""

    def __init__(self, from_square: str, to_square: str, reason: str = "") -> None:
        message = f"Illegal move {from_square}{to_square}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)
        self.from_square = from_square
        self.to_square = to_square


class OracleUnavailable(TapboardError):
    """The rules oracle could not be reached or failed internally."""
