"""User-configurable settings consumed by a session."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, fields
from typing import Any

from tapboard.core.enums import PieceType


@dataclass
class GameSettings:
    """Presentation and default-move preferences.

    None of these affect legality.
    """

    # Moves
    auto_promote_to_queen: bool = True
    promotion_piece: PieceType = PieceType.QUEEN

    # Board
    show_valid_moves: bool = True
    show_coordinates: bool = False

    # Feedback
    sound_enabled: bool = True
    vibration_enabled: bool = True

    @property
    def default_promotion(self) -> PieceType:
        if self.auto_promote_to_queen:
            return PieceType.QUEEN
        return self.promotion_piece

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> GameSettings:
        """Build settings from stored key/values, ignoring unknown keys.

        Accepts both ``snake_case`` and the ``camelCase`` keys of the stored
        settings blob.
        """
        known = {f.name for f in fields(cls)}
        values: dict[str, Any] = {}
        for key, value in data.items():
            name = _snake_case(key)
            if name in known:
                values[name] = value
        if "promotion_piece" in values:
            values["promotion_piece"] = _piece_type(values["promotion_piece"])
        return cls(**values)


def _snake_case(key: str) -> str:
    return "".join(f"_{ch.lower()}" if ch.isupper() else ch for ch in key)


def _piece_type(value: Any) -> PieceType:
    if isinstance(value, str):
        try:
            return PieceType[value.upper()]
        except KeyError:
            raise ValueError(f"Unknown promotion piece: {value!r}") from None
    return PieceType(value)
