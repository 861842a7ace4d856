"""Tap-to-select / tap-to-move state machine.

The engine owns the current :class:`Selection` and decides, for each tap,
whether to ignore it, select a piece, commit a move or clear.  It never
talks to the rules oracle directly; legal destinations come from the
``legal_destinations`` query supplied in the :class:`TapContext`.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass

from tapboard.core.coords import Position, is_last_rank
from tapboard.core.enums import Color, PieceType
from tapboard.core.piece import Piece
from tapboard.game.interfaces import GamePhase


@dataclass(frozen=True, slots=True)
class Selection:
    origin: Position
    destinations: frozenset[Position]


# ── Actions ──────────────────────────────────────────────────────────────────


@dataclass(frozen=True, slots=True)
class Ignore:
    """Tap had no effect."""


@dataclass(frozen=True, slots=True)
class Select:
    origin: Position
    destinations: frozenset[Position]


@dataclass(frozen=True, slots=True)
class ClearSelection:
    """Drop whatever is selected."""


@dataclass(frozen=True, slots=True)
class CommitMove:
    origin: Position
    destination: Position
    promotion: PieceType | None = None


Action = Ignore | Select | ClearSelection | CommitMove


@dataclass(frozen=True, slots=True)
class TapContext:
    """Everything a tap decision depends on.

    ``controlled_side`` is ``None`` when the taps act for whichever side is
    to move (local play); otherwise taps are restricted to that side.
    """

    phase: GamePhase
    side_to_move: Color
    occupancy: Mapping[Position, Piece]
    legal_destinations: Callable[[Position], frozenset[Position]]
    controlled_side: Color | None = None

    @property
    def acting_side(self) -> Color:
        if self.controlled_side is None:
            return self.side_to_move
        return self.controlled_side

    @property
    def on_turn(self) -> bool:
        return self.acting_side == self.side_to_move


class SelectionEngine:
    """Owns the selection and maps taps to :data:`Action` values."""

    __slots__ = ("_selection", "_promotion")

    def __init__(self, promotion: PieceType = PieceType.QUEEN) -> None:
        self._selection: Selection | None = None
        self._promotion = promotion

    @property
    def selection(self) -> Selection | None:
        return self._selection

    @property
    def promotion(self) -> PieceType:
        return self._promotion

    @promotion.setter
    def promotion(self, piece_type: PieceType) -> None:
        self._promotion = piece_type

    def handle_tap(self, pos: Position, context: TapContext) -> Action:
        """Decide what a tap on *pos* means.  Does not change the selection."""
        if context.phase != GamePhase.IN_PROGRESS:
            return Ignore()

        piece = context.occupancy.get(pos)
        own_piece = piece is not None and piece.color == context.acting_side
        selection = self._selection

        # Off-turn in a restricted mode: only the player's own pieces respond.
        if selection is None and not context.on_turn and not own_piece:
            return Ignore()

        if selection is not None:
            if context.on_turn and pos in selection.destinations:
                return CommitMove(
                    selection.origin,
                    pos,
                    self.promotion_for(context.occupancy.get(selection.origin), pos),
                )
            if pos == selection.origin:
                return ClearSelection()

        if own_piece:
            destinations = frozenset(context.legal_destinations(pos))
            if destinations:
                return Select(pos, destinations)

        return ClearSelection()

    def apply(self, action: Action) -> None:
        """Reflect a Select / ClearSelection decision in the selection."""
        if isinstance(action, Select):
            self._selection = Selection(action.origin, action.destinations)
        elif isinstance(action, ClearSelection):
            self._selection = None

    def clear(self) -> None:
        self._selection = None

    def promotion_for(self, piece: Piece | None, destination: Position) -> PieceType | None:
        if piece is not None and piece.piece_type == PieceType.PAWN and is_last_rank(destination):
            return self._promotion
        return None
