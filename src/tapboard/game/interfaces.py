"""Abstract interfaces and value types for the game layer.

The session controller depends on these ABCs, not on a concrete rules
engine, clock or player implementation.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Mapping, MutableMapping
from dataclasses import dataclass, field
from enum import IntEnum, auto

from tapboard.core.enums import Color, GameResult, PieceType
from tapboard.core.errors import IllegalMoveError
from tapboard.core.piece import Piece

# ── Game phase FSM states ────────────────────────────────────────────────────


class GamePhase(IntEnum):
    """Finite-state-machine states for a session."""

    NOT_STARTED = auto()
    IN_PROGRESS = auto()
    ENDED = auto()


class GameEndReason(IntEnum):
    """Why a game reached the ENDED phase."""

    CHECKMATE = auto()
    DRAW = auto()
    STALEMATE = auto()
    RESIGNATION = auto()
    TIMEOUT = auto()
    DRAW_AGREED = auto()


class DrawOffer(IntEnum):
    """Draw offer status between players."""

    NONE = 0
    OFFERED = auto()
    ACCEPTED = auto()
    DECLINED = auto()


@dataclass(frozen=True, slots=True)
class GameOutcome:
    """Terminal reason plus the side it concerns.

    ``side`` is the winner for CHECKMATE, the resigner for RESIGNATION and
    the loser for TIMEOUT.  It is ``None`` for the drawn reasons.
    """

    reason: GameEndReason
    side: Color | None = None

    @property
    def result(self) -> GameResult:
        if self.reason == GameEndReason.CHECKMATE and self.side is not None:
            winner = self.side
        elif (
            self.reason in (GameEndReason.RESIGNATION, GameEndReason.TIMEOUT)
            and self.side is not None
        ):
            winner = self.side.opposite
        else:
            return GameResult.DRAW
        return GameResult.WHITE_WINS if winner == Color.WHITE else GameResult.BLACK_WINS


# ── Time control policies ────────────────────────────────────────────────────


class TimeControl(ABC):
    """Clock policy: starting time plus the adjustment made after each move."""

    __slots__ = ()

    @property
    @abstractmethod
    def initial_seconds(self) -> float:
        """Time on each clock when the game starts."""

    @abstractmethod
    def after_move(self, remaining: MutableMapping[Color, float], mover: Color) -> None:
        """Adjust *remaining* once *mover* has completed a move."""

    # Presets named after the time-control menu entries
    @classmethod
    def blitz(cls) -> TimeControl:
        return Increment(180, 3)

    @classmethod
    def tempo(cls) -> TimeControl:
        return ResetPerMove(20)

    @classmethod
    def classic(cls) -> TimeControl:
        return ResetPerMove(60)

    @classmethod
    def from_name(cls, name: str | None) -> TimeControl | None:
        """Resolve ``blitz`` / ``tempo`` / ``classic`` / ``none``.

        ``None`` and ``"none"`` mean no clock.
        """
        if name is None or name == "none":
            return None
        presets = {"blitz": cls.blitz, "tempo": cls.tempo, "classic": cls.classic}
        try:
            return presets[name]()
        except KeyError:
            raise ValueError(f"Unknown time control: {name!r}") from None


class Increment(TimeControl):
    """Fixed budget; the mover gains *bonus* seconds after each move.

    Args:
        base: Starting time per player.
        bonus: Per-move increment (Fischer).
    """

    __slots__ = ("base", "bonus")

    def __init__(self, base: float, bonus: float = 0.0) -> None:
        if base <= 0 or bonus < 0:
            raise ValueError(f"Invalid increment control: {base}+{bonus}")
        self.base = base
        self.bonus = bonus

    @property
    def initial_seconds(self) -> float:
        return self.base

    def after_move(self, remaining: MutableMapping[Color, float], mover: Color) -> None:
        remaining[mover] += self.bonus

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Increment):
            return NotImplemented
        return (self.base, self.bonus) == (other.base, other.bonus)

    def __hash__(self) -> int:
        return hash((Increment, self.base, self.bonus))

    def __repr__(self) -> str:
        mins = self.base / 60
        if self.bonus:
            return f"Increment({mins:.0f}m+{self.bonus:.0f}s)"
        return f"Increment({mins:.0f}m)"


class ResetPerMove(TimeControl):
    """Each turn starts with the full *allowance*; unused time is not carried."""

    __slots__ = ("allowance",)

    def __init__(self, allowance: float) -> None:
        if allowance <= 0:
            raise ValueError(f"Invalid per-move allowance: {allowance}")
        self.allowance = allowance

    @property
    def initial_seconds(self) -> float:
        return self.allowance

    def after_move(self, remaining: MutableMapping[Color, float], mover: Color) -> None:
        # The mover's clock keeps its unused time as a record of the turn.
        remaining[mover.opposite] = self.allowance

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ResetPerMove):
            return NotImplemented
        return self.allowance == other.allowance

    def __hash__(self) -> int:
        return hash((ResetPerMove, self.allowance))

    def __repr__(self) -> str:
        return f"ResetPerMove({self.allowance:.0f}s)"


# ── Rules oracle contract ────────────────────────────────────────────────────


@dataclass(frozen=True, slots=True)
class PositionSnapshot:
    """Read-only picture of the oracle's position.

    ``pieces`` maps square names (``"e4"``) to their occupant.
    """

    fen: str
    side_to_move: Color
    pieces: Mapping[str, Piece] = field(default_factory=dict)

    def piece_at(self, square: str) -> Piece | None:
        return self.pieces.get(square)


@dataclass(frozen=True, slots=True)
class OracleStatus:
    in_check: bool = False
    in_checkmate: bool = False
    in_stalemate: bool = False
    in_draw: bool = False

    @property
    def is_terminal(self) -> bool:
        return self.in_checkmate or self.in_stalemate or self.in_draw


@dataclass(frozen=True, slots=True)
class Applied:
    """The oracle accepted and applied a move."""

    snapshot: PositionSnapshot
    san: str = ""


@dataclass(frozen=True, slots=True)
class Rejected:
    """The oracle refused a move; the position is unchanged."""

    error: IllegalMoveError


MoveResult = Applied | Rejected


class IRulesOracle(ABC):
    """Chess rules provider: legality, move application, terminal states.

    Implementations may raise :class:`~tapboard.core.errors.OracleUnavailable`
    from any method when the underlying collaborator fails.
    """

    @abstractmethod
    def reset(self, fen: str | None = None) -> None:
        """Start over from *fen* (or the standard initial position)."""

    @abstractmethod
    def snapshot(self) -> PositionSnapshot:
        """Current position."""

    @abstractmethod
    def legal_moves(self, from_square: str) -> frozenset[str]:
        """Destinations reachable from *from_square*; empty if none."""

    @abstractmethod
    def apply_move(
        self,
        from_square: str,
        to_square: str,
        promotion: PieceType | None = None,
    ) -> MoveResult:
        """Apply a move, returning :class:`Applied` or :class:`Rejected`."""

    @abstractmethod
    def status(self, snapshot: PositionSnapshot) -> OracleStatus:
        """Check / checkmate / stalemate / draw flags for *snapshot*."""


# ── Players ──────────────────────────────────────────────────────────────────


class IPlayer(ABC):
    """Interface for a game participant (local human, remote peer or AI)."""

    @property
    @abstractmethod
    def color(self) -> Color: ...

    @property
    @abstractmethod
    def name(self) -> str: ...

    @property
    @abstractmethod
    def is_human(self) -> bool: ...

    @abstractmethod
    def request_move(self, snapshot: PositionSnapshot) -> None:
        """Ask the participant for a move in *snapshot*.

        Moves come back through ``SessionController.submit_move``.
        """

    @abstractmethod
    def cancel(self) -> None:
        """Abandon a pending move request."""


# ── Clock ────────────────────────────────────────────────────────────────────


class IClock(ABC):
    """Interface for a tick-driven chess clock."""

    @abstractmethod
    def start(self, color: Color) -> None:
        """Reset both clocks and start counting for *color*."""

    @abstractmethod
    def stop(self) -> None:
        """Stop counting; idempotent."""

    @abstractmethod
    def tick(self, elapsed: float) -> Color | None:
        """Charge *elapsed* seconds to the active side.

        Returns the side whose flag fell, once, or ``None``.
        """

    @abstractmethod
    def on_move_committed(self, mover: Color) -> None:
        """Apply the post-move adjustment and hand the clock to the opponent."""

    @abstractmethod
    def remaining(self, color: Color) -> float:
        """Seconds remaining for *color*."""
