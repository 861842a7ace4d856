"""Tick-driven chess clock with increment and reset-per-move policies."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import IntEnum, auto

from tapboard.core.enums import Color
from tapboard.game.interfaces import IClock, TimeControl

_LOGGER = logging.getLogger(__name__)


class ClockStatus(IntEnum):
    STOPPED = auto()
    RUNNING = auto()
    EXPIRED = auto()


@dataclass(frozen=True, slots=True)
class ClockState:
    """Read-only view of the clock."""

    white_remaining: float
    black_remaining: float
    side_to_move: Color | None
    status: ClockStatus
    expired_side: Color | None = None

    @property
    def running(self) -> bool:
        return self.status == ClockStatus.RUNNING

    def remaining(self, color: Color) -> float:
        return self.white_remaining if color == Color.WHITE else self.black_remaining


class ClockEngine(IClock):
    """Dual chess clock advanced by explicit :meth:`tick` calls.

    Only the active side is ever charged.  Reaching zero moves the clock to
    EXPIRED, which accepts no further ticks; :meth:`tick` reports the fallen
    side exactly once.
    """

    __slots__ = (
        "_time_control",
        "_remaining",
        "_active_color",
        "_status",
        "_expired_side",
    )

    def __init__(self, time_control: TimeControl) -> None:
        self._time_control = time_control
        self._remaining: dict[Color, float] = {
            Color.WHITE: float(time_control.initial_seconds),
            Color.BLACK: float(time_control.initial_seconds),
        }
        self._active_color: Color | None = None
        self._status = ClockStatus.STOPPED
        self._expired_side: Color | None = None

    # ── IClock implementation ────────────────────────────────────────────

    def start(self, color: Color) -> None:
        initial = float(self._time_control.initial_seconds)
        self._remaining[Color.WHITE] = initial
        self._remaining[Color.BLACK] = initial
        self._active_color = color
        self._expired_side = None
        self._status = ClockStatus.RUNNING

    def stop(self) -> None:
        self._status = ClockStatus.STOPPED

    def tick(self, elapsed: float) -> Color | None:
        if elapsed < 0:
            raise ValueError(f"Elapsed time must be non-negative, got {elapsed}")
        color = self._active_color
        if self._status != ClockStatus.RUNNING or color is None:
            return None

        left = max(0.0, self._remaining[color] - elapsed)
        self._remaining[color] = left
        if left > 0.0:
            return None

        self._status = ClockStatus.EXPIRED
        self._expired_side = color
        _LOGGER.info("Flag fell for %s", color)
        return color

    def on_move_committed(self, mover: Color) -> None:
        if self._status != ClockStatus.RUNNING:
            return
        if mover != self._active_color:
            raise ValueError(f"{mover} moved while {self._active_color} was on the clock")
        self._time_control.after_move(self._remaining, mover)
        self._active_color = mover.opposite

    def remaining(self, color: Color) -> float:
        return max(0.0, self._remaining[color])

    # ── Extra helpers ────────────────────────────────────────────────────

    @property
    def time_control(self) -> TimeControl:
        return self._time_control

    @property
    def status(self) -> ClockStatus:
        return self._status

    @property
    def is_running(self) -> bool:
        return self._status == ClockStatus.RUNNING

    @property
    def active_color(self) -> Color | None:
        return self._active_color

    @property
    def expired_side(self) -> Color | None:
        return self._expired_side if self._status == ClockStatus.EXPIRED else None

    @property
    def state(self) -> ClockState:
        return ClockState(
            white_remaining=self.remaining(Color.WHITE),
            black_remaining=self.remaining(Color.BLACK),
            side_to_move=self._active_color,
            status=self._status,
            expired_side=self.expired_side,
        )
