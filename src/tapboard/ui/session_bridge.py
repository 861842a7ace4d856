"""Qt bridge: drives session clock ticks from a QTimer and re-emits events."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable

from PyQt6.QtCore import QObject, QTimer, pyqtSignal, pyqtSlot

from tapboard.core.coords import Position
from tapboard.core.enums import Color
from tapboard.game.interfaces import GameEndReason, GameOutcome, GamePhase
from tapboard.game.session import MoveRecord, SessionController, SessionView

_LOGGER = logging.getLogger(__name__)


class SessionBridge(QObject):
    """Main-thread adapter between a :class:`SessionController` and widgets.

    The timer measures real elapsed time with a monotonic clock and feeds
    it to ``SessionController.tick``; Qt delivers timeouts on the owning
    thread's event loop, so ticks never interleave with taps.
    """

    view_changed = pyqtSignal(object)
    move_made = pyqtSignal(object)
    game_over = pyqtSignal(object)
    move_failed = pyqtSignal(str)

    def __init__(
        self,
        session: SessionController,
        *,
        interval_ms: int = 1000,
        time_source: Callable[[], float] = time.monotonic,
        parent: QObject | None = None,
    ) -> None:
        super().__init__(parent)
        self._session = session
        self._time_source = time_source
        self._last_tick = 0.0

        self._timer = QTimer(self)
        self._timer.setInterval(interval_ms)
        self._timer.timeout.connect(self._on_timeout)

        session.events.on_changed.append(self._on_changed)
        session.events.on_move.append(self._on_move)
        session.events.on_game_over.append(self._on_game_over)
        session.events.on_error.append(self.move_failed.emit)

    @property
    def session(self) -> SessionController:
        return self._session

    @property
    def is_ticking(self) -> bool:
        return self._timer.isActive()

    def start_ticking(self) -> None:
        self._last_tick = self._time_source()
        self._timer.start()

    def stop_ticking(self) -> None:
        self._timer.stop()

    # ── Commands from widgets ────────────────────────────────────────────

    @pyqtSlot(int, int)
    def tap(self, row: int, col: int) -> None:
        self._session.tap(Position(row, col))

    @pyqtSlot(int)
    def resign(self, color: int) -> None:
        self._session.resign(Color(color))

    @pyqtSlot()
    def offer_draw(self) -> None:
        self._session.offer_draw()

    @pyqtSlot()
    def accept_draw(self) -> None:
        self._session.accept_draw()

    @pyqtSlot()
    def decline_draw(self) -> None:
        self._session.decline_draw()

    @pyqtSlot()
    def flip_board(self) -> None:
        self._session.flip_board()

    def shutdown(self) -> None:
        """Stop the timer and close the session."""
        self.stop_ticking()
        self._session.close()

    # ── Session callbacks ────────────────────────────────────────────────

    def _on_timeout(self) -> None:
        now = self._time_source()
        elapsed = max(0.0, now - self._last_tick)
        self._last_tick = now
        self._session.tick(elapsed)

    def _on_changed(self, view: SessionView) -> None:
        clock_running = view.clock is not None and view.clock.running
        if view.phase == GamePhase.IN_PROGRESS and clock_running:
            if not self.is_ticking:
                self.start_ticking()
        elif self.is_ticking:
            self.stop_ticking()
        self.view_changed.emit(view)

    def _on_move(self, record: MoveRecord) -> None:
        self.move_made.emit(record)

    def _on_game_over(self, outcome: GameOutcome) -> None:
        self.stop_ticking()
        _LOGGER.debug("Bridge stopped ticking: %s", outcome.reason.name)
        self.game_over.emit(outcome)


# ── Status text ──────────────────────────────────────────────────────────────


def _side_name(color: Color) -> str:
    return "White" if color == Color.WHITE else "Black"


def format_seconds(seconds: float) -> str:
    """Clock display, ``m:ss`` (with tenths under ten minutes)."""
    s = max(0.0, seconds)
    mins = int(s) // 60
    secs = int(s) % 60
    tenths = int((s * 10) % 10)
    if mins >= 10:
        return f"{mins}:{secs:02d}"
    return f"{mins}:{secs:02d}.{tenths}"


def outcome_text(outcome: GameOutcome) -> str:
    reason = outcome.reason
    if reason == GameEndReason.STALEMATE:
        return "Draw by stalemate"
    if reason == GameEndReason.DRAW_AGREED:
        return "Draw by agreement"
    if reason == GameEndReason.DRAW:
        return "Draw"

    side = outcome.side if outcome.side is not None else Color.WHITE
    if reason == GameEndReason.CHECKMATE:
        return f"{_side_name(side)} wins by checkmate"
    if reason == GameEndReason.RESIGNATION:
        return f"{_side_name(side.opposite)} wins, {_side_name(side)} resigned"
    return f"{_side_name(side.opposite)} wins on time"


def status_text(view: SessionView) -> str:
    """One-line status for the board footer."""
    if view.phase == GamePhase.NOT_STARTED:
        return "Not started"
    if view.outcome is not None:
        return f"Game over: {outcome_text(view.outcome)}"

    text = f"{_side_name(view.side_to_move)}'s turn"
    if view.in_check:
        text += " | Check!"
    if view.last_error:
        text += f" | {view.last_error}"
    return text
