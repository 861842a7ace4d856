"""SessionController: the central orchestrator of a tap-driven game.

Coordinates: SelectionEngine, ClockEngine, the rules oracle and an optional
remote/AI opponent.  Emits events via simple callbacks so the UI / tests can
subscribe.
"""

from __future__ import annotations

import logging
from collections import deque
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from tapboard.core.coords import Position, from_notation, to_notation
from tapboard.core.enums import Color, GameMode, GameResult, PieceType
from tapboard.core.errors import InvalidNotation, OracleUnavailable
from tapboard.core.piece import Piece
from tapboard.game.clock import ClockEngine, ClockState
from tapboard.game.interfaces import (
    DrawOffer,
    GameEndReason,
    GameOutcome,
    GamePhase,
    IPlayer,
    IRulesOracle,
    OracleStatus,
    PositionSnapshot,
    Rejected,
    TimeControl,
)
from tapboard.game.oracle import ChessOracle
from tapboard.game.selection import (
    Action,
    ClearSelection,
    CommitMove,
    Ignore,
    Selection,
    SelectionEngine,
    TapContext,
)
from tapboard.game.settings import GameSettings

_LOGGER = logging.getLogger(__name__)

RETRY_MESSAGE = "Move not applied, try again"


@dataclass(frozen=True, slots=True)
class MoveRecord:
    """A single entry in the move history."""

    side: Color
    origin: Position
    destination: Position
    san: str
    fen_after: str
    promotion: PieceType | None = None

    @property
    def from_square(self) -> str:
        return to_notation(self.origin)

    @property
    def to_square(self) -> str:
        return to_notation(self.destination)


@dataclass(frozen=True, slots=True)
class SessionView:
    """Read-only picture of a session for rendering."""

    phase: GamePhase
    mode: GameMode
    side_to_move: Color
    orientation: Color
    selection: Selection | None
    highlighted: frozenset[Position]
    clock: ClockState | None
    outcome: GameOutcome | None
    in_check: bool
    draw_offer: DrawOffer
    last_error: str | None
    move_count: int

    @property
    def is_game_over(self) -> bool:
        return self.phase == GamePhase.ENDED

    @property
    def result(self) -> GameResult:
        if self.outcome is None:
            return GameResult.IN_PROGRESS
        return self.outcome.result


# ── Event definitions ────────────────────────────────────────────────────────

ChangedCallback = Callable[[SessionView], None]
MoveCallback = Callable[[MoveRecord], None]
GameOverCallback = Callable[[GameOutcome], None]
ErrorCallback = Callable[[str], None]


@dataclass
class SessionEvents:
    """Observable callbacks. Multiple handlers per event."""

    on_changed: list[ChangedCallback] = field(default_factory=list)
    on_move: list[MoveCallback] = field(default_factory=list)
    on_game_over: list[GameOverCallback] = field(default_factory=list)
    on_error: list[ErrorCallback] = field(default_factory=list)


# ── Controller ───────────────────────────────────────────────────────────────


class SessionController:
    """Runs one game: taps, clock ticks, resignations and draws.

    Every command is a serialized transition.  A command issued from inside
    another transition (a listener, or an opponent answering synchronously)
    is queued and runs once the current transition has finished; such a
    deferred call returns ``None``.
    """

    __slots__ = (
        "_oracle",
        "_settings",
        "_selection",
        "_clock",
        "_snapshot",
        "_phase",
        "_outcome",
        "_side_to_move",
        "_mode",
        "_player_side",
        "_orientation",
        "_opponent",
        "_in_check",
        "_draw_offer",
        "_draw_offer_by",
        "_last_error",
        "_history",
        "_pending",
        "_dispatching",
        "_closed",
        "events",
    )

    def __init__(
        self,
        oracle: IRulesOracle | None = None,
        settings: GameSettings | None = None,
    ) -> None:
        self._oracle = oracle if oracle is not None else ChessOracle()
        self._settings = settings if settings is not None else GameSettings()
        self._selection = SelectionEngine(self._settings.default_promotion)
        self._clock: ClockEngine | None = None
        self._snapshot: PositionSnapshot | None = None
        self._phase = GamePhase.NOT_STARTED
        self._outcome: GameOutcome | None = None
        self._side_to_move = Color.WHITE
        self._mode = GameMode.LOCAL
        self._player_side = Color.WHITE
        self._orientation = Color.WHITE
        self._opponent: IPlayer | None = None
        self._in_check = False
        self._draw_offer = DrawOffer.NONE
        self._draw_offer_by: Color | None = None
        self._last_error: str | None = None
        self._history: list[MoveRecord] = []
        self._pending: deque[tuple[Callable[..., Any], tuple[Any, ...]]] = deque()
        self._dispatching = False
        self._closed = False
        self.events = SessionEvents()

    # ── Properties ───────────────────────────────────────────────────────

    @property
    def phase(self) -> GamePhase:
        return self._phase

    @property
    def outcome(self) -> GameOutcome | None:
        return self._outcome

    @property
    def side_to_move(self) -> Color:
        return self._side_to_move

    @property
    def selection(self) -> Selection | None:
        return self._selection.selection

    @property
    def clock(self) -> ClockEngine | None:
        return self._clock

    @property
    def mode(self) -> GameMode:
        return self._mode

    @property
    def player_side(self) -> Color:
        return self._player_side

    @property
    def orientation(self) -> Color:
        return self._orientation

    @property
    def snapshot(self) -> PositionSnapshot | None:
        return self._snapshot

    @property
    def history(self) -> list[MoveRecord]:
        return list(self._history)

    @property
    def is_closed(self) -> bool:
        return self._closed

    @property
    def settings(self) -> GameSettings:
        return self._settings

    @settings.setter
    def settings(self, settings: GameSettings) -> None:
        self._settings = settings
        self._selection.promotion = settings.default_promotion

    @property
    def controlled_side(self) -> Color | None:
        """Side the taps act for; ``None`` in local play (both sides)."""
        if self._mode == GameMode.LOCAL:
            return None
        return self._player_side

    @property
    def view(self) -> SessionView:
        selection = self._selection.selection
        highlighted: frozenset[Position] = frozenset()
        if selection is not None and self._settings.show_valid_moves:
            highlighted = selection.destinations
        return SessionView(
            phase=self._phase,
            mode=self._mode,
            side_to_move=self._side_to_move,
            orientation=self._orientation,
            selection=selection,
            highlighted=highlighted,
            clock=self._clock.state if self._clock is not None else None,
            outcome=self._outcome,
            in_check=self._in_check,
            draw_offer=self._draw_offer,
            last_error=self._last_error,
            move_count=len(self._history),
        )

    # ── Commands ─────────────────────────────────────────────────────────

    def new_game(
        self,
        mode: GameMode = GameMode.LOCAL,
        player_side: Color = Color.WHITE,
        time_control: TimeControl | None = None,
        opponent: IPlayer | None = None,
        fen: str | None = None,
    ) -> None:
        """Set up a new game and start the clock, if any."""
        if opponent is not None and opponent.color == player_side:
            raise ValueError(f"Opponent cannot play the player's side ({player_side})")
        self._dispatch(self._handle_new_game, mode, player_side, time_control, opponent, fen)

    def tap(self, pos: Position) -> Action | None:
        """Handle a tap on a board square."""
        return self._dispatch(self._handle_tap, pos)

    def tick(self, elapsed: float) -> None:
        """Charge *elapsed* seconds to the side on the clock."""
        self._dispatch(self._handle_tick, elapsed)

    def submit_move(self, from_square: str, to_square: str) -> bool | None:
        """Move made by the remote or AI opponent. Returns True if applied."""
        return self._dispatch(self._handle_submit_move, from_square, to_square)

    def resign(self, color: Color) -> None:
        self._dispatch(self._handle_end, GameOutcome(GameEndReason.RESIGNATION, color))

    def draw_agreed(self) -> None:
        self._dispatch(self._handle_end, GameOutcome(GameEndReason.DRAW_AGREED))

    def offer_draw(self, color: Color | None = None) -> None:
        """Offer a draw on behalf of *color* (default: the acting side)."""
        self._dispatch(self._handle_offer_draw, color)

    def accept_draw(self, color: Color | None = None) -> None:
        """Accept a pending offer on behalf of *color* (default: the other side)."""
        self._dispatch(self._handle_accept_draw, color)

    def decline_draw(self) -> None:
        self._dispatch(self._handle_decline_draw)

    def flip_board(self) -> None:
        self._dispatch(self._handle_flip_board)

    def close(self) -> None:
        """Tear the session down: stop the clock and drop queued input."""
        if self._closed:
            return
        self._closed = True
        self._pending.clear()
        if self._clock is not None:
            self._clock.stop()
        self._cancel_opponent_request()
        _LOGGER.debug("Session closed")

    # ── Transition handlers ──────────────────────────────────────────────

    def _handle_new_game(
        self,
        mode: GameMode,
        player_side: Color,
        time_control: TimeControl | None,
        opponent: IPlayer | None,
        fen: str | None,
    ) -> None:
        self._cancel_opponent_request()
        self._oracle.reset(fen)
        self._snapshot = self._oracle.snapshot()

        self._mode = GameMode(mode)
        self._player_side = player_side
        self._orientation = player_side
        self._opponent = opponent if self._mode != GameMode.LOCAL else None
        self._side_to_move = self._snapshot.side_to_move
        self._selection.clear()
        self._history.clear()
        self._outcome = None
        self._in_check = self._oracle.status(self._snapshot).in_check
        self._draw_offer = DrawOffer.NONE
        self._draw_offer_by = None
        self._last_error = None

        self._clock = ClockEngine(time_control) if time_control is not None else None
        if self._clock is not None:
            self._clock.start(self._side_to_move)

        self._phase = GamePhase.IN_PROGRESS
        _LOGGER.info(
            "New %s game, %s to move, time control %r",
            self._mode,
            self._side_to_move,
            time_control,
        )
        self._emit_changed()
        self._prompt_opponent()

    def _handle_tap(self, pos: Position) -> Action:
        context = TapContext(
            phase=self._phase,
            side_to_move=self._side_to_move,
            occupancy=self._occupancy(),
            legal_destinations=self._legal_destinations,
            controlled_side=self.controlled_side,
        )
        try:
            action = self._selection.handle_tap(pos, context)
        except OracleUnavailable as exc:
            self._oracle_failed(exc)
            return ClearSelection()

        if isinstance(action, Ignore):
            return action
        if isinstance(action, CommitMove):
            self._commit(action.origin, action.destination, action.promotion)
            return action

        self._selection.apply(action)
        self._emit_changed()
        return action

    def _handle_submit_move(self, from_square: str, to_square: str) -> bool:
        if self._phase != GamePhase.IN_PROGRESS:
            return False
        if self._mode == GameMode.LOCAL or self._side_to_move == self._player_side:
            _LOGGER.warning(
                "Ignoring opponent move %s%s: not the opponent's turn",
                from_square,
                to_square,
            )
            return False
        try:
            origin = from_notation(from_square)
            destination = from_notation(to_square)
        except InvalidNotation as exc:
            _LOGGER.warning("Ignoring opponent move: %s", exc)
            return False

        piece = self._snapshot.piece_at(from_square) if self._snapshot else None
        promotion = self._selection.promotion_for(piece, destination)
        return self._commit(origin, destination, promotion)

    def _handle_tick(self, elapsed: float) -> None:
        if self._phase != GamePhase.IN_PROGRESS or self._clock is None:
            return
        fallen = self._clock.tick(elapsed)
        if fallen is not None:
            # The clock is already EXPIRED; stopping it would hide the flag.
            outcome = GameOutcome(GameEndReason.TIMEOUT, fallen)
            self._finish(outcome)
            self._cancel_opponent_request()
            self._announce_game_over(outcome)
            return
        self._emit_changed()

    def _handle_end(self, outcome: GameOutcome) -> None:
        if self._phase != GamePhase.IN_PROGRESS:
            return
        if self._clock is not None:
            self._clock.stop()
        self._finish(outcome)
        self._cancel_opponent_request()
        self._announce_game_over(outcome)

    def _handle_offer_draw(self, color: Color | None) -> None:
        if self._phase != GamePhase.IN_PROGRESS:
            return
        if self._draw_offer == DrawOffer.OFFERED:
            return
        by = color
        if by is None:
            by = self._player_side if self._mode != GameMode.LOCAL else self._side_to_move
        self._draw_offer = DrawOffer.OFFERED
        self._draw_offer_by = by
        _LOGGER.info("%s offers a draw", by)
        self._emit_changed()

    def _handle_accept_draw(self, color: Color | None) -> None:
        if self._phase != GamePhase.IN_PROGRESS:
            return
        if self._draw_offer != DrawOffer.OFFERED or self._draw_offer_by is None:
            return
        by = color if color is not None else self._draw_offer_by.opposite
        if by == self._draw_offer_by:
            return
        self._draw_offer = DrawOffer.ACCEPTED
        self._draw_offer_by = None
        self._handle_end(GameOutcome(GameEndReason.DRAW_AGREED))

    def _handle_decline_draw(self) -> None:
        if self._draw_offer != DrawOffer.OFFERED:
            return
        self._draw_offer = DrawOffer.DECLINED
        self._draw_offer_by = None
        self._emit_changed()

    def _handle_flip_board(self) -> None:
        self._orientation = self._orientation.opposite
        self._emit_changed()

    # ── Move commit ──────────────────────────────────────────────────────

    def _commit(
        self,
        origin: Position,
        destination: Position,
        promotion: PieceType | None,
    ) -> bool:
        """Submit a move to the oracle and apply its consequences."""
        mover = self._side_to_move
        from_square, to_square = to_notation(origin), to_notation(destination)
        try:
            result = self._oracle.apply_move(from_square, to_square, promotion)
        except OracleUnavailable as exc:
            self._oracle_failed(exc)
            return False

        if isinstance(result, Rejected):
            _LOGGER.info("Oracle rejected move: %s", result.error)
            self._selection.clear()
            self._emit_changed()
            return False

        self._selection.clear()
        self._last_error = None
        self._snapshot = result.snapshot
        record = MoveRecord(
            side=mover,
            origin=origin,
            destination=destination,
            san=result.san,
            fen_after=result.snapshot.fen,
            promotion=promotion,
        )
        self._history.append(record)
        # Any move cancels a pending offer
        self._draw_offer = DrawOffer.NONE
        self._draw_offer_by = None

        if self._clock is not None:
            self._clock.on_move_committed(mover)

        status = self._read_status(result.snapshot)
        self._in_check = status.in_check
        outcome = self._terminal_outcome(status, mover)

        if outcome is not None:
            if self._clock is not None:
                self._clock.stop()
            self._finish(outcome)
            self._emit_move(record)
            self._announce_game_over(outcome)
            return True

        self._side_to_move = mover.opposite
        self._emit_move(record)
        self._emit_changed()
        self._prompt_opponent()
        return True

    def _read_status(self, snapshot: PositionSnapshot) -> OracleStatus:
        try:
            return self._oracle.status(snapshot)
        except OracleUnavailable as exc:
            # The move is already applied; carry on as a normal position.
            _LOGGER.warning("Could not read position status: %s", exc)
            return OracleStatus()

    @staticmethod
    def _terminal_outcome(status: OracleStatus, mover: Color) -> GameOutcome | None:
        if status.in_checkmate:
            return GameOutcome(GameEndReason.CHECKMATE, mover)
        if status.in_stalemate:
            return GameOutcome(GameEndReason.STALEMATE)
        if status.in_draw:
            return GameOutcome(GameEndReason.DRAW)
        return None

    # ── Internal helpers ─────────────────────────────────────────────────

    def _dispatch(self, handler: Callable[..., Any], *args: Any) -> Any:
        if self._closed:
            return None
        if self._dispatching:
            self._pending.append((handler, args))
            return None

        self._dispatching = True
        try:
            result = handler(*args)
            while self._pending and not self._closed:
                queued, queued_args = self._pending.popleft()
                queued(*queued_args)
        finally:
            # Commands queued behind a failed transition are dropped
            self._pending.clear()
            self._dispatching = False
        return result

    def _occupancy(self) -> dict[Position, Piece]:
        if self._snapshot is None:
            return {}
        return {from_notation(sq): piece for sq, piece in self._snapshot.pieces.items()}

    def _legal_destinations(self, pos: Position) -> frozenset[Position]:
        return frozenset(
            from_notation(sq) for sq in self._oracle.legal_moves(to_notation(pos))
        )

    def _oracle_failed(self, exc: OracleUnavailable) -> None:
        _LOGGER.warning("Rules oracle unavailable: %s", exc)
        self._selection.clear()
        self._last_error = RETRY_MESSAGE
        self._emit_changed()
        for cb in self.events.on_error:
            cb(RETRY_MESSAGE)

    def _finish(self, outcome: GameOutcome) -> None:
        """Move to ENDED.  Listeners are notified separately."""
        self._selection.clear()
        self._phase = GamePhase.ENDED
        self._outcome = outcome
        _LOGGER.info("Game over: %s (%s)", outcome.reason.name, outcome.side)

    def _announce_game_over(self, outcome: GameOutcome) -> None:
        self._emit_changed()
        for cb in self.events.on_game_over:
            cb(outcome)

    def _prompt_opponent(self) -> None:
        """Ask the opponent to move when it is its turn."""
        opponent = self._opponent
        if opponent is None or self._phase != GamePhase.IN_PROGRESS:
            return
        if opponent.color == self._side_to_move and self._snapshot is not None:
            opponent.request_move(self._snapshot)

    def _cancel_opponent_request(self) -> None:
        opponent = self._opponent
        if opponent is not None and opponent.color == self._side_to_move:
            opponent.cancel()

    def _emit_move(self, record: MoveRecord) -> None:
        for cb in self.events.on_move:
            cb(record)

    def _emit_changed(self) -> None:
        if not self.events.on_changed:
            return
        view = self.view
        for cb in self.events.on_changed:
            cb(view)
