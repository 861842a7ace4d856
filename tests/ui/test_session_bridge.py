"""Tests for the Qt session bridge."""

from __future__ import annotations

import pytest

from tapboard.core.enums import Color
from tapboard.game.interfaces import DrawOffer, GameEndReason, GameOutcome, Increment
from tapboard.game.session import SessionController, SessionView
from tapboard.ui.session_bridge import (
    SessionBridge,
    format_seconds,
    outcome_text,
    status_text,
)


class _FakeTime:
    def __init__(self, start: float = 100.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now


def _bridge(qapp: object, **kwargs: object) -> tuple[SessionBridge, SessionController, _FakeTime]:
    clock = _FakeTime()
    session = SessionController()
    bridge = SessionBridge(session, time_source=clock, **kwargs)  # type: ignore[arg-type]
    return bridge, session, clock


class TestTicking:
    def test_starts_with_timed_game(self, qapp: object) -> None:
        bridge, session, _ = _bridge(qapp)
        assert not bridge.is_ticking
        session.new_game(time_control=Increment(60, 0))
        assert bridge.is_ticking
        bridge.shutdown()

    def test_untimed_game_does_not_tick(self, qapp: object) -> None:
        bridge, session, _ = _bridge(qapp)
        session.new_game()
        assert not bridge.is_ticking

    def test_timeout_feeds_real_elapsed(self, qapp: object) -> None:
        bridge, session, clock = _bridge(qapp)
        session.new_game(time_control=Increment(60, 0))
        clock.now += 2.5
        bridge._on_timeout()
        clock.now += 1.0
        bridge._on_timeout()
        assert session.clock is not None
        assert session.clock.remaining(Color.WHITE) == pytest.approx(56.5)
        assert session.clock.remaining(Color.BLACK) == 60.0
        bridge.shutdown()

    def test_flag_fall_stops_timer(self, qapp: object) -> None:
        bridge, session, clock = _bridge(qapp)
        outcomes: list[object] = []
        bridge.game_over.connect(outcomes.append)
        session.new_game(time_control=Increment(3, 0))
        clock.now += 5
        bridge._on_timeout()
        assert outcomes == [GameOutcome(GameEndReason.TIMEOUT, Color.WHITE)]
        assert not bridge.is_ticking

    def test_shutdown_closes_session(self, qapp: object) -> None:
        bridge, session, _ = _bridge(qapp)
        session.new_game(time_control=Increment(60, 0))
        bridge.shutdown()
        assert not bridge.is_ticking
        assert session.is_closed


class TestSignals:
    def test_tap_slots_and_move_signal(self, qapp: object) -> None:
        bridge, session, _ = _bridge(qapp)
        moves: list[object] = []
        views: list[object] = []
        bridge.move_made.connect(moves.append)
        bridge.view_changed.connect(views.append)
        session.new_game()
        bridge.tap(6, 4)
        bridge.tap(4, 4)
        assert len(moves) == 1
        assert len(views) == 3
        assert session.side_to_move == Color.BLACK

    def test_resign_slot(self, qapp: object) -> None:
        bridge, session, _ = _bridge(qapp)
        session.new_game()
        bridge.resign(int(Color.BLACK))
        assert session.outcome == GameOutcome(GameEndReason.RESIGNATION, Color.BLACK)

    def test_draw_slots(self, qapp: object) -> None:
        bridge, session, _ = _bridge(qapp)
        session.new_game()
        bridge.offer_draw()
        bridge.accept_draw()
        assert session.outcome == GameOutcome(GameEndReason.DRAW_AGREED)

    def test_decline_slot(self, qapp: object) -> None:
        bridge, session, _ = _bridge(qapp)
        session.new_game()
        bridge.offer_draw()
        bridge.decline_draw()
        assert session.view.draw_offer == DrawOffer.DECLINED
        bridge.accept_draw()
        assert session.outcome is None

    def test_flip_slot(self, qapp: object) -> None:
        bridge, session, _ = _bridge(qapp)
        session.new_game()
        bridge.flip_board()
        assert session.orientation == Color.BLACK


class TestStatusText:
    def test_turn(self) -> None:
        session = SessionController()
        assert status_text(session.view) == "Not started"
        session.new_game()
        assert status_text(session.view) == "White's turn"

    def test_check(self) -> None:
        session = SessionController()
        session.new_game(fen="k7/8/8/8/8/8/1p6/K7 w - - 0 1")
        view: SessionView = session.view
        assert status_text(view) == "White's turn | Check!"

    def test_game_over(self) -> None:
        session = SessionController()
        session.new_game()
        session.resign(Color.WHITE)
        assert status_text(session.view) == "Game over: Black wins, White resigned"

    @pytest.mark.parametrize(
        "outcome,text",
        [
            (GameOutcome(GameEndReason.CHECKMATE, Color.BLACK), "Black wins by checkmate"),
            (GameOutcome(GameEndReason.TIMEOUT, Color.BLACK), "White wins on time"),
            (GameOutcome(GameEndReason.STALEMATE), "Draw by stalemate"),
            (GameOutcome(GameEndReason.DRAW_AGREED), "Draw by agreement"),
            (GameOutcome(GameEndReason.DRAW), "Draw"),
        ],
    )
    def test_outcome_text(self, outcome: GameOutcome, text: str) -> None:
        assert outcome_text(outcome) == text

    def test_format_seconds(self) -> None:
        assert format_seconds(183) == "3:03.0"
        assert format_seconds(600) == "10:00"
        assert format_seconds(-2) == "0:00.0"
