"""Tests for SelectionEngine."""

from __future__ import annotations

from tapboard.core.coords import Position, from_notation
from tapboard.core.enums import Color, PieceType
from tapboard.core.piece import Piece
from tapboard.game.interfaces import GamePhase
from tapboard.game.selection import (
    ClearSelection,
    CommitMove,
    Ignore,
    Select,
    Selection,
    SelectionEngine,
    TapContext,
)

WP = Piece(Color.WHITE, PieceType.PAWN)
WN = Piece(Color.WHITE, PieceType.KNIGHT)
BP = Piece(Color.BLACK, PieceType.PAWN)


def sq(name: str) -> Position:
    return from_notation(name)


def _context(
    *,
    side_to_move: Color = Color.WHITE,
    controlled_side: Color | None = None,
    phase: GamePhase = GamePhase.IN_PROGRESS,
    pieces: dict[str, Piece] | None = None,
    moves: dict[str, set[str]] | None = None,
    queries: list[Position] | None = None,
) -> TapContext:
    pieces = pieces if pieces is not None else {"e2": WP, "g1": WN, "e7": BP, "a7": WP}
    moves = moves if moves is not None else {
        "e2": {"e3", "e4"},
        "g1": {"f3", "h3"},
        "e7": {"e6", "e5"},
        "a7": {"a8"},
    }

    def legal(pos: Position) -> frozenset[Position]:
        if queries is not None:
            queries.append(pos)
        return frozenset(sq(s) for s in moves.get(str(pos), set()))

    return TapContext(
        phase=phase,
        side_to_move=side_to_move,
        occupancy={sq(name): piece for name, piece in pieces.items()},
        legal_destinations=legal,
        controlled_side=controlled_side,
    )


def _selected(engine: SelectionEngine, ctx: TapContext, square: str) -> None:
    action = engine.handle_tap(sq(square), ctx)
    assert isinstance(action, Select)
    engine.apply(action)


class TestPhase:
    def test_ignored_when_not_in_progress(self) -> None:
        engine = SelectionEngine()
        for phase in (GamePhase.NOT_STARTED, GamePhase.ENDED):
            assert engine.handle_tap(sq("e2"), _context(phase=phase)) == Ignore()
        assert engine.selection is None


class TestSelect:
    def test_select_own_piece(self) -> None:
        engine = SelectionEngine()
        action = engine.handle_tap(sq("e2"), _context())
        assert action == Select(sq("e2"), frozenset({sq("e3"), sq("e4")}))

    def test_handle_tap_does_not_mutate(self) -> None:
        engine = SelectionEngine()
        engine.handle_tap(sq("e2"), _context())
        assert engine.selection is None

    def test_apply_select(self) -> None:
        engine = SelectionEngine()
        _selected(engine, _context(), "e2")
        assert engine.selection == Selection(sq("e2"), frozenset({sq("e3"), sq("e4")}))

    def test_piece_without_moves_clears(self) -> None:
        engine = SelectionEngine()
        ctx = _context(moves={})
        assert engine.handle_tap(sq("e2"), ctx) == ClearSelection()

    def test_opponent_piece_clears(self) -> None:
        engine = SelectionEngine()
        queries: list[Position] = []
        action = engine.handle_tap(sq("e7"), _context(queries=queries))
        assert action == ClearSelection()
        assert queries == []

    def test_empty_square_clears(self) -> None:
        engine = SelectionEngine()
        assert engine.handle_tap(sq("d4"), _context()) == ClearSelection()

    def test_destinations_recomputed_on_every_selection(self) -> None:
        engine = SelectionEngine()
        queries: list[Position] = []
        ctx = _context(queries=queries)
        _selected(engine, ctx, "e2")
        engine.clear()
        _selected(engine, ctx, "e2")
        assert queries == [sq("e2"), sq("e2")]


class TestWithSelection:
    def test_legal_destination_commits(self) -> None:
        engine = SelectionEngine()
        ctx = _context()
        _selected(engine, ctx, "e2")
        action = engine.handle_tap(sq("e4"), ctx)
        assert action == CommitMove(sq("e2"), sq("e4"))
        assert engine.selection is not None

    def test_tap_origin_again_toggles_off(self) -> None:
        engine = SelectionEngine()
        ctx = _context()
        _selected(engine, ctx, "e2")
        action = engine.handle_tap(sq("e2"), ctx)
        assert action == ClearSelection()
        engine.apply(action)
        assert engine.selection is None

    def test_reselect_other_piece(self) -> None:
        engine = SelectionEngine()
        ctx = _context()
        _selected(engine, ctx, "e2")
        action = engine.handle_tap(sq("g1"), ctx)
        assert action == Select(sq("g1"), frozenset({sq("f3"), sq("h3")}))

    def test_invalid_second_tap_clears(self) -> None:
        engine = SelectionEngine()
        ctx = _context()
        _selected(engine, ctx, "e2")
        assert engine.handle_tap(sq("e5"), ctx) == ClearSelection()


class TestPromotion:
    def test_pawn_to_last_rank_gets_default(self) -> None:
        engine = SelectionEngine()
        ctx = _context()
        _selected(engine, ctx, "a7")
        action = engine.handle_tap(sq("a8"), ctx)
        assert action == CommitMove(sq("a7"), sq("a8"), PieceType.QUEEN)

    def test_configured_default(self) -> None:
        engine = SelectionEngine(PieceType.ROOK)
        ctx = _context()
        _selected(engine, ctx, "a7")
        action = engine.handle_tap(sq("a8"), ctx)
        assert isinstance(action, CommitMove)
        assert action.promotion == PieceType.ROOK

    def test_non_pawn_gets_none(self) -> None:
        engine = SelectionEngine()
        ctx = _context(moves={"g1": {"g8"}})
        _selected(engine, ctx, "g1")
        action = engine.handle_tap(sq("g8"), ctx)
        assert action == CommitMove(sq("g1"), sq("g8"), None)


class TestRestrictedMode:
    def test_opponent_piece_off_turn_ignored(self) -> None:
        engine = SelectionEngine()
        ctx = _context(side_to_move=Color.BLACK, controlled_side=Color.WHITE)
        assert engine.handle_tap(sq("e7"), ctx) == Ignore()
        assert engine.selection is None

    def test_empty_square_off_turn_ignored(self) -> None:
        engine = SelectionEngine()
        ctx = _context(side_to_move=Color.BLACK, controlled_side=Color.WHITE)
        assert engine.handle_tap(sq("d4"), ctx) == Ignore()

    def test_own_piece_off_turn_may_be_inspected(self) -> None:
        engine = SelectionEngine()
        ctx = _context(side_to_move=Color.BLACK, controlled_side=Color.WHITE)
        action = engine.handle_tap(sq("e2"), ctx)
        assert isinstance(action, Select)

    def test_no_commit_off_turn(self) -> None:
        engine = SelectionEngine()
        ctx = _context(side_to_move=Color.BLACK, controlled_side=Color.WHITE)
        _selected(engine, ctx, "e2")
        assert engine.handle_tap(sq("e4"), ctx) == ClearSelection()

    def test_cannot_select_opponent_on_turn(self) -> None:
        engine = SelectionEngine()
        ctx = _context(side_to_move=Color.WHITE, controlled_side=Color.WHITE)
        assert engine.handle_tap(sq("e7"), ctx) == ClearSelection()

    def test_local_mode_acts_for_side_to_move(self) -> None:
        engine = SelectionEngine()
        ctx = _context(side_to_move=Color.BLACK)
        assert isinstance(engine.handle_tap(sq("e7"), ctx), Select)
        assert engine.handle_tap(sq("e2"), ctx) == ClearSelection()
