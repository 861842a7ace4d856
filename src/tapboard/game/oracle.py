"""Rules oracle backed by ``python-chess``."""

from __future__ import annotations

import logging

import chess

from tapboard.core.enums import Color, PieceType
from tapboard.core.errors import IllegalMoveError
from tapboard.core.piece import Piece
from tapboard.game.interfaces import (
    Applied,
    IRulesOracle,
    MoveResult,
    OracleStatus,
    PositionSnapshot,
    Rejected,
)

_LOGGER = logging.getLogger(__name__)


def _color(turn: chess.Color) -> Color:
    return Color.WHITE if turn == chess.WHITE else Color.BLACK


class ChessOracle(IRulesOracle):
    """Owns a :class:`chess.Board` and answers legality questions about it.

    Draws follow the automatic rules a casual app applies: insufficient
    material, the fifty-move rule and threefold repetition.
    """

    __slots__ = ("_board",)

    def __init__(self, fen: str | None = None) -> None:
        self._board = chess.Board(fen or chess.STARTING_FEN)

    @property
    def board(self) -> chess.Board:
        return self._board

    def reset(self, fen: str | None = None) -> None:
        self._board = chess.Board(fen or chess.STARTING_FEN)

    def snapshot(self) -> PositionSnapshot:
        pieces = {
            chess.square_name(sq): Piece.from_char(p.symbol())
            for sq, p in self._board.piece_map().items()
        }
        return PositionSnapshot(
            fen=self._board.fen(),
            side_to_move=_color(self._board.turn),
            pieces=pieces,
        )

    def legal_moves(self, from_square: str) -> frozenset[str]:
        try:
            origin = chess.parse_square(from_square)
        except ValueError:
            return frozenset()
        return frozenset(
            chess.square_name(m.to_square)
            for m in self._board.legal_moves
            if m.from_square == origin
        )

    def apply_move(
        self,
        from_square: str,
        to_square: str,
        promotion: PieceType | None = None,
    ) -> MoveResult:
        try:
            origin = chess.parse_square(from_square)
            target = chess.parse_square(to_square)
        except ValueError:
            return Rejected(IllegalMoveError(from_square, to_square, "unknown square"))

        move = chess.Move(origin, target, promotion=self._promotion(origin, target, promotion))
        if move not in self._board.legal_moves:
            return Rejected(IllegalMoveError(from_square, to_square))

        san = self._board.san(move)
        self._board.push(move)
        _LOGGER.debug("Applied %s (%s)", move.uci(), san)
        return Applied(self.snapshot(), san)

    def status(self, snapshot: PositionSnapshot) -> OracleStatus:
        # Repetition needs the move stack, so prefer the live board.
        board = self._board
        if snapshot.fen != board.fen():
            board = chess.Board(snapshot.fen)
        return OracleStatus(
            in_check=board.is_check(),
            in_checkmate=board.is_checkmate(),
            in_stalemate=board.is_stalemate(),
            in_draw=(
                board.is_insufficient_material()
                or board.is_fifty_moves()
                or board.is_repetition(3)
            ),
        )

    def _promotion(
        self,
        origin: chess.Square,
        target: chess.Square,
        promotion: PieceType | None,
    ) -> chess.PieceType | None:
        """Attach a promotion piece only to pawn moves onto the last rank."""
        if self._board.piece_type_at(origin) != chess.PAWN:
            return None
        if chess.square_rank(target) not in (0, 7):
            return None
        return int(promotion or PieceType.QUEEN)
