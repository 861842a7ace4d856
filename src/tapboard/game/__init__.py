"""Game management layer: session controller, selection, clock, players.

Quick start::

    from tapboard.core import Position
    from tapboard.game import SessionController, TimeControl

    session = SessionController()
    session.new_game(time_control=TimeControl.blitz())
    session.tap(Position(6, 4))  # select e2
    session.tap(Position(4, 4))  # play e4
    session.tick(1.0)
"""

from tapboard.game.clock import ClockEngine, ClockState, ClockStatus
from tapboard.game.interfaces import (
    Applied,
    DrawOffer,
    GameEndReason,
    GameOutcome,
    GamePhase,
    IClock,
    Increment,
    IPlayer,
    IRulesOracle,
    OracleStatus,
    PositionSnapshot,
    Rejected,
    ResetPerMove,
    TimeControl,
)
from tapboard.game.oracle import ChessOracle
from tapboard.game.player import AIPlayer, HumanPlayer, RemotePlayer
from tapboard.game.selection import (
    Action,
    ClearSelection,
    CommitMove,
    Ignore,
    Select,
    Selection,
    SelectionEngine,
    TapContext,
)
from tapboard.game.session import (
    MoveRecord,
    SessionController,
    SessionEvents,
    SessionView,
)
from tapboard.game.settings import GameSettings

__all__ = [
    # Interfaces
    "DrawOffer",
    "GameEndReason",
    "GameOutcome",
    "GamePhase",
    "IClock",
    "IPlayer",
    "IRulesOracle",
    "OracleStatus",
    "PositionSnapshot",
    "Applied",
    "Rejected",
    "TimeControl",
    "Increment",
    "ResetPerMove",
    # Selection
    "Action",
    "ClearSelection",
    "CommitMove",
    "Ignore",
    "Select",
    "Selection",
    "SelectionEngine",
    "TapContext",
    # Concrete
    "AIPlayer",
    "ChessOracle",
    "ClockEngine",
    "ClockState",
    "ClockStatus",
    "GameSettings",
    "HumanPlayer",
    "MoveRecord",
    "RemotePlayer",
    "SessionController",
    "SessionEvents",
    "SessionView",
]
