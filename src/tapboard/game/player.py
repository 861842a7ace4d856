"""Concrete player implementations.

Only the seams are defined here: a remote or AI player forwards move
requests to a callback and its answer arrives later through
``SessionController.submit_move``.  No transport and no search live here.
"""

from __future__ import annotations

from collections.abc import Callable

from tapboard.core.enums import Color
from tapboard.game.interfaces import IPlayer, PositionSnapshot


class HumanPlayer(IPlayer):
    """A participant tapping on this device.

    ``request_move`` is a no-op because humans select moves interactively.
    """

    __slots__ = ("_color", "_name")

    def __init__(self, color: Color, name: str = "") -> None:
        self._color = color
        self._name = name or f"Player ({color})"

    @property
    def color(self) -> Color:
        return self._color

    @property
    def name(self) -> str:
        return self._name

    @property
    def is_human(self) -> bool:
        return True

    def request_move(self, snapshot: PositionSnapshot) -> None:
        pass  # Human moves arrive via taps

    def cancel(self) -> None:
        pass


class _CallbackPlayer(IPlayer):
    """Move source that delegates to optional callbacks.

    Args:
        color: Side the player controls.
        name: Display name.
        on_request_move: ``(PositionSnapshot) -> None``, called when it is
            this player's turn.
        on_cancel: ``() -> None``, called to abandon a pending request.
    """

    __slots__ = ("_color", "_name", "_on_request_move", "_on_cancel")

    def __init__(
        self,
        color: Color,
        name: str,
        on_request_move: Callable[[PositionSnapshot], None] | None = None,
        on_cancel: Callable[[], None] | None = None,
    ) -> None:
        self._color = color
        self._name = name
        self._on_request_move = on_request_move
        self._on_cancel = on_cancel

    @property
    def color(self) -> Color:
        return self._color

    @property
    def name(self) -> str:
        return self._name

    @property
    def is_human(self) -> bool:
        return False

    def request_move(self, snapshot: PositionSnapshot) -> None:
        if self._on_request_move is not None:
            self._on_request_move(snapshot)

    def cancel(self) -> None:
        if self._on_cancel is not None:
            self._on_cancel()


class AIPlayer(_CallbackPlayer):
    """Computer opponent; the callback is where an engine would be plugged in."""

    __slots__ = ()

    def __init__(
        self,
        color: Color,
        name: str = "Engine",
        on_request_move: Callable[[PositionSnapshot], None] | None = None,
        on_cancel: Callable[[], None] | None = None,
    ) -> None:
        super().__init__(color, name, on_request_move, on_cancel)


class RemotePlayer(_CallbackPlayer):
    """Online opponent; the callback is where a transport would be plugged in."""

    __slots__ = ()

    def __init__(
        self,
        color: Color,
        name: str = "Opponent",
        on_request_move: Callable[[PositionSnapshot], None] | None = None,
        on_cancel: Callable[[], None] | None = None,
    ) -> None:
        super().__init__(color, name, on_request_move, on_cancel)
