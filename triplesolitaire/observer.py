"""
Observer contract for the engine.

The engine never renders anything. Instead it calls out to a GameObserver
whenever part of the board changes. A UI subclasses GameObserver and
overrides what it needs; every method is a no-op by default, so a headless
caller can use the base class as is.
"""

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .move import Move


class GameObserver:
    """Receives board change notifications from a GameEngine."""

    def update_foundation_slot(self, foundation_index: int) -> None:
        """A foundation (-1 through -12) changed."""

    def update_waste(self) -> None:
        """The waste changed."""

    def update_stock(self) -> None:
        """The stock changed."""

    def update_move_count(self) -> None:
        """The move counter changed."""

    def update_elapsed_time(self) -> None:
        """The elapsed time changed."""

    def notify_undo_availability_changed(self) -> None:
        """The undo history became empty or non-empty."""

    def render_lane_stack_size(self, lane_index: int, size: int) -> None:
        """
        Redraw a lane's face-down stack with size cards.

        Resets the lane view: the cascade is re-sent with render_lane_cascade.
        """

    def render_lane_cascade(self, lane_index: int, cards: list[str]) -> None:
        """Redraw a lane's full face-up cascade, bottom card first."""

    def flip_lane_top_card(self, lane_index: int, card: str) -> None:
        """The top stack card of a lane was turned face up as card."""

    def request_animated_move(self, move: "Move") -> None:
        """
        Animate a move whose state change is already applied.

        The observer refreshes the destination when the animation ends.
        For AUTO_PLAY moves it must then call engine.animation_completed()
        exactly once; UNDO moves need no acknowledgment.
        """

    def signal_win(self, elapsed_seconds: int, move_count: int) -> None:
        """The game was won."""
