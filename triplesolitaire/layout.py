"""
Board layout for Triple Solitaire.

Holds every card position on the table:

    Stock       Waste (up to 3 shown)        Foundations -1 .. -12

    Lane 1   Lane 2   Lane 3   ...   Lane 13
    (stack of face-down cards topped by a face-up cascade)

The layout is plain data. All rule enforcement lives in the engine; the
layout only knows how to deal, address locations, and count cards.
"""

from dataclasses import dataclass, field
from typing import Optional

from .cards import rank_of
from .constants import FOUNDATION_COUNT, LANE_COUNT, STOCK_SIZE


@dataclass
class LaneData:
    """
    A single lane.

    Attributes:
        stack: Face-down cards, last element on top.
        cascade: Face-up cards, last element on top (fully visible).
    """

    stack: list[str] = field(default_factory=list)
    cascade: list[str] = field(default_factory=list)

    @property
    def top_card(self) -> Optional[str]:
        """Top visible card of the cascade, or None."""
        return self.cascade[-1] if self.cascade else None

    @property
    def can_flip(self) -> bool:
        """Whether the lane shows only a face-down stack card."""
        return not self.cascade and bool(self.stack)


@dataclass
class Layout:
    """
    All card positions.

    Attributes:
        stock: Undealt cards, last element on top (drawn next).
        waste: Drawn cards, index 0 is the most recently drawn.
        foundation: Top card of each of the 12 foundations, None if empty.
        lanes: The 13 lanes, left to right.
    """

    stock: list[str] = field(default_factory=list)
    waste: list[str] = field(default_factory=list)
    foundation: list[Optional[str]] = field(
        default_factory=lambda: [None] * FOUNDATION_COUNT
    )
    lanes: list[LaneData] = field(
        default_factory=lambda: [LaneData() for _ in range(LANE_COUNT)]
    )

    @classmethod
    def deal(cls, cards: list[str]) -> "Layout":
        """
        Deal a shuffled deck into a fresh layout.

        The first 65 cards form the stock. Lane i (0-based) then receives
        i face-down stack cards followed by one face-up cascade card.

        Args:
            cards: The full shuffled deck.

        Returns:
            The dealt layout.
        """
        remaining = iter(cards)
        layout = cls(stock=[next(remaining) for _ in range(STOCK_SIZE)])
        for lane_number, lane in enumerate(layout.lanes):
            lane.stack = [next(remaining) for _ in range(lane_number)]
            lane.cascade = [next(remaining)]
        return layout

    # -------------------------------------------------------------------------
    # Addressing
    # -------------------------------------------------------------------------

    def lane(self, lane_index: int) -> LaneData:
        """Lane by its 1-based external index."""
        return self.lanes[lane_index - 1]

    def foundation_card(self, foundation_index: int) -> Optional[str]:
        """Foundation top card by its negative external index."""
        return self.foundation[-foundation_index - 1]

    def set_foundation(self, foundation_index: int, card: Optional[str]) -> None:
        self.foundation[-foundation_index - 1] = card

    def cascade_run(self, lane_index: int, count: int) -> list[str]:
        """
        The top count cards of a lane's cascade, bottom card first.

        This is the payload for dragging the run starting count cards
        from the top.
        """
        cascade = self.lane(lane_index).cascade
        return cascade[len(cascade) - count:]

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def card_count(self) -> int:
        """
        Total cards on the table.

        A foundation showing rank r holds r cards (ace through r).
        """
        total = len(self.stock) + len(self.waste)
        total += sum(rank_of(card) for card in self.foundation if card is not None)
        total += sum(len(lane.stack) + len(lane.cascade) for lane in self.lanes)
        return total

    def stack_total(self) -> int:
        """Face-down cards left across all lanes."""
        return sum(len(lane.stack) for lane in self.lanes)

    def copy(self) -> "Layout":
        return Layout(
            stock=list(self.stock),
            waste=list(self.waste),
            foundation=list(self.foundation),
            lanes=[LaneData(list(lane.stack), list(lane.cascade)) for lane in self.lanes],
        )
