"""
Move records for Triple Solitaire.

Every change to the board, whether started by the player, by auto play or
by undo, is described by a Move. Moves are immutable values with a
canonical text form used both for logging and for saved games:

    <TYPE>:<fromIndex>><toIndex>:<card1>;<card2>;...

Locations use the shared index convention:
    - Lanes:       1 through 13
    - Waste:       0
    - Foundations: -1 through -12

Examples:
    PLAYER_MOVE:4>-2:hearts7          hearts7 from lane 4 to foundation 2
    PLAYER_MOVE:3>9:spades12;hearts11 two-card run from lane 3 to lane 9
    STOCK:0>0:clubs4;hearts9;spades1  three cards drawn from the stock
    STOCK:0>0:                        waste recycled into the stock
    FLIP:0>6:                         top stack card of lane 6 flipped
"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import Iterable

from .cards import CardParseError, parse_card
from .constants import FOUNDATION_COUNT, LANE_COUNT, WASTE_INDEX


class MoveParseError(ValueError):
    """Raised when a string does not follow the canonical move grammar."""


class MoveType(str, Enum):
    """
    All kinds of moves.

    AUTO_PLAY:   card auto played to a foundation
    FLIP:        top stack card of a lane turned face up
    PLAYER_MOVE: drag and drop of a card or run
    STOCK:       click on the stock (draw, or recycle the waste)
    UNDO:        undo of an AUTO_PLAY or PLAYER_MOVE
    UNDO_FLIP:   undo of a FLIP
    UNDO_STOCK:  undo of a STOCK
    """

    AUTO_PLAY = "AUTO_PLAY"
    FLIP = "FLIP"
    PLAYER_MOVE = "PLAYER_MOVE"
    STOCK = "STOCK"
    UNDO = "UNDO"
    UNDO_FLIP = "UNDO_FLIP"
    UNDO_STOCK = "UNDO_STOCK"


# Indexes are ASCII integers without leading zeros; "-0" is rejected after matching
_INDEX = r"-?(?:0|[1-9][0-9]*)"
_MOVE_PATTERN = re.compile(rf"([A-Z_]+):({_INDEX})>({_INDEX})(?::(.*))?", re.ASCII)


def is_lane(index: int) -> bool:
    return 1 <= index <= LANE_COUNT


def is_waste(index: int) -> bool:
    return index == WASTE_INDEX


def is_foundation(index: int) -> bool:
    return -FOUNDATION_COUNT <= index <= -1


def is_location(index: int) -> bool:
    """Whether index names any lane, the waste, or any foundation."""
    return is_lane(index) or is_waste(index) or is_foundation(index)


@dataclass(frozen=True)
class Move:
    """
    A single board transition.

    Attributes:
        type: Kind of move.
        from_index: Source location.
        to_index: Destination location.
        cascade: Cards moved, bottom card first. Empty for flips and
            waste recycles.
    """

    type: MoveType
    from_index: int = WASTE_INDEX
    to_index: int = WASTE_INDEX
    cascade: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        # Accept any iterable of cards but always store a tuple
        if not isinstance(self.cascade, tuple):
            object.__setattr__(self, "cascade", tuple(self.cascade))

    # -------------------------------------------------------------------------
    # Constructors
    # -------------------------------------------------------------------------

    @classmethod
    def stock(cls, cards: Iterable[str] = ()) -> "Move":
        """Stock click; cards are the cards drawn, empty for a recycle."""
        return cls(MoveType.STOCK, cascade=tuple(cards))

    @classmethod
    def flip(cls, lane_index: int) -> "Move":
        """Flip of the top stack card in the given lane."""
        return cls(MoveType.FLIP, to_index=lane_index)

    @classmethod
    def player_move(cls, from_index: int, to_index: int, cards: Iterable[str]) -> "Move":
        """Drag and drop of one card or a run, bottom card first."""
        if isinstance(cards, str):
            cards = (cards,)
        return cls(MoveType.PLAYER_MOVE, from_index, to_index, tuple(cards))

    @classmethod
    def auto_play(cls, from_index: int, to_index: int, card: str) -> "Move":
        """Automatic move of a single card to a foundation."""
        return cls(MoveType.AUTO_PLAY, from_index, to_index, (card,))

    # -------------------------------------------------------------------------
    # Accessors
    # -------------------------------------------------------------------------

    @property
    def card(self) -> str:
        """The moved card, or the bottom card of a run; empty if none."""
        return self.cascade[0] if self.cascade else ""

    def to_undo(self) -> "Move":
        """
        Build the move that exactly reverses this one.

        Returns:
            UNDO_FLIP for a FLIP, UNDO_STOCK for a STOCK (same payload),
            otherwise an UNDO with source and destination swapped.
        """
        if self.type == MoveType.FLIP:
            return Move(MoveType.UNDO_FLIP, to_index=self.to_index)
        if self.type == MoveType.STOCK:
            return Move(MoveType.UNDO_STOCK, cascade=self.cascade)
        return Move(MoveType.UNDO, self.to_index, self.from_index, self.cascade)

    # -------------------------------------------------------------------------
    # Text form
    # -------------------------------------------------------------------------

    def __str__(self) -> str:
        return f"{self.type.value}:{self.from_index}>{self.to_index}:{';'.join(self.cascade)}"

    @classmethod
    def parse(cls, text: str) -> "Move":
        """
        Parse a move from its canonical text form.

        Args:
            text: String as produced by str(move).

        Returns:
            The decoded Move.

        Raises:
            MoveParseError: If the text is outside the move grammar.
        """
        if not isinstance(text, str):
            raise MoveParseError(f"Move must be a string, got {type(text).__name__}")

        match = _MOVE_PATTERN.fullmatch(text)
        if not match:
            raise MoveParseError(f"Malformed move {text!r}")

        type_name, from_text, to_text, cards_text = match.groups()
        try:
            move_type = MoveType(type_name)
        except ValueError:
            raise MoveParseError(f"Unknown move type {type_name!r} in {text!r}") from None

        if "-0" in (from_text, to_text):
            raise MoveParseError(f"Negative zero index in {text!r}")
        from_index, to_index = int(from_text), int(to_text)
        if not is_location(from_index) or not is_location(to_index):
            raise MoveParseError(f"Location out of range in {text!r}")

        cascade: tuple[str, ...] = ()
        if cards_text:
            try:
                cascade = tuple(parse_card(card) for card in cards_text.split(";"))
            except CardParseError as e:
                raise MoveParseError(f"Bad card in {text!r}: {e}") from e

        return cls(move_type, from_index, to_index, cascade)
