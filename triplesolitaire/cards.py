"""
Card and deck model for Triple Solitaire.

Cards are plain strings made of a suit name followed by a rank number,
for example "hearts1" (ace of hearts) or "spades13" (king of spades).
Three full decks are in play, so the same card string appears three times
and the copies are interchangeable.

Ranks:
    1 = Ace, 2-10 = face value, 11 = Jack, 12 = Queen, 13 = King

Colors only matter for cascade building: clubs and spades are dark,
diamonds and hearts are light.
"""

import random
import re
from enum import Enum
from typing import Optional

from .constants import ACE, DARK_SUITS, DECK_COUNT, KING, SUITS


class CardParseError(ValueError):
    """Raised when a string is not a valid card identifier."""


class Suit(str, Enum):
    """Card suits, in deal order."""

    CLUBS = "clubs"
    DIAMONDS = "diamonds"
    HEARTS = "hearts"
    SPADES = "spades"


# Lower-case suit name, then an ASCII rank without leading zeros
_CARD_PATTERN = re.compile(r"([a-z]+)([1-9][0-9]?)", re.ASCII)


def _split(card: str) -> tuple[str, str]:
    for i, ch in enumerate(card):
        if "0" <= ch <= "9":
            return card[:i], card[i:]
    return card, ""


def rank_of(card: str) -> int:
    """Rank of a card, from 1 (ace) to 13 (king)."""
    return int(_split(card)[1])


def suit_of(card: str) -> str:
    """Suit name of a card."""
    return _split(card)[0]


def make_card(suit: str, rank: int) -> str:
    """Build a card identifier from its suit and rank."""
    return f"{suit}{rank}"


def parse_card(card: str) -> str:
    """
    Validate a card identifier.

    Args:
        card: Candidate card string.

    Returns:
        The card, unchanged.

    Raises:
        CardParseError: If the suit is unknown or the rank is not 1-13.
    """
    if not isinstance(card, str):
        raise CardParseError(f"Card must be a string, got {type(card).__name__}")
    match = _CARD_PATTERN.fullmatch(card)
    if not match:
        raise CardParseError(f"Malformed card {card!r}")
    suit, rank = match.groups()
    if suit not in SUITS:
        raise CardParseError(f"Unknown suit in card {card!r}")
    if not ACE <= int(rank) <= KING:
        raise CardParseError(f"Invalid rank in card {card!r}")
    return card


def next_in_suit(card: str) -> str:
    """The card one rank higher in the same suit."""
    return make_card(suit_of(card), rank_of(card) + 1)


def prev_in_suit(card: str) -> Optional[str]:
    """
    The card one rank lower in the same suit.

    Returns None for an ace, which is how an emptied foundation is stored.
    """
    rank = rank_of(card)
    if rank == ACE:
        return None
    return make_card(suit_of(card), rank - 1)


def is_dark(card: str) -> bool:
    """Whether the card is a club or a spade."""
    return suit_of(card) in DARK_SUITS


def is_ace(card: str) -> bool:
    return rank_of(card) == ACE


def is_king(card: str) -> bool:
    return rank_of(card) == KING


class Deck:
    """
    The combined Triple Solitaire deck.

    Shuffling is driven by a stored seed so that any deal can be replayed
    exactly from the seed alone.
    """

    def __init__(self, num_decks: int = DECK_COUNT, seed: Optional[int] = None) -> None:
        """
        Build and shuffle the deck.

        Args:
            num_decks: Number of standard 52-card decks to combine.
            seed: Optional random seed for deterministic shuffle.
                  If None, a random seed is generated and stored.
        """
        self.seed: int = seed if seed is not None else random.randint(0, 2**31 - 1)
        self.cards: list[str] = [
            make_card(suit.value, rank)
            for _ in range(num_decks)
            for suit in Suit
            for rank in range(ACE, KING + 1)
        ]
        self.shuffle()

    def shuffle(self, seed: Optional[int] = None) -> None:
        """
        Randomize the order of cards in the deck.

        Args:
            seed: Optional seed to use. If None, uses the deck's stored seed.
        """
        if seed is not None:
            self.seed = seed
        random.Random(self.seed).shuffle(self.cards)

    def __len__(self) -> int:
        return len(self.cards)
