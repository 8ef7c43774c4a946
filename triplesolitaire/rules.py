"""
Drop acceptance rules.

Pure predicates over card strings. They never touch game state, so the
input layer can call them freely while a drag is in flight.
"""

from typing import Optional, Sequence, Union

from .cards import is_ace, is_dark, is_king, next_in_suit, rank_of


Payload = Union[str, Sequence[str]]


def as_cascade(cards: Payload) -> list[str]:
    """Normalize a single card or a run of cards to a list."""
    if isinstance(cards, str):
        return [cards]
    return list(cards)


def accept_foundation_drop(foundation_card: Optional[str], cards: Payload) -> bool:
    """
    Whether a foundation showing foundation_card accepts the payload.

    Foundations never take more than one card at a time. An empty
    foundation takes any ace; otherwise only the next card of the same suit.
    """
    cascade = as_cascade(cards)
    if len(cascade) != 1:
        return False
    card = cascade[0]
    if foundation_card is None:
        return is_ace(card)
    return card == next_in_suit(foundation_card)


def accept_cascade_drop(cascade_top: Optional[str], bottom_card: str) -> bool:
    """
    Whether a cascade topped by cascade_top accepts a run starting at bottom_card.

    The incoming card must be one rank lower and of the opposite color.
    """
    if cascade_top is None:
        return False
    if rank_of(bottom_card) != rank_of(cascade_top) - 1:
        return False
    return is_dark(cascade_top) != is_dark(bottom_card)


def accept_lane_drop(lead_card: str) -> bool:
    """Whether an empty lane accepts a run led by lead_card (kings only)."""
    return is_king(lead_card)
