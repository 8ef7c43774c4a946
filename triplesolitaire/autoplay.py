"""
Auto play policy.

After every settled move the engine asks this module for at most one
follow-up move. Each applied follow-up settles in turn and asks again,
so a long chain of auto plays runs one step at a time and can interleave
with animations.

Policy, scanning lanes left to right:
    1. Auto flip (if enabled): flip the first unlocked lane that shows
       only a face-down stack.
    2. Auto play mode 'never' stops here. Mode 'won' continues only once
       the game is trivially winnable: no face-down cards, an empty stock,
       and at most one card in the waste.
    3. Play the top card of the first unlocked lane that fits a foundation.
    4. Play the top waste card if it fits a foundation.
"""

from enum import Enum
from typing import TYPE_CHECKING, Optional, Sequence

from .constants import WASTE_INDEX, foundation_indexes, lane_indexes
from .layout import Layout
from .move import Move
from .rules import accept_foundation_drop

if TYPE_CHECKING:
    from .config import GameplayPreferences


class AutoPlayMode(str, Enum):
    """
    When cards are automatically played to the foundations.

    NEVER: Only flips (if auto flip is on), never foundation plays
    WON: Only once the remaining game is trivially winnable
    ALWAYS: Whenever a card fits a foundation
    """

    NEVER = "never"
    WON = "won"
    ALWAYS = "always"


def find_foundation_for(layout: Layout, card: str) -> Optional[int]:
    """First foundation (probing -1 down to -12) that accepts card, or None."""
    for foundation_index in foundation_indexes():
        if accept_foundation_drop(layout.foundation_card(foundation_index), card):
            return foundation_index
    return None


def cascade_auto_move(layout: Layout, lane_index: int) -> Optional[Move]:
    """Auto play of a lane's top cascade card, if any foundation takes it."""
    card = layout.lane(lane_index).top_card
    if card is None:
        return None
    foundation_index = find_foundation_for(layout, card)
    if foundation_index is None:
        return None
    return Move.auto_play(lane_index, foundation_index, card)


def waste_auto_move(layout: Layout) -> Optional[Move]:
    """Auto play of the top waste card, if any foundation takes it."""
    if not layout.waste:
        return None
    card = layout.waste[0]
    foundation_index = find_foundation_for(layout, card)
    if foundation_index is None:
        return None
    return Move.auto_play(WASTE_INDEX, foundation_index, card)


def is_trivially_won(layout: Layout) -> bool:
    """
    Whether only foundation plays remain.

    The waste may still hold one card.
    """
    return layout.stack_total() == 0 and not layout.stock and len(layout.waste) <= 1


def find_auto_move(
    layout: Layout,
    locked: Sequence[bool],
    preferences: "GameplayPreferences",
) -> Optional[Move]:
    """
    Pick the next automatic move.

    Args:
        layout: Current board.
        locked: Per-lane auto play locks, indexed by lane number - 1.
        preferences: Auto flip and auto play settings.

    Returns:
        A FLIP or AUTO_PLAY move, or None when nothing applies.
    """
    if preferences.auto_flip:
        for lane_index in lane_indexes():
            if not locked[lane_index - 1] and layout.lane(lane_index).can_flip:
                return Move.flip(lane_index)

    mode = preferences.auto_play
    if mode == AutoPlayMode.NEVER:
        return None
    if mode == AutoPlayMode.WON and not is_trivially_won(layout):
        return None

    for lane_index in lane_indexes():
        if locked[lane_index - 1]:
            continue
        move = cascade_auto_move(layout, lane_index)
        if move:
            return move

    return waste_auto_move(layout)
