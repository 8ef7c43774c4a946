"""
Board geometry constants for Triple Solitaire.

This module is the single source of truth for the fixed shape of the game:
three shuffled 52-card decks, thirteen lanes, twelve foundations, and a
draw-three stock.

Location indexes are shared by every move and observer call:
    - Lanes:       1 through 13
    - Waste:       0
    - Foundations: -1 through -12
"""

# =============================================================================
# Deck
# =============================================================================

SUITS: tuple[str, ...] = ("clubs", "diamonds", "hearts", "spades")
DARK_SUITS: frozenset[str] = frozenset({"clubs", "spades"})

ACE = 1
KING = 13

DECK_COUNT = 3
TOTAL_CARDS = DECK_COUNT * len(SUITS) * KING  # 156

# =============================================================================
# Layout
# =============================================================================

LANE_COUNT = 13
FOUNDATION_COUNT = DECK_COUNT * len(SUITS)  # 12
WASTE_INDEX = 0

# Cards moved from stock to waste per click
DRAW_COUNT = 3

# Lane i (0-based) is dealt i stack cards plus one cascade card
DEALT_TO_LANES = sum(range(LANE_COUNT)) + LANE_COUNT  # 91
STOCK_SIZE = TOTAL_CARDS - DEALT_TO_LANES  # 65


def lane_indexes() -> range:
    """External (1-based) lane indexes in left-to-right order."""
    return range(1, LANE_COUNT + 1)


def foundation_indexes() -> range:
    """External (negative) foundation indexes in search order, -1 down to -12."""
    return range(-1, -FOUNDATION_COUNT - 1, -1)
