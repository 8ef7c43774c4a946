"""
Shared fixtures for the Triple Solitaire test suite.

Engines are built with animations off and auto play disabled unless a test
asks otherwise, so every command runs to completion synchronously.
"""

from collections import Counter
from typing import Optional

import pytest

from triplesolitaire.cards import Deck, make_card, rank_of, suit_of
from triplesolitaire.config import GameplayPreferences
from triplesolitaire.engine import GameEngine
from triplesolitaire.layout import Layout
from triplesolitaire.move import MoveType
from triplesolitaire.observer import GameObserver
from triplesolitaire.snapshot import SavedGame


class RecordingObserver(GameObserver):
    """Observer that records every notification as (method, args)."""

    def __init__(self):
        self.calls: list[tuple] = []
        self.engine: Optional[GameEngine] = None
        # Acknowledge auto play animations as soon as they are requested
        self.complete_animations = False

    def _record(self, name, *args):
        self.calls.append((name, *args))

    def calls_to(self, name: str) -> list[tuple]:
        return [call[1:] for call in self.calls if call[0] == name]

    def clear(self):
        self.calls.clear()

    def update_foundation_slot(self, foundation_index):
        self._record("update_foundation_slot", foundation_index)

    def update_waste(self):
        self._record("update_waste")

    def update_stock(self):
        self._record("update_stock")

    def update_move_count(self):
        self._record("update_move_count")

    def update_elapsed_time(self):
        self._record("update_elapsed_time")

    def notify_undo_availability_changed(self):
        self._record("notify_undo_availability_changed")

    def render_lane_stack_size(self, lane_index, size):
        self._record("render_lane_stack_size", lane_index, size)

    def render_lane_cascade(self, lane_index, cards):
        self._record("render_lane_cascade", lane_index, cards)

    def flip_lane_top_card(self, lane_index, card):
        self._record("flip_lane_top_card", lane_index, card)

    def request_animated_move(self, move):
        self._record("request_animated_move", move)
        if self.complete_animations and self.engine is not None and move.type == MoveType.AUTO_PLAY:
            self.engine.animation_completed()

    def signal_win(self, elapsed_seconds, move_count):
        self._record("signal_win", elapsed_seconds, move_count)


def headless_preferences(**overrides) -> GameplayPreferences:
    """Preferences with no automation and no animation, plus overrides."""
    options = {
        "auto_flip": False,
        "auto_play": "never",
        "animate_auto_play": False,
        "animate_undo": False,
    }
    options.update(overrides)
    return GameplayPreferences(**options)


def build_layout(
    foundation: Optional[dict[int, str]] = None,
    lanes: Optional[dict[int, tuple[list[str], list[str]]]] = None,
    waste: Optional[list[str]] = None,
    stock_top: Optional[list[str]] = None,
) -> Layout:
    """
    Build a full 156-card layout.

    Cards not placed explicitly go to the bottom of the stock in sorted
    order; stock_top cards are stacked above them (last card drawn first).
    A foundation showing rank r consumes ace through r of its suit.
    """
    remaining = Counter(Deck(seed=0).cards)
    layout = Layout(waste=list(waste or []))

    for foundation_index, card in (foundation or {}).items():
        layout.set_foundation(foundation_index, card)
        for rank in range(1, rank_of(card) + 1):
            remaining[make_card(suit_of(card), rank)] -= 1

    for lane_index, (stack, cascade) in (lanes or {}).items():
        layout.lane(lane_index).stack = list(stack)
        layout.lane(lane_index).cascade = list(cascade)
        remaining.subtract(stack)
        remaining.subtract(cascade)

    remaining.subtract(layout.waste)
    remaining.subtract(stock_top or [])
    assert all(count >= 0 for count in remaining.values()), "card used more than 3 times"

    layout.stock = sorted(remaining.elements()) + list(stock_top or [])
    return layout


def winning_layout() -> Layout:
    """Eleven foundations on kings, spades12 on -12, the last king in lane 1."""
    suits = ["clubs", "diamonds", "hearts", "spades"]
    foundation = {-i: make_card(suits[(i - 1) % 4], 13) for i in range(1, 12)}
    foundation[-12] = "spades12"
    return build_layout(foundation=foundation, lanes={1: ([], ["spades13"])})


@pytest.fixture
def observer():
    """Recording observer."""
    return RecordingObserver()


@pytest.fixture
def make_engine(observer):
    """Factory for engines wired to the recording observer."""

    def _make(game_log=None, **preference_overrides) -> GameEngine:
        engine = GameEngine(
            observer=observer,
            preferences=headless_preferences(**preference_overrides),
            game_log=game_log,
        )
        observer.engine = engine
        return engine

    return _make


@pytest.fixture
def engine(make_engine):
    """Engine with automation off."""
    return make_engine()


@pytest.fixture
def dealt_engine(engine):
    """Engine with a seeded deal in place."""
    engine.new_game(seed=42)
    return engine


def restore_layout(engine: GameEngine, layout: Layout, **session) -> None:
    """Load a hand-built layout into an engine through the snapshot path."""
    session.setdefault("game_id", "test-game")
    engine.restore_snapshot(SavedGame(layout=layout, **session).to_snapshot())
