"""Triple Solitaire rule engine: three decks, thirteen lanes, twelve foundations."""

from .autoplay import AutoPlayMode
from .cards import CardParseError, Deck
from .config import EngineConfig, GameplayPreferences, config
from .engine import GameEngine
from .game_log import GameLog
from .layout import LaneData, Layout
from .move import Move, MoveParseError, MoveType
from .observer import GameObserver
from .snapshot import SavedGame, SnapshotError

__all__ = [
    # Engine
    "GameEngine",
    "GameObserver",
    # Board model
    "Deck",
    "CardParseError",
    "Layout",
    "LaneData",
    "Move",
    "MoveType",
    "MoveParseError",
    # Settings
    "AutoPlayMode",
    "EngineConfig",
    "GameplayPreferences",
    "config",
    # Persistence
    "SavedGame",
    "SnapshotError",
    "GameLog",
]
