"""
Centralized configuration for the Triple Solitaire engine.

Configuration is loaded from (in order of precedence):
1. Environment variables
2. .env file (if exists)
3. Default values

Usage:
    from triplesolitaire.config import config
    print(config.LOG_LEVEL)
    print(config.preferences.auto_play)
"""

import os
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import load_dotenv

from .autoplay import AutoPlayMode

env_path = Path(__file__).parent.parent / ".env"
if env_path.exists():
    load_dotenv(env_path)


def get_env(key: str, default: str = "") -> str:
    """Get environment variable with default."""
    return os.environ.get(key, default)


def get_env_bool(key: str, default: bool = False) -> bool:
    """Get boolean environment variable."""
    val = os.environ.get(key, "").lower()
    if val in ("true", "1", "yes", "on"):
        return True
    if val in ("false", "0", "no", "off"):
        return False
    return default


def get_env_int(key: str, default: int = 0) -> int:
    """Get integer environment variable."""
    try:
        return int(os.environ.get(key, str(default)))
    except ValueError:
        return default


@dataclass
class GameplayPreferences:
    """
    Player-facing gameplay toggles.

    These are the settings a preferences screen would edit. The engine is
    handed an instance explicitly and never looks them up on its own.
    The animation speeds are for the host: the engine only decides whether
    to request an animation and passes the speeds through untouched.
    """
    auto_flip: bool = True
    """Flip the top stack card of a lane as soon as its cascade empties."""

    auto_play: AutoPlayMode = AutoPlayMode.WON
    """Auto play to the foundations: 'never', 'won', or 'always'."""

    animate_auto_play: bool = True
    """Ask the observer to animate auto play moves."""

    animate_undo: bool = True
    """Ask the observer to animate undo moves."""

    animate_speed_auto_play: int = 250
    """Auto play animation duration in milliseconds, read by the observer."""

    animate_speed_undo: int = 250
    """Undo animation duration in milliseconds, read by the observer."""

    def __post_init__(self):
        # Reject unknown modes here, before any move depends on them
        try:
            self.auto_play = AutoPlayMode(self.auto_play)
        except ValueError:
            modes = ", ".join(mode.value for mode in AutoPlayMode)
            raise ValueError(
                f"Invalid auto_play {self.auto_play!r}; expected one of: {modes}"
            ) from None


@dataclass
class EngineConfig:
    """Engine and storage configuration."""
    LOG_LEVEL: str = "INFO"
    ENVIRONMENT: str = "development"

    # Storage
    REDIS_URL: str = "redis://localhost:6379/0"
    GAME_DB_PATH: str = "games.db"
    SNAPSHOT_TTL_HOURS: int = 24 * 7

    # Gameplay defaults
    preferences: GameplayPreferences = field(default_factory=GameplayPreferences)

    @classmethod
    def from_env(cls) -> "EngineConfig":
        """Load configuration from environment variables."""
        return cls(
            LOG_LEVEL=get_env("LOG_LEVEL", "INFO"),
            ENVIRONMENT=get_env("ENVIRONMENT", "development"),
            REDIS_URL=get_env("REDIS_URL", "redis://localhost:6379/0"),
            GAME_DB_PATH=get_env("GAME_DB_PATH", "games.db"),
            SNAPSHOT_TTL_HOURS=get_env_int("SNAPSHOT_TTL_HOURS", 24 * 7),
            preferences=GameplayPreferences(
                auto_flip=get_env_bool("AUTO_FLIP", True),
                auto_play=get_env("AUTO_PLAY", "won"),
                animate_auto_play=get_env_bool("ANIMATE_AUTO_PLAY", True),
                animate_undo=get_env_bool("ANIMATE_UNDO", True),
                animate_speed_auto_play=get_env_int("ANIMATE_SPEED_AUTO_PLAY", 250),
                animate_speed_undo=get_env_int("ANIMATE_SPEED_UNDO", 250),
            ),
        )


# Global config instance - loaded once at module import
config = EngineConfig.from_env()


def reload_config() -> EngineConfig:
    """Reload configuration from environment (useful for testing)."""
    global config
    config = EngineConfig.from_env()
    return config
