"""SQLite record of played games (start time, duration, moves, win)."""

import logging
import sqlite3
from datetime import datetime
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)


class GameLog:
    """
    Records each game in SQLite.

    A game row is inserted when the first move of a game is counted and
    updated with its final duration and move count when the game is won.
    Games never won keep a NULL duration.
    """

    def __init__(self, db_path: str = "games.db"):
        self.db_path = Path(db_path)
        self._init_db()

    def _init_db(self):
        """Initialize database schema."""
        with sqlite3.connect(self.db_path) as conn:
            conn.executescript("""
                CREATE TABLE IF NOT EXISTS games (
                    id TEXT PRIMARY KEY,
                    started_at TIMESTAMP,
                    ended_at TIMESTAMP,
                    duration INTEGER,
                    moves INTEGER,
                    won BOOLEAN DEFAULT 0
                );

                CREATE INDEX IF NOT EXISTS idx_games_won ON games(won);
            """)

    def log_game_start(self, game_id: str) -> None:
        """Record the start of a game (its first counted move)."""
        with sqlite3.connect(self.db_path) as conn:
            conn.execute(
                """
                INSERT OR REPLACE INTO games (id, started_at, moves, won)
                VALUES (?, ?, 0, 0)
                """,
                (game_id, datetime.now().isoformat()),
            )
        logger.debug(f"Logged start of game {game_id}")

    def log_game_won(self, game_id: str, duration: int, moves: int) -> None:
        """Record the final duration and move count of a won game."""
        with sqlite3.connect(self.db_path) as conn:
            cursor = conn.execute(
                """
                UPDATE games
                SET ended_at = ?, duration = ?, moves = ?, won = 1
                WHERE id = ?
                """,
                (datetime.now().isoformat(), duration, moves, game_id),
            )
            if cursor.rowcount == 0:
                # Game restored from a snapshot taken before this log existed
                conn.execute(
                    """
                    INSERT INTO games (id, ended_at, duration, moves, won)
                    VALUES (?, ?, ?, ?, 1)
                    """,
                    (game_id, datetime.now().isoformat(), duration, moves),
                )
        logger.info(f"Logged win of game {game_id}: {moves} moves in {duration}s")

    def get_game(self, game_id: str) -> Optional[dict]:
        """
        Look up a game row.

        Returns:
            Dict with id, started_at, ended_at, duration, moves and won,
            or None if the game was never logged.
        """
        with sqlite3.connect(self.db_path) as conn:
            conn.row_factory = sqlite3.Row
            row = conn.execute(
                "SELECT * FROM games WHERE id = ?", (game_id,)
            ).fetchone()
        if row is None:
            return None
        game = dict(row)
        game["won"] = bool(game["won"])
        return game

    def count_games(self, won_only: bool = False) -> int:
        """Number of logged games, optionally only the won ones."""
        query = "SELECT COUNT(*) FROM games"
        if won_only:
            query += " WHERE won = 1"
        with sqlite3.connect(self.db_path) as conn:
            return conn.execute(query).fetchone()[0]
