"""
Redis-backed snapshot cache.

Keeps the saved game for each save slot so a player can leave and come
back to the same deal. Redis provides:
- Fast reads/writes of a whole game in one round trip
- TTL expiration for abandoned saves

Each snapshot field is stored as one hash field holding its JSON value,
so a single field can be inspected with redis-cli without decoding the
whole game.

Key patterns:
- triplesolitaire:snapshot:{slot}  -> Hash (snapshot field -> JSON value)
"""

import logging
from datetime import timedelta
from typing import Any, Mapping, Optional

import redis.asyncio as redis

from ..config import config
from ..snapshot import from_json, to_json

logger = logging.getLogger(__name__)


class SnapshotCache:
    """Redis-backed store of saved games, one per save slot."""

    SNAPSHOT_KEY = "triplesolitaire:snapshot:{slot}"

    def __init__(self, redis_client: redis.Redis, ttl: Optional[timedelta] = None):
        """
        Initialize snapshot cache with Redis client.

        Args:
            redis_client: Async Redis client.
            ttl: How long an untouched save is kept. Defaults to
                SNAPSHOT_TTL_HOURS from the config.
        """
        self.redis = redis_client
        self.ttl = ttl or timedelta(hours=config.SNAPSHOT_TTL_HOURS)

    @classmethod
    async def create(cls, redis_url: str) -> "SnapshotCache":
        """
        Create a SnapshotCache with a new Redis connection.

        Args:
            redis_url: Redis connection URL.

        Returns:
            Configured SnapshotCache instance.
        """
        client = redis.from_url(redis_url, decode_responses=False)
        # Test connection
        await client.ping()
        logger.info("SnapshotCache connected to Redis")
        return cls(client)

    async def close(self) -> None:
        """Close the Redis connection."""
        await self.redis.close()

    def _key(self, slot: str) -> str:
        return self.SNAPSHOT_KEY.format(slot=slot)

    # -------------------------------------------------------------------------
    # Snapshot Operations
    # -------------------------------------------------------------------------

    async def save_snapshot(self, slot: str, snapshot: Mapping[str, Any]) -> None:
        """
        Save a game snapshot, replacing whatever the slot held.

        Args:
            slot: Save slot name.
            snapshot: Mapping from GameEngine.save_snapshot().
        """
        key = self._key(slot)
        pipe = self.redis.pipeline()
        pipe.delete(key)
        pipe.hset(key, mapping=to_json(snapshot))
        pipe.expire(key, int(self.ttl.total_seconds()))
        await pipe.execute()
        logger.debug(
            f"Saved snapshot to slot {slot}",
            extra={"save_slot": slot, "game_id": snapshot.get("game_id")},
        )

    async def load_snapshot(self, slot: str) -> Optional[dict[str, Any]]:
        """
        Load a game snapshot.

        Args:
            slot: Save slot name.

        Returns:
            Snapshot mapping for GameEngine.restore_snapshot(), or None if
            the slot is empty.

        Raises:
            SnapshotError: If a stored field is not valid JSON.
        """
        fields = await self.redis.hgetall(self._key(slot))
        if not fields:
            return None
        return from_json(fields)

    async def has_snapshot(self, slot: str) -> bool:
        """Check whether a save slot holds a snapshot."""
        return await self.redis.exists(self._key(slot)) > 0

    async def delete_snapshot(self, slot: str) -> None:
        """Delete the snapshot in a save slot, if any."""
        await self.redis.delete(self._key(slot))
        logger.debug(f"Deleted snapshot in slot {slot}", extra={"save_slot": slot})


# Global instance (initialized on first use)
_snapshot_cache: Optional[SnapshotCache] = None


async def get_snapshot_cache(redis_url: Optional[str] = None) -> SnapshotCache:
    """
    Get or create the global snapshot cache instance.

    Args:
        redis_url: Redis connection URL. Defaults to REDIS_URL from the config.

    Returns:
        SnapshotCache instance.
    """
    global _snapshot_cache
    if _snapshot_cache is None:
        _snapshot_cache = await SnapshotCache.create(redis_url or config.REDIS_URL)
    return _snapshot_cache


async def close_snapshot_cache() -> None:
    """Close the global snapshot cache connection."""
    global _snapshot_cache
    if _snapshot_cache is not None:
        await _snapshot_cache.close()
        _snapshot_cache = None
