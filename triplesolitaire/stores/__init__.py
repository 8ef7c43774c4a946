"""Stores package for saved Triple Solitaire games."""

from .snapshot_cache import SnapshotCache, get_snapshot_cache, close_snapshot_cache

__all__ = [
    "SnapshotCache",
    "get_snapshot_cache",
    "close_snapshot_cache",
]
