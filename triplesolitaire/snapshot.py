"""
Snapshot codec for saving and restoring a game.

A snapshot is a flat mapping from field name to a simple value (string,
integer, or list), so it can be stored in any key-value store:

    game_id                 str
    time_in_seconds         int
    move_count              int
    autoplay_lane_locked    list of 13 bools
    moves                   list of canonical move strings (undo history)
    stock                   list of cards, last on top
    waste                   list of cards, first on top
    foundation              list of 12 cards or None
    lane_stack_0..12        list of cards, last on top
    lane_cascade_0..12      list of cards, last on top

Decoding validates every field before anything is handed to the engine,
so a corrupt snapshot can never leave a game half restored.
"""

import json
from dataclasses import dataclass, field
from typing import Any, Mapping, Optional, Union

from .cards import CardParseError, parse_card
from .constants import FOUNDATION_COUNT, LANE_COUNT, TOTAL_CARDS
from .layout import LaneData, Layout
from .move import Move, MoveParseError


class SnapshotError(ValueError):
    """Raised when a snapshot is missing fields or holds corrupt values."""


def lane_stack_key(lane_number: int) -> str:
    return f"lane_stack_{lane_number}"


def lane_cascade_key(lane_number: int) -> str:
    return f"lane_cascade_{lane_number}"


SNAPSHOT_KEYS: tuple[str, ...] = (
    "game_id",
    "time_in_seconds",
    "move_count",
    "autoplay_lane_locked",
    "moves",
    "stock",
    "waste",
    "foundation",
    *(lane_stack_key(i) for i in range(LANE_COUNT)),
    *(lane_cascade_key(i) for i in range(LANE_COUNT)),
)


@dataclass
class SavedGame:
    """
    Everything needed to resume a game.

    Attributes:
        game_id: Identifier of the game in the game log.
        time_in_seconds: Elapsed play time.
        move_count: Counted moves so far.
        autoplay_lane_locked: Per-lane auto play locks.
        history: Undo history, oldest first.
        layout: Card positions.
    """

    game_id: str
    time_in_seconds: int = 0
    move_count: int = 0
    autoplay_lane_locked: list[bool] = field(default_factory=lambda: [False] * LANE_COUNT)
    history: list[Move] = field(default_factory=list)
    layout: Layout = field(default_factory=Layout)

    def to_snapshot(self) -> dict[str, Any]:
        """Encode as a flat snapshot mapping."""
        snapshot: dict[str, Any] = {
            "game_id": self.game_id,
            "time_in_seconds": self.time_in_seconds,
            "move_count": self.move_count,
            "autoplay_lane_locked": list(self.autoplay_lane_locked),
            "moves": [str(move) for move in self.history],
            "stock": list(self.layout.stock),
            "waste": list(self.layout.waste),
            "foundation": list(self.layout.foundation),
        }
        for lane_number, lane in enumerate(self.layout.lanes):
            snapshot[lane_stack_key(lane_number)] = list(lane.stack)
            snapshot[lane_cascade_key(lane_number)] = list(lane.cascade)
        return snapshot

    @classmethod
    def from_snapshot(cls, snapshot: Mapping[str, Any]) -> "SavedGame":
        """
        Decode and validate a snapshot.

        Args:
            snapshot: Mapping as produced by to_snapshot().

        Returns:
            The decoded SavedGame.

        Raises:
            SnapshotError: If any field is missing or invalid.
        """
        if not isinstance(snapshot, Mapping):
            raise SnapshotError("Snapshot must be a mapping")

        missing = [key for key in SNAPSHOT_KEYS if key not in snapshot]
        if missing:
            raise SnapshotError(f"Snapshot missing fields: {', '.join(missing)}")

        game_id = snapshot["game_id"]
        if not isinstance(game_id, str) or not game_id:
            raise SnapshotError("game_id must be a non-empty string")

        locks = snapshot["autoplay_lane_locked"]
        if (
            not isinstance(locks, list)
            or len(locks) != LANE_COUNT
            or not all(isinstance(lock, bool) for lock in locks)
        ):
            raise SnapshotError(f"autoplay_lane_locked must be {LANE_COUNT} booleans")

        moves = snapshot["moves"]
        if not isinstance(moves, list):
            raise SnapshotError("moves must be a list")
        try:
            history = [Move.parse(text) for text in moves]
        except MoveParseError as e:
            raise SnapshotError(f"Corrupt undo history: {e}") from e

        foundation = snapshot["foundation"]
        if not isinstance(foundation, list) or len(foundation) != FOUNDATION_COUNT:
            raise SnapshotError(f"foundation must be a list of {FOUNDATION_COUNT} slots")

        layout = Layout(
            stock=_card_list(snapshot, "stock"),
            waste=_card_list(snapshot, "waste"),
            foundation=[_optional_card(card, "foundation") for card in foundation],
            lanes=[
                LaneData(
                    stack=_card_list(snapshot, lane_stack_key(i)),
                    cascade=_card_list(snapshot, lane_cascade_key(i)),
                )
                for i in range(LANE_COUNT)
            ],
        )

        count = layout.card_count()
        if count != TOTAL_CARDS:
            raise SnapshotError(f"Snapshot holds {count} cards, expected {TOTAL_CARDS}")

        return cls(
            game_id=game_id,
            time_in_seconds=_counter(snapshot, "time_in_seconds"),
            move_count=_counter(snapshot, "move_count"),
            autoplay_lane_locked=list(locks),
            history=history,
            layout=layout,
        )


def _counter(snapshot: Mapping[str, Any], key: str) -> int:
    value = snapshot[key]
    # bool is an int subclass; reject it explicitly
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise SnapshotError(f"{key} must be a non-negative integer")
    return value


def _card_list(snapshot: Mapping[str, Any], key: str) -> list[str]:
    cards = snapshot[key]
    if not isinstance(cards, list):
        raise SnapshotError(f"{key} must be a list of cards")
    try:
        return [parse_card(card) for card in cards]
    except CardParseError as e:
        raise SnapshotError(f"Bad card in {key}: {e}") from e


def _optional_card(card: Optional[str], key: str) -> Optional[str]:
    if card is None:
        return None
    try:
        return parse_card(card)
    except CardParseError as e:
        raise SnapshotError(f"Bad card in {key}: {e}") from e


# =============================================================================
# Flat string form
# =============================================================================


def to_json(snapshot: Mapping[str, Any]) -> dict[str, str]:
    """Encode each snapshot field as a JSON string (one hash field per key)."""
    return {key: json.dumps(value) for key, value in snapshot.items()}


def from_json(fields: Mapping[Union[str, bytes], Union[str, bytes]]) -> dict[str, Any]:
    """
    Decode a mapping produced by to_json().

    Keys and values may be bytes, as returned by a Redis client without
    response decoding.

    Raises:
        SnapshotError: If a field is not valid JSON.
    """
    snapshot: dict[str, Any] = {}
    for key, value in fields.items():
        name = key.decode() if isinstance(key, bytes) else key
        raw = value.decode() if isinstance(value, bytes) else value
        try:
            snapshot[name] = json.loads(raw)
        except json.JSONDecodeError as e:
            raise SnapshotError(f"Field {name} is not valid JSON") from e
    return snapshot
