"""
Tests for saving and restoring games.

Run with: pytest tests/test_snapshot.py -v
"""

import json

import pytest
from conftest import build_layout, restore_layout

from triplesolitaire.move import Move
from triplesolitaire.simulate import find_player_move
from triplesolitaire.snapshot import (
    SNAPSHOT_KEYS,
    SavedGame,
    SnapshotError,
    from_json,
    to_json,
)


@pytest.fixture
def played_engine(make_engine):
    """Engine partway through a seeded game."""
    engine = make_engine(auto_flip=True, auto_play="always")
    engine.new_game(seed=21)
    for _ in range(25):
        engine.move(find_player_move(engine) or Move.stock())
    engine.tick()
    engine.tick()
    return engine


# =============================================================================
# Round Trip
# =============================================================================

class TestRoundTrip:
    """restore(save(game)) reproduces the game."""

    def test_snapshot_has_every_key(self, played_engine):
        assert set(played_engine.save_snapshot()) == set(SNAPSHOT_KEYS)

    def test_lane_keys_are_zero_based(self, dealt_engine):
        snapshot = dealt_engine.save_snapshot()
        assert snapshot["lane_stack_0"] == []
        assert len(snapshot["lane_stack_12"]) == 12
        assert snapshot["lane_cascade_0"] == dealt_engine.layout.lane(1).cascade

    def test_restore_reproduces_state(self, played_engine, make_engine):
        snapshot = played_engine.save_snapshot()
        restored = make_engine()
        restored.restore_snapshot(snapshot)

        assert restored.layout == played_engine.layout
        assert restored.history == played_engine.history
        assert restored.game_id == played_engine.game_id
        assert restored.move_count == played_engine.move_count
        assert restored.time_in_seconds == 2
        assert restored.autoplay_lane_locked == played_engine.autoplay_lane_locked

    def test_restored_game_can_be_undone(self, played_engine, make_engine):
        restored = make_engine()
        restored.restore_snapshot(played_engine.save_snapshot())
        while played_engine.can_undo():
            played_engine.undo()
            restored.undo()
        assert restored.layout == played_engine.layout

    def test_locks_are_saved(self, engine):
        restore_layout(engine, build_layout(foundation={-1: "hearts5"}, lanes={2: ([], ["spades6"])}))
        engine.move(Move.player_move(-1, 2, "hearts5"))
        snapshot = engine.save_snapshot()
        assert snapshot["autoplay_lane_locked"][1] is True

    def test_restore_starts_paused(self, played_engine, make_engine):
        restored = make_engine()
        restored.restore_snapshot(played_engine.save_snapshot())
        assert not restored.game_in_progress
        restored.resume()
        assert restored.game_in_progress

    def test_restore_clears_pending_animations(self, make_engine):
        engine = make_engine(auto_play="always", animate_auto_play=True)
        restore_layout(engine, build_layout(lanes={1: ([], ["hearts1"])}), move_count=1)
        engine.attempt_auto_move_from_cascade(1)
        assert engine.pending_moves == 1

        engine.restore_snapshot(engine.save_snapshot())
        assert engine.pending_moves == 0

    def test_snapshot_is_json_safe(self, played_engine):
        snapshot = played_engine.save_snapshot()
        assert json.loads(json.dumps(snapshot)) == snapshot

    def test_saved_game_round_trip(self, played_engine):
        saved = SavedGame.from_snapshot(played_engine.save_snapshot())
        assert saved.to_snapshot() == played_engine.save_snapshot()


# =============================================================================
# Validation
# =============================================================================

class TestValidation:
    """Corrupt snapshots are rejected before anything changes."""

    def corrupt(self, engine, **changes):
        snapshot = engine.save_snapshot()
        snapshot.update(changes)
        return snapshot

    def assert_rejected(self, engine, snapshot):
        before = engine.layout.copy()
        game_id = engine.game_id
        history = list(engine.history)
        with pytest.raises(SnapshotError):
            engine.restore_snapshot(snapshot)
        assert engine.layout == before
        assert engine.game_id == game_id
        assert engine.history == history

    def test_missing_key(self, played_engine):
        snapshot = played_engine.save_snapshot()
        del snapshot["lane_cascade_7"]
        self.assert_rejected(played_engine, snapshot)

    def test_not_a_mapping(self, played_engine):
        self.assert_rejected(played_engine, ["game_id"])

    def test_bad_card(self, played_engine):
        snapshot = played_engine.save_snapshot()
        snapshot["stock"] = snapshot["stock"][:-1] + ["joker1"]
        self.assert_rejected(played_engine, snapshot)

    def test_non_ascii_rank(self, played_engine):
        """Unicode digits are not ranks."""
        snapshot = played_engine.save_snapshot()
        snapshot["waste"] = snapshot["waste"] + ["hearts²"]
        self.assert_rejected(played_engine, snapshot)

    def test_non_ascii_rank_in_history(self, played_engine):
        self.assert_rejected(played_engine, self.corrupt(played_engine, moves=["PLAYER_MOVE:0>1:hearts²"]))

    def test_bad_foundation_card(self, played_engine):
        self.assert_rejected(played_engine, self.corrupt(played_engine, foundation=["hearts0"] + [None] * 11))

    def test_bad_move_string(self, played_engine):
        self.assert_rejected(played_engine, self.corrupt(played_engine, moves=["STOCK:0>0:", "TELEPORT:1>2:"]))

    def test_card_missing(self, played_engine):
        snapshot = played_engine.save_snapshot()
        key = next(key for key in SNAPSHOT_KEYS[5:] if key != "foundation" and snapshot[key])
        snapshot[key] = snapshot[key][1:]
        self.assert_rejected(played_engine, snapshot)

    def test_card_duplicated(self, played_engine):
        snapshot = played_engine.save_snapshot()
        snapshot["waste"] = snapshot["waste"] + ["clubs1"]
        self.assert_rejected(played_engine, snapshot)

    def test_short_lock_list(self, played_engine):
        self.assert_rejected(played_engine, self.corrupt(played_engine, autoplay_lane_locked=[False] * 12))

    def test_non_bool_lock(self, played_engine):
        self.assert_rejected(played_engine, self.corrupt(played_engine, autoplay_lane_locked=[0] * 13))

    def test_short_foundation(self, played_engine):
        self.assert_rejected(played_engine, self.corrupt(played_engine, foundation=[None] * 11))

    @pytest.mark.parametrize("value", [-1, "12", True, 1.5, None])
    def test_bad_counter(self, played_engine, value):
        self.assert_rejected(played_engine, self.corrupt(played_engine, move_count=value))

    def test_empty_game_id(self, played_engine):
        self.assert_rejected(played_engine, self.corrupt(played_engine, game_id=""))

    def test_lane_not_a_list(self, played_engine):
        self.assert_rejected(played_engine, self.corrupt(played_engine, lane_stack_3="clubs1"))


# =============================================================================
# JSON Field Form
# =============================================================================

class TestJsonForm:
    """Snapshots as flat mappings of JSON strings."""

    def test_every_value_is_a_string(self, played_engine):
        fields = to_json(played_engine.save_snapshot())
        assert all(isinstance(value, str) for value in fields.values())

    def test_round_trip(self, played_engine):
        snapshot = played_engine.save_snapshot()
        assert from_json(to_json(snapshot)) == snapshot

    def test_accepts_bytes(self, played_engine):
        snapshot = played_engine.save_snapshot()
        raw = {key.encode(): value.encode() for key, value in to_json(snapshot).items()}
        assert from_json(raw) == snapshot

    def test_invalid_json(self):
        with pytest.raises(SnapshotError):
            from_json({"stock": "[not json"})
