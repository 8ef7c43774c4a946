"""
Triple Solitaire Self-Play Simulation Runner

Plays seeded games with a simple greedy player to exercise the engine and
gather win-rate statistics. No UI needed - runs games directly against
the engine with animations turned off.

Usage:
    python -m triplesolitaire.simulate [num_games] [seed]

Examples:
    python -m triplesolitaire.simulate 10       # Run 10 random deals
    python -m triplesolitaire.simulate 50 1234  # Run 50 deals seeded from 1234
"""

import random
import sys
from dataclasses import dataclass
from typing import Optional

from .cards import rank_of
from .config import GameplayPreferences, config
from .constants import DRAW_COUNT, WASTE_INDEX, lane_indexes
from .engine import GameEngine
from .game_log import GameLog
from .logging_config import setup_logging
from .move import Move

# Let auto play do all foundation work so the player only builds lanes
SIMULATION_PREFERENCES = GameplayPreferences(
    auto_flip=True,
    auto_play="always",
    animate_auto_play=False,
    animate_undo=False,
)


@dataclass
class GameResult:
    """Outcome of one simulated game."""

    seed: int
    won: bool
    move_count: int
    player_moves: int
    foundation_cards: int
    elapsed_seconds: int


class SimulationStats:
    """Track simulation statistics."""

    def __init__(self):
        self.games_played = 0
        self.games_won = 0
        self.total_moves = 0
        self.total_foundation_cards = 0
        self.results: list[GameResult] = []

    def record_game(self, result: GameResult):
        self.games_played += 1
        if result.won:
            self.games_won += 1
        self.total_moves += result.move_count
        self.total_foundation_cards += result.foundation_cards
        self.results.append(result)

    @property
    def win_rate(self) -> float:
        if self.games_played == 0:
            return 0.0
        return self.games_won / self.games_played * 100

    def report(self) -> str:
        lines = [
            "=" * 50,
            "SIMULATION RESULTS",
            "=" * 50,
            f"Games played: {self.games_played}",
            f"Games won: {self.games_won} ({self.win_rate:.1f}%)",
            f"Avg moves/game: {self.total_moves / max(1, self.games_played):.1f}",
            f"Avg foundation cards/game: "
            f"{self.total_foundation_cards / max(1, self.games_played):.1f}",
        ]

        won = [r for r in self.results if r.won]
        if won:
            fastest = min(won, key=lambda r: r.move_count)
            lines.append(f"Fewest moves to win: {fastest.move_count} (seed {fastest.seed})")

        return "\n".join(lines)


def find_player_move(engine: GameEngine) -> Optional[Move]:
    """
    Pick a lane-building move, or None if the stock should be clicked.

    Only moves that make progress are considered: the top waste card to a
    lane, or a whole cascade that uncovers a face-down card. Both shrink
    something that can never grow back, so the player cannot loop.
    """
    layout = engine.layout

    card = engine.waste_card(0)
    if card is not None:
        for lane_index in lane_indexes():
            if layout.lane(lane_index).cascade:
                accepted = engine.accept_cascade_drop(lane_index, card)
            else:
                accepted = engine.accept_lane_drop(lane_index, card)
            if accepted:
                return Move.player_move(WASTE_INDEX, lane_index, card)

    for source in lane_indexes():
        lane = layout.lane(source)
        if not lane.cascade or not lane.stack:
            continue
        run = engine.cascade_run(source, len(lane.cascade))
        for target in lane_indexes():
            if target == source:
                continue
            if layout.lane(target).cascade:
                accepted = engine.accept_cascade_drop(target, run)
            else:
                accepted = engine.accept_lane_drop(target, run)
            if accepted:
                return Move.player_move(source, target, run)

    return None


def run_game(
    seed: int,
    max_moves: int = 2000,
    game_log: Optional[GameLog] = None,
) -> GameResult:
    """Play one seeded game to a win or until the player is stuck."""
    engine = GameEngine(preferences=SIMULATION_PREFERENCES, game_log=game_log)
    engine.new_game(seed)

    player_moves = 0
    idle_clicks = 0

    while not engine.won and player_moves < max_moves:
        move = find_player_move(engine)
        if move is not None:
            engine.move(move)
            idle_clicks = 0
        else:
            cards_left = len(engine.layout.stock) + len(engine.layout.waste)
            if cards_left == 0:
                break
            # Two full passes through the stock without a lane move
            if idle_clicks > 2 * (cards_left // DRAW_COUNT + 2):
                break
            engine.move(Move.stock())
            idle_clicks += 1
        player_moves += 1
        engine.tick()

    # A foundation showing rank r holds r cards
    foundation_cards = sum(rank_of(card) for card in engine.layout.foundation if card)
    return GameResult(
        seed=seed,
        won=engine.won,
        move_count=engine.move_count,
        player_moves=player_moves,
        foundation_cards=foundation_cards,
        elapsed_seconds=engine.time_in_seconds,
    )


def run_simulation(
    num_games: int = 10,
    seed: Optional[int] = None,
    verbose: bool = True,
    game_log: Optional[GameLog] = None,
) -> SimulationStats:
    """Run multiple games and report statistics."""

    rng = random.Random(seed)
    stats = SimulationStats()

    if verbose:
        print(f"\nRunning {num_games} games...")
        print("=" * 50)

    for i in range(num_games):
        game_seed = rng.randint(0, 2**31 - 1)
        result = run_game(game_seed, game_log=game_log)
        stats.record_game(result)

        if verbose:
            outcome = "WON" if result.won else f"{result.foundation_cards} cards home"
            print(f"Game {i+1}/{num_games} (seed {game_seed}): {outcome}, {result.move_count} moves")

    if verbose:
        print("\n")
        print(stats.report())

    return stats


if __name__ == "__main__":
    setup_logging(level=config.LOG_LEVEL, environment=config.ENVIRONMENT)
    num_games = int(sys.argv[1]) if len(sys.argv) > 1 else 10
    seed = int(sys.argv[2]) if len(sys.argv) > 2 else None
    run_simulation(num_games, seed, game_log=GameLog(config.GAME_DB_PATH))
