"""
Game engine for Triple Solitaire.

This module owns the authoritative game state and implements the rules:
dealing, drop validation, applying every kind of move, undo, auto play,
win detection, the move counter and game timer, and snapshot save/restore.

Triple Solitaire Rules Summary:
    - Three shuffled decks (156 cards) dealt into 13 lanes and a stock
    - Lane i (0-based) starts with i face-down cards and one face-up card
    - Cascades build down in alternating colors; empty lanes take kings only
    - Clicking the stock draws up to 3 cards to the waste, or recycles the
      waste back into the stock once the stock is empty
    - Each of the 12 foundations builds up in suit from ace to king
    - The game is won when every foundation shows a king

Settlement:
    After a counted move the engine "settles": it checks for a win and, if
    no animation is outstanding, asks the auto play policy for one more
    move. Animated auto plays bump a pending counter and settle only when
    the observer calls animation_completed(). All of this runs through a
    work queue drained by the command that started it, so auto play chains
    never recurse.
"""

import uuid
from collections import deque
from typing import TYPE_CHECKING, Any, Mapping, Optional, Union

from . import rules
from .autoplay import cascade_auto_move, find_auto_move, waste_auto_move
from .cards import Deck, is_king, prev_in_suit
from .config import GameplayPreferences, config
from .constants import LANE_COUNT, DRAW_COUNT, foundation_indexes, lane_indexes
from .layout import Layout
from .logging_config import get_logger
from .move import Move, MoveType, is_foundation, is_lane, is_waste
from .observer import GameObserver
from .snapshot import SavedGame

if TYPE_CHECKING:
    from .game_log import GameLog

logger = get_logger(__name__)

# Work queue markers (everything else in the queue is a Move to apply)
_SETTLE = "settle"
_AUTO_PLAY = "auto_play"

WorkItem = Union[Move, str]


class GameEngine:
    """
    Rule engine and state owner for a single Triple Solitaire game.

    Moves passed to move() are assumed valid: callers check them first with
    accept_foundation_drop(), accept_cascade_drop() and accept_lane_drop().
    Applying an invalid move corrupts the layout.

    Attributes:
        observer: Receives board change notifications.
        preferences: Auto flip, auto play and animation settings.
        game_log: Optional SQLite record of game starts and wins.
        layout: Current card positions.
        game_id: Identifier of the current game.
        seed: Shuffle seed of the current deal (None after a restore).
        move_count: Counted moves (flips and undos are not counted).
        time_in_seconds: Elapsed play time, advanced by tick().
        game_in_progress: Whether the timer runs and auto play is allowed.
        won: Whether the current game has been won.
        autoplay_lane_locked: Lanes auto play must skip, by lane number - 1.
        history: Undo history, most recent move last.
        pending_moves: Animated auto plays not yet acknowledged.
    """

    def __init__(
        self,
        observer: Optional[GameObserver] = None,
        preferences: Optional[GameplayPreferences] = None,
        game_log: Optional["GameLog"] = None,
    ) -> None:
        self.observer = observer or GameObserver()
        self.preferences = preferences or config.preferences
        self.game_log = game_log

        self.layout = Layout()
        self.game_id = str(uuid.uuid4())
        self.seed: Optional[int] = None
        self.move_count = 0
        self.time_in_seconds = 0
        self.game_in_progress = False
        self.won = False
        self.autoplay_lane_locked: list[bool] = [False] * LANE_COUNT
        self.history: list[Move] = []
        self.pending_moves = 0

        self._work: deque[WorkItem] = deque()
        self._draining = False
        self._log = logger.with_context(game_id=self.game_id)

    # -------------------------------------------------------------------------
    # Game Lifecycle
    # -------------------------------------------------------------------------

    def new_game(self, seed: Optional[int] = None) -> None:
        """
        Shuffle and deal a new game, resetting all session state.

        Args:
            seed: Optional shuffle seed for a reproducible deal.
        """
        deck = Deck(seed=seed)
        self._reset_session(str(uuid.uuid4()))
        self.seed = deck.seed
        self.layout = Layout.deal(deck.cards)

        self.observer.update_elapsed_time()
        self.observer.update_move_count()
        self.observer.notify_undo_availability_changed()
        self._render_all()
        self._log.info(f"New game dealt from seed {deck.seed}")

    def pause(self) -> None:
        """Stop the timer and auto play."""
        self.game_in_progress = False

    def resume(self) -> None:
        """Restart the timer and auto play, once at least one move was made."""
        self.game_in_progress = self.move_count > 0 and not self.won

    def tick(self) -> bool:
        """
        Advance the game timer by one second.

        The host calls this once a second while a game is in progress.

        Returns:
            Whether the tick was counted (False tells the host to stop).
        """
        if not self.game_in_progress or self.move_count == 0:
            return False
        self.time_in_seconds += 1
        self.observer.update_elapsed_time()
        return True

    def _reset_session(self, game_id: str) -> None:
        self.game_id = game_id
        self._log = logger.with_context(game_id=game_id)
        self.seed = None
        self.move_count = 0
        self.time_in_seconds = 0
        self.game_in_progress = False
        self.won = False
        self.autoplay_lane_locked = [False] * LANE_COUNT
        self.history = []
        self.pending_moves = 0
        self._work.clear()

    # -------------------------------------------------------------------------
    # Drop Validation
    # -------------------------------------------------------------------------

    def accept_foundation_drop(self, foundation_index: int, cards: rules.Payload) -> bool:
        """
        Whether a foundation accepts a dropped card.

        Args:
            foundation_index: Foundation (-1 through -12).
            cards: The dropped card, or a run (runs are always rejected).
        """
        accepted = rules.accept_foundation_drop(
            self.layout.foundation_card(foundation_index), cards
        )
        if accepted:
            self._log.debug(
                f"Drag -> {foundation_index}: acceptable drop of {cards} onto "
                f"{self.layout.foundation_card(foundation_index) or 'empty foundation'}"
            )
        return accepted

    def accept_cascade_drop(self, lane_index: int, cards: rules.Payload) -> bool:
        """
        Whether a lane's cascade accepts a card or a run, judged by its bottom card.

        Args:
            lane_index: Lane (1 through 13); its cascade must be non-empty.
            cards: The dropped card, or a run with its bottom card first.
        """
        bottom_card = rules.as_cascade(cards)[0]
        return rules.accept_cascade_drop(self.layout.lane(lane_index).top_card, bottom_card)

    def accept_lane_drop(self, lane_index: int, cards: rules.Payload) -> bool:
        """
        Whether an empty lane accepts a card or a run, judged by its lead card.

        A lane still holding face-down cards accepts nothing.
        """
        lane = self.layout.lane(lane_index)
        if lane.stack or lane.cascade:
            return False
        return rules.accept_lane_drop(rules.as_cascade(cards)[0])

    # -------------------------------------------------------------------------
    # Commands
    # -------------------------------------------------------------------------

    def move(self, move: Move) -> None:
        """
        Apply a move, then settle and auto play as needed.

        Args:
            move: A pre-validated move.
        """
        self._work.append(move)
        self._drain()

    def undo(self) -> None:
        """Undo the most recent move. Does nothing if there is none."""
        if not self.history:
            return
        self._work.append(self.history.pop().to_undo())
        self._drain()
        if not self.history:
            self.observer.notify_undo_availability_changed()

    def animation_completed(self) -> None:
        """
        Acknowledge the end of an animated auto play.

        Settles once the last outstanding animation completes.
        """
        if self.pending_moves == 0:
            self._log.warning("Animation completed with no pending moves; ignoring")
            return
        self.pending_moves -= 1
        self._work.append(_SETTLE)
        self._drain()

    def attempt_auto_move_from_cascade(self, lane_index: int) -> bool:
        """
        Auto play a lane's top card to the first foundation that takes it.

        Returns:
            Whether a move was made.
        """
        move = cascade_auto_move(self.layout, lane_index)
        if move is None:
            return False
        self.move(move)
        return True

    def attempt_auto_move_from_waste(self) -> bool:
        """
        Auto play the top waste card to the first foundation that takes it.

        Returns:
            Whether a move was made.
        """
        move = waste_auto_move(self.layout)
        if move is None:
            return False
        self.move(move)
        return True

    # -------------------------------------------------------------------------
    # Accessors
    # -------------------------------------------------------------------------

    def foundation_card(self, foundation_index: int) -> Optional[str]:
        """Top card of a foundation (-1 through -12), None if empty."""
        return self.layout.foundation_card(foundation_index)

    def waste_card(self, waste_index: int) -> Optional[str]:
        """Waste card by position (0 is the top card), None past the end."""
        if waste_index < len(self.layout.waste):
            return self.layout.waste[waste_index]
        return None

    @property
    def is_stock_empty(self) -> bool:
        return not self.layout.stock

    @property
    def is_waste_empty(self) -> bool:
        return not self.layout.waste

    def cascade_run(self, lane_index: int, count: int) -> list[str]:
        """Top count cards of a lane's cascade, bottom card first."""
        return self.layout.cascade_run(lane_index, count)

    def can_undo(self) -> bool:
        return bool(self.history)

    # -------------------------------------------------------------------------
    # Work Queue
    # -------------------------------------------------------------------------

    def _drain(self) -> None:
        """Process queued work until none is left."""
        if self._draining:
            # Re-entrant call from an observer; the outer drain picks it up
            return
        self._draining = True
        try:
            while self._work:
                item = self._work.popleft()
                if isinstance(item, Move):
                    self._apply(item)
                elif item == _SETTLE:
                    self._settle()
                elif item == _AUTO_PLAY:
                    self._auto_play()
        except Exception:
            self._work.clear()
            raise
        finally:
            self._draining = False

    def _settle(self) -> None:
        self._check_for_win()
        if self.pending_moves == 0:
            self._work.append(_AUTO_PLAY)

    def _auto_play(self) -> None:
        """Queue at most one automatic move."""
        if not self.game_in_progress or self.pending_moves > 0:
            return
        move = find_auto_move(self.layout, self.autoplay_lane_locked, self.preferences)
        if move is not None:
            self._work.append(move)

    # -------------------------------------------------------------------------
    # Move Application
    # -------------------------------------------------------------------------

    def _apply(self, move: Move) -> None:
        self._log.debug(str(move), extra={"move": str(move)})
        if move.type == MoveType.STOCK:
            self._apply_stock()
        elif move.type == MoveType.UNDO_STOCK:
            self._apply_undo_stock(move)
        elif move.type == MoveType.FLIP:
            self._apply_flip(move)
        elif move.type == MoveType.UNDO_FLIP:
            self._apply_undo_flip(move)
        else:
            self._apply_transfer(move)

    def _apply_stock(self) -> None:
        stock, waste = self.layout.stock, self.layout.waste
        if not stock:
            # Turn the waste back over into the stock
            stock.extend(waste)
            waste.clear()
            self._add_move_to_undo(Move.stock())
        else:
            drawn = []
            while stock and len(drawn) < DRAW_COUNT:
                card = stock.pop()
                waste.insert(0, card)
                drawn.append(card)
            self._add_move_to_undo(Move.stock(drawn))
        self.observer.update_waste()
        self.observer.update_stock()
        self._move_started(reset_locks=True)
        self._work.append(_SETTLE)

    def _apply_undo_stock(self, move: Move) -> None:
        stock, waste = self.layout.stock, self.layout.waste
        if not waste:
            # An empty waste means the undone click was a recycle
            waste.extend(stock)
            stock.clear()
        else:
            for card in reversed(move.cascade):
                stock.append(card)
                waste.pop(0)
        self.observer.update_waste()
        self.observer.update_stock()

    def _apply_flip(self, move: Move) -> None:
        lane = self.layout.lane(move.to_index)
        card = lane.stack.pop()
        lane.cascade.append(card)
        self._add_move_to_undo(move)
        self.observer.flip_lane_top_card(move.to_index, card)
        self._reset_lane_locks()
        self._work.append(_AUTO_PLAY)

    def _apply_undo_flip(self, move: Move) -> None:
        lane = self.layout.lane(move.to_index)
        lane.stack.append(lane.cascade.pop(0))
        self.observer.render_lane_stack_size(move.to_index, len(lane.stack))
        self.observer.render_lane_cascade(move.to_index, list(lane.cascade))

    def _apply_transfer(self, move: Move) -> None:
        """Shared path for PLAYER_MOVE, AUTO_PLAY and UNDO."""
        self._take_from_source(move)
        self._place_at_destination(move)
        if move.type != MoveType.UNDO:
            self._add_move_to_undo(move)
        self._refresh(move.from_index)

        if move.type == MoveType.AUTO_PLAY:
            self._move_started(reset_locks=True)
            if self.preferences.animate_auto_play:
                # Settle only after the animation is acknowledged
                self.pending_moves += 1
                self.observer.request_animated_move(move)
            else:
                self._refresh(move.to_index)
                self._work.append(_SETTLE)
        elif move.type == MoveType.UNDO:
            if self.won and is_foundation(move.from_index):
                # A king left the foundations; the game can be won again
                self.won = False
                self._log.info("Win undone")
            if self.preferences.animate_undo:
                self.observer.request_animated_move(move)
            else:
                self._refresh(move.to_index)
        else:
            from_foundation_to_lane = is_foundation(move.from_index) and is_lane(move.to_index)
            if from_foundation_to_lane:
                # Keep auto play from sending the card straight back
                self.autoplay_lane_locked[move.to_index - 1] = True
            self._refresh(move.to_index)
            self._move_started(reset_locks=not from_foundation_to_lane)
            self._work.append(_SETTLE)

    def _take_from_source(self, move: Move) -> None:
        if is_foundation(move.from_index):
            self.layout.set_foundation(move.from_index, prev_in_suit(move.card))
        elif is_waste(move.from_index):
            self.layout.waste.pop(0)
        else:
            cascade = self.layout.lane(move.from_index).cascade
            for _ in move.cascade:
                cascade.pop()

    def _place_at_destination(self, move: Move) -> None:
        if is_foundation(move.to_index):
            self.layout.set_foundation(move.to_index, move.card)
        elif is_waste(move.to_index):
            self.layout.waste.insert(0, move.card)
        else:
            self.layout.lane(move.to_index).cascade.extend(move.cascade)

    def _add_move_to_undo(self, move: Move) -> None:
        self.history.append(move)
        if len(self.history) == 1:
            self.observer.notify_undo_availability_changed()

    def _move_started(self, reset_locks: bool) -> None:
        """Count a move, starting the game on its first move."""
        self.move_count += 1
        self.observer.update_move_count()
        if self.move_count == 1:
            if self.game_log is not None:
                self.game_log.log_game_start(self.game_id)
            self.resume()
        if reset_locks:
            self._reset_lane_locks()

    def _reset_lane_locks(self) -> None:
        self.autoplay_lane_locked = [False] * LANE_COUNT

    # -------------------------------------------------------------------------
    # Win Detection
    # -------------------------------------------------------------------------

    def _check_for_win(self) -> None:
        if self.won:
            return
        if not all(card is not None and is_king(card) for card in self.layout.foundation):
            return
        self.won = True
        self._log.info(
            f"Game won in {self.move_count} moves, {self.time_in_seconds}s"
        )
        self.pause()
        if self.game_log is not None:
            self.game_log.log_game_won(self.game_id, self.time_in_seconds, self.move_count)
        self.observer.signal_win(self.time_in_seconds, self.move_count)

    # -------------------------------------------------------------------------
    # Observer Refresh
    # -------------------------------------------------------------------------

    def _refresh(self, index: int) -> None:
        if is_foundation(index):
            self.observer.update_foundation_slot(index)
        elif is_waste(index):
            self.observer.update_waste()
        else:
            self.observer.render_lane_cascade(index, list(self.layout.lane(index).cascade))

    def _render_all(self) -> None:
        self.observer.update_stock()
        self.observer.update_waste()
        for foundation_index in foundation_indexes():
            self.observer.update_foundation_slot(foundation_index)
        for lane_index in lane_indexes():
            lane = self.layout.lane(lane_index)
            self.observer.render_lane_stack_size(lane_index, len(lane.stack))
            self.observer.render_lane_cascade(lane_index, list(lane.cascade))

    # -------------------------------------------------------------------------
    # Persistence
    # -------------------------------------------------------------------------

    def save_snapshot(self) -> dict[str, Any]:
        """
        Capture the full game as a flat snapshot mapping.

        Outstanding animations are not part of the snapshot.
        """
        return SavedGame(
            game_id=self.game_id,
            time_in_seconds=self.time_in_seconds,
            move_count=self.move_count,
            autoplay_lane_locked=list(self.autoplay_lane_locked),
            history=list(self.history),
            layout=self.layout.copy(),
        ).to_snapshot()

    def restore_snapshot(self, snapshot: Mapping[str, Any]) -> None:
        """
        Replace the current game with a saved one.

        The snapshot is fully validated first; on error the current game is
        left untouched. The restored game starts paused, and the win check
        runs in case the save happened right as the game was won.

        Raises:
            SnapshotError: If the snapshot is incomplete or corrupt.
        """
        saved = SavedGame.from_snapshot(snapshot)

        self._reset_session(saved.game_id)
        self.time_in_seconds = saved.time_in_seconds
        self.move_count = saved.move_count
        self.autoplay_lane_locked = list(saved.autoplay_lane_locked)
        self.history = list(saved.history)
        self.layout = saved.layout

        self.observer.update_elapsed_time()
        self.observer.update_move_count()
        self.observer.notify_undo_availability_changed()
        self._render_all()
        self._log.info(f"Restored game at move {self.move_count}")
        self._check_for_win()
