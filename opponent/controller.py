"""Turn orchestration for the synthetic opponent.

The controller scores and picks a move synchronously as soon as it becomes
the opponent's turn, then waits out the tier's thinking delay on a
cancellable timer before playing the move on the live board.  Cancelling
(new game, undo, opponent switched off, tier changed) discards the pending
move; a cancelled turn never reaches the board.
"""

from __future__ import annotations

import random
import threading
from collections import deque
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Deque, Optional, Protocol, Tuple

import chess

from . import chess_logic
from .chess_logic import MoveRecord
from .errors import IllegalMoveError
from .scoring import ScoredMove, evaluate_position
from .selection import select_scored
from .tiers import SkillTier, TierProfile, TierRegistry


class ControllerState(Enum):
    IDLE = "idle"
    THINKING = "thinking"
    COMMITTING = "committing"


class TimerHandle(Protocol):
    def cancel(self) -> None:
        ...


class Scheduler(Protocol):
    """Anything with ``call_later``; a running asyncio event loop qualifies as is."""

    def call_later(self, delay: float, callback: Callable[[], None]) -> TimerHandle:
        ...


class ThreadingScheduler:
    """Runs callbacks on :class:`threading.Timer` daemon threads.

    Commits then happen off the caller's thread.  Hosts with their own event
    loop should pass it (or an asyncio loop) as the scheduler instead.
    """

    def call_later(self, delay: float, callback: Callable[[], None]) -> TimerHandle:
        timer = threading.Timer(delay, callback)
        timer.daemon = True
        timer.start()
        return timer


class _QueuedCall:
    def __init__(self, delay: float, callback: Callable[[], None]) -> None:
        self.delay = delay
        self.callback = callback
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class QueuedScheduler:
    """Cooperative scheduler: callbacks wait in a queue until the owner runs them.

    Delays are recorded but not slept, which makes it suitable for headless
    games and tests that want to decide exactly when a timer "fires".
    """

    def __init__(self) -> None:
        self._queue: Deque[_QueuedCall] = deque()

    def call_later(self, delay: float, callback: Callable[[], None]) -> TimerHandle:
        call = _QueuedCall(delay, callback)
        self._queue.append(call)
        return call

    @property
    def pending(self) -> int:
        return sum(1 for call in self._queue if not call.cancelled)

    def delays(self) -> Tuple[float, ...]:
        return tuple(call.delay for call in self._queue if not call.cancelled)

    def run_next(self) -> bool:
        while self._queue:
            call = self._queue.popleft()
            if call.cancelled:
                continue
            call.callback()
            return True
        return False

    def run_all(self) -> int:
        fired = 0
        while self.run_next():
            fired += 1
        return fired


class _OpponentUI(Protocol):
    """Hooks the presentation layer provides to :class:`OpponentController`."""

    board: chess.Board

    def opponent_move_committed(self, record: MoveRecord) -> None:
        ...

    def opponent_has_no_move(self, result: str) -> None:
        ...


@dataclass
class PendingTurn:
    token: int
    choice: ScoredMove
    fen: str
    handle: Optional[TimerHandle] = None


class OpponentController:
    """Plays one side of the game at a configured skill tier."""

    def __init__(
        self,
        game: _OpponentUI,
        *,
        color: chess.Color = chess.BLACK,
        tier: SkillTier = SkillTier.BEGINNER,
        scheduler: Optional[Scheduler] = None,
        rng: Optional[random.Random] = None,
        logger: Optional[Callable[[str], None]] = None,
        enabled: bool = True,
    ) -> None:
        self._game = game
        self._color = color
        self._profile = TierRegistry.profile(tier)
        self._scheduler = scheduler or ThreadingScheduler()
        self._rng = rng or random.Random()
        self._logger = logger or (lambda *_: None)
        self._enabled = enabled

        self._lock = threading.RLock()
        self._state = ControllerState.IDLE
        self._pending: Optional[PendingTurn] = None
        self._turn_token = 0

    @property
    def state(self) -> ControllerState:
        return self._state

    @property
    def color(self) -> chess.Color:
        return self._color

    @property
    def tier(self) -> SkillTier:
        return self._profile.tier

    @property
    def profile(self) -> TierProfile:
        return self._profile

    @property
    def enabled(self) -> bool:
        return self._enabled

    @property
    def pending_move(self) -> Optional[ScoredMove]:
        pending = self._pending
        return pending.choice if pending is not None else None

    def _label(self) -> str:
        side = "White" if self._color == chess.WHITE else "Black"
        return f"{self._profile.label} ({side})"

    def is_opponent_turn(self) -> bool:
        return self._enabled and chess_logic.side_to_move(self._game.board) == self._color

    # ------------------------------------------------------------------
    # Turn lifecycle
    # ------------------------------------------------------------------
    def on_turn_changed(self) -> bool:
        """Start thinking if it is now the opponent's move; returns whether a turn began."""

        with self._lock:
            if self._state is not ControllerState.IDLE:
                self._logger(f"{self._label()}: turn already in progress ({self._state.value})")
                return False
            if not self.is_opponent_turn():
                return False

            board = self._game.board
            if chess_logic.is_game_over(board):
                result = chess_logic.get_game_result(board)
                self._logger(f"{self._label()}: no move, {result}")
                self._game.opponent_has_no_move(result)
                return False

            self._state = ControllerState.THINKING
            self._turn_token += 1
            token = self._turn_token

            profile = self._profile
            scored = evaluate_position(board, profile, board.ply(), self._rng)
            choice = select_scored(scored, profile.shortlist_size, self._rng)
            if choice is None:
                self._state = ControllerState.IDLE
                result = chess_logic.get_game_result(board)
                self._logger(f"{self._label()}: no legal moves, {result}")
                self._game.opponent_has_no_move(result)
                return False

            self._logger(
                f"{self._label()}: {len(scored)} candidates, chose {choice.describe()}; "
                f"committing in {profile.thinking_delay_ms} ms"
            )
            pending = PendingTurn(token=token, choice=choice, fen=board.fen())
            self._pending = pending

            handle = self._scheduler.call_later(profile.thinking_delay, lambda: self._commit(token))
            if self._pending is pending:
                pending.handle = handle
            return True

    def _commit(self, token: int) -> None:
        with self._lock:
            pending = self._pending
            if (
                pending is None
                or pending.token != token
                or self._state is not ControllerState.THINKING
            ):
                self._logger(f"{self._label()}: discarded stale move (turn {token})")
                return

            self._state = ControllerState.COMMITTING
            self._pending = None
            board = self._game.board
            try:
                if board.fen() != pending.fen:
                    raise IllegalMoveError(pending.choice.move, board.fen())
                record = chess_logic.make_move(board, pending.choice.move)
            except IllegalMoveError as exc:
                self._logger(f"{self._label()}: dropped move, {exc}")
                self._state = ControllerState.IDLE
                return
            self._state = ControllerState.IDLE

        self._logger(f"{self._label()}: played {record.san}")
        self._game.opponent_move_committed(record)

    def cancel(self, reason: str = "cancelled") -> bool:
        """Discard any pending move and return to idle; returns whether a turn was aborted."""

        with self._lock:
            pending = self._pending
            aborted = self._state is not ControllerState.IDLE
            self._pending = None
            self._turn_token += 1
            self._state = ControllerState.IDLE

        if pending is not None and pending.handle is not None:
            pending.handle.cancel()
        if aborted:
            self._logger(f"{self._label()}: turn aborted ({reason})")
        return aborted

    def reset(self) -> bool:
        return self.cancel("game reset")

    def on_moves_undone(self) -> bool:
        return self.cancel("moves undone")

    # ------------------------------------------------------------------
    # Configuration
    # ------------------------------------------------------------------
    def set_enabled(self, enabled: bool) -> None:
        with self._lock:
            if not enabled:
                self.cancel("opponent disabled")
            self._enabled = enabled

    def set_tier(self, tier: SkillTier) -> None:
        if tier is self._profile.tier:
            return
        self.cancel("tier changed")
        self._profile = TierRegistry.profile(tier)
        self._logger(f"{self._label()}: tier set")


__all__ = [
    "ControllerState",
    "OpponentController",
    "PendingTurn",
    "QueuedScheduler",
    "Scheduler",
    "ThreadingScheduler",
    "TimerHandle",
]
