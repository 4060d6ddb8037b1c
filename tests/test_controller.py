import asyncio
import random
import threading

import chess
import pytest

from opponent.controller import (
    ControllerState,
    OpponentController,
    QueuedScheduler,
    ThreadingScheduler,
)
from opponent.tiers import SkillTier


class FakeGame:
    def __init__(self, fen: str = chess.STARTING_FEN) -> None:
        self.board = chess.Board(fen)
        self.committed = []
        self.no_move = []

    def opponent_move_committed(self, record) -> None:
        self.committed.append(record)

    def opponent_has_no_move(self, result: str) -> None:
        self.no_move.append(result)


class _StickyHandle:
    def cancel(self) -> None:
        pass


class StickyScheduler:
    """Scheduler whose timers cannot be cancelled."""

    def __init__(self) -> None:
        self.callbacks = []

    def call_later(self, delay, callback):
        self.callbacks.append(callback)
        return _StickyHandle()


def make_controller(game=None, **kwargs):
    game = game or FakeGame()
    kwargs.setdefault("scheduler", QueuedScheduler())
    kwargs.setdefault("rng", random.Random(7))
    kwargs.setdefault("color", chess.WHITE)
    controller = OpponentController(game, **kwargs)
    return controller, game, kwargs["scheduler"]


@pytest.mark.parametrize(
    ("tier", "delay"),
    [
        (SkillTier.BEGINNER, 3.0),
        (SkillTier.INTERMEDIATE, 2.0),
        (SkillTier.ADVANCED, 1.0),
    ],
)
def test_turn_schedules_commit_after_tier_delay(tier: SkillTier, delay: float) -> None:
    controller, game, scheduler = make_controller(tier=tier)
    assert controller.on_turn_changed() is True
    assert controller.state is ControllerState.THINKING
    assert scheduler.delays() == (delay,)
    assert controller.pending_move is not None
    assert not game.board.move_stack


def test_commit_plays_chosen_move() -> None:
    controller, game, scheduler = make_controller()
    controller.on_turn_changed()
    chosen = controller.pending_move.move

    assert scheduler.run_next() is True
    assert controller.state is ControllerState.IDLE
    assert controller.pending_move is None
    assert game.board.move_stack == [chosen]
    assert [record.move for record in game.committed] == [chosen]


def test_ignores_turns_that_belong_to_the_human() -> None:
    controller, game, scheduler = make_controller(color=chess.BLACK)
    assert controller.is_opponent_turn() is False
    assert controller.on_turn_changed() is False
    assert controller.state is ControllerState.IDLE
    assert scheduler.pending == 0


def test_second_turn_signal_while_thinking_is_ignored() -> None:
    controller, _, scheduler = make_controller()
    assert controller.on_turn_changed() is True
    assert controller.on_turn_changed() is False
    assert scheduler.pending == 1


def test_reset_cancels_pending_move() -> None:
    controller, game, scheduler = make_controller()
    controller.on_turn_changed()
    assert controller.reset() is True
    assert controller.state is ControllerState.IDLE
    assert scheduler.pending == 0
    assert scheduler.run_all() == 0
    assert not game.board.move_stack
    assert not game.committed
    assert controller.reset() is False


def test_cancelled_turn_never_commits_even_if_timer_fires() -> None:
    scheduler = StickyScheduler()
    controller, game, _ = make_controller(scheduler=scheduler)
    controller.on_turn_changed()
    controller.on_moves_undone()

    scheduler.callbacks[0]()
    assert not game.board.move_stack
    assert not game.committed
    assert controller.state is ControllerState.IDLE


def test_stale_timer_does_not_play_for_the_next_turn() -> None:
    scheduler = StickyScheduler()
    controller, game, _ = make_controller(scheduler=scheduler)
    controller.on_turn_changed()
    controller.cancel("new game")
    controller.on_turn_changed()

    scheduler.callbacks[0]()
    assert not game.board.move_stack
    assert controller.state is ControllerState.THINKING

    scheduler.callbacks[1]()
    assert len(game.board.move_stack) == 1


@pytest.mark.parametrize(
    ("fen", "result"),
    [
        ("7k/5Q2/6K1/8/8/8/8/8 b - - 0 1", "Stalemate"),
        ("rnb1kbnr/pppp1ppp/8/4p3/6Pq/5P2/PPPPP2P/RNBQKBNR w KQkq - 1 3", "Checkmate"),
    ],
)
def test_finished_game_reports_no_move(fen: str, result: str) -> None:
    game = FakeGame(fen)
    color = game.board.turn
    controller, _, scheduler = make_controller(game, color=color)
    assert controller.on_turn_changed() is False
    assert game.no_move == [result]
    assert scheduler.pending == 0
    assert controller.state is ControllerState.IDLE


def test_move_rejected_at_commit_is_dropped_without_retry() -> None:
    controller, game, scheduler = make_controller()
    controller.on_turn_changed()
    # the position changes under the pending move
    game.board.push_uci("b1c3")

    scheduler.run_all()
    assert game.board.move_stack == [chess.Move.from_uci("b1c3")]
    assert not game.committed
    assert controller.state is ControllerState.IDLE
    assert scheduler.pending == 0


def test_disabling_opponent_cancels_and_blocks_turns() -> None:
    controller, game, scheduler = make_controller()
    controller.on_turn_changed()
    controller.set_enabled(False)
    assert controller.enabled is False
    assert scheduler.pending == 0
    assert controller.on_turn_changed() is False

    controller.set_enabled(True)
    assert controller.on_turn_changed() is True


def test_changing_tier_cancels_pending_turn() -> None:
    controller, game, scheduler = make_controller(tier=SkillTier.BEGINNER)
    controller.on_turn_changed()
    controller.set_tier(SkillTier.ADVANCED)
    assert controller.tier is SkillTier.ADVANCED
    assert controller.profile.shortlist_size == 2
    assert scheduler.pending == 0

    controller.on_turn_changed()
    assert scheduler.delays() == (1.0,)


def test_logger_reports_choice() -> None:
    messages = []
    controller, _, scheduler = make_controller(logger=messages.append)
    controller.on_turn_changed()
    scheduler.run_all()
    assert any("chose" in message for message in messages)
    assert any("played" in message for message in messages)


def test_threading_scheduler_fires_callback() -> None:
    fired = threading.Event()
    ThreadingScheduler().call_later(0.01, fired.set)
    assert fired.wait(2.0)


def test_threading_scheduler_cancel_prevents_callback() -> None:
    fired = threading.Event()
    handle = ThreadingScheduler().call_later(0.2, fired.set)
    handle.cancel()
    assert not fired.wait(0.4)


class FastScheduler(ThreadingScheduler):
    def call_later(self, delay, callback):
        return super().call_later(0.01, callback)


def test_controller_commits_on_real_timer() -> None:
    game = FakeGame()
    done = threading.Event()
    game.opponent_move_committed = lambda record: done.set()
    controller = OpponentController(
        game, color=chess.WHITE, scheduler=FastScheduler(), rng=random.Random(1)
    )
    assert controller.on_turn_changed() is True
    assert done.wait(2.0)
    assert len(game.board.move_stack) == 1


def test_asyncio_loop_works_as_scheduler() -> None:
    async def play() -> FakeGame:
        game = FakeGame()
        committed = asyncio.Event()
        game.opponent_move_committed = lambda record: committed.set()
        controller = OpponentController(
            game,
            color=chess.WHITE,
            tier=SkillTier.ADVANCED,
            scheduler=asyncio.get_running_loop(),
            rng=random.Random(4),
        )
        assert controller.on_turn_changed() is True
        await asyncio.wait_for(committed.wait(), timeout=5.0)
        return game

    game = asyncio.run(play())
    assert len(game.board.move_stack) == 1


def test_asyncio_timer_cancelled_on_disable() -> None:
    async def play() -> FakeGame:
        game = FakeGame()
        controller = OpponentController(
            game,
            color=chess.WHITE,
            tier=SkillTier.ADVANCED,
            scheduler=asyncio.get_running_loop(),
            rng=random.Random(4),
        )
        controller.on_turn_changed()
        controller.set_enabled(False)
        await asyncio.sleep(1.2)
        return game

    game = asyncio.run(play())
    assert not game.board.move_stack
    assert not game.committed
