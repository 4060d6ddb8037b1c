"""Headless games between two opponent controllers."""

from __future__ import annotations

import argparse
import random
import sys
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Sequence

import chess

from . import chess_logic
from .chess_logic import MoveRecord
from .controller import OpponentController, QueuedScheduler
from .tiers import SkillTier, TierRegistry
from .utils import console_logger, info_text, result_text


DEFAULT_MAX_PLIES = 300


class HeadlessGame:
    """Minimal presentation layer: holds the board and records what happens."""

    def __init__(self, board: chess.Board) -> None:
        self.board = board
        self.moves: List[str] = []
        self.finished: Optional[str] = None

    def opponent_move_committed(self, record: MoveRecord) -> None:
        self.moves.append(record.san)

    def opponent_has_no_move(self, result: str) -> None:
        self.finished = result


@dataclass
class GameReport:
    white: SkillTier
    black: SkillTier
    result: str
    winner: Optional[chess.Color]
    moves: List[str] = field(default_factory=list)
    final_fen: str = ""

    @property
    def plies(self) -> int:
        return len(self.moves)

    def summary(self) -> str:
        if self.winner is None:
            outcome = "draw"
        else:
            outcome = "1-0" if self.winner == chess.WHITE else "0-1"
        return (
            f"{self.white.value} vs {self.black.value}: {outcome} "
            f"({self.result}, {self.plies} plies)"
        )


def play_game(
    white: SkillTier,
    black: SkillTier,
    *,
    seed: Optional[int] = None,
    max_plies: int = DEFAULT_MAX_PLIES,
    start_fen: Optional[str] = None,
    logger: Optional[Callable[[str], None]] = None,
) -> GameReport:
    """Play one game to completion (or ``max_plies``) without real delays."""

    board = chess.Board(start_fen) if start_fen else chess.Board()
    game = HeadlessGame(board)
    scheduler = QueuedScheduler()
    rng = random.Random(seed)

    controllers: Dict[chess.Color, OpponentController] = {
        color: OpponentController(
            game,
            color=color,
            tier=tier,
            scheduler=scheduler,
            rng=rng,
            logger=logger,
        )
        for color, tier in ((chess.WHITE, white), (chess.BLACK, black))
    }

    while game.finished is None and len(game.moves) < max_plies:
        controllers[board.turn].on_turn_changed()
        if not scheduler.run_next():
            break

    result = game.finished or chess_logic.get_game_result(board)
    if result == "Game in progress":
        result = "Ply limit reached"
    outcome = board.outcome()
    return GameReport(
        white=white,
        black=black,
        result=result,
        winner=outcome.winner if outcome is not None else None,
        moves=list(game.moves),
        final_fen=chess_logic.export_board_fen(board),
    )


def _tier_argument(value: str) -> SkillTier:
    try:
        return TierRegistry.resolve(value).tier
    except ValueError as exc:
        raise argparse.ArgumentTypeError(str(exc)) from None


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Play headless games between two opponent skill tiers"
    )
    parser.add_argument(
        "--white",
        type=_tier_argument,
        default=SkillTier.ADVANCED,
        help=f"Tier playing White ({', '.join(TierRegistry.names())})",
    )
    parser.add_argument(
        "--black",
        type=_tier_argument,
        default=SkillTier.BEGINNER,
        help="Tier playing Black",
    )
    parser.add_argument("--games", type=int, default=1, help="Number of games to play")
    parser.add_argument("--seed", type=int, help="Seed for reproducible games")
    parser.add_argument(
        "--max-plies",
        type=int,
        default=DEFAULT_MAX_PLIES,
        help="Adjudicate the game as unfinished after this many plies",
    )
    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Only print game results, not every move decision",
    )
    return parser.parse_args(argv)


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = parse_args(argv)
    logger = console_logger(quiet=args.quiet)
    tally = {chess.WHITE: 0.0, chess.BLACK: 0.0}

    for index in range(args.games):
        seed = None if args.seed is None else args.seed + index
        report = play_game(
            args.white,
            args.black,
            seed=seed,
            max_plies=args.max_plies,
            logger=logger,
        )
        if report.winner is None:
            tally[chess.WHITE] += 0.5
            tally[chess.BLACK] += 0.5
        else:
            tally[report.winner] += 1.0
        print(result_text(f"Game {index + 1}: {report.summary()}"))
        if not args.quiet:
            print(info_text(" ".join(report.moves)))

    print(
        info_text(
            f"Score {args.white.value} {tally[chess.WHITE]:g} - "
            f"{tally[chess.BLACK]:g} {args.black.value}"
        )
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
