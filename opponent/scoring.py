"""Single-ply move scoring.

Each candidate move is played on a working board, the resulting position is
measured with the terms its tier cares about, and the move is taken back
before the next candidate is looked at.  Nothing here searches deeper than
that one ply.
"""

from __future__ import annotations

import random
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Callable, Dict, Iterable, Iterator, List, Mapping, Optional

import chess

from . import chess_logic
from .chess_logic import MoveRecord
from .errors import BoardMutationError
from .features import (
    PIECE_VALUES,
    center_control,
    endgame_position,
    is_endgame,
    king_safety,
    king_zone_attacks,
    mobility,
    opening_principles,
    pawn_structure,
    piece_square,
    threat,
)
from .tiers import TierProfile


CHECK_BONUS = 50
CHECKMATE_BONUS = 10_000
DRAW_PENALTY = 5_000
TRADE_DIVISOR = 10


@dataclass(frozen=True)
class ScoredMove:
    """A candidate move, its total score and the terms that produced it."""

    record: MoveRecord
    score: float
    terms: Mapping[str, float] = field(default_factory=dict)

    @property
    def move(self) -> chess.Move:
        return self.record.move

    def describe(self) -> str:
        parts = " ".join(f"{name}={value:.1f}" for name, value in self.terms.items() if value)
        return f"{self.record.san} ({self.record.uci()}) score={self.score:.1f} {parts}".rstrip()


@contextmanager
def trial_move(board: chess.Board, move: chess.Move) -> Iterator[chess.Board]:
    """Play ``move`` for the duration of the block; always taken back on exit."""

    board.push(move)
    try:
        yield board
    finally:
        board.pop()


def capture_term(record: MoveRecord) -> float:
    if record.captured is None:
        return 0.0
    victim = PIECE_VALUES[record.captured]
    attacker = PIECE_VALUES[record.piece_type]
    return victim + (victim - attacker) / TRADE_DIVISOR


def _weighted(
    terms: Dict[str, float],
    name: str,
    weight: float,
    compute: Callable[[], float],
) -> None:
    if weight:
        terms[name] = weight * compute()


def _positional_terms(
    board: chess.Board,
    mover: chess.Color,
    profile: TierProfile,
    terms: Dict[str, float],
) -> None:
    weights = profile.weights
    endgame = is_endgame(board)

    _weighted(terms, "king_zone_attacks", weights.king_zone_attacks, lambda: king_zone_attacks(board, mover))
    _weighted(terms, "piece_square", weights.piece_square, lambda: piece_square(board, mover, endgame))
    _weighted(terms, "king_safety", weights.king_safety, lambda: king_safety(board, mover, endgame))
    _weighted(
        terms,
        "pawn_structure",
        weights.pawn_structure,
        lambda: pawn_structure(board, mover, profile.detailed_pawn_structure),
    )
    _weighted(terms, "mobility", weights.mobility, lambda: mobility(board, mover))
    _weighted(terms, "center_control", weights.center_control, lambda: center_control(board, mover))
    if endgame:
        _weighted(terms, "endgame", weights.endgame, lambda: endgame_position(board, mover))
    # The side to move is now the opponent: anything it can take is a threat.
    _weighted(terms, "threat", -weights.threat, lambda: threat(board))


def score_move(
    board: chess.Board,
    record: MoveRecord,
    profile: TierProfile,
    recent_move_count: int,
    rng: random.Random,
) -> ScoredMove:
    """Score ``record`` for the side to move on ``board``.

    The board is only borrowed: the move is pushed for the measurement and
    popped again before returning, even if a term raises.
    """

    mover = board.turn
    terms: Dict[str, float] = {"capture": capture_term(record)}

    with trial_move(board, record.move):
        if board.is_check():
            terms["check"] = CHECK_BONUS
        if board.is_checkmate():
            terms["checkmate"] = CHECKMATE_BONUS
        elif chess_logic.is_draw(board):
            terms["draw"] = -DRAW_PENALTY
        _positional_terms(board, mover, profile, terms)

    weights = profile.weights
    if weights.opening and recent_move_count < profile.opening_move_limit:
        terms["opening"] = weights.opening * opening_principles(record)

    terms["jitter"] = rng.random() * profile.jitter
    return ScoredMove(record=record, score=sum(terms.values()), terms=terms)


def score_moves(
    board: chess.Board,
    records: Iterable[MoveRecord],
    profile: TierProfile,
    recent_move_count: int,
    rng: Optional[random.Random] = None,
) -> List[ScoredMove]:
    """Score every candidate in generation order on the given working board."""

    rng = rng or random.Random()
    fen_before = board.fen()
    stack_before = list(board.move_stack)

    scored = [score_move(board, record, profile, recent_move_count, rng) for record in records]

    if board.fen() != fen_before or board.move_stack != stack_before:
        raise BoardMutationError(
            f"Scoring changed the board from {fen_before} to {board.fen()}"
        )
    return scored


def evaluate_position(
    board: chess.Board,
    profile: TierProfile,
    recent_move_count: int,
    rng: Optional[random.Random] = None,
) -> List[ScoredMove]:
    """Score every candidate move of ``board`` on a private copy of it."""

    working = board.copy()
    return score_moves(working, chess_logic.candidate_moves(working), profile, recent_move_count, rng)


__all__ = [
    "CHECKMATE_BONUS",
    "CHECK_BONUS",
    "DRAW_PENALTY",
    "ScoredMove",
    "capture_term",
    "evaluate_position",
    "score_move",
    "score_moves",
    "trial_move",
]
