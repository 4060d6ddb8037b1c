"""Shortlist sampling over scored candidate moves."""

from __future__ import annotations

import random
from typing import List, Optional, Sequence

from .chess_logic import MoveRecord
from .scoring import ScoredMove


def rank_moves(scored: Sequence[ScoredMove]) -> List[ScoredMove]:
    """Best first; equal scores keep their generation order."""

    return sorted(scored, key=lambda item: item.score, reverse=True)


def shortlist(scored: Sequence[ScoredMove], size: int) -> List[ScoredMove]:
    if size < 1:
        raise ValueError(f"Shortlist size must be positive, got {size}")
    return rank_moves(scored)[: min(size, len(scored))]


def select_scored(
    scored: Sequence[ScoredMove],
    size: int,
    rng: Optional[random.Random] = None,
) -> Optional[ScoredMove]:
    """Pick one of the ``size`` best candidates uniformly, or ``None`` if there are none."""

    if not scored:
        return None
    rng = rng or random.Random()
    return rng.choice(shortlist(scored, size))


def select_move(
    scored: Sequence[ScoredMove],
    size: int,
    rng: Optional[random.Random] = None,
) -> Optional[MoveRecord]:
    chosen = select_scored(scored, size, rng)
    return chosen.record if chosen is not None else None


__all__ = ["rank_moves", "select_move", "select_scored", "shortlist"]
