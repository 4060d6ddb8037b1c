"""Public package interface for the tiered chess opponent."""

from .chess_logic import MoveRecord, candidate_moves, describe_move, make_move
from .controller import (
    ControllerState,
    OpponentController,
    QueuedScheduler,
    ThreadingScheduler,
)
from .errors import BoardMutationError, IllegalMoveError, OpponentError
from .features import FeatureTerms, extract_features, is_endgame
from .scoring import ScoredMove, evaluate_position, score_move, score_moves
from .selection import rank_moves, select_move, shortlist
from .tiers import (
    TIME_CONTROLS,
    SkillTier,
    TierProfile,
    TierRegistry,
    TimeControl,
)

__all__ = [
    "BoardMutationError",
    "ControllerState",
    "FeatureTerms",
    "IllegalMoveError",
    "MoveRecord",
    "OpponentController",
    "OpponentError",
    "QueuedScheduler",
    "ScoredMove",
    "SkillTier",
    "TIME_CONTROLS",
    "ThreadingScheduler",
    "TierProfile",
    "TierRegistry",
    "TimeControl",
    "candidate_moves",
    "describe_move",
    "evaluate_position",
    "extract_features",
    "is_endgame",
    "make_move",
    "rank_moves",
    "score_move",
    "score_moves",
    "select_move",
    "shortlist",
]
