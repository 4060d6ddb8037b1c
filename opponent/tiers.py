"""Skill tiers and time-control presets.

Each tier owns a fixed bundle of constants: how long the opponent pretends
to think, how much random jitter it adds to every candidate, how many of the
best candidates it samples from, and how strongly each evaluation term
counts.  Profiles are frozen and registered once at import time.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Tuple


class SkillTier(Enum):
    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"


@dataclass(slots=True, frozen=True)
class TierWeights:
    """Multipliers applied to the feature terms; zero disables a term."""

    piece_square: float = 0.0
    king_safety: float = 0.0
    pawn_structure: float = 0.0
    king_zone_attacks: float = 0.0
    mobility: float = 0.0
    center_control: float = 0.0
    opening: float = 0.0
    endgame: float = 0.0
    threat: float = 0.0


@dataclass(slots=True, frozen=True)
class TierProfile:
    tier: SkillTier
    label: str
    thinking_delay_ms: int
    jitter: float
    shortlist_size: int
    weights: TierWeights
    opening_move_limit: int = 0
    detailed_pawn_structure: bool = False
    # Documented but never consulted: every tier evaluates exactly one ply.
    search_depth: int = 1

    @property
    def thinking_delay(self) -> float:
        return self.thinking_delay_ms / 1000.0


BEGINNER = TierProfile(
    tier=SkillTier.BEGINNER,
    label="Beginner",
    thinking_delay_ms=3000,
    jitter=50.0,
    shortlist_size=5,
    weights=TierWeights(),
    search_depth=2,
)

INTERMEDIATE = TierProfile(
    tier=SkillTier.INTERMEDIATE,
    label="Intermediate",
    thinking_delay_ms=2000,
    jitter=20.0,
    shortlist_size=3,
    weights=TierWeights(
        piece_square=1.0,
        king_safety=1.0,
        pawn_structure=1.0,
        king_zone_attacks=5.0,
        mobility=2.0,
        opening=1.0,
    ),
    opening_move_limit=10,
    search_depth=3,
)

ADVANCED = TierProfile(
    tier=SkillTier.ADVANCED,
    label="Advanced",
    thinking_delay_ms=1000,
    jitter=5.0,
    shortlist_size=2,
    weights=TierWeights(
        piece_square=2.0,
        king_safety=3.0,
        pawn_structure=2.0,
        king_zone_attacks=5.0,
        mobility=3.0,
        center_control=10.0,
        opening=2.0,
        endgame=2.0,
        threat=1.0,
    ),
    opening_move_limit=15,
    detailed_pawn_structure=True,
    search_depth=3,
)


class TierRegistry:
    PRESETS: Dict[SkillTier, TierProfile] = {
        SkillTier.BEGINNER: BEGINNER,
        SkillTier.INTERMEDIATE: INTERMEDIATE,
        SkillTier.ADVANCED: ADVANCED,
    }

    ALIASES: Dict[str, SkillTier] = {
        "easy": SkillTier.BEGINNER,
        "medium": SkillTier.INTERMEDIATE,
        "hard": SkillTier.ADVANCED,
    }

    @classmethod
    def profile(cls, tier: SkillTier) -> TierProfile:
        return cls.PRESETS[tier]

    @classmethod
    def resolve(cls, name: str) -> TierProfile:
        key = name.strip().lower()
        if key in cls.ALIASES:
            return cls.PRESETS[cls.ALIASES[key]]
        try:
            return cls.PRESETS[SkillTier(key)]
        except ValueError:
            raise ValueError(f"Unknown skill tier '{name}'") from None

    @classmethod
    def names(cls) -> Tuple[str, ...]:
        return tuple(tier.value for tier in cls.PRESETS)


@dataclass(frozen=True)
class TimeControl:
    name: str
    initial: int  # seconds
    increment: int  # seconds


TIME_CONTROLS: Tuple[TimeControl, ...] = (
    TimeControl("1 min Bullet", 60, 0),
    TimeControl("3 min Blitz", 180, 0),
    TimeControl("5 min Blitz", 300, 0),
    TimeControl("10 min Rapid", 600, 0),
    TimeControl("15|10 Rapid", 900, 10),
)

DEFAULT_TIME_CONTROL = TIME_CONTROLS[3]


def find_time_control(name: str) -> TimeControl:
    for control in TIME_CONTROLS:
        if control.name == name:
            return control
    raise ValueError(f"Unknown time control '{name}'")
