"""Streak bonus multipliers and per-difficulty XP bands."""

from __future__ import annotations

import math
from types import MappingProxyType

from questverify.models.enums import QuestDifficulty

# (minimum streak days, multiplier), ascending
STREAK_BONUSES: tuple[tuple[int, float], ...] = (
    (3, 1.10),
    (7, 1.25),
    (14, 1.50),
    (30, 2.00),
)

XP_REWARDS = MappingProxyType(
    {
        QuestDifficulty.EASY: (15, 30),
        QuestDifficulty.MEDIUM: (30, 60),
        QuestDifficulty.HARD: (60, 100),
    }
)


def streak_multiplier(streak: int) -> float:
    multiplier = 1.0
    for days, bonus in STREAK_BONUSES:
        if streak >= days:
            multiplier = bonus
    return multiplier


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def calculate_xp_with_bonus(base_xp: int, streak: int) -> int:
    """Apply the best streak multiplier reached, rounding halves upward."""
    return _round_half_up(base_xp * streak_multiplier(streak))


def xp_reward_in_band(difficulty: QuestDifficulty | str, xp: int) -> bool:
    low, high = XP_REWARDS[QuestDifficulty(difficulty)]
    return low <= xp <= high
