"""Level curve — total XP to level, title and progress within the level."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any

# Levels 1..10; index + 1 is the level
LEVEL_THRESHOLDS: tuple[int, ...] = (0, 100, 250, 450, 700, 1000, 1400, 1900, 2500, 3200)

LEVEL_TITLES: tuple[str, ...] = (
    "Newcomer",
    "Apprentice",
    "Helper",
    "Volunteer",
    "Champion",
    "Hero",
    "Guardian",
    "Protector",
    "Legend",
    "Master",
)

MAX_TABLE_LEVEL = len(LEVEL_THRESHOLDS)
XP_PER_LEVEL_AFTER_TABLE = 1000


@dataclass(frozen=True)
class LevelInfo:
    level: int
    title: str
    current_xp: int
    xp_for_current_level: int
    xp_for_next_level: int
    xp_in_level: int
    level_width: int
    progress: float  # 0..100

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def level_threshold(level: int) -> int:
    """Minimum total XP required to reach ``level``."""
    if level <= 1:
        return 0
    if level <= MAX_TABLE_LEVEL:
        return LEVEL_THRESHOLDS[level - 1]
    return LEVEL_THRESHOLDS[-1] + (level - MAX_TABLE_LEVEL) * XP_PER_LEVEL_AFTER_TABLE


def level_title(level: int) -> str:
    if level <= MAX_TABLE_LEVEL:
        return LEVEL_TITLES[max(level, 1) - 1]
    return f"Master {level - 9}"


def calculate_level_info(total_xp: int) -> LevelInfo:
    """Resolve the level for a running XP total.

    The level is the highest one whose threshold is met. Past the table, one
    extra level is granted per full 1000 XP above the last threshold, so the
    curve has no plateau between level 10 and 11. Negative totals are treated
    as zero.
    """
    xp = max(0, int(total_xp))

    last = LEVEL_THRESHOLDS[-1]
    if xp >= last:
        level = MAX_TABLE_LEVEL + (xp - last) // XP_PER_LEVEL_AFTER_TABLE
    else:
        level = 1
        for idx, threshold in enumerate(LEVEL_THRESHOLDS):
            if xp >= threshold:
                level = idx + 1

    floor = level_threshold(level)
    ceiling = level_threshold(level + 1)
    width = ceiling - floor
    xp_in_level = xp - floor
    progress = min(100.0, max(0.0, xp_in_level / width * 100))

    return LevelInfo(
        level=level,
        title=level_title(level),
        current_xp=xp,
        xp_for_current_level=floor,
        xp_for_next_level=ceiling,
        xp_in_level=xp_in_level,
        level_width=width,
        progress=round(progress, 2),
    )
