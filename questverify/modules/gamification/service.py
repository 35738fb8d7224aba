"""Gamification service — profile progress, badge hints, leaderboard."""

from __future__ import annotations

import uuid
from typing import Any

import structlog

from questverify.core.errors import ProfileNotFoundError
from questverify.models.enums import RequirementType
from questverify.modules.gamification.badges import BADGES, BadgeDefinition, get_badge_by_id
from questverify.modules.gamification.leveling import calculate_level_info
from questverify.modules.gamification.streaks import (
    STREAK_BONUSES,
    XP_REWARDS,
    streak_multiplier,
)
from questverify.services.quest_store import ProfileRecord, QuestStore

logger = structlog.get_logger()

NEXT_BADGE_HINTS = 3


def _badge_progress(
    badge: BadgeDefinition, profile: ProfileRecord, category_stats: dict[str, int]
) -> int:
    if badge.requirement_type is RequirementType.QUESTS_COMPLETED:
        return profile.quests_completed
    if badge.requirement_type is RequirementType.XP_EARNED:
        return profile.total_xp
    if badge.requirement_type is RequirementType.STREAK:
        return profile.current_streak
    if badge.category is not None:
        return category_stats.get(badge.category.value, 0)
    return 0


def next_badge_hints(
    profile: ProfileRecord, category_stats: dict[str, int], limit: int = NEXT_BADGE_HINTS
) -> list[dict[str, Any]]:
    """Closest unearned badges, ranked by the fraction of the requirement still missing."""
    earned = set(profile.badges)
    hints = []
    for badge in BADGES:
        if badge.id in earned:
            continue
        current = _badge_progress(badge, profile, category_stats)
        remaining = max(0, badge.requirement_value - current)
        hints.append(
            {
                "badge": badge.to_dict(),
                "current": current,
                "target": badge.requirement_value,
                "remaining": remaining,
            }
        )
    hints.sort(key=lambda h: h["remaining"] / h["target"])
    return hints[:limit]


async def get_profile_progress(store: QuestStore, user_id: uuid.UUID) -> dict[str, Any]:
    profile = await store.fetch_profile(user_id)
    if profile is None:
        raise ProfileNotFoundError("Profile not found", detail={"user_id": str(user_id)})

    category_stats = await store.category_completions(user_id)
    badges = [b.to_dict() for b in map(get_badge_by_id, profile.badges) if b is not None]

    return {
        "user_id": profile.id,
        "username": profile.username,
        "total_xp": profile.total_xp,
        "quests_completed": profile.quests_completed,
        "current_streak": profile.current_streak,
        "longest_streak": profile.longest_streak,
        "streak_multiplier": streak_multiplier(profile.current_streak),
        "level_info": calculate_level_info(profile.total_xp).to_dict(),
        "badges": badges,
        "next_badges": next_badge_hints(profile, category_stats),
    }


def level_lookup(total_xp: int) -> dict[str, Any]:
    return {
        "level_info": calculate_level_info(total_xp).to_dict(),
        "streak_bonuses": dict(STREAK_BONUSES),
        "xp_rewards": [
            {"difficulty": difficulty.value, "min_xp": low, "max_xp": high}
            for difficulty, (low, high) in XP_REWARDS.items()
        ],
    }


def badge_catalog() -> list[dict[str, Any]]:
    return [badge.to_dict() for badge in BADGES]


async def get_leaderboard(store: QuestStore, limit: int = 20) -> list[dict[str, Any]]:
    profiles = await store.list_leaderboard(limit)
    entries = []
    for rank, profile in enumerate(profiles, start=1):
        info = calculate_level_info(profile.total_xp)
        entries.append(
            {
                "rank": rank,
                "user_id": profile.id,
                "username": profile.username,
                "total_xp": profile.total_xp,
                "level": info.level,
                "title": info.title,
                "quests_completed": profile.quests_completed,
                "badge_count": len(profile.badges),
            }
        )
    logger.debug("leaderboard.served", limit=limit, entries=len(entries))
    return entries
