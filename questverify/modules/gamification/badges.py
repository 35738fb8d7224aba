"""Badge catalog and eligibility evaluation.

The catalog is static and ordered; evaluation is a pure function of the
user's current stats, so re-running it is always safe. Persisting newly
earned badges is the caller's job (see ``new_badges``).
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any

from questverify.models.enums import BadgeRarity, QuestCategory, RequirementType


@dataclass(frozen=True)
class BadgeDefinition:
    id: str
    name: str
    description: str
    icon: str
    rarity: BadgeRarity
    requirement_type: RequirementType
    requirement_value: int
    category: QuestCategory | None = None

    def is_earned(
        self,
        quests_completed: int,
        total_xp: int,
        current_streak: int,
        category_stats: Mapping[str, int],
    ) -> bool:
        if self.requirement_type is RequirementType.QUESTS_COMPLETED:
            return quests_completed >= self.requirement_value
        if self.requirement_type is RequirementType.XP_EARNED:
            return total_xp >= self.requirement_value
        if self.requirement_type is RequirementType.STREAK:
            return current_streak >= self.requirement_value
        if self.requirement_type is RequirementType.CATEGORY_SPECIFIC and self.category:
            return category_stats.get(self.category.value, 0) >= self.requirement_value
        return False

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "icon": self.icon,
            "rarity": self.rarity.value,
            "requirement": {
                "type": self.requirement_type.value,
                "value": self.requirement_value,
                "category": self.category.value if self.category else None,
            },
        }


BADGES: tuple[BadgeDefinition, ...] = (
    BadgeDefinition("first_steps", "First Steps", "Complete your first quest", "🎯",
                    BadgeRarity.COMMON, RequirementType.QUESTS_COMPLETED, 1),
    BadgeDefinition("questioner", "Questioner", "Complete 5 quests", "⭐",
                    BadgeRarity.COMMON, RequirementType.QUESTS_COMPLETED, 5),
    BadgeDefinition("quest_master", "Quest Master", "Complete 25 quests", "🏆",
                    BadgeRarity.RARE, RequirementType.QUESTS_COMPLETED, 25),
    BadgeDefinition("legend", "Legend", "Complete 100 quests", "👑",
                    BadgeRarity.LEGENDARY, RequirementType.QUESTS_COMPLETED, 100),
    BadgeDefinition("xp_hunter", "XP Hunter", "Earn 500 XP", "💎",
                    BadgeRarity.COMMON, RequirementType.XP_EARNED, 500),
    BadgeDefinition("xp_champion", "XP Champion", "Earn 2000 XP", "💰",
                    BadgeRarity.RARE, RequirementType.XP_EARNED, 2000),
    BadgeDefinition("on_fire", "On Fire", "3 day streak", "🔥",
                    BadgeRarity.COMMON, RequirementType.STREAK, 3),
    BadgeDefinition("unstoppable", "Unstoppable", "7 day streak", "⚡",
                    BadgeRarity.RARE, RequirementType.STREAK, 7),
    BadgeDefinition("dedicated", "Dedicated", "30 day streak", "🌟",
                    BadgeRarity.EPIC, RequirementType.STREAK, 30),
    BadgeDefinition("eco_warrior", "Eco Warrior", "Complete 10 environment quests", "🌱",
                    BadgeRarity.RARE, RequirementType.CATEGORY_SPECIFIC, 10,
                    QuestCategory.ENVIRONMENT),
    BadgeDefinition("elder_friend", "Elder Friend", "Complete 10 elderly care quests", "👴",
                    BadgeRarity.RARE, RequirementType.CATEGORY_SPECIFIC, 10,
                    QuestCategory.ELDERLY_CARE),
    BadgeDefinition("food_hero", "Food Hero", "Complete 10 food rescue quests", "🍽️",
                    BadgeRarity.RARE, RequirementType.CATEGORY_SPECIFIC, 10,
                    QuestCategory.FOOD_RESCUE),
)

_BADGES_BY_ID = {badge.id: badge for badge in BADGES}


def check_earned_badges(
    quests_completed: int,
    total_xp: int,
    current_streak: int,
    category_stats: Mapping[str, int] | None = None,
) -> list[str]:
    """Return the id of every badge whose requirement currently holds, in catalog order."""
    stats = category_stats or {}
    return [
        badge.id
        for badge in BADGES
        if badge.is_earned(quests_completed, total_xp, current_streak, stats)
    ]


def get_badge_by_id(badge_id: str) -> BadgeDefinition | None:
    return _BADGES_BY_ID.get(badge_id)


def new_badges(previous: Iterable[str], current: Iterable[str]) -> list[str]:
    """Badges present in ``current`` but not yet in ``previous``, order preserved."""
    seen = set(previous)
    return [badge_id for badge_id in current if badge_id not in seen]
