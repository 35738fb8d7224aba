"""Gamification Pydantic schemas."""

import uuid

from pydantic import BaseModel


# ── Levels ───────────────────────────────────────────────────────────────────


class LevelInfoResponse(BaseModel):
    level: int
    title: str
    current_xp: int
    xp_for_current_level: int
    xp_for_next_level: int
    xp_in_level: int
    level_width: int
    progress: float


class XPBand(BaseModel):
    difficulty: str
    min_xp: int
    max_xp: int


class LevelLookupResponse(BaseModel):
    level_info: LevelInfoResponse
    streak_bonuses: dict[int, float]
    xp_rewards: list[XPBand]


# ── Badges ───────────────────────────────────────────────────────────────────


class BadgeRequirement(BaseModel):
    type: str
    value: int
    category: str | None = None


class BadgeResponse(BaseModel):
    id: str
    name: str
    description: str
    icon: str
    rarity: str
    requirement: BadgeRequirement


class NextBadgeHint(BaseModel):
    badge: BadgeResponse
    current: int
    target: int
    remaining: int


# ── Profiles ─────────────────────────────────────────────────────────────────


class ProfileProgressResponse(BaseModel):
    user_id: uuid.UUID
    username: str
    total_xp: int
    quests_completed: int
    current_streak: int
    longest_streak: int
    streak_multiplier: float
    level_info: LevelInfoResponse
    badges: list[BadgeResponse]
    next_badges: list[NextBadgeHint]


class LeaderboardEntry(BaseModel):
    rank: int
    user_id: uuid.UUID
    username: str
    total_xp: int
    level: int
    title: str
    quests_completed: int
    badge_count: int
