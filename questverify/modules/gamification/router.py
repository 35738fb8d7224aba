"""Gamification API router."""

from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends, Path, Query

from questverify.modules.gamification import service
from questverify.modules.gamification.schemas import (
    BadgeResponse,
    LeaderboardEntry,
    LevelLookupResponse,
    ProfileProgressResponse,
)
from questverify.services.quest_store import QuestStore, get_quest_store

router = APIRouter(prefix="/gamification", tags=["gamification"])


@router.get("/badges", response_model=list[BadgeResponse])
async def list_badges() -> list[dict]:
    return service.badge_catalog()


@router.get("/levels/{xp}", response_model=LevelLookupResponse)
async def level_for_xp(xp: int = Path(..., ge=0)) -> dict:
    return service.level_lookup(xp)


@router.get("/leaderboard", response_model=list[LeaderboardEntry])
async def leaderboard(
    limit: int = Query(20, ge=1, le=100),
    store: QuestStore = Depends(get_quest_store),
) -> list[dict]:
    return await service.get_leaderboard(store, limit)


@router.get("/profiles/{user_id}/progress", response_model=ProfileProgressResponse)
async def profile_progress(
    user_id: uuid.UUID,
    store: QuestStore = Depends(get_quest_store),
) -> dict:
    return await service.get_profile_progress(store, user_id)
