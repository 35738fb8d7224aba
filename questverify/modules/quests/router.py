"""Quests API router."""

from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel

from questverify.modules.quests import service
from questverify.services.quest_store import QuestStore, get_quest_store

router = APIRouter(prefix="/quests", tags=["quests"])


class NearbyQuest(BaseModel):
    id: uuid.UUID
    title: str
    category: str
    difficulty: str
    xp_reward: int
    is_featured: bool
    latitude: float
    longitude: float
    address: str
    times_completed: int
    distance_m: float


@router.get("/nearby", response_model=list[NearbyQuest])
async def nearby_quests(
    lat: float = Query(..., ge=-90, le=90),
    lng: float = Query(..., ge=-180, le=180),
    radius_km: float = Query(5.0, gt=0, le=100),
    store: QuestStore = Depends(get_quest_store),
) -> list[dict]:
    return await service.find_nearby_quests(store, lat, lng, radius_km)
