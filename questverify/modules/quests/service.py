"""Quest discovery — active quests around a point."""

from __future__ import annotations

from typing import Any

from questverify.modules.verification.geo import haversine_distance
from questverify.services.quest_store import QuestStore


async def find_nearby_quests(
    store: QuestStore, latitude: float, longitude: float, radius_km: float
) -> list[dict[str, Any]]:
    """Active quests within ``radius_km``, nearest first."""
    radius_m = radius_km * 1000
    nearby = []
    for quest in await store.list_active_quests():
        distance = haversine_distance(latitude, longitude, quest.latitude, quest.longitude)
        if distance <= radius_m:
            nearby.append((distance, quest))
    nearby.sort(key=lambda pair: pair[0])

    return [
        {
            "id": quest.id,
            "title": quest.title,
            "category": quest.category.value,
            "difficulty": quest.difficulty.value,
            "xp_reward": quest.xp_reward,
            "is_featured": quest.is_featured,
            "latitude": quest.latitude,
            "longitude": quest.longitude,
            "address": quest.address,
            "times_completed": quest.times_completed,
            "distance_m": round(distance, 1),
        }
        for distance, quest in nearby
    ]
