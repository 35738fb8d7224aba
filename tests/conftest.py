"""Shared test fixtures for the QuestVerify test suite."""

import uuid
from collections.abc import AsyncGenerator, Sequence
from dataclasses import replace

import pytest
from httpx import ASGITransport, AsyncClient

from questverify.main import app
from questverify.models.enums import QuestCategory, QuestDifficulty
from questverify.modules.gamification.leveling import calculate_level_info
from questverify.services.classifier import LabelScore, get_classifier
from questverify.services.quest_store import (
    ProfileRecord,
    QuestRecord,
    SubmissionRecord,
    get_quest_store,
)

SAMPLE_USER_ID = uuid.UUID("00000000-0000-0000-0000-000000000002")
SAMPLE_QUEST_ID = uuid.UUID("00000000-0000-0000-0000-000000000010")
SAMPLE_USER_QUEST_ID = uuid.UUID("00000000-0000-0000-0000-000000000020")

# Central Park, NYC
QUEST_LAT = 40.7829
QUEST_LNG = -73.9654


class FakeQuestStore:
    """In-memory QuestStore with the same claim semantics as the SQL store."""

    def __init__(self) -> None:
        self.quests: dict[uuid.UUID, QuestRecord] = {}
        self.profiles: dict[uuid.UUID, ProfileRecord] = {}
        # acceptance id -> (user id, quest id) while the acceptance is open
        self.open_user_quests: dict[uuid.UUID, tuple[uuid.UUID, uuid.UUID]] = {}
        self.completed_user_quests: dict[uuid.UUID, tuple[uuid.UUID, uuid.UUID]] = {}
        self.submissions: list[SubmissionRecord] = []
        self.claims: list[tuple[uuid.UUID, int]] = []
        self.fail_atomic_increment = False

    async def fetch_quest(self, quest_id):
        return self.quests.get(quest_id)

    async def insert_submission(self, record):
        self.submissions.append(record)

    async def claim_user_quest(self, user_quest_id, user_id, quest_id, completed_at, xp_earned):
        if self.open_user_quests.get(user_quest_id) != (user_id, quest_id):
            return False
        self.completed_user_quests[user_quest_id] = self.open_user_quests.pop(user_quest_id)
        self.claims.append((user_quest_id, xp_earned))
        return True

    async def increment_profile(self, user_id, xp_amount):
        if self.fail_atomic_increment:
            raise RuntimeError("increment unavailable")
        profile = self.profiles.get(user_id)
        if profile is None:
            raise LookupError(f"profile {user_id} not found")
        total = profile.total_xp + xp_amount
        updated = replace(
            profile,
            total_xp=total,
            quests_completed=profile.quests_completed + 1,
            level=calculate_level_info(total).level,
        )
        self.profiles[user_id] = updated
        return updated

    async def fetch_profile(self, user_id):
        return self.profiles.get(user_id)

    async def write_profile(self, user_id, total_xp, quests_completed, level):
        self.profiles[user_id] = replace(
            self.profiles[user_id],
            total_xp=total_xp,
            quests_completed=quests_completed,
            level=level,
        )

    async def increment_quest_completions(self, quest_id):
        quest = self.quests[quest_id]
        self.quests[quest_id] = replace(quest, times_completed=quest.times_completed + 1)

    async def category_completions(self, user_id):
        stats: dict[str, int] = {}
        for owner, quest_id in self.completed_user_quests.values():
            if owner == user_id:
                category = self.quests[quest_id].category.value
                stats[category] = stats.get(category, 0) + 1
        return stats

    async def add_badges(self, user_id, badge_ids):
        profile = self.profiles[user_id]
        self.profiles[user_id] = replace(profile, badges=profile.badges + tuple(badge_ids))

    async def list_leaderboard(self, limit=20):
        ranked = sorted(
            (p for p in self.profiles.values() if p.total_xp > 0),
            key=lambda p: (p.total_xp, p.quests_completed),
            reverse=True,
        )
        return ranked[:limit]

    async def list_active_quests(self):
        return [q for q in self.quests.values() if q.is_active]


class StubClassifier:
    """Returns canned scores, or raises when given an exception."""

    backend = "stub"

    def __init__(self, scores: Sequence[LabelScore] = (), error: Exception | None = None):
        self.scores = list(scores)
        self.error = error
        self.calls: list[tuple[str, list[str]]] = []

    async def classify(self, image, candidate_labels):
        self.calls.append((image, list(candidate_labels)))
        if self.error is not None:
            raise self.error
        return list(self.scores)


def make_quest(**overrides) -> QuestRecord:
    fields = {
        "id": SAMPLE_QUEST_ID,
        "title": "Park cleanup",
        "category": QuestCategory.ENVIRONMENT,
        "difficulty": QuestDifficulty.EASY,
        "xp_reward": 25,
        "latitude": QUEST_LAT,
        "longitude": QUEST_LNG,
    }
    fields.update(overrides)
    return QuestRecord(**fields)


@pytest.fixture
def store() -> FakeQuestStore:
    fake = FakeQuestStore()
    quest = make_quest()
    fake.quests[quest.id] = quest
    fake.profiles[SAMPLE_USER_ID] = ProfileRecord(id=SAMPLE_USER_ID, username="tester")
    fake.open_user_quests[SAMPLE_USER_QUEST_ID] = (SAMPLE_USER_ID, quest.id)
    return fake


@pytest.fixture
def classifier() -> StubClassifier:
    return StubClassifier()


@pytest.fixture
async def client(store: FakeQuestStore, classifier: StubClassifier) -> AsyncGenerator[AsyncClient]:
    app.dependency_overrides[get_quest_store] = lambda: store
    app.dependency_overrides[get_classifier] = lambda: classifier
    try:
        async with AsyncClient(
            transport=ASGITransport(app=app, raise_app_exceptions=False),
            base_url="http://test",
        ) as ac:
            yield ac
    finally:
        app.dependency_overrides.clear()
