"""Data-store collaborator for verification and progression.

The verification core only talks to the store through ``QuestStore``. The
SQLAlchemy implementation opens one session per operation so that independent
writes can be dispatched concurrently without sharing a connection.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Protocol

from sqlalchemy import String, bindparam, func, select, update
from sqlalchemy.dialects.postgresql import ARRAY
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from questverify.core.database import async_session_factory
from questverify.models.enums import (
    QuestCategory,
    QuestDifficulty,
    SubmissionStatus,
    UserQuestStatus,
)
from questverify.models.profiles import Profile
from questverify.models.quests import Quest, QuestSubmission, UserQuest
from questverify.modules.gamification.leveling import calculate_level_info

_CLAIMABLE_STATUSES = (
    UserQuestStatus.ACCEPTED,
    UserQuestStatus.IN_PROGRESS,
    UserQuestStatus.SUBMITTED,
)


@dataclass(frozen=True)
class QuestRecord:
    id: uuid.UUID
    title: str
    category: QuestCategory
    difficulty: QuestDifficulty
    xp_reward: int
    latitude: float
    longitude: float
    is_featured: bool = False
    is_active: bool = True
    times_completed: int = 0
    address: str = ""


@dataclass(frozen=True)
class ProfileRecord:
    id: uuid.UUID
    username: str
    total_xp: int = 0
    level: int = 1
    quests_completed: int = 0
    current_streak: int = 0
    longest_streak: int = 0
    badges: tuple[str, ...] = ()


@dataclass
class SubmissionRecord:
    user_id: uuid.UUID
    quest_id: uuid.UUID
    user_quest_id: uuid.UUID
    image_url: str
    submitted_latitude: float
    submitted_longitude: float
    ai_confidence: int
    verification_status: SubmissionStatus
    ai_labels: list[str] = field(default_factory=list)
    image_hash: str | None = None
    rejection_reason: str | None = None
    verified_at: datetime | None = None


class QuestStore(Protocol):
    async def fetch_quest(self, quest_id: uuid.UUID) -> QuestRecord | None: ...

    async def insert_submission(self, record: SubmissionRecord) -> None: ...

    async def claim_user_quest(
        self,
        user_quest_id: uuid.UUID,
        user_id: uuid.UUID,
        quest_id: uuid.UUID,
        completed_at: datetime,
        xp_earned: int,
    ) -> bool: ...

    async def increment_profile(self, user_id: uuid.UUID, xp_amount: int) -> ProfileRecord: ...

    async def fetch_profile(self, user_id: uuid.UUID) -> ProfileRecord | None: ...

    async def write_profile(
        self, user_id: uuid.UUID, total_xp: int, quests_completed: int, level: int
    ) -> None: ...

    async def increment_quest_completions(self, quest_id: uuid.UUID) -> None: ...

    async def category_completions(self, user_id: uuid.UUID) -> dict[str, int]: ...

    async def add_badges(self, user_id: uuid.UUID, badge_ids: list[str]) -> None: ...

    async def list_leaderboard(self, limit: int = 20) -> list[ProfileRecord]: ...

    async def list_active_quests(self) -> list[QuestRecord]: ...


def _quest_record(quest: Quest) -> QuestRecord:
    return QuestRecord(
        id=quest.id,
        title=quest.title,
        category=quest.category,
        difficulty=quest.difficulty,
        xp_reward=quest.xp_reward,
        latitude=quest.latitude,
        longitude=quest.longitude,
        is_featured=quest.is_featured,
        is_active=quest.is_active,
        times_completed=quest.times_completed,
        address=quest.address,
    )


def _profile_record(profile: Profile) -> ProfileRecord:
    return ProfileRecord(
        id=profile.id,
        username=profile.username,
        total_xp=profile.total_xp,
        level=profile.level,
        quests_completed=profile.quests_completed,
        current_streak=profile.current_streak,
        longest_streak=profile.longest_streak,
        badges=tuple(profile.badges or ()),
    )


class SqlQuestStore:
    """PostgreSQL-backed ``QuestStore``."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def fetch_quest(self, quest_id: uuid.UUID) -> QuestRecord | None:
        async with self._session_factory() as session:
            result = await session.execute(select(Quest).where(Quest.id == quest_id))
            quest = result.scalar_one_or_none()
            return _quest_record(quest) if quest else None

    async def insert_submission(self, record: SubmissionRecord) -> None:
        async with self._session_factory() as session:
            session.add(
                QuestSubmission(
                    user_id=record.user_id,
                    quest_id=record.quest_id,
                    user_quest_id=record.user_quest_id,
                    image_url=record.image_url,
                    image_hash=record.image_hash,
                    submitted_latitude=record.submitted_latitude,
                    submitted_longitude=record.submitted_longitude,
                    ai_confidence=record.ai_confidence,
                    ai_labels=list(record.ai_labels),
                    verification_status=record.verification_status,
                    rejection_reason=record.rejection_reason,
                    verified_at=record.verified_at,
                )
            )
            await session.commit()

    async def claim_user_quest(
        self,
        user_quest_id: uuid.UUID,
        user_id: uuid.UUID,
        quest_id: uuid.UUID,
        completed_at: datetime,
        xp_earned: int,
    ) -> bool:
        """Move an open acceptance to completed.

        Only an acceptance of this quest held by this user can be claimed.
        Returns False when no row changed: the acceptance was already completed,
        belongs to someone else or another quest, or does not exist. No award
        must be made then.
        """
        async with self._session_factory() as session:
            result = await session.execute(
                update(UserQuest)
                .where(
                    UserQuest.id == user_quest_id,
                    UserQuest.user_id == user_id,
                    UserQuest.quest_id == quest_id,
                    UserQuest.status.in_(_CLAIMABLE_STATUSES),
                )
                .values(
                    status=UserQuestStatus.COMPLETED,
                    completed_at=completed_at,
                    xp_earned=xp_earned,
                )
            )
            await session.commit()
            return (result.rowcount or 0) > 0

    async def increment_profile(self, user_id: uuid.UUID, xp_amount: int) -> ProfileRecord:
        """Atomically add XP and one completion, then resync the level.

        The row lock taken by the increment is held until commit, so the level
        written here always matches the total it was computed from.
        """
        async with self._session_factory() as session:
            result = await session.execute(
                update(Profile)
                .where(Profile.id == user_id)
                .values(
                    total_xp=Profile.total_xp + xp_amount,
                    quests_completed=Profile.quests_completed + 1,
                )
                .returning(Profile)
            )
            profile = result.scalar_one_or_none()
            if profile is None:
                await session.rollback()
                raise LookupError(f"profile {user_id} not found")
            profile.level = calculate_level_info(profile.total_xp).level
            await session.commit()
            return _profile_record(profile)

    async def fetch_profile(self, user_id: uuid.UUID) -> ProfileRecord | None:
        async with self._session_factory() as session:
            profile = await session.get(Profile, user_id)
            return _profile_record(profile) if profile else None

    async def write_profile(
        self, user_id: uuid.UUID, total_xp: int, quests_completed: int, level: int
    ) -> None:
        async with self._session_factory() as session:
            await session.execute(
                update(Profile)
                .where(Profile.id == user_id)
                .values(total_xp=total_xp, quests_completed=quests_completed, level=level)
            )
            await session.commit()

    async def increment_quest_completions(self, quest_id: uuid.UUID) -> None:
        async with self._session_factory() as session:
            await session.execute(
                update(Quest)
                .where(Quest.id == quest_id)
                .values(times_completed=Quest.times_completed + 1)
            )
            await session.commit()

    async def category_completions(self, user_id: uuid.UUID) -> dict[str, int]:
        async with self._session_factory() as session:
            result = await session.execute(
                select(Quest.category, func.count(UserQuest.id))
                .join(Quest, UserQuest.quest_id == Quest.id)
                .where(
                    UserQuest.user_id == user_id,
                    UserQuest.status == UserQuestStatus.COMPLETED,
                )
                .group_by(Quest.category)
            )
            return {category.value: count for category, count in result.all()}

    async def add_badges(self, user_id: uuid.UUID, badge_ids: list[str]) -> None:
        if not badge_ids:
            return
        async with self._session_factory() as session:
            # array_cat keeps the append atomic against concurrent awards
            await session.execute(
                update(Profile)
                .where(Profile.id == user_id)
                .values(
                    badges=func.array_cat(
                        Profile.badges,
                        bindparam("new_badges", badge_ids, type_=ARRAY(String)),
                    )
                )
            )
            await session.commit()

    async def list_leaderboard(self, limit: int = 20) -> list[ProfileRecord]:
        async with self._session_factory() as session:
            result = await session.execute(
                select(Profile)
                .where(Profile.total_xp > 0)
                .order_by(Profile.total_xp.desc(), Profile.quests_completed.desc())
                .limit(limit)
            )
            return [_profile_record(p) for p in result.scalars().all()]

    async def list_active_quests(self) -> list[QuestRecord]:
        async with self._session_factory() as session:
            result = await session.execute(
                select(Quest).where(
                    Quest.is_active.is_(True),
                    (Quest.expires_at.is_(None)) | (Quest.expires_at > func.now()),
                )
            )
            return [_quest_record(q) for q in result.scalars().all()]


def get_quest_store() -> QuestStore:
    """FastAPI dependency returning the default store."""
    return SqlQuestStore(async_session_factory)
