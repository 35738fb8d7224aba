"""Quest models: Quest, UserQuest (acceptance), QuestSubmission."""

import uuid
from datetime import datetime

from sqlalchemy import Float, ForeignKey, Index, Integer, String, Text, func
from sqlalchemy.dialects.postgresql import ARRAY, UUID
from sqlalchemy.orm import Mapped, mapped_column

from questverify.models.base import BaseModel, TimestampedModel
from questverify.models.enums import (
    QuestCategory,
    QuestDifficulty,
    SubmissionStatus,
    UserQuestStatus,
)


class Quest(BaseModel):
    __tablename__ = "quests"
    __table_args__ = (
        Index("ix_quests_category", "category"),
        Index("ix_quests_is_active", "is_active"),
    )

    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    category: Mapped[QuestCategory] = mapped_column(nullable=False)
    difficulty: Mapped[QuestDifficulty] = mapped_column(
        nullable=False, default=QuestDifficulty.EASY
    )
    xp_reward: Mapped[int] = mapped_column(Integer, nullable=False)
    estimated_time: Mapped[int] = mapped_column(Integer, nullable=False, default=30)  # minutes
    latitude: Mapped[float] = mapped_column(Float, nullable=False)
    longitude: Mapped[float] = mapped_column(Float, nullable=False)
    address: Mapped[str] = mapped_column(String(500), nullable=False, default="")
    is_active: Mapped[bool] = mapped_column(
        default=True, server_default="true", nullable=False
    )
    is_featured: Mapped[bool] = mapped_column(
        default=False, server_default="false", nullable=False
    )
    times_completed: Mapped[int] = mapped_column(
        Integer, default=0, server_default="0", nullable=False
    )
    created_by: Mapped[uuid.UUID | None] = mapped_column(UUID(as_uuid=True), nullable=True)
    expires_at: Mapped[datetime | None] = mapped_column()


class UserQuest(BaseModel):
    """A user's acceptance of a quest; its id is the award idempotency key."""

    __tablename__ = "user_quests"
    __table_args__ = (
        Index("ix_user_quests_user_id_status", "user_id", "status"),
    )

    user_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("profiles.id", ondelete="CASCADE"),
        nullable=False,
    )
    quest_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("quests.id", ondelete="CASCADE"),
        nullable=False,
    )
    status: Mapped[UserQuestStatus] = mapped_column(
        nullable=False, default=UserQuestStatus.ACCEPTED
    )
    accepted_at: Mapped[datetime] = mapped_column(server_default=func.now(), nullable=False)
    started_at: Mapped[datetime | None] = mapped_column()
    completed_at: Mapped[datetime | None] = mapped_column()
    xp_earned: Mapped[int] = mapped_column(
        Integer, default=0, server_default="0", nullable=False
    )


class QuestSubmission(TimestampedModel):
    """One proof-of-completion attempt. Append-only."""

    __tablename__ = "quest_submissions"
    __table_args__ = (
        Index("ix_quest_submissions_user_id", "user_id"),
        Index("ix_quest_submissions_user_quest_id", "user_quest_id"),
    )

    user_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("profiles.id", ondelete="CASCADE"),
        nullable=False,
    )
    quest_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("quests.id", ondelete="CASCADE"),
        nullable=False,
    )
    user_quest_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("user_quests.id", ondelete="CASCADE"),
        nullable=False,
    )
    image_url: Mapped[str] = mapped_column(String(1024), nullable=False, default="")
    image_hash: Mapped[str | None] = mapped_column(String(64))
    submitted_latitude: Mapped[float] = mapped_column(Float, nullable=False)
    submitted_longitude: Mapped[float] = mapped_column(Float, nullable=False)
    ai_confidence: Mapped[int] = mapped_column(Integer, nullable=False, default=0)  # 0-100
    ai_labels: Mapped[list[str]] = mapped_column(ARRAY(String), nullable=False, default=list)
    verification_status: Mapped[SubmissionStatus] = mapped_column(
        nullable=False, default=SubmissionStatus.PENDING
    )
    rejection_reason: Mapped[str | None] = mapped_column(Text)
    verified_at: Mapped[datetime | None] = mapped_column()
