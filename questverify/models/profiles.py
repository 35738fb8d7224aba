"""User progression state."""

from sqlalchemy import Index, Integer, String
from sqlalchemy.dialects.postgresql import ARRAY
from sqlalchemy.orm import Mapped, mapped_column

from questverify.models.base import BaseModel


class Profile(BaseModel):
    """Profile keyed by the auth user id.

    ``level`` is derived from ``total_xp`` by the leveling engine and persisted
    only for leaderboard queries; it is rewritten on every XP change.
    """

    __tablename__ = "profiles"
    __table_args__ = (Index("ix_profiles_total_xp", "total_xp"),)

    email: Mapped[str] = mapped_column(String(320), nullable=False, unique=True)
    username: Mapped[str] = mapped_column(String(64), nullable=False, unique=True)
    full_name: Mapped[str | None] = mapped_column(String(255))
    avatar_url: Mapped[str | None] = mapped_column(String(512))
    total_xp: Mapped[int] = mapped_column(
        Integer, default=0, server_default="0", nullable=False
    )
    level: Mapped[int] = mapped_column(
        Integer, default=1, server_default="1", nullable=False
    )
    quests_completed: Mapped[int] = mapped_column(
        Integer, default=0, server_default="0", nullable=False
    )
    current_streak: Mapped[int] = mapped_column(
        Integer, default=0, server_default="0", nullable=False
    )
    longest_streak: Mapped[int] = mapped_column(
        Integer, default=0, server_default="0", nullable=False
    )
    badges: Mapped[list[str]] = mapped_column(ARRAY(String), nullable=False, default=list)
