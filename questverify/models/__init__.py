"""SQLAlchemy models package — import all models so Base.metadata is populated."""

from questverify.models.base import BaseModel, TimestampedModel
from questverify.models.profiles import Profile
from questverify.models.quests import Quest, QuestSubmission, UserQuest

__all__ = [
    "BaseModel",
    "TimestampedModel",
    "Profile",
    "Quest",
    "QuestSubmission",
    "UserQuest",
]
