"""PostgreSQL native enums for the quest domain."""

import enum


class QuestCategory(str, enum.Enum):
    ENVIRONMENT = "environment"
    ELDERLY_CARE = "elderly_care"
    FOOD_RESCUE = "food_rescue"
    EDUCATION = "education"
    COMMUNITY = "community"


class QuestDifficulty(str, enum.Enum):
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"


class UserQuestStatus(str, enum.Enum):
    ACCEPTED = "accepted"
    IN_PROGRESS = "in_progress"
    SUBMITTED = "submitted"
    COMPLETED = "completed"
    FAILED = "failed"


class SubmissionStatus(str, enum.Enum):
    PENDING = "pending"  # never produced: verification resolves synchronously
    VERIFIED = "verified"
    REJECTED = "rejected"


class BadgeRarity(str, enum.Enum):
    COMMON = "common"
    RARE = "rare"
    EPIC = "epic"
    LEGENDARY = "legendary"


class RequirementType(str, enum.Enum):
    QUESTS_COMPLETED = "quests_completed"
    XP_EARNED = "xp_earned"
    STREAK = "streak"
    CATEGORY_SPECIFIC = "category_specific"
