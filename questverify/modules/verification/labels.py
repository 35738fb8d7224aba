"""Candidate labels sent to the image classifier, per quest category."""

from types import MappingProxyType

from questverify.models.enums import QuestCategory

CATEGORY_LABELS = MappingProxyType(
    {
        QuestCategory.ENVIRONMENT.value: (
            "trash bag", "garbage", "litter", "plastic waste", "cleaning",
            "recycling", "outdoor cleanup", "park", "nature", "tree planting",
            "sapling", "watering plants", "environmental work",
        ),
        QuestCategory.ELDERLY_CARE.value: (
            "elderly person", "senior citizen", "old person", "helping elderly",
            "wheelchair", "walking assistance", "care giving", "companionship",
            "grocery shopping", "medicine", "healthcare",
        ),
        QuestCategory.FOOD_RESCUE.value: (
            "food", "meal", "restaurant", "food donation", "food container",
            "cooking", "packaged food", "food delivery", "kitchen", "feeding",
        ),
        QuestCategory.EDUCATION.value: (
            "books", "library", "reading", "teaching", "tutoring", "classroom",
            "school supplies", "notebook", "education", "learning", "studying",
        ),
        QuestCategory.COMMUNITY.value: (
            "community service", "volunteer", "helping", "group activity",
            "charity", "donation", "social work", "neighborhood", "teamwork",
        ),
    }
)

# Labels that indicate a photo of a screen or print rather than the scene itself
NEGATIVE_LABELS: tuple[str, ...] = (
    "screenshot",
    "computer screen",
    "phone screen",
    "TV screen",
    "printed image",
    "photo of photo",
    "indoor selfie",
    "fake",
)


def category_labels(category: QuestCategory | str) -> tuple[str, ...]:
    """Labels for a category; unknown categories fall back to community."""
    key = category.value if isinstance(category, QuestCategory) else str(category)
    return CATEGORY_LABELS.get(key, CATEGORY_LABELS[QuestCategory.COMMUNITY.value])


def candidate_labels(category: QuestCategory | str) -> list[str]:
    return [*category_labels(category), *NEGATIVE_LABELS]
