"""Tests for the badge catalog and eligibility checks."""

from questverify.models.enums import BadgeRarity
from questverify.modules.gamification.badges import (
    BADGES,
    check_earned_badges,
    get_badge_by_id,
    new_badges,
)


def test_first_quest_earns_first_steps_only() -> None:
    earned = check_earned_badges(1, 0, 0, {})
    assert earned == ["first_steps"]


def test_veteran_profile() -> None:
    earned = set(check_earned_badges(100, 5000, 30, {"environment": 10}))
    assert {"legend", "xp_champion", "dedicated", "eco_warrior"} <= earned
    assert "elder_friend" not in earned


def test_category_badge_needs_its_own_category() -> None:
    assert "food_hero" not in check_earned_badges(0, 0, 0, {"environment": 50})
    assert "food_hero" in check_earned_badges(0, 0, 0, {"food_rescue": 10})


def test_results_follow_catalog_order() -> None:
    earned = check_earned_badges(25, 2000, 7, {})
    catalog_order = [b.id for b in BADGES]
    assert earned == sorted(earned, key=catalog_order.index)


def test_missing_stats_are_treated_as_empty() -> None:
    assert check_earned_badges(0, 0, 0) == []


def test_get_badge_by_id() -> None:
    badge = get_badge_by_id("legend")
    assert badge is not None
    assert badge.rarity is BadgeRarity.LEGENDARY
    assert get_badge_by_id("nope") is None


def test_new_badges_diff() -> None:
    assert new_badges(["first_steps"], ["first_steps", "on_fire"]) == ["on_fire"]
    assert new_badges(["first_steps"], ["first_steps"]) == []


def test_to_dict_shape() -> None:
    data = get_badge_by_id("eco_warrior").to_dict()
    assert data["rarity"] == "rare"
    assert data["requirement"] == {"type": "category_specific", "value": 10, "category": "environment"}
