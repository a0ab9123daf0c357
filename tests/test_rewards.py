"""Tests for the level reward catalog."""

from lockin.gamification.rewards import (
    REWARDS, RewardDef, get_reward_def, level_rewards, next_reward,
)


class TestRewardCatalog:

    def test_keys_are_unique(self):
        keys = [r.key for r in REWARDS]
        assert len(keys) == len(set(keys))

    def test_every_reward_above_level_1(self):
        """Level 1 is the starting level; nothing can unlock there."""
        assert all(r.required_level > 1 for r in REWARDS)

    def test_get_existing_reward(self):
        item = get_reward_def("theme_ocean")
        assert isinstance(item, RewardDef)
        assert item.required_level == 2

    def test_get_nonexistent_returns_none(self):
        assert get_reward_def("nonexistent") is None


class TestLevelRewards:

    def test_level_with_single_reward(self):
        assert level_rewards(3) == ["avatar_fox"]

    def test_level_with_two_rewards(self):
        assert level_rewards(5) == ["theme_forest", "shield_slot"]

    def test_level_without_reward_is_empty(self):
        assert level_rewards(4) == []
        assert level_rewards(1) == []

    def test_next_reward_at_level_1(self):
        assert next_reward(1).key == "theme_ocean"

    def test_next_reward_skips_reached_levels(self):
        assert next_reward(5).required_level == 8

    def test_next_reward_at_max(self):
        assert next_reward(50) is None
