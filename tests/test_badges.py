"""Tests for the badge catalog and pure requirement evaluation."""

from lockin.database.models import UserStats
from lockin.gamification.badges import (
    BADGES,
    REQUIREMENT_STATS,
    RequirementType,
    badge_progress,
    evaluate_badges,
    get_badge_def,
    meets_requirement,
)


class TestCatalog:

    def test_ids_are_unique(self):
        ids = [b.id for b in BADGES]
        assert len(ids) == len(set(ids))

    def test_every_requirement_type_is_mapped(self):
        assert set(REQUIREMENT_STATS) == set(RequirementType)

    def test_mapped_stats_exist(self):
        """Every stat a badge reads is the streak or a UserStats column."""
        columns = {c.key for c in UserStats.__table__.columns}
        for stat in REQUIREMENT_STATS.values():
            assert stat == "streak" or stat in columns

    def test_thresholds_and_rewards_positive(self):
        for badge in BADGES:
            assert badge.requirement.value > 0
            assert badge.xp_reward > 0

    def test_lookup(self):
        assert get_badge_def("streak_7").requirement.value == 7
        assert get_badge_def("nope") is None


class TestEvaluation:

    def test_empty_stats_earn_nothing(self):
        assert evaluate_badges({}, []) == []

    def test_threshold_is_inclusive(self):
        badge = get_badge_def("streak_3")
        assert meets_requirement(badge, {"streak": 3})
        assert not meets_requirement(badge, {"streak": 2})

    def test_catalog_order_preserved(self):
        earned = evaluate_badges({"total_sessions": 10, "streak": 7}, [])
        ids = [b.id for b in earned]
        assert ids == ["first_lock_in", "ten_sessions", "streak_3", "streak_7"]

    def test_held_badges_skipped(self):
        earned = evaluate_badges(
            {"total_sessions": 10}, ["first_lock_in"],
        )
        assert [b.id for b in earned] == ["ten_sessions"]

    def test_idempotent_when_everything_held(self):
        stats = {"total_sessions": 100}
        held = [b.id for b in evaluate_badges(stats, [])]
        assert evaluate_badges(stats, held) == []

    def test_none_stat_counts_as_zero(self):
        assert evaluate_badges({"perfect_days": None}, []) == []


class TestProgress:

    def test_partial(self):
        progress = badge_progress(get_badge_def("ten_sessions"), {"total_sessions": 4})
        assert progress == {"current": 4, "required": 10, "percentage": 40}

    def test_capped_at_100(self):
        progress = badge_progress(get_badge_def("first_lock_in"), {"total_sessions": 9})
        assert progress["percentage"] == 100
