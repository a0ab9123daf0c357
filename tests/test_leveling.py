"""Tests for the Lock In leveling table.

Covers: leveling curve, level titles, the combined ``level_from_xp``
lookup and its monotonicity guarantees.
"""

import pytest

from lockin.gamification.leveling import (
    LevelInfo,
    level_from_xp,
    xp_for_level,
    level_for_xp,
    title_for_level,
    _xp_delta,
    BASE_XP_PER_LEVEL,
    LEVEL_SCALING,
)


# ═══════════════════════════════════════════════════════════════════════════
#  LEVELING CURVE
# ═══════════════════════════════════════════════════════════════════════════


class TestLevelingCurve:

    def test_xp_for_level_1_is_zero(self):
        assert xp_for_level(1) == 0

    def test_xp_for_level_2(self):
        """Level 1→2 costs 100 XP."""
        assert xp_for_level(2) == BASE_XP_PER_LEVEL == 100

    def test_xp_delta_level_2(self):
        """10% more than level 1."""
        assert _xp_delta(2) == round(100 * LEVEL_SCALING) == 110

    def test_xp_delta_increases_each_level(self):
        for lvl in range(1, 60):
            assert _xp_delta(lvl + 1) > _xp_delta(lvl)

    def test_xp_for_level_5(self):
        assert xp_for_level(5) == 100 + 110 + 121 + 133

    def test_level_for_xp_zero(self):
        assert level_for_xp(0) == 1

    def test_level_for_xp_at_boundary(self):
        assert level_for_xp(100) == 2

    def test_level_for_xp_just_below_boundary(self):
        assert level_for_xp(99) == 1

    def test_level_for_xp_high(self):
        assert level_for_xp(100_000) > 30

    def test_roundtrip_level(self):
        for total_xp in [0, 50, 100, 209, 210, 1000, 5000, 50000]:
            level = level_for_xp(total_xp)
            assert xp_for_level(level) <= total_xp
            assert xp_for_level(level + 1) > total_xp


# ═══════════════════════════════════════════════════════════════════════════
#  LEVEL TITLES
# ═══════════════════════════════════════════════════════════════════════════


class TestLevelTitles:

    @pytest.mark.parametrize("level, title, emoji", [
        (1, "Wanderer", "🌱"),
        (4, "Wanderer", "🌱"),
        (5, "Seeker", "🔍"),
        (10, "Focused Mind", "🎯"),
        (15, "Screen Tamer", "📵"),
        (20, "Deep Diver", "🌊"),
        (29, "Deep Diver", "🌊"),
        (30, "Zen Master", "🧘"),
        (40, "Digital Monk", "🏔️"),
        (50, "Legend", "👑"),
        (99, "Legend", "👑"),
    ])
    def test_title_for_level(self, level, title, emoji):
        assert title_for_level(level) == (title, emoji)


# ═══════════════════════════════════════════════════════════════════════════
#  LEVEL FROM XP
# ═══════════════════════════════════════════════════════════════════════════


class TestLevelFromXP:

    def test_zero_xp(self):
        assert level_from_xp(0) == LevelInfo(
            level=1, title="Wanderer", title_emoji="🌱",
            current_xp=0, xp_to_next_level=100,
        )

    def test_mid_band(self):
        info = level_from_xp(150)
        assert info.level == 2
        assert info.current_xp == 50
        assert info.xp_to_next_level == 110

    def test_title_band_crossing(self):
        info = level_from_xp(xp_for_level(5))
        assert info.level == 5
        assert info.title == "Seeker"
        assert info.current_xp == 0

    def test_negative_xp_rejected(self):
        with pytest.raises(ValueError):
            level_from_xp(-1)

    def test_level_is_monotonic(self):
        previous = 0
        for total_xp in range(0, 20_000, 37):
            level = level_from_xp(total_xp).level
            assert level >= previous
            previous = level

    def test_current_xp_always_inside_band(self):
        for total_xp in range(0, 20_000, 41):
            info = level_from_xp(total_xp)
            assert 0 <= info.current_xp < info.xp_to_next_level
