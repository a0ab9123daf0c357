"""XP → level mapping for Lock In.

Leveling Curve
--------------
Level 1->2: 100 XP.  Each subsequent level requires 10% more XP than
the previous.  The formula is stored in :func:`_xp_delta` so it's
trivial to re-tune.  A 25-minute session at no streak earns 50 XP, so
the first level-up takes two sessions.

Level Titles
------------
    1-4   Wanderer       🌱
    5-9   Seeker         🔍
   10-14  Focused Mind   🎯
   15-19  Screen Tamer   📵
   20-29  Deep Diver     🌊
   30-39  Zen Master     🧘
   40-49  Digital Monk   🏔️
   50+    Legend         👑
"""

from __future__ import annotations

from dataclasses import dataclass


# ── leveling constants (easy to adjust) ──────────────────────────────────

BASE_XP_PER_LEVEL = 100   # XP to go from level 1 → 2
LEVEL_SCALING = 1.10       # each level needs 10% more than the last


# ── level math ───────────────────────────────────────────────────────────


def _xp_delta(level: int) -> int:
    """XP needed to go from *level* to *level + 1*."""
    return round(BASE_XP_PER_LEVEL * (LEVEL_SCALING ** (level - 1)))


def xp_for_level(level: int) -> int:
    """Total cumulative XP required to *reach* the given level.

    ``xp_for_level(1)`` is 0 (you start at level 1 with zero XP).
    """
    if level <= 1:
        return 0
    return sum(_xp_delta(l) for l in range(1, level))


def level_for_xp(total_xp: int) -> int:
    """Return the level a player is at given their total XP."""
    level = 1
    threshold = _xp_delta(1)
    while threshold <= total_xp:
        level += 1
        threshold += _xp_delta(level)
    return level


# ── level titles ─────────────────────────────────────────────────────────

# Ordered descending so the first match wins.
LEVEL_TITLES: list[tuple[int, str, str]] = [
    (50, "Legend",       "👑"),
    (40, "Digital Monk", "🏔️"),
    (30, "Zen Master",   "🧘"),
    (20, "Deep Diver",   "🌊"),
    (15, "Screen Tamer", "📵"),
    (10, "Focused Mind", "🎯"),
    (5,  "Seeker",       "🔍"),
    (1,  "Wanderer",     "🌱"),
]


def title_for_level(level: int) -> tuple[str, str]:
    """Return ``(title, emoji)`` for *level*."""
    for threshold, title, emoji in LEVEL_TITLES:
        if level >= threshold:
            return title, emoji
    return "Wanderer", "🌱"


# ── combined lookup ──────────────────────────────────────────────────────


@dataclass(frozen=True)
class LevelInfo:
    level: int
    title: str
    title_emoji: str
    current_xp: int        # XP earned inside the current level band
    xp_to_next_level: int  # width of the current level band


def level_from_xp(total_xp: int) -> LevelInfo:
    """Everything the progression record caches about *total_xp*."""
    if total_xp < 0:
        raise ValueError(f"total_xp must be non-negative, got {total_xp}")
    level = level_for_xp(total_xp)
    title, emoji = title_for_level(level)
    return LevelInfo(
        level=level,
        title=title,
        title_emoji=emoji,
        current_xp=total_xp - xp_for_level(level),
        xp_to_next_level=_xp_delta(level),
    )
