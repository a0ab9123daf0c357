"""Streak multiplier and shield rule.

Multiplier Tiers
----------------
    0-2 days     1.0x
    3-6 days     1.1x
    7-13 days    1.2x
    14-29 days   1.3x
    30-99 days   1.5x
    100+ days    2.0x

Session XP is ``floor(minutes * 2 * multiplier)``.

Shields
-------
A shield is earned the first time the streak reaches each milestone
(7, 14, 30, 60, 100, 365 days).  At most one shield is handed out per
check, lowest milestone first, so a backlog is paid out one award at a
time.
"""

from __future__ import annotations

import math
from collections.abc import Iterable
from dataclasses import dataclass


# Ordered descending so the first match wins.
MULTIPLIER_TIERS: list[tuple[int, float]] = [
    (100, 2.0),
    (30,  1.5),
    (14,  1.3),
    (7,   1.2),
    (3,   1.1),
    (0,   1.0),
]

XP_PER_MINUTE = 2


def streak_multiplier(days: int) -> float:
    """XP multiplier for a streak of *days* consecutive days."""
    for threshold, factor in MULTIPLIER_TIERS:
        if days >= threshold:
            return factor
    return 1.0


def session_xp(
    duration_minutes: int, streak: int, xp_per_minute: int = XP_PER_MINUTE,
) -> int:
    """XP for one focus session at the given streak."""
    return math.floor(duration_minutes * xp_per_minute * streak_multiplier(streak))


# ── shields ──────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class ShieldDef:
    milestone: int
    name: str


SHIELD_MILESTONES: list[ShieldDef] = [
    ShieldDef(7,   "Week Shield"),
    ShieldDef(14,  "Fortnight Shield"),
    ShieldDef(30,  "Month Shield"),
    ShieldDef(60,  "Iron Shield"),
    ShieldDef(100, "Century Shield"),
    ShieldDef(365, "Year Shield"),
]


def shield_earned(streak: int, existing_milestones: Iterable[int]) -> ShieldDef | None:
    """Return the shield *streak* has earned that isn't held yet, if any."""
    held = set(existing_milestones)
    for shield in SHIELD_MILESTONES:
        if streak >= shield.milestone and shield.milestone not in held:
            return shield
    return None
