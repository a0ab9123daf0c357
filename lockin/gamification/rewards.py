"""Level-gated rewards for Lock In.

Reward Catalog
--------------
    Lv 2   Ocean theme
    Lv 3   Fox avatar
    Lv 5   Forest theme, extra shield slot
    Lv 8   Custom session lengths
    Lv 10  Owl avatar, Sunset theme
    Lv 15  Focus sounds pack
    Lv 20  Aurora theme, Dragon avatar
    Lv 30  Galaxy theme
    Lv 40  Golden timer ring
    Lv 50  Legend frame

Rewards are unlocked exactly at their level; the engine records them in
``unlocked_rewards`` when an XP award crosses that level.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class RewardDef:
    key: str
    name: str
    reward_type: str        # theme | avatar | feature | cosmetic
    required_level: int
    description: str


REWARDS: list[RewardDef] = [
    RewardDef("theme_ocean",     "Ocean",            "theme",    2,  "Deep navy with teal accents."),
    RewardDef("avatar_fox",      "Fox",              "avatar",   3,  "A curious fox keeps you company."),
    RewardDef("theme_forest",    "Forest",           "theme",    5,  "Dark green with amber accents."),
    RewardDef("shield_slot",     "Shield Slot",      "feature",  5,  "Hold one more streak shield."),
    RewardDef("custom_timer",    "Custom Sessions",  "feature",  8,  "Pick any session length."),
    RewardDef("avatar_owl",      "Owl",              "avatar",   10, "A wise owl for late focus."),
    RewardDef("theme_sunset",    "Sunset",           "theme",    10, "Warm coral and gold."),
    RewardDef("sound_pack",      "Focus Sounds",     "feature",  15, "Rain, café and brown noise."),
    RewardDef("theme_aurora",    "Aurora",           "theme",    20, "Shimmering northern lights."),
    RewardDef("avatar_dragon",   "Dragon",           "avatar",   20, "A tiny dragon guards your streak."),
    RewardDef("theme_galaxy",    "Galaxy",           "theme",    30, "Deep space with star particles."),
    RewardDef("golden_ring",     "Golden Ring",      "cosmetic", 40, "A gold timer ring."),
    RewardDef("legend_frame",    "Legend Frame",     "cosmetic", 50, "A profile frame for legends."),
]

_REWARD_MAP: dict[str, RewardDef] = {r.key: r for r in REWARDS}


def get_reward_def(key: str) -> RewardDef | None:
    """Return the RewardDef for *key*, or ``None``."""
    return _REWARD_MAP.get(key)


def level_rewards(level: int) -> list[str]:
    """Reward keys unlocked exactly at *level* (empty when none)."""
    return [r.key for r in REWARDS if r.required_level == level]


def next_reward(current_level: int) -> RewardDef | None:
    """Return the lowest-level reward the player hasn't reached yet."""
    candidates = [r for r in REWARDS if r.required_level > current_level]
    if not candidates:
        return None
    return min(candidates, key=lambda r: r.required_level)
