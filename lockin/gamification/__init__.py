"""Gamification package."""

from .leveling import (
    LevelInfo,
    level_from_xp,
    level_for_xp,
    xp_for_level,
    title_for_level,
    LEVEL_TITLES,
)
from .rewards import RewardDef, REWARDS, level_rewards, next_reward
from .streaks import (
    ShieldDef,
    SHIELD_MILESTONES,
    streak_multiplier,
    session_xp,
    shield_earned,
)
from .badges import (
    BadgeDef,
    Requirement,
    RequirementType,
    BADGES,
    evaluate_badges,
    meets_requirement,
)
from .quests import DailyQuest, QuestRequirement, DAILY_QUESTS, build_daily_quests
from .engine import RewardEngine

__all__ = [
    "LevelInfo",
    "level_from_xp",
    "level_for_xp",
    "xp_for_level",
    "title_for_level",
    "LEVEL_TITLES",
    "RewardDef",
    "REWARDS",
    "level_rewards",
    "next_reward",
    "ShieldDef",
    "SHIELD_MILESTONES",
    "streak_multiplier",
    "session_xp",
    "shield_earned",
    "BadgeDef",
    "Requirement",
    "RequirementType",
    "BADGES",
    "evaluate_badges",
    "meets_requirement",
    "DailyQuest",
    "QuestRequirement",
    "DAILY_QUESTS",
    "build_daily_quests",
    "RewardEngine",
]
