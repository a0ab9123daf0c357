"""Database package."""

from .db import get_session, init_db, configure_engine
from .models import (
    Mood,
    UserProgression,
    UserStats,
    StreakShield,
    EarnedBadge,
    DailyQuestCompletion,
    XPHistoryEntry,
    LevelHistoryEntry,
    UnlockedReward,
    FocusSession,
    XPTransaction,
    BadgeEvent,
    Quest,
)

__all__ = [
    "get_session",
    "init_db",
    "configure_engine",
    "Mood",
    "UserProgression",
    "UserStats",
    "StreakShield",
    "EarnedBadge",
    "DailyQuestCompletion",
    "XPHistoryEntry",
    "LevelHistoryEntry",
    "UnlockedReward",
    "FocusSession",
    "XPTransaction",
    "BadgeEvent",
    "Quest",
]
