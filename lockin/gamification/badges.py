"""Badge catalog and requirement evaluation.

Every badge has one requirement: a kind from :class:`RequirementType`
and a threshold compared with ``>=``.  Each kind reads exactly one stat
(see ``REQUIREMENT_STATS``), so adding a badge is a one-line catalog
change and evaluation has no per-kind branching.

Badges are checked in catalog order; a held badge is never re-awarded.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from enum import Enum


class RequirementType(Enum):
    STREAK = "streak"
    SESSIONS_COMPLETED = "sessions_completed"
    SESSION_DURATION = "session_duration"
    SESSIONS_PER_DAY = "sessions_per_day"
    RESISTS = "resists"
    QUESTS_COMPLETED = "quests_completed"
    DAILY_QUEST_STREAK = "daily_quest_streak"
    PHONE_FREE_MEALS = "phone_free_meals"
    PHONE_FREE_SOCIAL = "phone_free_social"
    PHONE_FREE_OUTDOOR = "phone_free_outdoor"
    SLEEP_QUALITY_STREAK = "sleep_quality_streak"
    ZERO_SCREEN_TIME = "zero_screen_time"
    STREAK_RECOVERY = "streak_recovery"
    QUESTS_PER_DAY = "quests_per_day"
    LATE_NIGHT_FREE = "late_night_free"
    APPS_DELETED = "apps_deleted"
    COMMUNITY_HELP = "community_help"


# Requirement kind → stat name it compares against.  ``streak`` lives on
# the progression row itself; everything else is a ``UserStats`` column.
REQUIREMENT_STATS: dict[RequirementType, str] = {
    RequirementType.STREAK:               "streak",
    RequirementType.SESSIONS_COMPLETED:   "total_sessions",
    RequirementType.SESSION_DURATION:     "longest_session",
    RequirementType.SESSIONS_PER_DAY:     "max_sessions_per_day",
    RequirementType.RESISTS:              "total_resists",
    RequirementType.QUESTS_COMPLETED:     "quests_completed",
    RequirementType.DAILY_QUEST_STREAK:   "daily_quest_streak",
    RequirementType.PHONE_FREE_MEALS:     "phone_free_meals",
    RequirementType.PHONE_FREE_SOCIAL:    "phone_free_social",
    RequirementType.PHONE_FREE_OUTDOOR:   "phone_free_outdoor",
    RequirementType.SLEEP_QUALITY_STREAK: "sleep_streak",
    RequirementType.ZERO_SCREEN_TIME:     "perfect_days",
    RequirementType.STREAK_RECOVERY:      "comeback_streaks",
    RequirementType.QUESTS_PER_DAY:       "max_quests_per_day",
    RequirementType.LATE_NIGHT_FREE:      "late_night_free_streak",
    RequirementType.APPS_DELETED:         "apps_deleted",
    RequirementType.COMMUNITY_HELP:       "community_helps",
}


@dataclass(frozen=True)
class Requirement:
    type: RequirementType
    value: int


@dataclass(frozen=True)
class BadgeDef:
    id: str
    name: str
    emoji: str
    description: str
    xp_reward: int
    requirement: Requirement


def _badge(id, name, emoji, description, xp_reward, kind, value) -> BadgeDef:
    return BadgeDef(id, name, emoji, description, xp_reward, Requirement(kind, value))


R = RequirementType

BADGES: tuple[BadgeDef, ...] = (
    # ── sessions ────────────────────────────────────────────────────────
    _badge("first_lock_in",   "First Lock In",    "🔒", "Complete your first focus session.",  10,  R.SESSIONS_COMPLETED, 1),
    _badge("ten_sessions",    "Getting Serious",  "💪", "Complete 10 focus sessions.",         25,  R.SESSIONS_COMPLETED, 10),
    _badge("fifty_sessions",  "Half Century",     "🏅", "Complete 50 focus sessions.",         75,  R.SESSIONS_COMPLETED, 50),
    _badge("centurion",       "Centurion",        "💯", "Complete 100 focus sessions.",        150, R.SESSIONS_COMPLETED, 100),
    _badge("deep_diver",      "Deep Diver",       "🤿", "Finish a 60-minute session.",         30,  R.SESSION_DURATION, 60),
    _badge("marathoner",      "Marathoner",       "🏃", "Finish a 120-minute session.",        60,  R.SESSION_DURATION, 120),
    _badge("triple_threat",   "Triple Threat",    "⚡", "Complete 3 sessions in one day.",     20,  R.SESSIONS_PER_DAY, 3),
    _badge("power_day",       "Power Day",        "🔋", "Complete 6 sessions in one day.",     50,  R.SESSIONS_PER_DAY, 6),

    # ── streaks ─────────────────────────────────────────────────────────
    _badge("streak_3",        "Warming Up",       "🔥", "Reach a 3-day streak.",               15,  R.STREAK, 3),
    _badge("streak_7",        "Week Warrior",     "📅", "Reach a 7-day streak.",               40,  R.STREAK, 7),
    _badge("streak_30",       "Monthly Master",   "🗓️", "Reach a 30-day streak.",              150, R.STREAK, 30),
    _badge("streak_100",      "Unbreakable",      "💎", "Reach a 100-day streak.",             500, R.STREAK, 100),
    _badge("comeback_kid",    "Comeback Kid",     "🔄", "Restart a streak after losing one.",  25,  R.STREAK_RECOVERY, 1),

    # ── quests ──────────────────────────────────────────────────────────
    _badge("quest_starter",   "Quest Starter",    "🗺️", "Complete 5 quests.",                  20,  R.QUESTS_COMPLETED, 5),
    _badge("quest_master",    "Quest Master",     "🧭", "Complete 50 quests.",                 100, R.QUESTS_COMPLETED, 50),
    _badge("daily_devotee",   "Daily Devotee",    "📆", "Complete 10 daily quests.",           40,  R.DAILY_QUEST_STREAK, 10),
    _badge("quest_sweep",     "Clean Sweep",      "🧹", "Complete 4 quests in one day.",       40,  R.QUESTS_PER_DAY, 4),

    # ── phone-free behaviour ────────────────────────────────────────────
    _badge("resist_10",       "Iron Will",        "🛡️", "Resist the urge to scroll 10 times.", 30,  R.RESISTS, 10),
    _badge("mindful_eater",   "Mindful Eater",    "🍽️", "Enjoy 5 phone-free meals.",           25,  R.PHONE_FREE_MEALS, 5),
    _badge("present_friend",  "Present Friend",   "🤝", "Spend 5 phone-free social moments.",  25,  R.PHONE_FREE_SOCIAL, 5),
    _badge("touch_grass",     "Touch Grass",      "🌳", "Go outdoors phone-free 5 times.",     25,  R.PHONE_FREE_OUTDOOR, 5),
    _badge("sleep_guardian",  "Sleep Guardian",   "😴", "Sleep well 7 nights in a row.",       40,  R.SLEEP_QUALITY_STREAK, 7),
    _badge("night_owl_tamed", "Night Owl Tamed",  "🦉", "No late-night scrolling for 7 days.", 40,  R.LATE_NIGHT_FREE, 7),
    _badge("perfect_day",     "Perfect Day",      "☀️", "Have a day with zero screen time.",   100, R.ZERO_SCREEN_TIME, 1),
    _badge("declutter",       "Declutter",        "🗑️", "Delete 3 distracting apps.",          30,  R.APPS_DELETED, 3),
    _badge("helper",          "Helping Hand",     "🙌", "Help 5 people in the community.",     30,  R.COMMUNITY_HELP, 5),
)

_BADGE_MAP: dict[str, BadgeDef] = {b.id: b for b in BADGES}


def get_badge_def(badge_id: str) -> BadgeDef | None:
    return _BADGE_MAP.get(badge_id)


def meets_requirement(badge: BadgeDef, stats: Mapping[str, int]) -> bool:
    """True when *stats* satisfies the badge's threshold.

    *stats* maps stat names (see ``REQUIREMENT_STATS``) to their current
    values; missing stats count as zero.
    """
    stat = REQUIREMENT_STATS[badge.requirement.type]
    return (stats.get(stat) or 0) >= badge.requirement.value


def evaluate_badges(
    stats: Mapping[str, int], held_ids: Iterable[str],
) -> list[BadgeDef]:
    """Badges that *stats* now qualifies for and aren't held, in catalog order."""
    held = set(held_ids)
    return [
        badge for badge in BADGES
        if badge.id not in held and meets_requirement(badge, stats)
    ]


def badge_progress(badge: BadgeDef, stats: Mapping[str, int]) -> dict:
    """``{"current", "required", "percentage"}`` toward *badge*."""
    current = stats.get(REQUIREMENT_STATS[badge.requirement.type]) or 0
    required = badge.requirement.value
    percentage = min(100, int(current / required * 100)) if required > 0 else 100
    return {"current": current, "required": required, "percentage": percentage}
