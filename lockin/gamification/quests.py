"""Daily quest templates and the pure quest builder.

Daily quests are never stored.  They are rebuilt on every call from the
user's streak and today's aggregates (minutes, session count, XP), so
two calls over the same data always return the same list.

Quest Set
---------
    session-30min    30 focus minutes today      easy    20 XP
    three-sessions   3 sessions today            medium  35 XP
    xp-goal          100 XP earned today         hard    25 XP
    maintain-streak  1 session today + streak    easy    15 XP
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, time


@dataclass(frozen=True)
class QuestTemplate:
    id: str
    title: str
    description: str
    difficulty: str        # easy | medium | hard
    xp_reward: int
    requirement_type: str  # session | sessions_count | xp | streak
    target: int
    metric: str            # key into the TodayAggregate


@dataclass(frozen=True)
class TodayAggregate:
    """Live per-day figures the quests are measured against."""
    minutes: int = 0
    sessions: int = 0
    xp: int = 0


@dataclass(frozen=True)
class QuestRequirement:
    type: str
    target: int
    current: int


@dataclass(frozen=True)
class DailyQuest:
    id: str
    title: str
    description: str
    type: str
    difficulty: str
    xp_reward: int
    requirement: QuestRequirement
    completed: bool
    progress: float
    expires_at: datetime


DAILY_QUESTS: tuple[QuestTemplate, ...] = (
    QuestTemplate(
        id="session-30min",
        title="Complete 30 minutes of focus sessions",
        description="Stay focused for a total of 30 minutes today",
        difficulty="easy", xp_reward=20,
        requirement_type="session", target=30, metric="minutes",
    ),
    QuestTemplate(
        id="three-sessions",
        title="Complete 3 focus sessions",
        description="Complete at least 3 separate focus sessions today",
        difficulty="medium", xp_reward=35,
        requirement_type="sessions_count", target=3, metric="sessions",
    ),
    QuestTemplate(
        id="xp-goal",
        title="Earn 100 XP today",
        description="Accumulate 100 XP through various activities",
        difficulty="hard", xp_reward=25,
        requirement_type="xp", target=100, metric="xp",
    ),
    QuestTemplate(
        id="maintain-streak",
        title="Maintain your streak",
        description="Complete at least one session to keep your streak alive",
        difficulty="easy", xp_reward=15,
        requirement_type="streak", target=1, metric="sessions",
    ),
)


def end_of_day(now: datetime) -> datetime:
    return datetime.combine(now.date(), time.max)


def start_of_day(now: datetime) -> datetime:
    return datetime.combine(now.date(), time.min)


def day_key(now: datetime) -> str:
    return now.date().isoformat()


def quest_progress(current: int, target: int) -> float:
    """Percentage toward *target*, capped at 100."""
    if target <= 0:
        return 100.0
    return min(100.0, current / target * 100)


def build_daily_quests(
    streak: int, today: TodayAggregate, now: datetime,
) -> list[DailyQuest]:
    """Materialise ``DAILY_QUESTS`` against today's figures."""
    expires_at = end_of_day(now)
    quests: list[DailyQuest] = []
    for template in DAILY_QUESTS:
        current = getattr(today, template.metric)
        completed = current >= template.target
        if template.requirement_type == "streak":
            # Only counts when there is a streak to keep alive.
            completed = completed and streak > 0
        quests.append(DailyQuest(
            id=template.id,
            title=template.title,
            description=template.description,
            type="daily",
            difficulty=template.difficulty,
            xp_reward=template.xp_reward,
            requirement=QuestRequirement(
                type=template.requirement_type,
                target=template.target,
                current=current,
            ),
            completed=completed,
            progress=quest_progress(current, template.target),
            expires_at=expires_at,
        ))
    return quests
