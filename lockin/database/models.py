"""SQLAlchemy ORM models for Lock In.

One ``UserProgression`` row per user carries the cached level fields and
streak; lifetime counters live in ``UserStats``.  Append-only sets
(shields, badges, daily quest completions) are child tables with a unique
constraint.  ``sessions``, ``xp_transactions`` and ``badge_events`` are
shared collections filtered by ``user_id``.
"""

from datetime import datetime
from enum import Enum

from sqlalchemy import (
    Column, Integer, String, Boolean, DateTime, ForeignKey, JSON,
    UniqueConstraint,
)
from sqlalchemy.orm import DeclarativeBase, relationship


class Base(DeclarativeBase):
    pass


class Mood(Enum):
    NONE = "none"
    HARD = "hard"
    OKAY = "okay"
    GOOD = "good"
    AMAZING = "amazing"


class UserProgression(Base):
    """The per-user progression document."""

    __tablename__ = "users"

    id = Column(String(128), primary_key=True)
    created_at = Column(DateTime, nullable=False, default=datetime.now)

    total_xp = Column(Integer, nullable=False, default=0)
    level = Column(Integer, nullable=False, default=1)
    title = Column(String(64), nullable=False, default="Wanderer")
    title_emoji = Column(String(16), nullable=False, default="🌱")
    xp_to_next_level = Column(Integer, nullable=False, default=100)

    streak = Column(Integer, nullable=False, default=0)
    longest_streak = Column(Integer, nullable=False, default=0)
    streak_last_update = Column(DateTime, nullable=True)

    stats = relationship(
        "UserStats", uselist=False, back_populates="user",
        cascade="all, delete-orphan",
    )
    shields = relationship(
        "StreakShield", cascade="all, delete-orphan",
        order_by="StreakShield.milestone",
    )
    badges = relationship(
        "EarnedBadge", cascade="all, delete-orphan",
        order_by="EarnedBadge.id",
    )
    xp_history = relationship(
        "XPHistoryEntry", cascade="all, delete-orphan",
        order_by="XPHistoryEntry.id",
    )
    level_history = relationship(
        "LevelHistoryEntry", cascade="all, delete-orphan",
        order_by="LevelHistoryEntry.id",
    )
    unlocked_rewards = relationship(
        "UnlockedReward", cascade="all, delete-orphan",
        order_by="UnlockedReward.id",
    )
    daily_quest_completions = relationship(
        "DailyQuestCompletion", cascade="all, delete-orphan",
    )

    def __repr__(self) -> str:
        return (
            f"<UserProgression id={self.id} level={self.level} "
            f"xp={self.total_xp} streak={self.streak}>"
        )


class UserStats(Base):
    """Lifetime counters read by badge predicates.  All only increase."""

    __tablename__ = "user_stats"

    user_id = Column(String(128), ForeignKey("users.id"), primary_key=True)

    # ── sessions ──────────────────────────────────────────────────────
    total_sessions = Column(Integer, nullable=False, default=0)
    total_minutes = Column(Integer, nullable=False, default=0)
    longest_session = Column(Integer, nullable=False, default=0)
    max_sessions_per_day = Column(Integer, nullable=False, default=0)

    # ── quests ────────────────────────────────────────────────────────
    quests_completed = Column(Integer, nullable=False, default=0)
    daily_quest_streak = Column(Integer, nullable=False, default=0)
    max_quests_per_day = Column(Integer, nullable=False, default=0)

    # ── behavioural ───────────────────────────────────────────────────
    total_resists = Column(Integer, nullable=False, default=0)
    phone_free_meals = Column(Integer, nullable=False, default=0)
    phone_free_social = Column(Integer, nullable=False, default=0)
    phone_free_outdoor = Column(Integer, nullable=False, default=0)
    sleep_streak = Column(Integer, nullable=False, default=0)
    perfect_days = Column(Integer, nullable=False, default=0)
    comeback_streaks = Column(Integer, nullable=False, default=0)
    late_night_free_streak = Column(Integer, nullable=False, default=0)
    apps_deleted = Column(Integer, nullable=False, default=0)
    community_helps = Column(Integer, nullable=False, default=0)

    user = relationship("UserProgression", back_populates="stats")

    def __repr__(self) -> str:
        return (
            f"<UserStats user={self.user_id} sessions={self.total_sessions} "
            f"minutes={self.total_minutes}>"
        )


class StreakShield(Base):
    """A shield token earned at a streak milestone."""

    __tablename__ = "streak_shields"
    __table_args__ = (UniqueConstraint("user_id", "milestone"),)

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(String(128), ForeignKey("users.id"), nullable=False, index=True)
    milestone = Column(Integer, nullable=False)
    earned_at = Column(DateTime, nullable=False, default=datetime.now)


class EarnedBadge(Base):
    __tablename__ = "earned_badges"
    __table_args__ = (UniqueConstraint("user_id", "badge_id"),)

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(String(128), ForeignKey("users.id"), nullable=False, index=True)
    badge_id = Column(String(64), nullable=False)
    unlocked_at = Column(DateTime, nullable=False, default=datetime.now)

    def __repr__(self) -> str:
        return f"<EarnedBadge user={self.user_id} badge={self.badge_id}>"


class DailyQuestCompletion(Base):
    """Guards daily quest XP: one row per (user, day, quest)."""

    __tablename__ = "daily_quest_completions"
    __table_args__ = (UniqueConstraint("user_id", "day_key", "quest_id"),)

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(String(128), ForeignKey("users.id"), nullable=False, index=True)
    day_key = Column(String(10), nullable=False)   # YYYY-MM-DD
    quest_id = Column(String(64), nullable=False)
    completed_at = Column(DateTime, nullable=False, default=datetime.now)


class XPHistoryEntry(Base):
    __tablename__ = "xp_history"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(String(128), ForeignKey("users.id"), nullable=False, index=True)
    amount = Column(Integer, nullable=False)
    source = Column(String(128), nullable=False)
    details = Column(JSON, nullable=True)
    timestamp = Column(DateTime, nullable=False, default=datetime.now)


class LevelHistoryEntry(Base):
    __tablename__ = "level_history"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(String(128), ForeignKey("users.id"), nullable=False, index=True)
    level = Column(Integer, nullable=False)
    achieved_at = Column(DateTime, nullable=False, default=datetime.now)


class UnlockedReward(Base):
    __tablename__ = "unlocked_rewards"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(String(128), ForeignKey("users.id"), nullable=False, index=True)
    reward = Column(String(64), nullable=False)
    level = Column(Integer, nullable=False)
    unlocked_at = Column(DateTime, nullable=False, default=datetime.now)


# ── shared collections ───────────────────────────────────────────────────


class FocusSession(Base):
    """One completed focus session."""

    __tablename__ = "sessions"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(String(128), nullable=False, index=True)
    duration_minutes = Column(Integer, nullable=False)
    mood = Column(String(16), nullable=False, default=Mood.NONE.value)
    timestamp = Column(DateTime, nullable=False, default=datetime.now, index=True)
    xp_earned = Column(Integer, nullable=False, default=0)

    def __repr__(self) -> str:
        return (
            f"<FocusSession id={self.id} user={self.user_id} "
            f"minutes={self.duration_minutes} mood={self.mood}>"
        )


class XPTransaction(Base):
    """Audit log of every XP grant, independent of the user row."""

    __tablename__ = "xp_transactions"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(String(128), nullable=False, index=True)
    amount = Column(Integer, nullable=False)
    source = Column(String(128), nullable=False)
    details = Column(JSON, nullable=True)
    timestamp = Column(DateTime, nullable=False, default=datetime.now, index=True)


class BadgeEvent(Base):
    __tablename__ = "badge_events"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(String(128), nullable=False, index=True)
    badge_id = Column(String(64), nullable=False)
    timestamp = Column(DateTime, nullable=False, default=datetime.now)


class Quest(Base):
    """A structured (non-daily) quest assigned to one user."""

    __tablename__ = "quests"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(String(128), ForeignKey("users.id"), nullable=False, index=True)
    title = Column(String(255), nullable=False)
    description = Column(String(1024), nullable=False, default="")
    difficulty = Column(String(16), nullable=False, default="easy")  # easy | medium | hard
    xp_reward = Column(Integer, nullable=False, default=0)
    completed = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime, nullable=False, default=datetime.now)
    completed_at = Column(DateTime, nullable=True)

    def __repr__(self) -> str:
        return (
            f"<Quest id={self.id} user={self.user_id} "
            f"completed={self.completed}>"
        )
