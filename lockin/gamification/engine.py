"""Reward engine for Lock In: the core progression loop.

Session XP
----------
``floor(minutes * 2 * streak_multiplier(streak))`` using the streak as it
stood *before* the session.  The first session of a calendar day also
extends the streak by one.

Award Pipeline
--------------
Every XP grant goes through one path: bump ``total_xp``, write one
``xp_history`` row and one ``xp_transactions`` row, refresh the cached
level fields, record level-up history and rewards, then check the
shield rule.  Badge checks run afterwards as a bounded settle loop:
each pass awards every newly qualifying badge (whose XP may level the
user up again) until a pass finds nothing or ``max_settle_passes`` is
reached.

Transactions
------------
Each public method is one unit of work.  Everything it touches commits
together or not at all; a failure leaves the user exactly as before.
Retrying a failed ``record_session`` is therefore safe, retrying a
*successful* one double-counts.

Counters (``total_xp``, streak, lifetime stats) are written as SQL
increments (``total_xp = total_xp + n``) and read back after a flush,
so an award committed by another device in the meantime is added to,
never overwritten.  Only the level and badge recompute reads a snapshot.

Signals
-------
Emitted only after the unit of work commits:

* **xp_awarded(data)**      user_id, amount, source, total_xp, level
* **level_up(data)**        user_id, old_level, new_level, new_title,
                            title_emoji, unlocked_rewards
* **badge_earned(data)**    user_id, badge (BadgeDef)
* **shield_earned(data)**   user_id, shield (ShieldDef)
* **quest_completed(data)** user_id, quest_id, xp_awarded
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from contextlib import contextmanager
from datetime import datetime, timedelta

from PyQt6.QtCore import QObject, pyqtSignal
from sqlalchemy import case, func, select
from sqlalchemy.exc import SQLAlchemyError

from ..database.db import get_session
from ..database.models import (
    Mood, UserProgression, UserStats, StreakShield, EarnedBadge,
    DailyQuestCompletion, XPHistoryEntry, LevelHistoryEntry, UnlockedReward,
    FocusSession, XPTransaction, BadgeEvent, Quest,
)
from ..errors import NotFoundError, AlreadyCompletedError, StoreError
from ..settings import Settings, load_settings
from .badges import BadgeDef, BADGES, evaluate_badges, badge_progress
from .leveling import level_from_xp
from .quests import (
    DailyQuest, TodayAggregate, build_daily_quests, day_key, start_of_day,
)
from .rewards import level_rewards, next_reward
from .streaks import session_xp, shield_earned, streak_multiplier

logger = logging.getLogger(__name__)

# Counters raised by behavioural check-ins rather than by sessions.
BEHAVIOR_STATS = frozenset({
    "total_resists",
    "phone_free_meals",
    "phone_free_social",
    "phone_free_outdoor",
    "sleep_streak",
    "perfect_days",
    "late_night_free_streak",
    "apps_deleted",
    "community_helps",
})

QUEST_DIFFICULTIES = ("easy", "medium", "hard")

_STAT_COLUMNS = tuple(
    c.key for c in UserStats.__table__.columns if c.key != "user_id"
)


def _increment(obj, column, amount=1) -> None:
    """Queue ``column = column + amount`` as SQL, applied against the live row."""
    setattr(obj, column.key, column + amount)


def _raise_to(obj, column, value) -> None:
    """Queue ``column = max(column, value)`` as SQL."""
    setattr(obj, column.key, case((column < value, value), else_=column))


class RewardEngine(QObject):
    """Awards XP, levels, streaks, shields, badges and quests.

    *clock* returns the current local time as a naive ``datetime``; it
    defines "today" for streaks and quests.
    """

    xp_awarded = pyqtSignal(object)
    level_up = pyqtSignal(object)
    badge_earned = pyqtSignal(object)
    shield_earned = pyqtSignal(object)
    quest_completed = pyqtSignal(object)

    def __init__(
        self,
        parent: QObject | None = None,
        *,
        clock: Callable[[], datetime] | None = None,
        settings: Settings | None = None,
    ) -> None:
        super().__init__(parent)
        self._clock = clock or datetime.now
        self._settings = settings or load_settings()
        self._pending: list[tuple[object, dict]] = []

    # ══════════════════════════════════════════════════════════════════
    #  SESSIONS
    # ══════════════════════════════════════════════════════════════════

    def record_session(self, user_id: str, duration_minutes: int) -> dict:
        """Count a completed focus session and award its XP.

        Returns ``xp_awarded`` (session XP only), ``badges_earned``,
        ``session_id``, ``leveled_up``, ``new_level``, ``shield_earned``
        (the first shield, ``None`` when none) and ``shields_earned`` (every
        shield handed out, including those from badge XP).
        """
        if duration_minutes <= 0:
            raise ValueError(f"duration_minutes must be positive, got {duration_minutes}")

        with self._unit_of_work("record_session", user_id) as db:
            user = self._load_user(db, user_id, "record_session")
            now = self._clock()
            start_level = level_from_xp(user.total_xp).level
            today = self._today(db, user_id, now)

            xp = session_xp(duration_minutes, user.streak, self._settings.xp_per_minute)

            # ── 1. streak: first session of the day extends it ───────
            if today.sessions == 0:
                self._apply_streak(user, True, now)

            # ── 2. lifetime counters ─────────────────────────────────
            stats = user.stats
            _increment(stats, UserStats.total_sessions)
            _increment(stats, UserStats.total_minutes, duration_minutes)
            _raise_to(stats, UserStats.longest_session, duration_minutes)
            _raise_to(stats, UserStats.max_sessions_per_day, today.sessions + 1)

            # ── 3. session document ──────────────────────────────────
            session = FocusSession(
                user_id=user_id,
                duration_minutes=duration_minutes,
                mood=Mood.NONE.value,
                timestamp=now,
                xp_earned=xp,
            )
            db.add(session)
            db.flush()

            # ── 4. XP, then badges ───────────────────────────────────
            award = self._award_xp(
                db, user, xp, "focus_session",
                {"duration": duration_minutes, "mood": Mood.NONE.value},
            )
            badges = self._settle_badges(db, user, now)

            shields = self._queued_shields()
            logger.info(
                f"Recorded {duration_minutes}-min session for user {user_id}: "
                f"+{xp} XP (streak {user.streak}), {len(badges)} badge(s)"
            )
            return {
                "xp_awarded": award["xp_awarded"],
                "badges_earned": badges,
                "session_id": session.id,
                "leveled_up": user.level > start_level,
                "new_level": user.level,
                "shield_earned": shields[0] if shields else None,
                "shields_earned": shields,
            }

    def update_session(self, user_id: str, session_id: int, mood: Mood | str) -> bool:
        """Attach a mood rating to a recorded session.

        Best effort: a missing document or a store failure is logged and
        reported as ``False``; it never reaches the session flow.  Later
        calls overwrite earlier ones.
        """
        mood_value = Mood(mood).value
        try:
            with self._unit_of_work("update_session", user_id) as db:
                self._load_user(db, user_id, "update_session")
                session = db.get(FocusSession, session_id)
                if session is None or session.user_id != user_id:
                    raise NotFoundError(
                        f"Session {session_id} not found",
                        user_id=user_id, operation="update_session",
                    )
                session.mood = mood_value
        except (NotFoundError, StoreError) as exc:
            logger.warning(f"Mood update for session {session_id} skipped: {exc}")
            return False
        return True

    # ══════════════════════════════════════════════════════════════════
    #  XP
    # ══════════════════════════════════════════════════════════════════

    def award_xp(
        self,
        user_id: str,
        amount: int,
        source: str,
        metadata: dict | None = None,
    ) -> dict:
        """Grant *amount* XP from *source*.

        Returns ``xp_awarded`` and ``leveled_up``; ``new_level`` and
        ``unlocked_rewards`` on level-up, ``badges_earned`` when the
        level-up badge check found any, ``shield_earned`` and
        ``shields_earned`` when shields were handed out.
        """
        if amount < 0:
            raise ValueError(f"amount must be non-negative, got {amount}")

        with self._unit_of_work("award_xp", user_id) as db:
            user = self._load_user(db, user_id, "award_xp")
            result = self._award_xp(db, user, amount, source, metadata)
            if result["leveled_up"]:
                badges = self._settle_badges(db, user, self._clock())
                if badges:
                    result["badges_earned"] = badges
                result["new_level"] = user.level
            shields = self._queued_shields()
            if shields:
                result["shield_earned"] = shields[0]
                result["shields_earned"] = shields
            return result

    # ══════════════════════════════════════════════════════════════════
    #  STREAKS
    # ══════════════════════════════════════════════════════════════════

    def update_streak(self, user_id: str, should_increment: bool) -> dict:
        """Extend the streak by one (or leave it), stamp it, check badges."""
        with self._unit_of_work("update_streak", user_id) as db:
            user = self._load_user(db, user_id, "update_streak")
            now = self._clock()
            self._apply_streak(user, should_increment, now)
            badges = self._settle_badges(db, user, now)
            return {"new_streak": user.streak, "badges_earned": badges}

    def expire_lapsed_streak(self, user_id: str) -> bool:
        """Reset the streak to 0 if no streak update happened yesterday or today.

        Returns ``True`` when a streak was reset.
        """
        with self._unit_of_work("expire_lapsed_streak", user_id) as db:
            user = self._load_user(db, user_id, "expire_lapsed_streak")
            return self._expire_streak(user, self._clock())

    def sweep_lapsed_streaks(self) -> list[str]:
        """Run :meth:`expire_lapsed_streak` for every user; return reset ids."""
        with self._unit_of_work("sweep_lapsed_streaks", None) as db:
            now = self._clock()
            users = db.scalars(
                select(UserProgression).where(UserProgression.streak > 0)
            ).all()
            return [u.id for u in users if self._expire_streak(u, now)]

    # ══════════════════════════════════════════════════════════════════
    #  BADGES & STATS
    # ══════════════════════════════════════════════════════════════════

    def check_badge_progress(self, user_id: str) -> list[BadgeDef]:
        """Award every badge the user now qualifies for.  Idempotent."""
        with self._unit_of_work("check_badge_progress", user_id) as db:
            user = self._load_user(db, user_id, "check_badge_progress")
            return self._settle_badges(db, user, self._clock())

    def increment_stat(self, user_id: str, stat: str, amount: int = 1) -> dict:
        """Raise a behavioural counter (resists, phone-free meals, ...)."""
        if stat not in BEHAVIOR_STATS:
            raise ValueError(f"Unknown behavioural stat: {stat!r}")
        if amount <= 0:
            raise ValueError(f"amount must be positive, got {amount}")

        with self._unit_of_work("increment_stat", user_id) as db:
            user = self._load_user(db, user_id, "increment_stat")
            _increment(user.stats, getattr(UserStats, stat), amount)
            badges = self._settle_badges(db, user, self._clock())
            return {
                "stat": stat,
                "value": getattr(user.stats, stat),
                "badges_earned": badges,
            }

    # ══════════════════════════════════════════════════════════════════
    #  QUESTS
    # ══════════════════════════════════════════════════════════════════

    def generate_daily_quests(self, user_id: str) -> list[DailyQuest]:
        """Today's four quests with live progress.  Writes nothing."""
        with self._unit_of_work("generate_daily_quests", user_id) as db:
            user = self._load_user(db, user_id, "generate_daily_quests")
            now = self._clock()
            return build_daily_quests(user.streak, self._today(db, user_id, now), now)

    def check_daily_quest_completion(self, user_id: str, quest_id: str) -> dict:
        """Pay out a finished daily quest, at most once per day.

        An unfinished or unknown quest returns ``completed=False``.  A
        quest already paid today returns ``already_awarded=True`` with
        ``xp_awarded=0``.
        """
        with self._unit_of_work("check_daily_quest_completion", user_id) as db:
            user = self._load_user(db, user_id, "check_daily_quest_completion")
            now = self._clock()
            quests = build_daily_quests(user.streak, self._today(db, user_id, now), now)
            quest = next((q for q in quests if q.id == quest_id), None)
            if quest is None or not quest.completed:
                return {"completed": False, "xp_awarded": 0}

            key = day_key(now)
            done_today = {
                c.quest_id for c in user.daily_quest_completions
                if c.day_key == key
            }
            if quest_id in done_today:
                logger.info(
                    f"Daily quest {quest_id} already completed today by "
                    f"user {user_id}, skipping XP"
                )
                return {"completed": True, "xp_awarded": 0, "already_awarded": True}

            user.daily_quest_completions.append(DailyQuestCompletion(
                day_key=key, quest_id=quest_id, completed_at=now,
            ))
            stats = user.stats
            _increment(stats, UserStats.quests_completed)
            _increment(stats, UserStats.daily_quest_streak)
            _raise_to(stats, UserStats.max_quests_per_day, len(done_today) + 1)

            award = self._award_xp(
                db, user, quest.xp_reward, f"daily_quest:{quest_id}",
                {"quest_id": quest_id, "quest_title": quest.title},
            )
            badges = self._settle_badges(db, user, now)
            self._pending.append((self.quest_completed, {
                "user_id": user_id,
                "quest_id": quest_id,
                "xp_awarded": award["xp_awarded"],
            }))
            return {
                "completed": True,
                "xp_awarded": award["xp_awarded"],
                "already_awarded": False,
                "quest": quest,
                "leveled_up": award["leveled_up"],
                "badges_earned": badges,
            }

    def create_quest(
        self,
        user_id: str,
        title: str,
        xp_reward: int,
        difficulty: str = "easy",
        description: str = "",
    ) -> int:
        """Assign a structured quest to the user; returns its id."""
        if difficulty not in QUEST_DIFFICULTIES:
            raise ValueError(f"difficulty must be one of {QUEST_DIFFICULTIES}")
        if xp_reward < 0:
            raise ValueError(f"xp_reward must be non-negative, got {xp_reward}")

        with self._unit_of_work("create_quest", user_id) as db:
            self._load_user(db, user_id, "create_quest")
            quest = Quest(
                user_id=user_id,
                title=title,
                description=description,
                difficulty=difficulty,
                xp_reward=xp_reward,
                completed=False,
                created_at=self._clock(),
            )
            db.add(quest)
            db.flush()
            return quest.id

    def complete_quest(self, user_id: str, quest_id: int) -> dict:
        """Complete a structured quest and award its XP.

        Raises ``NotFoundError`` for an unknown quest and
        ``AlreadyCompletedError`` for a finished one.
        """
        with self._unit_of_work("complete_quest", user_id) as db:
            user = self._load_user(db, user_id, "complete_quest")
            quest = db.get(Quest, quest_id)
            if quest is None or quest.user_id != user_id:
                raise NotFoundError(
                    f"Quest {quest_id} not found",
                    user_id=user_id, operation="complete_quest",
                )
            if quest.completed:
                raise AlreadyCompletedError(
                    f"Quest {quest_id} already completed",
                    user_id=user_id, operation="complete_quest",
                )

            now = self._clock()
            quest.completed = True
            quest.completed_at = now
            _increment(user.stats, UserStats.quests_completed)

            award = self._award_xp(
                db, user, quest.xp_reward, f"quest:{quest.difficulty}",
                {"quest_id": quest.id, "quest_title": quest.title},
            )
            badges = self._settle_badges(db, user, now)
            self._pending.append((self.quest_completed, {
                "user_id": user_id,
                "quest_id": quest.id,
                "xp_awarded": award["xp_awarded"],
            }))
            return {
                "xp_awarded": award["xp_awarded"],
                "quest": quest,
                "leveled_up": award["leveled_up"],
                "badges_earned": badges,
            }

    # ══════════════════════════════════════════════════════════════════
    #  READ MODEL
    # ══════════════════════════════════════════════════════════════════

    def get_progress(self, user_id: str) -> dict:
        """Snapshot of everything a progress screen needs."""
        with self._unit_of_work("get_progress", user_id) as db:
            user = self._load_user(db, user_id, "get_progress")
            now = self._clock()
            info = level_from_xp(user.total_xp)
            stats = self._stat_snapshot(user)
            held = {b.badge_id for b in user.badges}
            closest = sorted(
                (
                    (badge, badge_progress(badge, stats))
                    for badge in BADGES if badge.id not in held
                ),
                key=lambda pair: pair[1]["percentage"],
                reverse=True,
            )
            return {
                "user_id": user_id,
                "total_xp": user.total_xp,
                "level": info.level,
                "title": info.title,
                "title_emoji": info.title_emoji,
                "current_xp": info.current_xp,
                "xp_to_next_level": info.xp_to_next_level,
                "streak": user.streak,
                "longest_streak": user.longest_streak,
                "multiplier": streak_multiplier(user.streak),
                "shields": [s.milestone for s in user.shields],
                "badges": [b.badge_id for b in user.badges],
                "closest_badges": closest[:3],
                "next_reward": next_reward(info.level),
                "today": self._today(db, user_id, now),
                "stats": stats,
            }

    # ══════════════════════════════════════════════════════════════════
    #  INTERNAL — unit of work
    # ══════════════════════════════════════════════════════════════════

    @contextmanager
    def _unit_of_work(self, operation: str, user_id: str | None):
        """One transaction; queued signals fire only after it commits."""
        self._pending = []
        try:
            with get_session() as db:
                yield db
        except SQLAlchemyError as exc:
            self._pending = []
            raise StoreError(
                f"{operation} failed: {exc}",
                user_id=user_id, operation=operation,
            ) from exc
        except Exception:
            self._pending = []
            raise

        pending, self._pending = self._pending, []
        for signal, payload in pending:
            signal.emit(payload)

    def _load_user(self, db, user_id: str, operation: str) -> UserProgression:
        user = db.get(UserProgression, user_id)
        if user is None:
            raise NotFoundError(
                "User not found", user_id=user_id, operation=operation,
            )
        if user.stats is None:
            user.stats = UserStats(user_id=user_id)
            db.flush()
        return user

    def _today(self, db, user_id: str, now: datetime) -> TodayAggregate:
        """Today's session count, minutes and XP, from timestamped rows."""
        midnight = start_of_day(now)
        sessions, minutes = db.execute(
            select(
                func.count(FocusSession.id),
                func.coalesce(func.sum(FocusSession.duration_minutes), 0),
            ).where(
                FocusSession.user_id == user_id,
                FocusSession.timestamp >= midnight,
            )
        ).one()
        xp = db.scalar(
            select(func.coalesce(func.sum(XPTransaction.amount), 0)).where(
                XPTransaction.user_id == user_id,
                XPTransaction.timestamp >= midnight,
            )
        )
        return TodayAggregate(minutes=int(minutes), sessions=int(sessions), xp=int(xp))

    def _stat_snapshot(self, user: UserProgression) -> dict[str, int]:
        snapshot = {key: getattr(user.stats, key) for key in _STAT_COLUMNS}
        snapshot["streak"] = user.streak
        return snapshot

    # ══════════════════════════════════════════════════════════════════
    #  INTERNAL — award pipeline
    # ══════════════════════════════════════════════════════════════════

    def _award_xp(
        self,
        db,
        user: UserProgression,
        amount: int,
        source: str,
        details: dict | None = None,
    ) -> dict:
        now = self._clock()
        details = details or None

        # ── apply + audit ────────────────────────────────────────────
        _increment(user, UserProgression.total_xp, amount)
        db.add(XPHistoryEntry(
            user_id=user.id, amount=amount, source=source,
            details=details, timestamp=now,
        ))
        db.add(XPTransaction(
            user_id=user.id, amount=amount, source=source,
            details=details, timestamp=now,
        ))

        # ── refresh cached level fields ──────────────────────────────
        # flush applies the increment and expires the attribute, so the
        # reads below see other writers' committed awards too
        db.flush()
        old_level = level_from_xp(user.total_xp - amount).level
        info = level_from_xp(user.total_xp)
        user.level = info.level
        user.title = info.title
        user.title_emoji = info.title_emoji
        user.xp_to_next_level = info.xp_to_next_level

        result: dict = {"xp_awarded": amount, "leveled_up": False}

        if info.level > old_level:
            db.add(LevelHistoryEntry(
                user_id=user.id, level=info.level, achieved_at=now,
            ))
            unlocked: list[str] = []
            for level in range(old_level + 1, info.level + 1):
                for key in level_rewards(level):
                    db.add(UnlockedReward(
                        user_id=user.id, reward=key, level=level, unlocked_at=now,
                    ))
                    unlocked.append(key)

            result.update(
                leveled_up=True, new_level=info.level, unlocked_rewards=unlocked,
            )
            logger.info(
                f"User {user.id} leveled up from {old_level} to {info.level} "
                f"({info.title}), unlocked {unlocked or 'nothing'}"
            )
            self._pending.append((self.level_up, {
                "user_id": user.id,
                "old_level": old_level,
                "new_level": info.level,
                "new_title": info.title,
                "title_emoji": info.title_emoji,
                "unlocked_rewards": unlocked,
            }))

        # ── shield rule ──────────────────────────────────────────────
        shield = shield_earned(user.streak, [s.milestone for s in user.shields])
        if shield is not None:
            user.shields.append(StreakShield(milestone=shield.milestone, earned_at=now))
            logger.info(f"User {user.id} earned {shield.name} at streak {user.streak}")
            self._pending.append((self.shield_earned, {
                "user_id": user.id, "shield": shield,
            }))

        logger.info(
            f"Awarded {amount} XP to user {user.id} for {source}. "
            f"Total: {user.total_xp} XP, Level: {user.level}"
        )
        self._pending.append((self.xp_awarded, {
            "user_id": user.id,
            "amount": amount,
            "source": source,
            "total_xp": user.total_xp,
            "level": user.level,
        }))
        return result

    def _settle_badges(self, db, user: UserProgression, now: datetime) -> list[BadgeDef]:
        """Award qualifying badges until none are left or the pass cap hits."""
        earned: list[BadgeDef] = []
        limit = self._settings.max_settle_passes
        db.flush()
        for _ in range(limit):
            new = self._qualifying_badges(user)
            if not new:
                break
            for badge in new:
                user.badges.append(EarnedBadge(badge_id=badge.id, unlocked_at=now))
                db.add(BadgeEvent(user_id=user.id, badge_id=badge.id, timestamp=now))
                self._award_xp(
                    db, user, badge.xp_reward, f"badge:{badge.id}",
                    {"badge_id": badge.id},
                )
                earned.append(badge)
                logger.info(
                    f"User {user.id} unlocked badge: {badge.id} "
                    f"({badge.name}) +{badge.xp_reward} XP"
                )
                self._pending.append((self.badge_earned, {
                    "user_id": user.id, "badge": badge,
                }))
        else:
            if self._qualifying_badges(user):
                logger.warning(
                    f"Badge settling for user {user.id} stopped after "
                    f"{limit} passes with badges still pending"
                )
        return earned

    def _qualifying_badges(self, user: UserProgression) -> list[BadgeDef]:
        return evaluate_badges(
            self._stat_snapshot(user), [b.badge_id for b in user.badges],
        )

    def _queued_shields(self) -> list:
        """Shields handed out so far in the current unit of work."""
        return [
            payload["shield"] for signal, payload in self._pending
            if signal is self.shield_earned
        ]

    # ══════════════════════════════════════════════════════════════════
    #  INTERNAL — streak rules
    # ══════════════════════════════════════════════════════════════════

    def _apply_streak(self, user: UserProgression, should_increment: bool, now: datetime) -> None:
        if should_increment:
            if user.streak == 0 and user.longest_streak > 0:
                _increment(user.stats, UserStats.comeback_streaks)
            _raise_to(user, UserProgression.longest_streak, UserProgression.streak + 1)
            _increment(user, UserProgression.streak)
        user.streak_last_update = now

    def _expire_streak(self, user: UserProgression, now: datetime) -> bool:
        last = user.streak_last_update
        cutoff = start_of_day(now) - timedelta(days=1)
        if user.streak <= 0 or last is None or last >= cutoff:
            return False
        logger.info(
            f"User {user.id} streak lapsed at {user.streak} days "
            f"(last update {last:%Y-%m-%d})"
        )
        user.streak = 0
        user.streak_last_update = now
        return True
