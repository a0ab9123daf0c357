"""Tests for account creation and full deletion."""

import pytest
from sqlalchemy.exc import OperationalError

from lockin.accounts import AccountManager
from lockin.database.db import get_session
from lockin.database.models import (
    BadgeEvent, DailyQuestCompletion, EarnedBadge, FocusSession, Quest,
    StreakShield, UserProgression, UserStats, XPHistoryEntry, XPTransaction,
)
from lockin.errors import NotFoundError
from lockin.settings import Settings

from helpers import load_user, update_user

CHILD_TABLES = (
    UserStats, StreakShield, EarnedBadge, XPHistoryEntry, DailyQuestCompletion,
)
SHARED_TABLES = (FocusSession, XPTransaction, BadgeEvent, Quest)


def _count(model, user_id):
    with get_session() as db:
        return db.query(model).filter_by(user_id=user_id).count()


def _populate(engine, user_id, clock, sessions=3):
    update_user(user_id, streak=6, longest_streak=6)
    for _ in range(sessions):
        engine.record_session(user_id, 30)
        clock.advance(minutes=45)
    engine.check_daily_quest_completion(user_id, "session-30min")
    engine.create_quest(user_id, "Read", 10)
    engine.create_quest(user_id, "Walk", 10)


class TestCreateUser:

    def test_fresh_record(self, accounts):
        assert accounts.create_user("alice") is True
        user = load_user("alice")
        assert user.total_xp == 0
        assert user.level == 1
        assert user.title == "Wanderer"
        assert user.title_emoji == "🌱"
        assert user.xp_to_next_level == 100
        assert user.streak == 0
        assert user.stats.total_sessions == 0

    def test_idempotent(self, accounts):
        assert accounts.create_user("alice") is True
        assert accounts.create_user("alice") is False


class TestDeleteUser:

    def test_purges_everything(self, engine, accounts, user_id, clock):
        _populate(engine, user_id, clock)
        assert _count(FocusSession, user_id) == 3
        assert _count(StreakShield, user_id) == 1
        xp_rows = _count(XPTransaction, user_id)

        counts = accounts.delete_user(user_id)

        assert counts["sessions"] == 3
        assert counts["quests"] == 2
        assert counts["users"] == 1
        assert counts["xp_transactions"] == xp_rows
        for model in CHILD_TABLES + SHARED_TABLES:
            assert _count(model, user_id) == 0
        with get_session() as db:
            assert db.get(UserProgression, user_id) is None

    def test_other_users_untouched(self, engine, accounts, user_id, clock):
        accounts.create_user("bob")
        _populate(engine, user_id, clock)
        _populate(engine, "bob", clock)
        before = {m: _count(m, "bob") for m in SHARED_TABLES}

        accounts.delete_user(user_id)

        assert {m: _count(m, "bob") for m in SHARED_TABLES} == before
        assert load_user("bob").stats.total_sessions == 3

    def test_small_batches(self, engine, user_id, clock):
        accounts = AccountManager(
            Settings(database_url="sqlite:///:memory:", delete_batch_size=2),
        )
        for _ in range(5):
            engine.record_session(user_id, 10)
        counts = accounts.delete_user(user_id)
        assert counts["sessions"] == 5
        assert _count(FocusSession, user_id) == 0

    def test_quest_cleanup_failure_does_not_block(
        self, engine, accounts, user_id, clock, monkeypatch,
    ):
        _populate(engine, user_id, clock)
        original = AccountManager._delete_in_batches

        def flaky(self, db, model, uid):
            if model is Quest:
                raise OperationalError("DELETE", {}, Exception("quota exceeded"))
            return original(self, db, model, uid)

        monkeypatch.setattr(AccountManager, "_delete_in_batches", flaky)
        counts = accounts.delete_user(user_id)

        assert counts["quests"] == 0
        assert counts["sessions"] == 3
        assert load_user(user_id) is None
        # the quest documents survive, everything else is gone
        assert _count(Quest, user_id) == 2
        assert _count(FocusSession, user_id) == 0

    def test_unknown_user(self, accounts):
        with pytest.raises(NotFoundError):
            accounts.delete_user("ghost")

    def test_recreate_after_delete(self, engine, accounts, user_id):
        engine.record_session(user_id, 25)
        accounts.delete_user(user_id)
        assert accounts.create_user(user_id) is True
        assert load_user(user_id).total_xp == 0
