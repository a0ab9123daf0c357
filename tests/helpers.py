"""Shared test helpers for Lock In."""

from datetime import timedelta

from lockin.database.db import get_session
from lockin.database.models import UserProgression


class SignalCollector:
    """Utility to capture pyqtSignal emissions into a list."""

    def __init__(self):
        self.items: list = []

    def slot(self, *args):
        self.items.append(args if len(args) > 1 else args[0] if args else None)

    def __call__(self, *args):
        self.slot(*args)

    def __len__(self):
        return len(self.items)

    def __getitem__(self, idx):
        return self.items[idx]

    @property
    def last(self):
        return self.items[-1] if self.items else None

    def clear(self):
        self.items.clear()


class FixedClock:
    """Callable clock that only moves when told to."""

    def __init__(self, now):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, **kwargs):
        self.now += timedelta(**kwargs)


def update_user(user_id: str, **fields) -> None:
    """Overwrite columns on the progression row directly."""
    with get_session() as db:
        user = db.get(UserProgression, user_id)
        for key, value in fields.items():
            setattr(user, key, value)


def update_stats(user_id: str, **fields) -> None:
    with get_session() as db:
        user = db.get(UserProgression, user_id)
        for key, value in fields.items():
            setattr(user.stats, key, value)


def load_user(user_id: str) -> UserProgression:
    """Fetch the progression row with its collections loaded."""
    with get_session() as db:
        user = db.get(UserProgression, user_id)
        if user is not None:
            # touch lazy collections while the session is open
            _ = (
                user.stats, list(user.badges), list(user.shields),
                list(user.xp_history), list(user.level_history),
                list(user.unlocked_rewards), list(user.daily_quest_completions),
            )
        return user
