"""Account lifecycle: create a progression record, purge everything on delete.

Deletion order
--------------
1. ``quests``  best effort in its own transaction; a failure is logged
   and does not block the rest.
2. ``sessions``, ``xp_transactions``, ``badge_events`` and the user row
   (with its shields, badges, histories and stats) in one transaction.
   Shared collections are deleted in chunks of ``delete_batch_size``
   ids (at most 500 per statement).
"""

from __future__ import annotations

import logging

from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError

from .database.db import get_session
from .database.models import (
    UserProgression, UserStats, FocusSession, XPTransaction, BadgeEvent, Quest,
)
from .errors import NotFoundError, StoreError
from .gamification.leveling import level_from_xp
from .settings import Settings, load_settings

logger = logging.getLogger(__name__)


class AccountManager:
    """Creates and erases per-user progression records."""

    def __init__(self, settings: Settings | None = None) -> None:
        self._settings = settings or load_settings()

    def create_user(self, user_id: str) -> bool:
        """Create the user's progression record if it doesn't exist.

        Returns ``True`` when a record was created.
        """
        try:
            with get_session() as db:
                if db.get(UserProgression, user_id) is not None:
                    return False
                info = level_from_xp(0)
                user = UserProgression(
                    id=user_id,
                    total_xp=0,
                    level=info.level,
                    title=info.title,
                    title_emoji=info.title_emoji,
                    xp_to_next_level=info.xp_to_next_level,
                    streak=0,
                    longest_streak=0,
                )
                user.stats = UserStats(user_id=user_id)
                db.add(user)
        except SQLAlchemyError as exc:
            raise StoreError(
                f"create_user failed: {exc}",
                user_id=user_id, operation="create_user",
            ) from exc
        logger.info(f"Created progression record for user {user_id}")
        return True

    def delete_user(self, user_id: str) -> dict[str, int]:
        """Erase every record that references *user_id*.

        Returns the number of rows deleted per collection.
        """
        with get_session() as db:
            if db.get(UserProgression, user_id) is None:
                raise NotFoundError(
                    "User not found", user_id=user_id, operation="delete_user",
                )

        logger.info(f"Starting account deletion for user {user_id}")
        counts = {"quests": self._delete_quests(user_id)}

        try:
            with get_session() as db:
                for label, model in (
                    ("sessions", FocusSession),
                    ("xp_transactions", XPTransaction),
                    ("badge_events", BadgeEvent),
                ):
                    counts[label] = self._delete_in_batches(db, model, user_id)
                    logger.info(f"Deleted {counts[label]} {label} for user {user_id}")

                user = db.get(UserProgression, user_id)
                db.delete(user)
                counts["users"] = 1
        except SQLAlchemyError as exc:
            raise StoreError(
                f"delete_user failed: {exc}",
                user_id=user_id, operation="delete_user",
            ) from exc

        logger.info(f"Account deletion completed for user {user_id}: {counts}")
        return counts

    # ── internal ────────────────────────────────────────────────────

    def _delete_quests(self, user_id: str) -> int:
        try:
            with get_session() as db:
                count = self._delete_in_batches(db, Quest, user_id)
        except SQLAlchemyError as exc:
            logger.warning(f"Quest cleanup for user {user_id} failed, continuing: {exc}")
            return 0
        logger.info(f"Deleted {count} quests for user {user_id}")
        return count

    def _delete_in_batches(self, db, model, user_id: str) -> int:
        ids = db.scalars(select(model.id).where(model.user_id == user_id)).all()
        size = self._settings.delete_batch_size
        for start in range(0, len(ids), size):
            chunk = ids[start:start + size]
            db.execute(
                delete(model).where(model.id.in_(chunk)),
                execution_options={"synchronize_session": False},
            )
        return len(ids)
