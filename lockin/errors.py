"""Exception hierarchy for the progression engine.

``NotFoundError`` and ``AlreadyCompletedError`` describe state conflicts the
caller can act on.  ``StoreError`` wraps backend failures so callers do not
need to know about SQLAlchemy.
"""

from __future__ import annotations

import logging

logger = logging.getLogger(__name__)


class LockInError(Exception):
    """Base exception for all engine errors.

    Carries the user and operation it happened in, and logs itself on
    creation so failures are visible even when a caller swallows them.
    """

    log_level = logging.WARNING

    def __init__(
        self,
        message: str,
        user_id: str | None = None,
        operation: str | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.user_id = user_id
        self.operation = operation
        logger.log(
            self.log_level,
            f"{self.__class__.__name__}: {message} "
            f"(user={user_id}, operation={operation})",
        )


class NotFoundError(LockInError):
    """A user, session or quest document does not exist."""


class AlreadyCompletedError(LockInError):
    """A structured quest was already completed."""


class StoreError(LockInError):
    """The backing store failed (connection, constraint, I/O)."""

    log_level = logging.ERROR
