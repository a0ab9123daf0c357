"""Tests for the error hierarchy."""

import logging

import pytest

from lockin.errors import (
    AlreadyCompletedError, LockInError, NotFoundError, StoreError,
)


class TestErrors:

    def test_carries_user_and_operation(self):
        err = NotFoundError("User not found", user_id="u", operation="award_xp")
        assert str(err) == "User not found"
        assert (err.message, err.user_id, err.operation) == (
            "User not found", "u", "award_xp",
        )

    @pytest.mark.parametrize("cls", [NotFoundError, AlreadyCompletedError, StoreError])
    def test_all_derive_from_base(self, cls):
        assert issubclass(cls, LockInError)

    @pytest.mark.parametrize("cls,level", [
        (NotFoundError, logging.WARNING),
        (AlreadyCompletedError, logging.WARNING),
        (StoreError, logging.ERROR),
    ])
    def test_logged_on_creation(self, cls, level, caplog):
        with caplog.at_level(logging.WARNING, logger="lockin.errors"):
            cls("boom", user_id="u", operation="op")
        assert [r.levelno for r in caplog.records] == [level]
        assert "user=u, operation=op" in caplog.records[0].getMessage()
