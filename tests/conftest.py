"""Shared pytest fixtures for Lock In tests."""

import sys
from datetime import datetime

import pytest

from PyQt6.QtCore import QCoreApplication

from lockin.accounts import AccountManager
from lockin.database.db import configure_engine, init_db
from lockin.gamification.engine import RewardEngine
from lockin.settings import Settings

from helpers import FixedClock


@pytest.fixture(scope="session")
def qapp():
    """A single QCoreApplication instance shared across the entire test run."""
    app = QCoreApplication.instance() or QCoreApplication(sys.argv)
    yield app


@pytest.fixture(autouse=True)
def test_db():
    """Point every test at a fresh in-memory SQLite database."""
    configure_engine("sqlite:///:memory:")
    init_db()
    yield


@pytest.fixture
def settings():
    """Default settings, never read from the developer's home directory."""
    return Settings(database_url="sqlite:///:memory:")


@pytest.fixture
def clock():
    """Tuesday 10 March 2026, 09:00 local time."""
    return FixedClock(datetime(2026, 3, 10, 9, 0))


@pytest.fixture
def engine(qapp, clock, settings):
    return RewardEngine(parent=None, clock=clock, settings=settings)


@pytest.fixture
def accounts(settings):
    return AccountManager(settings=settings)


@pytest.fixture
def user_id(accounts):
    """A freshly created user with zero progress."""
    accounts.create_user("user-1")
    return "user-1"
