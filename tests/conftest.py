# tests/conftest.py

from __future__ import annotations

from pathlib import Path

import pytest
import pytest_asyncio

from taskmaster_bot.bot.engine import ConversationEngine
from taskmaster_bot.core.session import SessionStore
from taskmaster_bot.services.alerts import AlertDispatcher
from taskmaster_bot.storage.alert_repo import AlertRepository
from taskmaster_bot.storage.database import Database
from taskmaster_bot.storage.issue_repo import IssueRepository
from taskmaster_bot.storage.models import User
from taskmaster_bot.storage.user_repo import UserRepository

from .fakes import FakeMessenger

MANAGER_CHAT = "1000"
ENGINEER_CHAT = "2000"
OTHER_ENGINEER_CHAT = "7000"
STRANGER_CHAT = "9999"


@pytest_asyncio.fixture()
async def db(tmp_path: Path):
    """Real SQLite database per test; repository behaviour is part of what we test."""
    database = Database(str(tmp_path / "taskmaster.sqlite3"))
    await database.initialize()
    yield database
    await database.close()


@pytest.fixture()
def users(db: Database) -> UserRepository:
    return UserRepository(db)


@pytest.fixture()
def issues(db: Database) -> IssueRepository:
    return IssueRepository(db)


@pytest.fixture()
def alerts(db: Database) -> AlertRepository:
    return AlertRepository(db)


@pytest.fixture()
def messenger() -> FakeMessenger:
    return FakeMessenger()


@pytest.fixture()
def sessions() -> SessionStore:
    return SessionStore()


@pytest_asyncio.fixture()
async def team(users: UserRepository) -> dict[str, User]:
    """
    Manager (id 5), engineers with ids 2 and 7, and an engineer without a
    Telegram id (id 8). Chat id == external id for every user.
    """
    return {
        "manager": await users.create(
            User(id=5, name="Paula PM", role="Project Manager", external_id=MANAGER_CHAT)
        ),
        "engineer": await users.create(
            User(id=2, name="Eli Engineer", role="Engineer", external_id=ENGINEER_CHAT)
        ),
        "other": await users.create(
            User(id=7, name="Sam Seven", role="ENGINEER", external_id=OTHER_ENGINEER_CHAT)
        ),
        "unreachable": await users.create(User(id=8, name="No Phone", role="Engineer")),
    }


@pytest.fixture()
def engine(
    messenger: FakeMessenger,
    sessions: SessionStore,
    users: UserRepository,
    issues: IssueRepository,
) -> ConversationEngine:
    return ConversationEngine(sender=messenger, sessions=sessions, users=users, issues=issues)


@pytest.fixture()
def dispatcher(alerts: AlertRepository, users: UserRepository, messenger: FakeMessenger) -> AlertDispatcher:
    return AlertDispatcher(alerts, users, messenger)
