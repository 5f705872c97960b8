# tests/test_repositories.py

from __future__ import annotations

from datetime import datetime, timezone

import pytest

from taskmaster_bot.core.errors import NotFoundError
from taskmaster_bot.core.types import AlertStatus, IssueStatus
from taskmaster_bot.storage.alert_repo import AlertRepository
from taskmaster_bot.storage.issue_repo import IssueRepository
from taskmaster_bot.storage.models import Alert, Issue, User
from taskmaster_bot.storage.user_repo import UserRepository


@pytest.mark.asyncio
async def test_find_by_role_ignores_case_and_blanks(users: UserRepository, team: dict[str, User]) -> None:
    await users.create(User(name="Spacey", role="  engineer ", external_id="42"))

    engineers = await users.find_by_role("Engineer")

    assert [u.id for u in engineers][:3] == [2, 7, 8]
    assert "Spacey" in [u.name for u in engineers]
    assert [u.name for u in await users.find_by_role("project manager")] == ["Paula PM"]


@pytest.mark.asyncio
async def test_find_by_external_id(users: UserRepository, team: dict[str, User]) -> None:
    user = await users.find_by_external_id("2000")
    assert user is not None and user.id == 2
    assert await users.find_by_external_id("nope") is None


@pytest.mark.asyncio
async def test_issue_update_and_missing_issue(issues: IssueRepository, team: dict[str, User]) -> None:
    due = datetime(2025, 6, 1, tzinfo=timezone.utc)
    issue = await issues.create(Issue(title="t", estimation=3, due_date=due, assignee=2))

    updated = await issues.update(issue.id, status=IssueStatus.COMPLETED, hours_worked=5)

    assert updated.status is IssueStatus.COMPLETED
    assert updated.hours_worked == 5
    assert updated.due_date == due
    with pytest.raises(NotFoundError):
        await issues.update(999, hours_worked=1)
    with pytest.raises(ValueError):
        await issues.update(issue.id, owner="me")


@pytest.mark.asyncio
async def test_alert_save_inserts_then_updates(alerts: AlertRepository) -> None:
    alert = await alerts.save(Alert(message="m", user_id="2", priority="HIGH"))
    assert alert.id is not None

    alert.status = AlertStatus.SENT
    await alerts.save(alert)

    assert await alerts.find_by_status(AlertStatus.PENDING) == []
    assert [a.id for a in await alerts.find_by_status(AlertStatus.SENT)] == [alert.id]
    assert [a.priority for a in await alerts.find_by_user_id("2")] == ["HIGH"]
    assert await alerts.delete(alert.id) is True
    assert await alerts.find_by_id(alert.id) is None
