"""Issue persistence."""

from __future__ import annotations

from typing import Any, Optional

from taskmaster_bot.core.errors import NotFoundError
from taskmaster_bot.core.types import IssueStatus
from taskmaster_bot.log import get_logger
from taskmaster_bot.storage.database import Database, from_db_time, to_db_time
from taskmaster_bot.storage.models import Issue

logger = get_logger(__name__)

_UPDATABLE = frozenset({
    "title", "description", "estimation", "due_date",
    "assignee", "status", "hours_worked", "sprint_id",
})


class IssueRepository:
    """CRUD over the issues table."""

    def __init__(self, db: Database):
        self._db = db

    async def create(self, issue: Issue) -> Issue:
        """Insert ``issue`` and return it with its new id."""
        cursor = await self._db.conn.execute(
            """INSERT INTO issues
               (title, description, estimation, due_date, assignee,
                status, hours_worked, sprint_id)
               VALUES (?, ?, ?, ?, ?, ?, ?, ?)""",
            (
                issue.title,
                issue.description,
                issue.estimation,
                to_db_time(issue.due_date),
                issue.assignee,
                int(issue.status),
                issue.hours_worked,
                issue.sprint_id,
            ),
        )
        await self._db.conn.commit()
        issue.id = cursor.lastrowid
        logger.info("issue_created", issue_id=issue.id, assignee=issue.assignee)
        return issue

    async def find_by_id(self, issue_id: int) -> Optional[Issue]:
        cursor = await self._db.conn.execute("SELECT * FROM issues WHERE id = ?", (issue_id,))
        row = await cursor.fetchone()
        return self._row_to_issue(row) if row else None

    async def find_by_assignee(self, user_id: int) -> list[Issue]:
        cursor = await self._db.conn.execute(
            "SELECT * FROM issues WHERE assignee = ? ORDER BY id", (user_id,)
        )
        rows = await cursor.fetchall()
        return [self._row_to_issue(row) for row in rows]

    async def update(self, issue_id: int, **fields: Any) -> Issue:
        """Update the given columns and return the stored issue.

        Raises NotFoundError if no issue has ``issue_id``.
        """
        unknown = set(fields) - _UPDATABLE
        if unknown:
            raise ValueError(f"Unknown issue fields: {', '.join(sorted(unknown))}")

        if fields:
            values = []
            for name, value in fields.items():
                if name == "due_date":
                    value = to_db_time(value)
                elif name == "status":
                    value = int(value)
                values.append(value)
            assignments = ", ".join(f"{name} = ?" for name in fields)
            cursor = await self._db.conn.execute(
                f"UPDATE issues SET {assignments}, "
                "updated_at = strftime('%Y-%m-%dT%H:%M:%f','now') WHERE id = ?",
                (*values, issue_id),
            )
            await self._db.conn.commit()
            if cursor.rowcount == 0:
                raise NotFoundError(f"Issue {issue_id} not found.")

        issue = await self.find_by_id(issue_id)
        if issue is None:
            raise NotFoundError(f"Issue {issue_id} not found.")
        logger.info("issue_updated", issue_id=issue_id, fields=sorted(fields))
        return issue

    @staticmethod
    def _row_to_issue(row) -> Issue:
        return Issue(
            id=row["id"],
            title=row["title"],
            description=row["description"],
            estimation=row["estimation"],
            due_date=from_db_time(row["due_date"]),
            assignee=row["assignee"],
            status=IssueStatus(row["status"]),
            hours_worked=row["hours_worked"] or 0,
            sprint_id=row["sprint_id"],
        )
