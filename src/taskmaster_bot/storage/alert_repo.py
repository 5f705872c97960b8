"""Alert persistence."""

from __future__ import annotations

from typing import Optional

from taskmaster_bot.core.types import AlertStatus
from taskmaster_bot.log import get_logger
from taskmaster_bot.storage.database import Database, from_db_time, to_db_time
from taskmaster_bot.storage.models import Alert

logger = get_logger(__name__)


class AlertRepository:
    """CRUD over the alerts table."""

    def __init__(self, db: Database):
        self._db = db

    async def save(self, alert: Alert) -> Alert:
        """Insert a new alert or update an existing one (by id)."""
        params = (
            alert.message,
            alert.task_id,
            alert.task,
            alert.project_id,
            alert.user_id,
            alert.priority,
            to_db_time(alert.scheduled_time),
            alert.status.value,
        )
        if alert.id is None:
            cursor = await self._db.conn.execute(
                """INSERT INTO alerts
                   (message, task_id, task, project_id, user_id, priority,
                    scheduled_time, status)
                   VALUES (?, ?, ?, ?, ?, ?, ?, ?)""",
                params,
            )
            alert.id = cursor.lastrowid
        else:
            await self._db.conn.execute(
                """UPDATE alerts SET
                   message = ?, task_id = ?, task = ?, project_id = ?, user_id = ?,
                   priority = ?, scheduled_time = ?, status = ?
                   WHERE id = ?""",
                (*params, alert.id),
            )
        await self._db.conn.commit()
        return alert

    async def find_by_id(self, alert_id: int) -> Optional[Alert]:
        cursor = await self._db.conn.execute("SELECT * FROM alerts WHERE id = ?", (alert_id,))
        row = await cursor.fetchone()
        return self._row_to_alert(row) if row else None

    async def find_by_status(self, status: AlertStatus) -> list[Alert]:
        cursor = await self._db.conn.execute(
            "SELECT * FROM alerts WHERE status = ? ORDER BY scheduled_time, id",
            (AlertStatus(status).value,),
        )
        rows = await cursor.fetchall()
        return [self._row_to_alert(row) for row in rows]

    async def find_by_user_id(self, user_id: str) -> list[Alert]:
        cursor = await self._db.conn.execute(
            "SELECT * FROM alerts WHERE user_id = ? ORDER BY scheduled_time, id",
            (str(user_id),),
        )
        rows = await cursor.fetchall()
        return [self._row_to_alert(row) for row in rows]

    async def delete(self, alert_id: int) -> bool:
        cursor = await self._db.conn.execute("DELETE FROM alerts WHERE id = ?", (alert_id,))
        await self._db.conn.commit()
        return cursor.rowcount > 0

    @staticmethod
    def _row_to_alert(row) -> Alert:
        return Alert(
            id=row["id"],
            message=row["message"],
            task_id=row["task_id"],
            task=row["task"],
            project_id=row["project_id"],
            user_id=row["user_id"],
            priority=row["priority"],
            scheduled_time=from_db_time(row["scheduled_time"]),
            status=AlertStatus(row["status"]),
        )
