"""Alert dispatcher: periodic scan-and-deliver of pending alerts."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

from taskmaster_bot.core.errors import NotFoundError, TransportError
from taskmaster_bot.core.types import AlertStatus
from taskmaster_bot.log import get_logger
from taskmaster_bot.messenger.base import MessageSender
from taskmaster_bot.messenger.models import OutgoingMessage
from taskmaster_bot.storage.alert_repo import AlertRepository
from taskmaster_bot.storage.models import Alert
from taskmaster_bot.storage.user_repo import UserRepository

logger = get_logger(__name__)

# Largest value an SQLite INTEGER column holds.
MAX_USER_ID = 2**63 - 1


@dataclass(frozen=True, slots=True)
class SweepResult:
    sent: int = 0
    failed: int = 0
    deferred: int = 0  # scheduled in the future
    skipped: bool = False  # another sweep was running


def render_alert(alert: Alert) -> str:
    scheduled = alert.scheduled_time.isoformat(sep=" ", timespec="minutes") if alert.scheduled_time else "-"
    return (
        "You have a new alert:\n\n"
        f"Task: {alert.task}\n"
        f"Description: {alert.message}\n"
        f"Priority: {alert.priority}\n"
        f"Scheduled for: {scheduled}"
    )


def _is_due(alert: Alert, now: datetime) -> bool:
    scheduled = alert.scheduled_time
    if scheduled is None:
        return True
    if scheduled.tzinfo is None:
        scheduled = scheduled.replace(tzinfo=timezone.utc)
    return scheduled <= now


class AlertDispatcher:
    """Delivers PENDING alerts and marks them SENT once delivery succeeds.

    Each sweep re-reads the PENDING set, so an alert marked SENT is never
    sent again. Failed alerts stay PENDING and are retried on the next sweep.
    """

    def __init__(self, alerts: AlertRepository, users: UserRepository, sender: MessageSender):
        self._alerts = alerts
        self._users = users
        self._sender = sender
        self._sweep_lock = asyncio.Lock()

    async def run_alert_sweep(self, now: Optional[datetime] = None) -> SweepResult:
        """Deliver every due PENDING alert. Concurrent calls are skipped."""
        if self._sweep_lock.locked():
            logger.warning("alert_sweep_skipped", reason="previous sweep still running")
            return SweepResult(skipped=True)

        async with self._sweep_lock:
            now = now or datetime.now(timezone.utc)
            pending = await self._alerts.find_by_status(AlertStatus.PENDING)
            sent = failed = deferred = 0

            for alert in pending:
                if not _is_due(alert, now):
                    deferred += 1
                    continue
                try:
                    delivered = await self.deliver(alert)
                except Exception:
                    logger.exception("alert_delivery_error", alert_id=alert.id, user_id=alert.user_id)
                    delivered = False
                if delivered:
                    sent += 1
                else:
                    failed += 1

            result = SweepResult(sent=sent, failed=failed, deferred=deferred)
            logger.info("alert_sweep_done", pending=len(pending), sent=sent, failed=failed, deferred=deferred)
            return result

    async def deliver(self, alert: Alert) -> bool:
        """Send one alert; on success mark it SENT and persist it.

        Returns False (alert left PENDING) when the target cannot be resolved
        or the transport fails.
        """
        try:
            address = await self._resolve_address(alert)
            await self._sender.send_message(OutgoingMessage(chat_id=address, text=render_alert(alert)))
        except NotFoundError as e:
            logger.warning("alert_target_unresolved", alert_id=alert.id, user_id=alert.user_id, error=str(e))
            return False
        except TransportError as e:
            logger.error("alert_delivery_failed", alert_id=alert.id, user_id=alert.user_id, error=str(e))
            return False

        alert.status = AlertStatus.SENT
        await self._alerts.save(alert)
        logger.info("alert_sent", alert_id=alert.id, user_id=alert.user_id)
        return True

    async def _resolve_address(self, alert: Alert) -> str:
        if alert.user_id is None or not str(alert.user_id).strip():
            raise NotFoundError("Alert has no target user")
        try:
            user_id = int(str(alert.user_id).strip())
        except ValueError as e:
            raise NotFoundError(f"Malformed target user id: {alert.user_id!r}") from e
        if not 0 < user_id <= MAX_USER_ID:
            raise NotFoundError(f"Target user id out of range: {alert.user_id!r}")

        user = await self._users.find_by_id(user_id)
        if user is None:
            raise NotFoundError(f"No user with id {user_id}")
        if not user.external_id:
            raise NotFoundError(f"User {user_id} has no Telegram id configured")
        return user.external_id

    async def create_alert(
        self,
        message: str,
        user_id: str,
        task_id: Optional[int] = None,
        task: str = "",
        project_id: Optional[int] = None,
        priority: str = "MEDIUM",
        scheduled_time: Optional[datetime] = None,
    ) -> Alert:
        """Persist a new PENDING alert for the next sweep."""
        alert = Alert(
            message=message,
            user_id=str(user_id),
            task_id=task_id,
            task=task,
            project_id=project_id,
            priority=priority,
            scheduled_time=scheduled_time or datetime.now(timezone.utc),
            status=AlertStatus.PENDING,
        )
        alert = await self._alerts.save(alert)
        logger.info("alert_created", alert_id=alert.id, user_id=alert.user_id, priority=priority)
        return alert

    async def create_and_send_alert(
        self,
        message: str,
        user_id: str,
        task_id: Optional[int] = None,
        task: str = "",
        project_id: Optional[int] = None,
        priority: str = "MEDIUM",
    ) -> Alert:
        """Create an alert and deliver it immediately instead of waiting for a sweep.

        If delivery fails the alert stays PENDING and the next sweep retries it.
        """
        alert = await self.create_alert(
            message,
            user_id,
            task_id=task_id,
            task=task,
            project_id=project_id,
            priority=priority,
        )
        async with self._sweep_lock:
            await self.deliver(alert)
        return alert
