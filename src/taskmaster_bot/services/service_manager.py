"""Service lifecycle manager."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from taskmaster_bot.config import AlertsConfig
from taskmaster_bot.log import get_logger
from taskmaster_bot.services.alerts import AlertDispatcher
from taskmaster_bot.services.scheduler import ALERT_SWEEP_JOB_ID, SchedulerService

logger = get_logger(__name__)


class ServiceManager:
    """Starts the scheduler and registers the alert sweep on it."""

    def __init__(self, config: AlertsConfig, dispatcher: AlertDispatcher):
        self._dispatcher = dispatcher
        self._scheduler = SchedulerService(config)

    async def start_all(self) -> None:
        await self._scheduler.start()
        self._scheduler.schedule_alert_sweep(self._dispatcher.run_alert_sweep)
        logger.info("all_services_started")

    async def stop_all(self) -> None:
        await self._scheduler.stop()
        logger.info("all_services_stopped")

    async def health_check_all(self) -> dict[str, bool]:
        return {"scheduler": await self._scheduler.health_check()}

    def next_alert_sweep(self) -> Optional[datetime]:
        return self._scheduler.next_run_time(ALERT_SWEEP_JOB_ID)
