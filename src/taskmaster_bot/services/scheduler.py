"""APScheduler-based service that fires the alert sweep on a fixed interval."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Callable, Coroutine, Optional

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from taskmaster_bot.config import AlertsConfig
from taskmaster_bot.log import get_logger
from taskmaster_bot.services.base import Service

logger = get_logger(__name__)

ALERT_SWEEP_JOB_ID = "alert_sweep"


class SchedulerService(Service):
    """Background interval scheduler using APScheduler."""

    def __init__(self, config: AlertsConfig):
        self._config = config
        self._scheduler = AsyncIOScheduler(timezone=config.timezone)

    @property
    def service_name(self) -> str:
        return "scheduler"

    async def start(self) -> None:
        self._scheduler.start()
        logger.info("scheduler_started", timezone=self._config.timezone)

    async def stop(self) -> None:
        if self._scheduler.running:
            self._scheduler.shutdown(wait=False)
        logger.info("scheduler_stopped")

    async def health_check(self) -> bool:
        return self._scheduler.running

    def add_interval_job(
        self,
        callback: Callable[..., Coroutine[Any, Any, Any]],
        seconds: int,
        job_id: str,
        run_now: bool = False,
        **kwargs: Any,
    ) -> str:
        """Add a recurring job that never overlaps with itself.

        Missed runs are coalesced into one; with ``run_now`` the first run
        happens immediately instead of after one interval.
        """
        trigger = IntervalTrigger(seconds=seconds, timezone=self._config.timezone)
        options: dict[str, Any] = {}
        if run_now:
            options["next_run_time"] = datetime.now(trigger.timezone)
        self._scheduler.add_job(
            callback,
            trigger,
            id=job_id,
            kwargs=kwargs,
            max_instances=1,
            coalesce=True,
            replace_existing=True,
            **options,
        )
        logger.info("interval_job_added", job_id=job_id, seconds=seconds, run_now=run_now)
        return job_id

    def schedule_alert_sweep(self, sweep: Callable[[], Coroutine[Any, Any, Any]]) -> str:
        return self.add_interval_job(
            sweep,
            seconds=self._config.interval_seconds,
            job_id=ALERT_SWEEP_JOB_ID,
            run_now=self._config.run_on_startup,
        )

    def next_run_time(self, job_id: str) -> Optional[datetime]:
        job = self._scheduler.get_job(job_id)
        return job.next_run_time if job else None
