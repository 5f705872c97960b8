# tests/test_services.py

from __future__ import annotations

import pytest

from taskmaster_bot.config import AlertsConfig
from taskmaster_bot.services.alerts import AlertDispatcher
from taskmaster_bot.services.service_manager import ServiceManager


@pytest.mark.asyncio
async def test_service_manager_schedules_alert_sweep(dispatcher: AlertDispatcher) -> None:
    manager = ServiceManager(AlertsConfig(interval_seconds=120, run_on_startup=False), dispatcher)
    assert manager.next_alert_sweep() is None

    await manager.start_all()
    try:
        assert await manager.health_check_all() == {"scheduler": True}
        assert manager.next_alert_sweep() is not None
    finally:
        await manager.stop_all()

    assert await manager.health_check_all() == {"scheduler": False}
