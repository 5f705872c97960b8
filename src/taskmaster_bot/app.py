"""Application orchestrator - wires all components and manages lifecycle."""

from __future__ import annotations

from taskmaster_bot.bot.engine import ConversationEngine
from taskmaster_bot.config import AppConfig, BotConfig
from taskmaster_bot.core.session import SessionStore
from taskmaster_bot.log import get_logger
from taskmaster_bot.messenger.base import MessengerAdapter
from taskmaster_bot.services.alerts import AlertDispatcher
from taskmaster_bot.services.service_manager import ServiceManager
from taskmaster_bot.storage.alert_repo import AlertRepository
from taskmaster_bot.storage.database import Database
from taskmaster_bot.storage.issue_repo import IssueRepository
from taskmaster_bot.storage.user_repo import UserRepository

logger = get_logger(__name__)


class TaskBotApp:
    """Top-level application orchestrator."""

    def __init__(self, config: AppConfig, adapter: MessengerAdapter | None = None):
        self.config = config
        self.db = Database(config.storage.db_path)
        self.users = UserRepository(self.db)
        self.issues = IssueRepository(self.db)
        self.alerts = AlertRepository(self.db)
        self.sessions = SessionStore()
        self.adapter = adapter or self._create_adapter(config.bot)
        self.engine = ConversationEngine(
            sender=self.adapter,
            sessions=self.sessions,
            users=self.users,
            issues=self.issues,
            roles=config.roles,
        )
        self.dispatcher = AlertDispatcher(self.alerts, self.users, self.adapter)
        self.service_manager = ServiceManager(config.alerts, self.dispatcher)

    async def start(self) -> None:
        """Initialize and start all components."""
        # 1. Database
        await self.db.initialize()

        # 2. Bot adapter; the sweep sends through it, so it starts first
        self.adapter.on_message(self.engine.handle)
        await self.adapter.start()

        # 3. Alert scheduler
        await self.service_manager.start_all()

        logger.info(
            "taskmaster_bot_started",
            bot_id=self.config.bot.id,
            platform=self.config.bot.platform,
            alert_interval=self.config.alerts.interval_seconds,
            next_alert_sweep=str(self.service_manager.next_alert_sweep()),
            services=await self.service_manager.health_check_all(),
        )

    async def stop(self) -> None:
        """Gracefully shut down all components."""
        await self.service_manager.stop_all()
        try:
            await self.adapter.stop()
        except Exception as e:
            logger.error("bot_stop_error", error=str(e))
        await self.db.close()
        logger.info("taskmaster_bot_stopped")

    @staticmethod
    def _create_adapter(cfg: BotConfig) -> MessengerAdapter:
        match cfg.platform:
            case "telegram":
                from taskmaster_bot.messenger.telegram import TelegramAdapter

                return TelegramAdapter(cfg.id, cfg.model_dump())
            case _:
                raise ValueError(f"Unknown platform: {cfg.platform}")
