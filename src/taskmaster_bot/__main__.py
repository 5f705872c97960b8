"""CLI entry point for taskmaster-bot."""

from __future__ import annotations

import argparse
import asyncio
import signal
import sys
from datetime import datetime, timezone

from taskmaster_bot.app import TaskBotApp
from taskmaster_bot.config import AppConfig, load_config
from taskmaster_bot.log import setup_logging
from taskmaster_bot.storage.models import User


def _add_config_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("-c", "--config", default="config.yaml", help="Path to config file")
    parser.add_argument("-e", "--env", default=".env", help="Path to .env file")


def main() -> None:
    parser = argparse.ArgumentParser(
        prog="taskmaster-bot",
        description="Telegram task-tracking bot with scheduled alert delivery",
    )
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    _add_config_args(subparsers.add_parser("start", help="Start the bot and the alert scheduler"))
    _add_config_args(subparsers.add_parser("config-check", help="Validate configuration"))
    _add_config_args(subparsers.add_parser("send-alerts", help="Run one alert sweep and exit"))

    user_parser = subparsers.add_parser("user-add", help="Register a user")
    _add_config_args(user_parser)
    user_parser.add_argument("--name", required=True)
    user_parser.add_argument("--role", required=True, help='e.g. "Project Manager" or "Engineer"')
    user_parser.add_argument("--telegram-id", default=None, help="Telegram user/chat id")

    alert_parser = subparsers.add_parser("alert-add", help="Create a pending alert")
    _add_config_args(alert_parser)
    alert_parser.add_argument("--user-id", required=True, help="Target user id")
    alert_parser.add_argument("--message", required=True)
    alert_parser.add_argument("--task", default="")
    alert_parser.add_argument("--task-id", type=int, default=None)
    alert_parser.add_argument("--project-id", type=int, default=None)
    alert_parser.add_argument("--priority", default="MEDIUM")
    alert_parser.add_argument(
        "--at", default=None, help="Scheduled time, ISO-8601 (default: now)"
    )

    args = parser.parse_args()

    if args.command is None:
        # Default to start
        args.command = "start"
        args.config = "config.yaml"
        args.env = ".env"

    if args.command == "config-check":
        _check_config(args.config, args.env)
        return

    config = _load_or_exit(args.config, args.env)
    setup_logging(config.log_level, config.json_logs)

    if args.command == "start":
        asyncio.run(_run(config))
    elif args.command == "send-alerts":
        asyncio.run(_send_alerts(config))
    elif args.command == "user-add":
        asyncio.run(_user_add(config, args.name, args.role, args.telegram_id))
    elif args.command == "alert-add":
        asyncio.run(_alert_add(config, args))


def _load_or_exit(config_path: str, env_path: str) -> AppConfig:
    try:
        return load_config(config_path, env_path)
    except FileNotFoundError as e:
        print(f"Error: {e}", file=sys.stderr)
        print("Copy config.example.yaml to config.yaml and .env.example to .env first")
        sys.exit(1)
    except Exception as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        sys.exit(1)


def _check_config(config_path: str, env_path: str) -> None:
    """Validate configuration and print summary."""
    config = _load_or_exit(config_path, env_path)
    print(f"Configuration valid: {config_path}")
    print(f"  Data directory: {config.data_dir}")
    print(f"  Bot: {config.bot.id} ({config.bot.platform})")
    print(f"  Roles: manager={config.roles.manager!r}, engineer={config.roles.engineer!r}")
    print(
        f"  Alerts: every {config.alerts.interval_seconds}s "
        f"({config.alerts.timezone}, run_on_startup={config.alerts.run_on_startup})"
    )
    print(f"  Storage: {config.storage.db_path}")


async def _run(config: AppConfig) -> None:
    loop = asyncio.get_running_loop()
    stop_event = asyncio.Event()

    def _signal_handler() -> None:
        stop_event.set()

    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, _signal_handler)
        except NotImplementedError:
            # Windows doesn't support add_signal_handler
            signal.signal(sig, lambda s, f: _signal_handler())

    app = TaskBotApp(config)
    await app.start()
    try:
        await stop_event.wait()
    finally:
        await app.stop()


async def _send_alerts(config: AppConfig) -> None:
    app = TaskBotApp(config)
    await app.db.initialize()
    await app.adapter.connect()
    try:
        result = await app.dispatcher.run_alert_sweep()
        print(f"Alerts sent: {result.sent}, failed: {result.failed}, not yet due: {result.deferred}")
    finally:
        await app.adapter.stop()
        await app.db.close()


async def _user_add(config: AppConfig, name: str, role: str, telegram_id: str | None) -> None:
    app = TaskBotApp(config)
    await app.db.initialize()
    try:
        user = await app.users.create(User(name=name, role=role, external_id=telegram_id))
        print(f"User created: id={user.id} name={user.name} role={user.role}")
    finally:
        await app.db.close()


async def _alert_add(config: AppConfig, args: argparse.Namespace) -> None:
    scheduled = datetime.fromisoformat(args.at) if args.at else datetime.now(timezone.utc)
    app = TaskBotApp(config)
    await app.db.initialize()
    try:
        alert = await app.dispatcher.create_alert(
            args.message,
            args.user_id,
            task_id=args.task_id,
            task=args.task,
            project_id=args.project_id,
            priority=args.priority,
            scheduled_time=scheduled,
        )
        print(f"Alert created: id={alert.id} status={alert.status.value}")
    finally:
        await app.db.close()


if __name__ == "__main__":
    main()
