"""Structured logging setup using structlog."""

from __future__ import annotations

import logging
import sys
from contextlib import contextmanager
from typing import Iterator

import structlog

# Third-party loggers that go through the stdlib and are noisy at INFO.
_QUIET_LOGGERS = ("httpx", "apscheduler.executors.default", "telegram.ext.Updater")


def setup_logging(level: str = "INFO", json_logs: bool = False) -> None:
    """Configure structlog for the bot and route stdlib loggers to stderr.

    ``json_logs`` swaps the console renderer for one JSON object per line.
    """
    log_level = getattr(logging, level.upper(), logging.INFO)

    renderer: structlog.typing.Processor = (
        structlog.processors.JSONRenderer() if json_logs else structlog.dev.ConsoleRenderer()
    )

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.dev.set_exc_info,
            structlog.processors.TimeStamper(fmt="iso"),
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )

    # python-telegram-bot and APScheduler log through the stdlib.
    logging.basicConfig(level=log_level, stream=sys.stderr, format="%(levelname)s %(name)s: %(message)s")
    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(log_level, logging.WARNING))


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Get a named logger instance."""
    return structlog.get_logger(name)


@contextmanager
def bound_chat(chat_id: str, user_id: str | None = None) -> Iterator[None]:
    """Attach the chat (and user) id to every log line emitted inside the block."""
    with structlog.contextvars.bound_contextvars(chat_id=chat_id, user_id=user_id):
        yield
